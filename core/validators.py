"""
Validation utilities and validators.
"""
import re
from decimal import Decimal, InvalidOperation
from django.utils import timezone
from core.constants import MONTH_NAMES
from core.exceptions import ValidationError as AppValidationError

MOBILE_PATTERN = re.compile(r'^\+?[0-9]{10,15}$')
SMS_PHONE_PATTERN = re.compile(r'^(\+254|254|0)?[17]\d{8}$')


class PeriodValidator:
    """Parses and validates billing periods (month/year)"""

    @staticmethod
    def parse_month(value):
        """
        Accepts a month number (1-12, int or string) or an English month
        name ("March", "mar") and returns the month number.
        """
        if value is None or value == '':
            raise AppValidationError(message="Month is required", code="INVALID_MONTH")
        if isinstance(value, int) or str(value).strip().isdigit():
            month = int(value)
        else:
            name = str(value).strip().lower()
            matches = [i for i, m in enumerate(MONTH_NAMES, start=1)
                       if m.lower() == name or m.lower()[:3] == name]
            if not matches:
                raise AppValidationError(message=f"Invalid month: {value}", code="INVALID_MONTH")
            month = matches[0]
        if not 1 <= month <= 12:
            raise AppValidationError(message=f"Invalid month: {value}", code="INVALID_MONTH")
        return month

    @staticmethod
    def parse_year(value):
        try:
            year = int(value)
        except (TypeError, ValueError):
            raise AppValidationError(message=f"Invalid year: {value}", code="INVALID_YEAR")
        if not 2000 <= year <= 2100:
            raise AppValidationError(message=f"Invalid year: {value}", code="INVALID_YEAR")
        return year

    @classmethod
    def parse_period(cls, month=None, year=None):
        """Returns (month, year), defaulting missing parts to the current period"""
        today = timezone.localdate()
        month = cls.parse_month(month) if month not in (None, '') else today.month
        year = cls.parse_year(year) if year not in (None, '') else today.year
        return month, year


class MoneyValidator:
    """Validates money amounts"""

    @staticmethod
    def parse_amount(value, field='amount'):
        """Convert to a non-negative Decimal with two places"""
        if value in (None, ''):
            return Decimal('0.00')
        try:
            amount = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise AppValidationError(
                message=f"{field} must be a number",
                code="INVALID_AMOUNT",
                details={'field': field}
            )
        if amount < 0:
            raise AppValidationError(
                message=f"{field} cannot be negative",
                code="INVALID_AMOUNT",
                details={'field': field}
            )
        if amount > Decimal('9999999999.99'):
            raise AppValidationError(
                message=f"{field} exceeds maximum allowed",
                code="AMOUNT_TOO_LARGE",
                details={'field': field}
            )
        return amount.quantize(Decimal('0.01'))


class PhoneValidator:

    @staticmethod
    def validate_mobile(value):
        if not MOBILE_PATTERN.match(value or ''):
            raise AppValidationError(
                message="Mobile number must be 10-15 digits, optionally starting with +",
                code="INVALID_MOBILE"
            )
        return value

    @staticmethod
    def validate_sms_phone(value):
        """Kenyan mobile numbers in local or international form"""
        value = (value or '').replace(' ', '')
        if not SMS_PHONE_PATTERN.match(value):
            raise AppValidationError(
                message="Enter a valid Kenyan phone number",
                code="INVALID_PHONE"
            )
        return value

    @staticmethod
    def to_international(value):
        """0712345678 / 712345678 / 254712345678 -> +254712345678"""
        value = PhoneValidator.validate_sms_phone(value)
        if value.startswith('+254'):
            return value
        if value.startswith('254'):
            return '+' + value
        if value.startswith('0'):
            return '+254' + value[1:]
        return '+254' + value
