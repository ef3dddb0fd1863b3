from decimal import Decimal
from django.db import models
from django.core.validators import MinValueValidator, MinLengthValidator, RegexValidator

from core.constants import TenantStatus, DefaultLimits

mobile_validator = RegexValidator(r'^\+?[0-9]{10,15}$', "Mobile number must be 10-15 digits, optionally starting with +")
money = dict(max_digits=12, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(0)])


class TenantQuerySet(models.QuerySet):

    def active(self):
        return self.filter(status=TenantStatus.ACTIVE)

    def billable_in(self, month, year):
        """Tenants who lived in the property during the given month"""
        from datetime import date
        from calendar import monthrange
        start = date(year, month, 1)
        end = date(year, month, monthrange(year, month)[1])
        return self.filter(entry_date__lte=end).filter(
            models.Q(status=TenantStatus.ACTIVE) |
            models.Q(leaving_date__isnull=False, leaving_date__gte=start)
        )


class Tenant(models.Model):
    """Occupant of a unit, with the amounts billed to them every month"""
    name = models.CharField(max_length=100, validators=[MinLengthValidator(2)])
    mobile = models.CharField(max_length=16, validators=[mobile_validator])
    email = models.EmailField(blank=True)
    next_of_kin_name = models.CharField(max_length=100, blank=True)
    next_of_kin_mobile = models.CharField(max_length=16, blank=True)

    building = models.ForeignKey('buildings.Building', on_delete=models.PROTECT, related_name='tenants')
    unit = models.ForeignKey(
        'buildings.Unit', on_delete=models.SET_NULL, null=True, blank=True, related_name='tenants'
    )
    house_number = models.CharField(max_length=20)
    house_size = models.CharField(max_length=100, blank=True, help_text="Unit type name, e.g. Bedsitter")
    area = models.CharField(max_length=100, blank=True)

    # Default monthly charges copied onto each new monthly record
    monthly_rent = models.DecimalField(**money)
    default_water_bill = models.DecimalField(**money)
    garbage_bill = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal(DefaultLimits.GARBAGE_BILL),
        validators=[MinValueValidator(0)]
    )

    deposit_required = models.DecimalField(**money)
    deposit_paid = models.DecimalField(**money)
    expenses = models.DecimalField(**money)
    # Overpayments not yet carried into a monthly record
    tenant_credit = models.DecimalField(**money)

    status = models.CharField(max_length=10, choices=TenantStatus.CHOICES, default=TenantStatus.ACTIVE)
    entry_date = models.DateField()
    leaving_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantQuerySet.as_manager()

    class Meta:
        ordering = ['building__name', 'house_number']
        verbose_name = "Tenant"
        verbose_name_plural = "Tenants"
        indexes = [
            models.Index(fields=['building', 'status']),
            models.Index(fields=['mobile']),
        ]

    def __str__(self):
        return f"{self.name} ({self.house_number})"

    @property
    def is_active(self):
        return self.status == TenantStatus.ACTIVE

    @property
    def deposit_balance(self):
        return max(Decimal('0.00'), self.deposit_required - self.deposit_paid)
