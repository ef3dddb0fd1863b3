from decimal import Decimal
from django.db import models
from django.core.validators import (
    MinValueValidator, MaxValueValidator
)
from core.constants import Currency, DefaultLimits


class SiteSettings(models.Model):
    """
    Site-wide settings (singleton pattern - only one instance)
    """
    company_name = models.CharField(max_length=200, default="SmartRent Properties")
    company_email = models.EmailField(blank=True, default="")
    company_phone = models.CharField(max_length=20, blank=True, default="")
    company_address = models.TextField(blank=True, default="")

    # Features
    enable_sms_notifications = models.BooleanField(default=True)
    enable_email_notifications = models.BooleanField(default=True)

    # Billing
    auto_generate_records = models.BooleanField(default=True)
    rent_due_day = models.IntegerField(
        default=DefaultLimits.RENT_DUE_DAY,
        validators=[MinValueValidator(1), MaxValueValidator(28)]
    )
    default_garbage_bill = models.DecimalField(
        max_digits=12, decimal_places=2,
        default=Decimal(DefaultLimits.GARBAGE_BILL)
    )
    default_water_bill = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    # Currency
    currency_code = models.CharField(max_length=3, choices=Currency.CHOICES, default=Currency.KES)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Site Settings'
        verbose_name_plural = 'Site Settings'

    def save(self, *args, **kwargs):
        self.pk = 1
        if self._state.adding:
            # Saving a fresh instance overwrites row 1 in place
            created_at = SiteSettings.objects.filter(pk=1).values_list('created_at', flat=True).first()
            if created_at is not None:
                self.created_at = created_at
                self._state.adding = False
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        # Singleton row is never removed
        pass

    @classmethod
    def load(cls):
        """Get or create the singleton instance"""
        obj, _ = cls.objects.get_or_create(pk=1)
        return obj

    @property
    def currency_symbol(self):
        return 'KSh' if self.currency_code == Currency.KES else '$'

    def __str__(self):
        return self.company_name
