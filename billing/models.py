from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models

from core.constants import PaymentMethod, MONTH_NAMES
from . import calculations

money = dict(max_digits=12, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(0)])
MONTH_CHOICES = [(i, name) for i, name in enumerate(MONTH_NAMES, start=1)]


class MonthlyRecord(models.Model):
    """
    One tenant's bill for one month: the charges, what has been applied to
    each of them, and any advance credit brought in from earlier months.
    """
    tenant = models.ForeignKey('tenants.Tenant', on_delete=models.CASCADE, related_name='monthly_records')
    month = models.PositiveSmallIntegerField(choices=MONTH_CHOICES)
    year = models.PositiveSmallIntegerField()

    monthly_rent = models.DecimalField(**money)
    water_bill = models.DecimalField(**money)
    garbage_bill = models.DecimalField(**money)
    penalties = models.DecimalField(**money)

    rent_paid = models.DecimalField(**money)
    water_paid = models.DecimalField(**money)
    garbage_paid = models.DecimalField(**money)
    penalties_paid = models.DecimalField(**money)
    deposit_paid = models.DecimalField(**money)

    # Credit brought in when the record was opened (kept for history)
    carried_forward = models.DecimalField(**money)
    # Part of that credit not yet applied to this month's charges
    advance_balance = models.DecimalField(**money)
    balance_due = models.DecimalField(**money)

    created_at = models.DateTimeField(auto_now_add=True)
    last_updated = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-year', '-month']
        verbose_name = "Monthly Record"
        verbose_name_plural = "Monthly Records"
        constraints = [
            models.UniqueConstraint(fields=['tenant', 'year', 'month'], name='unique_tenant_month'),
        ]
        indexes = [
            models.Index(fields=['year', 'month']),
        ]

    def __str__(self):
        return f"{self.tenant.name} - {self.month_name} {self.year}"

    def save(self, *args, **kwargs):
        """Keep balance_due in step with charges and applied payments"""
        self.balance_due = calculations.balance_due(self.total_due, self.total_applied)
        super().save(*args, **kwargs)

    @property
    def month_name(self):
        return MONTH_NAMES[self.month - 1]

    @property
    def month_key(self):
        return f"{self.year}-{self.month:02d}"

    @property
    def charges(self):
        return {
            'rent': self.monthly_rent,
            'water': self.water_bill,
            'garbage': self.garbage_bill,
            'penalties': self.penalties,
        }

    @property
    def paid(self):
        return {
            'rent': self.rent_paid,
            'water': self.water_paid,
            'garbage': self.garbage_paid,
            'penalties': self.penalties_paid,
        }

    @property
    def total_due(self):
        return calculations.total_due(self.monthly_rent, self.water_bill, self.garbage_bill, self.penalties)

    @property
    def total_applied(self):
        return self.rent_paid + self.water_paid + self.garbage_paid + self.penalties_paid

    @property
    def effective_balance(self):
        return calculations.effective_balance(self.total_due, self.advance_balance, self.balance_due)

    def add_applied(self, allocation):
        """Add an AllocationDTO (or dict with the same keys) to the paid amounts"""
        get = allocation.get if isinstance(allocation, dict) else lambda k: getattr(allocation, k)
        self.rent_paid += get('rent')
        self.water_paid += get('water')
        self.garbage_paid += get('garbage')
        self.penalties_paid += get('penalties')


class Transaction(models.Model):
    """
    A payment captured against a tenant's month. The entered amounts are kept
    as typed; the applied_* fields hold how they were actually allocated.
    """
    tenant = models.ForeignKey('tenants.Tenant', on_delete=models.CASCADE, related_name='transactions')
    record = models.ForeignKey(
        MonthlyRecord, on_delete=models.SET_NULL, null=True, blank=True, related_name='transactions'
    )

    rent = models.DecimalField(**money)
    water = models.DecimalField(**money)
    garbage = models.DecimalField(**money)
    penalty = models.DecimalField(**money)
    deposit = models.DecimalField(**money)
    total_amount = models.DecimalField(**money, help_text="rent + water + garbage + penalty")
    water_bill = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True,
        help_text="Water bill set for the month with this payment"
    )

    applied_rent = models.DecimalField(**money)
    applied_water = models.DecimalField(**money)
    applied_garbage = models.DecimalField(**money)
    applied_penalties = models.DecimalField(**money)
    credit = models.DecimalField(**money, help_text="Overpayment added to tenant credit")

    method = models.CharField(max_length=10, choices=PaymentMethod.CHOICES, default=PaymentMethod.MPESA)
    reference = models.CharField(max_length=100, blank=True, db_index=True)
    date = models.DateField()
    month = models.PositiveSmallIntegerField(choices=MONTH_CHOICES)
    year = models.PositiveSmallIntegerField()
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='transactions'
    )
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-date', '-timestamp']
        indexes = [
            models.Index(fields=['year', 'month']),
            models.Index(fields=['tenant', 'year', 'month']),
        ]

    def __str__(self):
        return f"{self.tenant.name} - {self.total_amount} ({self.get_method_display()}) {self.date}"

    @property
    def month_name(self):
        return MONTH_NAMES[self.month - 1]


class Penalty(models.Model):
    """Late payment penalty for a building, as a percentage of unpaid rent"""
    building = models.OneToOneField('buildings.Building', on_delete=models.CASCADE, related_name='penalty')
    percentage = models.DecimalField(
        max_digits=5, decimal_places=2,
        validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['building__name']
        verbose_name_plural = "Penalties"

    def __str__(self):
        return f"{self.building.name}: {self.percentage}%"
