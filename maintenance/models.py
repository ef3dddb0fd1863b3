from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from core.constants import MaintenanceStatus, Priority, PaymentMethod


class MaintenanceRequest(models.Model):
    """Repair or maintenance job raised for a unit"""
    building = models.ForeignKey('buildings.Building', on_delete=models.CASCADE, related_name='maintenance_requests')
    unit = models.ForeignKey(
        'buildings.Unit', on_delete=models.SET_NULL, null=True, blank=True, related_name='maintenance_requests'
    )
    tenant = models.ForeignKey(
        'tenants.Tenant', on_delete=models.SET_NULL, null=True, blank=True, related_name='maintenance_requests'
    )
    issue_title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    priority = models.CharField(max_length=10, choices=Priority.CHOICES, default=Priority.MEDIUM)
    status = models.CharField(max_length=20, choices=MaintenanceStatus.CHOICES, default=MaintenanceStatus.PENDING)
    cost = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(0)],
        help_text="Sum of the recorded expenses"
    )
    assigned_to = models.CharField(max_length=255, blank=True,
                                   help_text="e.g., 'Plumber', 'Electrician', 'Caretaker'")
    date = models.DateField(default=timezone.localdate)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='maintenance_requests'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-date', '-created_at']
        verbose_name = "Maintenance Request"
        verbose_name_plural = "Maintenance Requests"
        indexes = [
            models.Index(fields=['building', 'status']),
            models.Index(fields=['status', 'priority']),
            models.Index(fields=['date']),
        ]

    def __str__(self):
        return f"{self.building.name} - {self.issue_title} ({self.get_status_display()})"

    def save(self, *args, **kwargs):
        """Auto-set completed_at when status changes to completed"""
        if self.status == MaintenanceStatus.COMPLETED and not self.completed_at:
            self.completed_at = timezone.now()
        elif self.status != MaintenanceStatus.COMPLETED:
            self.completed_at = None
        super().save(*args, **kwargs)

    def can_transition_to(self, status):
        return status in MaintenanceStatus.TRANSITIONS.get(self.status, set())


class MaintenanceExpense(models.Model):
    """Money spent on a maintenance request"""
    request = models.ForeignKey(MaintenanceRequest, on_delete=models.CASCADE, related_name='expenses')
    description = models.CharField(max_length=255)
    amount = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))])
    category = models.CharField(max_length=50, blank=True)
    paid_by = models.CharField(max_length=255, blank=True)
    payment_method = models.CharField(max_length=10, choices=PaymentMethod.CHOICES, blank=True)
    receipt_number = models.CharField(max_length=100, blank=True)
    date = models.DateField(default=timezone.localdate)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-date', '-created_at']

    def __str__(self):
        return f"{self.request.issue_title}: {self.amount}"
