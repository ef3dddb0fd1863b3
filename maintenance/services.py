from django.db import transaction
from django.db.models import F

from audit.models import AuditLog
from core.constants import MaintenanceStatus
from core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from core.services import BaseService
from .models import MaintenanceRequest, MaintenanceExpense


class MaintenanceService(BaseService):

    def _lock(self, request_id):
        job = MaintenanceRequest.objects.select_for_update().filter(pk=request_id).first()
        if job is None:
            raise NotFoundError(resource_type='Maintenance request', resource_id=request_id)
        return job

    @transaction.atomic
    def change_status(self, request_id, status):
        """
        Move a request to a new status. Completed and cancelled requests
        are final.
        """
        if status not in dict(MaintenanceStatus.CHOICES):
            raise ValidationError(message=f"Invalid status: {status}", code="INVALID_STATUS")
        job = self._lock(request_id)
        if job.status == status:
            return job
        if not job.can_transition_to(status):
            raise InvalidTransitionError(
                message=f"Cannot change status from {job.get_status_display()} to "
                        f"{dict(MaintenanceStatus.CHOICES)[status]}",
                details={'from': job.status, 'to': status},
            )
        old_status = job.status
        job.status = status
        job.save()  # Auto-sets completed_at

        self.log_info("Maintenance status changed", request=job.id, old=old_status, new=status)
        self.audit(AuditLog.ACTION_STATUS, AuditLog.RESOURCE_MAINTENANCE, job.id,
                   f"{job.issue_title}: {old_status} -> {status}")
        return job

    @transaction.atomic
    def add_expense(self, request_id, data):
        """Record an expense and add it to the request's cost"""
        job = self._lock(request_id)
        if job.status == MaintenanceStatus.CANCELLED:
            raise InvalidTransitionError(
                message="Cannot add expenses to a cancelled request", code="REQUEST_CANCELLED"
            )
        expense = MaintenanceExpense.objects.create(request=job, **data)
        MaintenanceRequest.objects.filter(pk=job.pk).update(cost=F('cost') + expense.amount)
        job.refresh_from_db(fields=['cost'])

        self.log_info("Maintenance expense added", request=job.id, amount=str(expense.amount))
        self.audit(AuditLog.ACTION_UPDATE, AuditLog.RESOURCE_MAINTENANCE, job.id,
                   f"Expense {expense.amount} on {job.issue_title}: {expense.description}",
                   expense_id=expense.id)
        return expense, job.cost
