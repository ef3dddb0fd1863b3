"""
Tenant lifecycle: move-in, updates and move-out, keeping the building's
unit occupancy and the current monthly bill in step.
"""
from django.db import transaction
from django.utils import timezone

from audit.models import AuditLog
from billing.services import BillingService
from buildings.models import Unit
from core.constants import TenantStatus
from core.exceptions import NotFoundError
from core.services import BaseService
from .models import Tenant


class TenantService(BaseService):

    def _release_unit(self, unit_id, tenant_id):
        if not unit_id:
            return
        still_used = Tenant.objects.active().filter(unit_id=unit_id).exclude(pk=tenant_id).exists()
        if not still_used:
            Unit.objects.filter(pk=unit_id).update(is_occupied=False)

    def _assign_unit(self, tenant, unit_type=None):
        """Link the tenant to the unit matching its house number, creating it if needed"""
        previous = tenant.unit_id
        if tenant.status != TenantStatus.ACTIVE:
            tenant.unit = None
        else:
            unit = Unit.objects.filter(
                building=tenant.building, unit_number__iexact=tenant.house_number
            ).first()
            if unit is None:
                unit = Unit.objects.create(
                    building=tenant.building, unit_number=tenant.house_number, unit_type=unit_type
                )
            elif unit_type and unit.unit_type_id != unit_type.id:
                unit.unit_type = unit_type
            unit.is_occupied = True
            unit.save()
            tenant.unit = unit
        tenant.save(update_fields=['unit', 'updated_at'])
        if previous and previous != tenant.unit_id:
            self._release_unit(previous, tenant.id)

    @transaction.atomic
    def create_tenant(self, data):
        unit_type = data.pop('unit_type', None)
        data.setdefault('entry_date', timezone.localdate())
        tenant = Tenant.objects.create(**data)
        self._assign_unit(tenant, unit_type)

        BillingService(user=self.user, request=self.request).ensure_record(
            tenant, tenant.entry_date.month, tenant.entry_date.year
        )
        self.log_info("Tenant created", tenant=tenant.id, building=tenant.building_id)
        self.audit(AuditLog.ACTION_CREATE, AuditLog.RESOURCE_TENANT, tenant.id,
                   f"Added tenant {tenant.name} to {tenant.building.name} house {tenant.house_number}")
        return tenant

    @transaction.atomic
    def update_tenant(self, tenant_id, data):
        tenant = Tenant.objects.select_for_update().filter(pk=tenant_id).first()
        if tenant is None:
            raise NotFoundError(resource_type='Tenant', resource_id=tenant_id)

        unit_type = data.pop('unit_type', None)
        old_status = tenant.status
        for field, value in data.items():
            setattr(tenant, field, value)
        tenant.save()
        self._assign_unit(tenant, unit_type)

        billing = BillingService(user=self.user, request=self.request)
        if any(f in data for f in ('monthly_rent', 'garbage_bill')):
            billing.sync_current_record(tenant)

        self.log_info("Tenant updated", tenant=tenant.id, fields=sorted(data))
        if old_status != tenant.status:
            self.audit(AuditLog.ACTION_STATUS, AuditLog.RESOURCE_TENANT, tenant.id,
                       f"Tenant {tenant.name} status {old_status} -> {tenant.status}",
                       leaving_date=str(tenant.leaving_date) if tenant.leaving_date else None)
        self.audit(AuditLog.ACTION_UPDATE, AuditLog.RESOURCE_TENANT, tenant.id,
                   f"Updated tenant {tenant.name}", fields=sorted(data))
        return tenant

    @transaction.atomic
    def delete_tenant(self, tenant):
        unit_id = tenant.unit_id
        self.audit(AuditLog.ACTION_DELETE, AuditLog.RESOURCE_TENANT, tenant.id,
                   f"Deleted tenant {tenant.name} ({tenant.building.name} house {tenant.house_number})")
        tenant_id = tenant.id
        tenant.delete()
        self._release_unit(unit_id, tenant_id)
        self.log_info("Tenant deleted", tenant=tenant_id)
