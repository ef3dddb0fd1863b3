from django.db.models import Prefetch
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from api.permissions import IsActiveUser
from audit.models import AuditLog
from common.responses import success_response
from common.viewsets import AuditedModelViewSet
from core.constants import TenantStatus
from core.exceptions import BusinessLogicError
from .models import Building, BuildingUnitType, Unit, Staff
from .serializers import (
    BuildingSerializer, BuildingDetailSerializer, BuildingWithUnitTypesSerializer,
    BuildingUnitTypeSerializer, UnitSerializer, StaffSerializer,
)


def building_detail_queryset():
    return Building.objects.prefetch_related(
        Prefetch('units', queryset=Unit.objects.select_related('unit_type__unit_type')),
        'staff',
        Prefetch('unit_types', queryset=BuildingUnitType.objects.select_related('unit_type')),
    )


class BuildingViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Read access to buildings for every signed-in user.

    GET buildings/full            all buildings with units, staff and unit types
    GET buildings/<id>            one building, same shape
    GET buildings/<id>/units
    GET buildings/<id>/staff
    """
    permission_classes = [IsAuthenticated, IsActiveUser]
    serializer_class = BuildingDetailSerializer
    lookup_value_regex = r'\d+'

    def get_queryset(self):
        return building_detail_queryset()

    def list(self, request, *args, **kwargs):
        data = self.get_serializer(self.get_queryset(), many=True).data
        return success_response(data, count=len(data))

    def retrieve(self, request, *args, **kwargs):
        return success_response(self.get_serializer(self.get_object()).data)

    @action(detail=True, methods=['get'])
    def units(self, request, pk=None):
        building = self.get_object()
        units = building.units.select_related('unit_type__unit_type')
        return success_response(UnitSerializer(units, many=True).data)

    @action(detail=True, methods=['get'])
    def staff(self, request, pk=None):
        building = self.get_object()
        return success_response(StaffSerializer(building.staff.all(), many=True).data)

    @action(detail=False, methods=['get'], url_path='with-unit-types')
    def with_unit_types(self, request):
        buildings = Building.objects.prefetch_related(
            Prefetch('unit_types', queryset=BuildingUnitType.objects.select_related('unit_type'))
        )
        return success_response(BuildingWithUnitTypesSerializer(buildings, many=True).data)


class BuildingAdminViewSet(AuditedModelViewSet):
    serializer_class = BuildingSerializer
    audit_resource = AuditLog.RESOURCE_BUILDING
    verbose_name = 'Building'

    def get_queryset(self):
        return Building.objects.all()

    def check_can_delete(self, building):
        if building.tenants.filter(status=TenantStatus.ACTIVE).exists():
            raise BusinessLogicError(
                message="Cannot delete a building with active tenants. Move or remove them first.",
                code="BUILDING_HAS_TENANTS"
            )


class UnitAdminViewSet(AuditedModelViewSet):
    serializer_class = UnitSerializer
    audit_resource = AuditLog.RESOURCE_UNIT
    verbose_name = 'Unit'

    def get_queryset(self):
        return Unit.objects.select_related('building', 'unit_type__unit_type')

    def check_can_delete(self, unit):
        if unit.is_occupied or unit.tenants.filter(status=TenantStatus.ACTIVE).exists():
            raise BusinessLogicError(message="Cannot delete an occupied unit", code="UNIT_OCCUPIED")


class StaffAdminViewSet(AuditedModelViewSet):
    serializer_class = StaffSerializer
    audit_resource = AuditLog.RESOURCE_STAFF
    verbose_name = 'Staff member'

    def get_queryset(self):
        return Staff.objects.select_related('building')


class BuildingUnitTypeAdminViewSet(AuditedModelViewSet):
    serializer_class = BuildingUnitTypeSerializer
    audit_resource = AuditLog.RESOURCE_UNIT_TYPE
    verbose_name = 'Unit type'

    def get_queryset(self):
        return BuildingUnitType.objects.select_related('building', 'unit_type')
