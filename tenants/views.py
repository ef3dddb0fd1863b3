from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from api.filters import BuildingFilterBackend, filter_by_building
from api.permissions import IsActiveUser, IsAdminRole
from billing.models import MonthlyRecord
from billing.serializers import MonthlyRecordSerializer
from billing.services import BillingService
from common.responses import success_response, created_response, records_response
from core.validators import PeriodValidator
from .models import Tenant
from .serializers import TenantSerializer, TenantMonthSerializer, MonthlyHistorySerializer
from .services import TenantService


class TenantViewSet(viewsets.GenericViewSet):
    """
    Tenants and their monthly bills.

    GET    tenants/getTenants?month&year[&buildingName&status&search]
    GET    tenants/<id>
    GET    tenants/<id>/monthly-records
    GET    tenants/getAllMonthlyRecords?month&year
    POST   admin/tenants/addNewTenant
    PUT    admin/tenants/updateTenant/<id>
    DELETE admin/tenants/deleteTenant/<id>
    """
    serializer_class = TenantSerializer
    filter_backends = [BuildingFilterBackend]
    building_field = 'building'

    def get_permissions(self):
        if self.action in ('create', 'update', 'destroy'):
            return [IsAuthenticated(), IsAdminRole()]
        return [IsAuthenticated(), IsActiveUser()]

    def get_queryset(self):
        queryset = Tenant.objects.select_related('building')
        status_filter = self.request.query_params.get('status')
        if status_filter and status_filter != 'all':
            queryset = queryset.filter(status=status_filter)
        search = self.request.query_params.get('search')
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) | Q(house_number__icontains=search) | Q(mobile__icontains=search)
            )
        return queryset

    def _period(self):
        return PeriodValidator.parse_period(
            self.request.query_params.get('month'), self.request.query_params.get('year')
        )

    def list(self, request):
        month, year = self._period()
        service = BillingService(user=request.user, request=request)
        tenants = list(self.filter_queryset(self.get_queryset()).billable_in(month, year))

        records = {}
        for tenant in tenants:
            record = service.ensure_record(tenant, month, year)
            if record:
                records[tenant.id] = record

        context = {'records': records, 'billing': service, 'month': month, 'year': year}
        data = TenantMonthSerializer(tenants, many=True, context=context).data
        return records_response(data)

    def retrieve(self, request, pk=None):
        tenant = get_object_or_404(self.get_queryset(), pk=pk)
        return success_response(self.get_serializer(tenant).data)

    @action(detail=True, methods=['get'], url_path='monthly-records')
    def monthly_records(self, request, pk=None):
        tenant = get_object_or_404(Tenant.objects.select_related('building'), pk=pk)
        service = BillingService(user=request.user, request=request)
        last = tenant.leaving_date if tenant.leaving_date and not tenant.is_active else service.today
        service.ensure_record(tenant, last.month, last.year)

        records = tenant.monthly_records.prefetch_related('transactions__tenant__building')
        data = MonthlyHistorySerializer(records, many=True).data
        return records_response(data, tenant=self.get_serializer(tenant).data)

    @action(detail=False, methods=['get'], url_path='getAllMonthlyRecords')
    def all_monthly_records(self, request):
        month, year = self._period()
        service = BillingService(user=request.user, request=request)
        service.ensure_records(month, year)

        records = MonthlyRecord.objects.filter(month=month, year=year).select_related('tenant__building')
        records = filter_by_building(records, request.query_params, field='tenant__building')
        records = records.prefetch_related('transactions__tenant__building', 'transactions__created_by')
        data = MonthlyRecordSerializer(records, many=True, context={'billing': service}).data
        return records_response(data)

    def create(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        tenant = TenantService(user=request.user, request=request).create_tenant(dict(serializer.validated_data))
        return created_response(self.get_serializer(tenant).data, "Tenant added successfully")

    def update(self, request, pk=None):
        tenant = get_object_or_404(Tenant, pk=pk)
        serializer = self.get_serializer(tenant, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        tenant = TenantService(user=request.user, request=request).update_tenant(
            tenant.pk, dict(serializer.validated_data)
        )
        return success_response(self.get_serializer(tenant).data, "Tenant updated successfully")

    def destroy(self, request, pk=None):
        tenant = get_object_or_404(Tenant.objects.select_related('building'), pk=pk)
        TenantService(user=request.user, request=request).delete_tenant(tenant)
        return success_response(message="Tenant deleted successfully")
