from django.db.models import Count, Sum, Q
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from api.filters import BuildingFilterBackend, filter_by_building
from api.permissions import IsActiveUser
from audit.models import AuditLog
from common.responses import success_response, created_response
from common.viewsets import AuditedModelViewSet
from core.constants import MaintenanceStatus, Priority
from core.validators import PeriodValidator
from .models import MaintenanceRequest, MaintenanceExpense
from .serializers import MaintenanceRequestSerializer, MaintenanceExpenseSerializer, StatusSerializer
from .services import MaintenanceService


def filter_by_period(queryset, params, field='date'):
    month, year = params.get('month'), params.get('year')
    if month and month != 'all':
        queryset = queryset.filter(**{f'{field}__month': PeriodValidator.parse_month(month)})
    if year and year != 'all':
        queryset = queryset.filter(**{f'{field}__year': PeriodValidator.parse_year(year)})
    return queryset


def summarize(queryset):
    totals = queryset.aggregate(
        total=Count('id'),
        totalCost=Sum('cost'),
        **{status: Count('id', filter=Q(status=status)) for status, _ in MaintenanceStatus.CHOICES},
        **{f'priority_{p}': Count('id', filter=Q(priority=p)) for p, _ in Priority.CHOICES},
    )
    summary = {
        'total': totals['total'],
        'totalCost': totals['totalCost'] or 0,
        'byPriority': {p: totals[f'priority_{p}'] for p, _ in Priority.CHOICES},
    }
    for status, _ in MaintenanceStatus.CHOICES:
        summary[status] = totals[status]
    return summary


class MaintenanceViewSet(viewsets.ReadOnlyModelViewSet):
    """
    GET maintenance?buildingId&status&priority&month&year -> {data, summary}
    GET maintenance/<id>
    GET maintenance/expenses?buildingId
    """
    permission_classes = [IsAuthenticated, IsActiveUser]
    serializer_class = MaintenanceRequestSerializer
    filter_backends = [BuildingFilterBackend]
    lookup_value_regex = r'\d+'

    def get_queryset(self):
        queryset = MaintenanceRequest.objects.select_related('building', 'unit', 'tenant')
        params = self.request.query_params
        if params.get('status') and params['status'] != 'all':
            queryset = queryset.filter(status=params['status'])
        if params.get('priority') and params['priority'] != 'all':
            queryset = queryset.filter(priority=params['priority'])
        return filter_by_period(queryset, params)

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        data = self.get_serializer(queryset, many=True).data
        return success_response(data, summary=summarize(queryset))

    def retrieve(self, request, *args, **kwargs):
        return success_response(self.get_serializer(self.get_object()).data)

    @action(detail=False, methods=['get'])
    def expenses(self, request):
        queryset = MaintenanceExpense.objects.select_related('request__building', 'request__unit')
        queryset = filter_by_building(queryset, request.query_params, field='request__building')
        queryset = filter_by_period(queryset, request.query_params)
        data = MaintenanceExpenseSerializer(queryset, many=True).data
        return success_response(data, count=len(data))


class MaintenanceAdminViewSet(AuditedModelViewSet):
    """
    POST   admin/maintenance
    PATCH  admin/maintenance/<id>
    DELETE admin/maintenance/<id>
    PATCH  admin/maintenance/<id>/status   {status}
    POST   admin/maintenance/<id>/expenses {description, amount, paidBy, paymentMethod, receiptNumber}
    """
    serializer_class = MaintenanceRequestSerializer
    audit_resource = AuditLog.RESOURCE_MAINTENANCE
    verbose_name = 'Maintenance request'

    def get_queryset(self):
        return MaintenanceRequest.objects.select_related('building', 'unit', 'tenant')

    def describe(self, job):
        return f"{job.issue_title} ({job.building.name})"

    def perform_create(self, serializer):
        return serializer.save(created_by=self.request.user)

    @action(detail=True, methods=['patch', 'put'], url_path='status')
    def change_status(self, request, pk=None):
        serializer = StatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        job = MaintenanceService(user=request.user, request=request).change_status(
            self.get_object().pk, serializer.validated_data['status']
        )
        return success_response(
            MaintenanceRequestSerializer(job).data, f"Status updated to {job.get_status_display()}"
        )

    @action(detail=True, methods=['post'])
    def expenses(self, request, pk=None):
        job = self.get_object()
        serializer = MaintenanceExpenseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        expense, total_cost = MaintenanceService(user=request.user, request=request).add_expense(
            job.pk, serializer.validated_data
        )
        return created_response(
            {'expense': MaintenanceExpenseSerializer(expense).data, 'totalCost': total_cost},
            "Expense added successfully"
        )
