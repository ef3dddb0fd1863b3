"""
Payments, advance settlement, penalties and receipts.
"""
import logging

from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from rest_framework import viewsets
from rest_framework.decorators import api_view, permission_classes, action
from rest_framework.permissions import IsAuthenticated

from api.filters import BuildingFilterBackend
from api.permissions import IsActiveUser, IsAdminRole
from audit.helpers import log_action
from audit.models import AuditLog
from common.models import SiteSettings
from common.notifications import send_email, send_sms
from common.pdf_utils import generate_receipt_pdf, format_money
from common.responses import success_response, records_response
from common.viewsets import AuditedModelViewSet
from core.validators import PeriodValidator, PhoneValidator
from tenants.models import Tenant
from .models import Transaction, Penalty
from .serializers import (
    TransactionSerializer, MonthlyRecordSerializer, UpsertSerializer, PeriodSerializer, SettleSerializer,
    PenaltySerializer, SendReceiptEmailSerializer, SendReceiptSmsSerializer,
)
from .services import BillingService

logger = logging.getLogger(__name__)


class TransactionViewSet(viewsets.GenericViewSet):
    """
    GET transactions/getTransactions/monthly?month&year[&buildingName]
    GET transactions/tenant/<tenantId>
    """
    permission_classes = [IsAuthenticated, IsActiveUser]
    serializer_class = TransactionSerializer
    filter_backends = [BuildingFilterBackend]
    building_field = 'tenant__building'

    def get_queryset(self):
        return Transaction.objects.select_related('tenant__building', 'created_by')

    @action(detail=False, methods=['get'])
    def monthly(self, request):
        month, year = PeriodValidator.parse_period(
            request.query_params.get('month'), request.query_params.get('year')
        )
        queryset = self.filter_queryset(self.get_queryset()).filter(month=month, year=year)
        return records_response(self.get_serializer(queryset, many=True).data)

    @action(detail=False, methods=['get'])
    def tenant(self, request, tenant_id=None):
        tenant = get_object_or_404(Tenant, pk=tenant_id)
        queryset = self.get_queryset().filter(tenant=tenant)
        return records_response(self.get_serializer(queryset, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def upsert_transaction(request):
    """
    POST admin/transactions/upsert {tenantId, transaction, record}

    The server allocates the entered amounts itself; paid totals sent in
    `record` are ignored. Only its month/year and waterBill are read.
    """
    serializer = UpsertSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    payment = data['transaction']

    service = BillingService(user=request.user, request=request)
    record, _, credit_added = service.record_payment(
        tenant_id=data['tenantId'],
        month=data['month'],
        year=data['year'],
        amounts={
            'rent': payment['rent'],
            'water': payment['water'],
            'garbage': payment['garbage'],
            'penalties': payment['penalty'],
        },
        deposit=payment['deposit'],
        method=payment['method'],
        reference=payment['reference'],
        date=payment.get('date'),
        notes=payment['notes'],
        water_bill=data['water_bill'],
    )
    record_data = MonthlyRecordSerializer(record, context={'billing': service}).data
    return success_response(
        message="Payment saved successfully",
        record=record_data,
        creditAdded=credit_added,
    )


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def settle_advance(request):
    """POST admin/transactions/settle {tenantId, month, year}"""
    serializer = SettleSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    service = BillingService(user=request.user, request=request)
    record, result = service.settle(data['tenantId'], data['month'], data['year'])
    return success_response(
        message="Advance balance applied",
        settlements=result.settlements,
        remainingTenantCredit=result.remaining_credit,
        totalSettled=result.total_settled,
        record=MonthlyRecordSerializer(record, context={'billing': service}).data,
    )


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def calculate_penalties(request):
    """POST admin/penalties/calculate {month?, year?}"""
    serializer = PeriodSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    service = BillingService(user=request.user, request=request)
    applied = service.calculate_penalties(data['month'], data['year'])
    return success_response(
        message=f"Penalties applied to {len(applied)} record(s)",
        count=len(applied),
        data=[
            {'tenantId': record.tenant_id, 'tenantName': record.tenant.name, 'penalty': amount}
            for record, amount in applied
        ],
    )


class PenaltyViewSet(AuditedModelViewSet):
    """
    GET    penalties/get
    POST   admin/penalties/create
    PUT    admin/penalties/update/<id>
    DELETE admin/penalties/delete/<id>
    """
    serializer_class = PenaltySerializer
    audit_resource = AuditLog.RESOURCE_PENALTY
    verbose_name = 'Penalty'

    def get_queryset(self):
        return Penalty.objects.select_related('building')

    def get_permissions(self):
        if self.action == 'list':
            return [IsAuthenticated(), IsActiveUser()]
        return super().get_permissions()

    def describe(self, penalty):
        return f"{penalty.building.name} {penalty.percentage}%"


def _receipt_for(request, tenant_id):
    tenant = get_object_or_404(Tenant.objects.select_related('building'), pk=tenant_id)
    month, year = PeriodValidator.parse_period(
        request.query_params.get('month'), request.query_params.get('year')
    )
    return BillingService(user=request.user, request=request).build_receipt(tenant, month, year)


def _receipt_json(receipt, currency):
    return {
        'receiptNo': receipt.receipt_no,
        'tenantId': receipt.tenant_id,
        'tenantName': receipt.tenant_name,
        'houseNumber': receipt.house_number,
        'buildingName': receipt.building_name,
        'month': receipt.month,
        'year': receipt.year,
        'monthlyRent': receipt.monthly_rent,
        'waterBill': receipt.water_bill,
        'garbageBill': receipt.garbage_bill,
        'penalties': receipt.penalties,
        'totalDue': receipt.total_due,
        'amountPaid': receipt.amount_paid,
        'balanceDue': receipt.balance_due,
        'status': receipt.status,
        'currency': currency,
    }


def _receipt_pdf(receipt):
    settings = SiteSettings.load()
    return generate_receipt_pdf(receipt, settings.company_name, settings.currency_code)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsActiveUser])
def receipt_detail(request, tenant_id):
    """GET receipts/<tenantId>?month&year"""
    receipt = _receipt_for(request, tenant_id)
    return success_response(_receipt_json(receipt, SiteSettings.load().currency_code))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsActiveUser])
def receipt_pdf(request, tenant_id):
    """GET receipts/<tenantId>/pdf?month&year"""
    receipt = _receipt_for(request, tenant_id)
    buffer = _receipt_pdf(receipt)
    response = HttpResponse(buffer.getvalue(), content_type='application/pdf')
    response['Content-Disposition'] = f'attachment; filename="{receipt.receipt_no}.pdf"'
    return response


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def send_receipt_email(request):
    """POST admin/receipts/send-email {email, tenantId, month, year}"""
    serializer = SendReceiptEmailSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    tenant = get_object_or_404(Tenant.objects.select_related('building'), pk=data['tenantId'])
    service = BillingService(user=request.user, request=request)
    receipt = service.build_receipt(tenant, data['month'], data['year'])
    site = SiteSettings.load()
    period = f"{receipt.month:02d}/{receipt.year}"

    body = (
        f"Dear {receipt.tenant_name},\n\n"
        f"Please find attached your receipt {receipt.receipt_no} for {period}.\n"
        f"Amount paid: {format_money(receipt.amount_paid, site.currency_code)}\n"
        f"Balance due: {format_money(receipt.balance_due, site.currency_code)}\n\n"
        f"{site.company_name}"
    )
    send_email(
        data['email'],
        f"Payment receipt {receipt.receipt_no}",
        body,
        attachments=[(f"{receipt.receipt_no}.pdf", _receipt_pdf(receipt).getvalue(), 'application/pdf')],
    )
    log_action(request.user, AuditLog.ACTION_NOTIFY, AuditLog.RESOURCE_TENANT, tenant.id,
               f"Emailed receipt {receipt.receipt_no} to {data['email']}", request=request)
    return success_response(message=f"Receipt sent to {data['email']}")


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def send_receipt_sms(request):
    """POST admin/receipts/send-sms {phone, tenantName, month, year, amountPaid, balanceDue, receiptNo}"""
    serializer = SendReceiptSmsSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    phone = PhoneValidator.to_international(data['phone'])
    site = SiteSettings.load()
    body = (
        f"Dear {data['tenantName']}, payment received for {data['month']} {data['year']}. "
        f"Paid: {format_money(data['amountPaid'], site.currency_code)}. "
        f"Balance: {format_money(data['balanceDue'], site.currency_code)}. "
        f"Receipt: {data['receiptNo']}. {site.company_name}"
    )
    result = send_sms(phone, body)
    log_action(request.user, AuditLog.ACTION_NOTIFY, AuditLog.RESOURCE_TENANT, None,
               f"SMS receipt {data['receiptNo']} sent to {phone}", request=request)

    extra = {}
    if isinstance(result, dict) and result.get('cost') is not None:
        extra['cost'] = result['cost']
    return success_response(message=f"SMS sent to {phone}", **extra)
