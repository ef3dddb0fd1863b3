"""
Reports: JSON for the dashboard, plus PDF and CSV downloads of the same data.
"""
import csv
from datetime import date
from decimal import Decimal

from django.http import HttpResponse
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from api.permissions import IsActiveUser
from common.models import SiteSettings
from common.pdf_utils import generate_table_report_pdf, format_money
from common.responses import success_response
from core.exceptions import NotFoundError
from .services import ReportService, REPORTS


def _build(request, name):
    if name not in REPORTS:
        raise NotFoundError(message=f"Unknown report: {name}", code="UNKNOWN_REPORT")
    title, builder, columns, rows_key = REPORTS[name]
    service = ReportService(request.query_params, user=request.user, request=request)
    data, summary = builder(service)
    rows = data[rows_key] if rows_key else data
    return service, title, columns, data, summary, rows


def _cell(value, currency):
    if isinstance(value, Decimal):
        return format_money(value, currency)
    if isinstance(value, date):
        return value.strftime('%d %b %Y')
    return '' if value is None else str(value)


def _filename(name, extension):
    return f"{name}-{timezone.localdate().isoformat()}.{extension}"


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsActiveUser])
def report_view(request, name):
    """GET reports/<name>?buildingName&month&year&... -> {success, data, summary}"""
    _, _, _, data, summary, _ = _build(request, name)
    return success_response(data, summary=summary, filters=dict(request.query_params.items()))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsActiveUser])
def report_pdf(request, name):
    service, title, columns, _, summary, rows = _build(request, name)
    currency = SiteSettings.load().currency_code

    buffer = generate_table_report_pdf(
        title=title,
        columns=[heading for heading, _ in columns],
        rows=[[_cell(row.get(key), currency) for _, key in columns] for row in rows],
        subtitle=service.describe_filters(),
        summary=[(key, _cell(value, currency)) for key, value in summary.items() if not isinstance(value, dict)],
    )
    response = HttpResponse(buffer.getvalue(), content_type='application/pdf')
    response['Content-Disposition'] = f'attachment; filename="{_filename(name, "pdf")}"'
    return response


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsActiveUser])
def report_csv(request, name):
    _, _, columns, _, _, rows = _build(request, name)

    response = HttpResponse(content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="{_filename(name, "csv")}"'
    writer = csv.writer(response)
    writer.writerow([heading for heading, _ in columns])
    for row in rows:
        writer.writerow(['' if row.get(key) is None else row.get(key) for _, key in columns])
    return response
