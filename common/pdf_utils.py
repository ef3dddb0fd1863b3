"""
PDF Utility Functions for generating receipts and reports
"""
from io import BytesIO
from decimal import Decimal

from django.utils import timezone
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from core.constants import MONTH_NAMES

PRIMARY = colors.HexColor('#1e40af')
MUTED = colors.HexColor('#64748b')
BORDER = colors.HexColor('#e2e8f0')
STATUS_COLORS = {
    'paid': colors.HexColor('#10b981'),
    'pending': colors.HexColor('#f59e0b'),
    'overdue': colors.HexColor('#ef4444'),
}


def _styles():
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(
        name='ReceiptTitle',
        parent=styles['Heading1'],
        fontSize=22,
        spaceAfter=8,
        alignment=TA_CENTER,
        textColor=PRIMARY
    ))
    styles.add(ParagraphStyle(
        name='ReceiptSubtitle',
        parent=styles['Normal'],
        fontSize=11,
        alignment=TA_CENTER,
        textColor=MUTED,
        spaceAfter=14
    ))
    styles.add(ParagraphStyle(
        name='SectionHeader',
        parent=styles['Heading2'],
        fontSize=13,
        textColor=PRIMARY,
        spaceBefore=12,
        spaceAfter=8
    ))
    styles.add(ParagraphStyle(
        name='AmountLarge',
        parent=styles['Normal'],
        fontSize=26,
        leading=32,
        fontName='Helvetica-Bold',
        alignment=TA_CENTER,
        textColor=STATUS_COLORS['paid']
    ))
    styles.add(ParagraphStyle(
        name='Footer',
        parent=styles['Normal'],
        fontSize=8,
        alignment=TA_CENTER,
        textColor=colors.HexColor('#94a3b8')
    ))
    return styles


def _document(buffer, pagesize=A4):
    return SimpleDocTemplate(
        buffer,
        pagesize=pagesize,
        rightMargin=15*mm,
        leftMargin=15*mm,
        topMargin=15*mm,
        bottomMargin=15*mm
    )


def format_money(amount, currency='KES'):
    amount = Decimal(amount or 0)
    return f"{currency} {amount:,.2f}"


def _footer(elements, styles):
    generated_date = timezone.localtime().strftime('%d %b %Y, %I:%M %p')
    elements.append(Spacer(1, 20))
    elements.append(Paragraph(f"Generated on {generated_date}", styles['Footer']))


def generate_receipt_pdf(receipt, company_name, currency='KES'):
    """
    Generate a payment receipt for one tenant and month.

    Args:
        receipt: ReceiptDTO
        company_name: Heading printed above the receipt
        currency: ISO currency code used for amounts

    Returns:
        BytesIO buffer containing the PDF
    """
    buffer = BytesIO()
    doc = _document(buffer)
    styles = _styles()
    elements = []
    period = f"{MONTH_NAMES[receipt.month - 1]} {receipt.year}"

    elements.append(Paragraph(company_name, styles['ReceiptTitle']))
    elements.append(Paragraph("PAYMENT RECEIPT", styles['ReceiptSubtitle']))
    elements.append(Paragraph(f"Receipt No: {receipt.receipt_no}", styles['ReceiptSubtitle']))

    status_table = Table(
        [[Paragraph(f"<font color='white'><b>{receipt.status.upper()}</b></font>", styles['Normal'])]],
        colWidths=[100]
    )
    status_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, -1), STATUS_COLORS.get(receipt.status, MUTED)),
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
        ('TOPPADDING', (0, 0), (-1, -1), 6),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
    ]))
    status_wrapper = Table([[status_table]], colWidths=[doc.width])
    status_wrapper.setStyle(TableStyle([('ALIGN', (0, 0), (-1, -1), 'CENTER')]))
    elements.append(status_wrapper)
    elements.append(Spacer(1, 14))

    elements.append(Paragraph(format_money(receipt.amount_paid, currency), styles['AmountLarge']))
    elements.append(Paragraph(f"Paid for {period}", styles['ReceiptSubtitle']))

    elements.append(Paragraph("Tenant Details", styles['SectionHeader']))
    tenant_table = Table([
        ['Name:', receipt.tenant_name, 'House:', receipt.house_number],
        ['Building:', receipt.building_name, 'Period:', period],
    ], colWidths=[60, 200, 60, 140])
    tenant_table.setStyle(TableStyle([
        ('FONTNAME', (1, 0), (1, -1), 'Helvetica-Bold'),
        ('FONTNAME', (3, 0), (3, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('TEXTCOLOR', (0, 0), (0, -1), MUTED),
        ('TEXTCOLOR', (2, 0), (2, -1), MUTED),
        ('TOPPADDING', (0, 0), (-1, -1), 5),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 5),
    ]))
    elements.append(tenant_table)

    elements.append(Paragraph("Charges", styles['SectionHeader']))
    charges_table = Table([
        ['Monthly Rent', format_money(receipt.monthly_rent, currency)],
        ['Water Bill', format_money(receipt.water_bill, currency)],
        ['Garbage Bill', format_money(receipt.garbage_bill, currency)],
        ['Penalties', format_money(receipt.penalties, currency)],
        ['Total Due', format_money(receipt.total_due, currency)],
        ['Amount Paid', format_money(receipt.amount_paid, currency)],
        ['Balance Due', format_money(receipt.balance_due, currency)],
    ], colWidths=[180, 270])
    charges_table.setStyle(TableStyle([
        ('FONTNAME', (1, 0), (1, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 11),
        ('TEXTCOLOR', (0, 0), (0, -1), MUTED),
        ('TOPPADDING', (0, 0), (-1, -1), 6),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
        ('LINEBELOW', (0, 0), (-1, -2), 0.5, BORDER),
        ('LINEABOVE', (0, 4), (-1, 4), 1.5, PRIMARY),
    ]))
    elements.append(charges_table)

    _footer(elements, styles)
    elements.append(Paragraph("This is a computer-generated receipt.", styles['Footer']))

    doc.build(elements)
    buffer.seek(0)
    return buffer


def generate_table_report_pdf(title, columns, rows, subtitle='', summary=None):
    """
    Generate a landscape report: a title, an optional summary block and one table.

    Args:
        title: Report heading
        columns: Column headings
        rows: List of row value lists (already formatted as text)
        subtitle: Filter description printed under the title
        summary: Optional list of (label, value) pairs

    Returns:
        BytesIO buffer containing the PDF
    """
    buffer = BytesIO()
    doc = _document(buffer, pagesize=landscape(A4))
    styles = _styles()
    elements = [Paragraph(title, styles['ReceiptTitle'])]
    if subtitle:
        elements.append(Paragraph(subtitle, styles['ReceiptSubtitle']))

    if summary:
        summary_table = Table([[label, str(value)] for label, value in summary], colWidths=[180, 200])
        summary_table.setStyle(TableStyle([
            ('FONTNAME', (1, 0), (1, -1), 'Helvetica-Bold'),
            ('TEXTCOLOR', (0, 0), (0, -1), MUTED),
            ('FONTSIZE', (0, 0), (-1, -1), 10),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
        ]))
        elements.append(summary_table)
        elements.append(Spacer(1, 12))

    data = [list(columns)] + [[str(v) for v in row] for row in rows]
    if not rows:
        data.append(['No records'] + [''] * (len(columns) - 1))
    table = Table(data, repeatRows=1)
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), PRIMARY),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 8),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#f8fafc')]),
        ('GRID', (0, 0), (-1, -1), 0.25, BORDER),
        ('TOPPADDING', (0, 0), (-1, -1), 4),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
    ]))
    elements.append(table)

    _footer(elements, styles)
    doc.build(elements)
    buffer.seek(0)
    return buffer
