import csv
import io
from xml.sax.saxutils import escape

import openpyxl
from openpyxl.styles import Font, PatternFill
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from orders.models import Order
from .reports import summarize

UTF8_BOM = '\ufeff'

HEADINGS = [
    'Order No', 'Time', 'Branch', 'Cashier', 'Item Details',
    'Total', 'Payment Method', 'Status', 'Audit Log',
]


def status_label(order):
    if order.is_voided:
        return 'Voided'
    return str(dict(Order.STATUS_CHOICES).get(order.status, order.status))


def format_items(order):
    items = list(order.items.all())
    if not items:
        return '-'
    return ', '.join(
        f"{item.quantity}x {item.item_name}{' (Custom)' if item.is_custom else ''}"
        for item in items
    )


def format_audit_log(order):
    entries = []
    if order.is_voided:
        actor = order.deleted_by.name if order.deleted_by else 'Admin'
        reason = f" ({order.delete_reason})" if order.delete_reason else ''
        entries.append(f"Voided by {actor}{reason}")
    if order.edited_at:
        actor = order.edited_by.name if order.edited_by else 'Admin'
        reason = f" ({order.edit_reason})" if order.edit_reason else ''
        entries.append(f"Edited by {actor}{reason}")
    return '; '.join(entries) if entries else '-'


def order_row(order, tz):
    return [
        order.order_number,
        order.created_at.astimezone(tz).strftime('%d/%m/%Y %H:%M'),
        order.branch.name if order.branch else '-',
        order.user.name if order.user else '-',
        format_items(order),
        order.total,
        str(order.get_payment_method_label()),
        status_label(order),
        format_audit_log(order),
    ]


def filter_description(filters):
    start = filters.get('start_date') or '-'
    end = filters.get('end_date') or '-'
    parts = [f"Transaction Report | Period: {start} to {end}"]
    if filters.get('branch_id'):
        parts.append(f"Branch: {filters['branch_id'].name}")
    if filters.get('payment_method'):
        parts.append(f"Method: {dict(Order.PAYMENT_METHOD_CHOICES)[filters['payment_method']]}")
    if filters.get('status'):
        parts.append(f"Status: {dict(Order.STATUS_CHOICES)[filters['status']]}")
    return ' | '.join(parts)


def build_transactions_csv(orders, filters, tz):
    """
    Spreadsheet friendly CSV: BOM, filter line, quoted header and rows, then
    a summary block. Returns the whole document as text.
    """
    output = io.StringIO()
    output.write(UTF8_BOM)
    output.write(filter_description(filters) + '\n\n')

    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator='\n')
    writer.writerow(HEADINGS)
    for order in orders:
        writer.writerow(order_row(order, tz))

    summary = summarize(orders)
    output.write('\n')
    writer.writerow(['SUMMARY'])
    writer.writerow(['Successful Transactions', summary['success_count']])
    writer.writerow(['Voided Transactions', summary['voided_count']])
    writer.writerow(['Revenue (Successful)', summary['revenue']])

    return output.getvalue()


def build_transactions_workbook(orders, filters, tz):
    """Same rows as the CSV export in an XLSX workbook"""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Transactions"

    header_font = Font(bold=True, color='FFFFFF')
    header_fill = PatternFill(start_color='4472C4', end_color='4472C4', fill_type='solid')

    ws['A1'] = filter_description(filters)
    ws['A1'].font = Font(bold=True, size=14)
    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=len(HEADINGS))

    for col, heading in enumerate(HEADINGS, 1):
        cell = ws.cell(row=3, column=col, value=heading)
        cell.font = header_font
        cell.fill = header_fill

    row = 4
    for order in orders:
        for col, value in enumerate(order_row(order, tz), 1):
            ws.cell(row=row, column=col, value=float(value) if col == 6 else value)
        row += 1

    summary = summarize(orders)
    row += 1
    ws.cell(row=row, column=1, value='SUMMARY').font = Font(bold=True)
    ws.cell(row=row + 1, column=1, value='Successful Transactions')
    ws.cell(row=row + 1, column=2, value=summary['success_count'])
    ws.cell(row=row + 2, column=1, value='Voided Transactions')
    ws.cell(row=row + 2, column=2, value=summary['voided_count'])
    ws.cell(row=row + 3, column=1, value='Revenue (Successful)')
    ws.cell(row=row + 3, column=2, value=float(summary['revenue']))

    # Auto-adjust column widths
    for column in ws.iter_cols(min_row=3):
        max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=8)
        ws.column_dimensions[column[0].column_letter].width = min(max_length + 2, 50)

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def build_daybook_pdf(orders, filters, tz):
    """Landscape day book listing every order in the filtered set"""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=landscape(A4))
    elements = []

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'DaybookTitle',
        parent=styles['Heading1'],
        fontSize=18,
        alignment=TA_CENTER,
        spaceAfter=12,
    )
    cell_style = ParagraphStyle('DaybookCell', parent=styles['Normal'], fontSize=7)

    elements.append(Paragraph("Day Book", title_style))
    elements.append(Paragraph(escape(filter_description(filters)), styles['Normal']))
    elements.append(Spacer(1, 0.2 * inch))

    data = [HEADINGS]
    for order in orders:
        row = order_row(order, tz)
        row[4] = Paragraph(escape(row[4]), cell_style)
        row[5] = f"{row[5]:,.2f}"
        row[8] = Paragraph(escape(row[8]), cell_style)
        data.append(row)

    summary = summarize(orders)
    data.append([
        'Total', '', '', '', f"{summary['success_count']} successful, {summary['voided_count']} voided",
        f"{summary['revenue']:,.2f}", '', '', '',
    ])

    table = Table(data, repeatRows=1, colWidths=[
        1.3 * inch, 1 * inch, 1 * inch, 0.9 * inch, 2.2 * inch,
        0.9 * inch, 1 * inch, 0.7 * inch, 1.8 * inch,
    ])
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#4472C4')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 7),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('BACKGROUND', (0, -1), (-1, -1), colors.lightgrey),
        ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
    ]))
    elements.append(table)

    doc.build(elements)
    pdf = buffer.getvalue()
    buffer.close()
    return pdf
