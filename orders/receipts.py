import io
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A6
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from .conf import pos_setting
from .timeutils import pos_timezone


def format_money(value):
    """Whole rupiah with dot thousands separators, e.g. ``55.000``"""
    return f"{value:,.0f}".replace(',', '.')


def build_receipt(order, tz=None):
    """Receipt payload for a stored order"""
    tz = tz or pos_timezone()
    created = order.created_at.astimezone(tz)
    branch = order.branch

    return {
        'order_number': order.order_number,
        'date': created.strftime('%d/%m/%Y'),
        'time': created.strftime('%H:%M'),
        'branch_name': branch.name if branch else None,
        'branch_address': branch.address if branch else None,
        'cashier_name': order.user.name if order.user else None,
        'currency': pos_setting('CURRENCY'),
        'items': [
            {
                'name': item.item_name,
                'quantity': item.quantity,
                'price': item.price,
                'subtotal': item.subtotal,
                'note': item.note,
                'is_custom': item.is_custom,
            }
            for item in order.items.all()
        ],
        'subtotal': order.subtotal,
        'tax': order.tax,
        'total': order.total,
        'payment_method': order.payment_method,
        'payment_method_label': str(order.get_payment_method_label()),
        'cash_amount': order.cash_amount,
        'change_amount': order.change_amount,
        'status': order.status,
        'is_voided': order.is_voided,
    }


def render_receipt_pdf(order, tz=None):
    """Render a small-format PDF receipt and return its bytes"""
    receipt = build_receipt(order, tz)

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=A6,
        leftMargin=6 * mm, rightMargin=6 * mm, topMargin=6 * mm, bottomMargin=6 * mm,
    )
    elements = []

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'ReceiptTitle',
        parent=styles['Heading2'],
        alignment=TA_CENTER,
        spaceAfter=4,
    )
    centered = ParagraphStyle('ReceiptCentered', parent=styles['Normal'], alignment=TA_CENTER, fontSize=8)

    elements.append(Paragraph(escape(receipt['branch_name'] or '-'), title_style))
    if receipt['branch_address']:
        elements.append(Paragraph(escape(receipt['branch_address']), centered))
    elements.append(Paragraph(
        f"{receipt['order_number']} | {receipt['date']} {receipt['time']}", centered
    ))
    if receipt['is_voided']:
        elements.append(Paragraph('VOID', title_style))
    elements.append(Spacer(1, 4 * mm))

    rows = [['Item', 'Qty', 'Subtotal']]
    for item in receipt['items']:
        rows.append([item['name'][:24], str(item['quantity']), format_money(item['subtotal'])])

    rows.append(['Subtotal', '', format_money(receipt['subtotal'])])
    rows.append(['Tax', '', format_money(receipt['tax'])])
    rows.append(['Total', '', format_money(receipt['total'])])
    if receipt['cash_amount'] is not None:
        rows.append(['Cash', '', format_money(receipt['cash_amount'])])
        rows.append(['Change', '', format_money(receipt['change_amount'] or 0)])

    table = Table(rows, colWidths=[45 * mm, 12 * mm, 30 * mm])
    table.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 8),
        ('ALIGN', (1, 0), (-1, -1), 'RIGHT'),
        ('LINEBELOW', (0, 0), (-1, 0), 0.5, colors.black),
        ('LINEABOVE', (0, len(receipt['items']) + 1), (-1, len(receipt['items']) + 1), 0.5, colors.black),
    ]))
    elements.append(table)

    elements.append(Spacer(1, 4 * mm))
    elements.append(Paragraph(
        escape(f"{receipt['payment_method_label']} | {receipt['cashier_name'] or '-'}"), centered
    ))

    doc.build(elements)
    pdf = buffer.getvalue()
    buffer.close()
    return pdf
