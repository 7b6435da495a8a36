import csv
from io import StringIO, BytesIO
from datetime import datetime

from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib import colors
from reportlab.lib.units import inch

from ..models import Booking
from .billing import BillSummary

def generate_payments_csv(entries) -> str:
    """Generates a CSV export of the payment log (newest first, as listed)."""
    output = StringIO()
    writer = csv.writer(output)

    # Header
    writer.writerow(["Payment ID", "Date", "Room", "Guest", "Type", "Amount"])

    # Data
    for e in entries:
        p = e.payment
        writer.writerow([
            p.id,
            p.payment_date.isoformat(sep=" ", timespec="minutes"),
            e.room_number,
            e.customer_name,
            p.payment_type.value,
            f"{float(p.amount):.2f}",
        ])

    return output.getvalue()

def generate_invoice_pdf(booking: Booking, bill: BillSummary, pending_purchases, hotel_name: str, currency_symbol: str, issued_at: datetime) -> bytes:
    """Generates a checkout invoice for one booking using ReportLab."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, rightMargin=0.5*inch, leftMargin=0.5*inch, topMargin=0.5*inch, bottomMargin=0.5*inch)
    styles = getSampleStyleSheet()
    elements = []

    def money(value) -> str:
        return f"{currency_symbol}{float(value):,.2f}"

    room_label = f"Room {booking.room.room_number}" if booking.room else "Room -"
    elements.append(Paragraph(f"{hotel_name} - Invoice #{booking.id}", styles['h1']))
    elements.append(Paragraph(f"{booking.customer_name} ({booking.phone_number}), {room_label}", styles['h2']))
    elements.append(Paragraph(
        f"Check-in: {booking.check_in_date:%d %b %Y %H:%M}. Issued: {issued_at:%d %b %Y %H:%M}",
        styles['Normal'],
    ))
    elements.append(Spacer(1, 0.25*inch))

    data = [["Description", "Amount"]]
    data.append([f"Rent: {bill.days_stayed} day(s) x {money(bill.rent_per_day)}", money(bill.total_rent)])
    for line in pending_purchases:
        data.append([f"{line.item_name} x {line.purchase.quantity}", money(line.purchase.amount)])
    data.append(["Initial payment", f"-{money(bill.initial_payment)}"])
    data.append(["Advance payments", f"-{money(bill.payments_credited)}"])
    data.append(["Amount due", money(bill.amount_due)])

    table = Table(data, colWidths=[4.5*inch, 1.5*inch])
    style = TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.teal),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 12),
        ('BACKGROUND', (0, 1), (-1, -1), colors.beige),
        ('GRID', (0,0), (-1,-1), 1, colors.black)
    ])
    table.setStyle(style)
    elements.append(table)

    doc.build(elements)
    return buffer.getvalue()
