import os
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from shopsense.config import settings


def format_quantity(quantity: float) -> str:
    return f"{quantity:g}"


def generate_receipt_pdf(bill, shop, items, output_dir: str = None):
    output_dir = output_dir or settings.receipt_dir
    # Ensure directory exists
    os.makedirs(output_dir, exist_ok=True)

    file_path = os.path.join(output_dir, f"receipt_{shop.id}_{bill.bill_number}.pdf")
    currency = settings.currency

    c = canvas.Canvas(file_path, pagesize=A4)
    width, height = A4

    y = height - 60

    # -------------------------
    # SHOP HEADER
    # -------------------------
    c.setFont("Helvetica-Bold", 16)
    c.drawCentredString(width / 2, y, shop.name)
    y -= 18

    c.setFont("Helvetica", 10)
    if shop.owner_name:
        c.drawCentredString(width / 2, y, shop.owner_name)
        y -= 14
    if shop.address:
        c.drawCentredString(width / 2, y, shop.address)
        y -= 14
    if shop.phone:
        c.drawCentredString(width / 2, y, f"Phone: {shop.phone}")
        y -= 14
    y -= 10

    c.drawString(50, y, f"Bill #{bill.bill_number}")
    c.drawRightString(500, y, bill.created_at.strftime("%d-%m-%Y %H:%M"))
    y -= 20

    # -------------------------
    # TABLE HEADER
    # -------------------------
    c.setFont("Helvetica-Bold", 10)
    c.drawString(50, y, "Item")
    c.drawRightString(300, y, "Qty")
    c.drawRightString(400, y, "Rate")
    c.drawRightString(500, y, "Amount")
    y -= 10

    c.line(50, y, 500, y)
    y -= 15

    # -------------------------
    # ITEMS
    # -------------------------
    c.setFont("Helvetica", 10)

    for item in items:
        c.drawString(50, y, item.item_name)
        c.drawRightString(300, y, f"{format_quantity(item.quantity)} {item.unit or ''}".strip())
        c.drawRightString(400, y, f"{item.selling_price:.2f}")
        c.drawRightString(500, y, f"{item.subtotal:.2f}")

        y -= 15

        if y < 100:
            c.showPage()
            y = height - 60
            c.setFont("Helvetica", 10)

    # -------------------------
    # TOTAL
    # -------------------------
    y -= 5
    c.line(300, y, 500, y)
    y -= 15
    c.setFont("Helvetica-Bold", 11)
    c.drawRightString(400, y, "Total:")
    c.drawRightString(500, y, f"{currency} {bill.total_amount:.2f}")
    y -= 30

    c.setFont("Helvetica", 9)
    c.drawCentredString(width / 2, y, "Thank you! Visit again.")

    c.save()
    return file_path
