# backend/utils/pdf.py

from datetime import datetime
from io import BytesIO
from typing import List

from schemas.product import ProductRecord, ProductReportFilter

# Built-in ReportLab fonts, no TTF files to ship
FONT_REGULAR_NAME = "Helvetica"
FONT_BOLD_NAME = "Helvetica-Bold"

# Column layout: (header, x offset in mm, alignment)
COLUMNS = [
    ("ID", 15, "left"),
    ("Product", 28, "left"),
    ("Manufacturer", 85, "left"),
    ("SKU", 125, "left"),
    ("Price", 172, "right"),
    ("Qty", 195, "right"),
]


def _describe_filter(report_filter: ProductReportFilter) -> str:
    parts = []
    if report_filter.name_filter:
        parts.append(f"name contains '{report_filter.name_filter}'")
    if report_filter.manufacturer_filter:
        parts.append(f"manufacturer contains '{report_filter.manufacturer_filter}'")
    if report_filter.sku_filter:
        parts.append(f"sku contains '{report_filter.sku_filter}'")
    return ", ".join(parts) if parts else "all products"


def generate_product_report_pdf(products: List[ProductRecord], report_filter: ProductReportFilter) -> bytes:
    """
    Renders the product report:
    - Header with generation time and the applied filter
    - One table row per product, repeated header on every page
    - Totals (line count, units on hand)
    """
    try:
        from reportlab.lib.pagesizes import A4
        from reportlab.pdfgen import canvas
        from reportlab.lib.units import mm
    except ImportError:
        raise ImportError("reportlab is not installed. Run: python -m pip install reportlab")

    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    width, height = A4

    def draw_text(x, y, text, font=FONT_REGULAR_NAME, size=9, align="left"):
        c.setFont(font, size)
        text_str = str(text) if text is not None else ""
        if align == "right":
            c.drawRightString(x, y, text_str)
        else:
            c.drawString(x, y, text_str)

    def draw_table_header(y):
        for title, x, align in COLUMNS:
            draw_text(x * mm, y, title, font=FONT_BOLD_NAME, align=align)
        c.line(15 * mm, y - 2 * mm, 195 * mm, y - 2 * mm)
        return y - 7 * mm

    # --- 1. NAGŁÓWEK ---
    y = height - 20 * mm
    draw_text(15 * mm, y, "Product report", font=FONT_BOLD_NAME, size=16)
    y -= 7 * mm
    draw_text(15 * mm, y, f"Generated: {datetime.now():%Y-%m-%d %H:%M}")
    y -= 5 * mm
    draw_text(15 * mm, y, f"Filter: {_describe_filter(report_filter)}")
    y -= 10 * mm

    # --- 2. TABELA ---
    y = draw_table_header(y)
    for p in products:
        if y < 25 * mm:
            c.showPage()
            y = draw_table_header(height - 20 * mm)
        draw_text(15 * mm, y, p.product_id)
        draw_text(28 * mm, y, p.product_name[:32])
        draw_text(85 * mm, y, p.manufacturer[:22])
        draw_text(125 * mm, y, p.sku[:24])
        draw_text(172 * mm, y, f"{p.price_per_unit:.2f}", align="right")
        draw_text(195 * mm, y, p.quantity_on_hand, align="right")
        y -= 6 * mm

    # --- 3. PODSUMOWANIE ---
    if y < 30 * mm:
        c.showPage()
        y = height - 20 * mm
    y -= 4 * mm
    total_units = sum(p.quantity_on_hand for p in products)
    draw_text(15 * mm, y, f"Products: {len(products)}    Units on hand: {total_units}", font=FONT_BOLD_NAME, size=10)

    c.save()
    return buffer.getvalue()
