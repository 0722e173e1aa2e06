# app/core/cert_pdf.py
import io
from datetime import date as date_type
from typing import Mapping, Optional

import qrcode
from reportlab.pdfgen import canvas
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape, portrait
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from pypdf import PdfReader, PdfWriter

from app.schemas.certificate import FieldPlacement

# font size / weight per overlay field when the template config leaves it out
FIELD_DEFAULTS = {
    "studentName": (24, "Helvetica-Bold"),
    "rollNumber": (18, "Helvetica"),
}
DEFAULT_COLOR = "#000000"


def page_size_for(orientation: str):
    return portrait(A4) if (orientation or "").lower() == "portrait" else landscape(A4)


def _hex_color(value: Optional[str]):
    v = (value or DEFAULT_COLOR).strip()
    if len(v) == 4:  # "#abc" -> "#aabbcc"
        v = "#" + "".join(ch * 2 for ch in v[1:])
    return colors.HexColor(v)


def _draw_qr(c: canvas.Canvas, verify_url: str, right: float, bottom: float, size: float) -> None:
    qr = qrcode.QRCode(box_size=3, border=1)
    qr.add_data(verify_url)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    qr_buf = io.BytesIO()
    img.save(qr_buf, format="PNG")
    qr_buf.seek(0)

    c.drawImage(ImageReader(qr_buf), right - size, bottom, size, size, mask="auto")
    c.setFont("Helvetica", 7)
    c.setFillColor(colors.HexColor("#555555"))
    c.drawRightString(right, bottom - 3 * mm, "Scan QR to verify")


def build_default_certificate_pdf(
    *,
    cert_uid: str,
    student_name: str,
    roll_number: Optional[str],
    event_title: str,
    event_date: Optional[date_type],
    verify_url: str,
    orientation: str = "landscape",
) -> bytes:
    """Fixed layout used when the event has no uploaded template."""
    buf = io.BytesIO()
    page_size = page_size_for(orientation)
    c = canvas.Canvas(buf, pagesize=page_size)
    w, h = page_size

    # Border
    c.setStrokeColor(colors.HexColor("#787878"))
    c.setLineWidth(10)
    c.rect(8 * mm, 8 * mm, w - 16 * mm, h - 16 * mm)

    c.setFillColor(colors.HexColor("#333333"))
    c.setFont("Helvetica-Bold", 40)
    c.drawCentredString(w / 2, h - 38 * mm, "Certificate of Completion")

    c.setFillColor(colors.HexColor("#555555"))
    c.setFont("Helvetica", 22)
    c.drawCentredString(w / 2, h - 55 * mm, "This is to certify that")

    # Student name, underlined
    c.setFillColor(colors.black)
    c.setFont("Helvetica-Bold", 32)
    name_y = h - 73 * mm
    c.drawCentredString(w / 2, name_y, student_name)
    name_w = c.stringWidth(student_name, "Helvetica-Bold", 32)
    c.setLineWidth(1.2)
    c.setStrokeColor(colors.black)
    c.line(w / 2 - name_w / 2, name_y - 2 * mm, w / 2 + name_w / 2, name_y - 2 * mm)

    if roll_number:
        c.setFillColor(colors.HexColor("#555555"))
        c.setFont("Helvetica", 18)
        c.drawCentredString(w / 2, h - 83 * mm, f"({roll_number})")

    c.setFillColor(colors.HexColor("#666666"))
    c.setFont("Helvetica", 18)
    c.drawCentredString(w / 2, h - 98 * mm, "has successfully attended and completed the event")

    c.setFillColor(colors.HexColor("#222222"))
    c.setFont("Helvetica-Bold", 20)
    c.drawCentredString(w / 2, h - 108 * mm, event_title)

    if event_date:
        c.setFillColor(colors.HexColor("#777777"))
        c.setFont("Helvetica", 16)
        c.drawCentredString(w / 2, h - 124 * mm, f"Date: {event_date.strftime('%B %d, %Y')}")

    # Signature block
    c.setStrokeColor(colors.HexColor("#333333"))
    c.setLineWidth(2)
    c.line(w / 2 - 35 * mm, 40 * mm, w / 2 + 35 * mm, 40 * mm)
    c.setFillColor(colors.HexColor("#333333"))
    c.setFont("Helvetica", 14)
    c.drawCentredString(w / 2, 34 * mm, "Organizer")

    c.setFillColor(colors.HexColor("#999999"))
    c.setFont("Helvetica", 10)
    c.drawCentredString(w / 2, 18 * mm, f"Certificate ID: {cert_uid}")

    _draw_qr(c, verify_url, right=w - 18 * mm, bottom=18 * mm, size=26 * mm)

    c.save()
    return buf.getvalue()


def _make_background_pdf(image_bytes: bytes, page_size) -> bytes:
    """One page with the template image stretched edge to edge."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=page_size)
    w, h = page_size
    c.drawImage(ImageReader(io.BytesIO(image_bytes)), 0, 0, w, h)
    c.save()
    return buf.getvalue()


def _make_overlay_pdf(
    *,
    cert_uid: str,
    student_name: str,
    roll_number: Optional[str],
    placements: Mapping[str, FieldPlacement],
    verify_url: str,
    page_size,
) -> bytes:
    """Creates a transparent overlay PDF with the positioned fields + QR only."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=page_size)
    w, h = page_size

    values = {"studentName": student_name}
    if roll_number:
        values["rollNumber"] = roll_number

    for field, text in values.items():
        p = placements.get(field)
        if p is None:
            continue
        size, font = FIELD_DEFAULTS[field]
        size = p.font_size or size

        # (x, y) is the top-left corner of the text box, page-relative
        left = p.x * w
        baseline = h - p.y * h - size
        c.setFillColor(_hex_color(p.color))
        c.setFont(font, size)
        c.drawString(left, baseline, text)

    c.setFillColor(colors.HexColor("#555555"))
    c.setFont("Helvetica", 8)
    c.drawRightString(w - 7 * mm, 7 * mm, f"Certificate ID: {cert_uid}")

    _draw_qr(c, verify_url, right=w - 7 * mm, bottom=14 * mm, size=20 * mm)

    c.save()
    return buf.getvalue()


def build_templated_certificate_pdf(
    *,
    template_image: bytes,
    placements: Mapping[str, FieldPlacement],
    cert_uid: str,
    student_name: str,
    roll_number: Optional[str],
    verify_url: str,
    orientation: str = "landscape",
) -> bytes:
    """
    Draws the template image as a full-bleed page and merges the text
    overlay onto it. Returns final PDF bytes.
    """
    page_size = page_size_for(orientation)

    template_page = PdfReader(io.BytesIO(_make_background_pdf(template_image, page_size))).pages[0]

    overlay_bytes = _make_overlay_pdf(
        cert_uid=cert_uid,
        student_name=student_name,
        roll_number=roll_number,
        placements=placements,
        verify_url=verify_url,
        page_size=page_size,
    )
    overlay_page = PdfReader(io.BytesIO(overlay_bytes)).pages[0]

    out = PdfWriter()
    out.add_page(template_page)

    # Merge overlay onto the page owned by the writer
    out.pages[0].merge_page(overlay_page)

    final_buf = io.BytesIO()
    out.write(final_buf)
    return final_buf.getvalue()
