"""
PDF report for a single tire request.

Pure rendering: takes a TireRequest instance, returns bytes.
"""

import io
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import (
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

DETAIL_ROWS = [
    ("ID", "id"),
    ("Vehicle No", "vehicle_no"),
    ("Vehicle Type", "vehicle_type"),
    ("Vehicle Brand", "vehicle_brand"),
    ("Vehicle Model", "vehicle_model"),
    ("User Section", "user_section"),
    ("Replacement Date", "replacement_date"),
    ("Existing Make", "existing_make"),
    ("Tire Size", "tire_size"),
    ("Number of Tires", "no_of_tires"),
    ("Number of Tubes", "no_of_tubes"),
    ("Cost Center", "cost_center"),
    ("Present KM", "present_km"),
    ("Previous KM", "previous_km"),
    ("Wear Indicator", "wear_indicator"),
    ("Wear Pattern", "wear_pattern"),
    ("Officer Service No", "officer_service_no"),
    ("User Email", "email"),
    ("Comments", "comments"),
    ("Status", "status"),
]

# Printed only when set.
OPTIONAL_ROWS = [
    ("Rejection Reason", "rejection_reason"),
    ("Manager Approval Date", "manager_approved_at"),
    ("Manager Rejection Date", "manager_rejected_at"),
    ("TTO Approval Date", "tto_approved_at"),
    ("TTO Rejection Date", "tto_rejected_at"),
    ("Engineer Approval Date", "engineer_approved_at"),
    ("Engineer Rejection Date", "engineer_rejected_at"),
]


def _format(value):
    if value is None:
        return ""
    if hasattr(value, "strftime") and hasattr(value, "hour"):
        return value.strftime("%Y-%m-%d %H:%M")
    if hasattr(value, "strftime"):
        return value.strftime("%Y-%m-%d")
    return str(value)


def _rows(tire_request):
    cell_style = getSampleStyleSheet()["BodyText"]
    rows = []
    for label, attr in DETAIL_ROWS:
        rows.append([label, Paragraph(escape(_format(getattr(tire_request, attr))), cell_style)])
    for label, attr in OPTIONAL_ROWS:
        value = getattr(tire_request, attr)
        if value:
            rows.append([label, Paragraph(escape(_format(value)), cell_style)])
    return rows


def render_request_pdf(tire_request):
    """Render the tire request report. Returns PDF bytes."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=inch,
        leftMargin=inch,
        topMargin=inch,
        bottomMargin=inch,
        title=f"Tire Request {tire_request.id}",
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "ReportTitle",
        parent=styles["Heading1"],
        fontSize=16,
        alignment=TA_CENTER,
        spaceAfter=12,
    )

    table = Table(_rows(tire_request), colWidths=[2 * inch, 4 * inch])
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (0, -1), colors.lightgrey),
                ("TEXTCOLOR", (0, 0), (-1, -1), colors.black),
                ("ALIGN", (0, 0), (0, -1), "RIGHT"),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("FONTSIZE", (0, 0), (-1, -1), 10),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ]
        )
    )

    story = [
        Paragraph("Tire Request Report", title_style),
        Spacer(1, 12),
        table,
        Spacer(1, 12),
        Paragraph(f"Photos attached: {tire_request.photo_count}", styles["Normal"]),
    ]
    doc.build(story)
    return buffer.getvalue()
