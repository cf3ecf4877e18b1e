"""
PDF inventory report
====================
Summary totals, species and monetary-value charts, and a table of every tree.
"""

import logging
from datetime import datetime
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.graphics.charts.barcharts import VerticalBarChart
from reportlab.graphics.charts.piecharts import Pie
from reportlab.graphics.shapes import Drawing
from reportlab.lib.colors import HexColor, white
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from inventory_store import get_inventory_metrics

logger = logging.getLogger(__name__)

REPORT_STATE_KEY = "report_pdf"
REPORT_ERROR = "Could not create the PDF report."

PRIMARY_GREEN = HexColor("#1D7749")
ACCENT_GREEN = HexColor("#28a745")
TABLE_ALT_ROW = HexColor("#f0f7f0")
PIE_COLORS = [HexColor("#1D7749"), HexColor("#2563eb"), HexColor("#f59e0b"), HexColor("#9333ea")]

MONETARY_LABELS = {
    "carbon": "Carbon",
    "stormwater": "Stormwater",
    "air_quality": "Air quality",
    "energy": "Energy",
}


def _format_idr(value):
    return f"Rp {value:,.0f}"


def _summary_table(metrics):
    rows = [
        ["Trees recorded", f"{metrics['total_trees']:,}"],
        ["Total biomass", f"{metrics['total_biomass']:,.2f} kg"],
        ["Carbon stored", f"{metrics['total_carbon']:,.2f} kg"],
        ["CO2 sequestered", f"{metrics['total_co2']:,.2f} kg"],
        ["Stormwater intercepted", f"{metrics['total_stormwater']:,.2f} L/year"],
        ["Air pollution removed", f"{metrics['total_pollution']:,.2f} g/year"],
        ["Annual monetary value", _format_idr(metrics['monetary']['total'])],
    ]
    table = Table(rows, colWidths=[2.8 * inch, 2.4 * inch])
    table.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('TEXTCOLOR', (0, 0), (0, -1), PRIMARY_GREEN),
        ('ROWBACKGROUNDS', (0, 0), (-1, -1), [white, TABLE_ALT_ROW]),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
    ]))
    return table


def _species_chart(species_counts):
    drawing = Drawing(7 * inch, 2.6 * inch)
    chart = VerticalBarChart()
    chart.x, chart.y = 40, 40
    chart.width, chart.height = 6.2 * inch, 1.8 * inch
    chart.data = [list(species_counts.values())]
    chart.categoryAxis.categoryNames = [str(name)[:18] for name in species_counts]
    chart.categoryAxis.labels.angle = 20
    chart.categoryAxis.labels.boxAnchor = 'ne'
    chart.valueAxis.valueMin = 0
    chart.valueAxis.valueStep = max(1, max(species_counts.values()) // 5)
    chart.bars[0].fillColor = ACCENT_GREEN
    drawing.add(chart)
    return drawing


def _monetary_chart(monetary):
    parts = [key for key in MONETARY_LABELS if monetary[key] > 0]
    drawing = Drawing(7 * inch, 2.4 * inch)
    pie = Pie()
    pie.x, pie.y = 60, 15
    pie.width = pie.height = 1.9 * inch
    pie.data = [monetary[key] for key in parts]
    pie.labels = [f"{MONETARY_LABELS[key]} ({_format_idr(monetary[key])})" for key in parts]
    pie.sideLabels = True
    for idx in range(len(parts)):
        pie.slices[idx].fillColor = PIE_COLORS[idx % len(PIE_COLORS)]
    drawing.add(pie)
    return drawing


def _tree_table(trees, styles):
    header = ["Species", "DBH (cm)", "Height (m)", "Condition", "CO2 (kg)", "Value (IDR/yr)", "Location", "Date"]
    rows = [header]
    for tree in trees:
        rows.append([
            Paragraph(escape(str(tree.get("species", ""))), styles["BodyText"]),
            f"{tree['dbh']:g}",
            f"{tree['height']:g}",
            tree["condition"],
            f"{tree['carbon']['co2_sequestered']:,.2f}",
            _format_idr(tree["ecosystem_services"]["annual_monetary_value"]["total"]),
            f"{tree.get('latitude') or 0:.4f}, {tree.get('longitude') or 0:.4f}",
            str(tree.get("inventory_date", ""))[:10],
        ])

    table = Table(rows, repeatRows=1, colWidths=[
        2.0 * inch, 0.8 * inch, 0.8 * inch, 0.9 * inch, 1.1 * inch, 1.3 * inch, 1.6 * inch, 0.9 * inch,
    ])
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), PRIMARY_GREEN),
        ('TEXTCOLOR', (0, 0), (-1, 0), white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 8),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [white, TABLE_ALT_ROW]),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('ALIGN', (1, 1), (5, -1), 'RIGHT'),
    ]))
    return table


def generate_pdf_report(trees):
    """Render the inventory to PDF and return the document bytes."""
    styles = getSampleStyleSheet()
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=landscape(A4), title="Tree & Carbon Inventory Report",
        leftMargin=0.6 * inch, rightMargin=0.6 * inch, topMargin=0.6 * inch, bottomMargin=0.6 * inch,
    )

    story = [
        Paragraph("Tree &amp; Carbon Inventory Report", styles["Title"]),
        Paragraph(f"Generated on {datetime.now().strftime('%B %d, %Y at %H:%M')}", styles["Normal"]),
        Spacer(1, 0.25 * inch),
    ]

    if not trees:
        story.append(Paragraph("No trees have been recorded yet.", styles["Normal"]))
    else:
        metrics = get_inventory_metrics(trees)

        story.append(Paragraph("Summary", styles["Heading2"]))
        story.append(_summary_table(metrics))
        story.append(Spacer(1, 0.2 * inch))

        if metrics["species_counts"]:
            story.append(Paragraph("Species Distribution", styles["Heading2"]))
            story.append(_species_chart(metrics["species_counts"]))

        if metrics["monetary"]["total"] > 0:
            story.append(Paragraph("Annual Monetary Value Breakdown", styles["Heading2"]))
            story.append(_monetary_chart(metrics["monetary"]))

        story.append(Paragraph("Tree Inventory", styles["Heading2"]))
        story.append(_tree_table(trees, styles))

    doc.build(story)
    logger.info(f"Generated PDF report for {len(trees)} trees")
    return buffer.getvalue()


def prepare_report(session_state, trees):
    """Button callback: render the report into the session for the download button."""
    session_state["error"] = None
    try:
        session_state[REPORT_STATE_KEY] = generate_pdf_report(trees)
    except Exception as e:
        logger.exception("Failed to generate PDF report: %s", e)
        session_state[REPORT_STATE_KEY] = None
        session_state["error"] = REPORT_ERROR


def clear_report(session_state):
    session_state[REPORT_STATE_KEY] = None
