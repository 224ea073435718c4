"""
🧠 EXPORT — Baby-level explanation
==================================
Turns a view grid (see views.py) into a file people can print or share.
- PDF: landscape A4, school name on top, grey header row, red shortages
- Excel: one "Timetable" sheet, school name + ID on top, grid from row 4

Both return bytes so Streamlit can hand them straight to download_button.
"""

import logging
from io import BytesIO

import pandas as pd
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from views import Grid

logger = logging.getLogger(__name__)

EXCEL_SHEET = "Timetable"
EXCEL_COLUMN_WIDTH = 15
EXCEL_FIRST_DATA_ROW = 4


def _grid_table_style(grid: Grid) -> TableStyle:
    """Light grid, grey header, alternating rows; alert cells in red."""
    commands = [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#dcdcdc")),
        ("TEXTCOLOR", (0, 0), (-1, -1), colors.black),
        ("ALIGN", (0, 0), (-1, -1), "CENTER"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("FONTNAME", (0, 0), (-1, -1), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 7),
        ("FONTSIZE", (0, 1), (-1, -1), 6),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#cccccc")),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f5f5f5")]),
    ]
    for r, row in enumerate(grid):
        for c, cell in enumerate(row):
            if cell.is_alert:
                commands.append(("TEXTCOLOR", (c, r), (c, r), colors.HexColor("#FF0000")))
    return TableStyle(commands)


def export_pdf(grid: Grid, school_name: str, school_id: str) -> bytes:
    """Landscape A4 PDF of one grid."""
    buffer = BytesIO()
    page = landscape(A4)
    doc = SimpleDocTemplate(buffer, pagesize=page, leftMargin=1*cm, rightMargin=1*cm, topMargin=1*cm, bottomMargin=1*cm)
    styles = getSampleStyleSheet()
    title = ParagraphStyle("SchoolTitle", parent=styles["Title"], fontSize=16, alignment=TA_CENTER)
    subtitle = ParagraphStyle("SchoolId", parent=styles["Normal"], fontSize=10, alignment=TA_CENTER)

    story = [
        Paragraph(school_name or "School", title),
        Paragraph(f"(ID: {school_id or 'N/A'})", subtitle),
        Spacer(1, 0.4*cm),
    ]
    if grid:
        width = (page[0] - 2*cm) / max(len(grid[0]), 1)
        table = Table([[cell.text for cell in row] for row in grid], colWidths=[width] * len(grid[0]), repeatRows=1)
        table.setStyle(_grid_table_style(grid))
        story.append(table)

    doc.build(story)
    logger.debug("Exported PDF with %d rows", len(grid))
    return buffer.getvalue()


def export_excel(grid: Grid, school_name: str, school_id: str) -> bytes:
    """Single-sheet workbook: title rows, blank row, then the grid."""
    buffer = BytesIO()
    df = pd.DataFrame([[cell.text for cell in row] for row in grid])
    width = max(len(grid[0]), 1) if grid else 1

    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=EXCEL_SHEET, header=False, index=False, startrow=EXCEL_FIRST_DATA_ROW - 1)
        ws = writer.sheets[EXCEL_SHEET]

        ws.cell(row=1, column=1, value=school_name or "School").font = Font(bold=True, size=14)
        ws.cell(row=2, column=1, value=f"(ID: {school_id or 'N/A'})")
        if width > 1:
            ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=width)
            ws.merge_cells(start_row=2, start_column=1, end_row=2, end_column=width)
        for r in (1, 2):
            ws.cell(row=r, column=1).alignment = Alignment(horizontal="center")

        for col in range(1, width + 1):
            ws.column_dimensions[get_column_letter(col)].width = EXCEL_COLUMN_WIDTH

        for r, row in enumerate(grid, start=EXCEL_FIRST_DATA_ROW):
            for c, cell in enumerate(row, start=1):
                target = ws.cell(row=r, column=c)
                target.alignment = Alignment(wrap_text=True, vertical="center")
                if cell.bold or cell.is_alert:
                    target.font = Font(bold=cell.bold, color=cell.color)

    logger.debug("Exported workbook with %d rows", len(grid))
    return buffer.getvalue()
