from io import BytesIO

from openpyxl import load_workbook

from export import EXCEL_SHEET, export_excel, export_pdf
from views import edit_grid


def test_pdf_is_a_pdf(settings, monday_timetable):
    data = export_pdf(edit_grid(monday_timetable, settings, ["10 A", "10 B"]), "Greenfield", "s1")
    assert data.startswith(b"%PDF")


def test_pdf_without_rows_still_builds():
    assert export_pdf([], "", "").startswith(b"%PDF")


def test_excel_layout(settings, monday_timetable):
    grid = edit_grid(monday_timetable, settings, ["10 A", "10 B"])
    wb = load_workbook(BytesIO(export_excel(grid, "Greenfield", "s1")))
    ws = wb[EXCEL_SHEET]

    assert ws["A1"].value == "Greenfield"
    assert ws["A2"].value == "(ID: s1)"
    assert ws["A3"].value is None
    assert ws["A4"].value == "Class"
    assert ws["B4"].value == "Mon-P1\n9:00am-9:45am"
    assert ws["A6"].value == "10 B"

    merged = {str(r) for r in ws.merged_cells.ranges}
    assert merged == {"A1:K1", "A2:K2"}
    assert ws.column_dimensions["A"].width == 15
    assert ws.column_dimensions["K"].width == 15

    shortage = ws["C6"]
    assert shortage.value == "Math\nUnassigned"
    assert shortage.font.bold
    assert shortage.font.color.rgb.endswith("FF0000")
