"""
🧠 VIEWS — Baby-level explanation
=================================
The timetable is one long list of cells. People want tables:
- one class, days across the top
- every class on one row for the whole week (the edit sheet)
- every teacher with what they teach each period, and on which days
- today only, per class or per teacher (the arrangement)

Each table is a list of rows of ExportCell. The screen, the PDF and the
Excel file all draw the same rows. Red bold = nobody is teaching it.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

import pandas as pd

from models import (
    DAY_ORDER,
    NOT_APPLICABLE,
    ScheduleSettings,
    TimetableEntry,
    UNASSIGNED,
    period_timings,
)

SHORTAGE_COLOR = "FF0000"
DEFAULT_COLOR = "000000"

Grid = List[List["ExportCell"]]


@dataclass
class ExportCell:
    text: str
    bold: bool = False
    color: str = DEFAULT_COLOR

    @property
    def is_alert(self) -> bool:
        return self.color == SHORTAGE_COLOR


def _header(text: str) -> ExportCell:
    return ExportCell(text, bold=True)


def _entry_cell(text: str, shortage: bool, absent: bool = False) -> ExportCell:
    return ExportCell(text, bold=shortage, color=SHORTAGE_COLOR if shortage or absent else DEFAULT_COLOR)


def _lunch_label(settings: ScheduleSettings, period: int) -> str:
    return "Lunch" if settings.is_lunch_period(period) else f"P{settings.display_period(period)}"


def _index(timetable: List[TimetableEntry]) -> Dict[Tuple[str, int, str], TimetableEntry]:
    return {e.slot_key: e for e in timetable}


def day_number(day: str, settings: ScheduleSettings) -> Optional[int]:
    """
    Monday=1 .. Sunday=7. Custom working days carry on after Sunday in the
    order they were added (8, 9, ...). Days outside the settings have no number.
    """
    if day in DAY_ORDER:
        return DAY_ORDER.index(day) + 1
    custom = [d for d in settings.sorted_days() if d not in DAY_ORDER]
    return len(DAY_ORDER) + custom.index(day) + 1 if day in custom else None


def format_day_ranges(day_numbers: List[int]) -> str:
    """[1, 2, 3, 5] -> "(Days: 1-3,5)"; [4] -> "(Day: 4)"; [] -> ""."""
    if not day_numbers:
        return ""
    days = sorted(day_numbers)
    if len(days) == 1:
        return f"(Day: {days[0]})"

    ranges = []
    start = end = days[0]
    for d in days[1:]:
        if d == end + 1:
            end = d
            continue
        ranges.append(str(start) if start == end else f"{start}-{end}")
        start = end = d
    ranges.append(str(start) if start == end else f"{start}-{end}")
    return f"(Days: {','.join(ranges)})"


# ---------------------------------------------------------------------------
# CLASS VIEWS
# ---------------------------------------------------------------------------


def class_week_grid(timetable: List[TimetableEntry], settings: ScheduleSettings, class_name: str) -> Grid:
    """Rows = periods, columns = working days, for one class."""
    timings = period_timings(settings)
    days = settings.sorted_days()
    cells = _index(timetable)

    grid: Grid = [[_header("Period")] + [_header(d) for d in days]]
    for p in settings.physical_periods():
        row = [_header(f"{_lunch_label(settings, p)}\n{timings.get(p, '')}")]
        for day in days:
            entry = cells.get((day, p, class_name))
            if settings.is_lunch_period(p):
                row.append(ExportCell("Lunch"))
            elif entry is None:
                row.append(ExportCell("-"))
            else:
                row.append(_entry_cell(f"{entry.subject}\n{entry.teacher}", entry.is_shortage))
        grid.append(row)
    return grid


def class_consolidated_grid(timetable: List[TimetableEntry], settings: ScheduleSettings, class_sections: List[str]) -> Grid:
    """
    One row per class. Each period cell lists (subject, teacher) pairs with
    the days they happen on, so a whole week fits in one sheet.
    """
    timings = period_timings(settings)
    periods = settings.physical_periods()

    grouped: Dict[str, Dict[int, Dict[Tuple[str, str], List[int]]]] = defaultdict(lambda: defaultdict(dict))
    for e in timetable:
        number = day_number(e.day, settings)
        if e.is_lunch or number is None:
            continue
        grouped[e.class_name][e.period].setdefault((e.subject, e.teacher), []).append(number)

    header = [_header("S.No."), _header("Class")]
    header += [_header(f"{_lunch_label(settings, p)}\n{timings.get(p, '')}") for p in periods]
    grid: Grid = [header]

    for i, class_name in enumerate(class_sections, start=1):
        row = [ExportCell(str(i)), _header(class_name)]
        for p in periods:
            if settings.is_lunch_period(p):
                row.append(ExportCell("Lunch"))
                continue
            pairs = grouped.get(class_name, {}).get(p)
            if not pairs:
                row.append(ExportCell("-"))
                continue
            text = "\n\n".join(f"{s}\n{t}\n{format_day_ranges(days)}" for (s, t), days in pairs.items())
            shortage = any(t == UNASSIGNED for (_, t) in pairs)
            row.append(_entry_cell(text, shortage))
        grid.append(row)
    return grid


def edit_grid(timetable: List[TimetableEntry], settings: ScheduleSettings, class_sections: List[str]) -> Grid:
    """The full week sheet: one row per class, a column per (day, period)."""
    timings = period_timings(settings)
    days = settings.sorted_days()
    periods = settings.physical_periods()
    cells = _index(timetable)

    header = [_header("Class")]
    for day in days:
        for p in periods:
            header.append(_header(f"{day[:3]}-{settings.period_label(p)}\n{timings.get(p, '')}"))
    grid: Grid = [header]

    for class_name in class_sections:
        row = [_header(class_name)]
        for day in days:
            for p in periods:
                entry = cells.get((day, p, class_name))
                if settings.is_lunch_period(p):
                    row.append(ExportCell("Lunch Break"))
                elif entry is None:
                    row.append(ExportCell("-"))
                else:
                    row.append(_entry_cell(f"{entry.subject}\n{entry.teacher}", entry.is_shortage))
        grid.append(row)
    return grid


# ---------------------------------------------------------------------------
# TEACHER VIEWS
# ---------------------------------------------------------------------------


def assigned_teachers(timetable: List[TimetableEntry]) -> List[str]:
    """Real teacher names that appear in the timetable, sorted."""
    return sorted({e.teacher for e in timetable if e.teacher and e.teacher not in (UNASSIGNED, NOT_APPLICABLE)})


def teacher_period_counts(timetable: List[TimetableEntry]) -> Dict[str, int]:
    """Teaching periods per teacher across the week (lunch excluded)."""
    counts: Dict[str, int] = defaultdict(int)
    for e in timetable:
        if not e.is_lunch and e.teacher not in (UNASSIGNED, NOT_APPLICABLE):
            counts[e.teacher] += 1
    return dict(counts)


def teacher_day_load(timetable: List[TimetableEntry]) -> Dict[str, Dict[str, int]]:
    """Teacher -> day -> periods."""
    load: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
    for e in timetable:
        if not e.is_lunch and e.teacher not in (UNASSIGNED, NOT_APPLICABLE):
            load[e.teacher][e.day] += 1
    return {t: dict(days) for t, days in load.items()}


def shortage_count(timetable: List[TimetableEntry]) -> int:
    return sum(1 for e in timetable if e.is_shortage)


def teacher_consolidated_grid(timetable: List[TimetableEntry], settings: ScheduleSettings) -> Grid:
    """One row per teacher; each period cell lists (subject, class) with its days, then a total."""
    timings = period_timings(settings)
    periods = settings.physical_periods()
    teachers = assigned_teachers(timetable)
    totals = teacher_period_counts(timetable)

    grouped: Dict[str, Dict[int, Dict[Tuple[str, str], List[int]]]] = defaultdict(lambda: defaultdict(dict))
    for e in timetable:
        number = day_number(e.day, settings)
        if e.is_lunch or number is None:
            continue
        grouped[e.teacher][e.period].setdefault((e.subject, e.class_name), []).append(number)

    header = [_header("S.No."), _header("Teacher")]
    header += [_header(f"{_lunch_label(settings, p)}\n{timings.get(p, '')}") for p in periods]
    header.append(_header("Total Periods"))
    grid: Grid = [header]

    for i, teacher in enumerate(teachers, start=1):
        row = [ExportCell(str(i)), _header(teacher)]
        for p in periods:
            if settings.is_lunch_period(p):
                row.append(ExportCell("Lunch"))
                continue
            pairs = grouped.get(teacher, {}).get(p)
            if not pairs:
                row.append(ExportCell("-"))
                continue
            row.append(ExportCell("\n\n".join(f"{s}\n{c}\n{format_day_ranges(days)}" for (s, c), days in pairs.items())))
        row.append(_header(str(totals.get(teacher, 0))))
        grid.append(row)
    return grid


# ---------------------------------------------------------------------------
# ARRANGEMENT VIEW
# ---------------------------------------------------------------------------


def arrangement_grid(
    timetable: List[TimetableEntry],
    settings: ScheduleSettings,
    day: str,
    names: List[str],
    by_teacher: bool = False,
    absent: Optional[Set[str]] = None,
) -> Grid:
    """One day, rows = classes (or teachers). Absent teachers' cells are red."""
    absent = absent or set()
    timings = period_timings(settings)
    periods = settings.physical_periods()
    today = [e for e in timetable if e.day == day]

    header = [_header("Teacher" if by_teacher else "Class")]
    header += [_header(f"{_lunch_label(settings, p)}\n{timings.get(p, '')}") for p in periods]
    grid: Grid = [header]

    for name in names:
        row = [_header(name)]
        for p in periods:
            if settings.is_lunch_period(p):
                row.append(ExportCell("Lunch"))
                continue
            if by_teacher:
                entry = next((e for e in today if e.teacher == name and e.period == p), None)
            else:
                entry = next((e for e in today if e.class_name == name and e.period == p), None)
            if entry is None:
                row.append(ExportCell("-"))
                continue
            other = entry.class_name if by_teacher else entry.teacher
            row.append(_entry_cell(f"{entry.subject}\n{other}", entry.is_shortage, entry.teacher in absent))
        grid.append(row)
    return grid


def grid_to_frame(grid: Grid) -> pd.DataFrame:
    """Header row becomes the columns. Newlines are kept for st.dataframe wrapping."""
    if not grid:
        return pd.DataFrame()
    columns = [c.text.replace("\n", " ").strip() for c in grid[0]]
    rows = [[c.text for c in row] for row in grid[1:]]
    return pd.DataFrame(rows, columns=columns)
