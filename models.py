"""
🧠 DATA MODELS — Baby-level explanation
========================================
These are the little boxes the timetable builder works with:
teachers (and what they can teach), subjects, classes with sections,
the school's period settings, and one timetable cell.

A timetable cell lives at a "physical" period number. Physical numbers
count the lunch slot too, so with lunch after period 3 the cells are
1, 2, 3, [4 = lunch], 5, 6 ... and users see P1, P2, P3, L, P4, P5.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple


UNASSIGNED = "Unassigned"
NOT_APPLICABLE = "N/A"
LUNCH_BREAK = "Lunch Break"

DAY_ORDER = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


@dataclass
class Teacher:
    """
    One teacher in the school.
    - name: Unique within the school (e.g. "Ada Lovelace")
    - subjects: Comma-separated free text, exactly as uploaded (e.g. "Math, Physics")
    """

    name: str
    subjects: str = ""

    def subject_list(self) -> List[str]:
        """Trimmed, non-empty subject tokens."""
        return [s.strip() for s in self.subjects.split(",") if s.strip()]

    def can_teach(self, subject_name: str) -> bool:
        """Token match, case-insensitive. "Math" does not match "Mathematics"."""
        wanted = subject_name.strip().lower()
        return any(s.lower() == wanted for s in self.subject_list())


@dataclass
class Subject:
    """A subject name plus the (advisory) mandatory flag."""

    name: str
    mandatory: bool = False


@dataclass
class ClassSection:
    """
    One class with its sections, e.g. "10" with ["A", "B"].
    The generator schedules "10 A" and "10 B" separately.
    """

    name: str
    sections: List[str] = field(default_factory=list)

    def section_keys(self) -> List[str]:
        return [f"{self.name} {s}" for s in self.sections]


def all_class_sections(classes: List[ClassSection]) -> List[str]:
    """Flatten classes into the "{class} {section}" keys used in the timetable."""
    return [key for c in classes for key in c.section_keys()]


def _to_int(value, default: int = 0) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


@dataclass
class ScheduleSettings:
    """
    School-wide period structure.
    - total_periods: Teaching periods per day (lunch not included)
    - working_days: e.g. ["Monday", "Tuesday", ...]
    - lunch_break_after: Lunch comes after this teaching period (0 = before the first)
    - start_time: "HH:MM", used only for displayed timings
    - period_duration / lunch_break_duration: minutes, display only
    """

    total_periods: int
    working_days: List[str]
    lunch_break_after: int
    start_time: str = ""
    period_duration: int = 0
    lunch_break_duration: int = 0

    @property
    def lunch_period(self) -> int:
        return self.lunch_break_after + 1

    def physical_periods(self) -> List[int]:
        """All physical period numbers for one day, lunch included."""
        return list(range(1, self.total_periods + 2))

    def is_lunch_period(self, period: int) -> bool:
        return period == self.lunch_period

    def display_period(self, period: int) -> int:
        """Physical -> the number users see (periods after lunch shift down by one)."""
        return period - 1 if period > self.lunch_break_after else period

    def period_label(self, period: int) -> str:
        if self.is_lunch_period(period):
            return "L"
        return f"P{self.display_period(period)}"

    def sorted_days(self) -> List[str]:
        """Working days Monday..Sunday; custom day names keep their order after those."""
        known = [d for d in DAY_ORDER if d in self.working_days]
        custom = [d for d in self.working_days if d not in DAY_ORDER]
        return known + custom

    def to_dict(self) -> dict:
        return {
            "totalPeriods": self.total_periods,
            "startTime": self.start_time,
            "periodDuration": self.period_duration,
            "workingDays": list(self.working_days),
            "lunchBreakAfter": self.lunch_break_after,
            "lunchBreakDuration": self.lunch_break_duration,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "ScheduleSettings":
        """Numbers may arrive as strings (form input); bad values become 0."""
        return cls(
            total_periods=_to_int(d.get("totalPeriods")),
            working_days=list(d.get("workingDays") or []),
            lunch_break_after=_to_int(d.get("lunchBreakAfter"), default=-1),
            start_time=str(d.get("startTime") or ""),
            period_duration=_to_int(d.get("periodDuration")),
            lunch_break_duration=_to_int(d.get("lunchBreakDuration")),
        )


def physical_period(logical: int, lunch_after: int) -> int:
    """Logical teaching period -> physical slot, skipping over the lunch slot."""
    return logical if logical <= lunch_after else logical + 1


_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


def _format_time(dt: datetime) -> str:
    """9:05am style, like the printed timetables."""
    hour = dt.hour % 12 or 12
    suffix = "am" if dt.hour < 12 else "pm"
    return f"{hour}:{dt.minute:02d}{suffix}"


def period_timings(settings: Optional[ScheduleSettings]) -> Dict[int, str]:
    """
    Physical period -> "9:00am-9:45am". The lunch slot uses the lunch duration.
    Anything unusable in the settings gives an empty map instead of an error.
    """
    if settings is None:
        return {}
    match = _TIME_RE.match(settings.start_time or "")
    if not match:
        return {}
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return {}
    if settings.total_periods <= 0 or settings.period_duration <= 0 or settings.lunch_break_duration <= 0:
        return {}
    if not 0 <= settings.lunch_break_after <= settings.total_periods:
        return {}

    current = datetime(2000, 1, 1, hour, minute)
    timings: Dict[int, str] = {}
    for p in settings.physical_periods():
        minutes = settings.lunch_break_duration if settings.is_lunch_period(p) else settings.period_duration
        end = current + timedelta(minutes=minutes)
        timings[p] = f"{_format_time(current)}-{_format_time(end)}"
        current = end
    return timings


@dataclass
class TimetableEntry:
    """One cell: which subject and teacher a class has on (day, physical period)."""

    day: str
    period: int
    class_name: str
    subject: str
    teacher: str

    @property
    def slot_key(self) -> Tuple[str, int, str]:
        return (self.day, self.period, self.class_name)

    @property
    def is_lunch(self) -> bool:
        return self.subject == LUNCH_BREAK

    @property
    def is_shortage(self) -> bool:
        return self.teacher == UNASSIGNED

    def to_dict(self) -> dict:
        return {
            "day": self.day,
            "period": self.period,
            "class": self.class_name,
            "subject": self.subject,
            "teacher": self.teacher,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "TimetableEntry":
        return cls(
            day=str(d["day"]),
            period=int(d["period"]),
            class_name=str(d["class"]),
            subject=str(d.get("subject", "")),
            teacher=str(d.get("teacher", UNASSIGNED)),
        )


# ---------------------------------------------------------------------------
# FORM VALIDATION — returns an error message, or None when the input is fine
# ---------------------------------------------------------------------------


def teacher_error(name: str, subjects: str) -> Optional[str]:
    if not name.strip() or not subjects.strip():
        return "Fields cannot be empty."
    return None


def subject_error(subjects: List[Subject], name: str, editing: Optional[str] = None) -> Optional[str]:
    """Subject names are unique ignoring case. `editing` is the name being renamed, if any."""
    trimmed = name.strip()
    if not trimmed:
        return "Subject name cannot be empty."
    lowered = trimmed.lower()
    if lowered == LUNCH_BREAK.lower():
        return f'"{LUNCH_BREAK}" is reserved for the lunch slot.'
    if editing is not None and lowered == editing.lower():
        return None
    if any(s.name.lower() == lowered for s in subjects):
        return "This subject already exists."
    return None


def save_subject(
    subjects: List[Subject],
    name: str,
    mandatory: bool,
    editing_index: Optional[int] = None,
) -> Optional[str]:
    """
    Add a subject, or replace the one at `editing_index` (a rename).
    Returns the validation error and leaves the list alone when there is one.
    """
    editing = subjects[editing_index].name if editing_index is not None else None
    error = subject_error(subjects, name, editing=editing)
    if error:
        return error
    subject = Subject(name=name.strip(), mandatory=mandatory)
    if editing_index is None:
        subjects.append(subject)
    else:
        subjects[editing_index] = subject
    return None


def settings_error(settings: ScheduleSettings) -> Optional[str]:
    if (
        settings.total_periods <= 0
        or not _TIME_RE.match(settings.start_time or "")
        or not settings.working_days
        or settings.period_duration <= 0
        or settings.lunch_break_duration <= 0
    ):
        return "Please provide valid inputs for all fields."
    if not 0 <= settings.lunch_break_after <= settings.total_periods:
        return f"Lunch break must come after a period between 0 and {settings.total_periods}."
    return None


def class_error(classes: List[ClassSection], name: str, sections: List[str]) -> Optional[str]:
    trimmed = name.strip()
    if not trimmed:
        return "Class name cannot be empty."
    cleaned = [s.strip() for s in sections if s.strip()]
    if not cleaned:
        return "Please add at least one section."
    if len({s.lower() for s in cleaned}) != len(cleaned):
        return "This section has already been added."
    if any(c.name.lower() == trimmed.lower() for c in classes):
        return "This class name already exists."
    return None
