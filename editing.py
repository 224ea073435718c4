"""
🧠 CONFLICT GUARD — Baby-level explanation
==========================================
When someone changes a cell by hand (drop a teacher on it, or fill the edit
form), we check one rule before touching anything:

  "Is this teacher already teaching another class at this exact time?"

If yes, the change is refused and nothing moves. If no, only that one cell
changes. Lunch cells can't be edited at all.
"""

import logging
from typing import List, Optional, Tuple

from models import TimetableEntry, UNASSIGNED

logger = logging.getLogger(__name__)


class EditRejected(Exception):
    """A manual edit was refused. The timetable is unchanged."""


class TeacherConflict(EditRejected):
    def __init__(self, teacher: str, conflict: TimetableEntry):
        super().__init__(f"{teacher} is already assigned to {conflict.class_name} during this period.")
        self.teacher = teacher
        self.conflict = conflict


class ClassConflict(EditRejected):
    def __init__(self, class_name: str):
        super().__init__(f"{class_name} already has a subject scheduled at this time.")
        self.class_name = class_name


class LunchSlotLocked(EditRejected):
    def __init__(self):
        super().__init__("Lunch break cannot be edited.")


class SlotNotFound(EditRejected):
    def __init__(self, day: str, period: int, class_name: str):
        super().__init__(f"No timetable entry for {class_name} on {day} period {period}.")


def find_teacher_conflict(
    timetable: List[TimetableEntry],
    day: str,
    period: int,
    teacher: str,
    origin: Optional[Tuple[str, int, str]] = None,
) -> Optional[TimetableEntry]:
    """
    Another entry with this teacher at (day, period), ignoring the slot being edited.
    "Unassigned" never conflicts.
    """
    if teacher == UNASSIGNED:
        return None
    for entry in timetable:
        if entry.day == day and entry.period == period and entry.teacher == teacher and entry.slot_key != origin:
            return entry
    return None


def _find_index(timetable: List[TimetableEntry], day: str, period: int, class_name: str) -> int:
    key = (day, period, class_name)
    for i, entry in enumerate(timetable):
        if entry.slot_key == key:
            return i
    raise SlotNotFound(day, period, class_name)


def assign_teacher(
    timetable: List[TimetableEntry],
    day: str,
    period: int,
    class_name: str,
    teacher: str,
) -> TimetableEntry:
    """Put `teacher` on one cell, keeping its subject. Returns the new entry."""
    index = _find_index(timetable, day, period, class_name)
    current = timetable[index]
    if current.is_lunch:
        raise LunchSlotLocked()

    conflict = find_teacher_conflict(timetable, day, period, teacher, origin=current.slot_key)
    if conflict is not None:
        logger.info("Rejected %s for %s %s P%d: busy with %s", teacher, class_name, day, period, conflict.class_name)
        raise TeacherConflict(teacher, conflict)

    updated = TimetableEntry(day, period, class_name, current.subject, teacher)
    timetable[index] = updated
    return updated


def edit_entry(
    timetable: List[TimetableEntry],
    day: str,
    period: int,
    class_name: str,
    subject: str,
    teacher: str,
    new_day: Optional[str] = None,
    new_period: Optional[int] = None,
    new_class: Optional[str] = None,
) -> TimetableEntry:
    """
    Form edit: change subject/teacher and optionally move the cell to another slot.
    Teacher clashes are checked at the target slot, then the target slot must be free.
    """
    index = _find_index(timetable, day, period, class_name)
    current = timetable[index]
    if current.is_lunch:
        raise LunchSlotLocked()

    target_day = new_day or day
    target_period = new_period if new_period is not None else period
    target_class = new_class or class_name

    conflict = find_teacher_conflict(timetable, target_day, target_period, teacher, origin=current.slot_key)
    if conflict is not None:
        raise TeacherConflict(teacher, conflict)

    target_key = (target_day, target_period, target_class)
    if target_key != current.slot_key and any(e.slot_key == target_key for e in timetable):
        raise ClassConflict(target_class)

    updated = TimetableEntry(target_day, target_period, target_class, subject, teacher)
    timetable[index] = updated
    return updated
