"""
🧪 DAILY ARRANGEMENT
====================
Today's stand-in plan: mark teachers absent, drop present teachers onto the
gaps. Works on a copy of the saved timetable and never writes back.
Base → Arrangement copy → Live view / export
"""

import copy
import logging
from typing import Dict, List, Optional, Set

from editing import assign_teacher, edit_entry
from models import TimetableEntry, UNASSIGNED

logger = logging.getLogger(__name__)


class Arrangement:
    """
    Session-only editor for one day of the timetable.
    The same conflict guard as the persisted editor applies, but across the
    whole copied week so a day switch keeps earlier changes.
    """

    def __init__(self, base_timetable: List[TimetableEntry], day: str):
        self.timetable: List[TimetableEntry] = copy.deepcopy(base_timetable)
        self.day = day
        self.absent: Set[str] = set()

    def select_day(self, day: str) -> None:
        self.day = day

    def toggle_absent(self, teacher: str) -> bool:
        """Flip a teacher between present and absent. Returns True if now absent."""
        if teacher in self.absent:
            self.absent.discard(teacher)
            return False
        self.absent.add(teacher)
        return True

    def present_teachers(self, all_teachers: List[str], search: str = "") -> List[str]:
        """Teachers not marked absent, optionally filtered by a case-insensitive substring."""
        term = search.strip().lower()
        return [t for t in all_teachers if t not in self.absent and term in t.lower()]

    def day_entries(self) -> List[TimetableEntry]:
        return [e for e in self.timetable if e.day == self.day]

    def entry_for_class(self, class_name: str, period: int) -> Optional[TimetableEntry]:
        for e in self.day_entries():
            if e.class_name == class_name and e.period == period:
                return e
        return None

    def entry_for_teacher(self, teacher: str, period: int) -> Optional[TimetableEntry]:
        for e in self.day_entries():
            if e.teacher == teacher and e.period == period:
                return e
        return None

    # ------------------------------------------------------------------
    # EDITS (go through the conflict guard)
    # ------------------------------------------------------------------

    def assign_teacher(self, period: int, class_name: str, teacher: str) -> TimetableEntry:
        entry = assign_teacher(self.timetable, self.day, period, class_name, teacher)
        logger.debug("Arrangement: %s covers %s on %s period %d", teacher, class_name, self.day, period)
        return entry

    def edit_cell(self, period: int, class_name: str, subject: str, teacher: str) -> TimetableEntry:
        return edit_entry(self.timetable, self.day, period, class_name, subject, teacher)

    # ------------------------------------------------------------------
    # COVER HELPERS
    # ------------------------------------------------------------------

    def uncovered_entries(self) -> List[TimetableEntry]:
        """Today's teaching cells with an absent or missing teacher."""
        return [
            e for e in self.day_entries()
            if not e.is_lunch and (e.teacher == UNASSIGNED or e.teacher in self.absent)
        ]

    def suggest_substitutes(self, capability_index: Dict[str, List[str]], entry: TimetableEntry) -> List[str]:
        """Present teachers qualified for the entry's subject and free in its period."""
        busy = {e.teacher for e in self.day_entries() if e.period == entry.period}
        return [
            t for t in capability_index.get(entry.subject, [])
            if t not in self.absent and t not in busy
        ]
