"""
🧠 TIMETABLE GENERATOR — Baby-level explanation
===============================================
This fills every (day, class, period) box with a subject and a teacher.
It is a greedy helper, not a perfect solver:

1. Find out who can teach what (the capability index).
2. Walk the week box by box. Try subjects the class hasn't had today first,
   pick a free teacher who can teach it; the least busy one wins.
3. Nobody free? Write "Unassigned" so the school can see the gap.
4. Sweep the result once more: a teacher in two rooms at once keeps only
   the first booking.
5. Drop a "Lunch Break" box into every class's day.

Rules:
- A teacher can't be in two places at once.
- Every class has something in every period.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from models import (
    ClassSection,
    LUNCH_BREAK,
    NOT_APPLICABLE,
    ScheduleSettings,
    Subject,
    Teacher,
    TimetableEntry,
    UNASSIGNED,
    all_class_sections,
    physical_period,
)

logger = logging.getLogger(__name__)


class TimetableInputError(ValueError):
    """Generation inputs are missing or incomplete. Nothing was generated."""

    def __init__(self, missing: str, message: str):
        super().__init__(message)
        self.missing = missing


# ---------------------------------------------------------------------------
# CAPABILITY INDEX + WORKLOAD
# ---------------------------------------------------------------------------


def build_capability_index(teachers: List[Teacher], subjects: List[Subject]) -> Dict[str, List[str]]:
    """
    Maps subject -> teachers who can teach it, in teacher-list order.
    Like a lookup table: "Who can teach Math?" -> ["Ada", "Grace"]
    A subject nobody teaches maps to an empty list.
    """
    return {
        s.name: [t.name for t in teachers if t.can_teach(s.name)]
        for s in subjects
    }


class WorkloadTracker:
    """Periods assigned per teacher in the current run. Used to prefer the least busy."""

    def __init__(self, teacher_names: Iterable[str]):
        self.counts: Dict[str, int] = {name: 0 for name in teacher_names}

    def record(self, teacher: str) -> None:
        self.counts[teacher] = self.counts.get(teacher, 0) + 1

    def least_loaded(self, candidates: List[str]) -> str:
        # min() keeps the first of equal counts, so ties follow candidate order
        return min(candidates, key=lambda t: self.counts.get(t, 0))

    def __getitem__(self, teacher: str) -> int:
        return self.counts.get(teacher, 0)


@dataclass
class GenerationContext:
    """Everything one generation run mutates. One context per run, never shared."""

    capability: Dict[str, List[str]]
    workload: WorkloadTracker
    rng: random.Random = field(default_factory=random.Random)
    occupied: Set[Tuple[str, str, int]] = field(default_factory=set)

    def is_free(self, teacher: str, day: str, period: int) -> bool:
        return (teacher, day, period) not in self.occupied

    def occupy(self, teacher: str, day: str, period: int) -> None:
        self.occupied.add((teacher, day, period))

    def shuffled(self, items: Iterable[str]) -> List[str]:
        items = list(items)
        return self.rng.sample(items, len(items))


# ---------------------------------------------------------------------------
# SLOT ASSIGNMENT
# ---------------------------------------------------------------------------


def _fill_slot(
    context: GenerationContext,
    day: str,
    period: int,
    class_name: str,
    candidates: List[str],
) -> Optional[TimetableEntry]:
    """Try candidate subjects in order; book the least loaded free teacher of the first that has one."""
    for subject in candidates:
        teachers = context.shuffled(context.capability.get(subject, []))
        available = [t for t in teachers if context.is_free(t, day, period)]
        if not available:
            continue
        teacher = context.workload.least_loaded(available)
        context.occupy(teacher, day, period)
        context.workload.record(teacher)
        return TimetableEntry(day, period, class_name, subject, teacher)
    return None


def assign_slots(
    subject_names: List[str],
    class_sections: List[str],
    days: List[str],
    total_periods: int,
    lunch_after: int,
    context: GenerationContext,
) -> List[TimetableEntry]:
    """
    One entry per (day, class, teaching period), in day -> class -> period order.
    Lunch slots are skipped here (see inject_lunch).
    """
    # Shortage cells always show the first subject of the list, whatever was tried
    fallback_subject = subject_names[0] if subject_names else NOT_APPLICABLE
    timetable: List[TimetableEntry] = []

    for day in days:
        for class_name in class_sections:
            class_subjects = context.shuffled(subject_names)
            used_today: Set[str] = set()

            for logical in range(1, total_periods + 1):
                period = physical_period(logical, lunch_after)
                candidates = context.shuffled(s for s in class_subjects if s not in used_today)
                if not candidates:
                    candidates = context.shuffled(class_subjects)

                entry = _fill_slot(context, day, period, class_name, candidates)
                if entry is None:
                    logger.debug("No free teacher for %s on %s period %d", class_name, day, period)
                    entry = TimetableEntry(day, period, class_name, fallback_subject, UNASSIGNED)
                else:
                    used_today.add(entry.subject)
                timetable.append(entry)

    return timetable


# ---------------------------------------------------------------------------
# REPAIR + LUNCH
# ---------------------------------------------------------------------------


def repair_conflicts(timetable: List[TimetableEntry]) -> int:
    """
    Keep the first booking of each (teacher, day, period); later ones become Unassigned.
    Returns how many entries were demoted. Running it again changes nothing.
    """
    seen: Set[Tuple[str, str, int]] = set()
    demoted = 0
    for entry in timetable:
        if entry.is_lunch or entry.teacher in (UNASSIGNED, NOT_APPLICABLE):
            continue
        key = (entry.teacher, entry.day, entry.period)
        if key not in seen:
            seen.add(key)
            continue
        logger.warning(
            "Double booking: %s already teaches on %s period %d; unassigning %s",
            entry.teacher, entry.day, entry.period, entry.class_name,
        )
        entry.teacher = UNASSIGNED
        demoted += 1
    return demoted


def inject_lunch(
    timetable: List[TimetableEntry],
    class_sections: List[str],
    days: List[str],
    lunch_after: int,
) -> None:
    """Append one Lunch Break entry per (day, class) at period lunch_after + 1."""
    for day in days:
        for class_name in class_sections:
            timetable.append(TimetableEntry(day, lunch_after + 1, class_name, LUNCH_BREAK, NOT_APPLICABLE))


# ---------------------------------------------------------------------------
# PIPELINE
# ---------------------------------------------------------------------------


def validate_inputs(
    teachers: List[Teacher],
    subjects: List[Subject],
    classes: List[ClassSection],
    settings: Optional[ScheduleSettings],
) -> None:
    """Raise TimetableInputError naming the first missing category."""
    if not all_class_sections(classes):
        raise TimetableInputError("classes", "Cannot generate timetable. Add at least one class with a section.")
    if not teachers:
        raise TimetableInputError("teachers", "Cannot generate timetable. Add teacher data first.")
    if not subjects:
        raise TimetableInputError("subjects", "No subjects defined. Please add subjects.")
    if settings is None:
        raise TimetableInputError("settings", "Schedule settings are missing. Please set Timing and Days.")
    if settings.total_periods < 1 or not settings.working_days:
        raise TimetableInputError("settings", "Schedule settings are incomplete. Please check Timing and Days.")
    if not 0 <= settings.lunch_break_after <= settings.total_periods:
        raise TimetableInputError(
            "settings",
            f"Lunch break must come after period 0..{settings.total_periods}, got {settings.lunch_break_after}.",
        )


def generate_timetable(
    teachers: List[Teacher],
    subjects: List[Subject],
    classes: List[ClassSection],
    settings: Optional[ScheduleSettings],
    rng: Optional[random.Random] = None,
) -> List[TimetableEntry]:
    """
    Builds a whole new timetable. Returns the complete list, or raises
    TimetableInputError before doing any work.
    Pass a seeded random.Random for repeatable output.
    """
    validate_inputs(teachers, subjects, classes, settings)

    class_sections = all_class_sections(classes)
    days = list(settings.working_days)
    lunch_after = settings.lunch_break_after

    context = GenerationContext(
        capability=build_capability_index(teachers, subjects),
        workload=WorkloadTracker(t.name for t in teachers),
        rng=rng or random.Random(),
    )
    uncovered = [name for name, able in context.capability.items() if not able]
    if uncovered:
        logger.info("Subjects with no qualified teacher: %s", ", ".join(uncovered))

    timetable = assign_slots(
        [s.name for s in subjects],
        class_sections,
        days,
        settings.total_periods,
        lunch_after,
        context,
    )
    repaired = repair_conflicts(timetable)
    inject_lunch(timetable, class_sections, days, lunch_after)

    shortages = sum(1 for e in timetable if e.is_shortage)
    logger.info(
        "Generated %d entries for %d classes x %d days x %d periods (%d unassigned, %d repaired)",
        len(timetable), len(class_sections), len(days), settings.total_periods, shortages, repaired,
    )
    return timetable
