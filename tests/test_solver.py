import logging
import random
from collections import Counter

import pytest

from models import ClassSection, ScheduleSettings, Subject, Teacher, TimetableEntry, all_class_sections
from solver import (
    GenerationContext,
    TimetableInputError,
    WorkloadTracker,
    assign_slots,
    build_capability_index,
    generate_timetable,
    inject_lunch,
    repair_conflicts,
)


def _context(capability, teachers=(), seed=0):
    return GenerationContext(capability=capability, workload=WorkloadTracker(teachers), rng=random.Random(seed))


def test_capability_index_keeps_teacher_order(school):
    teachers, subjects, _ = school
    index = build_capability_index(teachers, subjects)
    assert index == {
        "Math": ["Ada", "Grace"],
        "Physics": ["Ada", "Emmy"],
        "English": ["Alan"],
        "Chemistry": ["Emmy"],
    }


def test_capability_index_allows_uncovered_subject():
    index = build_capability_index([Teacher("Ada", "Math")], [Subject("Art")])
    assert index == {"Art": []}


def test_workload_prefers_least_loaded_and_keeps_order_on_ties():
    tracker = WorkloadTracker(["Ada", "Grace", "Alan"])
    assert tracker.least_loaded(["Grace", "Ada"]) == "Grace"
    tracker.record("Grace")
    assert tracker.least_loaded(["Grace", "Ada"]) == "Ada"
    assert tracker["Grace"] == 1
    assert tracker["Nobody"] == 0


def test_end_to_end_single_class():
    timetable = generate_timetable(
        teachers=[Teacher("Ada", "Math")],
        subjects=[Subject("Math", True)],
        classes=[ClassSection("10", ["A"])],
        settings=ScheduleSettings(total_periods=2, working_days=["Monday"], lunch_break_after=1),
        rng=random.Random(0),
    )
    assert [e.to_dict() for e in timetable] == [
        {"day": "Monday", "period": 1, "class": "10 A", "subject": "Math", "teacher": "Ada"},
        {"day": "Monday", "period": 3, "class": "10 A", "subject": "Math", "teacher": "Ada"},
        {"day": "Monday", "period": 2, "class": "10 A", "subject": "Lunch Break", "teacher": "N/A"},
    ]


@pytest.mark.parametrize("seed", range(15))
def test_generated_timetable_properties(school, seed):
    teachers, subjects, classes = school
    settings = ScheduleSettings(total_periods=5, working_days=["Monday", "Tuesday", "Wednesday"], lunch_break_after=3)
    timetable = generate_timetable(teachers, subjects, classes, settings, rng=random.Random(seed))

    # no teacher in two rooms at once
    booked = Counter((e.day, e.period, e.teacher) for e in timetable if e.teacher not in ("Unassigned", "N/A"))
    assert max(booked.values()) == 1

    # exactly one entry per slot, lunch included
    slots = Counter(e.slot_key for e in timetable)
    expected = {
        (day, p, c)
        for day in settings.working_days
        for c in all_class_sections(classes)
        for p in range(1, settings.total_periods + 2)
    }
    assert set(slots) == expected
    assert set(slots.values()) == {1}

    # lunch lives at lunch_after + 1
    for e in timetable:
        assert e.is_lunch == (e.period == 4)
        if e.is_lunch:
            assert e.teacher == "N/A"

    # assigned teachers are qualified
    index = build_capability_index(teachers, subjects)
    for e in timetable:
        if not e.is_lunch and not e.is_shortage:
            assert e.teacher in index[e.subject]


def test_same_seed_same_timetable(school, settings):
    teachers, subjects, classes = school
    first = generate_timetable(teachers, subjects, classes, settings, rng=random.Random(42))
    second = generate_timetable(teachers, subjects, classes, settings, rng=random.Random(42))
    assert first == second


def test_subjects_not_repeated_until_all_used():
    teachers = [Teacher("Ada", "Math"), Teacher("Alan", "English"), Teacher("Emmy", "Physics")]
    subjects = [Subject("Math"), Subject("English"), Subject("Physics")]
    settings = ScheduleSettings(total_periods=3, working_days=["Monday"], lunch_break_after=3)
    timetable = generate_timetable(teachers, subjects, [ClassSection("10", ["A"])], settings, rng=random.Random(3))
    taught = sorted(e.subject for e in timetable if not e.is_lunch)
    assert taught == ["English", "Math", "Physics"]


def test_shortage_when_no_teacher_can_teach():
    context = _context({"Math": []})
    timetable = assign_slots(["Math"], ["10 A", "10 B"], ["Monday"], 1, 1, context)
    assert [(e.class_name, e.subject, e.teacher) for e in timetable] == [
        ("10 A", "Math", "Unassigned"),
        ("10 B", "Math", "Unassigned"),
    ]


def test_shortage_when_teachers_cannot_teach_subject():
    timetable = generate_timetable(
        teachers=[Teacher("Alan", "English")],
        subjects=[Subject("Math", True)],
        classes=[ClassSection("10", ["A", "B"])],
        settings=ScheduleSettings(total_periods=1, working_days=["Monday"], lunch_break_after=1),
        rng=random.Random(0),
    )
    teaching = [e for e in timetable if not e.is_lunch]
    assert [e.teacher for e in teaching] == ["Unassigned", "Unassigned"]


def test_shortage_uses_first_subject_as_label():
    # Ada is busy in 10 A, so 10 B gets the fallback label, not the subject tried
    context = _context({"Art": [], "Math": ["Ada"]}, ["Ada"])
    timetable = assign_slots(["Art", "Math"], ["10 A", "10 B"], ["Monday"], 1, 1, context)
    assert (timetable[0].subject, timetable[0].teacher) == ("Math", "Ada")
    assert (timetable[1].subject, timetable[1].teacher) == ("Art", "Unassigned")


def test_one_teacher_two_classes_never_double_booked():
    context = _context({"Math": ["Ada"]}, ["Ada"])
    timetable = assign_slots(["Math"], ["10 A", "10 B"], ["Monday"], 2, 2, context)
    per_period = Counter(e.period for e in timetable if e.teacher == "Ada")
    assert per_period == {1: 1, 2: 1}
    assert context.workload["Ada"] == 2


def test_empty_subject_list_falls_back_to_not_applicable():
    context = _context({})
    timetable = assign_slots([], ["10 A"], ["Monday"], 1, 0, context)
    assert timetable == [TimetableEntry("Monday", 2, "10 A", "N/A", "Unassigned")]


def test_repair_keeps_first_booking_and_is_idempotent(caplog):
    timetable = [
        TimetableEntry("Monday", 1, "10 A", "Math", "Ada"),
        TimetableEntry("Monday", 1, "10 B", "Math", "Ada"),
        TimetableEntry("Monday", 1, "10 C", "Math", "Unassigned"),
        TimetableEntry("Monday", 1, "10 D", "Math", "Unassigned"),
        TimetableEntry("Monday", 2, "10 A", "Lunch Break", "N/A"),
        TimetableEntry("Monday", 2, "10 B", "Lunch Break", "N/A"),
        TimetableEntry("Tuesday", 1, "10 B", "Math", "Ada"),
    ]
    with caplog.at_level(logging.WARNING, logger="solver"):
        assert repair_conflicts(timetable) == 1
    assert "Double booking" in caplog.text
    assert timetable[0].teacher == "Ada"
    assert timetable[1].teacher == "Unassigned"
    assert timetable[6].teacher == "Ada"

    snapshot = [e.to_dict() for e in timetable]
    assert repair_conflicts(timetable) == 0
    assert [e.to_dict() for e in timetable] == snapshot


def test_inject_lunch_appends_one_per_class_and_day():
    timetable = []
    inject_lunch(timetable, ["10 A", "10 B"], ["Monday", "Tuesday"], 0)
    assert len(timetable) == 4
    assert all(e.period == 1 and e.subject == "Lunch Break" and e.teacher == "N/A" for e in timetable)


def test_lunch_after_zero_puts_lunch_first(school):
    teachers, subjects, classes = school
    settings = ScheduleSettings(total_periods=2, working_days=["Monday"], lunch_break_after=0)
    timetable = generate_timetable(teachers, subjects, classes, settings, rng=random.Random(5))
    assert {e.period for e in timetable if e.is_lunch} == {1}
    assert {e.period for e in timetable if not e.is_lunch} == {2, 3}


@pytest.mark.parametrize("missing, kwargs", [
    ("classes", {"classes": []}),
    ("classes", {"classes": [ClassSection("10", [])]}),
    ("teachers", {"teachers": []}),
    ("subjects", {"subjects": []}),
    ("settings", {"settings": None}),
    ("settings", {"settings": ScheduleSettings(total_periods=0, working_days=["Monday"], lunch_break_after=0)}),
    ("settings", {"settings": ScheduleSettings(total_periods=3, working_days=[], lunch_break_after=1)}),
    ("settings", {"settings": ScheduleSettings(total_periods=3, working_days=["Monday"], lunch_break_after=4)}),
    ("settings", {"settings": ScheduleSettings(total_periods=3, working_days=["Monday"], lunch_break_after=-1)}),
])
def test_incomplete_input_is_rejected(school, settings, missing, kwargs):
    teachers, subjects, classes = school
    args = {"teachers": teachers, "subjects": subjects, "classes": classes, "settings": settings}
    args.update(kwargs)
    with pytest.raises(TimetableInputError) as exc:
        generate_timetable(**args)
    assert exc.value.missing == missing
    assert isinstance(exc.value, ValueError)
