import random

import pytest

from models import ClassSection, ScheduleSettings, Subject, Teacher, TimetableEntry


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def settings():
    return ScheduleSettings(
        total_periods=4,
        working_days=["Monday", "Tuesday"],
        lunch_break_after=2,
        start_time="09:00",
        period_duration=45,
        lunch_break_duration=30,
    )


@pytest.fixture
def school():
    """A small school where some slots can't be covered."""
    teachers = [
        Teacher("Ada", "Math, Physics"),
        Teacher("Grace", "math"),
        Teacher("Alan", "English"),
        Teacher("Emmy", "Physics, Chemistry"),
    ]
    subjects = [Subject("Math", True), Subject("Physics"), Subject("English", True), Subject("Chemistry")]
    classes = [ClassSection("10", ["A", "B"]), ClassSection("11", ["A"])]
    return teachers, subjects, classes


@pytest.fixture
def monday_timetable():
    """Two classes, lunch at period 3 (lunch after 2)."""
    return [
        TimetableEntry("Monday", 1, "10 A", "Math", "Ada"),
        TimetableEntry("Monday", 1, "10 B", "English", "Alan"),
        TimetableEntry("Monday", 2, "10 A", "Physics", "Emmy"),
        TimetableEntry("Monday", 2, "10 B", "Math", "Unassigned"),
        TimetableEntry("Monday", 4, "10 A", "English", "Alan"),
        TimetableEntry("Monday", 4, "10 B", "Math", "Grace"),
        TimetableEntry("Monday", 3, "10 A", "Lunch Break", "N/A"),
        TimetableEntry("Monday", 3, "10 B", "Lunch Break", "N/A"),
    ]
