import pytest

from editing import TeacherConflict
from models import TimetableEntry
from scenarios import Arrangement
from solver import build_capability_index


def test_arrangement_never_touches_the_saved_timetable(monday_timetable):
    arrangement = Arrangement(monday_timetable, "Monday")
    arrangement.assign_teacher(4, "10 A", "Ada")
    assert arrangement.entry_for_class("10 A", 4).teacher == "Ada"
    assert monday_timetable[4].teacher == "Alan"


def test_toggle_and_search_present_teachers(monday_timetable):
    arrangement = Arrangement(monday_timetable, "Monday")
    everyone = ["Ada", "Alan", "Emmy", "Grace"]
    assert arrangement.toggle_absent("Alan") is True
    assert arrangement.present_teachers(everyone) == ["Ada", "Emmy", "Grace"]
    assert arrangement.present_teachers(everyone, "a") == ["Ada", "Grace"]
    assert arrangement.toggle_absent("Alan") is False
    assert "Alan" in arrangement.present_teachers(everyone)


def test_lookups_are_scoped_to_selected_day(monday_timetable):
    arrangement = Arrangement(monday_timetable + [TimetableEntry("Tuesday", 1, "10 A", "Math", "Grace")], "Monday")
    assert arrangement.entry_for_teacher("Grace", 4).class_name == "10 B"
    assert arrangement.entry_for_teacher("Grace", 1) is None
    arrangement.select_day("Tuesday")
    assert arrangement.entry_for_class("10 A", 1).teacher == "Grace"


def test_uncovered_entries_include_absent_and_unassigned(monday_timetable):
    arrangement = Arrangement(monday_timetable, "Monday")
    arrangement.toggle_absent("Alan")
    uncovered = [(e.class_name, e.period) for e in arrangement.uncovered_entries()]
    assert uncovered == [("10 B", 1), ("10 B", 2), ("10 A", 4)]


def test_substitutes_are_qualified_present_and_free(school, monday_timetable):
    teachers, subjects, _ = school
    capability = build_capability_index(teachers, subjects)
    arrangement = Arrangement(monday_timetable, "Monday")

    gap = arrangement.entry_for_class("10 B", 2)
    assert arrangement.suggest_substitutes(capability, gap) == ["Ada", "Grace"]
    arrangement.toggle_absent("Grace")
    assert arrangement.suggest_substitutes(capability, gap) == ["Ada"]

    arrangement.assign_teacher(2, "10 B", "Ada")
    assert arrangement.entry_for_class("10 B", 2).teacher == "Ada"


def test_arrangement_edits_use_the_conflict_guard(monday_timetable):
    arrangement = Arrangement(monday_timetable, "Monday")
    with pytest.raises(TeacherConflict):
        arrangement.assign_teacher(1, "10 B", "Ada")
    with pytest.raises(TeacherConflict):
        arrangement.edit_cell(2, "10 B", "Physics", "Emmy")
    updated = arrangement.edit_cell(2, "10 B", "Chemistry", "Ada")
    assert (updated.subject, updated.teacher) == ("Chemistry", "Ada")
