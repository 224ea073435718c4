import logging
from io import BytesIO

import pandas as pd
import pytest

import storage
from models import ClassSection, ScheduleSettings, Subject, Teacher, TimetableEntry


@pytest.fixture(autouse=True)
def data_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(storage, "DATA_DIR", tmp_path)
    return tmp_path


def test_missing_files_load_empty():
    assert storage.load_teachers("s1") == []
    assert storage.load_subjects("s1") == []
    assert storage.load_classes("s1") == []
    assert storage.load_settings("s1") is None
    assert storage.load_timetable("s1") == []
    assert storage.load_school_name("s1") == ""


def test_round_trips(settings):
    teachers = [Teacher("Ada", "Math, Physics"), Teacher("Grace", "Math")]
    subjects = [Subject("Math", True), Subject("Art")]
    classes = [ClassSection("10", ["A", "B"])]
    timetable = [TimetableEntry("Monday", 1, "10 A", "Math", "Ada")]

    storage.save_school_name("s1", " Greenfield High ")
    storage.save_teachers("s1", teachers)
    storage.save_subjects("s1", subjects)
    storage.save_classes("s1", classes)
    storage.save_settings("s1", settings)
    storage.save_timetable("s1", timetable)

    assert storage.load_school_name("s1") == "Greenfield High"
    assert storage.load_teachers("s1") == teachers
    assert storage.load_subjects("s1") == subjects
    assert storage.load_classes("s1") == classes
    assert storage.load_settings("s1") == settings
    assert storage.load_timetable("s1") == timetable


def test_schools_are_kept_apart(data_dir):
    storage.save_teachers("s1", [Teacher("Ada", "Math")])
    assert storage.load_teachers("s2") == []
    assert storage.list_schools() == ["s1", "s2"]
    assert (data_dir / "s1" / storage.TEACHERS_FILE).exists()


def test_corrupt_file_is_logged_and_ignored(data_dir, caplog):
    (data_dir / "s1").mkdir()
    (data_dir / "s1" / storage.TIMETABLE_FILE).write_text("{not json", encoding="utf-8")
    with caplog.at_level(logging.WARNING, logger="storage"):
        assert storage.load_timetable("s1") == []
    assert "unreadable" in caplog.text


def test_malformed_records_load_empty(data_dir):
    (data_dir / "s1").mkdir()
    (data_dir / "s1" / storage.TEACHERS_FILE).write_text('[{"Subjects": "Math"}]', encoding="utf-8")
    assert storage.load_teachers("s1") == []


def test_clear_timetable():
    storage.save_timetable("s1", [TimetableEntry("Monday", 1, "10 A", "Math", "Ada")])
    storage.clear_timetable("s1")
    assert storage.load_timetable("s1") == []


@pytest.mark.parametrize("bad", ["", "  ", "../etc", "a/b", ".."])
def test_invalid_school_id(bad):
    with pytest.raises(ValueError):
        storage.load_teachers(bad)


def test_template_workbook_can_be_uploaded():
    teachers = storage.read_teacher_workbook(BytesIO(storage.teacher_template_bytes()))
    assert teachers == [
        Teacher("Dr. Alan Grant", "Paleontology, Geology"),
        Teacher("Dr. Ellie Sattler", "Paleobotany"),
    ]


def test_upload_blank_cells_become_empty_strings():
    buffer = BytesIO()
    pd.DataFrame([{"Name": "Ada", "Subjects": None}]).to_excel(buffer, index=False)
    assert storage.read_teacher_workbook(BytesIO(buffer.getvalue())) == [Teacher("Ada", "")]


@pytest.mark.parametrize("frame", [
    pd.DataFrame(columns=["Name", "Subjects"]),
    pd.DataFrame([{"Teacher": "Ada", "Subjects": "Math"}]),
])
def test_unusable_workbook_is_rejected(frame):
    buffer = BytesIO()
    frame.to_excel(buffer, index=False)
    with pytest.raises(ValueError, match="empty or in the wrong format"):
        storage.read_teacher_workbook(BytesIO(buffer.getvalue()))
