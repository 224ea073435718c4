"""
🧠 STORAGE — File-based persistence
===================================
All data saved to disk, one folder per school. Refresh → everything still there.

data/
  <school_id>/
    school.json      name shown on exports
    teachers.json
    subjects.json
    classes.json
    settings.json
    timetable.json   the saved (generated + edited) timetable

Every save replaces the whole file. A missing or broken file loads as empty.
"""

import json
import logging
import os
import re
from io import BytesIO
from pathlib import Path
from typing import Any, List, Optional

import pandas as pd

from models import ClassSection, ScheduleSettings, Subject, Teacher, TimetableEntry

logger = logging.getLogger(__name__)

DATA_DIR = Path(os.environ.get("TIMETABLE_DATA_DIR") or Path(__file__).parent / "data")

SCHOOL_FILE = "school.json"
TEACHERS_FILE = "teachers.json"
SUBJECTS_FILE = "subjects.json"
CLASSES_FILE = "classes.json"
SETTINGS_FILE = "settings.json"
TIMETABLE_FILE = "timetable.json"

_SCHOOL_ID_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


def _school_dir(school_id: str) -> Path:
    """Folder for one school. Created on first use."""
    school_id = (school_id or "").strip()
    if not _SCHOOL_ID_RE.match(school_id) or school_id in (".", ".."):
        raise ValueError(f"Invalid school ID: {school_id!r}")
    path = DATA_DIR / school_id
    path.mkdir(parents=True, exist_ok=True)
    return path


def _read(school_id: str, filename: str) -> Optional[Any]:
    """Parsed JSON, or None when the file is missing or unreadable."""
    path = _school_dir(school_id) / filename
    if not path.exists():
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable %s for school %s: %s", filename, school_id, e)
        return None


def _write(school_id: str, filename: str, data: Any) -> None:
    path = _school_dir(school_id) / filename
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def list_schools() -> List[str]:
    """School IDs that already have a data folder."""
    if not DATA_DIR.exists():
        return []
    return sorted(p.name for p in DATA_DIR.iterdir() if p.is_dir())


# ---------------------------------------------------------------------------
# SCHOOL PROFILE
# ---------------------------------------------------------------------------


def load_school_name(school_id: str) -> str:
    data = _read(school_id, SCHOOL_FILE)
    if isinstance(data, dict):
        return str(data.get("name") or "")
    return ""


def save_school_name(school_id: str, name: str) -> None:
    _write(school_id, SCHOOL_FILE, {"name": name.strip()})


# ---------------------------------------------------------------------------
# TEACHERS / SUBJECTS / CLASSES
# ---------------------------------------------------------------------------


def load_teachers(school_id: str) -> List[Teacher]:
    """Load all teachers. Returns empty list if the file doesn't exist or is broken."""
    data = _read(school_id, TEACHERS_FILE)
    if not isinstance(data, list):
        return []
    try:
        return [Teacher(name=str(d["Name"]), subjects=str(d.get("Subjects", ""))) for d in data]
    except (KeyError, TypeError) as e:
        logger.warning("Teacher data for %s is malformed: %s", school_id, e)
        return []


def save_teachers(school_id: str, teachers: List[Teacher]) -> None:
    _write(school_id, TEACHERS_FILE, [{"Name": t.name, "Subjects": t.subjects} for t in teachers])


def load_subjects(school_id: str) -> List[Subject]:
    data = _read(school_id, SUBJECTS_FILE)
    if not isinstance(data, list):
        return []
    try:
        return [Subject(name=str(d["name"]), mandatory=bool(d.get("mandatory", False))) for d in data]
    except (KeyError, TypeError) as e:
        logger.warning("Subject data for %s is malformed: %s", school_id, e)
        return []


def save_subjects(school_id: str, subjects: List[Subject]) -> None:
    _write(school_id, SUBJECTS_FILE, [{"name": s.name, "mandatory": s.mandatory} for s in subjects])


def load_classes(school_id: str) -> List[ClassSection]:
    data = _read(school_id, CLASSES_FILE)
    if not isinstance(data, list):
        return []
    try:
        return [ClassSection(name=str(d["name"]), sections=[str(s) for s in d.get("sections", [])]) for d in data]
    except (KeyError, TypeError) as e:
        logger.warning("Class data for %s is malformed: %s", school_id, e)
        return []


def save_classes(school_id: str, classes: List[ClassSection]) -> None:
    _write(school_id, CLASSES_FILE, [{"name": c.name, "sections": list(c.sections)} for c in classes])


# ---------------------------------------------------------------------------
# SETTINGS + TIMETABLE
# ---------------------------------------------------------------------------


def load_settings(school_id: str) -> Optional[ScheduleSettings]:
    """None until the school has saved its timing and days."""
    data = _read(school_id, SETTINGS_FILE)
    if not isinstance(data, dict):
        return None
    return ScheduleSettings.from_dict(data)


def save_settings(school_id: str, settings: ScheduleSettings) -> None:
    _write(school_id, SETTINGS_FILE, settings.to_dict())


def load_timetable(school_id: str) -> List[TimetableEntry]:
    data = _read(school_id, TIMETABLE_FILE)
    if not isinstance(data, list):
        return []
    try:
        return [TimetableEntry.from_dict(d) for d in data]
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Timetable for %s is malformed: %s", school_id, e)
        return []


def save_timetable(school_id: str, timetable: List[TimetableEntry]) -> None:
    """Replace the saved timetable with `timetable`. Call only with a complete one."""
    _write(school_id, TIMETABLE_FILE, [e.to_dict() for e in timetable])


def clear_timetable(school_id: str) -> None:
    path = _school_dir(school_id) / TIMETABLE_FILE
    if path.exists():
        path.unlink()


# ---------------------------------------------------------------------------
# TEACHER UPLOAD (Excel)
# ---------------------------------------------------------------------------

TEMPLATE_ROWS = [
    {"Name": "Dr. Alan Grant", "Subjects": "Paleontology, Geology"},
    {"Name": "Dr. Ellie Sattler", "Subjects": "Paleobotany"},
]


def read_teacher_workbook(source) -> List[Teacher]:
    """
    First sheet, columns Name and Subjects. `source` is a path or file-like
    object (st.file_uploader gives the latter). Blank cells become "".
    """
    df = pd.read_excel(source, sheet_name=0, dtype=str)
    if df.empty or "Name" not in df.columns:
        raise ValueError("The Excel file seems to be empty or in the wrong format.")
    df = df.fillna("")
    teachers = []
    for _, row in df.iterrows():
        teachers.append(Teacher(name=str(row.get("Name", "")).strip(), subjects=str(row.get("Subjects", "")).strip()))
    logger.info("Read %d teachers from workbook", len(teachers))
    return teachers


def teacher_template_bytes() -> bytes:
    """Example workbook users can fill in and upload."""
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        pd.DataFrame(TEMPLATE_ROWS, columns=["Name", "Subjects"]).to_excel(writer, sheet_name="Teachers", index=False)
    return buffer.getvalue()
