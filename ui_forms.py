"""
🧠 UI FORMS — st.form() to prevent screen jump while typing
==========================================================
Forms batch inputs: no rerun until Submit. Layout stays fixed.
Each form only collects values and hands them to an on_save callback;
validation messages come from models.py so the rules live in one place.
"""

from typing import Callable, List, Optional

import streamlit as st

from models import (
    DAY_ORDER,
    ScheduleSettings,
    TimetableEntry,
    UNASSIGNED,
    teacher_error,
)


def _form_key(kind: str, editing_index: Optional[int], prefix: str = "main") -> str:
    """Unique key per mode + tab. Never shared with widget-backed keys."""
    if editing_index is None:
        return f"{kind}_{prefix}_add"
    return f"{kind}_{prefix}_edit_{editing_index}"


def render_teacher_form(
    editing_index: Optional[int],
    form_data: dict,
    on_save: Callable[[str, str], None],
    on_cancel: Callable[[], None],
    prefix: str = "main",
) -> None:
    """
    Name + comma-separated subjects, inside st.form(). No reruns while typing.
    form_data comes from the edit buffer, never from widget keys.
    """
    key = _form_key("teacher_form", editing_index, prefix)

    with st.form(key, clear_on_submit=True):
        name = st.text_input("Name", value=form_data.get("name", ""), key=f"{key}_name", placeholder="e.g. Ada Lovelace")
        subjects = st.text_input(
            "Subjects (comma-separated)",
            value=form_data.get("subjects", ""),
            key=f"{key}_subjects",
            placeholder="Math, Physics",
        )
        col_add, col_cancel = st.columns(2)
        with col_add:
            submitted = st.form_submit_button("Update Teacher" if editing_index is not None else "Add Teacher")
        with col_cancel:
            cancel_clicked = st.form_submit_button("Cancel") if editing_index is not None else False

    if cancel_clicked:
        on_cancel()
        return
    if submitted:
        error = teacher_error(name, subjects)
        if error:
            st.error(error)
            return
        on_save(name.strip(), subjects.strip())


def render_subject_form(
    editing_index: Optional[int],
    form_data: dict,
    on_save: Callable[[str, bool], None],
    on_cancel: Callable[[], None],
    prefix: str = "main",
) -> None:
    """Same Add/Update/Cancel flow as the teacher form."""
    key = _form_key("subject_form", editing_index, prefix)

    with st.form(key, clear_on_submit=True):
        name = st.text_input("Subject name", value=form_data.get("name", ""), key=f"{key}_name", placeholder="e.g. Mathematics")
        mandatory = st.checkbox("Mandatory", value=form_data.get("mandatory", False), key=f"{key}_mandatory")
        col_add, col_cancel = st.columns(2)
        with col_add:
            submitted = st.form_submit_button("Update Subject" if editing_index is not None else "Add Subject")
        with col_cancel:
            cancel_clicked = st.form_submit_button("Cancel") if editing_index is not None else False

    if cancel_clicked:
        on_cancel()
        return
    if submitted:
        on_save(name, mandatory)


def render_class_form(on_save: Callable[[str, List[str]], None], prefix: str = "main") -> None:
    """Class name plus its sections, e.g. "10" with "A, B, C"."""
    with st.form(_form_key("class_form", None, prefix), clear_on_submit=True):
        name = st.text_input("Class name", placeholder="e.g. 10")
        sections = st.text_input("Sections (comma-separated)", placeholder="A, B, C")
        if st.form_submit_button("Add Class"):
            on_save(name, [s.strip() for s in sections.split(",")])


def render_settings_form(
    current: Optional[ScheduleSettings],
    on_save: Callable[[ScheduleSettings], None],
) -> None:
    """Timing and working days for the whole school."""
    current = current or ScheduleSettings(total_periods=8, working_days=DAY_ORDER[:5], lunch_break_after=4)
    known_days = DAY_ORDER + [d for d in current.working_days if d not in DAY_ORDER]

    with st.form("settings_form", clear_on_submit=False):
        c1, c2, c3 = st.columns(3)
        with c1:
            total = st.number_input("Total periods", min_value=1, max_value=15, value=max(current.total_periods, 1))
            start = st.text_input("Start time (HH:MM)", value=current.start_time or "09:00")
        with c2:
            duration = st.number_input("Period duration (min)", min_value=1, max_value=180, value=current.period_duration or 45)
            lunch_after = st.number_input("Lunch break after period", min_value=0, max_value=15, value=max(current.lunch_break_after, 0))
        with c3:
            lunch_duration = st.number_input("Lunch duration (min)", min_value=1, max_value=180, value=current.lunch_break_duration or 30)
        days = st.multiselect("Working days", known_days, default=[d for d in current.working_days if d in known_days])
        extra = st.text_input("Extra day names (comma-separated)", placeholder="e.g. Activity Day")

        if st.form_submit_button("Save Settings"):
            extra_days = [d.strip() for d in extra.split(",") if d.strip() and d.strip() not in days]
            on_save(ScheduleSettings(
                total_periods=int(total),
                working_days=list(days) + extra_days,
                lunch_break_after=int(lunch_after),
                start_time=start.strip(),
                period_duration=int(duration),
                lunch_break_duration=int(lunch_duration),
            ))


def render_cell_edit_form(
    entry: TimetableEntry,
    subjects: List[str],
    teachers: List[str],
    on_save: Callable[..., None],
    days: Optional[List[str]] = None,
    periods: Optional[List[int]] = None,
    classes: Optional[List[str]] = None,
    period_label: Callable[[int], str] = str,
    prefix: str = "main",
) -> None:
    """
    Change one cell's subject and teacher. Passing days/periods/classes also
    lets the cell move to another slot (the persisted editor does this).
    """
    subject_options = subjects if entry.subject in subjects else [entry.subject] + subjects
    teacher_options = [UNASSIGNED] + [t for t in teachers if t != UNASSIGNED]
    if entry.teacher not in teacher_options:
        teacher_options.append(entry.teacher)

    with st.form(f"cell_form_{prefix}", clear_on_submit=False):
        subject = st.selectbox("Subject", subject_options, index=subject_options.index(entry.subject))
        teacher = st.selectbox("Teacher", teacher_options, index=teacher_options.index(entry.teacher))
        move = {}
        if days and periods and classes:
            c1, c2, c3 = st.columns(3)
            with c1:
                move["new_day"] = st.selectbox("Day", days, index=days.index(entry.day) if entry.day in days else 0)
            with c2:
                move["new_period"] = st.selectbox(
                    "Period", periods, format_func=period_label,
                    index=periods.index(entry.period) if entry.period in periods else 0,
                )
            with c3:
                move["new_class"] = st.selectbox("Class", classes, index=classes.index(entry.class_name) if entry.class_name in classes else 0)
        if st.form_submit_button("Save Changes"):
            on_save(subject, teacher, **move)
