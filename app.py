"""
🧠 SCHOOL TIMETABLE BUILDER — Baby-level explanation
====================================================
- Pick (or type) a school ID in the sidebar; everything is saved per school
- Setup: teachers (Excel upload or by hand), subjects, classes, timing
- Generate: one click fills the whole week; red cells = no teacher free
- Edit: drop a teacher on a cell or edit it; double bookings are refused
- Arrangement: today's stand-in plan, never saved
- Views + PDF/Excel downloads
"""

import logging
import os
import time
from datetime import timedelta
from typing import List

import streamlit as st

from editing import EditRejected, assign_teacher, edit_entry
from export import export_excel, export_pdf
from heatmaps import render_shortage_heatmap, render_teacher_load_heatmap
from models import (
    ClassSection,
    Teacher,
    all_class_sections,
    class_error,
    save_subject,
    settings_error,
)
from scenarios import Arrangement
from solver import TimetableInputError, build_capability_index, generate_timetable
from storage import (
    list_schools,
    load_classes, save_classes,
    load_school_name, save_school_name,
    load_settings, save_settings,
    load_subjects, save_subjects,
    load_teachers, save_teachers,
    load_timetable, save_timetable,
    read_teacher_workbook, teacher_template_bytes,
)
from ui_forms import (
    render_cell_edit_form,
    render_class_form,
    render_settings_form,
    render_subject_form,
    render_teacher_form,
)
from views import (
    Grid,
    arrangement_grid,
    assigned_teachers,
    class_consolidated_grid,
    class_week_grid,
    edit_grid,
    grid_to_frame,
    shortage_count,
    teacher_consolidated_grid,
    teacher_day_load,
)

DEBUG = os.environ.get("TIMETABLE_DEBUG", "").lower() in ("1", "true", "yes")

logging.basicConfig(
    level=logging.DEBUG if DEBUG else logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# PAGE CONFIG
# ---------------------------------------------------------------------------

st.set_page_config(page_title="School Timetable Builder", page_icon="📅", layout="wide")

APP_CSS = """
<style>
    .main { background-color: #0f0f0f; }
    .main .block-container { padding-top: 2rem; }
    h1 { color: #fafafa !important; }
    h2, h3 { color: #e4e4e7 !important; }

    [data-testid="stSidebar"] {
        background: linear-gradient(180deg, #18181b 0%, #0f0f0f 100%);
    }

    .stTabs [data-baseweb="tab-list"] {
        background-color: #111113;
        border-radius: 10px;
        padding: 4px;
        border: 1px solid #27272a;
    }
    .stTabs [aria-selected="true"] {
        background-color: #27272a !important;
        color: #fafafa !important;
    }

    #notification-slot { min-height: 52px; margin-bottom: 8px; }
    .toast-item {
        padding: 10px 14px;
        background: #18181b;
        border-radius: 8px;
        font-size: 13px;
        color: #e4e4e7;
        max-width: 320px;
        margin-bottom: 6px;
        display: flex;
        justify-content: space-between;
        gap: 10px;
        animation: toastFadeIn 0.3s ease;
    }
    .toast-item.error { border-left: 3px solid #ef4444; }
    @keyframes toastFadeIn {
        from { opacity: 0; transform: translateY(-10px); }
        to { opacity: 1; transform: translateY(0); }
    }
    .toast-countdown { font-size: 11px; color: #71717a; min-width: 24px; }

    [data-testid="stDataFrame"] td, [data-testid="stDataFrame"] th {
        white-space: pre-wrap !important;
        line-height: 1.4 !important;
    }
</style>
"""

st.markdown(APP_CSS, unsafe_allow_html=True)


# ---------------------------------------------------------------------------
# SESSION STATE — Load from disk, per school
# ---------------------------------------------------------------------------

def _load_school(school_id: str) -> None:
    st.session_state.school_id = school_id
    st.session_state.school_name = load_school_name(school_id)
    st.session_state.teachers = load_teachers(school_id)
    st.session_state.subjects = load_subjects(school_id)
    st.session_state.classes = load_classes(school_id)
    st.session_state.settings = load_settings(school_id)
    st.session_state.timetable = load_timetable(school_id)
    st.session_state.arrangement = None
    st.session_state.editing_teacher = None
    st.session_state.form_teacher = {"name": "", "subjects": ""}
    st.session_state.editing_subject = None
    st.session_state.form_subject = {"name": "", "mandatory": False}
    logger.info("Loaded school %s", school_id)


def _init_session():
    if "notifications" not in st.session_state:
        st.session_state.notifications = []
    if "school_id" not in st.session_state:
        st.session_state.school_id = None


_init_session()


# ---------------------------------------------------------------------------
# NOTIFICATIONS — Stackable, smooth countdown via fragment
# ---------------------------------------------------------------------------

def show_toast(msg: str, duration_sec: int = 3, error: bool = False) -> None:
    """Add a notification. Stackable, new ones don't replace old."""
    st.session_state.notifications.append({
        "msg": msg,
        "until": time.time() + duration_sec,
        "id": f"n_{time.time()}_{id(msg)}",
        "error": error,
    })


@st.fragment(run_every=timedelta(seconds=1))
def _notification_ticker():
    now = time.time()
    notifications = st.session_state.get("notifications", [])
    active = [n for n in notifications if n["until"] > now]
    if len(active) != len(notifications):
        st.session_state.notifications = active

    for n in active:
        remaining = max(0, int(n["until"] - now))
        css = "toast-item error" if n.get("error") else "toast-item"
        st.markdown(
            f'<div class="{css}">'
            f'<span>{n["msg"]}</span>'
            f'<span class="toast-countdown">{remaining}s</span>'
            f'</div>',
            unsafe_allow_html=True,
        )


# ---------------------------------------------------------------------------
# HELPERS
# ---------------------------------------------------------------------------

def _persist_timetable() -> None:
    save_timetable(st.session_state.school_id, st.session_state.timetable)


def _download_buttons(grid: Grid, base_name: str, key: str) -> None:
    name = st.session_state.school_name or "School"
    school_id = st.session_state.school_id
    file_stem = f"{name}_{base_name}".replace(" ", "_")
    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            "📥 Download PDF",
            data=export_pdf(grid, name, school_id),
            file_name=f"{file_stem}.pdf",
            mime="application/pdf",
            key=f"pdf_{key}",
        )
    with col2:
        st.download_button(
            "📥 Download Excel",
            data=export_excel(grid, name, school_id),
            file_name=f"{file_stem}.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            key=f"xlsx_{key}",
        )


def _show_grid(grid: Grid) -> None:
    st.dataframe(grid_to_frame(grid), use_container_width=True, hide_index=True)


def _teacher_names() -> List[str]:
    return [t.name for t in st.session_state.teachers]


def _subject_names() -> List[str]:
    return [s.name for s in st.session_state.subjects]


# ---------------------------------------------------------------------------
# SIDEBAR — School selector
# ---------------------------------------------------------------------------

st.sidebar.title("🏫 School")
known_schools = list_schools()

with st.sidebar.form("school_select"):
    typed_id = st.text_input("School ID", value=st.session_state.school_id or "", placeholder="e.g. greenfield-high")
    if known_schools:
        st.caption("Saved: " + ", ".join(known_schools))
    if st.form_submit_button("Open School"):
        try:
            _load_school(typed_id.strip())
            show_toast(f"Opened {typed_id.strip()}")
        except ValueError as e:
            st.sidebar.error(str(e))

st.title("📅 School Timetable Builder")

if not st.session_state.school_id:
    st.info("Enter a school ID in the sidebar to start.")
    st.stop()

st.markdown(f"*{st.session_state.school_name or 'School'} · ID: {st.session_state.school_id}*")
st.markdown('<div id="notification-slot"></div>', unsafe_allow_html=True)
_notification_ticker()

school_id = st.session_state.school_id
settings = st.session_state.settings
class_sections = all_class_sections(st.session_state.classes)

tabs = st.tabs([
    "🏫 Setup",
    "🚀 Generate",
    "✏️ Edit Timetable",
    "🔁 Arrangement",
    "📋 Class Timetables",
    "👨‍🏫 Teacher Timetables",
    "🔥 Insights",
])
tab_setup, tab_gen, tab_edit, tab_arr, tab_class, tab_teacher, tab_insights = tabs


# ----- TAB: Setup -----
with tab_setup:
    st.header("School")
    with st.form("school_name_form"):
        school_name = st.text_input("School name", value=st.session_state.school_name)
        if st.form_submit_button("Save Name"):
            save_school_name(school_id, school_name)
            st.session_state.school_name = school_name.strip()
            show_toast("School name saved")
            st.rerun()

    st.markdown("---")
    st.header("1. Teachers")
    col_up, col_tpl = st.columns([3, 1])
    with col_up:
        uploaded = st.file_uploader("Upload teacher list (.xlsx)", type=["xlsx", "xls"], key="teacher_upload")
        if uploaded is not None and st.button("Upload", key="teacher_upload_btn"):
            try:
                st.session_state.teachers = read_teacher_workbook(uploaded)
                save_teachers(school_id, st.session_state.teachers)
                show_toast(f"{len(st.session_state.teachers)} teachers loaded")
                st.rerun()
            except ValueError as e:
                st.error(str(e))
    with col_tpl:
        st.download_button(
            "Download Template",
            data=teacher_template_bytes(),
            file_name="teacher_template.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )

    editing_t = st.session_state.editing_teacher
    with st.expander("➕ Add a teacher" if editing_t is None else "✏️ Edit teacher", expanded=editing_t is not None):
        def on_teacher_save(name: str, subjects: str):
            t = Teacher(name=name, subjects=subjects)
            if editing_t is not None:
                st.session_state.teachers[editing_t] = t
                show_toast("Teacher data saved.")
            else:
                st.session_state.teachers.append(t)
                show_toast(f"Teacher {name} added")
            save_teachers(school_id, st.session_state.teachers)
            st.session_state.editing_teacher = None
            st.session_state.form_teacher = {"name": "", "subjects": ""}
            st.rerun()

        def on_teacher_cancel():
            st.session_state.editing_teacher = None
            st.session_state.form_teacher = {"name": "", "subjects": ""}
            st.rerun()

        render_teacher_form(editing_t, st.session_state.form_teacher, on_teacher_save, on_teacher_cancel)

    st.subheader(f"Teacher List ({len(st.session_state.teachers)})")
    for i, t in enumerate(st.session_state.teachers):
        c1, c2, c3 = st.columns([4, 1, 1])
        with c1:
            st.markdown(f"**{t.name}** · {t.subjects}")
        with c2:
            if st.button("Edit", key=f"t_edit_{i}"):
                st.session_state.editing_teacher = i
                st.session_state.form_teacher = {"name": t.name, "subjects": t.subjects}
                st.rerun()
        with c3:
            if st.button("Remove", key=f"t_rm_{i}"):
                st.session_state.teachers.pop(i)
                save_teachers(school_id, st.session_state.teachers)
                show_toast("Teacher entry deleted.")
                st.rerun()

    st.markdown("---")
    st.header("2. Subjects")

    editing_s = st.session_state.editing_subject

    def on_subject_save(name: str, mandatory: bool):
        old_name = st.session_state.subjects[editing_s].name if editing_s is not None else None
        error = save_subject(st.session_state.subjects, name, mandatory, editing_index=editing_s)
        if error:
            show_toast(error, error=True)
            return
        save_subjects(school_id, st.session_state.subjects)
        if old_name is not None:
            show_toast(f'Subject updated to "{name.strip()}".')
            logger.info("Renamed subject %s -> %s", old_name, name.strip())
        else:
            show_toast(f'Subject "{name.strip()}" added.')
        st.session_state.editing_subject = None
        st.session_state.form_subject = {"name": "", "mandatory": False}
        st.rerun()

    def on_subject_cancel():
        st.session_state.editing_subject = None
        st.session_state.form_subject = {"name": "", "mandatory": False}
        st.rerun()

    render_subject_form(editing_s, st.session_state.form_subject, on_subject_save, on_subject_cancel)
    for i, s in enumerate(st.session_state.subjects):
        c1, c2, c3 = st.columns([4, 1, 1])
        with c1:
            st.markdown(f"**{s.name}**" + (" · mandatory" if s.mandatory else ""))
        with c2:
            if st.button("Edit", key=f"s_edit_{i}"):
                st.session_state.editing_subject = i
                st.session_state.form_subject = {"name": s.name, "mandatory": s.mandatory}
                st.rerun()
        with c3:
            if st.button("Remove", key=f"s_rm_{i}"):
                removed = st.session_state.subjects.pop(i)
                save_subjects(school_id, st.session_state.subjects)
                st.session_state.editing_subject = None
                st.session_state.form_subject = {"name": "", "mandatory": False}
                show_toast(f'Subject "{removed.name}" removed.')
                st.rerun()

    st.markdown("---")
    st.header("3. Classes & Sections")

    def on_class_save(name: str, sections: List[str]):
        error = class_error(st.session_state.classes, name, sections)
        if error:
            show_toast(error, error=True)
            return
        st.session_state.classes.append(ClassSection(name=name.strip(), sections=[s for s in sections if s]))
        save_classes(school_id, st.session_state.classes)
        show_toast(f'Class "{name.strip()}" added.')
        st.rerun()

    render_class_form(on_class_save)
    for i, c in enumerate(st.session_state.classes):
        c1, c2 = st.columns([5, 1])
        with c1:
            st.markdown(f"**{c.name}** · sections {', '.join(c.sections)}")
        with c2:
            if st.button("Remove", key=f"c_rm_{i}"):
                removed = st.session_state.classes.pop(i)
                save_classes(school_id, st.session_state.classes)
                show_toast(f'Class "{removed.name}" removed.')
                st.rerun()

    st.markdown("---")
    st.header("4. Timing & Days")

    def on_settings_save(new_settings):
        error = settings_error(new_settings)
        if error:
            show_toast(error, error=True)
            return
        st.session_state.settings = new_settings
        save_settings(school_id, new_settings)
        show_toast("Schedule settings have been saved.")
        st.rerun()

    render_settings_form(settings, on_settings_save)


# ----- TAB: Generate -----
with tab_gen:
    st.header("Generate Timetable")
    has_timetable = bool(st.session_state.timetable)
    if has_timetable:
        st.warning("A timetable already exists. Generating again replaces it, including manual edits.")
        force = st.checkbox("Yes, replace the current timetable", key="force_regen")
    else:
        force = True

    if st.button("🚀 Generate Timetable", type="primary", key="gen_tt", disabled=not force):
        try:
            with st.spinner("Generating..."):
                timetable = generate_timetable(
                    st.session_state.teachers,
                    st.session_state.subjects,
                    st.session_state.classes,
                    settings,
                )
        except TimetableInputError as e:
            st.error(str(e))
        else:
            st.session_state.timetable = timetable
            st.session_state.arrangement = None
            _persist_timetable()
            missing = shortage_count(timetable)
            if missing:
                show_toast(f"Timetable generated with {missing} unassigned periods")
            else:
                show_toast("Timetable generated!")
            st.rerun()

    if st.session_state.timetable:
        st.metric("Unassigned periods", shortage_count(st.session_state.timetable))


# ----- TAB: Edit Timetable -----
with tab_edit:
    st.header("Edit Timetable")
    timetable = st.session_state.timetable
    if not timetable or settings is None:
        st.info("Generate a timetable first.")
    else:
        days = settings.sorted_days()
        periods = [p for p in settings.physical_periods() if not settings.is_lunch_period(p)]

        c1, c2, c3 = st.columns(3)
        with c1:
            e_class = st.selectbox("Class", class_sections, key="edit_class")
        with c2:
            e_day = st.selectbox("Day", days, key="edit_day")
        with c3:
            e_period = st.selectbox("Period", periods, format_func=settings.period_label, key="edit_period")

        entry = next((e for e in timetable if e.slot_key == (e_day, e_period, e_class)), None)
        if entry is None:
            st.info("No entry in this slot.")
        else:
            st.markdown(f"Current: **{entry.subject}** · {entry.teacher}")

            with st.form("quick_assign"):
                quick = st.selectbox("Assign teacher", _teacher_names(), key="quick_teacher")
                if st.form_submit_button("Assign") and quick:
                    try:
                        assign_teacher(timetable, e_day, e_period, e_class, quick)
                    except EditRejected as e:
                        show_toast(str(e), error=True)
                    else:
                        _persist_timetable()
                        show_toast("Timetable updated.")
                        st.rerun()

            def on_cell_save(subject, teacher, new_day=None, new_period=None, new_class=None):
                try:
                    edit_entry(timetable, e_day, e_period, e_class, subject, teacher, new_day, new_period, new_class)
                except EditRejected as e:
                    show_toast(str(e), error=True)
                    return
                _persist_timetable()
                show_toast("Timetable updated.")
                st.rerun()

            with st.expander("Edit cell"):
                render_cell_edit_form(
                    entry, _subject_names(), _teacher_names(), on_cell_save,
                    days=days, periods=periods, classes=class_sections,
                    period_label=settings.period_label, prefix="edit",
                )

        grid = edit_grid(timetable, settings, class_sections)
        _show_grid(grid)
        _download_buttons(grid, "Editable_Timetable", "edit")


# ----- TAB: Arrangement -----
with tab_arr:
    st.header("🔁 Daily Arrangement")
    st.caption("Mark teachers absent and fill their periods. Changes are temporary and never saved.")
    if not st.session_state.timetable or settings is None:
        st.info("Generate a timetable first.")
    else:
        days = settings.sorted_days()
        day = st.selectbox("Day", days, key="arr_day")
        arrangement = st.session_state.arrangement
        if arrangement is None:
            arrangement = Arrangement(st.session_state.timetable, day)
            st.session_state.arrangement = arrangement
        arrangement.select_day(day)

        if st.button("Reset arrangement", key="arr_reset"):
            st.session_state.arrangement = None
            st.rerun()

        all_teachers = sorted(_teacher_names())
        absent = st.multiselect("Absent teachers", all_teachers, default=sorted(arrangement.absent), key="arr_absent")
        for t in set(absent) ^ arrangement.absent:
            arrangement.toggle_absent(t)

        capability = build_capability_index(st.session_state.teachers, st.session_state.subjects)
        uncovered = arrangement.uncovered_entries()
        st.subheader(f"Periods to cover ({len(uncovered)})")
        for i, entry in enumerate(uncovered):
            c1, c2, c3 = st.columns([3, 3, 1])
            suggestions = arrangement.suggest_substitutes(capability, entry)
            with c1:
                st.markdown(f"**{entry.class_name}** · {settings.period_label(entry.period)} · {entry.subject} ({entry.teacher})")
            with c2:
                pick = st.selectbox("Substitute", suggestions or ["No free qualified teacher"], key=f"arr_sub_{i}", disabled=not suggestions)
            with c3:
                if st.button("Assign", key=f"arr_assign_{i}", disabled=not suggestions):
                    try:
                        arrangement.assign_teacher(entry.period, entry.class_name, pick)
                        show_toast("Arrangement updated temporarily.")
                    except EditRejected as e:
                        show_toast(str(e), error=True)
                    st.rerun()

        with st.expander("Assign any present teacher"):
            search = st.text_input("Search teachers", key="arr_search")
            present = arrangement.present_teachers(all_teachers, search)
            periods = [p for p in settings.physical_periods() if not settings.is_lunch_period(p)]
            with st.form("arr_manual"):
                m_class = st.selectbox("Class", class_sections)
                m_period = st.selectbox("Period", periods, format_func=settings.period_label)
                m_teacher = st.selectbox("Teacher", present or ["-"])
                if st.form_submit_button("Assign") and present:
                    try:
                        arrangement.assign_teacher(m_period, m_class, m_teacher)
                        show_toast("Arrangement updated temporarily.")
                    except EditRejected as e:
                        show_toast(str(e), error=True)
                    st.rerun()

        by_teacher = st.radio("View", ["Class", "Teacher"], horizontal=True, key="arr_view") == "Teacher"
        names = all_teachers if by_teacher else class_sections
        grid = arrangement_grid(arrangement.timetable, settings, day, names, by_teacher, arrangement.absent)
        _show_grid(grid)
        _download_buttons(grid, f"Arrangement_{day}", "arr")


# ----- TAB: Class Timetables -----
with tab_class:
    st.header("Class Timetables")
    if not st.session_state.timetable or settings is None:
        st.info("Generate a timetable first.")
    else:
        mode = st.radio("Show", ["One class", "All classes"], horizontal=True, key="class_mode")
        if mode == "One class":
            chosen = st.selectbox("Class", class_sections, key="class_view_sel")
            grid = class_week_grid(st.session_state.timetable, settings, chosen)
        else:
            grid = class_consolidated_grid(st.session_state.timetable, settings, class_sections)
        _show_grid(grid)
        _download_buttons(grid, "Class_Timetable", "class")


# ----- TAB: Teacher Timetables -----
with tab_teacher:
    st.header("Teacher Timetables")
    if not st.session_state.timetable or settings is None:
        st.info("Generate a timetable first.")
    else:
        st.caption("Days: 1 = Monday … 7 = Sunday")
        grid = teacher_consolidated_grid(st.session_state.timetable, settings)
        _show_grid(grid)
        _download_buttons(grid, "Teacher_Timetable", "teacher")


# ----- TAB: Insights (Heatmaps) -----
with tab_insights:
    st.header("🔥 Insights")
    if not st.session_state.timetable or settings is None:
        st.info("Generate a timetable first.")
    else:
        days = settings.sorted_days()
        heatmap_type = st.selectbox("Heatmap", ["Teacher load", "Unassigned periods"], key="heatmap_sel")
        if heatmap_type == "Teacher load":
            styled = render_teacher_load_heatmap(teacher_day_load(st.session_state.timetable), days)
            st.dataframe(styled, use_container_width=True)
            st.caption(f"{len(assigned_teachers(st.session_state.timetable))} teachers. Darker = more periods.")
        else:
            styled = render_shortage_heatmap(st.session_state.timetable, class_sections, days)
            st.dataframe(styled, use_container_width=True)
            st.caption("Periods where no qualified teacher was free.")
