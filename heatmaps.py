"""
🔥 HEATMAP RENDERING
====================
Visual heatmaps for teacher load and shortages.
Uses pandas Styler for cell coloring.
"""

from typing import Dict, List

import pandas as pd
from pandas.io.formats.style import Styler

from models import TimetableEntry


def _color_scale(val: float, low_rgb: str = "#22c55e", mid_rgb: str = "#eab308", high_rgb: str = "#ef4444") -> str:
    """Value 0-1 -> green (light) to red (overloaded)."""
    if val <= 0:
        return f"background-color: {low_rgb}; color: white;"
    if val >= 1:
        return f"background-color: {high_rgb}; color: white;"
    if val < 0.5:
        return f"background-color: {mid_rgb}; color: black;"
    return f"background-color: {high_rgb}; color: white;"


def _scaled(df: pd.DataFrame, caption: str) -> Styler:
    max_val = df.max().max() if not df.empty else 0
    max_val = max_val or 1

    def _style(val):
        if pd.isna(val):
            return ""
        return _color_scale(val / max_val)

    return df.style.map(_style).set_caption(caption)


def teacher_load_frame(teacher_days: Dict[str, Dict[str, int]], days: List[str]) -> pd.DataFrame:
    """Rows=teachers, Cols=days, values=periods taught."""
    teachers = sorted(teacher_days.keys())
    data = [[teacher_days[t].get(d, 0) for d in days] for t in teachers]
    return pd.DataFrame(data, index=teachers, columns=days, dtype=int)


def render_teacher_load_heatmap(teacher_days: Dict[str, Dict[str, int]], days: List[str]) -> Styler:
    return _scaled(teacher_load_frame(teacher_days, days), "Teacher Load (darker = more periods)")


def shortage_frame(timetable: List[TimetableEntry], class_sections: List[str], days: List[str]) -> pd.DataFrame:
    """Rows=classes, Cols=days, values=Unassigned periods."""
    counts = {c: {d: 0 for d in days} for c in class_sections}
    for e in timetable:
        if e.is_shortage and e.class_name in counts and e.day in counts[e.class_name]:
            counts[e.class_name][e.day] += 1
    data = [[counts[c][d] for d in days] for c in class_sections]
    return pd.DataFrame(data, index=class_sections, columns=days, dtype=int)


def render_shortage_heatmap(timetable: List[TimetableEntry], class_sections: List[str], days: List[str]) -> Styler:
    return _scaled(shortage_frame(timetable, class_sections, days), "Unassigned periods per class")
