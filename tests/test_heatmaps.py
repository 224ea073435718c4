from heatmaps import (
    render_shortage_heatmap,
    render_teacher_load_heatmap,
    shortage_frame,
    teacher_load_frame,
)
from views import teacher_day_load


def test_teacher_load_frame(monday_timetable):
    df = teacher_load_frame(teacher_day_load(monday_timetable), ["Monday", "Tuesday"])
    assert list(df.index) == ["Ada", "Alan", "Emmy", "Grace"]
    assert df.loc["Alan", "Monday"] == 2
    assert df.loc["Alan", "Tuesday"] == 0


def test_shortage_frame(monday_timetable):
    df = shortage_frame(monday_timetable, ["10 A", "10 B"], ["Monday", "Tuesday"])
    assert df.loc["10 B", "Monday"] == 1
    assert df.loc["10 A", "Monday"] == 0
    assert df.values.sum() == 1


def test_renders_styled_tables(monday_timetable):
    html = render_teacher_load_heatmap(teacher_day_load(monday_timetable), ["Monday"]).to_html()
    assert "Teacher Load" in html
    assert "background-color" in html
    html = render_shortage_heatmap([], ["10 A"], ["Monday"]).to_html()
    assert "Unassigned periods per class" in html
