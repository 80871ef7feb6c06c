"""Test that the editor facade routes events and keeps its renderer in sync."""

import pytest

from rapidpenpy import Key, PathRenderer, PenApp, ToolMode
from rapidpenpy.events import CallbackObserver
from rapidpenpy.tools import EditState, PenToolState


class RecordingRenderer(PathRenderer):
    def __init__(self):
        super().__init__()
        self.calls = []

    def render_paths(self, path_store):
        self.calls.append("paths")

    def render_anchor_points(self, path_store):
        self.calls.append("anchors")

    def render_handles(self, path_store):
        self.calls.append("handles")

    def render_preview_line(self, start, end):
        self.calls.append("preview-line")

    def render_preview_curve(self, p0, cp1, cp2, p3):
        self.calls.append("preview-curve")

    def render_close_path_indicator(self, point, show):
        self.calls.append(("close-indicator", show))

    def render_hover_preview_point(self, point):
        self.calls.append(("hover", point))

    def clear(self):
        self.calls.append("clear")

    def clear_preview(self):
        self.calls.append("clear-preview")


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def app(renderer):
    return PenApp(renderer=renderer)


def click(app, position):
    app.on_mouse_down(position)
    app.on_mouse_up(position)


def test_app_draws_paths(app):
    assert app.mode == ToolMode.PEN
    click(app, (0, 0))
    click(app, (100, 0))
    assert app.path_count() == 1
    assert app.export_svg_path(app.get_paths()[0]) == "M 0 0 L 100 0"


def test_each_mutation_triggers_a_redraw(app, renderer):
    renderer.calls.clear()
    click(app, (0, 0))
    # path created + point added
    assert renderer.calls.count("paths") == 2


def test_preview_line_while_drawing(app, renderer):
    click(app, (0, 0))
    renderer.calls.clear()
    app.on_mouse_move((40, 40))
    assert "preview-line" in renderer.calls


def test_close_indicator(app, renderer):
    for position in [(0, 0), (100, 0), (100, 100)]:
        click(app, position)
    app.on_mouse_move((2, 2))
    assert ("close-indicator", True) in renderer.calls


def test_toggle_mode_resets_pen(app, renderer):
    click(app, (0, 0))
    assert app.toggle_mode() == ToolMode.EDIT
    assert app.pen_tool.get_state() == PenToolState.IDLE
    assert app.pen_tool.get_current_path() is None
    assert renderer.options.show_all_handles
    assert app.toggle_mode() == ToolMode.PEN
    assert not renderer.options.show_all_handles


def test_edit_events_are_routed(app):
    click(app, (0, 0))
    click(app, (100, 0))
    app.toggle_mode()

    assert app.on_mouse_down((0, 0))
    assert app.edit_mode.get_state() == EditState.DRAGGING_POINT
    app.on_mouse_move((10, 10))
    app.on_mouse_up((10, 10))
    assert app.get_paths()[0].first_point.position == (10, 10)

    app.on_mouse_move((55, 6))
    anchor = app.on_double_click((55, 6))
    assert anchor is not None
    assert app.get_paths()[0].point_count == 3

    app.on_key_down(Key.DELETE)
    assert app.get_paths()[0].point_count == 2


def test_double_click_ignored_in_pen_mode(app):
    click(app, (0, 0))
    click(app, (100, 0))
    assert app.on_double_click((50, 0)) is None


def test_close_current_path(app):
    assert not app.close_current_path()
    click(app, (0, 0))
    click(app, (100, 0))
    assert not app.can_close_path()
    click(app, (100, 100))
    assert app.can_close_path()

    path = app.pen_tool.get_current_path()
    assert app.close_current_path()
    assert path.closed
    assert app.pen_tool.get_current_path() is None


def test_clear_all_paths(app, renderer):
    click(app, (0, 0))
    app.on_key_down(Key.ESCAPE)
    click(app, (50, 50))
    assert app.path_count() == 2

    app.clear_all_paths()
    assert app.path_count() == 0
    assert renderer.calls[-1] == "clear"


def test_user_observer(renderer):
    changes = []
    app = PenApp(
        renderer=renderer,
        observer=CallbackObserver(on_path_modified=lambda path, change: changes.append(change)),
    )
    click(app, (0, 0))
    assert [c.value for c in changes] == ["path-created", "point-added"]


def test_import_and_export(app, tmp_path):
    path = app.import_svg_path("M 0 0 C 10 0, 10 10, 0 10 Z", stroke="#123456")
    assert path.closed
    assert app.import_svg_path("") is None

    out_file = tmp_path / "drawing.svg"
    app.export_svg_document(str(out_file))
    assert app.load_svg_file(str(out_file))[0].stroke == "#123456"
    assert app.path_count() == 2


def test_app_without_renderer():
    app = PenApp()
    click(app, (0, 0))
    app.toggle_mode()
    app.on_mouse_move((0, 3))
    assert app.path_count() == 1
