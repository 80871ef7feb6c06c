import math

import pytest

from rapidpenpy.cad_types import Point
from rapidpenpy.config import PenToolOptions
from rapidpenpy.events import Key, PathObserver
from rapidpenpy.path import HandleMirrorMode
from rapidpenpy.path_store import PathStore
from rapidpenpy.tools.pen_tool import PenTool, PenToolState


class ToolObserver(PathObserver):
    def __init__(self):
        self.states = []
        self.close_hover = []

    def state_changed(self, state):
        self.states.append(state)

    def close_path_hover(self, can_close):
        self.close_hover.append(can_close)


@pytest.fixture
def store():
    return PathStore()


@pytest.fixture
def observer():
    return ToolObserver()


@pytest.fixture
def pen(store, observer):
    return PenTool(store, observer)


def click(tool, position):
    tool.on_mouse_down(position)
    tool.on_mouse_up(position)


def draw_triangle(tool):
    for position in [(0, 0), (100, 0), (100, 100)]:
        click(tool, position)


class TestClicking:
    def test_clicks_append_straight_points(self, pen, store):
        click(pen, (0, 0))
        click(pen, (100, 0))

        path = pen.get_current_path()
        assert store.to_svg_path(path) == "M 0 0 L 100 0"
        assert pen.get_state() == PenToolState.DRAWING
        assert not any(p.is_smooth for p in path.anchor_points)

    def test_first_click_creates_one_path(self, pen, store):
        click(pen, (0, 0))
        click(pen, (10, 0))
        assert store.path_count() == 1

    def test_state_notifications(self, pen, observer):
        pen.on_mouse_down((0, 0))
        pen.on_mouse_move((50, 0))
        pen.on_mouse_up((50, 0))
        assert observer.states == [PenToolState.DRAWING, PenToolState.DRAGGING_HANDLE, PenToolState.DRAWING]

    def test_shift_snaps_to_45_degrees(self, pen):
        click(pen, (0, 0))
        pen.on_key_down(Key.SHIFT)
        point = pen.on_mouse_down((100, 10))
        assert math.isclose(point.position.y, 0, abs_tol=1e-9)
        assert math.isclose(point.position.x, math.hypot(100, 10))

    def test_shift_release(self, pen):
        click(pen, (0, 0))
        pen.on_key_down(Key.SHIFT)
        pen.on_key_up(Key.SHIFT)
        assert pen.on_mouse_down((100, 10)).position == Point(100, 10)


class TestDragging:
    def test_small_moves_do_not_create_handles(self, pen):
        anchor = pen.on_mouse_down((0, 0))
        pen.on_mouse_move((2, 0))
        assert anchor.handle_out is None
        assert pen.get_state() == PenToolState.DRAWING

    def test_drag_creates_mirrored_handles(self, pen):
        anchor = pen.on_mouse_down((0, 0))
        pen.on_mouse_move((20, 10))

        assert pen.get_state() == PenToolState.DRAGGING_HANDLE
        assert anchor.handle_out.position == Point(20, 10)
        assert anchor.handle_in.position == Point(-20, -10)
        assert anchor.mirror_mode == HandleMirrorMode.MIRRORED

        pen.on_mouse_move((0, 30))
        assert anchor.handle_in.position == Point(0, -30)

        pen.on_mouse_up((0, 30))
        assert pen.get_state() == PenToolState.DRAWING

    def test_custom_drag_threshold(self, store):
        tool = PenTool(store, options=PenToolOptions(drag_threshold=20))
        anchor = tool.on_mouse_down((0, 0))
        tool.on_mouse_move((15, 0))
        assert anchor.handle_out is None

    def test_alt_drag_sets_only_out_handle(self, pen):
        pen.on_key_down(Key.ALT)
        anchor = pen.on_mouse_down((0, 0))
        pen.on_mouse_move((20, 0))

        assert anchor.handle_out.position == Point(20, 0)
        assert anchor.handle_in is None
        assert anchor.mirror_mode == HandleMirrorMode.INDEPENDENT

    def test_moves_after_release_do_not_touch_handles(self, pen):
        anchor = pen.on_mouse_down((0, 0))
        pen.on_mouse_move((20, 0))
        pen.on_mouse_up((20, 0))
        pen.on_mouse_move((80, 80))
        assert anchor.handle_out.position == Point(20, 0)


class TestClosing:
    def test_click_on_first_point_closes(self, pen, store):
        draw_triangle(pen)
        path = pen.get_current_path()

        assert pen.on_mouse_down((2, 2)) is None

        assert path.closed
        assert path.point_count == 3
        assert pen.get_state() == PenToolState.IDLE
        assert pen.get_current_path() is None

    def test_two_points_cannot_be_closed_by_click(self, pen):
        click(pen, (0, 0))
        click(pen, (100, 0))
        pen.on_mouse_down((1, 1))
        path = pen.get_current_path()
        assert not path.closed
        assert path.point_count == 3

    def test_next_click_starts_new_path(self, pen, store):
        draw_triangle(pen)
        click(pen, (0, 0))
        click(pen, (300, 300))
        assert store.path_count() == 2
        assert pen.get_current_path().point_count == 1

    def test_enter_closes_two_point_path(self, pen):
        click(pen, (0, 0))
        click(pen, (100, 0))
        path = pen.get_current_path()
        pen.on_key_down(Key.ENTER)
        assert path.closed
        assert pen.get_state() == PenToolState.IDLE

    def test_enter_with_single_point_only_resets(self, pen):
        click(pen, (0, 0))
        path = pen.get_current_path()
        pen.on_key_down(Key.ENTER)
        assert not path.closed
        assert pen.get_current_path() is None

    def test_escape_leaves_path_open(self, pen, store):
        draw_triangle(pen)
        path = pen.get_current_path()
        pen.on_key_down(Key.ESCAPE)
        assert not path.closed
        assert path in store
        assert pen.get_state() == PenToolState.IDLE

    def test_close_hover_notifications(self, pen, observer):
        draw_triangle(pen)
        pen.on_mouse_move((3, 3))
        pen.on_mouse_move((4, 4))
        pen.on_mouse_move((60, 60))
        assert observer.close_hover == [True, False]

    def test_can_close_path(self, pen):
        assert not pen.can_close_path()
        click(pen, (0, 0))
        click(pen, (10, 0))
        assert not pen.can_close_path()
        click(pen, (10, 10))
        assert pen.can_close_path()


def test_points_are_never_deleted(pen):
    draw_triangle(pen)
    path = pen.get_current_path()
    for key in (Key.DELETE, Key.BACKSPACE):
        assert pen.on_key_down(key) is False
    assert path.point_count == 3


def test_path_removed_elsewhere_is_forgotten(pen, store):
    click(pen, (0, 0))
    store.remove_path(pen.get_current_path().id)
    assert pen.get_current_path() is None
    click(pen, (5, 5))
    assert store.path_count() == 1
