import math

import pytest

from rapidpenpy.cad_types import Point
from rapidpenpy.config import EditModeOptions
from rapidpenpy.events import Key, PathObserver
from rapidpenpy.path import HandleMirrorMode
from rapidpenpy.path_store import PathStore
from rapidpenpy.tools.edit_mode import EditMode, EditState


class EditObserver(PathObserver):
    def __init__(self):
        self.selections = []
        self.hover = []

    def selection_changed(self, points):
        self.selections.append([p.id for p in points])

    def hover_preview_changed(self, point, path):
        self.hover.append((point, path))


@pytest.fixture
def store():
    return PathStore()


@pytest.fixture
def observer():
    return EditObserver()


@pytest.fixture
def edit(store, observer):
    return EditMode(store, observer)


@pytest.fixture
def line_path(store):
    path = store.create_path()
    store.add_anchor_point(path, (0, 0))
    store.add_anchor_point(path, (100, 0))
    return path


@pytest.fixture
def smooth_path(store):
    path = store.create_path()
    store.add_anchor_point(path, (0, 0), handle_in=(-5, 0), handle_out=(5, 0))
    store.add_anchor_point(path, (100, 0))
    return path


def click(tool, position):
    hit = tool.on_mouse_down(position)
    tool.on_mouse_up(position)
    return hit


class TestPointDragging:
    def test_drag_uses_total_displacement(self, edit, line_path):
        anchor = line_path.first_point
        assert edit.on_mouse_down((1, 1))
        assert edit.get_state() == EditState.DRAGGING_POINT

        edit.on_mouse_move((11, 21))
        edit.on_mouse_move((11, 21))
        assert anchor.position == Point(10, 20)

        edit.on_mouse_up((11, 21))
        assert edit.get_state() == EditState.IDLE

    def test_hit_threshold(self, edit, line_path):
        assert not edit.on_mouse_down((0, 9))
        assert edit.get_state() == EditState.IDLE

    def test_drag_ends_when_anchor_disappears(self, edit, store, line_path):
        anchor = line_path.first_point
        edit.on_mouse_down((0, 0))
        store.remove_anchor_point(line_path, anchor.id)
        edit.on_mouse_move((30, 30))
        assert edit.get_state() == EditState.IDLE


class TestHandleDragging:
    def test_handles_win_over_anchors(self, edit, smooth_path):
        # (4, 0) is within reach of both the anchor and its out-handle
        edit.on_mouse_down((4, 0))
        assert edit.get_state() == EditState.DRAGGING_HANDLE
        assert edit.get_selected_points() == []

    def test_drag_respects_mirror_mode(self, edit, smooth_path):
        anchor = smooth_path.first_point
        edit.on_mouse_down((5, 0))
        edit.on_mouse_move((10, 10))
        assert anchor.handle_out.position == Point(10, 10)
        assert anchor.handle_in.position == Point(-10, -10)

    def test_alt_makes_handles_independent_until_release(self, edit, smooth_path):
        anchor = smooth_path.first_point
        edit.on_key_down(Key.ALT)
        edit.on_mouse_down((5, 0))
        edit.on_mouse_move((10, 10))

        assert anchor.mirror_mode == HandleMirrorMode.INDEPENDENT
        assert anchor.handle_in.position == Point(-5, 0)

        edit.on_mouse_up((10, 10))
        assert anchor.mirror_mode == HandleMirrorMode.MIRRORED

    def test_alt_release_restores_mid_drag(self, edit, smooth_path):
        anchor = smooth_path.first_point
        edit.on_key_down(Key.ALT)
        edit.on_mouse_down((5, 0))
        edit.on_mouse_move((10, 10))
        edit.on_key_up(Key.ALT)
        assert anchor.mirror_mode == HandleMirrorMode.MIRRORED

        edit.on_mouse_move((0, 20))
        assert anchor.handle_in.position == Point(0, -20)


class TestSelection:
    def test_click_replaces_selection(self, edit, line_path, observer):
        click(edit, (0, 0))
        click(edit, (100, 0))
        assert [p.id for p in edit.get_selected_points()] == [line_path.last_point.id]
        assert not line_path.first_point.selected

    def test_shift_adds_to_selection(self, edit, line_path):
        click(edit, (0, 0))
        edit.on_key_down(Key.SHIFT)
        click(edit, (100, 0))
        assert len(edit.get_selected_points()) == 2

    def test_click_on_empty_space(self, edit, line_path):
        click(edit, (0, 0))
        edit.on_key_down(Key.SHIFT)
        assert not click(edit, (50, 50))
        assert len(edit.get_selected_points()) == 1

        edit.on_key_up(Key.SHIFT)
        click(edit, (50, 50))
        assert edit.get_selected_points() == []

    def test_select_all_in_store_order(self, edit, store, line_path):
        other = store.create_path()
        store.add_anchor_point(other, (500, 500))
        edit.select_all()
        assert [p.id for p in edit.get_selected_points()] == [
            p.id for path in store.get_all_paths() for p in path.anchor_points
        ]
        edit.clear_selection()
        assert edit.get_selected_points() == []

    def test_selection_notifications(self, edit, line_path, observer):
        click(edit, (0, 0))
        assert observer.selections[-1] == [line_path.first_point.id]


class TestDeletion:
    @pytest.mark.parametrize("key", [Key.DELETE, Key.BACKSPACE])
    def test_delete_selected_points(self, edit, store, line_path, key):
        edit.select_all()
        edit.on_key_down(key)
        assert line_path.point_count == 0
        # emptied paths stay in the store
        assert line_path in store
        assert edit.get_selected_points() == []

    def test_delete_across_paths(self, edit, store, line_path):
        other = store.create_path()
        store.add_anchor_point(other, (500, 500))
        store.add_anchor_point(other, (600, 500))
        click(edit, (0, 0))
        edit.on_key_down(Key.SHIFT)
        click(edit, (500, 500))

        assert edit.delete_selected_points() == 2
        assert line_path.point_count == 1
        assert other.point_count == 1


class TestHoverPreview:
    def test_preview_on_line(self, edit, line_path, observer):
        edit.on_mouse_move((50, 3))
        preview = edit.get_hover_preview()

        assert preview.point == Point(50, 0)
        assert preview.path is line_path
        assert preview.segment_index == 0
        assert math.isclose(preview.t, 0.5)
        assert observer.hover == [(Point(50, 0), line_path)]

    def test_unchanged_preview_is_not_renotified(self, edit, line_path, observer):
        edit.on_mouse_move((50, 3))
        edit.on_mouse_move((50, 4))
        assert len(observer.hover) == 1

    def test_preview_clears_when_moving_away(self, edit, line_path, observer):
        edit.on_mouse_move((50, 3))
        edit.on_mouse_move((50, 10))
        assert edit.get_hover_preview() is None
        assert observer.hover[-1] == (None, None)

    def test_hover_distance(self, edit, line_path):
        edit.set_hover_distance(20)
        assert edit.get_hover_distance() == 20
        edit.on_mouse_move((50, 15))
        assert edit.get_hover_preview() is not None
        with pytest.raises(ValueError):
            edit.set_hover_distance(-1)

    def test_degenerate_segment(self, edit, store):
        path = store.create_path()
        store.add_anchor_point(path, (5, 5))
        store.add_anchor_point(path, (5, 5))
        edit.on_mouse_move((5, 7))
        preview = edit.get_hover_preview()
        assert math.isclose(preview.distance, 2)
        assert preview.point.is_finite()

    def test_no_preview_while_dragging(self, edit, line_path):
        edit.on_mouse_down((0, 0))
        edit.on_mouse_move((50, 3))
        assert edit.get_hover_preview() is None

    def test_options_control_sampling(self, store, line_path):
        edit = EditMode(store, options=EditModeOptions(samples=4))
        edit.on_mouse_move((27, 1))
        assert edit.get_hover_preview().point == Point(25, 0)


class TestDoubleClickInsertion:
    def test_insert_on_line(self, edit, line_path, observer):
        edit.on_mouse_move((50, 3))
        anchor = edit.on_double_click((50, 3))

        assert line_path.anchor_points[1] is anchor
        assert anchor.position == Point(50, 0)
        assert anchor.handle_in.position == Point(-50 / 3, 0)
        assert anchor.handle_out.position == Point(50 / 3, 0)
        assert edit.get_selected_points() == [anchor]
        assert edit.get_hover_preview() is None
        assert observer.hover[-1] == (None, None)

    def test_insert_on_curve_keeps_shape(self, edit, store):
        path = store.create_path()
        store.add_anchor_point(path, (0, 0), handle_out=(0, 50))
        store.add_anchor_point(path, (100, 0), handle_in=(0, 50))
        (original,) = store.get_segments(path)

        edit.on_mouse_move((50, 39))
        anchor = edit.on_double_click((50, 39))

        assert anchor.position == Point(50, 37.5)
        assert anchor.mirror_mode == HandleMirrorMode.ANGLE_LOCKED
        first, second = store.get_segments(path)
        for u in (0.0, 0.2, 0.6, 1.0):
            assert first.point_at(u).equals(original.point_at(u / 2), 1e-9)
            assert second.point_at(u).equals(original.point_at(0.5 + u / 2), 1e-9)

    def test_without_preview(self, edit, line_path):
        assert edit.on_double_click((50, 40)) is None
        assert line_path.point_count == 2

    def test_stale_preview_is_ignored(self, edit, store, line_path):
        edit.on_mouse_move((50, 3))
        store.move_anchor_point(line_path, line_path.last_point.id, (100, 80))
        assert edit.on_double_click((50, 3)) is None
        assert line_path.point_count == 2
