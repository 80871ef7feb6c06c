"""
Editing state machine.

Selects, drags and deletes anchors of existing paths, drags their handles and
inserts new anchors on segments by double-clicking near them.
"""

import logging
from enum import Enum
from typing import List, NamedTuple, Optional, Set

from rapidpenpy import geometry
from rapidpenpy.cad_types import Point, PointLike, to_point
from rapidpenpy.config import EditModeOptions
from rapidpenpy.events import Key, PathObserver
from rapidpenpy.handles import HandleManager
from rapidpenpy.path import AnchorPoint, HandleMirrorMode, VectorPath
from rapidpenpy.path_store import PathStore

logger = logging.getLogger(__name__)


class EditState(str, Enum):
    IDLE = "idle"
    DRAGGING_POINT = "dragging-point"
    DRAGGING_HANDLE = "dragging-handle"


class HoverPreview(NamedTuple):
    """Closest sampled point on any segment to the pointer."""

    point: Point
    path: VectorPath
    segment_index: int
    t: float
    distance: float


class _DragTarget(NamedTuple):
    path: VectorPath
    anchor: AnchorPoint
    is_out_handle: Optional[bool]


class EditMode:
    def __init__(
        self,
        path_store: PathStore,
        observer: Optional[PathObserver] = None,
        options: Optional[EditModeOptions] = None,
    ):
        self.path_store = path_store
        self.observer = observer if observer is not None else PathObserver()
        self.options = options if options is not None else EditModeOptions()

        self._state = EditState.IDLE
        self._selected_ids: Set[str] = set()
        self._drag: Optional[_DragTarget] = None
        self._drag_start: Optional[Point] = None
        self._initial_position: Optional[Point] = None
        self._original_mirror_mode: Optional[HandleMirrorMode] = None
        self._is_shift_pressed = False
        self._is_alt_pressed = False
        self._hover: Optional[HoverPreview] = None

    # ========== State ==========

    def get_state(self) -> EditState:
        return self._state

    def _set_state(self, state: EditState) -> None:
        if state != self._state:
            self._state = state
            self.observer.state_changed(state)

    # ========== Selection ==========

    def get_selected_points(self) -> List[AnchorPoint]:
        """Selected anchors in store order; anchors deleted elsewhere are skipped."""
        return [
            point
            for path in self.path_store.get_all_paths()
            for point in path.anchor_points
            if point.id in self._selected_ids
        ]

    def _notify_selection(self) -> None:
        self.observer.selection_changed(self.get_selected_points())

    def _deselect_all(self) -> None:
        for path in self.path_store.get_all_paths():
            for point in path.anchor_points:
                point.selected = False
        self._selected_ids.clear()

    def clear_selection(self) -> None:
        self._deselect_all()
        self._notify_selection()

    def select_all(self) -> None:
        for path in self.path_store.get_all_paths():
            for point in path.anchor_points:
                point.selected = True
                self._selected_ids.add(point.id)
        self._notify_selection()

    def select_point(self, point: AnchorPoint, add: bool = False) -> None:
        """Select ``point``, replacing the selection unless ``add`` is set."""
        if not add:
            self._deselect_all()
        point.selected = True
        self._selected_ids.add(point.id)
        self._notify_selection()

    # ========== Hover preview ==========

    def set_hover_distance(self, distance: float) -> None:
        if distance < 0:
            raise ValueError(f"Hover distance must be non-negative, got {distance}")
        self.options.hover_distance = float(distance)

    def get_hover_distance(self) -> float:
        return self.options.hover_distance

    def get_hover_preview(self) -> Optional[HoverPreview]:
        return self._hover

    def find_closest_point_on_paths(self, position: PointLike) -> Optional[HoverPreview]:
        """
        Sample every segment of every path and return the nearest sample.

        Only samples within the hover distance count; the earliest segment
        wins on ties.
        """
        position = to_point(position)
        samples = self.options.samples
        params = geometry.sample_parameters(samples)
        best: Optional[HoverPreview] = None
        for path in self.path_store.get_all_paths():
            for index, segment in enumerate(self.path_store.get_segments(path)):
                hit = geometry.closest_sample(segment.sample(samples), position)
                if hit is None:
                    continue
                sample_idx, dist = hit
                if dist > self.options.hover_distance:
                    continue
                if best is None or dist < best.distance:
                    t = float(params[sample_idx])
                    best = HoverPreview(segment.point_at(t), path, index, t, dist)
        return best

    def _update_hover_preview(self, position: Point) -> None:
        preview = self.find_closest_point_on_paths(position)
        previous = self._hover
        if preview is None:
            if previous is not None:
                self._clear_hover_preview()
            return
        changed = (
            previous is None
            or previous.path is not preview.path
            or previous.point != preview.point
        )
        self._hover = preview
        if changed:
            self.observer.hover_preview_changed(preview.point, preview.path)

    def _clear_hover_preview(self) -> None:
        self._hover = None
        self.observer.hover_preview_changed(None, None)

    # ========== Pointer events ==========

    def on_mouse_down(self, position: PointLike) -> bool:
        """
        Hit test handles, then anchors, across every path in store order.

        Returns:
            True if a handle or anchor was hit
        """
        position = to_point(position)
        threshold = self.options.hit_threshold
        paths = self.path_store.get_all_paths()

        for path in paths:
            for point in path.anchor_points:
                hit = HandleManager.is_near_handle(point, position, threshold)
                if hit is not None:
                    self._drag = _DragTarget(path, point, hit.is_out)
                    self._drag_start = position
                    self._set_state(EditState.DRAGGING_HANDLE)
                    return True

        for path in paths:
            closest = self.path_store.find_closest_point_on_path(path, position, threshold)
            if closest is not None:
                point = closest.anchor_point
                self.select_point(point, add=self._is_shift_pressed)
                self._drag = _DragTarget(path, point, None)
                self._drag_start = position
                self._initial_position = point.position
                self._set_state(EditState.DRAGGING_POINT)
                return True

        if not self._is_shift_pressed:
            self.clear_selection()
        return False

    def on_mouse_move(self, position: PointLike) -> None:
        position = to_point(position)

        if self._state == EditState.IDLE:
            self._update_hover_preview(position)
            return

        drag = self._drag
        if self._state == EditState.DRAGGING_POINT:
            # absolute from the press, so repeated moves do not accumulate error
            delta = geometry.subtract(position, self._drag_start)
            moved = self.path_store.move_anchor_point(
                drag.path, drag.anchor.id, geometry.add(self._initial_position, delta)
            )
        else:
            self._apply_alt_override()
            moved = self.path_store.update_handle(
                drag.path, drag.anchor.id, drag.is_out_handle, position
            )
        if not moved:
            logger.debug(f"Drag target {drag.anchor.id!r} disappeared, ending drag")
            self._end_drag()

    def _apply_alt_override(self) -> None:
        anchor = self._drag.anchor
        if self._is_alt_pressed and self._original_mirror_mode is None:
            self._original_mirror_mode = anchor.mirror_mode
            anchor.mirror_mode = HandleMirrorMode.INDEPENDENT
        elif not self._is_alt_pressed and self._original_mirror_mode is not None:
            self._restore_mirror_mode()

    def _restore_mirror_mode(self) -> None:
        if self._original_mirror_mode is not None and self._drag is not None:
            self._drag.anchor.mirror_mode = self._original_mirror_mode
        self._original_mirror_mode = None

    def on_mouse_up(self, position: PointLike) -> None:
        self._end_drag()

    def _end_drag(self) -> None:
        self._restore_mirror_mode()
        self._drag = None
        self._drag_start = None
        self._initial_position = None
        self._set_state(EditState.IDLE)

    def on_double_click(self, position: PointLike) -> Optional[AnchorPoint]:
        """
        Insert an anchor at the active hover preview and select it.

        Returns:
            The new anchor, or None if there was no usable preview
        """
        preview = self._hover
        if preview is None:
            return None

        path = self.path_store.get_path(preview.path.id)
        segments = self.path_store.get_segments(path) if path is not None else []
        if preview.segment_index >= len(segments):
            self._clear_hover_preview()
            return None
        # the path may have changed since the preview was sampled
        current = segments[preview.segment_index].point_at(preview.t)
        if geometry.distance(current, preview.point) >= self.options.insert_snap_distance:
            self._clear_hover_preview()
            return None

        anchor = self.path_store.insert_point_on_segment(
            path, preview.segment_index, preview.t
        )
        if anchor is None:
            return None
        self.select_point(anchor, add=self._is_shift_pressed)
        self._clear_hover_preview()
        return anchor

    # ========== Keyboard ==========

    def on_key_down(self, key: str) -> bool:
        if key == Key.SHIFT:
            self._is_shift_pressed = True
        elif key == Key.ALT:
            self._is_alt_pressed = True
        elif key in (Key.DELETE, Key.BACKSPACE):
            self.delete_selected_points()
        else:
            return False
        return True

    def on_key_up(self, key: str) -> bool:
        if key == Key.SHIFT:
            self._is_shift_pressed = False
        elif key == Key.ALT:
            self._is_alt_pressed = False
            self._restore_mirror_mode()
        else:
            return False
        return True

    def delete_selected_points(self) -> int:
        """Remove every selected anchor from its path; paths themselves are kept."""
        removed = 0
        for path in self.path_store.get_all_paths():
            doomed = [p.id for p in path.anchor_points if p.id in self._selected_ids]
            if doomed:
                removed += self.path_store.remove_anchor_points(path, doomed)
        self._selected_ids.clear()
        self._notify_selection()
        return removed

    def reset(self) -> None:
        self._end_drag()
        self._is_shift_pressed = False
        self._is_alt_pressed = False
        if self._hover is not None:
            self._clear_hover_preview()
