"""
Drawing state machine.

Turns pointer and keyboard events into appends on a PathStore: a click places
a straight anchor, a click-and-drag pulls handles out of the anchor it just
placed, and clicking back on the first anchor closes the path. Anchors are
never removed here.
"""

import logging
from enum import Enum
from typing import Optional

from rapidpenpy import geometry
from rapidpenpy.cad_types import Point, PointLike, to_point
from rapidpenpy.config import PenToolOptions
from rapidpenpy.events import Key, PathObserver
from rapidpenpy.path import AnchorPoint, HandleMirrorMode, VectorPath
from rapidpenpy.path_store import PathStore

logger = logging.getLogger(__name__)


class PenToolState(str, Enum):
    IDLE = "idle"
    DRAWING = "drawing"
    DRAGGING_HANDLE = "dragging-handle"


class PenTool:
    def __init__(
        self,
        path_store: PathStore,
        observer: Optional[PathObserver] = None,
        options: Optional[PenToolOptions] = None,
    ):
        self.path_store = path_store
        self.observer = observer if observer is not None else PathObserver()
        self.options = options if options is not None else PenToolOptions()

        self._state = PenToolState.IDLE
        self._current_path_id: Optional[str] = None
        # anchor placed by the press currently in progress
        self._pending_point_id: Optional[str] = None
        self._press_position: Optional[Point] = None
        self._is_shift_pressed = False
        self._is_alt_pressed = False
        self._close_hover = False

    # ========== State ==========

    def get_state(self) -> PenToolState:
        return self._state

    def _set_state(self, state: PenToolState) -> None:
        if state != self._state:
            self._state = state
            self.observer.state_changed(state)

    def get_current_path(self) -> Optional[VectorPath]:
        """The path being drawn, or None if nothing is in progress."""
        if self._current_path_id is None:
            return None
        path = self.path_store.get_path(self._current_path_id)
        if path is None:
            # removed from the store behind our back
            logger.debug(f"Current path {self._current_path_id!r} left the store")
            self._current_path_id = None
        return path

    def can_close_path(self) -> bool:
        path = self.get_current_path()
        return (
            path is not None
            and not path.closed
            and path.point_count >= self.options.min_points_to_close
        )

    def _is_near_first_point(self, position: Point) -> bool:
        path = self.get_current_path()
        if path is None or path.first_point is None:
            return False
        dist = geometry.distance(position, path.first_point.position)
        return dist <= self.options.close_threshold

    def _set_close_hover(self, can_close: bool) -> None:
        if can_close != self._close_hover:
            self._close_hover = can_close
            self.observer.close_path_hover(can_close)

    def _constrain(self, origin: Optional[Point], position: Point) -> Point:
        if not self._is_shift_pressed or origin is None:
            return position
        return geometry.snap_to_angle(
            origin, position, self.options.snap_angle_increment
        )

    # ========== Pointer events ==========

    def on_mouse_down(self, position: PointLike) -> Optional[AnchorPoint]:
        """
        Place an anchor, or close the current path when pressing on its first anchor.

        Returns:
            The new anchor, or None when the press closed the path
        """
        position = to_point(position)

        if self.can_close_path() and self._is_near_first_point(position):
            path = self.get_current_path()
            self.path_store.close_path(path)
            logger.debug(f"Closed {path.id} by clicking its first anchor")
            self._finish()
            return None

        path = self.get_current_path()
        if path is None:
            path = self.path_store.create_path()
            self._current_path_id = path.id

        previous = path.last_point.position if path.last_point else None
        anchor = self.path_store.add_anchor_point(
            path, self._constrain(previous, position)
        )
        self._pending_point_id = anchor.id
        self._press_position = position
        self._set_state(PenToolState.DRAWING)
        return anchor

    def on_mouse_move(self, position: PointLike) -> None:
        position = to_point(position)

        if self._pending_point_id is None:
            self._set_close_hover(
                self.can_close_path() and self._is_near_first_point(position)
            )
            return

        path = self.get_current_path()
        anchor = path.get_anchor_point(self._pending_point_id) if path else None
        if anchor is None:
            self._pending_point_id = None
            return

        dragging = self._state == PenToolState.DRAGGING_HANDLE
        if not dragging:
            moved = geometry.distance(position, self._press_position)
            if moved <= self.options.drag_threshold:
                return

        target = self._constrain(anchor.position, position)
        handle_out = geometry.subtract(target, anchor.position)

        if self._is_alt_pressed:
            # only the outgoing handle follows the pointer
            handle_in = anchor.handle_in.position if anchor.has_handle_in else None
            self.path_store.set_handles(
                path, anchor.id, handle_in, handle_out, HandleMirrorMode.INDEPENDENT
            )
        elif not dragging:
            self.path_store.set_handles(
                path,
                anchor.id,
                geometry.negate(handle_out),
                handle_out,
                HandleMirrorMode.MIRRORED,
            )
        else:
            self.path_store.update_handle(path, anchor.id, True, target)

        self._set_state(PenToolState.DRAGGING_HANDLE)

    def on_mouse_up(self, position: PointLike) -> None:
        if self._pending_point_id is None:
            return
        self._pending_point_id = None
        self._press_position = None
        if self.get_current_path() is not None:
            self._set_state(PenToolState.DRAWING)
        else:
            self._set_state(PenToolState.IDLE)

    # ========== Keyboard ==========

    def on_key_down(self, key: str) -> bool:
        """Returns True when the key was consumed."""
        if key == Key.SHIFT:
            self._is_shift_pressed = True
        elif key == Key.ALT:
            self._is_alt_pressed = True
        elif key == Key.ENTER:
            path = self.get_current_path()
            if path is not None and path.point_count >= 2:
                self.path_store.close_path(path)
            self._finish()
        elif key == Key.ESCAPE:
            self._finish()
        else:
            return False
        return True

    def on_key_up(self, key: str) -> bool:
        if key == Key.SHIFT:
            self._is_shift_pressed = False
        elif key == Key.ALT:
            self._is_alt_pressed = False
        else:
            return False
        return True

    # ========== Lifecycle ==========

    def _finish(self) -> None:
        self._current_path_id = None
        self._pending_point_id = None
        self._press_position = None
        self._set_close_hover(False)
        self._set_state(PenToolState.IDLE)

    def reset(self) -> None:
        """Abandon the current path (it stays in the store) and release modifiers."""
        self._is_shift_pressed = False
        self._is_alt_pressed = False
        self._finish()
