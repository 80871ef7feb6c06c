"""
Synchronous change notification.

The path store and both tools report every completed mutation to a single
observer, exactly once, before the mutating call returns. Consumers (such as
a renderer) re-read the store when notified instead of applying diffs.
"""

from enum import Enum
from typing import TYPE_CHECKING, Callable, List, Optional

from rapidpenpy.constants import (
    KEY_ALT,
    KEY_BACKSPACE,
    KEY_DELETE,
    KEY_ENTER,
    KEY_ESCAPE,
    KEY_SHIFT,
)

if TYPE_CHECKING:
    from rapidpenpy.cad_types import Point
    from rapidpenpy.path import AnchorPoint, VectorPath


class PathChange(str, Enum):
    PATH_CREATED = "path-created"
    PATH_STYLED = "path-styled"
    POINT_ADDED = "point-added"
    POINT_REMOVED = "point-removed"
    POINT_MOVED = "point-moved"
    HANDLE_ADJUSTED = "handle-adjusted"
    PATH_CLOSED = "path-closed"
    PATH_OPENED = "path-opened"


class Key(str, Enum):
    """Logical key identifiers understood by the tools."""

    SHIFT = KEY_SHIFT
    ALT = KEY_ALT
    ENTER = KEY_ENTER
    ESCAPE = KEY_ESCAPE
    DELETE = KEY_DELETE
    BACKSPACE = KEY_BACKSPACE


class PathObserver:
    """Base observer; every hook is a no-op so subclasses override only what they need."""

    def path_modified(self, path: "VectorPath", change: PathChange) -> None:
        pass

    def path_removed(self, path_id: str) -> None:
        pass

    def selection_changed(self, points: List["AnchorPoint"]) -> None:
        pass

    def state_changed(self, state: Enum) -> None:
        pass

    def hover_preview_changed(
        self, point: Optional["Point"], path: Optional["VectorPath"]
    ) -> None:
        pass

    def close_path_hover(self, can_close: bool) -> None:
        pass


class CallbackObserver(PathObserver):
    """Adapts plain callables to the observer interface."""

    def __init__(
        self,
        on_path_modified: Optional[Callable] = None,
        on_path_removed: Optional[Callable] = None,
        on_selection_change: Optional[Callable] = None,
        on_state_change: Optional[Callable] = None,
        on_hover_preview: Optional[Callable] = None,
        on_close_path_hover: Optional[Callable] = None,
    ):
        self.on_path_modified = on_path_modified
        self.on_path_removed = on_path_removed
        self.on_selection_change = on_selection_change
        self.on_state_change = on_state_change
        self.on_hover_preview = on_hover_preview
        self.on_close_path_hover = on_close_path_hover

    def path_modified(self, path, change):
        if self.on_path_modified:
            self.on_path_modified(path, change)

    def path_removed(self, path_id):
        if self.on_path_removed:
            self.on_path_removed(path_id)

    def selection_changed(self, points):
        if self.on_selection_change:
            self.on_selection_change(points)

    def state_changed(self, state):
        if self.on_state_change:
            self.on_state_change(state)

    def hover_preview_changed(self, point, path):
        if self.on_hover_preview:
            self.on_hover_preview(point, path)

    def close_path_hover(self, can_close):
        if self.on_close_path_hover:
            self.on_close_path_hover(can_close)


class ObserverGroup(PathObserver):
    """Fans a notification out to several observers in registration order."""

    def __init__(self, *observers: PathObserver):
        self._observers: List[PathObserver] = list(observers)

    def add(self, observer: PathObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def remove(self, observer: PathObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def path_modified(self, path, change):
        for observer in self._observers:
            observer.path_modified(path, change)

    def path_removed(self, path_id):
        for observer in self._observers:
            observer.path_removed(path_id)

    def selection_changed(self, points):
        for observer in self._observers:
            observer.selection_changed(points)

    def state_changed(self, state):
        for observer in self._observers:
            observer.state_changed(state)

    def hover_preview_changed(self, point, path):
        for observer in self._observers:
            observer.hover_preview_changed(point, path)

    def close_path_hover(self, can_close):
        for observer in self._observers:
            observer.close_path_hover(can_close)
