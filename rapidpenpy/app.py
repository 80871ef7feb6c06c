import logging
from enum import Enum
from typing import List, Optional

from rapidpenpy.cad_types import PointLike, to_point
from rapidpenpy.config import EditModeOptions, PenToolOptions
from rapidpenpy.events import ObserverGroup, PathObserver
from rapidpenpy.path import AnchorPoint, VectorPath
from rapidpenpy.path_store import PathStore
from rapidpenpy.renderer import PathRenderer
from rapidpenpy.svg_importer import (
    export_svg_document,
    export_svg_path,
    import_svg_document,
    import_svg_path,
    load_svg_file,
)
from rapidpenpy.tools import EditMode, PenTool, PenToolState

logger = logging.getLogger(__name__)


class ToolMode(str, Enum):
    PEN = "pen"
    EDIT = "edit"


class _RedrawObserver(PathObserver):
    """Keeps the app's renderer in sync; the renderer re-reads the store each time."""

    def __init__(self, app: "PenApp"):
        self.app = app

    def path_modified(self, path, change):
        self.app.redraw()

    def path_removed(self, path_id):
        self.app.redraw()

    def selection_changed(self, points):
        self.app.redraw()

    def hover_preview_changed(self, point, path):
        if self.app.renderer is not None:
            self.app.renderer.render_hover_preview_point(point)

    def close_path_hover(self, can_close):
        renderer = self.app.renderer
        if renderer is None:
            return
        path = self.app.pen_tool.get_current_path()
        if can_close and path is not None and path.first_point is not None:
            renderer.render_close_path_indicator(path.first_point.position, True)
        else:
            renderer.render_close_path_indicator((0.0, 0.0), False)


class PenApp:
    """
    Editor facade: one path store, a pen tool, an edit mode and an optional renderer.

    Pointer and keyboard events are routed to the tool of the active mode.
    """

    def __init__(
        self,
        renderer: Optional[PathRenderer] = None,
        observer: Optional[PathObserver] = None,
        pen_options: Optional[PenToolOptions] = None,
        edit_options: Optional[EditModeOptions] = None,
    ):
        self.renderer = renderer
        self._observers = ObserverGroup(_RedrawObserver(self))
        if observer is not None:
            self._observers.add(observer)
        self.path_store = PathStore(self._observers)
        self.pen_tool = PenTool(self.path_store, self._observers, pen_options)
        self.edit_mode = EditMode(self.path_store, self._observers, edit_options)
        self.mode = ToolMode.PEN
        self.redraw()

    def add_observer(self, observer: PathObserver) -> None:
        self._observers.add(observer)

    def remove_observer(self, observer: PathObserver) -> None:
        self._observers.remove(observer)

    def redraw(self) -> None:
        if self.renderer is not None:
            self.renderer.update(self.path_store)

    # ========== Modes ==========

    def set_mode(self, mode: ToolMode) -> None:
        mode = ToolMode(mode)
        if mode == self.mode:
            return
        if mode == ToolMode.EDIT:
            self.pen_tool.reset()
        else:
            self.edit_mode.reset()
        self.mode = mode
        if self.renderer is not None:
            self.renderer.set_options(show_all_handles=mode == ToolMode.EDIT)
            self.renderer.clear_preview()
        self.redraw()
        logger.debug(f"Switched to {mode.value} mode")

    def toggle_mode(self) -> ToolMode:
        self.set_mode(ToolMode.EDIT if self.mode == ToolMode.PEN else ToolMode.PEN)
        return self.mode

    # ========== Event routing ==========

    def on_mouse_down(self, position: PointLike):
        if self.mode == ToolMode.PEN:
            return self.pen_tool.on_mouse_down(position)
        return self.edit_mode.on_mouse_down(position)

    def on_mouse_move(self, position: PointLike) -> None:
        if self.mode == ToolMode.EDIT:
            self.edit_mode.on_mouse_move(position)
            return
        self.pen_tool.on_mouse_move(position)
        path = self.pen_tool.get_current_path()
        if (
            self.renderer is not None
            and path is not None
            and path.last_point is not None
            and self.pen_tool.get_state() == PenToolState.DRAWING
        ):
            self.renderer.render_preview_line(path.last_point.position, to_point(position))

    def on_mouse_up(self, position: PointLike) -> None:
        if self.mode == ToolMode.PEN:
            self.pen_tool.on_mouse_up(position)
        else:
            self.edit_mode.on_mouse_up(position)

    def on_double_click(self, position: PointLike) -> Optional[AnchorPoint]:
        if self.mode != ToolMode.EDIT:
            return None
        return self.edit_mode.on_double_click(position)

    def on_key_down(self, key: str) -> bool:
        if self.mode == ToolMode.PEN:
            return self.pen_tool.on_key_down(key)
        return self.edit_mode.on_key_down(key)

    def on_key_up(self, key: str) -> bool:
        if self.mode == ToolMode.PEN:
            return self.pen_tool.on_key_up(key)
        return self.edit_mode.on_key_up(key)

    # ========== Path management ==========

    def can_close_path(self) -> bool:
        path = self.pen_tool.get_current_path()
        return path is not None and path.point_count > 2

    def close_current_path(self) -> bool:
        path = self.pen_tool.get_current_path()
        if path is None:
            return False
        self.path_store.close_path(path)
        self.pen_tool.reset()
        return True

    def clear_all_paths(self) -> None:
        self.path_store.clear()
        self.pen_tool.reset()
        self.edit_mode.clear_selection()
        if self.renderer is not None:
            self.renderer.clear()

    def path_count(self) -> int:
        return self.path_store.path_count()

    def get_paths(self) -> List[VectorPath]:
        return self.path_store.get_all_paths()

    # ========== Import / export ==========

    def import_svg_path(self, d: str, **style) -> Optional[VectorPath]:
        return import_svg_path(self.path_store, d, **style)

    def import_svg_document(self, svg_text: str) -> List[VectorPath]:
        return import_svg_document(self.path_store, svg_text)

    def load_svg_file(self, file_name: str) -> List[VectorPath]:
        return load_svg_file(self.path_store, file_name)

    def export_svg_path(self, path: VectorPath) -> str:
        return export_svg_path(self.path_store, path)

    def export_svg_document(
        self, file_name: Optional[str] = None, width: int = 800, height: int = 600
    ) -> str:
        return export_svg_document(self.path_store, file_name, width, height)
