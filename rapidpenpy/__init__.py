"""
rapidpenpy - pen-tool style vector path editing for Python.

This package provides the geometry and interaction core of a pen tool:
anchor points with Bezier handles, a path store, drawing and editing state
machines, and path-data import/export. Renderer backends live in
``rapidpenpy.integrations``.
"""

__version__ = "0.1.0"

from .app import PenApp, ToolMode
from .cad_types import Point
from .config import EditModeOptions, PenToolOptions, RenderOptions
from .events import CallbackObserver, Key, ObserverGroup, PathChange, PathObserver
from .handles import HandleManager
from .path import (
    AnchorPoint,
    BezierHandle,
    HandleMirrorMode,
    PathSegment,
    SegmentType,
    StrokeCapStyle,
    VectorPath,
)
from .path_store import PathStore
from .renderer import PathRenderer
from .svg_importer import (
    PathDataError,
    export_svg_document,
    export_svg_path,
    import_svg_document,
    import_svg_path,
    import_svg_paths,
    load_svg_file,
)
from .tools import EditMode, EditState, PenTool, PenToolState

__all__ = [
    # Facade
    "PenApp",
    "ToolMode",
    # Model
    "Point",
    "AnchorPoint",
    "BezierHandle",
    "HandleMirrorMode",
    "PathSegment",
    "SegmentType",
    "StrokeCapStyle",
    "VectorPath",
    "PathStore",
    "HandleManager",
    # Tools
    "PenTool",
    "PenToolState",
    "EditMode",
    "EditState",
    # Options
    "PenToolOptions",
    "EditModeOptions",
    "RenderOptions",
    # Notification
    "PathObserver",
    "CallbackObserver",
    "ObserverGroup",
    "PathChange",
    "Key",
    # Interchange
    "PathDataError",
    "import_svg_path",
    "import_svg_paths",
    "import_svg_document",
    "load_svg_file",
    "export_svg_path",
    "export_svg_document",
    # Rendering
    "PathRenderer",
]
