from .edit_mode import EditMode, EditState, HoverPreview
from .pen_tool import PenTool, PenToolState

__all__ = ["EditMode", "EditState", "HoverPreview", "PenTool", "PenToolState"]
