"""
Per-instance options for the interactive tools and renderers.

Defaults come from ``rapidpenpy.constants``; instances are passed explicitly
to constructors, there is no module-level configuration state.
"""

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Type, TypeVar

from .constants import (
    CLOSE_PATH_THRESHOLD,
    DEFAULT_HANDLE_LENGTH,
    DEFAULT_STROKE,
    DEFAULT_STROKE_WIDTH,
    DRAG_THRESHOLD,
    EDIT_HIT_THRESHOLD,
    HOVER_DISTANCE,
    INSERT_SNAP_DISTANCE,
    MIN_POINTS_TO_CLOSE,
    SEGMENT_SAMPLES,
    SNAP_ANGLE_INCREMENT,
)

T = TypeVar("T", bound="_Options")


class _Options:
    @classmethod
    def from_dict(cls: Type[T], data: Dict[str, Any]) -> T:
        """Build options from a mapping; unknown keys raise ValueError."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(
                f"Unknown {cls.__name__} option(s): {', '.join(sorted(unknown))}"
            )
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PenToolOptions(_Options):
    close_threshold: float = CLOSE_PATH_THRESHOLD
    drag_threshold: float = DRAG_THRESHOLD
    snap_angle_increment: float = SNAP_ANGLE_INCREMENT
    min_points_to_close: int = MIN_POINTS_TO_CLOSE
    default_handle_length: float = DEFAULT_HANDLE_LENGTH

    def __post_init__(self):
        if self.drag_threshold < 0 or self.close_threshold < 0:
            raise ValueError("Pen tool thresholds must be non-negative")
        if self.snap_angle_increment <= 0:
            raise ValueError("snap_angle_increment must be positive")


@dataclass
class EditModeOptions(_Options):
    hover_distance: float = HOVER_DISTANCE
    hit_threshold: float = EDIT_HIT_THRESHOLD
    samples: int = SEGMENT_SAMPLES
    insert_snap_distance: float = INSERT_SNAP_DISTANCE

    def __post_init__(self):
        if self.samples < 1:
            raise ValueError(f"samples must be >= 1, got {self.samples}")
        if self.hover_distance < 0 or self.hit_threshold < 0:
            raise ValueError("Edit mode thresholds must be non-negative")


@dataclass
class RenderOptions(_Options):
    stroke_color: str = DEFAULT_STROKE
    stroke_width: float = DEFAULT_STROKE_WIDTH
    fill_color: str = "none"
    selection_color: str = "#0066FF"
    anchor_point_color: str = "#FFFFFF"
    anchor_point_size: float = 6.0
    handle_color: str = "#0066FF"
    preview_color: str = "#999999"
    # False: only handles of selected anchors are drawn
    show_all_handles: bool = False

    def update(self, **options) -> None:
        """Set several options at once; unknown names raise ValueError."""
        known = {f.name for f in fields(self)}
        for key, value in options.items():
            if key not in known:
                raise ValueError(f"Unknown RenderOptions option: {key}")
            setattr(self, key, value)
