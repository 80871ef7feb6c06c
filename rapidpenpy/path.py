"""
Path data model - anchor points, handles, derived segments and vector paths.

Handle positions are always stored relative to their owning anchor point; the
absolute location of a handle is ``anchor.position + handle.position``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import numpy as np

from . import geometry
from .cad_types import Point
from .constants import DEFAULT_STROKE, DEFAULT_STROKE_WIDTH


class HandleMirrorMode(str, Enum):
    """
    How editing one handle of an anchor propagates to its sibling.

    - MIRRORED: same angle (180 degrees apart) and same length
    - ANGLE_LOCKED: 180 degrees apart, lengths independent
    - INDEPENDENT: handles move freely
    """

    MIRRORED = "mirrored"
    ANGLE_LOCKED = "angle-locked"
    INDEPENDENT = "independent"


class SegmentType(str, Enum):
    LINE = "line"
    CUBIC_BEZIER = "cubic-bezier"


class StrokeCapStyle(str, Enum):
    NONE = "none"
    ROUND = "round"
    SQUARE = "square"
    LINE_ARROW = "line-arrow"
    TRIANGLE_ARROW = "triangle-arrow"
    CIRCLE_ARROW = "circle-arrow"


@dataclass
class BezierHandle:
    """Control point offset relative to its anchor"""

    position: Point
    visible: bool = True

    def to_json(self):
        return {"position": self.position.to_json(), "visible": self.visible}

    @staticmethod
    def from_json(json_data):
        if json_data is None:
            return None
        return BezierHandle(
            Point.from_json(json_data["position"]), json_data.get("visible", True)
        )


def _is_visible(handle: Optional[BezierHandle]) -> bool:
    return handle is not None and handle.visible


@dataclass
class AnchorPoint:
    id: str
    position: Point
    handle_in: Optional[BezierHandle] = None
    handle_out: Optional[BezierHandle] = None
    mirror_mode: HandleMirrorMode = HandleMirrorMode.MIRRORED
    # Reserved; not used by segment derivation
    corner_radius: float = 0.0
    selected: bool = False

    @property
    def has_handle_in(self) -> bool:
        return _is_visible(self.handle_in)

    @property
    def has_handle_out(self) -> bool:
        return _is_visible(self.handle_out)

    @property
    def is_smooth(self) -> bool:
        return self.has_handle_in or self.has_handle_out

    def handle(self, is_out: bool) -> Optional[BezierHandle]:
        return self.handle_out if is_out else self.handle_in

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "position": self.position.to_json(),
            "handle_in": self.handle_in.to_json() if self.handle_in else None,
            "handle_out": self.handle_out.to_json() if self.handle_out else None,
            "mirror_mode": self.mirror_mode.value,
            "corner_radius": self.corner_radius,
            "selected": self.selected,
        }

    @staticmethod
    def from_json(json_data: Dict[str, Any]) -> "AnchorPoint":
        return AnchorPoint(
            id=json_data["id"],
            position=Point.from_json(json_data["position"]),
            handle_in=BezierHandle.from_json(json_data.get("handle_in")),
            handle_out=BezierHandle.from_json(json_data.get("handle_out")),
            mirror_mode=HandleMirrorMode(json_data.get("mirror_mode", "mirrored")),
            corner_radius=json_data.get("corner_radius", 0.0),
            selected=json_data.get("selected", False),
        )


@dataclass(frozen=True)
class PathSegment:
    """A derived piece of a path between two consecutive anchors."""

    type: SegmentType
    start_point: AnchorPoint
    end_point: AnchorPoint
    control_point1: Optional[Point] = None
    control_point2: Optional[Point] = None

    @property
    def is_curve(self) -> bool:
        return self.type == SegmentType.CUBIC_BEZIER

    def point_at(self, t: float) -> Point:
        start, end = self.start_point.position, self.end_point.position
        if not self.is_curve:
            return geometry.lerp(start, end, t)
        return geometry.cubic_bezier_point(
            start, self.control_point1, self.control_point2, end, t
        )

    def sample(self, samples: int) -> np.ndarray:
        start, end = self.start_point.position, self.end_point.position
        if not self.is_curve:
            return geometry.sample_line(start, end, samples)
        return geometry.sample_cubic_bezier(
            start, self.control_point1, self.control_point2, end, samples
        )


@dataclass
class VectorPath:
    id: str
    anchor_points: List[AnchorPoint] = field(default_factory=list)
    closed: bool = False
    fill: Optional[str] = None
    stroke: str = DEFAULT_STROKE
    stroke_width: float = DEFAULT_STROKE_WIDTH
    stroke_cap_start: StrokeCapStyle = StrokeCapStyle.ROUND
    stroke_cap_end: StrokeCapStyle = StrokeCapStyle.ROUND
    selected: bool = False

    @property
    def point_count(self) -> int:
        return len(self.anchor_points)

    def index_of(self, point_id: str) -> int:
        """Index of the anchor with ``point_id``, or -1."""
        for i, point in enumerate(self.anchor_points):
            if point.id == point_id:
                return i
        return -1

    def get_anchor_point(self, point_id: str) -> Optional[AnchorPoint]:
        idx = self.index_of(point_id)
        return self.anchor_points[idx] if idx != -1 else None

    @property
    def first_point(self) -> Optional[AnchorPoint]:
        return self.anchor_points[0] if self.anchor_points else None

    @property
    def last_point(self) -> Optional[AnchorPoint]:
        return self.anchor_points[-1] if self.anchor_points else None

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "anchor_points": [p.to_json() for p in self.anchor_points],
            "closed": self.closed,
            "fill": self.fill,
            "stroke": self.stroke,
            "stroke_width": self.stroke_width,
            "stroke_cap_start": self.stroke_cap_start.value,
            "stroke_cap_end": self.stroke_cap_end.value,
            "selected": self.selected,
        }

    @staticmethod
    def from_json(json_data: Dict[str, Any]) -> "VectorPath":
        return VectorPath(
            id=json_data["id"],
            anchor_points=[
                AnchorPoint.from_json(p) for p in json_data.get("anchor_points", [])
            ],
            closed=json_data.get("closed", False),
            fill=json_data.get("fill"),
            stroke=json_data.get("stroke", DEFAULT_STROKE),
            stroke_width=json_data.get("stroke_width", DEFAULT_STROKE_WIDTH),
            stroke_cap_start=StrokeCapStyle(
                json_data.get("stroke_cap_start", StrokeCapStyle.ROUND.value)
            ),
            stroke_cap_end=StrokeCapStyle(
                json_data.get("stroke_cap_end", StrokeCapStyle.ROUND.value)
            ),
            selected=json_data.get("selected", False),
        )
