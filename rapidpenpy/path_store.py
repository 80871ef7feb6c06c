"""
PathStore - the system of record for every vector path and its anchor points.

Paths are held in an arena keyed by id. Operations accept either a VectorPath
or its id; addressing a path or anchor that is no longer in the store is a
referential miss and is reported with ``False``/``None`` rather than raised.
"""

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Tuple, Union

from . import geometry
from .cad_types import PointLike, to_point
from .constants import ANCHOR_HIT_THRESHOLD, ID_PREFIX_PATH, ID_PREFIX_POINT
from .events import PathChange, PathObserver
from .handles import HandleManager
from .path import (
    AnchorPoint,
    BezierHandle,
    HandleMirrorMode,
    PathSegment,
    SegmentType,
    VectorPath,
)
from .svg_importer.path_data import format_number

logger = logging.getLogger(__name__)

PathRef = Union[VectorPath, str]


class ClosestAnchor:
    __slots__ = ("anchor_point", "distance")

    def __init__(self, anchor_point: AnchorPoint, distance: float):
        self.anchor_point = anchor_point
        self.distance = distance

    def __repr__(self):
        return f"ClosestAnchor(id={self.anchor_point.id!r}, distance={self.distance})"


class PathStore:
    def __init__(self, observer: Optional[PathObserver] = None):
        self._paths: "OrderedDict[str, VectorPath]" = OrderedDict()
        self._id_counter = 0
        self.observer = observer if observer is not None else PathObserver()

    # ========== Identity and notification ==========

    def _generate_id(self, prefix: str) -> str:
        new_id = f"{prefix}-{self._id_counter}"
        self._id_counter += 1
        return new_id

    def _notify(self, path: VectorPath, change: PathChange) -> None:
        self.observer.path_modified(path, change)

    def set_observer(self, observer: Optional[PathObserver]) -> None:
        self.observer = observer if observer is not None else PathObserver()

    def _resolve(self, path: PathRef) -> Optional[VectorPath]:
        path_id = path if isinstance(path, str) else path.id
        stored = self._paths.get(path_id)
        if stored is None:
            logger.debug(f"Path {path_id!r} is not in the store")
        return stored

    @staticmethod
    def _make_handle(offset: Optional[PointLike]) -> Optional[BezierHandle]:
        return BezierHandle(to_point(offset), True) if offset is not None else None

    # ========== Path CRUD ==========

    def create_path(self, **style) -> VectorPath:
        """
        Create a new empty path.

        Keyword arguments override the default styling (``fill``, ``stroke``,
        ``stroke_width``, ``stroke_cap_start``, ``stroke_cap_end``).
        """
        path = VectorPath(id=self._generate_id(ID_PREFIX_PATH))
        self._apply_style(path, style)
        self._paths[path.id] = path
        self._notify(path, PathChange.PATH_CREATED)
        return path

    @staticmethod
    def _apply_style(path: VectorPath, style: Dict) -> None:
        for key, value in style.items():
            if value is None:
                continue
            if not hasattr(path, key) or key in ("id", "anchor_points", "closed"):
                raise ValueError(f"Unknown path style attribute: {key}")
            if key == "stroke_width":
                value = float(value)
            elif key in ("stroke_cap_start", "stroke_cap_end"):
                value = type(getattr(path, key))(value)
            setattr(path, key, value)

    def set_path_style(self, path: PathRef, **style) -> bool:
        stored = self._resolve(path)
        if stored is None:
            return False
        self._apply_style(stored, style)
        self._notify(stored, PathChange.PATH_STYLED)
        return True

    def get_path(self, path_id: str) -> Optional[VectorPath]:
        return self._paths.get(path_id)

    def remove_path(self, path_id: str) -> bool:
        if path_id not in self._paths:
            return False
        del self._paths[path_id]
        self.observer.path_removed(path_id)
        return True

    def get_all_paths(self) -> List[VectorPath]:
        return list(self._paths.values())

    def path_count(self) -> int:
        return len(self._paths)

    def clear(self) -> None:
        """Remove every path. The id counter keeps running."""
        for path_id in list(self._paths):
            self.remove_path(path_id)

    def __contains__(self, path: PathRef) -> bool:
        path_id = path if isinstance(path, str) else path.id
        return path_id in self._paths

    def __iter__(self):
        return iter(self.get_all_paths())

    # ========== Anchor points ==========

    def _new_anchor(
        self,
        position: PointLike,
        handle_in: Optional[PointLike],
        handle_out: Optional[PointLike],
        mirror_mode: Optional[HandleMirrorMode] = None,
    ) -> AnchorPoint:
        anchor = AnchorPoint(
            id=self._generate_id(ID_PREFIX_POINT),
            position=to_point(position),
            handle_in=self._make_handle(handle_in),
            handle_out=self._make_handle(handle_out),
        )
        if mirror_mode is not None:
            anchor.mirror_mode = HandleMirrorMode(mirror_mode)
        return anchor

    def add_anchor_point(
        self,
        path: PathRef,
        position: PointLike,
        handle_in: Optional[PointLike] = None,
        handle_out: Optional[PointLike] = None,
        mirror_mode: Optional[HandleMirrorMode] = None,
    ) -> Optional[AnchorPoint]:
        """
        Append an anchor point to a path.

        Args:
            path: Target path (or its id)
            position: Absolute anchor position
            handle_in: Optional incoming handle, relative to the anchor
            handle_out: Optional outgoing handle, relative to the anchor
            mirror_mode: Optional mirror mode (defaults to MIRRORED)

        Returns:
            The new anchor, or None if the path is not in the store
        """
        stored = self._resolve(path)
        if stored is None:
            return None
        anchor = self._new_anchor(position, handle_in, handle_out, mirror_mode)
        stored.anchor_points.append(anchor)
        self._notify(stored, PathChange.POINT_ADDED)
        return anchor

    def insert_anchor_point(
        self,
        path: PathRef,
        index: int,
        position: PointLike,
        handle_in: Optional[PointLike] = None,
        handle_out: Optional[PointLike] = None,
    ) -> Optional[AnchorPoint]:
        """Insert an anchor point before ``index`` (list.insert semantics)."""
        stored = self._resolve(path)
        if stored is None:
            return None
        anchor = self._new_anchor(position, handle_in, handle_out)
        stored.anchor_points.insert(index, anchor)
        self._notify(stored, PathChange.POINT_ADDED)
        return anchor

    def remove_anchor_point(self, path: PathRef, point_id: str) -> bool:
        return self.remove_anchor_points(path, [point_id]) == 1

    def remove_anchor_points(self, path: PathRef, point_ids: Iterable[str]) -> int:
        """
        Remove several anchors from one path with a single notification.

        The path itself is kept even when it ends up empty.

        Returns:
            Number of anchors actually removed
        """
        stored = self._resolve(path)
        if stored is None:
            return 0
        doomed = set(point_ids)
        kept = [p for p in stored.anchor_points if p.id not in doomed]
        removed = len(stored.anchor_points) - len(kept)
        if removed:
            stored.anchor_points[:] = kept
            self._notify(stored, PathChange.POINT_REMOVED)
        return removed

    def move_anchor_point(
        self, path: PathRef, point_id: str, new_position: PointLike
    ) -> bool:
        """Move an anchor to an absolute position; its handles travel with it."""
        stored = self._resolve(path)
        if stored is None:
            return False
        anchor = stored.get_anchor_point(point_id)
        if anchor is None:
            logger.debug(f"Anchor {point_id!r} not found in path {stored.id!r}")
            return False
        anchor.position = to_point(new_position)
        self._notify(stored, PathChange.POINT_MOVED)
        return True

    def find_anchor(self, point_id: str) -> Optional[Tuple[VectorPath, AnchorPoint]]:
        for path in self._paths.values():
            anchor = path.get_anchor_point(point_id)
            if anchor is not None:
                return path, anchor
        return None

    # ========== Handles ==========

    def update_handle(
        self, path: PathRef, point_id: str, is_out: bool, absolute_position: PointLike
    ) -> bool:
        """Set one handle to an absolute position, honoring the anchor's mirror mode."""
        stored = self._resolve(path)
        if stored is None:
            return False
        anchor = stored.get_anchor_point(point_id)
        if anchor is None:
            return False
        HandleManager.update_handle(anchor, is_out, absolute_position)
        self._notify(stored, PathChange.HANDLE_ADJUSTED)
        return True

    def set_handles(
        self,
        path: PathRef,
        point_id: str,
        handle_in: Optional[PointLike],
        handle_out: Optional[PointLike],
        mirror_mode: Optional[HandleMirrorMode] = None,
    ) -> bool:
        """Replace both handles verbatim (relative offsets, None removes)."""
        stored = self._resolve(path)
        if stored is None:
            return False
        anchor = stored.get_anchor_point(point_id)
        if anchor is None:
            return False
        anchor.handle_in = self._make_handle(handle_in)
        anchor.handle_out = self._make_handle(handle_out)
        if mirror_mode is not None:
            anchor.mirror_mode = HandleMirrorMode(mirror_mode)
        self._notify(stored, PathChange.HANDLE_ADJUSTED)
        return True

    def set_mirror_mode(
        self, path: PathRef, point_id: str, mode: HandleMirrorMode
    ) -> bool:
        stored = self._resolve(path)
        if stored is None:
            return False
        anchor = stored.get_anchor_point(point_id)
        if anchor is None:
            return False
        HandleManager.set_mirror_mode(anchor, mode)
        self._notify(stored, PathChange.HANDLE_ADJUSTED)
        return True

    # ========== Open / close ==========

    def close_path(self, path: PathRef) -> bool:
        stored = self._resolve(path)
        if stored is None:
            return False
        stored.closed = True
        self._notify(stored, PathChange.PATH_CLOSED)
        return True

    def open_path(self, path: PathRef) -> bool:
        stored = self._resolve(path)
        if stored is None:
            return False
        stored.closed = False
        self._notify(stored, PathChange.PATH_OPENED)
        return True

    # ========== Derived geometry ==========

    @staticmethod
    def get_segments(path: VectorPath) -> List[PathSegment]:
        """
        Derive the ordered segment list of a path.

        A segment is a cubic curve when the start's out-handle or the end's
        in-handle is visible; a missing side uses the anchor position itself
        as control point. Otherwise the segment is a straight line. Closed
        paths get an extra segment from the last anchor back to the first.
        """
        points = path.anchor_points
        if len(points) < 2:
            return []

        loop_end = len(points) if path.closed else len(points) - 1
        segments = []
        for i in range(loop_end):
            start = points[i]
            end = points[(i + 1) % len(points)]
            has_out = start.has_handle_out
            has_in = end.has_handle_in
            if has_out or has_in:
                cp1 = (
                    geometry.add(start.position, start.handle_out.position)
                    if has_out
                    else start.position
                )
                cp2 = (
                    geometry.add(end.position, end.handle_in.position)
                    if has_in
                    else end.position
                )
                segments.append(
                    PathSegment(SegmentType.CUBIC_BEZIER, start, end, cp1, cp2)
                )
            else:
                segments.append(PathSegment(SegmentType.LINE, start, end))
        return segments

    @staticmethod
    def to_svg_path(path: VectorPath) -> str:
        """Transcribe a path into path-data text; empty for fewer than 2 anchors."""
        segments = PathStore.get_segments(path)
        if not segments:
            return ""

        first = segments[0].start_point.position
        parts = [f"M {format_number(first.x)} {format_number(first.y)}"]
        for segment in segments:
            end = segment.end_point.position
            if segment.type == SegmentType.LINE:
                parts.append(f"L {format_number(end.x)} {format_number(end.y)}")
            else:
                cp1, cp2 = segment.control_point1, segment.control_point2
                parts.append(
                    f"C {format_number(cp1.x)} {format_number(cp1.y)}, "
                    f"{format_number(cp2.x)} {format_number(cp2.y)}, "
                    f"{format_number(end.x)} {format_number(end.y)}"
                )
        if path.closed:
            parts.append("Z")
        return " ".join(parts)

    @staticmethod
    def find_closest_point_on_path(
        path: VectorPath, position: PointLike, threshold: float = ANCHOR_HIT_THRESHOLD
    ) -> Optional[ClosestAnchor]:
        """
        Closest anchor of ``path`` within ``threshold`` of ``position``.

        Exact distance ties go to the lowest index.
        """
        position = to_point(position)
        closest = None
        for anchor in path.anchor_points:
            dist = geometry.distance(position, anchor.position)
            if dist <= threshold and (closest is None or dist < closest.distance):
                closest = ClosestAnchor(anchor, dist)
        return closest

    # ========== Point insertion ==========

    def insert_point_on_segment(
        self, path: PathRef, segment_index: int, t: float
    ) -> Optional[AnchorPoint]:
        """
        Insert a new anchor on a segment without changing the path's shape.

        Curves are split with De Casteljau subdivision: the new anchor gets the
        inner control points as handles and the neighbours' existing handles
        are rewritten to the outer control points. Straight segments get a new
        anchor with default handles instead.

        Args:
            path: Target path (or its id)
            segment_index: Index into ``get_segments(path)``
            t: Curve parameter, strictly between 0 and 1

        Returns:
            The new anchor, or None on a referential miss or a parameter at
            an endpoint
        """
        stored = self._resolve(path)
        if stored is None:
            return None
        segments = self.get_segments(stored)
        if not 0 <= segment_index < len(segments):
            logger.debug(
                f"Segment {segment_index} out of range for path {stored.id!r}"
            )
            return None
        if not 0.0 < t < 1.0:
            logger.debug(f"Refusing to insert at segment endpoint (t={t})")
            return None

        segment = segments[segment_index]
        start, end = segment.start_point, segment.end_point

        if segment.is_curve:
            first, second = geometry.subdivide_cubic_bezier(
                start.position,
                segment.control_point1,
                segment.control_point2,
                end.position,
                t,
            )
            if start.has_handle_out:
                start.handle_out.position = geometry.subtract(first.cp1, start.position)
            if end.has_handle_in:
                end.handle_in.position = geometry.subtract(second.cp2, end.position)
            # inner control points are collinear with the new anchor but
            # generally of different lengths
            anchor = self._new_anchor(
                first.p3,
                geometry.subtract(first.cp2, first.p3),
                geometry.subtract(second.cp1, first.p3),
                HandleMirrorMode.ANGLE_LOCKED,
            )
        else:
            anchor = self._new_anchor(segment.point_at(t), None, None)
            HandleManager.create_default_handles(anchor, start.position, end.position)

        stored.anchor_points.insert(segment_index + 1, anchor)
        self._notify(stored, PathChange.POINT_ADDED)
        return anchor

    # ========== Snapshot ==========

    def to_json(self):
        return {"paths": [path.to_json() for path in self._paths.values()]}

    def __repr__(self):
        return f"PathStore(paths={len(self._paths)})"
