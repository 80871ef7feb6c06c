"""
Renderer capability interface.

Backends pull everything they draw from a PathStore: the path list, each
path's derived segments and the absolute positions of anchor handles. The
core never imports a concrete backend; see ``rapidpenpy.integrations``.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

import numpy as np

from rapidpenpy.cad_types import Point, PointLike
from rapidpenpy.config import RenderOptions
from rapidpenpy.constants import SEGMENT_SAMPLES
from rapidpenpy.handles import HandleManager
from rapidpenpy.path import AnchorPoint, VectorPath
from rapidpenpy.path_store import PathStore


class PathRenderer(ABC):
    def __init__(self, options: Optional[RenderOptions] = None):
        self.options = options if options is not None else RenderOptions()

    @abstractmethod
    def render_paths(self, path_store: PathStore) -> None:
        """Draw the stroke (and fill of closed paths) of every path."""
        ...

    @abstractmethod
    def render_anchor_points(self, path_store: PathStore) -> None:
        ...

    @abstractmethod
    def render_handles(self, path_store: PathStore) -> None:
        """Draw handle lines and knobs, for all anchors or only selected ones."""
        ...

    @abstractmethod
    def render_preview_line(self, start: PointLike, end: PointLike) -> None:
        ...

    @abstractmethod
    def render_preview_curve(
        self, p0: PointLike, cp1: PointLike, cp2: PointLike, p3: PointLike
    ) -> None:
        ...

    @abstractmethod
    def render_close_path_indicator(self, point: PointLike, show: bool) -> None:
        ...

    @abstractmethod
    def render_hover_preview_point(self, point: Optional[PointLike]) -> None:
        """Mark the point where a double-click would insert an anchor; None hides it."""
        ...

    @abstractmethod
    def clear(self) -> None:
        ...

    @abstractmethod
    def clear_preview(self) -> None:
        ...

    def update(self, path_store: PathStore) -> None:
        """Redraw the whole view from the current state of ``path_store``."""
        self.clear()
        self.render_paths(path_store)
        self.render_handles(path_store)
        self.render_anchor_points(path_store)

    def set_options(self, **options) -> None:
        self.options.update(**options)

    # ========== Shared geometry helpers for backends ==========

    @staticmethod
    def path_outline(
        path_store: PathStore, path: VectorPath, samples: int = SEGMENT_SAMPLES
    ) -> np.ndarray:
        """
        Polyline approximation of a path as an (N, 2) array.

        Lines contribute their two endpoints, curves ``samples + 1`` points.
        Paths with fewer than two anchors yield an empty array.
        """
        chunks = []
        for segment in path_store.get_segments(path):
            if segment.is_curve:
                pts = segment.sample(samples)
            else:
                pts = np.array(
                    [segment.start_point.position.as_array(), segment.end_point.position.as_array()]
                )
            # consecutive segments share their joint
            chunks.append(pts if not chunks else pts[1:])
        if not chunks:
            return np.empty((0, 2))
        return np.vstack(chunks)

    def shows_handles(self, anchor_point: AnchorPoint) -> bool:
        return self.options.show_all_handles or anchor_point.selected

    def handle_lines(self, path_store: PathStore) -> List[Tuple[Point, Point]]:
        """(anchor position, absolute handle position) pairs for every drawn handle."""
        lines = []
        for path in path_store.get_all_paths():
            for anchor in path.anchor_points:
                if not self.shows_handles(anchor):
                    continue
                for is_out in (False, True):
                    handle = HandleManager.get_absolute_handle_position(anchor, is_out)
                    if handle is not None:
                        lines.append((anchor.position, handle))
        return lines

    @staticmethod
    def bounds(path_store: PathStore) -> Optional[Tuple[float, float, float, float]]:
        """(min_x, min_y, max_x, max_y) over anchors and visible handles."""
        points = []
        for path in path_store.get_all_paths():
            for anchor in path.anchor_points:
                points.append(anchor.position.as_array())
                for is_out in (False, True):
                    handle = HandleManager.get_absolute_handle_position(anchor, is_out)
                    if handle is not None:
                        points.append(handle.as_array())
        if not points:
            return None
        arr = np.array(points)
        min_x, min_y = arr.min(axis=0)
        max_x, max_y = arr.max(axis=0)
        return float(min_x), float(min_y), float(max_x), float(max_y)
