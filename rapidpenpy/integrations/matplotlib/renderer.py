import logging
from typing import Dict, List, Optional

from rapidpenpy.cad_types import PointLike, to_point
from rapidpenpy import geometry
from rapidpenpy.config import RenderOptions
from rapidpenpy.path_store import PathStore
from rapidpenpy.renderer import PathRenderer

logger = logging.getLogger(__name__)


class MatplotlibPathRenderer(PathRenderer):
    """
    Draws paths into a matplotlib figure.

    The y axis points down like screen coordinates. Artists are kept per
    layer so previews can be dropped without touching the paths.
    """

    def __init__(
        self,
        options: Optional[RenderOptions] = None,
        width: int = 800,
        height: int = 600,
    ):
        try:
            import matplotlib.pyplot as plt
        except ImportError:
            raise ImportError(
                "matplotlib is required for PNG rendering. Install with: pip install matplotlib"
            )
        super().__init__(options)
        self.width = width
        self.height = height
        self._plt = plt
        self.fig, self.ax = plt.subplots(figsize=(width / 100, height / 100), dpi=100)
        self.ax.set_aspect("equal")
        self._layers: Dict[str, List] = {
            "paths": [],
            "handles": [],
            "anchors": [],
            "preview": [],
            "close": [],
            "hover": [],
        }
        self._path_store: Optional[PathStore] = None

    def _drop(self, layer: str) -> None:
        for artist in self._layers[layer]:
            artist.remove()
        self._layers[layer] = []

    def render_paths(self, path_store: PathStore) -> None:
        self._path_store = path_store
        self._drop("paths")
        for path in path_store.get_all_paths():
            outline = self.path_outline(path_store, path)
            if len(outline) == 0:
                continue
            color = path.stroke or self.options.stroke_color
            if path.closed and path.fill:
                self._layers["paths"].extend(
                    self.ax.fill(outline[:, 0], outline[:, 1], color=path.fill, zorder=1)
                )
            xs, ys = list(outline[:, 0]), list(outline[:, 1])
            if path.closed:
                xs.append(xs[0])
                ys.append(ys[0])
            (line,) = self.ax.plot(
                xs,
                ys,
                color=color,
                linewidth=path.stroke_width,
                solid_capstyle="round",
                zorder=2,
            )
            self._layers["paths"].append(line)

    def render_handles(self, path_store: PathStore) -> None:
        self._drop("handles")
        for anchor_pos, handle_pos in self.handle_lines(path_store):
            (line,) = self.ax.plot(
                [anchor_pos.x, handle_pos.x],
                [anchor_pos.y, handle_pos.y],
                color=self.options.handle_color,
                linewidth=1,
                zorder=3,
            )
            (knob,) = self.ax.plot(
                [handle_pos.x],
                [handle_pos.y],
                marker="o",
                markersize=self.options.anchor_point_size * 0.6,
                color=self.options.handle_color,
                zorder=4,
            )
            self._layers["handles"].extend([line, knob])

    def render_anchor_points(self, path_store: PathStore) -> None:
        self._drop("anchors")
        for path in path_store.get_all_paths():
            for anchor in path.anchor_points:
                face = (
                    self.options.selection_color
                    if anchor.selected
                    else self.options.anchor_point_color
                )
                (marker,) = self.ax.plot(
                    [anchor.position.x],
                    [anchor.position.y],
                    marker="s",
                    markersize=self.options.anchor_point_size,
                    markerfacecolor=face,
                    markeredgecolor=self.options.selection_color,
                    linestyle="none",
                    zorder=5,
                )
                self._layers["anchors"].append(marker)

    def render_preview_line(self, start: PointLike, end: PointLike) -> None:
        self._drop("preview")
        start, end = to_point(start), to_point(end)
        (line,) = self.ax.plot(
            [start.x, end.x],
            [start.y, end.y],
            color=self.options.preview_color,
            linestyle="--",
            linewidth=1,
            zorder=2,
        )
        self._layers["preview"].append(line)

    def render_preview_curve(
        self, p0: PointLike, cp1: PointLike, cp2: PointLike, p3: PointLike
    ) -> None:
        self._drop("preview")
        pts = geometry.sample_cubic_bezier(p0, cp1, cp2, p3, 50)
        (line,) = self.ax.plot(
            pts[:, 0],
            pts[:, 1],
            color=self.options.preview_color,
            linestyle="--",
            linewidth=1,
            zorder=2,
        )
        self._layers["preview"].append(line)

    def render_close_path_indicator(self, point: PointLike, show: bool) -> None:
        self._drop("close")
        if not show:
            return
        point = to_point(point)
        (marker,) = self.ax.plot(
            [point.x],
            [point.y],
            marker="o",
            markersize=self.options.anchor_point_size * 2,
            markerfacecolor="none",
            markeredgecolor=self.options.selection_color,
            linestyle="none",
            zorder=6,
        )
        self._layers["close"].append(marker)

    def render_hover_preview_point(self, point: Optional[PointLike]) -> None:
        self._drop("hover")
        if point is None:
            return
        point = to_point(point)
        (marker,) = self.ax.plot(
            [point.x],
            [point.y],
            marker="o",
            markersize=self.options.anchor_point_size,
            color=self.options.preview_color,
            linestyle="none",
            zorder=6,
        )
        self._layers["hover"].append(marker)

    def clear(self) -> None:
        for layer in list(self._layers):
            self._drop(layer)

    def clear_preview(self) -> None:
        for layer in ("preview", "close", "hover"):
            self._drop(layer)

    def _fit_view(self, margin: float) -> None:
        bounds = self.bounds(self._path_store) if self._path_store else None
        if bounds is None:
            self.ax.set_xlim(0, self.width)
            self.ax.set_ylim(self.height, 0)
            return
        min_x, min_y, max_x, max_y = bounds
        margin_x = max(max_x - min_x, 1) * margin
        margin_y = max(max_y - min_y, 1) * margin
        self.ax.set_xlim(min_x - margin_x, max_x + margin_x)
        # screen coordinates: y grows downwards
        self.ax.set_ylim(max_y + margin_y, min_y - margin_y)

    def to_png(self, file_name: Optional[str] = None, margin: float = 0.1) -> None:
        """
        Save the current drawing as PNG, or show it in a window.

        Args:
            file_name: Path to save the PNG file. If None, displays in a UI window instead.
            margin: Margin around the drawing as a fraction of its size (default: 0.1)
        """
        self._fit_view(margin)
        self.ax.grid(True, alpha=0.3)
        self.fig.tight_layout()
        if file_name:
            self.fig.savefig(file_name, dpi=100, bbox_inches="tight", facecolor="white")
            logger.info(f"Saved drawing to {file_name}")
        else:
            self._plt.show()

    def close(self) -> None:
        self._plt.close(self.fig)
