import logging
from typing import Dict, List, Optional

import plotly.graph_objects as go

from rapidpenpy import geometry
from rapidpenpy.cad_types import PointLike, to_point
from rapidpenpy.config import RenderOptions
from rapidpenpy.path_store import PathStore
from rapidpenpy.renderer import PathRenderer

logger = logging.getLogger(__name__)


class PlotlyPathRenderer(PathRenderer):
    """Builds an interactive plotly figure of the paths (y axis pointing down)."""

    def __init__(
        self,
        options: Optional[RenderOptions] = None,
        width: int = 800,
        height: int = 600,
    ):
        super().__init__(options)
        self.width = width
        self.height = height
        self._layers: Dict[str, List[go.Scatter]] = {
            "paths": [],
            "handles": [],
            "anchors": [],
            "preview": [],
            "close": [],
            "hover": [],
        }

    def render_paths(self, path_store: PathStore) -> None:
        traces = []
        for path in path_store.get_all_paths():
            outline = self.path_outline(path_store, path)
            if len(outline) == 0:
                continue
            xs, ys = list(outline[:, 0]), list(outline[:, 1])
            if path.closed:
                xs.append(xs[0])
                ys.append(ys[0])
            filled = path.closed and bool(path.fill)
            traces.append(
                go.Scatter(
                    x=xs,
                    y=ys,
                    mode="lines",
                    name=path.id,
                    line=dict(
                        color=path.stroke or self.options.stroke_color,
                        width=path.stroke_width,
                    ),
                    fill="toself" if filled else None,
                    fillcolor=path.fill if filled else None,
                    hoverinfo="name",
                )
            )
        self._layers["paths"] = traces

    def render_handles(self, path_store: PathStore) -> None:
        xs, ys, knob_x, knob_y = [], [], [], []
        for anchor_pos, handle_pos in self.handle_lines(path_store):
            # None breaks the line between handles
            xs.extend([anchor_pos.x, handle_pos.x, None])
            ys.extend([anchor_pos.y, handle_pos.y, None])
            knob_x.append(handle_pos.x)
            knob_y.append(handle_pos.y)
        self._layers["handles"] = []
        if not knob_x:
            return
        color = self.options.handle_color
        self._layers["handles"] = [
            go.Scatter(
                x=xs, y=ys, mode="lines", line=dict(color=color, width=1), name="handles"
            ),
            go.Scatter(
                x=knob_x,
                y=knob_y,
                mode="markers",
                marker=dict(color=color, size=self.options.anchor_point_size * 0.8),
                name="handle knobs",
            ),
        ]

    def render_anchor_points(self, path_store: PathStore) -> None:
        xs, ys, colors, labels = [], [], [], []
        for path in path_store.get_all_paths():
            for anchor in path.anchor_points:
                xs.append(anchor.position.x)
                ys.append(anchor.position.y)
                colors.append(
                    self.options.selection_color
                    if anchor.selected
                    else self.options.anchor_point_color
                )
                labels.append(f"{anchor.id} ({anchor.mirror_mode.value})")
        self._layers["anchors"] = []
        if not xs:
            return
        self._layers["anchors"] = [
            go.Scatter(
                x=xs,
                y=ys,
                mode="markers",
                marker=dict(
                    symbol="square",
                    size=self.options.anchor_point_size * 1.5,
                    color=colors,
                    line=dict(color=self.options.selection_color, width=1),
                ),
                text=labels,
                hoverinfo="text",
                name="anchor points",
            )
        ]

    def _preview_trace(self, xs, ys) -> go.Scatter:
        return go.Scatter(
            x=list(xs),
            y=list(ys),
            mode="lines",
            line=dict(color=self.options.preview_color, width=1, dash="dash"),
            name="preview",
        )

    def render_preview_line(self, start: PointLike, end: PointLike) -> None:
        start, end = to_point(start), to_point(end)
        self._layers["preview"] = [self._preview_trace([start.x, end.x], [start.y, end.y])]

    def render_preview_curve(
        self, p0: PointLike, cp1: PointLike, cp2: PointLike, p3: PointLike
    ) -> None:
        pts = geometry.sample_cubic_bezier(p0, cp1, cp2, p3, 50)
        self._layers["preview"] = [self._preview_trace(pts[:, 0], pts[:, 1])]

    def render_close_path_indicator(self, point: PointLike, show: bool) -> None:
        self._layers["close"] = []
        if not show:
            return
        point = to_point(point)
        self._layers["close"] = [
            go.Scatter(
                x=[point.x],
                y=[point.y],
                mode="markers",
                marker=dict(
                    symbol="circle-open",
                    size=self.options.anchor_point_size * 3,
                    color=self.options.selection_color,
                ),
                name="close path",
            )
        ]

    def render_hover_preview_point(self, point: Optional[PointLike]) -> None:
        self._layers["hover"] = []
        if point is None:
            return
        point = to_point(point)
        self._layers["hover"] = [
            go.Scatter(
                x=[point.x],
                y=[point.y],
                mode="markers",
                marker=dict(color=self.options.preview_color, size=self.options.anchor_point_size),
                name="insert here",
            )
        ]

    def clear(self) -> None:
        for layer in self._layers:
            self._layers[layer] = []

    def clear_preview(self) -> None:
        for layer in ("preview", "close", "hover"):
            self._layers[layer] = []

    def traces(self) -> List[go.Scatter]:
        """Every trace in drawing order (paths at the bottom)."""
        return [trace for layer in self._layers.values() for trace in layer]

    def to_figure(self) -> go.Figure:
        fig = go.Figure(data=self.traces())
        fig.update_layout(
            width=self.width,
            height=self.height,
            showlegend=False,
            plot_bgcolor="white",
            margin=dict(l=20, r=20, t=20, b=20),
        )
        fig.update_xaxes(showgrid=True, gridcolor="rgba(0,0,0,0.1)")
        fig.update_yaxes(
            showgrid=True,
            gridcolor="rgba(0,0,0,0.1)",
            autorange="reversed",
            scaleanchor="x",
            scaleratio=1,
        )
        return fig

    def to_html(self, file_name: Optional[str] = None) -> str:
        """
        Render the figure as a standalone HTML page.

        Args:
            file_name: Optional file to write; the HTML is returned either way

        Returns:
            The HTML text
        """
        html = self.to_figure().to_html(full_html=True, include_plotlyjs="cdn")
        if file_name:
            with open(file_name, "w", encoding="utf-8") as fp:
                fp.write(html)
            logger.info(f"Saved interactive drawing to {file_name}")
        return html
