import pytest

from rapidpenpy.config import RenderOptions
from rapidpenpy.path_store import PathStore
from rapidpenpy.integrations.plotly import PlotlyPathRenderer


@pytest.fixture
def store():
    store = PathStore()
    triangle = store.create_path(stroke="#ff0000", fill="#00ff00")
    for position in [(0, 0), (100, 0), (50, 80)]:
        store.add_anchor_point(triangle, position)
    store.close_path(triangle)

    curve = store.create_path()
    store.add_anchor_point(curve, (0, 200), handle_out=(40, 0))
    store.add_anchor_point(curve, (100, 200), handle_in=(-40, 0))
    return store


def test_paths_become_traces(store):
    renderer = PlotlyPathRenderer()
    renderer.update(store)

    path_traces = [t for t in renderer.traces() if t.name and t.name.startswith("path-")]
    assert len(path_traces) == 2
    triangle, curve = path_traces
    assert triangle.fill == "toself"
    assert triangle.line.color == "#ff0000"
    # closed outline returns to its start
    assert triangle.x[0] == triangle.x[-1]
    # curves are sampled
    assert len(curve.x) == 51


def test_handles_only_for_selected_points(store):
    renderer = PlotlyPathRenderer()
    renderer.update(store)
    assert not any(t.name == "handles" for t in renderer.traces())

    curve = store.get_all_paths()[1]
    curve.first_point.selected = True
    renderer.update(store)
    (handles,) = [t for t in renderer.traces() if t.name == "handles"]
    assert list(handles.x) == [0, 40, None]


def test_show_all_handles_option(store):
    renderer = PlotlyPathRenderer(RenderOptions(show_all_handles=True))
    renderer.update(store)
    (knobs,) = [t for t in renderer.traces() if t.name == "handle knobs"]
    assert len(knobs.x) == 2


def test_preview_layers(store):
    renderer = PlotlyPathRenderer()
    renderer.update(store)
    count = len(renderer.traces())

    renderer.render_preview_curve((0, 0), (0, 10), (10, 10), (10, 0))
    renderer.render_close_path_indicator((0, 0), True)
    renderer.render_hover_preview_point((3, 3))
    assert len(renderer.traces()) == count + 3

    renderer.render_close_path_indicator((0, 0), False)
    renderer.render_hover_preview_point(None)
    renderer.clear_preview()
    assert len(renderer.traces()) == count


def test_to_html(store, tmp_path):
    renderer = PlotlyPathRenderer(width=640, height=480)
    renderer.update(store)
    out_file = tmp_path / "drawing.html"

    html = renderer.to_html(str(out_file))

    assert out_file.read_text(encoding="utf-8") == html
    assert "plotly" in html.lower()
    fig = renderer.to_figure()
    assert fig.layout.width == 640
    assert fig.layout.yaxis.autorange == "reversed"
