"""
Example: Drawing and editing paths without a UI

Feeds synthetic pointer and keyboard events to the editor facade, the same
way a canvas widget would, and writes the result as SVG, PNG and HTML.
"""

from rapidpenpy import Key, PenApp
from rapidpenpy.integrations.matplotlib import MatplotlibPathRenderer
from rapidpenpy.integrations.plotly import PlotlyPathRenderer


def click(app, position):
    app.on_mouse_down(position)
    app.on_mouse_up(position)


def drag(app, start, end):
    app.on_mouse_down(start)
    app.on_mouse_move(end)
    app.on_mouse_up(end)


def example_draw_shape():
    """Straight corners, one smooth point, closed by clicking the first anchor."""
    app = PenApp(renderer=MatplotlibPathRenderer())

    click(app, (100, 100))
    click(app, (300, 100))
    drag(app, (300, 300), (360, 340))
    click(app, (100, 300))
    click(app, (102, 101))

    path = app.get_paths()[0]
    print(f"Closed: {path.closed}, anchors: {path.point_count}")
    print(app.export_svg_path(path))

    app.renderer.to_png("pen_shape.png")
    app.renderer.close()
    return app


def example_edit_shape(app):
    """Insert a point on an edge and drag it outwards."""
    app.toggle_mode()
    app.on_mouse_move((200, 103))
    anchor = app.on_double_click((200, 103))
    drag(app, anchor.position, (200, 40))
    print(app.export_svg_path(app.get_paths()[0]))

    # delete the inserted point again
    app.on_key_down(Key.DELETE)
    app.export_svg_document("pen_shape.svg")


def example_plotly_preview():
    app = PenApp(renderer=PlotlyPathRenderer())
    app.import_svg_path(
        "M 20 150 C 40 120, 80 120, 100 150 S 160 180, 180 150",
        stroke="#0066FF",
        stroke_width=3,
    )
    app.renderer.set_options(show_all_handles=True)
    app.redraw()
    app.renderer.to_html("pen_preview.html")


if __name__ == "__main__":
    app = example_draw_shape()
    example_edit_shape(app)
    example_plotly_preview()
