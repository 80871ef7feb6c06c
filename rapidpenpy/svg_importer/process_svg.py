"""
Import and export of vector paths through the path-description grammar.

Import is best effort: unreadable numbers and unsupported commands (arcs,
quadratic curves) are skipped, and data that produces no anchor points yields
``None`` instead of an exception. Only the first subpath of a description is
imported since a VectorPath is a single linear chain of anchors.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional
from xml.etree import ElementTree as ET

from tqdm import tqdm

from rapidpenpy import geometry
from rapidpenpy.cad_types import ORIGIN, Point
from rapidpenpy.constants import DEFAULT_STROKE_WIDTH
from rapidpenpy.handles import HandleManager
from rapidpenpy.path import HandleMirrorMode, VectorPath

from .path_data import PathCommand, PathDataError, format_number, parse_path_data

if TYPE_CHECKING:
    from rapidpenpy.path_store import PathStore

logger = logging.getLogger(__name__)

SVG_NAMESPACE = "http://www.w3.org/2000/svg"
_LENGTH_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")


@dataclass
class ParsedAnchor:
    """Anchor produced by the parser; handles are relative to ``position``."""

    position: Point
    handle_in: Optional[Point] = None
    handle_out: Optional[Point] = None

    @property
    def mirror_mode(self) -> HandleMirrorMode:
        return HandleManager.infer_mirror_mode(self.handle_in, self.handle_out)


@dataclass
class ParsedPath:
    anchors: List[ParsedAnchor] = field(default_factory=list)
    closed: bool = False
    skipped_commands: int = 0


class SvgPathParser:
    @staticmethod
    def _handle_offset(control: Point, anchor: Point) -> Optional[Point]:
        # A control point sitting on its anchor means "no handle"
        if control.equals(anchor):
            return None
        return geometry.subtract(control, anchor)

    @staticmethod
    def _target(cmd: PathCommand, current: Point, x: float, y: float) -> Point:
        if cmd.is_relative:
            return Point(current.x + x, current.y + y)
        return Point(x, y)

    @staticmethod
    def parse(d: str) -> ParsedPath:
        """
        Build anchors from path data.

        Raises:
            PathDataError: if no anchor point could be produced
        """
        result = SvgPathParser.parse_commands(parse_path_data(d))
        if not result.anchors:
            raise PathDataError(f"No anchor points in path data {d[:40]!r}")
        return result

    @staticmethod
    def parse_commands(commands: Iterable[PathCommand]) -> ParsedPath:
        result = ParsedPath()
        anchors = result.anchors
        current = ORIGIN
        subpath_start = ORIGIN
        # absolute second control point of the previous cubic, for S/s
        last_cp2: Optional[Point] = None

        def ensure_started():
            if not anchors:
                anchors.append(ParsedAnchor(current))

        def add_curve(cp1: Point, cp2: Point, end: Point):
            ensure_started()
            prev = anchors[-1]
            offset = SvgPathParser._handle_offset(cp1, prev.position)
            handle_in = SvgPathParser._handle_offset(cp2, end)
            if offset is None and handle_in is None:
                # both controls on their anchors: keep a zero-length handle so
                # the segment stays a cubic with the same parametrisation
                offset = ORIGIN
            if offset is not None:
                prev.handle_out = offset
            anchors.append(ParsedAnchor(end, handle_in=handle_in))

        for cmd in commands:
            key = cmd.key
            if result.closed and key != "Z":
                logger.info("Ignoring path data after the first closed subpath")
                break

            if key == "M":
                target = SvgPathParser._target(cmd, current, *cmd.args)
                if len(anchors) > 1:
                    logger.info("Ignoring additional subpaths in path data")
                    break
                # a lone move-to draws nothing, so a second one replaces it
                anchors[:] = [ParsedAnchor(target)]
                current = subpath_start = target
                last_cp2 = None
            elif key == "L":
                ensure_started()
                current = SvgPathParser._target(cmd, current, *cmd.args)
                anchors.append(ParsedAnchor(current))
                last_cp2 = None
            elif key == "H":
                ensure_started()
                x = current.x + cmd.args[0] if cmd.is_relative else cmd.args[0]
                current = Point(x, current.y)
                anchors.append(ParsedAnchor(current))
                last_cp2 = None
            elif key == "V":
                ensure_started()
                y = current.y + cmd.args[0] if cmd.is_relative else cmd.args[0]
                current = Point(current.x, y)
                anchors.append(ParsedAnchor(current))
                last_cp2 = None
            elif key == "C":
                a = cmd.args
                cp1 = SvgPathParser._target(cmd, current, a[0], a[1])
                cp2 = SvgPathParser._target(cmd, current, a[2], a[3])
                end = SvgPathParser._target(cmd, current, a[4], a[5])
                add_curve(cp1, cp2, end)
                current, last_cp2 = end, cp2
            elif key == "S":
                a = cmd.args
                if last_cp2 is not None:
                    cp1 = geometry.subtract(geometry.scale(current, 2), last_cp2)
                else:
                    cp1 = current
                cp2 = SvgPathParser._target(cmd, current, a[0], a[1])
                end = SvgPathParser._target(cmd, current, a[2], a[3])
                add_curve(cp1, cp2, end)
                current, last_cp2 = end, cp2
            elif key == "Z":
                if not anchors:
                    continue
                result.closed = True
                if len(anchors) > 1 and anchors[-1].position.equals(anchors[0].position):
                    last = anchors.pop()
                    if last.handle_in is not None:
                        anchors[0].handle_in = last.handle_in
                current = subpath_start
                last_cp2 = None
            else:
                # Unsupported (A, Q, T, unknown): no geometry, but keep the
                # current point in sync for later relative commands
                result.skipped_commands += 1
                if key in ("A", "Q", "T") and len(cmd.args) >= 2:
                    current = SvgPathParser._target(cmd, current, *cmd.args[-2:])
                last_cp2 = None
                logger.debug(f"Skipped unsupported path command {cmd.command!r}")

        return result


def _parse_length(value: Any, default: Optional[float]) -> Optional[float]:
    if value is None:
        return default
    if isinstance(value, (int, float)):
        return float(value)
    match = _LENGTH_RE.match(str(value))
    if match is None:
        logger.warning(f"Could not read length {value!r}, using {default}")
        return default
    return float(match.group(1))


def _parse_fill(value: Optional[str]) -> Optional[str]:
    if value is None or value.strip().lower() in ("", "none", "transparent"):
        return None
    return value.strip()


def import_svg_path(
    store: "PathStore",
    d: str,
    stroke: Optional[str] = None,
    stroke_width: Any = None,
    fill: Optional[str] = None,
) -> Optional[VectorPath]:
    """
    Parse path data and add the resulting path to ``store``.

    Args:
        store: PathStore receiving the path
        d: Path data text
        stroke: Optional stroke color
        stroke_width: Optional stroke width (number or length string such as "2px")
        fill: Optional fill color ("none" means no fill)

    Returns:
        The new VectorPath, or None when nothing usable could be parsed
    """
    if not isinstance(d, str):
        logger.warning(f"No path produced: path data must be text, got {type(d).__name__}")
        return None
    for name, value in (("stroke", stroke), ("fill", fill)):
        if value is not None and not isinstance(value, str):
            logger.warning(f"No path produced: {name} must be text, got {value!r}")
            return None

    try:
        parsed = SvgPathParser.parse(d)
    except PathDataError as e:
        logger.warning(f"No path produced: {e}")
        return None

    path = store.create_path(
        stroke=stroke.strip() if stroke else None,
        stroke_width=_parse_length(stroke_width, None),
        fill=_parse_fill(fill),
    )
    for parsed_anchor in parsed.anchors:
        store.add_anchor_point(
            path,
            parsed_anchor.position,
            parsed_anchor.handle_in,
            parsed_anchor.handle_out,
            mirror_mode=parsed_anchor.mirror_mode,
        )
    if parsed.closed:
        store.close_path(path)
    if parsed.skipped_commands:
        logger.info(
            f"Imported {path.id} with {parsed.skipped_commands} unsupported command(s) skipped"
        )
    return path


def import_svg_paths(
    store: "PathStore",
    entries: Iterable[Mapping[str, Any]],
    show_progress: bool = False,
) -> List[VectorPath]:
    """
    Bulk import externally sourced path descriptions.

    Each entry is a mapping with a ``d`` key and optional ``stroke``,
    ``stroke-width`` (or ``stroke_width``) and ``fill`` keys. Entries that
    fail are skipped.
    """
    paths = []
    for entry in tqdm(entries, desc="Importing paths", disable=not show_progress):
        if not isinstance(entry, Mapping):
            logger.warning(f"Skipping entry that is not a mapping: {entry!r}")
            continue
        d = entry.get("d")
        if not d:
            logger.warning("Skipping entry without path data")
            continue
        width = entry.get("stroke-width", entry.get("stroke_width"))
        try:
            path = import_svg_path(
                store, d, stroke=entry.get("stroke"), stroke_width=width, fill=entry.get("fill")
            )
        except Exception as e:
            logger.warning(f"Skipping entry that failed to import: {e}")
            continue
        if path is not None:
            paths.append(path)
    return paths


def _style_attributes(element: ET.Element) -> Dict[str, str]:
    attributes = dict(element.attrib)
    style = attributes.pop("style", "")
    for declaration in style.split(";"):
        if ":" in declaration:
            name, value = declaration.split(":", 1)
            attributes[name.strip()] = value.strip()
    return attributes


def import_svg_document(
    store: "PathStore", svg_text: str, show_progress: bool = False
) -> List[VectorPath]:
    """Import every ``<path>`` element of an SVG document."""
    try:
        root = ET.fromstring(svg_text)
    except ET.ParseError as e:
        logger.error(f"Could not parse SVG document: {e}")
        return []

    entries = []
    for element in root.iter():
        tag = element.tag.rsplit("}", 1)[-1]
        if tag != "path":
            continue
        attributes = _style_attributes(element)
        entries.append(
            {
                "d": attributes.get("d"),
                "stroke": attributes.get("stroke"),
                "stroke-width": attributes.get("stroke-width"),
                "fill": attributes.get("fill"),
            }
        )
    return import_svg_paths(store, entries, show_progress=show_progress)


def load_svg_file(
    store: "PathStore", file_name: str, show_progress: bool = False
) -> List[VectorPath]:
    with open(file_name, encoding="utf-8") as fp:
        return import_svg_document(store, fp.read(), show_progress=show_progress)


def export_svg_path(store: "PathStore", path: VectorPath) -> str:
    """Path data for ``path``; empty when it has fewer than two anchors."""
    return store.to_svg_path(path)


def export_svg_document(
    store: "PathStore",
    file_name: Optional[str] = None,
    width: int = 800,
    height: int = 600,
) -> str:
    """
    Write every exportable path of ``store`` into a standalone SVG document.

    Args:
        store: Source PathStore
        file_name: Optional file to write; the document text is returned either way
        width: Document width
        height: Document height

    Returns:
        The SVG document as text
    """
    ET.register_namespace("", SVG_NAMESPACE)
    root = ET.Element(
        f"{{{SVG_NAMESPACE}}}svg",
        {
            "width": str(width),
            "height": str(height),
            "viewBox": f"0 0 {width} {height}",
        },
    )
    for path in store.get_all_paths():
        d = store.to_svg_path(path)
        if not d:
            continue
        linecap = path.stroke_cap_start.value
        if linecap not in ("round", "square"):
            linecap = "butt"
        ET.SubElement(
            root,
            f"{{{SVG_NAMESPACE}}}path",
            {
                "d": d,
                "stroke": path.stroke,
                "stroke-width": format_number(path.stroke_width or DEFAULT_STROKE_WIDTH),
                "fill": path.fill or "none",
                "stroke-linecap": linecap,
                "data-path-id": path.id,
            },
        )
    text = ET.tostring(root, encoding="unicode")
    if file_name:
        with open(file_name, "w", encoding="utf-8") as fp:
            fp.write(text)
    return text

