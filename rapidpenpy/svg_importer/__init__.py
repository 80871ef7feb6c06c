from .path_data import (
    PathCommand,
    PathDataError,
    expand_commands,
    format_number,
    parse_path_data,
    tokenize_path_data,
)
from .process_svg import (
    ParsedAnchor,
    ParsedPath,
    SvgPathParser,
    export_svg_document,
    export_svg_path,
    import_svg_document,
    import_svg_path,
    import_svg_paths,
    load_svg_file,
)

__all__ = [
    "PathCommand",
    "PathDataError",
    "expand_commands",
    "format_number",
    "parse_path_data",
    "tokenize_path_data",
    "ParsedAnchor",
    "ParsedPath",
    "SvgPathParser",
    "export_svg_document",
    "export_svg_path",
    "import_svg_document",
    "import_svg_path",
    "import_svg_paths",
    "load_svg_file",
]
