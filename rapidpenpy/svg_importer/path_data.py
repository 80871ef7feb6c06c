"""
Tokenizer for the path-description grammar (the SVG ``d`` attribute).

Text is split into command letters and numbers. Each command letter is then
paired with its argument groups according to the command's arity; repeated
groups after one letter become repeated implicit commands.
"""

import logging
import math
import re
from typing import List, NamedTuple, Optional

from rapidpenpy.constants import COMMAND_ARITY

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(
    r"(?P<number>[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)"
    r"|(?P<command>[A-Za-z])"
    r"|(?P<junk>[^\sA-Za-z0-9,]+)"
)
_number_strip_trailing_zeros = re.compile(r"^(-?[0-9]*\.([0-9]*[1-9])?)0*$")
_number_strip_dot = re.compile(r"\.$")


class PathDataError(ValueError):
    """Raised when path data yields nothing that can be turned into a path."""


class PathCommand(NamedTuple):
    command: str
    args: List[float]

    @property
    def is_relative(self) -> bool:
        return self.command.islower()

    @property
    def key(self) -> str:
        return self.command.upper()


def format_number(value: float, precision: Optional[int] = None) -> str:
    """Format a coordinate for path data; integral values lose their ``.0``."""
    value = float(value)
    if math.isfinite(value) and value == int(value) and abs(value) < 1e15:
        return str(int(value))
    s = f"{value:.{precision}f}" if precision is not None else repr(value)
    if "e" in s or "n" in s:
        return s
    s = _number_strip_trailing_zeros.sub(r"\1", s)
    s = _number_strip_dot.sub("", s)
    return s


def tokenize_path_data(d: str) -> List[PathCommand]:
    """
    Split path data into command letters with their flat argument lists.

    Unparseable fragments and non-finite numbers are logged and dropped;
    numbers before the first command letter are ignored.
    """
    raw: List[PathCommand] = []
    current: Optional[PathCommand] = None
    for match in _TOKEN_RE.finditer(d or ""):
        if match.group("command"):
            current = PathCommand(match.group("command"), [])
            raw.append(current)
        elif match.group("number"):
            try:
                value = float(match.group("number"))
            except ValueError:
                logger.warning(f"Skipping unreadable number {match.group('number')!r}")
                continue
            if not math.isfinite(value):
                logger.warning(f"Skipping non-finite number {match.group('number')!r}")
                continue
            if current is None:
                logger.warning(f"Ignoring number {value} before first command")
                continue
            current.args.append(value)
        else:
            logger.warning(f"Skipping unreadable path data token {match.group('junk')!r}")
    return raw


def expand_commands(raw: List[PathCommand]) -> List[PathCommand]:
    """
    Group each command's arguments by arity.

    ``L 1 2 3 4`` becomes two line-to commands; extra groups after a move-to
    become implicit line-tos. Incomplete trailing groups are dropped.
    Unknown command letters are passed through without arguments.
    """
    expanded: List[PathCommand] = []
    for cmd in raw:
        arity = COMMAND_ARITY.get(cmd.key)
        if arity is None:
            logger.warning(f"Unknown path command {cmd.command!r}, skipping")
            expanded.append(PathCommand(cmd.command, []))
            continue
        if arity == 0:
            if cmd.args:
                logger.warning(
                    f"Command {cmd.command!r} takes no arguments, ignoring {len(cmd.args)}"
                )
            expanded.append(PathCommand(cmd.command, []))
            continue
        if len(cmd.args) < arity:
            logger.warning(
                f"Command {cmd.command!r} needs {arity} arguments, got {len(cmd.args)}"
            )
            continue

        letter = cmd.command
        n_groups = len(cmd.args) // arity
        for i in range(n_groups):
            expanded.append(PathCommand(letter, cmd.args[i * arity : (i + 1) * arity]))
            if letter in ("M", "m"):
                letter = "L" if letter == "M" else "l"
        leftover = len(cmd.args) - n_groups * arity
        if leftover:
            logger.warning(
                f"Dropping {leftover} trailing argument(s) of command {cmd.command!r}"
            )
    return expanded


def parse_path_data(d: str) -> List[PathCommand]:
    """Tokenize and expand path data into one command per argument group."""
    return expand_commands(tokenize_path_data(d))
