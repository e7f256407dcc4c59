"""Line and indentation primitives shared by the config parsers and rewriter.

The bar section layout is fixed by convention::

    bars:                       column 0
      primary-bar:              column 2
        widgets:                column 4
          left:                 column 6
            - "home"            column 8

Structural markers must sit at exactly these columns; anything else is
treated as opaque content.
"""

from __future__ import annotations

import re
from typing import List

BAR_INDENT = 2
WIDGETS_INDENT = 4
POSITION_INDENT = 6
ITEM_INDENT = 8
WIDGET_NAME_INDENT = 2

BARS_LABEL_RE = re.compile(r"^bars:")
WIDGETS_LABEL_RE = re.compile(r"^widgets:")
BAR_NAME_RE = re.compile(r"^ {2}([\w-]+):")
BAR_WIDGETS_RE = re.compile(r"^ {4}widgets:\s*(?:#.*)?$")
BAR_KEY_RE = re.compile(r"^ {4}[\w-]+:")
POSITION_RE = re.compile(r"^ {6}(left|center|right):(.*)$")
ITEM_RE = re.compile(r"^ {8}-(?:\s+(.*))?$")


def split_lines(text: str) -> List[str]:
    """Split on ``\\n`` only; ``\\r`` stays attached so joins are lossless."""
    return text.split("\n")


def join_lines(lines: List[str]) -> str:
    return "\n".join(lines)


def strip_eol(line: str) -> str:
    return line[:-1] if line.endswith("\r") else line


def indent_of(line: str) -> int:
    """Column of the first non-whitespace character (-1 for blank lines)."""
    stripped = line.lstrip()
    if not stripped:
        return -1
    return len(line) - len(stripped)


def is_blank(line: str) -> bool:
    return not line.strip()


def is_comment(line: str) -> bool:
    return line.lstrip().startswith("#")


def is_top_level(line: str) -> bool:
    """True for a column-0 key line (not blank, not a comment)."""
    line = strip_eol(line)
    if not line or line[0].isspace():
        return False
    return not line.startswith("#")
