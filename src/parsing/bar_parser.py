"""Extraction of bar widget assignments from the ``bars:`` section.

Single forward pass driven by an explicit ``BarSectionState``. Only the
widget slots are modelled; other bar keys (``enabled``, ``screens``,
``dimensions`` ...) are opaque and left to the rewriter to pass through.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional

from domain.models import Bar
from parsing.indentation import (
    BAR_KEY_RE,
    BAR_NAME_RE,
    BAR_WIDGETS_RE,
    BARS_LABEL_RE,
    ITEM_RE,
    POSITION_RE,
    is_blank,
    is_comment,
    is_top_level,
    split_lines,
    strip_eol,
)
from parsing.value_decoder import decode_value, item_name

_logger = logging.getLogger(__name__)

__all__ = ["BarSectionState", "parse_bars", "parse_bar_lines", "position_inline_items"]


class BarSectionState(str, Enum):
    OUTSIDE_BARS = "outside_bars"
    IN_BARS = "in_bars"
    IN_BAR = "in_bar"
    IN_WIDGETS = "in_widgets"
    IN_POSITION = "in_position"
    AFTER_BARS = "after_bars"


def position_inline_items(token: str) -> List[str]:
    """Items written on the position label line itself (``left: ["a"]``)."""
    if not token.strip():
        return []
    value = decode_value(token).value
    if isinstance(value, list):
        return value
    return []


def parse_bars(text: Optional[str]) -> List[Bar]:
    """Parse the bar list out of a config document.

    ``None`` (no document loaded) and documents without ``bars:`` give ``[]``.
    """
    if text is None:
        _logger.debug("No config loaded")
        return []
    if not isinstance(text, str):
        raise TypeError(f"config text must be str, got {type(text).__name__}")
    return parse_bar_lines(split_lines(text))


def parse_bar_lines(lines: List[str]) -> List[Bar]:
    bars: List[Bar] = []
    current: Bar | None = None
    position: str | None = None
    state = BarSectionState.OUTSIDE_BARS

    for line_no, raw in enumerate(lines, start=1):
        line = strip_eol(raw)
        if state is BarSectionState.OUTSIDE_BARS:
            if BARS_LABEL_RE.match(line):
                state = BarSectionState.IN_BARS
            continue

        m = BAR_NAME_RE.match(line)
        if m:
            if current is not None:
                bars.append(current)
            current = Bar(name=m.group(1))
            position = None
            state = BarSectionState.IN_BAR
            continue

        if is_top_level(line):
            state = BarSectionState.AFTER_BARS
            break

        if current is None or is_blank(line) or is_comment(line):
            continue

        if BAR_WIDGETS_RE.match(line):
            position = None
            state = BarSectionState.IN_WIDGETS
            continue

        if state in (BarSectionState.IN_WIDGETS, BarSectionState.IN_POSITION):
            pm = POSITION_RE.match(line)
            if pm:
                position = pm.group(1)
                current.position(position).extend(position_inline_items(pm.group(2)))
                state = BarSectionState.IN_POSITION
                continue
            if BAR_KEY_RE.match(line):
                position = None
                state = BarSectionState.IN_BAR
                continue
            if state is BarSectionState.IN_POSITION and position is not None:
                im = ITEM_RE.match(line)
                if im:
                    name = item_name(im.group(1) or "")
                    if name:
                        current.position(position).append(name)
                    else:
                        _logger.debug("Line %d: empty widget item in %s", line_no, position)
                    continue
            _logger.debug(
                "Line %d: unrecognized indentation in widgets of bar %r: %r",
                line_no,
                current.name,
                line,
            )

    if current is not None:
        bars.append(current)
    _logger.debug("Parsed %d bars", len(bars))
    return bars
