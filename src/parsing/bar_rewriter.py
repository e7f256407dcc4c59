"""Splice edited bar widget lists back into a config document.

Re-runs the bar section traversal of ``parsing.bar_parser`` but emits lines
instead of collecting a model. Every line is passed through unchanged except
the position labels and ``- item`` lines of a bar's ``widgets:`` block, which
are regenerated (``left``, ``center``, ``right`` in that order) from the
edited ``Bar``. Bars absent from the edited list keep their original lines.

The n-th block of a given bar name is paired with the n-th edited ``Bar`` of
that name; extra blocks pass through untouched. Comment and blank lines
inside a regenerated ``widgets:`` block are kept, but since the fresh
position lines are emitted right after the ``widgets:`` label they end up
below the regenerated ``right:`` items.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from domain.models import POSITIONS, Bar
from parsing.bar_parser import BarSectionState
from parsing.indentation import (
    BAR_KEY_RE,
    BAR_NAME_RE,
    BAR_WIDGETS_RE,
    BARS_LABEL_RE,
    ITEM_INDENT,
    ITEM_RE,
    POSITION_INDENT,
    POSITION_RE,
    is_top_level,
    join_lines,
    split_lines,
    strip_eol,
)

_logger = logging.getLogger(__name__)

__all__ = ["render_widget_block", "rewrite_bars", "rewrite_bar_lines"]


def render_widget_block(bar: Bar, eol: str = "") -> List[str]:
    """Canonical lines for a bar's three positions (labels always emitted)."""
    out: List[str] = []
    for pos in POSITIONS:
        out.append(f"{' ' * POSITION_INDENT}{pos}:{eol}")
        for name in bar.widgets.get(pos, ()):
            out.append(f'{" " * ITEM_INDENT}- "{name}"{eol}')
    return out


def rewrite_bars(text: Optional[str], bars: Sequence[Bar]) -> Optional[str]:
    """Return ``text`` with the widget blocks of ``bars`` regenerated.

    A missing document (``None`` or empty) is returned as-is.
    """
    if not text:
        return text
    if not isinstance(text, str):
        raise TypeError(f"config text must be str, got {type(text).__name__}")
    return join_lines(rewrite_bar_lines(split_lines(text), bars))


def rewrite_bar_lines(lines: List[str], bars: Sequence[Bar]) -> List[str]:
    by_name: Dict[str, List[Bar]] = {}
    for bar in bars:
        if not isinstance(bar, Bar):
            raise TypeError(f"expected Bar, got {type(bar).__name__}")
        by_name.setdefault(bar.name, []).append(bar)

    out: List[str] = []
    state = BarSectionState.OUTSIDE_BARS
    current: Bar | None = None
    occurrences: Dict[str, int] = {}
    replacing = False
    generated = False

    for raw in lines:
        line = strip_eol(raw)
        if state is BarSectionState.OUTSIDE_BARS:
            if BARS_LABEL_RE.match(line):
                state = BarSectionState.IN_BARS
            out.append(raw)
            continue
        if state is BarSectionState.AFTER_BARS:
            out.append(raw)
            continue

        m = BAR_NAME_RE.match(line)
        if m:
            # n-th block with a given name pairs with the n-th edited bar of that name
            name = m.group(1)
            nth = occurrences.get(name, 0)
            occurrences[name] = nth + 1
            candidates = by_name.get(name, [])
            current = candidates[nth] if nth < len(candidates) else None
            replacing = False
            generated = False
            state = BarSectionState.IN_BAR
            out.append(raw)
            continue

        if is_top_level(line):
            state = BarSectionState.AFTER_BARS
            out.append(raw)
            continue

        if BAR_WIDGETS_RE.match(line) and state is not BarSectionState.IN_BARS:
            out.append(raw)
            state = BarSectionState.IN_WIDGETS
            replacing = current is not None
            if current is not None and not generated:
                out.extend(render_widget_block(current, "\r" if raw.endswith("\r") else ""))
                generated = True
            continue

        if state in (BarSectionState.IN_WIDGETS, BarSectionState.IN_POSITION):
            if POSITION_RE.match(line):
                state = BarSectionState.IN_POSITION
                if replacing:
                    continue
            elif BAR_KEY_RE.match(line):
                state = BarSectionState.IN_BAR
                replacing = False
            elif state is BarSectionState.IN_POSITION and ITEM_RE.match(line):
                if replacing:
                    continue

        out.append(raw)

    missing = [name for name, group in by_name.items() if occurrences.get(name, 0) < len(group)]
    if missing:
        _logger.debug("Bars without a block in document: %s", sorted(missing))
    return out
