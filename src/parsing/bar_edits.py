"""Structural edits on a parsed bar list (reorder / add / remove widgets).

All functions mutate the given ``bars`` in place and report whether anything
changed. Unknown bars, unknown positions and out-of-range indices are no-ops.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from domain.models import POSITIONS, Bar

__all__ = [
    "find_bar",
    "move_widget_up",
    "move_widget_down",
    "remove_widget",
    "add_widget",
]


def find_bar(bars: Sequence[Bar], name: str) -> Optional[Bar]:
    for bar in bars:
        if bar.name == name:
            return bar
    return None


def _slot(bars: Sequence[Bar], bar_name: str, position: str) -> Optional[List[str]]:
    if position not in POSITIONS:
        return None
    bar = find_bar(bars, bar_name)
    if bar is None:
        return None
    return bar.position(position)


def move_widget_up(bars: Sequence[Bar], bar_name: str, position: str, index: int) -> bool:
    widgets = _slot(bars, bar_name, position)
    if widgets is None or index <= 0 or index >= len(widgets):
        return False
    widgets[index - 1], widgets[index] = widgets[index], widgets[index - 1]
    return True


def move_widget_down(bars: Sequence[Bar], bar_name: str, position: str, index: int) -> bool:
    widgets = _slot(bars, bar_name, position)
    if widgets is None or index < 0 or index >= len(widgets) - 1:
        return False
    widgets[index], widgets[index + 1] = widgets[index + 1], widgets[index]
    return True


def remove_widget(bars: Sequence[Bar], bar_name: str, position: str, index: int) -> Optional[str]:
    """Remove and return the widget name at ``index`` (None if nothing removed)."""
    widgets = _slot(bars, bar_name, position)
    if widgets is None or index < 0 or index >= len(widgets):
        return None
    return widgets.pop(index)


def add_widget(bars: Sequence[Bar], bar_name: str, position: str, widget_name: str) -> bool:
    widgets = _slot(bars, bar_name, position)
    if widgets is None or not widget_name:
        return False
    widgets.append(widget_name)
    return True
