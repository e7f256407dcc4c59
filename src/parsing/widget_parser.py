"""Extraction of widget definitions from the top-level ``widgets:`` section.

Expected shape::

    widgets:
      clock:
        type: "yasb.clock.ClockWidget"
        options:
          label: "\\uf017 {%H:%M}"
          wifi_icons: ["\\ue670", "\\ue671"]
          volume_icons:
            - "\\ueee8"
            - "\\uf026"

Options are stored flat: nested option maps contribute their leaf keys
directly to ``options``.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Dict, List, Optional

from domain.models import WidgetDefinition
from parsing.errors import ParseDiagnostic, report
from parsing.indentation import (
    WIDGET_NAME_INDENT,
    WIDGETS_LABEL_RE,
    indent_of,
    is_blank,
    is_comment,
    is_top_level,
    split_lines,
    strip_eol,
)
from parsing.value_decoder import decode_value, strip_quotes

_logger = logging.getLogger(__name__)

__all__ = [
    "WidgetSectionState",
    "parse_widget_definitions",
    "parse_widget_lines",
    "list_available_widget_names",
]

_WIDGET_NAME_RE = re.compile(r"^ {2}([\w-]+):\s*(?:#.*)?$")
_TYPE_RE = re.compile(r"^\s+type:\s*(.+?)\s*$")
_OPTIONS_LABEL_RE = re.compile(r"^\s+options:\s*$")
_OPTION_RE = re.compile(r"^\s+(\w+):\s*(.*)$")
_NAME_PREFIX_RE = re.compile(r"^ {2}([\w-]+):")


class WidgetSectionState(str, Enum):
    OUTSIDE_WIDGETS = "outside_widgets"
    IN_WIDGETS = "in_widgets"
    IN_WIDGET = "in_widget"


def parse_widget_definitions(
    text: Optional[str], diagnostics: Optional[List[ParseDiagnostic]] = None
) -> Dict[str, WidgetDefinition]:
    """Parse the ``widgets:`` section into ``name -> WidgetDefinition``.

    Definitions without a ``type`` are kept; each one produces a warning
    diagnostic (logged, and appended to ``diagnostics`` when given).
    """
    if text is None:
        report(diagnostics, _logger, logging.DEBUG, "No config loaded")
        return {}
    if not isinstance(text, str):
        raise TypeError(f"config text must be str, got {type(text).__name__}")
    return parse_widget_lines(split_lines(text), diagnostics)


def parse_widget_lines(
    lines: List[str], diagnostics: Optional[List[ParseDiagnostic]] = None
) -> Dict[str, WidgetDefinition]:
    widgets: Dict[str, WidgetDefinition] = {}
    current: WidgetDefinition | None = None
    current_name = ""
    starts: Dict[str, int] = {}
    state = WidgetSectionState.OUTSIDE_WIDGETS

    i = 0
    while i < len(lines):
        line = strip_eol(lines[i])
        i += 1
        if is_blank(line):
            continue
        indent = indent_of(line)

        if indent == 0 and WIDGETS_LABEL_RE.match(line):
            _logger.debug("Found widgets section at line %d", i)
            state = WidgetSectionState.IN_WIDGETS
            continue
        if state is WidgetSectionState.OUTSIDE_WIDGETS:
            continue
        if is_top_level(line):
            break
        if is_comment(line):
            continue

        m = _WIDGET_NAME_RE.match(line)
        if m:
            if current is not None:
                widgets[current_name] = current
            current_name = m.group(1)
            starts[current_name] = i
            current = WidgetDefinition()
            state = WidgetSectionState.IN_WIDGET
            continue
        if _NAME_PREFIX_RE.match(line):
            # `  name: value` is not a widget entry but still ends the previous one
            if current is not None:
                widgets[current_name] = current
            current = None
            state = WidgetSectionState.IN_WIDGETS
            _logger.debug("Line %d: widget key with inline value skipped: %r", i, line)
            continue

        if current is None or indent <= WIDGET_NAME_INDENT:
            _logger.debug("Line %d: outside any widget entry: %r", i, line)
            continue

        tm = _TYPE_RE.match(line)
        if tm:
            current.type = strip_quotes(tm.group(1)).strip()
            continue
        if _OPTIONS_LABEL_RE.match(line):
            continue
        om = _OPTION_RE.match(line)
        if om:
            decoded = decode_value(om.group(2), lines, i - 1, indent)
            current.options[om.group(1)] = decoded.value
            i += decoded.consumed

    if current is not None:
        widgets[current_name] = current

    report(diagnostics, _logger, logging.INFO, f"Parsed {len(widgets)} total widgets")
    for name, definition in widgets.items():
        if not definition.type:
            report(
                diagnostics,
                _logger,
                logging.WARNING,
                f'Widget "{name}" has no type',
                line_no=starts.get(name),
                widget=name,
            )
    return widgets


def list_available_widget_names(text: Optional[str]) -> List[str]:
    """Sorted names declared under the top-level ``widgets:`` section."""
    if not text:
        return []
    names: List[str] = []
    in_section = False
    for raw in split_lines(text):
        line = strip_eol(raw)
        if WIDGETS_LABEL_RE.match(line):
            in_section = True
            continue
        if not in_section:
            continue
        m = _WIDGET_NAME_RE.match(line)
        if m:
            names.append(m.group(1))
            continue
        if is_top_level(line):
            break
    return sorted(names)
