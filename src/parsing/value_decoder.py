"""Decoding of option values found in the ``widgets:`` definitions section.

A value token is the text after an option's colon. Supported shapes:

 - quoted or bare scalars (``"\\ue670"``, ``'%H:%M'``, ``true``)
 - inline arrays on one line (``["a", "b", "c"]``)
 - block arrays: an empty token (or a lone ``[``) followed by more-indented
   ``- item`` lines

Block array lookahead does not mutate the caller's cursor: the decoder
returns the value together with the number of following lines it consumed.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from domain.models import OptionValue
from parsing.errors import MalformedArrayError
from parsing.indentation import indent_of, is_blank, strip_eol

_logger = logging.getLogger(__name__)

__all__ = [
    "DecodedValue",
    "decode_escapes",
    "strip_quotes",
    "decode_scalar",
    "parse_inline_array",
    "collect_block_array",
    "decode_value",
    "item_name",
]

_ESCAPE_TRIGGER_RE = re.compile(r"\\[uxnrt]")
_ESCAPE_RE = re.compile(r"\\(u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|[nrt\"'\\/])")
_BLOCK_ITEM_RE = re.compile(r"^\s+-\s+(.+)$")
_SIMPLE_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", '"': '"', "'": "'", "\\": "\\", "/": "/"}


@dataclass(frozen=True)
class DecodedValue:
    value: OptionValue
    consumed: int = 0


def _replace_escape(match: re.Match[str]) -> str:
    body = match.group(1)
    if body[0] in ("u", "x"):
        return chr(int(body[1:], 16))
    return _SIMPLE_ESCAPES[body]


def decode_escapes(text: str) -> str:
    """Decode ``\\uXXXX``, ``\\xXX`` and control escapes into characters.

    Text without a unicode, hex or control escape is returned untouched so
    literal backslashes (Windows paths, regexes) survive. Decoding is all or
    nothing: one unrecognized backslash sequence (``C:\\users``) leaves the
    whole text unchanged. Surrogate pairs are joined; an unpaired surrogate
    also leaves the original text unchanged.
    """
    if not text or not _ESCAPE_TRIGGER_RE.search(text):
        return text
    if "\\" in _ESCAPE_RE.sub("", text):
        return text
    decoded = _ESCAPE_RE.sub(_replace_escape, text)
    if any("\ud800" <= ch <= "\udfff" for ch in decoded):
        try:
            decoded = decoded.encode("utf-16", "surrogatepass").decode("utf-16")
        except UnicodeDecodeError:
            return text
    return decoded


def strip_quotes(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        return text[1:-1]
    return text


def decode_scalar(text: str) -> str:
    return decode_escapes(strip_quotes(text.strip()))


def _scan_entries(body: str) -> List[str]:
    """Split inline array content on commas outside quotes.

    Returns raw entries (quotes kept). Raises ``MalformedArrayError`` for an
    unterminated quote, text trailing a closing quote, or an empty entry.
    """
    entries: List[str] = []
    i = 0
    n = len(body)
    if not body.strip():
        return entries
    while True:
        while i < n and body[i] in " \t":
            i += 1
        if i >= n:  # trailing comma
            return entries
        start = i
        if body[i] in ("'", '"'):
            quote = body[i]
            i += 1
            while i < n and body[i] != quote:
                if quote == '"' and body[i] == "\\":
                    i += 1
                i += 1
            if i >= n:
                raise MalformedArrayError("unterminated quote", context={"entry": body[start:]})
            i += 1
            entry = body[start:i]
            while i < n and body[i] in " \t":
                i += 1
            if i < n and body[i] != ",":
                raise MalformedArrayError(
                    "unexpected text after quoted entry", context={"entry": body[start:]}
                )
        else:
            while i < n and body[i] != ",":
                i += 1
            entry = body[start:i].strip()
            if not entry:
                raise MalformedArrayError("empty entry", context={"position": start})
        entries.append(entry)
        if i >= n:
            return entries
        i += 1  # skip comma


def _closing_bracket(token: str) -> int:
    quote: Optional[str] = None
    i = 1
    while i < len(token):
        ch = token[i]
        if quote:
            if quote == '"' and ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == "]":
            return i
        i += 1
    return -1


def parse_inline_array(token: str) -> List[str]:
    """Decode a one-line ``[a, "b", 'c']`` token into a list of strings."""
    token = token.strip()
    if not token.startswith("["):
        raise MalformedArrayError("not an array", context={"token": token})
    end = _closing_bracket(token)
    if end < 0:
        raise MalformedArrayError("missing closing bracket", context={"token": token})
    return [decode_scalar(entry) for entry in _scan_entries(token[1:end])]


def collect_block_array(lines: Sequence[str], start: int, option_indent: int) -> DecodedValue:
    """Collect ``- item`` lines following ``lines[start - 1]``.

    Scanning stops at the first non-blank line indented at or below
    ``option_indent``; that line is not consumed. When no item was found the
    value is ``""`` and nothing is consumed.
    """
    items: List[str] = []
    j = start
    while j < len(lines):
        line = strip_eol(lines[j])
        if is_blank(line):
            j += 1
            continue
        if indent_of(line) <= option_indent:
            break
        m = _BLOCK_ITEM_RE.match(line)
        if m:
            items.append(decode_scalar(m.group(1)))
        j += 1
    if not items:
        return DecodedValue("", 0)
    return DecodedValue(items, j - start)


def decode_value(
    token: str,
    lines: Sequence[str] = (),
    index: int = 0,
    indent: int = 0,
) -> DecodedValue:
    """Decode the value token of the option on ``lines[index]``.

    ``indent`` is the option line's indentation, used to bound block arrays.
    """
    token = token.strip()
    if token.startswith("[") and "]" in token:
        try:
            return DecodedValue(parse_inline_array(token))
        except MalformedArrayError as exc:
            _logger.warning("Failed to parse inline array %r: %s", token, exc)
            return DecodedValue("")
    if token in ("", "["):
        return collect_block_array(lines, index + 1, indent)
    return DecodedValue(decode_scalar(token))


def item_name(token: str) -> Optional[str]:
    """Widget name from a bar ``- item`` token (quoted or bare)."""
    token = token.strip()
    if not token:
        return None
    if token[0] in ("'", '"'):
        end = token.find(token[0], 1)
        if end <= 1:
            return None
        return token[1:end]
    name = token.split(" #", 1)[0].strip()
    return name or None
