"""Filesystem utility helpers.

Text is read and written with ``newline=""`` so line endings survive a
load/save cycle unchanged (config documents are rewritten in place).
"""

from __future__ import annotations
import json
import os
from typing import Any


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def write_text(path: str, content: str, encoding: str = "utf-8") -> None:
    """Write ``content`` to ``path`` via a sibling temp file and atomic replace."""
    dir_part = os.path.dirname(path)
    if dir_part:
        ensure_dir(dir_part)
    tmp = path + ".tmp"
    with open(tmp, "w", encoding=encoding, newline="") as fh:
        fh.write(content)
    os.replace(tmp, path)


def read_text(path: str, encoding: str = "utf-8") -> str:
    with open(path, "r", encoding=encoding, newline="") as fh:
        return fh.read()


def read_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def write_json(path: str, data: Any) -> None:
    write_text(path, json.dumps(data, indent=2, ensure_ascii=False))
