# -*- coding: utf-8 -*-
from __future__ import annotations

from pathlib import Path


def read_lines(path: Path) -> list[str]:
    if not path.exists():
        return []
    return [line.strip() for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]


def read_title_set(path: Path) -> set[str]:
    """Titles listed one per line; blank lines and `#` comments are ignored."""
    return {line for line in read_lines(path) if not line.startswith("#")}


def write_lines(path: Path, values: list[str]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(values) + ("\n" if values else ""), encoding="utf-8")
