from __future__ import annotations

import posixpath
from typing import List

from .types import Crumb

SIZE_UNITS = ("KB", "MB", "GB", "TB")


def size_formatted(num_bytes: int) -> str:
    if num_bytes < 1024:
        return f"{num_bytes} B"
    value = float(num_bytes)
    power = 0
    while value >= 1024 and power < len(SIZE_UNITS):
        value /= 1024
        power += 1
    text = f"{round(value, 2):.2f}".rstrip("0").rstrip(".")
    return f"{text} {SIZE_UNITS[power - 1]}"


def clean_dir(path: str | None) -> str:
    """Normalize a ``dir`` query value: forward slashes, no trailing slash, ``.`` for home."""
    path = (path or "").replace("\\", "/").strip()
    stripped = path.rstrip("/")
    if not stripped:
        return "/" if path.startswith("/") else "."
    if stripped.startswith("./"):
        stripped = stripped[2:].lstrip("/") or "."
    return stripped


def join_dir(directory: str, name: str) -> str:
    return name if directory in (".", "") else f"{directory.rstrip('/')}/{name}"


def parent_dir(path: str) -> str:
    parent = posixpath.dirname(clean_dir(path).rstrip("/"))
    return parent if parent not in ("", "/") else "."


def breadcrumbs(path: str) -> List[Crumb]:
    crumbs = [Crumb(name="Home", path=".")]
    trimmed = (path or "").replace("\\", "/").strip("/")
    if trimmed in ("", "."):
        return crumbs
    acc = ""
    for part in trimmed.split("/"):
        if not part or part == ".":
            continue
        acc = f"{acc}/{part}" if acc else part
        crumbs.append(Crumb(name=part, path=acc))
    return crumbs
