"""Confinement of user-supplied paths to the storage base directory."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote_plus

logger = logging.getLogger(__name__)

PathInput = Union[str, "os.PathLike[str]", None]


class InvalidPath(ValueError):
    """A path failed canonicalization or lies outside the base directory."""


def _normalize_separators(path: str) -> str:
    path = path.replace("\\", os.sep)
    if os.altsep:
        path = path.replace(os.altsep, os.sep)
    return path


def is_valid_name(name: str) -> bool:
    """Return True when *name* is a single directory entry name."""
    if not name or name in (".", ".."):
        return False
    if "\x00" in name or "/" in name or "\\" in name:
        return False
    return os.sep not in name and not (os.altsep and os.altsep in name)


class PathResolver:
    """Maps untrusted path strings onto a fixed base directory.

    ``resolve`` is purely syntactic. Containment is decided by
    ``is_contained`` on the canonical (symlink-free) form of a path, so it
    has to be asked again right before each filesystem call.
    """

    def __init__(self, base_dir: Union[str, "os.PathLike[str]"]) -> None:
        try:
            base = Path(base_dir).expanduser().resolve(strict=True)
        except (OSError, RuntimeError) as exc:
            raise InvalidPath(f"Base directory '{base_dir}' is not accessible") from exc
        if not base.is_dir():
            raise InvalidPath(f"Base directory '{base}' is not a directory")
        self._base = base
        self._base_str = str(base)
        self._prefix = self._base_str.rstrip(os.sep)

    @property
    def base(self) -> Path:
        return self._base

    def _anchored(self, path: str) -> bool:
        return path == self._base_str or path.startswith(self._prefix + os.sep)

    @staticmethod
    def _strip(path: str) -> str:
        return path.rstrip(os.sep) or os.sep

    def resolve(self, requested: PathInput) -> str:
        """Join *requested* onto the base directory without touching the filesystem.

        Already-anchored input is returned as is (minus trailing separators),
        which makes ``resolve(resolve(p)) == resolve(p)``. Anything else is
        percent-decoded first; a leading separator anchors at the base, and
        relative input is joined to it.
        """
        raw = _normalize_separators(os.fspath(requested) if requested is not None else "")
        if self._anchored(raw):
            return self._strip(raw)

        path = _normalize_separators(unquote_plus(raw))
        if self._anchored(path):
            joined = path
        elif path.startswith(os.sep):
            joined = self._prefix + path
        else:
            joined = self._prefix + os.sep + path
        return self._strip(joined)

    def _within(self, path: Path) -> bool:
        return path == self._base or self._base in path.parents

    def _canonical(self, path: PathInput) -> Optional[Path]:
        try:
            real = Path(os.fspath(path) if path is not None else "").resolve(strict=True)
        except (OSError, RuntimeError, ValueError):
            return None
        return real if self._within(real) else None

    def is_contained(self, path: PathInput) -> bool:
        """True when the canonical form of *path* is the base or lies below it.

        Paths that cannot be canonicalized (missing, unreadable, symlink
        loops) are never contained.
        """
        if path is None or os.fspath(path) == "":
            return False
        return self._canonical(path) is not None

    def require(self, requested: PathInput) -> Path:
        """Resolve and canonicalize *requested*; raise ``InvalidPath`` unless contained."""
        resolved = self.resolve(requested)
        canonical = self._canonical(resolved)
        if canonical is None:
            logger.warning("rejected path %r (resolved to %s)", requested, resolved)
            raise InvalidPath(f"Path '{requested}' is not inside the base directory")
        return canonical

    def require_dir(self, requested: PathInput) -> Path:
        path = self.require(requested)
        if not path.is_dir():
            raise InvalidPath(f"'{self.relative(path)}' is not a directory")
        return path

    def require_file(self, requested: PathInput) -> Path:
        path = self.require(requested)
        if not path.is_file():
            raise InvalidPath(f"'{self.relative(path)}' is not a file")
        return path

    def child(self, parent: PathInput, name: str) -> Path:
        """Path for a new entry *name* inside the contained directory *parent*.

        The new entry does not exist yet, so the parent is what gets
        canonicalized and checked; the name is appended syntactically.
        """
        if not is_valid_name(name):
            logger.warning("rejected entry name %r", name)
            raise InvalidPath(f"Invalid name '{name}'")
        return self.require_dir(parent) / name

    def relative(self, path: Union[str, "os.PathLike[str]"]) -> str:
        """Display form of *path*: POSIX-style, relative to the base, ``.`` for the base."""
        try:
            rel = Path(path).relative_to(self._base)
        except ValueError as exc:
            raise InvalidPath(f"Path '{path}' escapes base '{self._base}'") from exc
        return rel.as_posix()
