"""Filesystem operations confined to the base directory.

Every operation resolves and canonicalizes its path arguments through
``PathResolver`` right before the filesystem call that uses them. New
entries are created in exclusive mode, so two concurrent creators of the
same name end with one "already exists" failure rather than an overwrite.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import BinaryIO, List, Optional

import httpx

from .config import Settings
from .fetch import FetchError, FetchTooLarge, download, filename_from_url, validate_url
from .formatting import join_dir, size_formatted
from .paths import InvalidPath, PathResolver, is_valid_name
from .types import DirEntry, OperationResult, SearchHit

logger = logging.getLogger(__name__)

COPY_CHUNK = 1024 * 1024


class FileManager:
    def __init__(
        self,
        paths: PathResolver,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.paths = paths
        self.settings = settings
        self._transport = transport

    # ----------- decoding ------------

    def _decode(self, data: bytes, partial: bool = False) -> str:
        for enc in self.settings.TEXT_ENCODINGS:
            try:
                return data.decode(enc)
            except UnicodeDecodeError as exc:
                # a prefix read can cut a multi-byte sequence in half
                if partial and exc.reason == "unexpected end of data":
                    return data[: exc.start].decode(enc, errors="replace")
                continue
            except LookupError:
                continue
        return data.decode("utf-8", errors="replace")

    def _read_text(self, path: Path, limit: Optional[int] = None) -> Optional[str]:
        try:
            with path.open("rb") as f:
                # 4 bytes per char covers any UTF-8 sequence
                data = f.read(limit * 4) if limit is not None else f.read()
        except OSError as exc:
            logger.warning("cannot read %s: %s", path, exc)
            return None
        if limit is None:
            return self._decode(data)
        return self._decode(data, partial=True)[:limit]

    def _own_path(self, requested: str, canonical: Path) -> Path:
        """The directory entry *requested* names: the link itself for a symlink."""
        entry = Path(self.paths.resolve(requested))
        if entry.is_symlink():
            return self.paths.require_dir(entry.parent) / entry.name
        return canonical

    # ----------- reads ------------

    def _entry(self, directory: str, item: Path) -> DirEntry:
        rel = join_dir(directory, item.name)
        is_dir = item.is_dir()
        if not self.paths.is_contained(item):
            return DirEntry(name=item.name, path=rel, is_dir=is_dir, contained=False)
        if is_dir:
            return DirEntry(name=item.name, path=rel, is_dir=True)
        try:
            size = item.stat().st_size
        except OSError:
            size = None
        return DirEntry(
            name=item.name,
            path=rel,
            is_dir=False,
            size=size,
            size_text=size_formatted(size) if size is not None else "?",
            preview=self._read_text(item, self.settings.PREVIEW_CHARS) if item.is_file() else None,
        )

    def list_dir(self, directory: str) -> List[DirEntry]:
        """Entries of a contained directory: folders first, then files, case-insensitive."""
        dir_path = self.paths.require_dir(directory)
        rel_dir = self.paths.relative(dir_path)
        entries = [self._entry(rel_dir, item) for item in dir_path.iterdir()]
        entries.sort(key=lambda e: (0 if e.is_dir else 1, e.name.lower(), e.name))
        return entries

    def read_file(self, path: str) -> Optional[str]:
        try:
            file_path = self.paths.require_file(path)
        except InvalidPath:
            return None
        return self._read_text(file_path)

    def preview_file(self, path: str) -> Optional[str]:
        try:
            file_path = self.paths.require_file(path)
        except InvalidPath:
            return None
        return self._read_text(file_path, self.settings.PREVIEW_CHARS)

    def search(self, directory: str, term: str) -> List[SearchHit]:
        """Files below *directory* whose name contains *term*, ignoring case."""
        root = self.paths.require_dir(directory)
        needle = (term or "").strip().lower()
        if not needle:
            return []
        hits: List[SearchHit] = []
        limit = self.settings.SEARCH_MAX_RESULTS
        for current, dirnames, filenames in os.walk(root, followlinks=False):
            dirnames.sort(key=str.lower)
            for name in sorted(filenames, key=str.lower):
                if needle not in name.lower() or not self.paths.is_contained(Path(current) / name):
                    continue
                folder = self.paths.relative(Path(current))
                rel = join_dir(folder, name)
                hits.append(SearchHit(name=name, path=rel, folder=folder))
                if limit > 0 and len(hits) >= limit:
                    return hits
        return hits

    # ----------- mutations ------------

    def save_file(self, path: str, content: str) -> OperationResult:
        try:
            file_path = self.paths.require_file(path)
        except InvalidPath:
            return OperationResult.fail("Invalid or non-existent file")
        try:
            with file_path.open("w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError:
            logger.exception("save failed: %s", file_path)
            return OperationResult.fail("File save failed")
        rel = self.paths.relative(file_path)
        logger.info("saved %s", rel)
        return OperationResult.ok(rel)

    def create_file(self, directory: str, filename: str, content: str = "") -> OperationResult:
        try:
            self.paths.require_dir(directory)
        except InvalidPath:
            return OperationResult.fail("Invalid directory")
        if not is_valid_name(filename):
            return OperationResult.fail("Invalid file name")
        try:
            target = self.paths.child(directory, filename)
        except InvalidPath:
            return OperationResult.fail("Invalid directory")
        if target.exists() or target.is_symlink():
            return OperationResult.fail("File already exists")
        try:
            with target.open("x", encoding="utf-8", newline="") as f:
                f.write(content)
        except FileExistsError:
            return OperationResult.fail("File already exists")
        except OSError:
            logger.exception("create failed: %s", target)
            return OperationResult.fail("File creation failed")
        rel = self.paths.relative(target)
        logger.info("created file %s", rel)
        return OperationResult.ok(rel)

    def create_dir(self, directory: str, name: str) -> OperationResult:
        try:
            self.paths.require_dir(directory)
        except InvalidPath:
            return OperationResult.fail("Invalid parent directory")
        if not is_valid_name(name):
            return OperationResult.fail("Invalid folder name")
        try:
            target = self.paths.child(directory, name)
        except InvalidPath:
            return OperationResult.fail("Invalid parent directory")
        try:
            target.mkdir(mode=0o755)
        except FileExistsError:
            return OperationResult.fail("Folder already exists")
        except OSError:
            logger.exception("mkdir failed: %s", target)
            return OperationResult.fail("Folder creation failed")
        rel = self.paths.relative(target)
        logger.info("created folder %s", rel)
        return OperationResult.ok(rel)

    def delete_file(self, path: str) -> OperationResult:
        try:
            file_path = self.paths.require_file(path)
        except InvalidPath:
            return OperationResult.fail("Invalid or non-existent file")
        try:
            victim = self._own_path(path, file_path)
        except InvalidPath:
            return OperationResult.fail("Invalid or non-existent file")
        try:
            victim.unlink()
        except FileNotFoundError:
            return OperationResult.fail("Invalid or non-existent file")
        except OSError:
            logger.exception("delete failed: %s", victim)
            return OperationResult.fail("File deletion failed")
        logger.info("deleted file %s", victim)
        return OperationResult.ok()

    def delete_dir(self, path: str) -> OperationResult:
        try:
            dir_path = self.paths.require_dir(path)
        except InvalidPath:
            return OperationResult.fail("Invalid or non-existent folder")
        if dir_path == self.paths.base:
            return OperationResult.fail("Cannot delete the base folder")
        try:
            victim = self._own_path(path, dir_path)
        except InvalidPath:
            return OperationResult.fail("Invalid or non-existent folder")
        if victim.is_symlink():
            try:
                victim.unlink()
            except FileNotFoundError:
                return OperationResult.fail("Invalid or non-existent folder")
            except OSError:
                logger.exception("unlink failed: %s", victim)
                return OperationResult.fail("Folder deletion failed")
            logger.info("deleted folder link %s", victim)
            return OperationResult.ok()
        try:
            if any(dir_path.iterdir()):
                return OperationResult.fail("Folder is not empty")
            dir_path.rmdir()
        except FileNotFoundError:
            return OperationResult.fail("Invalid or non-existent folder")
        except OSError:
            logger.exception("rmdir failed: %s", dir_path)
            return OperationResult.fail("Folder deletion failed")
        logger.info("deleted folder %s", dir_path)
        return OperationResult.ok()

    def rename(self, path: str, new_name: str) -> OperationResult:
        try:
            canonical = self.paths.require(path)
        except InvalidPath:
            return OperationResult.fail("Invalid source file/folder")
        if canonical == self.paths.base:
            return OperationResult.fail("Cannot rename the base folder")
        if not is_valid_name(new_name):
            return OperationResult.fail("Invalid new name")
        try:
            source = self._own_path(path, canonical)
            target = self.paths.child(source.parent, new_name)
        except InvalidPath:
            return OperationResult.fail("Invalid source file/folder")
        if target.exists() or target.is_symlink():
            return OperationResult.fail("Target already exists")
        try:
            source.rename(target)
        except OSError:
            logger.exception("rename failed: %s -> %s", source, target)
            return OperationResult.fail("Rename failed")
        rel = self.paths.relative(target)
        logger.info("renamed %s -> %s", self.paths.relative(source), rel)
        return OperationResult.ok(rel)

    def _write_new(self, directory: str, name: str, data: bytes) -> Path:
        target = self.paths.child(directory, name)
        with target.open("xb") as f:
            f.write(data)
        return target

    def upload(self, directory: str, filename: Optional[str], stream: BinaryIO) -> OperationResult:
        """Copy *stream* into *directory* as the last path component of *filename*."""
        try:
            self.paths.require_dir(directory)
        except InvalidPath:
            return OperationResult.fail("Invalid upload directory")
        name = (filename or "").replace("\\", "/").rsplit("/", 1)[-1].strip()
        if not is_valid_name(name):
            return OperationResult.fail("Invalid file name")
        try:
            target = self.paths.child(directory, name)
        except InvalidPath:
            return OperationResult.fail("Invalid upload directory")
        if target.exists() or target.is_symlink():
            return OperationResult.fail("File already exists")

        limit = self.settings.UPLOAD_MAX_BYTES
        total = 0
        try:
            with target.open("xb") as out:
                while True:
                    chunk = stream.read(COPY_CHUNK)
                    if not chunk:
                        break
                    total += len(chunk)
                    if limit > 0 and total > limit:
                        break
                    out.write(chunk)
        except FileExistsError:
            return OperationResult.fail("File already exists")
        except OSError:
            logger.exception("upload failed: %s", target)
            target.unlink(missing_ok=True)
            return OperationResult.fail("File upload failed")
        if limit > 0 and total > limit:
            target.unlink(missing_ok=True)
            logger.warning("upload %s rejected: over %d bytes", name, limit)
            return OperationResult.fail("File exceeds upload limit")
        rel = self.paths.relative(target)
        logger.info("uploaded %s (%d bytes)", rel, total)
        return OperationResult.ok(rel)

    async def fetch_remote(self, url: str, directory: str) -> OperationResult:
        """Download *url* into *directory*, named after the URL's last path segment."""
        url = (url or "").strip()
        if not validate_url(url):
            return OperationResult.fail("Invalid URL")
        try:
            self.paths.require_dir(directory)
        except InvalidPath:
            return OperationResult.fail("Invalid directory")
        name = filename_from_url(url)
        if not is_valid_name(name):
            return OperationResult.fail("Invalid file name")
        try:
            target = self.paths.child(directory, name)
        except InvalidPath:
            return OperationResult.fail("Invalid directory")
        if target.exists() or target.is_symlink():
            return OperationResult.fail(f"File already exists: {name}")

        try:
            final_url, body = await download(
                url,
                timeout=self.settings.FETCH_TIMEOUT,
                max_bytes=self.settings.FETCH_MAX_BYTES,
                transport=self._transport,
            )
        except FetchTooLarge as exc:
            logger.warning("fetch %s rejected: %s", url, exc)
            return OperationResult.fail("Remote file exceeds size limit")
        except FetchError as exc:
            logger.warning("fetch %s failed: %s", url, exc)
            return OperationResult.fail("Failed to fetch remote file")

        # the download may have taken a while; check the destination again
        try:
            target = self._write_new(directory, name, body)
        except InvalidPath:
            return OperationResult.fail("Invalid directory")
        except FileExistsError:
            return OperationResult.fail(f"File already exists: {name}")
        except OSError:
            logger.exception("saving fetched file failed: %s", target)
            return OperationResult.fail("File save failed")
        rel = self.paths.relative(target)
        logger.info("fetched %s -> %s (%d bytes)", final_url, rel, len(body))
        return OperationResult.ok(rel)
