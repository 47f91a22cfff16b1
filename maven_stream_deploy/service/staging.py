"""Temporary staging of streamed file content."""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import tempfile
import threading
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, FrozenSet, Optional, Set

from maven_stream_deploy.domain import StreamedFile


class StagingArea:
    """Owns the temp files of one deploy stream.

    Every staged file lives in a private directory created on first use.
    ``stage`` removes its file on exit; ``cleanup`` sweeps whatever is left.
    """

    def __init__(self, root: Optional[Path] = None, prefix: str = "maven-deploy-") -> None:
        self.root = Path(root) if root else None
        self.prefix = prefix
        self._dir: Optional[Path] = None
        self._files: Set[Path] = set()
        self._lock = threading.Lock()
        self.log = logging.getLogger(self.__class__.__name__)

    @property
    def directory(self) -> Optional[Path]:
        return self._dir

    @property
    def pending(self) -> FrozenSet[Path]:
        return frozenset(self._files)

    def allocate(self, suffix: str = "") -> Path:
        with self._lock:
            if self._dir is None:
                if self.root is not None:
                    self.root.mkdir(parents=True, exist_ok=True)
                self._dir = Path(tempfile.mkdtemp(prefix=self.prefix, dir=self.root))
            fd, name = tempfile.mkstemp(suffix=suffix, dir=self._dir)
            os.close(fd)
            path = Path(name)
            self._files.add(path)
        return path

    @asynccontextmanager
    async def stage(self, file: StreamedFile) -> AsyncIterator[Path]:
        suffix = f".{file.extension}" if file.extension else ""
        path = await asyncio.to_thread(self.allocate, suffix)
        try:
            size = await asyncio.to_thread(self._write, path, file)
            self.log.info("Staged %s -> %s (%d bytes)", file.relative, path, size)
            yield path
        finally:
            self.release(path)

    def release(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            self.log.warning("Unable to remove staged file %s: %s", path, exc)
            return
        with self._lock:
            self._files.discard(path)

    def cleanup(self) -> None:
        for path in list(self._files):
            self.release(path)
        with self._lock:
            if self._dir is not None and not self._files:
                shutil.rmtree(self._dir, ignore_errors=True)
                self._dir = None

    @staticmethod
    def _write(path: Path, file: StreamedFile) -> int:
        written = 0
        with open(path, "wb") as fh:
            for chunk in file.iter_chunks():
                fh.write(chunk)
                written += len(chunk)
        return written
