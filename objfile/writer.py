from __future__ import annotations

import logging
import os
import pickle
from contextlib import suppress
from pathlib import Path
from typing import Any, BinaryIO, Iterable, Optional

from .config import ObjectFileConfig

_LOG = logging.getLogger(__name__)


class ObjectFileError(Exception):
    """Base class for object-file errors."""


class ObjectWriteError(ObjectFileError):
    """An object could not be pickled; nothing was written for it."""


class ObjectFileWriter:
    """Writes pickled objects back to back into one file.

    Each object is pickled to bytes before anything touches the file, so a
    failing object never leaves a partial pickle behind and the file stays
    readable up to the last successful :meth:`append`.
    """

    def __init__(
        self,
        path: str | Path,
        cfg: Optional[ObjectFileConfig] = None,
        *,
        append: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        self.path = Path(path)
        self._cfg = cfg or ObjectFileConfig()
        self._append = append
        self._log = logger or _LOG
        self._fh: Optional[BinaryIO] = None
        self._count = 0

    def __enter__(self) -> ObjectFileWriter:
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def count(self) -> int:
        return self._count

    def open(self) -> None:
        if self._fh is not None:
            raise RuntimeError("ObjectFileWriter is already open")
        if self._cfg.make_parents:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        mode = "ab" if self._append else "wb"
        self._fh = self.path.open(mode, buffering=self._cfg.buffer_size)
        self._log.debug("opened %s for writing (mode=%s)", self.path, mode)

    def append(self, obj: Any) -> None:
        if not self._fh:
            raise RuntimeError("ObjectFileWriter is not open")
        try:
            data = pickle.dumps(obj, protocol=self._cfg.protocol)
        except (pickle.PicklingError, TypeError, AttributeError) as exc:
            raise ObjectWriteError(
                f"cannot pickle object #{self._count} ({type(obj).__name__}) for {self.path}: {exc}"
            ) from exc
        self._fh.write(data)
        self._count += 1

    def extend(self, objs: Iterable[Any]) -> int:
        """Append every object of ``objs``; returns how many were written."""
        n = 0
        for obj in objs:
            self.append(obj)
            n += 1
        return n

    def flush(self) -> None:
        if self._fh:
            self._fh.flush()

    def close(self) -> None:
        fh, self._fh = self._fh, None
        if fh is not None:
            with suppress(Exception):
                fh.flush()
            if self._cfg.fsync:
                # Best-effort durability; harmless if underlying file doesn't support fileno()
                with suppress(Exception):
                    os.fsync(fh.fileno())
            fh.close()
            self._log.debug("closed %s after %d objects", self.path, self._count)


def write_objects(
    path: str | Path, objs: Iterable[Any], cfg: Optional[ObjectFileConfig] = None
) -> int:
    """Replace ``path`` with the pickled objects of ``objs``."""
    with ObjectFileWriter(path, cfg) as writer:
        return writer.extend(objs)


def append_objects(
    path: str | Path, objs: Iterable[Any], cfg: Optional[ObjectFileConfig] = None
) -> int:
    with ObjectFileWriter(path, cfg, append=True) as writer:
        return writer.extend(objs)
