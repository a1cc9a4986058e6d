from __future__ import annotations

import logging
import pickle
from contextlib import suppress
from pathlib import Path
from typing import Any, BinaryIO, Callable, Optional

from .config import ObjectFileConfig
from .stream import ObjectStream

_LOG = logging.getLogger(__name__)

Opener = Callable[[Path, int], BinaryIO]

# Marks "nothing pending"; None is a valid decoded object.
_END = object()


def _default_opener(path: Path, buffer_size: int) -> BinaryIO:
    return open(path, "rb", buffering=buffer_size)


class ObjectFileCursor:
    """Walks the pickled objects of one file, one object ahead of the caller.

    The file is opened on the first :meth:`has_more` call, not at
    construction. Any failure while opening or decoding (missing file,
    truncated or corrupt data, a class that cannot be imported) ends the
    sequence and releases the handle; nothing is raised to the caller. The
    failure is only visible in the DEBUG log.
    """

    def __init__(
        self,
        path: str | Path,
        cfg: Optional[ObjectFileConfig] = None,
        opener: Optional[Opener] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._path = Path(path)
        self._cfg = cfg or ObjectFileConfig()
        self._opener = opener or _default_opener
        self._log = logger or _LOG
        self._fh: Optional[BinaryIO] = None
        self._unpickler: Optional[pickle.Unpickler] = None
        self._opened = False
        self._pending: Any = _END
        self._delivered = 0

    @property
    def path(self) -> Path:
        return self._path

    @property
    def opened(self) -> bool:
        return self._opened

    @property
    def closed(self) -> bool:
        return self._opened and self._fh is None

    @property
    def delivered(self) -> int:
        return self._delivered

    def __enter__(self) -> ObjectFileCursor:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __iter__(self) -> ObjectFileCursor:
        return self

    def __next__(self) -> Any:
        if not self.has_more():
            raise StopIteration
        return self.take_next()

    def has_more(self) -> bool:
        if not self._opened:
            self._open()
        return self._pending is not _END

    def take_next(self) -> Any:
        """Return the pending object and decode the one after it."""
        value = self._pending
        if value is _END:
            raise LookupError(f"no pending object in {self._path}")
        self._pending = _END
        self._delivered += 1
        self._decode_next()
        return value

    def close(self) -> None:
        # Closing before first use leaves the cursor terminal without I/O.
        self._opened = True
        self._pending = _END
        self._unpickler = None
        fh, self._fh = self._fh, None
        if fh is not None:
            with suppress(Exception):
                fh.close()

    def _open(self) -> None:
        self._opened = True
        try:
            self._fh = self._opener(self._path, self._cfg.buffer_size)
            self._unpickler = pickle.Unpickler(self._fh)
        except Exception as exc:
            self._log.debug("cannot open %s, treating as empty: %s", self._path, exc)
            self.close()
            return
        self._log.debug("opened %s", self._path)
        self._decode_next()

    def _decode_next(self) -> None:
        if self._unpickler is None:
            return
        try:
            self._pending = self._unpickler.load()
            # Each object is a standalone pickle; keep no references to delivered ones.
            self._unpickler.memo.clear()
        except EOFError:
            self._log.debug("end of %s after %d objects", self._path, self._delivered)
            self.close()
        except Exception as exc:
            self._log.debug(
                "decode failed in %s after %d objects (%s: %s); ending sequence",
                self._path,
                self._delivered,
                type(exc).__name__,
                exc,
            )
            self.close()


def objects(
    path: str | Path,
    cfg: Optional[ObjectFileConfig] = None,
    *,
    opener: Optional[Opener] = None,
    logger: Optional[logging.Logger] = None,
) -> ObjectStream:
    """Return a lazy stream of the objects pickled into ``path``.

    No I/O happens until the stream is iterated. Closing the stream (or
    leaving its ``with`` block) releases the file even if only a prefix was
    read.
    """
    cursor = ObjectFileCursor(path, cfg, opener=opener, logger=logger)
    return ObjectStream(cursor, on_close=cursor.close)
