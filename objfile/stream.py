from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Optional

from .config import ObjectFileConfig
from .writer import ObjectFileWriter

_LOG = logging.getLogger(__name__)


class ObjectStream:
    """
    Lazy iterable of objects that can be closed and written back to a file.

    Wraps any iterable so that:
      - close hooks run exactly once, on close(), on leaving a ``with`` block,
        or when iteration ends (exhausted or abandoned)
      - pipe()/filter()/map() return new streams that stay lazy and close
        their parent when they close
      - write() pickles every object into a file as a terminal step
    """

    def __init__(
        self,
        source: Iterable[Any],
        on_close: Optional[Callable[[], None]] = None,
    ) -> None:
        self._source = source
        self._hooks: list[Callable[[], None]] = []
        self._closed = False
        if on_close is not None:
            self._hooks.append(on_close)

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> ObjectStream:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[Any]:
        try:
            yield from self._source
        finally:
            self.close()

    def on_close(self, callback: Callable[[], None]) -> ObjectStream:
        self._hooks.append(callback)
        return self

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for hook in self._hooks:
            try:
                hook()
            except Exception as exc:
                _LOG.warning("close hook %r failed: %s", hook, exc)

    # ------------------------------------------------------------- transforms

    def pipe(self, func: Callable[..., Iterable[Any]], *args: Any, **kwargs: Any) -> ObjectStream:
        """Apply ``func(iterable, *args, **kwargs)`` lazily.

        ``func`` is only called once the returned stream is iterated, so
        eager functions such as ``sorted`` do not read the file early.
        """

        def _piped() -> Iterator[Any]:
            yield from func(iter(self), *args, **kwargs)

        return ObjectStream(_piped(), on_close=self.close)

    def filter(self, predicate: Callable[[Any], bool]) -> ObjectStream:
        return self.pipe(functools.partial(filter, predicate))

    def map(self, func: Callable[[Any], Any]) -> ObjectStream:
        return self.pipe(functools.partial(map, func))

    # --------------------------------------------------------------- terminal

    def write(
        self,
        path: str | Path,
        cfg: Optional[ObjectFileConfig] = None,
        *,
        append: bool = False,
    ) -> int:
        """Pickle every object of the stream into ``path``.

        Returns the number of objects written. The stream is closed
        afterwards, also when writing fails.
        """
        with self, ObjectFileWriter(path, cfg, append=append) as writer:
            return writer.extend(self)


def to_object_stream(
    iterable: Iterable[Any], on_close: Optional[Callable[[], None]] = None
) -> ObjectStream:
    if isinstance(iterable, ObjectStream) and on_close is None:
        return iterable
    return ObjectStream(iterable, on_close=on_close)
