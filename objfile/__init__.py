# objfile/__init__.py
"""Lazy, closeable streams over files of back-to-back pickled objects."""

from .config import ObjectFileConfig
from .reader import ObjectFileCursor, objects
from .stream import ObjectStream, to_object_stream
from .writer import (
    ObjectFileError,
    ObjectFileWriter,
    ObjectWriteError,
    append_objects,
    write_objects,
)

__all__ = [
    "objects",
    "ObjectFileCursor",
    "ObjectFileConfig",
    "ObjectStream",
    "to_object_stream",
    "ObjectFileWriter",
    "write_objects",
    "append_objects",
    "ObjectFileError",
    "ObjectWriteError",
]

__version__ = "0.1.0"
