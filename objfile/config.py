from __future__ import annotations

import io
import pickle
from dataclasses import dataclass


@dataclass
class ObjectFileConfig:
    """Settings shared by object-file readers and writers.

    Parameters
    ----------
    buffer_size:
        Size of the buffering layer between the file and the pickle codec.
    protocol:
        Pickle protocol used when writing. Readers detect it per object.
    fsync:
        When ``True`` the writer fsyncs on close (best-effort).
    make_parents:
        Create missing parent directories before writing.
    """

    buffer_size: int = io.DEFAULT_BUFFER_SIZE
    protocol: int = pickle.HIGHEST_PROTOCOL
    fsync: bool = True
    make_parents: bool = True
