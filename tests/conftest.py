# tests/conftest.py
from __future__ import annotations

import os
import pickle
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]

# pytest-dotenv has already loaded .env at this point
pp = os.getenv("PYTHONPATH")
if pp:
    for p in pp.split(os.pathsep):
        if p:
            sys.path.insert(0, p)
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


class CountingOpener:
    """Opener that records every open and every close of the handles it hands out."""

    def __init__(self) -> None:
        self.opens = 0
        self.closes = 0

    def __call__(self, path: Path, buffer_size: int):
        self.opens += 1
        fh = open(path, "rb", buffering=buffer_size)
        opener = self
        real_close = fh.close

        class _Handle:
            def __getattr__(self, name):
                return getattr(fh, name)

            def close(self):
                opener.closes += 1
                real_close()

        return _Handle()


@pytest.fixture
def counting_opener() -> CountingOpener:
    return CountingOpener()


@pytest.fixture
def pickle_file(tmp_path: Path):
    """Write objects as raw back-to-back pickles, optionally followed by extra bytes."""

    def _make(objs, name: str = "objs.pkl", tail: bytes = b"") -> Path:
        path = tmp_path / name
        with path.open("wb") as fh:
            for obj in objs:
                pickle.dump(obj, fh)
            fh.write(tail)
        return path

    return _make
