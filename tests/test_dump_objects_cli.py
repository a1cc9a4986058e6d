import subprocess
import sys
from pathlib import Path

from objfile import objects, write_objects
from tools.dump_objects import main

ROOT = Path(__file__).resolve().parents[1]


def _run(*args):
    return subprocess.run(
        [sys.executable, "-m", "tools.dump_objects", *args],
        capture_output=True,
        text=True,
        cwd=ROOT,
    )


def test_help_exits_zero():
    proc = _run("--help")
    assert proc.returncode == 0
    assert "usage" in proc.stdout.lower()


def test_count_reports_readable_objects(tmp_path: Path):
    path = tmp_path / "data.pkl"
    write_objects(path, [1, "two", {"three": 3}])
    proc = _run("count", str(path))
    assert proc.returncode == 0
    assert proc.stdout.strip() == "3"


def test_count_missing_file_is_zero(tmp_path: Path):
    proc = _run("count", str(tmp_path / "missing.pkl"))
    assert proc.returncode == 0
    assert proc.stdout.strip() == "0"


def test_show_with_limit(tmp_path: Path, capsys):
    path = tmp_path / "data.pkl"
    write_objects(path, ["a", "b", "c"])
    assert main(["show", str(path), "--limit", "2"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == ["0: 'a'", "1: 'b'"]


def test_copy_readable_prefix(tmp_path: Path, capsys):
    src = tmp_path / "src.pkl"
    dst = tmp_path / "out" / "dst.pkl"
    write_objects(src, list(range(5)))
    with src.open("ab") as fh:
        fh.write(b"\xff garbage")
    assert main(["copy", str(src), str(dst)]) == 0
    assert capsys.readouterr().out.strip() == "5"
    assert list(objects(dst)) == [0, 1, 2, 3, 4]


def test_copy_append_with_limit(tmp_path: Path):
    src = tmp_path / "src.pkl"
    dst = tmp_path / "dst.pkl"
    write_objects(src, ["x", "y", "z"])
    write_objects(dst, ["start"])
    assert main(["copy", str(src), str(dst), "--limit", "1", "--append"]) == 0
    assert list(objects(dst)) == ["start", "x"]
