"""
Pytest config: local imports without installation, plus tree-building fixtures.
"""
import os
import sys
import time
from pathlib import Path

import pytest


def _add_repo_root_to_path():
    repo_root = str(Path(__file__).resolve().parent.parent)
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


_add_repo_root_to_path()

from amble.config import ScanConfig  # noqa: E402

HOUR = 3600
DAY = 86400


def set_age(path: Path, mtime_age: float, atime_age: float = None):
    """Pin a file's timestamps to `age` seconds in the past"""
    now = time.time()
    if atime_age is None:
        atime_age = mtime_age
    os.utime(path, (now - atime_age, now - mtime_age))


@pytest.fixture
def make_file(tmp_path):
    """Create a file below tmp_path, aged by the given number of seconds"""
    def _make(rel: str, age: float = HOUR, atime_age: float = None) -> Path:
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(rel)
        set_age(path, age, atime_age)
        return path
    return _make


@pytest.fixture
def make_config(tmp_path):
    """ScanConfig rooted at tmp_path; modify-only by default, creation time off"""
    def _make(**overrides) -> ScanConfig:
        values = dict(
            root=tmp_path,
            days=3,
            access=False,
            create=False,
            modify=True,
            ignore_hidden=True,
            skip=(),
            threads=4,
            create_supported=False,
        )
        values.update(overrides)
        return ScanConfig(**values)
    return _make


@pytest.fixture
def data_tree(tmp_path, make_file):
    """
    Layout used by several scanner tests:

        .hidden              1 hour old
        keep/a.txt           2 days old
        skip_me/b.txt        1 hour old
        old/c.txt            10 days old
    """
    make_file(".hidden", HOUR)
    make_file("keep/a.txt", 2 * DAY)
    make_file("skip_me/b.txt", HOUR)
    make_file("old/c.txt", 10 * DAY)
    return tmp_path
