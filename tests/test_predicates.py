import os
import stat
from types import SimpleNamespace

import pytest

from amble.config import CREATE_TIME_SUPPORTED, SECS_PER_DAY
from amble.errors import ErrorKind, MetadataError
from amble.models import Entry, EntryKind
from amble.predicates import evaluate, within_window

NOW = 1_700_000_000.0


def fake_entry(atime=NOW, mtime=NOW, birthtime=None, kind=EntryKind.FILE, path="/data/f.txt"):
    values = dict(st_mode=stat.S_IFREG, st_atime=atime, st_mtime=mtime)
    if birthtime is not None:
        values["st_birthtime"] = birthtime
    return Entry(path=path, kind=kind, _stat=SimpleNamespace(**values))


def test_modified_only_match_is_annotated_m(make_config):
    config = make_config(days=1)
    result = evaluate(fake_entry(mtime=NOW - 60, atime=NOW - 60), config, now=NOW)
    assert result.annotation == "m"
    assert result.render() == "/data/f.txt (m)"


def test_old_file_does_not_match(make_config):
    config = make_config(days=1, access=True)
    assert evaluate(fake_entry(mtime=NOW - 2 * SECS_PER_DAY, atime=NOW - 2 * SECS_PER_DAY),
                    config, now=NOW) is None


def test_annotation_order_is_access_create_modify(make_config):
    config = make_config(days=1, access=True, create=True, modify=True, create_supported=True)
    result = evaluate(fake_entry(atime=NOW - 1, mtime=NOW - 1, birthtime=NOW - 1), config, now=NOW)
    assert result.annotation == "acm"


def test_only_matching_predicates_are_flagged(make_config):
    config = make_config(days=1, access=True, modify=True)
    result = evaluate(fake_entry(atime=NOW - 10, mtime=NOW - 3 * SECS_PER_DAY), config, now=NOW)
    assert result.annotation == "a"


def test_boundary_is_exclusive(make_config):
    config = make_config(days=1)
    window = config.window_seconds
    assert evaluate(fake_entry(mtime=NOW - window), config, now=NOW) is None
    assert evaluate(fake_entry(mtime=NOW - window + 1), config, now=NOW) is not None


def test_elapsed_counts_whole_seconds():
    assert within_window(NOW - 9.9, 10, NOW)
    assert not within_window(NOW - 10.0, 10, NOW)


def test_fractional_days(make_config):
    config = make_config(days=0.5)
    assert evaluate(fake_entry(mtime=NOW - 11 * 3600), config, now=NOW) is not None
    assert evaluate(fake_entry(mtime=NOW - 13 * 3600), config, now=NOW) is None


def test_directories_never_match(make_config):
    config = make_config(days=1)
    assert evaluate(fake_entry(kind=EntryKind.DIR), config, now=NOW) is None
    assert evaluate(fake_entry(kind=EntryKind.OTHER), config, now=NOW) is None


def test_future_timestamp_is_a_clock_error(make_config):
    config = make_config(days=1)
    with pytest.raises(MetadataError) as info:
        evaluate(fake_entry(mtime=NOW + 30), config, now=NOW)
    assert info.value.kind is ErrorKind.SYSTEM_TIME
    assert info.value.path == "/data/f.txt"


def test_unsupported_create_never_contributes(make_config):
    # no st_birthtime on the metadata, but create is disabled by capability
    config = make_config(days=1, create=True, modify=False, create_supported=False)
    assert evaluate(fake_entry(), config, now=NOW) is None


def test_missing_timestamp_is_a_metadata_error(make_config):
    config = make_config(days=1, create=True, modify=False, create_supported=True)
    with pytest.raises(MetadataError, match="create time not available"):
        evaluate(fake_entry(), config, now=NOW)


def test_vanished_file_is_a_metadata_error(tmp_path, make_config):
    config = make_config(days=1)
    entry = Entry(path=str(tmp_path / "gone.txt"), kind=EntryKind.FILE)
    with pytest.raises(MetadataError) as info:
        evaluate(entry, config)
    assert info.value.kind is ErrorKind.IO


def test_real_file(make_file, make_config):
    path = make_file("recent.txt", age=60)
    entry = Entry(path=str(path), kind=EntryKind.FILE)
    assert evaluate(entry, make_config(days=1)).annotation == "m"


@pytest.mark.skipif(not CREATE_TIME_SUPPORTED, reason="platform has no creation time")
def test_real_creation_time(make_file, make_config):
    path = make_file("born.txt", age=60)
    entry = Entry(path=str(path), kind=EntryKind.FILE)
    config = make_config(days=1, modify=False, create=True, create_supported=True)
    result = evaluate(entry, config)
    assert result is not None and result.annotation == "c"
    assert os.path.exists(result.path)
