"""
Timestamp predicates for amble
"""
import time
from typing import Optional

from .config import ScanConfig
from .errors import ErrorKind, MetadataError
from .models import Entry, MatchResult

ACCESS = 'access'
CREATE = 'create'
MODIFY = 'modify'

_STAT_FIELDS = {
    ACCESS: 'st_atime',
    CREATE: 'st_birthtime',
    MODIFY: 'st_mtime',
}


def timestamp_of(entry: Entry, which: str) -> float:
    """Fetch one timestamp from the entry's metadata"""
    try:
        stat_result = entry.metadata()
    except OSError as e:
        raise MetadataError.from_os_error(e, path=entry.path)

    value = getattr(stat_result, _STAT_FIELDS[which], None)
    if value is None:
        raise MetadataError(f"{which} time not available for {entry.path}", path=entry.path)
    return value


def within_window(timestamp: float, window: int, now: float, path: Optional[str] = None) -> bool:
    """
    Check `now - timestamp < window`, counting elapsed time in whole seconds.

    A timestamp in the future means the clock is behind the file; that is
    reported as a MetadataError rather than treated as a match.
    """
    elapsed = now - timestamp
    if elapsed < 0:
        raise MetadataError(
            f"clock is {-elapsed:.3f}s behind the timestamp of {path or 'entry'}",
            path=path,
            kind=ErrorKind.SYSTEM_TIME,
        )
    return int(elapsed) < window


def evaluate(entry: Entry, config: ScanConfig, now: Optional[float] = None) -> Optional[MatchResult]:
    """
    Check one entry against the requested predicates.

    Returns a MatchResult if at least one predicate matched, otherwise None.
    Only regular files are evaluated.

    Raises:
        MetadataError: if a requested timestamp cannot be read or compared.
    """
    if not entry.is_file:
        return None
    if now is None:
        now = time.time()

    window = config.window_seconds
    accessed = created = modified = False

    if config.wants_access:
        accessed = within_window(timestamp_of(entry, ACCESS), window, now, entry.path)
    if config.wants_create:
        created = within_window(timestamp_of(entry, CREATE), window, now, entry.path)
    if config.wants_modify:
        modified = within_window(timestamp_of(entry, MODIFY), window, now, entry.path)

    if not (accessed or created or modified):
        return None
    return MatchResult(entry.path, accessed=accessed, created=created, modified=modified)
