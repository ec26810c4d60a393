"""
Configuration management for amble
"""
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Tuple, Union

from .errors import ConfigError

# Number of seconds in a day
SECS_PER_DAY = 86400

# Smallest window the caller may ask for, in days
MIN_DAYS = 0.0000001

# Names starting with this are hidden
HIDDEN_PREFIX = '.'

# Creation (birth) time is only exposed by some platforms
CREATE_TIME_SUPPORTED = hasattr(os.stat_result, 'st_birthtime')


def creation_time_supported() -> bool:
    """Whether this platform reports file creation time"""
    return CREATE_TIME_SUPPORTED


@dataclass(frozen=True)
class ScanConfig:
    """Resolved, read-only settings for one scan"""
    root: Path
    days: float = 8.0
    access: bool = True
    create: bool = True
    modify: bool = True
    ignore_hidden: bool = True
    skip: Tuple[str, ...] = ()
    threads: Optional[int] = None
    create_supported: bool = field(default_factory=creation_time_supported)

    @property
    def wants_access(self) -> bool:
        return self.access

    @property
    def wants_create(self) -> bool:
        """Creation time only counts where the platform exposes it"""
        return self.create and self.create_supported

    @property
    def wants_modify(self) -> bool:
        return self.modify

    @property
    def has_criteria(self) -> bool:
        """True if at least one predicate can actually contribute a match"""
        return self.wants_access or self.wants_create or self.wants_modify

    @property
    def window_seconds(self) -> int:
        """Width of the recency window, rounded up to whole seconds"""
        return math.ceil(SECS_PER_DAY * self.days)


def normalize_skip(names: Optional[Iterable[str]]) -> Tuple[str, ...]:
    """Drop empty and duplicate names, keeping first-seen order"""
    if not names:
        return ()
    seen = []
    for name in names:
        if name and name not in seen:
            seen.append(name)
    return tuple(seen)


def resolve_config(root: Union[str, Path],
                   days: float = 8.0,
                   access: bool = True,
                   create: bool = True,
                   modify: bool = True,
                   ignore_hidden: bool = True,
                   skip: Optional[Iterable[str]] = None,
                   threads: Optional[int] = None,
                   create_supported: Optional[bool] = None) -> ScanConfig:
    """
    Validate caller input and build the ScanConfig used by the scanners.

    Raises:
        ConfigError: if the root does not exist, the window does not
            exceed MIN_DAYS, or the thread count is not positive.
    """
    root_path = Path(root)
    if not root_path.exists():
        raise ConfigError(f"Path '{root}' does not exist", path=str(root))

    try:
        days = float(days)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid number of days: {days!r}")
    if not math.isfinite(days) or days <= MIN_DAYS:
        raise ConfigError(f"Number of days must be greater than {MIN_DAYS}, got {days}")

    if threads is not None and threads < 1:
        raise ConfigError(f"Thread count must be at least 1, got {threads}")

    if create_supported is None:
        create_supported = creation_time_supported()

    return ScanConfig(
        root=root_path,
        days=days,
        access=access,
        create=create,
        modify=modify,
        ignore_hidden=ignore_hidden,
        skip=normalize_skip(skip),
        threads=threads,
        create_supported=create_supported,
    )
