"""
Data models for amble
"""
import os
import stat
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from .errors import AmbleError, ErrorKind


class EntryKind(Enum):
    FILE = 'file'
    DIR = 'dir'
    OTHER = 'other'


@dataclass
class Entry:
    """One filesystem node visited during a walk"""
    path: str
    kind: EntryKind
    depth: int = 0
    _stat: Optional[os.stat_result] = field(default=None, repr=False, compare=False)

    @property
    def name(self) -> str:
        return os.path.basename(os.path.normpath(self.path))

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIR

    def metadata(self) -> os.stat_result:
        """Stat the entry, following links; fetched once and cached"""
        if self._stat is None:
            self._stat = os.stat(self.path)
        return self._stat

    @classmethod
    def from_stat(cls, path: str, stat_result: os.stat_result, depth: int = 0) -> 'Entry':
        return cls(path=path, kind=kind_of(stat_result), depth=depth, _stat=stat_result)


def kind_of(stat_result: os.stat_result) -> EntryKind:
    if stat.S_ISREG(stat_result.st_mode):
        return EntryKind.FILE
    if stat.S_ISDIR(stat_result.st_mode):
        return EntryKind.DIR
    return EntryKind.OTHER


@dataclass(frozen=True)
class MatchResult:
    """A file with at least one recent timestamp"""
    path: str
    accessed: bool = False
    created: bool = False
    modified: bool = False

    def __post_init__(self):
        if not (self.accessed or self.created or self.modified):
            raise ValueError(f"MatchResult for {self.path} has no matching predicate")

    @property
    def annotation(self) -> str:
        """Flags in fixed order: a(ccess), c(reate), m(odify)"""
        flags = ''
        if self.accessed:
            flags += 'a'
        if self.created:
            flags += 'c'
        if self.modified:
            flags += 'm'
        return flags

    def render(self) -> str:
        return f"{self.path} ({self.annotation})"

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class ScanError:
    """A failure for one entry, reported without stopping the walk"""
    kind: ErrorKind
    message: str
    path: Optional[str] = None

    @classmethod
    def from_exception(cls, error: AmbleError) -> 'ScanError':
        return cls(kind=error.kind, message=error.message, path=error.path)

    def render(self) -> str:
        return f"{self.kind}: {self.message}"

    def __str__(self) -> str:
        return self.render()


class ScanStats:
    """Counters for one scan, safe to update from worker threads"""

    def __init__(self):
        self.lock = threading.Lock()
        self.entries_visited = 0
        self.files_evaluated = 0
        self.matches = 0
        self.errors = 0
        self.pruned = 0
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None

    def start(self):
        self.start_time = time.time()

    def finish(self):
        self.end_time = time.time()

    def add(self, **counts: int):
        with self.lock:
            for name, value in counts.items():
                setattr(self, name, getattr(self, name) + value)

    @property
    def elapsed(self) -> float:
        if self.start_time is None:
            return 0.0
        end = self.end_time if self.end_time is not None else time.time()
        return end - self.start_time

    def as_dict(self) -> Dict[str, float]:
        return {
            'entries_visited': self.entries_visited,
            'files_evaluated': self.files_evaluated,
            'matches': self.matches,
            'errors': self.errors,
            'pruned': self.pruned,
            'elapsed': self.elapsed,
        }
