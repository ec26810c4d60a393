"""
Skip list and hidden file rules for amble
"""
from typing import Sequence

from .config import HIDDEN_PREFIX, ScanConfig
from .models import Entry


def matches_list(name: str, names: Sequence[str]) -> bool:
    """Exact, case-sensitive match of a base name against the skip list"""
    if not names:
        return False
    return name in names


def is_hidden(name: str) -> bool:
    return name.startswith(HIDDEN_PREFIX)


def should_prune(entry: Entry, config: ScanConfig) -> bool:
    """
    Decide whether an entry is dropped before it is descended into or evaluated.

    Directories are pruned when their base name is on the skip list, so none of
    their children are visited. Other entries are dropped when their name is
    on the skip list, or when hidden files are ignored and the name is hidden.
    """
    name = entry.name
    if matches_list(name, config.skip):
        return True
    if entry.is_dir:
        return False
    return config.ignore_hidden and is_hidden(name)
