"""
Directory traversal for amble

Depth-first walk that follows symbolic links, detects link loops and lets
the caller prune entries before they are yielded or descended into.
"""
import os
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Tuple, Union

from .errors import TraversalError
from .models import Entry, EntryKind

DirId = Tuple[int, int]
Ancestors = Tuple[DirId, ...]

PruneFn = Callable[[Entry], bool]
ErrorFn = Callable[[TraversalError], None]


def root_entry(root: Union[str, Path], follow_links: bool = True) -> Entry:
    """Build the depth-0 entry for the walk root"""
    path = os.fspath(root)
    try:
        stat_result = os.stat(path) if follow_links else os.lstat(path)
    except OSError as e:
        raise TraversalError.from_os_error(e, path=path)
    return Entry.from_stat(path, stat_result, depth=0)


def entry_from_dir_entry(dir_entry: os.DirEntry, depth: int, follow_links: bool = True) -> Entry:
    """Classify a scandir result, resolving symbolic links when following them"""
    try:
        if follow_links and dir_entry.is_symlink():
            return Entry.from_stat(dir_entry.path, os.stat(dir_entry.path), depth=depth)
        if dir_entry.is_dir(follow_symlinks=False):
            kind = EntryKind.DIR
        elif dir_entry.is_file(follow_symlinks=False):
            kind = EntryKind.FILE
        else:
            kind = EntryKind.OTHER
    except OSError as e:
        raise TraversalError.from_os_error(e, path=dir_entry.path)
    return Entry(path=dir_entry.path, kind=kind, depth=depth)


def list_dir(path: str) -> List[os.DirEntry]:
    """Read a directory's children in the order the filesystem returns them"""
    try:
        with os.scandir(path) as it:
            return list(it)
    except OSError as e:
        raise TraversalError.from_os_error(e, path=path)


def dir_id(entry: Entry) -> DirId:
    try:
        stat_result = entry.metadata()
    except OSError as e:
        raise TraversalError.from_os_error(e, path=entry.path)
    return (stat_result.st_dev, stat_result.st_ino)


def descend(entry: Entry, ancestors: Ancestors, follow_links: bool = True) -> Ancestors:
    """
    Return the ancestor chain for the children of `entry`.

    Raises TraversalError if `entry` is one of its own ancestors, which can
    only happen when following links.
    """
    if not follow_links:
        return ancestors
    ident = dir_id(entry)
    if ident in ancestors:
        raise TraversalError(f"File system loop found: {entry.path} points to an ancestor",
                             path=entry.path)
    return ancestors + (ident,)


def walk(root: Union[str, Path],
         prune: Optional[PruneFn] = None,
         on_error: Optional[ErrorFn] = None,
         follow_links: bool = True) -> Iterator[Entry]:
    """
    Walk the tree under `root` depth first, yielding every entry.

    The root itself is yielded first and is never pruned. For every other
    entry `prune` is consulted before it is yielded; a pruned directory is
    not descended into. Traversal errors are passed to `on_error` and the
    walk carries on with the next sibling.
    """
    def report(error: TraversalError):
        if on_error is not None:
            on_error(error)

    try:
        top = root_entry(root, follow_links)
    except TraversalError as e:
        report(e)
        return
    yield top
    if not top.is_dir:
        return

    try:
        ancestors = descend(top, (), follow_links)
        stack = [(ancestors, iter(list_dir(top.path)))]
    except TraversalError as e:
        report(e)
        return

    while stack:
        ancestors, children = stack[-1]
        dir_entry = next(children, None)
        if dir_entry is None:
            stack.pop()
            continue

        try:
            entry = entry_from_dir_entry(dir_entry, len(stack), follow_links)
        except TraversalError as e:
            report(e)
            continue
        if prune is not None and prune(entry):
            continue
        yield entry

        if entry.is_dir:
            try:
                child_ancestors = descend(entry, ancestors, follow_links)
                listing = list_dir(entry.path)
            except TraversalError as e:
                report(e)
                continue
            stack.append((child_ancestors, iter(listing)))
