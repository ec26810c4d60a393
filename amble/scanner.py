"""
Core scanning functionality for amble

SequentialScanner walks the tree on the calling thread and reports matches
in the order the filesystem returns entries. ParallelScanner spreads
directories over a pool of worker threads and fans matches and errors into
two channels, each drained by its own sink thread.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Callable, Iterator, List, Optional, Tuple

from .config import ScanConfig
from .errors import AmbleError, ErrorKind, MetadataError, TraversalError
from .filters import should_prune
from .models import Entry, MatchResult, ScanError, ScanStats
from .predicates import evaluate
from .reporter import Channel, CollectingReporter, Reporter, StreamSink
from .utils import default_thread_count, format_elapsed
from .walker import Ancestors, descend, entry_from_dir_entry, list_dir, root_entry, walk

logger = logging.getLogger(__name__)

NO_CRITERIA_MESSAGE = "No search criteria specified. Must use access, create, or modify"


class SequentialScanner:
    """Single-threaded scanner with reproducible output order"""

    def __init__(self, config: ScanConfig):
        self.config = config
        self.stats = ScanStats()

    def _prune(self, entry: Entry) -> bool:
        if should_prune(entry, self.config):
            self.stats.add(entries_visited=1, pruned=1)
            return True
        return False

    def _skip_traversal_error(self, error: TraversalError):
        logger.debug(f"Skipping {error.path}: {error}")

    def iter_matches(self, on_error: Optional[Callable[[ScanError], None]] = None,
                     on_checked: Optional[Callable[[], None]] = None) -> Iterator[MatchResult]:
        """
        Yield matches in visitation order.

        Traversal errors (unreadable directories, link loops) are skipped.
        Metadata errors for a file are passed to `on_error`, or logged when no
        handler is given, and the walk continues.
        """
        for entry in walk(self.config.root, prune=self._prune, on_error=self._skip_traversal_error):
            self.stats.add(entries_visited=1)
            if not entry.is_file:
                continue
            try:
                result = evaluate(entry, self.config)
            except MetadataError as e:
                self.stats.add(errors=1)
                if on_error is not None:
                    on_error(ScanError.from_exception(e))
                else:
                    logger.warning(str(e))
                continue
            self.stats.add(files_evaluated=1)
            if on_checked is not None:
                on_checked()
            if result is not None:
                self.stats.add(matches=1)
                yield result

    def scan(self, reporter: Reporter) -> ScanStats:
        """Write every match and error to the reporter as it is found"""
        self.stats.start()
        try:
            for result in self.iter_matches(on_error=reporter.error, on_checked=reporter.file_checked):
                reporter.match(result)
        finally:
            self.stats.finish()
        return self.stats

    def collect(self) -> Tuple[List[MatchResult], List[ScanError]]:
        reporter = CollectingReporter()
        self.scan(reporter)
        return reporter.matches, reporter.errors


class ScanState(Enum):
    IDLE = 'idle'
    SCANNING = 'scanning'
    DRAINING = 'draining'
    DONE = 'done'


class ParallelScanner:
    """
    Multi-threaded scanner; output order is not defined.

    Each directory is submitted to a thread pool as its own task, so the
    subdirectories of one directory are picked up by whichever workers are
    free. Workers send results to a match channel and an error channel; both
    are closed only after the pool has shut down. A scanner instance runs one
    scan.
    """

    def __init__(self, config: ScanConfig, channel_capacity: int = 0):
        self.config = config
        self.channel_capacity = channel_capacity
        self.num_threads = config.threads or default_thread_count()
        self.stats = ScanStats()
        self.state = ScanState.IDLE
        self.lock = threading.Lock()
        self._cancel = threading.Event()
        self._executor: Optional[ThreadPoolExecutor] = None
        # directories submitted but not yet visited
        self._pending = 0
        self._idle = threading.Event()
        self._idle.set()

    def scan(self, reporter: Reporter) -> ScanStats:
        with self.lock:
            if self.state is not ScanState.IDLE:
                raise RuntimeError(f"Scanner already used (state: {self.state.value})")
            self.state = ScanState.SCANNING

        matches = Channel(self.channel_capacity)
        errors = Channel(self.channel_capacity)
        sinks = [
            StreamSink(matches, reporter.match, name='amble-matches'),
            StreamSink(errors, reporter.error, name='amble-errors'),
        ]
        for sink in sinks:
            sink.start()

        self.stats.start()
        try:
            self._run(matches.send, errors.send, reporter.file_checked)
        finally:
            matches.close()
            errors.close()
            for sink in sinks:
                sink.join()
            self.stats.finish()
            self.state = ScanState.DONE

        for sink in sinks:
            if sink.error is not None:
                raise sink.error
        return self.stats

    def collect(self) -> Tuple[List[MatchResult], List[ScanError]]:
        reporter = CollectingReporter()
        self.scan(reporter)
        return reporter.matches, reporter.errors

    def _run(self, send_match: Callable[[MatchResult], None],
             send_error: Callable[[ScanError], None],
             checked: Callable[[], None]):
        """Walk the whole tree; returns once every worker has exited"""
        with ThreadPoolExecutor(max_workers=self.num_threads,
                                thread_name_prefix='amble-worker') as executor:
            self._executor = executor
            try:
                self._seed(send_match, send_error, checked)
                self._idle.wait()
            except BaseException:
                # let in-flight directories finish without starting new ones
                self._cancel.set()
                self._idle.wait()
                raise
            finally:
                self.state = ScanState.DRAINING

    def _seed(self, send_match, send_error, checked):
        """Handle the root on the calling thread and submit it if it is a directory"""
        try:
            root = root_entry(self.config.root)
            self.stats.add(entries_visited=1)
            if root.is_dir:
                self._submit(root, descend(root, ()), send_match, send_error, checked)
            else:
                self._check_file(root, send_match, checked)
        except AmbleError as e:
            self._send_error(e, send_error)

    def _submit(self, directory: Entry, ancestors: Ancestors, send_match, send_error, checked):
        with self.lock:
            self._pending += 1
            self._idle.clear()
        self._executor.submit(self._visit, directory, ancestors, send_match, send_error, checked)

    def _visit(self, directory: Entry, ancestors: Ancestors, send_match, send_error, checked):
        try:
            if not self._cancel.is_set():
                self._visit_dir(directory, ancestors, send_match, send_error, checked)
        except Exception as e:
            logger.exception(f"Worker failed on {directory.path}")
            self._send_error(AmbleError(str(e), kind=ErrorKind.WALK), send_error)
        finally:
            with self.lock:
                self._pending -= 1
                if self._pending == 0:
                    self._idle.set()

    def _visit_dir(self, directory: Entry, ancestors: Ancestors,
                   send_match, send_error, checked):
        try:
            listing = list_dir(directory.path)
        except TraversalError as e:
            self._send_error(e, send_error)
            return

        depth = directory.depth + 1
        for dir_entry in listing:
            try:
                entry = entry_from_dir_entry(dir_entry, depth)
                self.stats.add(entries_visited=1)
                if should_prune(entry, self.config):
                    self.stats.add(pruned=1)
                    continue
                if entry.is_dir:
                    self._submit(entry, descend(entry, ancestors), send_match, send_error, checked)
                elif entry.is_file:
                    self._check_file(entry, send_match, checked)
            except AmbleError as e:
                self._send_error(e, send_error)
            except Exception as e:
                logger.exception(f"Unexpected failure on {dir_entry.path}")
                self._send_error(AmbleError(str(e), path=dir_entry.path), send_error)

    def _check_file(self, entry: Entry, send_match, checked):
        result = evaluate(entry, self.config)
        self.stats.add(files_evaluated=1)
        checked()
        if result is not None:
            self.stats.add(matches=1)
            send_match(result)

    def _send_error(self, error: AmbleError, send_error):
        self.stats.add(errors=1)
        send_error(ScanError.from_exception(error))


def find_matching(config: ScanConfig,
                  parallel: bool = True,
                  reporter: Optional[Reporter] = None,
                  channel_capacity: int = 0) -> ScanStats:
    """
    Run one scan and write its results through `reporter`.

    Matches go to the reporter's output stream as `<path> (<flags>)`, errors
    to its error stream. Returns the scan counters.
    """
    if reporter is None:
        reporter = Reporter()
    if not config.has_criteria:
        logger.warning(NO_CRITERIA_MESSAGE)
        reporter.close()
        return ScanStats()

    if parallel:
        scanner = ParallelScanner(config, channel_capacity=channel_capacity)
        logger.info(f"Scanning {config.root} with {scanner.num_threads} threads")
    else:
        scanner = SequentialScanner(config)
        logger.info(f"Scanning {config.root}")

    try:
        stats = scanner.scan(reporter)
    finally:
        reporter.close()

    logger.info(
        f"Scan complete: {stats.matches} matches, {stats.errors} errors, "
        f"{stats.files_evaluated} files checked in {format_elapsed(stats.elapsed)}"
    )
    return stats
