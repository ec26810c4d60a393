"""
Output for amble: channels, sink threads and line formatting
"""
import logging
import queue
import sys
import threading
from typing import Any, Callable, Iterator, List, Optional, TextIO

from colorama import Fore, Style
from tqdm import tqdm

from .models import MatchResult, ScanError

logger = logging.getLogger(__name__)

_CLOSED = object()


class ChannelClosed(Exception):
    """Raised when sending on a channel that has been closed"""


class Channel:
    """
    FIFO channel with many senders and a single receiver.

    `capacity` of 0 means unbounded; otherwise senders block while the
    channel is full. Iterating the channel yields items until it is closed.
    """

    def __init__(self, capacity: int = 0):
        self._queue = queue.Queue(maxsize=capacity)
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, item: Any):
        with self._lock:
            if self._closed:
                raise ChannelClosed("send on closed channel")
        self._queue.put(item)

    def close(self):
        """Mark end of stream. Callers must have stopped sending."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._queue.put(_CLOSED)

    def __iter__(self) -> Iterator[Any]:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                return
            yield item


class StreamSink(threading.Thread):
    """Consumer thread that drains one channel into a writer until it is closed"""

    def __init__(self, channel: Channel, write: Callable[[Any], None], name: str = 'sink'):
        super().__init__(name=name, daemon=True)
        self.channel = channel
        self.write = write
        self.count = 0
        self.error: Optional[BaseException] = None

    def run(self):
        for item in self.channel:
            if self.error is not None:
                # keep draining so senders never block on a dead sink
                continue
            try:
                self.write(item)
                self.count += 1
            except Exception as e:
                logger.error(f"Output sink {self.name} failed: {e}")
                self.error = e


class Reporter:
    """Formats matches and errors as lines on the output and error streams"""

    def __init__(self, out: Optional[TextIO] = None, err: Optional[TextIO] = None,
                 color: bool = False, progress: bool = False,
                 err_color: Optional[bool] = None):
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr
        self.color = color
        self.err_color = color if err_color is None else err_color
        self.lock = threading.Lock()
        self.progress = tqdm(desc="Scanning files", unit=" files", file=self.err,
                             leave=False, disable=not progress)

    def format_match(self, result: MatchResult) -> str:
        if self.color:
            return f"{result.path} ({Fore.CYAN}{result.annotation}{Style.RESET_ALL})"
        return result.render()

    def format_error(self, error: ScanError) -> str:
        if self.err_color:
            return f"{Fore.RED}{error.render()}{Style.RESET_ALL}"
        return error.render()

    def match(self, result: MatchResult):
        self._write(self.format_match(result), self.out)

    def error(self, error: ScanError):
        self._write(self.format_error(error), self.err)

    def file_checked(self, count: int = 1):
        if self.progress.disable:
            return
        with self.lock:
            self.progress.update(count)

    def _write(self, line: str, stream: TextIO):
        if self.progress.disable:
            print(line, file=stream)
        else:
            tqdm.write(line, file=stream)

    def close(self):
        self.progress.close()
        self.out.flush()
        self.err.flush()


class CollectingReporter(Reporter):
    """Reporter that keeps results in memory instead of printing them"""

    def __init__(self):
        super().__init__(progress=False)
        self.matches: List[MatchResult] = []
        self.errors: List[ScanError] = []

    def match(self, result: MatchResult):
        self.matches.append(result)

    def error(self, error: ScanError):
        self.errors.append(error)

    def close(self):
        self.progress.close()
