import io
import threading

import pytest
from colorama import Fore, Style

from amble.errors import ErrorKind
from amble.models import MatchResult, ScanError
from amble.reporter import Channel, ChannelClosed, CollectingReporter, Reporter, StreamSink


def test_channel_is_fifo_until_closed():
    channel = Channel()
    for i in range(5):
        channel.send(i)
    channel.close()
    assert list(channel) == [0, 1, 2, 3, 4]


def test_send_after_close_raises():
    channel = Channel()
    channel.close()
    channel.close()  # idempotent
    assert channel.closed
    with pytest.raises(ChannelClosed):
        channel.send("late")


def test_many_senders_one_receiver():
    channel = Channel(capacity=4)
    received = []
    sink = StreamSink(channel, received.append)
    sink.start()

    def produce(tag):
        for i in range(100):
            channel.send((tag, i))

    producers = [threading.Thread(target=produce, args=(t,)) for t in range(5)]
    for p in producers:
        p.start()
    for p in producers:
        p.join()
    channel.close()
    sink.join()

    assert len(received) == 500
    assert sink.count == 500
    # per-sender order is preserved
    for tag in range(5):
        assert [i for t, i in received if t == tag] == list(range(100))


def test_failed_sink_keeps_draining():
    channel = Channel(capacity=1)

    def write(item):
        raise OSError("broken pipe")

    sink = StreamSink(channel, write)
    sink.start()
    for i in range(10):
        channel.send(i)
    channel.close()
    sink.join(timeout=5)
    assert not sink.is_alive()
    assert isinstance(sink.error, OSError)
    assert sink.count == 0


def test_reporter_lines():
    out, err = io.StringIO(), io.StringIO()
    reporter = Reporter(out=out, err=err)
    reporter.match(MatchResult("/tmp/x", accessed=True, modified=True))
    reporter.error(ScanError(ErrorKind.IO, "[Errno 13] Permission denied: '/tmp/y'", "/tmp/y"))
    reporter.close()
    assert out.getvalue() == "/tmp/x (am)\n"
    assert err.getvalue() == "IoError: [Errno 13] Permission denied: '/tmp/y'\n"


def test_reporter_colors():
    reporter = Reporter(out=io.StringIO(), err=io.StringIO(), color=True)
    line = reporter.format_error(ScanError(ErrorKind.WALK, "loop"))
    assert line == f"{Fore.RED}WalkDirError: loop{Style.RESET_ALL}"
    assert Fore.CYAN in reporter.format_match(MatchResult("/f", modified=True))


def test_reporter_progress_writes_through_tqdm():
    out, err = io.StringIO(), io.StringIO()
    reporter = Reporter(out=out, err=err, progress=True)
    reporter.file_checked()
    reporter.file_checked(2)
    reporter.match(MatchResult("/f", created=True))
    assert reporter.progress.n == 3
    reporter.close()
    assert "/f (c)\n" in out.getvalue()


def test_collecting_reporter():
    reporter = CollectingReporter()
    result = MatchResult("/f", modified=True)
    reporter.match(result)
    reporter.close()
    assert reporter.matches == [result]
    assert reporter.errors == []


def test_error_stream_color_is_separate():
    reporter = Reporter(out=io.StringIO(), err=io.StringIO(), color=True, err_color=False)
    assert reporter.format_error(ScanError(ErrorKind.WALK, "loop")) == "WalkDirError: loop"
    assert Fore.CYAN in reporter.format_match(MatchResult("/f", modified=True))

    reporter = Reporter(out=io.StringIO(), err=io.StringIO(), color=False, err_color=True)
    assert reporter.format_match(MatchResult("/f", modified=True)) == "/f (m)"
    assert Fore.RED in reporter.format_error(ScanError(ErrorKind.WALK, "loop"))
