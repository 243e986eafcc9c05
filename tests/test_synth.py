"""Tests for cookie header synthesis."""

import asyncio
import os
import threading
import time
from unittest.mock import patch

import pytest

from cookiebridge.cookies import Cookie
from cookiebridge.sources import DelegatedSource, SuffixMatchSource
from cookiebridge.stores import JarStore, NetscapeFileStore
from cookiebridge.synth import CookieHeaderSynthesizer, get_cookie_header

from conftest import (
    FailingSource,
    SlowBlockingSource,
    StalledSource,
    StaticSource,
    write_netscape,
)


class TestCookieHeaderSynthesizer:
    """Tests for CookieHeaderSynthesizer."""

    def test_empty_url_queries_nothing(self):
        """An empty URL returns "" without touching any source."""
        source = StaticSource([Cookie("a", "1")])
        synth = CookieHeaderSynthesizer([source])
        assert synth.get_cookie_header("") == ""
        assert asyncio.run(synth.aget_cookie_header("")) == ""
        assert source.calls == []

    def test_dedup_first_source_wins(self):
        synth = CookieHeaderSynthesizer([
            StaticSource([Cookie("sid", "1")]),
            StaticSource([Cookie("sid", "2")]),
        ])
        assert synth.get_cookie_header("example.com") == "sid=1"

    def test_ordering(self):
        synth = CookieHeaderSynthesizer([
            StaticSource([Cookie("a", "1"), Cookie("b", "2")]),
            StaticSource([Cookie("c", "3")]),
        ])
        assert synth.get_cookie_header("example.com") == "a=1; b=2; c=3"

    def test_sources_receive_normalized_target(self):
        source = StaticSource([])
        CookieHeaderSynthesizer([source]).get_cookie_header("Example.com/path")
        assert source.calls[0].host == "example.com"
        assert source.calls[0].url == "https://Example.com/path"

    def test_failing_source_is_isolated(self):
        failing = FailingSource()
        synth = CookieHeaderSynthesizer([failing, StaticSource([Cookie("a", "1")])])
        assert synth.get_cookie_header("example.com") == "a=1"
        assert failing.calls == 1

    def test_stalled_source_times_out(self):
        synth = CookieHeaderSynthesizer(
            [StalledSource("stalled"), StaticSource([Cookie("a", "1")])],
            timeout=0.05,
        )
        assert synth.get_cookie_header("example.com") == "a=1"

    def test_stalled_blocking_source_times_out(self):
        synth = CookieHeaderSynthesizer(
            [SlowBlockingSource("slow"), StaticSource([Cookie("a", "1")])],
            timeout=0.05,
        )
        assert synth.get_cookie_header("example.com") == "a=1"

    def test_no_sources(self):
        assert CookieHeaderSynthesizer([]).get_cookie_header("example.com") == ""

    def test_all_sources_fail(self):
        synth = CookieHeaderSynthesizer([FailingSource(), FailingSource()])
        assert synth.get_cookie_header("example.com") == ""

    def test_internal_error_returns_empty(self):
        synth = CookieHeaderSynthesizer([StaticSource([Cookie("a", "1")])])
        with patch("cookiebridge.synth.merge", side_effect=RuntimeError("boom")):
            assert synth.get_cookie_header("example.com") == ""

    def test_sources_queried_concurrently(self):
        """Both sources are started before either completes."""
        started = []

        class SleepySource(StaticSource):
            async def query(self, target):
                started.append(self.name)
                await asyncio.sleep(0.05)
                assert len(started) == 2
                return await super().query(target)

        synth = CookieHeaderSynthesizer([
            SleepySource([Cookie("a", "1")], name="one"),
            SleepySource([Cookie("b", "2")], name="two"),
        ])
        assert synth.get_cookie_header("example.com") == "a=1; b=2"

    def test_idempotent(self, jar_file, bulk_file):
        synth = CookieHeaderSynthesizer([
            DelegatedSource(JarStore(path=jar_file)),
            SuffixMatchSource(NetscapeFileStore(bulk_file)),
        ])
        first = synth.get_cookie_header("https://www.example.com/")
        assert first == "sid=jar; lang=en; theme=dark"
        assert synth.get_cookie_header("https://www.example.com/") == first

    def test_missing_store_file_is_isolated(self, tmp_path, bulk_file):
        synth = CookieHeaderSynthesizer([
            DelegatedSource(JarStore(path=tmp_path / "missing.txt")),
            SuffixMatchSource(NetscapeFileStore(bulk_file)),
        ])
        assert synth.get_cookie_header("www.example.com") == "sid=bulk; theme=dark"

    def test_reflects_store_changes(self, tmp_path):
        path = write_netscape(tmp_path / "c.txt", [(".example.com", "a", "1")])
        synth = CookieHeaderSynthesizer([SuffixMatchSource(NetscapeFileStore(path))])
        assert synth.get_cookie_header("example.com") == "a=1"
        write_netscape(path, [(".example.com", "a", "2")])
        assert synth.get_cookie_header("example.com") == "a=2"


class TestGetCookieHeader:
    """Tests for the module-level get_cookie_header()."""

    def test_with_explicit_sources(self):
        assert get_cookie_header("example.com", [StaticSource([Cookie("a", "1")])]) == "a=1"

    def test_empty_url(self):
        source = StaticSource([Cookie("a", "1")])
        assert get_cookie_header("", [source]) == ""
        assert source.calls == []

    def test_uses_configured_sources(self, tmp_path, bulk_file):
        config = {
            "timeout": 1.0,
            "sources": [{"type": "netscape", "path": str(bulk_file)}],
        }
        with patch("cookiebridge.synth.load_config", return_value=(config, False)):
            assert get_cookie_header("www.example.com") == "sid=bulk; theme=dark"

    def test_config_error_returns_empty(self):
        with patch("cookiebridge.synth.load_config", side_effect=ValueError("bad")):
            assert get_cookie_header("example.com") == ""


def open_fifo_writer(path, wait=2.0):
    """Open and close the write end so a reader blocked on path returns."""
    deadline = time.monotonic() + wait
    while True:
        try:
            fd = os.open(path, os.O_WRONLY | os.O_NONBLOCK)
        except OSError:
            if time.monotonic() > deadline:
                raise
            time.sleep(0.01)
            continue
        os.close(fd)
        return


class TestStalledStores:
    """A stalled store never holds the caller past the timeout."""

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="needs named pipes")
    def test_blocked_file_read_returns_within_timeout(self, tmp_path):
        fifo = tmp_path / "cookies.txt"
        os.mkfifo(fifo)
        synth = CookieHeaderSynthesizer(
            [StaticSource([Cookie("a", "1")]), SuffixMatchSource(NetscapeFileStore(fifo))],
            timeout=0.2,
        )
        results = []
        worker = threading.Thread(target=lambda: results.append(synth.get_cookie_header("example.com")))
        try:
            started = time.monotonic()
            worker.start()
            worker.join(3.0)
            assert not worker.is_alive()
            assert time.monotonic() - started < 3.0
            assert results == ["a=1"]
        finally:
            # Unblock the reader still waiting on the pipe
            open_fifo_writer(fifo)
            worker.join(3.0)


class TestRunningLoop:
    """Calling the blocking entry point from async code."""

    def test_returns_empty_without_starting_a_loop(self):
        source = StaticSource([Cookie("a", "1")])
        synth = CookieHeaderSynthesizer([source])

        async def caller():
            with patch("cookiebridge.synth.asyncio.run") as run:
                return synth.get_cookie_header("example.com"), run.call_count

        result, run_calls = asyncio.run(caller())
        assert result == ""
        assert run_calls == 0
        assert source.calls == []

    def test_async_entry_works_inside_loop(self):
        synth = CookieHeaderSynthesizer([StaticSource([Cookie("a", "1")])])
        assert asyncio.run(synth.aget_cookie_header("example.com")) == "a=1"


class TestLibraryConfig:
    """The library entry point reads, but never writes, the config file."""

    def test_does_not_create_config_file(self, tmp_path):
        path = tmp_path / ".cookiebridge.yml"
        with patch("cookiebridge.config.get_config_path", return_value=path):
            get_cookie_header("example.com")
        assert not path.exists()
