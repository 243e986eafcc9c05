"""Pytest configuration and fixtures."""

import asyncio
import time

import pytest

from cookiebridge.cookies import Cookie
from cookiebridge.sources import BlockingCookieSource, CookieSource

# Far-future expiry (2100-01-01) so http.cookiejar keeps the cookies
FAR_FUTURE = "4102444800"


class StaticSource(CookieSource):
    """Source returning fixed cookies and counting queries."""

    def __init__(self, cookies, name="static"):
        super().__init__(name)
        self.cookies = list(cookies)
        self.calls = []

    async def query(self, target):
        self.calls.append(target)
        return list(self.cookies)


class FailingSource(CookieSource):
    """Source whose store is unavailable."""

    def __init__(self, name="failing"):
        super().__init__(name)
        self.calls = 0

    async def query(self, target):
        self.calls += 1
        raise OSError("store unavailable")


class StalledSource(CookieSource):
    """Source that never answers in time."""

    async def query(self, target):
        await asyncio.sleep(10)
        return [Cookie("late", "1")]


class SlowBlockingSource(BlockingCookieSource):
    """Blocking source stuck in a synchronous call."""

    def fetch(self, target):
        time.sleep(0.5)
        return [Cookie("late", "1")]


def write_netscape(path, rows, header=True):
    """Write a cookies.txt file from (domain, name, value) rows."""
    lines = ["# Netscape HTTP Cookie File"] if header else []
    for domain, name, value in rows:
        flag = "TRUE" if domain.startswith(".") else "FALSE"
        lines.append("\t".join([domain, flag, "/", "FALSE", FAR_FUTURE, name, value]))
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def jar_file(tmp_path):
    """Mozilla cookies.txt for the delegated store."""
    return write_netscape(
        tmp_path / "jar.txt",
        [
            (".example.com", "sid", "jar"),
            (".example.com", "lang", "en"),
            ("other.org", "track", "x"),
        ],
    )


@pytest.fixture
def bulk_file(tmp_path):
    """Netscape cookies.txt for the bulk store."""
    return write_netscape(
        tmp_path / "cookies.txt",
        [
            (".example.com", "sid", "bulk"),
            ("www.example.com", "theme", "dark"),
            ("notexample.com", "evil", "1"),
            ("api.example.com", "token", "t"),
        ],
    )
