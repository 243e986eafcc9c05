"""Cookie stores queried by the source adapters.

Two kinds of store exist:

- Delegated stores decide for themselves which cookies belong to a URL and
  answer with a ready ``Cookie`` header (``JarStore``).
- Bulk stores can only list every cookie they hold, across all domains
  (``NetscapeFileStore``, ``MemoryBulkStore``).
"""

import asyncio
import urllib.request
from concurrent.futures import ThreadPoolExecutor
from http.cookiejar import CookieJar, MozillaCookieJar
from pathlib import Path

from .cookies import Cookie, load_cookies_from_file

# Blocking store reads run here so a stalled store never holds up the loop,
# nor the default executor that asyncio.run() joins on shutdown.
_EXECUTOR = ThreadPoolExecutor(thread_name_prefix="cookiebridge-store")


async def run_blocking(func, *args):
    """Run a blocking store call on the store thread pool."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(_EXECUTOR, func, *args)


class JarStore:
    """Delegated store backed by an ``http.cookiejar`` jar.

    Domain, path, secure and expiry rules are applied by the jar's policy.
    With a path, the Mozilla cookies.txt file is re-read on every query so
    changes made by other processes are picked up. While accepting cookies
    is switched off the store answers nothing.
    """

    def __init__(self, jar: CookieJar | None = None, path: Path | None = None):
        self.jar = jar if jar is not None else CookieJar()
        self.path = Path(path).expanduser() if path else None
        self._accept = False

    @property
    def accepts_cookies(self) -> bool:
        return self._accept

    def set_accept_cookie(self, accept: bool) -> None:
        self._accept = accept

    def load(self) -> CookieJar:
        """Return the jar to query, loading it from path when one is set.

        Raises:
            OSError: If the file cannot be read
            http.cookiejar.LoadError: If the file is not in cookies.txt format
        """
        if self.path is None:
            return self.jar
        jar = MozillaCookieJar()
        jar.load(str(self.path), ignore_discard=True)
        return jar

    def get_cookie(self, url: str) -> str | None:
        """Return the Cookie header the jar would send for url, or None."""
        if not self._accept:
            return None
        request = urllib.request.Request(url)
        self.load().add_cookie_header(request)
        return request.get_header("Cookie")

    def __repr__(self) -> str:
        return f"<JarStore {self.path or 'memory'}>"


class NetscapeFileStore:
    """Bulk store reading a Netscape cookies.txt file on every listing."""

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()

    async def all_cookies(self) -> list[Cookie]:
        return await run_blocking(load_cookies_from_file, self.path)

    def __repr__(self) -> str:
        return f"<NetscapeFileStore {self.path}>"


class MemoryBulkStore:
    """Bulk store over an in-memory list of cookies."""

    def __init__(self, cookies: list[Cookie] | None = None):
        self.cookies = list(cookies or [])

    async def all_cookies(self) -> list[Cookie]:
        return list(self.cookies)
