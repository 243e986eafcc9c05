"""Cookie source adapters.

Every adapter exposes the same awaitable ``query(target)`` so the
synthesizer can fan out over them without knowing what sits behind each
one. Adapters hold no per-call state; stores are re-queried every time.
"""

from abc import ABC, abstractmethod
from typing import Protocol

from .cookies import Cookie, filter_cookies_for_host, parse_cookie_header
from .stores import run_blocking
from .urls import NormalizedURL


class DelegatingStore(Protocol):
    """A store that decides itself which cookies apply to a URL."""

    def set_accept_cookie(self, accept: bool) -> None: ...

    def get_cookie(self, url: str) -> str | None: ...


class BulkStore(Protocol):
    """A store that can only list all of its cookies."""

    async def all_cookies(self) -> list[Cookie]: ...


class CookieSource(ABC):
    """Base class for cookie source adapters."""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    async def query(self, target: NormalizedURL) -> list[Cookie]:
        """Return the cookies this source holds for target.host."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class BlockingCookieSource(CookieSource):
    """Adapter over a synchronous store; ``fetch`` runs on a worker thread."""

    @abstractmethod
    def fetch(self, target: NormalizedURL) -> list[Cookie]:
        """Blocking lookup, called off the event loop."""

    async def query(self, target: NormalizedURL) -> list[Cookie]:
        return await run_blocking(self.fetch, target)


class DelegatedSource(BlockingCookieSource):
    """Adapter that leaves domain matching entirely to its store.

    The store must be accepting cookies for reads to be correct, so the
    setting is switched on before every query.
    """

    def __init__(self, store: DelegatingStore, name: str = "delegated"):
        super().__init__(name)
        self.store = store

    def fetch(self, target: NormalizedURL) -> list[Cookie]:
        self.store.set_accept_cookie(True)
        header = self.store.get_cookie(target.url)
        return parse_cookie_header(header, domain=target.host)


class SuffixMatchSource(CookieSource):
    """Adapter that lists a bulk store and filters by domain suffix."""

    def __init__(self, store: BulkStore, name: str = "bulk"):
        super().__init__(name)
        self.store = store

    async def query(self, target: NormalizedURL) -> list[Cookie]:
        cookies = await self.store.all_cookies()
        return filter_cookies_for_host(cookies, target.host)
