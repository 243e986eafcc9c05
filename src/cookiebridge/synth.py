"""Cookie header synthesis across several cookie sources."""

import asyncio
import logging
from collections.abc import Sequence

from .config import build_sources, load_config
from .cookies import Cookie, merge
from .sources import CookieSource
from .urls import NormalizedURL, normalize_url

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0


class CookieHeaderSynthesizer:
    """Build the Cookie header a browser would send for a URL.

    Sources are consulted concurrently and merged in the order given: on a
    duplicate cookie name the earlier source wins. A source that fails or
    does not answer within ``timeout`` seconds contributes nothing.
    """

    def __init__(self, sources: Sequence[CookieSource], timeout: float = DEFAULT_TIMEOUT):
        self.sources = list(sources)
        self.timeout = timeout

    async def _query_isolated(self, source: CookieSource, target: NormalizedURL) -> list[Cookie]:
        """Query one source, turning any failure into an empty result."""
        try:
            return list(await asyncio.wait_for(source.query(target), timeout=self.timeout))
        except asyncio.TimeoutError:
            logger.warning("Cookie source %s timed out after %.1fs", source.name, self.timeout)
        except Exception as e:
            logger.warning("Cookie source %s failed: %s", source.name, e)
        return []

    async def aget_cookie_header(self, url: str) -> str:
        """Return the Cookie header value for url, or "" if there is none."""
        if not url:
            return ""
        try:
            target = normalize_url(url)
            results = await asyncio.gather(
                *(self._query_isolated(source, target) for source in self.sources)
            )
            return merge(results)
        except Exception:
            logger.exception("Cookie header synthesis failed for %s", url)
            return ""

    def get_cookie_header(self, url: str) -> str:
        """Blocking variant of ``aget_cookie_header``.

        Must not be called from inside a running event loop; doing so
        yields "".
        """
        if not url:
            return ""
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            logger.error("get_cookie_header called inside a running event loop; use aget_cookie_header")
            return ""
        try:
            return asyncio.run(self.aget_cookie_header(url))
        except Exception:
            logger.exception("Cookie header synthesis failed for %s", url)
            return ""


def get_cookie_header(
    url: str,
    sources: Sequence[CookieSource] | None = None,
    timeout: float | None = None,
) -> str:
    """Return the Cookie header for url.

    Without explicit sources, sources and timeout come from the user
    configuration file. Never raises.
    """
    if not url:
        return ""
    try:
        if sources is None:
            config, _ = load_config(create=False)
            sources = build_sources(config)
            if timeout is None:
                timeout = config["timeout"]
        synthesizer = CookieHeaderSynthesizer(
            sources, timeout=DEFAULT_TIMEOUT if timeout is None else timeout
        )
        return synthesizer.get_cookie_header(url)
    except Exception:
        logger.exception("Cookie header synthesis failed for %s", url)
        return ""
