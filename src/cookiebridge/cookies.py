"""Cookie parsing, domain matching, merging and header formatting."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

# Netscape cookies.txt marks HttpOnly cookies by prefixing the domain field
HTTPONLY_PREFIX = "#HttpOnly_"

HEADER_SEPARATOR = "; "


@dataclass(frozen=True)
class Cookie:
    """A stored cookie reduced to what header synthesis needs."""

    name: str
    value: str
    domain: str = ""

    def to_pair(self) -> str:
        return f"{self.name}={self.value}"


def load_cookies_from_file(path: Path) -> list[Cookie]:
    """Parse Netscape cookies.txt format.

    Format: domain, include_subdomains, path, secure, expires, name, value
    Lines starting with # are comments, except the ``#HttpOnly_`` domain
    prefix written by browsers and curl. Fields are tab-separated.

    Returns cookies in file order.
    """
    cookies = []
    with open(path, encoding="utf-8") as f:
        for line in f:
            # Only the line ending goes: a trailing tab means an empty value
            line = line.rstrip("\r\n").lstrip()
            if line.startswith(HTTPONLY_PREFIX):
                line = line[len(HTTPONLY_PREFIX):]
            elif not line.strip() or line.startswith("#"):
                continue
            parts = line.split("\t")
            if len(parts) >= 7 and parts[5]:
                cookies.append(Cookie(name=parts[5], value=parts[6], domain=parts[0]))
    return cookies


def parse_cookie_header(header: str | None, domain: str = "") -> list[Cookie]:
    """Split a ``Cookie`` header value back into cookies.

    Pairs without a name are skipped; a pair without ``=`` is kept as a
    cookie with an empty value.
    """
    cookies = []
    for part in (header or "").split(";"):
        name, _, value = part.strip().partition("=")
        name = name.strip()
        if name:
            cookies.append(Cookie(name=name, value=value.strip(), domain=domain))
    return cookies


def domain_matches(host: str, domain: str) -> bool:
    """Check whether a cookie domain applies to host.

    One leading dot is stripped from the domain, then the host must equal
    it or end with ``"." + domain``.
    """
    host = host.lower()
    domain = domain.lower()
    if domain.startswith("."):
        domain = domain[1:]
    if not host or not domain:
        return False
    return host == domain or host.endswith("." + domain)


def filter_cookies_for_host(cookies: Iterable[Cookie], host: str) -> list[Cookie]:
    """Filter cookies applicable to host, preserving order."""
    return [c for c in cookies if domain_matches(host, c.domain)]


def merge_cookies(ordered_results: Iterable[Iterable[Cookie]]) -> list[Cookie]:
    """Combine per-source results in priority order.

    The first cookie seen with a given name is kept; later cookies with the
    same name are dropped even when their values differ.
    """
    seen: set[str] = set()
    merged = []
    for cookies in ordered_results:
        for cookie in cookies:
            if cookie.name in seen:
                logger.debug("Dropping duplicate cookie %r from %r", cookie.name, cookie.domain)
                continue
            seen.add(cookie.name)
            merged.append(cookie)
    return merged


def format_cookie_header(cookies: Iterable[Cookie]) -> str:
    """Format cookies as HTTP Cookie header value."""
    return HEADER_SEPARATOR.join(c.to_pair() for c in cookies)


def merge(ordered_results: Iterable[Iterable[Cookie]]) -> str:
    """Merge per-source results and format them as a header value."""
    return format_cookie_header(merge_cookies(ordered_results))
