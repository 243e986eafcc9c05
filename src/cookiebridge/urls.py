"""URL normalization for cookie matching."""

import re
from dataclasses import dataclass
from urllib.parse import urlsplit

DEFAULT_SCHEME = "https"

# Authority of a URL-ish string: optional scheme, optional userinfo, host, optional port
_HOST_PATTERN = re.compile(
    r"^(?:[a-zA-Z][a-zA-Z0-9+.-]*://)?(?:[^@/?#]*@)?(\[[^\]/?#]*\]?|[^:/?#]*)"
)


@dataclass(frozen=True)
class NormalizedURL:
    """A URL guaranteed to carry a scheme, with its host extracted."""

    scheme: str
    host: str
    original: str
    url: str


def _host_from_raw(raw: str) -> str:
    """Best-effort host extraction when the string does not parse as a URL."""
    match = _HOST_PATTERN.match(raw.strip())
    if not match:
        return ""
    return match.group(1).strip("[]").lower()


def normalize_url(raw: str) -> NormalizedURL:
    """Normalize a raw URL string.

    Strings without a scheme (or without an authority, so that
    ``example.com:8080/x`` is not read as scheme ``example.com``) are
    prefixed with ``https://``. If even that does not parse, the host is
    pulled out of ``raw`` directly. Never raises.
    """
    raw = raw or ""
    effective = raw
    try:
        parsed = urlsplit(raw)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("missing scheme or authority")
    except ValueError:
        effective = f"{DEFAULT_SCHEME}://{raw}"
        try:
            parsed = urlsplit(effective)
        except ValueError:
            return NormalizedURL(
                scheme=DEFAULT_SCHEME,
                host=_host_from_raw(raw),
                original=raw,
                url=effective,
            )

    return NormalizedURL(
        scheme=parsed.scheme.lower() or DEFAULT_SCHEME,
        host=(parsed.hostname or "").lower(),
        original=raw,
        url=effective,
    )
