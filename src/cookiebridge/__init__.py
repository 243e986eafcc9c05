"""cookiebridge - synthesize Cookie headers from several cookie stores."""

__version__ = "0.1.0"

from .cookies import Cookie, format_cookie_header, merge, merge_cookies  # noqa: E402
from .synth import CookieHeaderSynthesizer, get_cookie_header  # noqa: E402
from .urls import NormalizedURL, normalize_url  # noqa: E402

__all__ = [
    "Cookie",
    "CookieHeaderSynthesizer",
    "NormalizedURL",
    "__version__",
    "format_cookie_header",
    "get_cookie_header",
    "merge",
    "merge_cookies",
    "normalize_url",
]
