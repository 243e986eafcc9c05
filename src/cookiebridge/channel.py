"""Method-call dispatch for the ``app.webview.cookies`` channel.

The transport that delivers calls is outside this package; it hands each
call to ``MethodChannel.handle`` and sends back whatever is returned.
"""

import asyncio
import base64
import binascii
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .gallery import save_image
from .synth import CookieHeaderSynthesizer

logger = logging.getLogger(__name__)

CHANNEL_NAME = "app.webview.cookies"


class MethodNotImplemented(Exception):
    """The channel has no handler for the requested method."""

    def __init__(self, method: str):
        super().__init__(f"Method not implemented: {method}")
        self.method = method


@dataclass
class MethodCall:
    """A method invocation arriving over the channel."""

    method: str
    arguments: dict[str, Any] = field(default_factory=dict)

    def argument(self, key: str, default: Any = None) -> Any:
        if not isinstance(self.arguments, dict):
            return default
        return self.arguments.get(key, default)


def decode_bytes(value: Any) -> bytes:
    """Accept raw bytes, a list of ints, or a base64 string."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, list):
        return bytes(value)
    if isinstance(value, str):
        return base64.b64decode(value, validate=True)
    return b""


class MethodChannel:
    """Dispatch ``getCookies`` and ``saveImage`` calls."""

    def __init__(
        self,
        synthesizer: CookieHeaderSynthesizer,
        gallery_dir: Path,
        name: str = CHANNEL_NAME,
    ):
        self.name = name
        self.synthesizer = synthesizer
        self.gallery_dir = gallery_dir
        self._handlers: dict[str, Callable[[MethodCall], Any]] = {
            "getCookies": self._get_cookies,
            "saveImage": self._save_image,
        }

    async def handle(self, call: MethodCall) -> Any:
        """Run the handler for call.

        Raises:
            MethodNotImplemented: If the method is unknown
        """
        handler = self._handlers.get(call.method)
        if handler is None:
            raise MethodNotImplemented(call.method)
        return await handler(call)

    async def _get_cookies(self, call: MethodCall) -> str:
        url = call.argument("url") or ""
        if not isinstance(url, str):
            return ""
        return await self.synthesizer.aget_cookie_header(url)

    async def _save_image(self, call: MethodCall) -> bool:
        try:
            data = decode_bytes(call.argument("bytes"))
        except (binascii.Error, ValueError, TypeError) as e:
            logger.warning("saveImage: undecodable bytes: %s", e)
            return False
        mime = call.argument("mime")
        return await asyncio.to_thread(
            save_image,
            data,
            str(call.argument("name") or ""),
            mime if isinstance(mime, str) else None,
            self.gallery_dir,
        )
