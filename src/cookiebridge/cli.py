"""Command-line interface for cookiebridge."""

import argparse
import asyncio
import json
import logging
import mimetypes
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import IO, Any

from . import __version__
from .channel import MethodCall, MethodChannel, MethodNotImplemented
from .config import (
    ConfigError,
    build_sources,
    get_config_path,
    get_gallery_dir,
    load_config,
    merge_config,
)
from .console import error, info, setup_logging, success
from .gallery import save_image
from .synth import CookieHeaderSynthesizer

logger = logging.getLogger(__name__)


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="cookiebridge",
        description="Build the Cookie header a browser would send for a URL.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  cookiebridge get "https://www.example.com/account"
  cookiebridge get example.com
  cookiebridge save-image photo.png
  echo '{"method": "getCookies", "arguments": {"url": "example.com"}}' | cookiebridge serve
""",
    )

    parser.add_argument(
        "--config",
        metavar="FILE",
        help="Use alternate config file",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        metavar="SECONDS",
        help="Override per-source timeout from config",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show detailed output",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)

    get_parser = subparsers.add_parser("get", help="Print the Cookie header for a URL")
    get_parser.add_argument("url", metavar="URL", help="Target URL (scheme optional)")

    save_parser = subparsers.add_parser("save-image", help="Save an image into the gallery")
    save_parser.add_argument("file", metavar="FILE", help="Image file to copy")
    save_parser.add_argument("--name", help="File name in the gallery (default: FILE's name)")
    save_parser.add_argument("--mime", help="MIME type (default: guessed from FILE)")

    subparsers.add_parser("serve", help="Answer JSON-lines method calls on stdin")

    return parser.parse_args(args)


def _encode(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False)


def handle_line(channel: MethodChannel, line: str) -> str:
    """Answer one JSON-encoded method call with a JSON-encoded reply."""
    try:
        request = json.loads(line)
        if not isinstance(request, dict) or not isinstance(request.get("method"), str):
            raise ValueError("expected an object with a string 'method'")
    except ValueError as e:
        return _encode({"error": "badRequest", "message": str(e)})

    reply: dict[str, Any] = {}
    if "id" in request:
        reply["id"] = request["id"]

    call = MethodCall(request["method"], request.get("arguments") or {})
    try:
        reply["result"] = asyncio.run(channel.handle(call))
    except MethodNotImplemented:
        reply["error"] = "notImplemented"
    except Exception as e:
        logger.exception("Method %s failed", call.method)
        reply["error"] = "internalError"
        reply["message"] = str(e)
    return _encode(reply)


def serve(channel: MethodChannel, lines: Iterable[str], out: IO[str]) -> int:
    """Serve method calls, one JSON object per line, until input ends."""
    for line in lines:
        line = line.strip()
        if not line:
            continue
        out.write(handle_line(channel, line) + "\n")
        out.flush()
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point.

    Args:
        args: Command-line arguments (for testing)

    Returns:
        Exit code (0 for success)
    """
    parsed_args = parse_args(args)
    setup_logging(parsed_args.verbose)

    # Load configuration (auto-creates if missing)
    config_path = Path(parsed_args.config) if parsed_args.config else None
    try:
        config, was_created = load_config(config_path)
        if was_created:
            info(f"Created config file: {config_path or get_config_path()}")
            info("Edit this file to point cookiebridge at your cookie stores.")

        overrides = {}
        if parsed_args.timeout is not None:
            overrides["timeout"] = parsed_args.timeout
        if overrides:
            config = merge_config(config, overrides)
        sources = build_sources(config)
    except (ConfigError, OSError) as e:
        error(f"Error loading config: {e}")
        return 1

    synthesizer = CookieHeaderSynthesizer(sources, timeout=config["timeout"])
    gallery_dir = get_gallery_dir(config)

    if parsed_args.verbose:
        info(f"Sources: {', '.join(s.name for s in sources) or 'none'}")

    if parsed_args.command == "get":
        header = synthesizer.get_cookie_header(parsed_args.url)
        print(header)
        return 0

    if parsed_args.command == "save-image":
        path = Path(parsed_args.file).expanduser()
        try:
            data = path.read_bytes()
        except OSError as e:
            error(f"Cannot read {path}: {e}")
            return 1
        mime = parsed_args.mime or mimetypes.guess_type(path.name)[0]
        if not save_image(data, parsed_args.name or path.name, mime, gallery_dir):
            error(f"Failed to save {path.name}")
            return 1
        success(f"Saved {path.name} to {gallery_dir}")
        return 0

    channel = MethodChannel(synthesizer, gallery_dir)
    return serve(channel, sys.stdin, sys.stdout)


if __name__ == "__main__":
    sys.exit(main())
