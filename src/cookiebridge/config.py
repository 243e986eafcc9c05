"""Configuration loading and management for cookiebridge."""

from pathlib import Path
from typing import Any

import yaml

from .sources import CookieSource, DelegatedSource, SuffixMatchSource
from .stores import JarStore, NetscapeFileStore


# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "timeout": 5.0,
    "gallery": {
        "app_name": "cookiebridge",
        "directory": "~/Pictures",
    },
    "sources": [
        {"type": "jar", "path": "~/.cookiebridge/jar.txt"},
        {"type": "netscape", "path": "~/.cookiebridge/cookies.txt"},
    ],
}

# Default config file content
DEFAULT_CONFIG_YAML = """\
# cookiebridge configuration
# Location: ~/.cookiebridge.yml

# Seconds to wait for each cookie source before ignoring it
timeout: 5.0

# Where saveImage writes files: <directory>/<app_name>/
gallery:
  app_name: cookiebridge
  directory: ~/Pictures

# Cookie sources, in priority order
# When two sources hold a cookie with the same name, the first source wins
# Types:
#   jar       Mozilla cookies.txt read through http.cookiejar, which applies
#             its own domain, path and secure rules
#   netscape  Netscape cookies.txt listed in full and filtered by domain suffix
sources:
  - type: jar
    path: ~/.cookiebridge/jar.txt
  - type: netscape
    path: ~/.cookiebridge/cookies.txt
"""

SOURCE_TYPES = ("jar", "netscape")


class ConfigError(ValueError):
    """Invalid cookiebridge configuration."""

    pass


def get_config_path() -> Path:
    """Return the default config file path (~/.cookiebridge.yml)."""
    return Path.home() / ".cookiebridge.yml"


def init_config(path: Path | None = None) -> Path:
    """Initialize default config file. Returns the path to the created file."""
    config_path = path or get_config_path()
    if config_path.exists():
        raise FileExistsError(f"Config file already exists: {config_path}")
    config_path.write_text(DEFAULT_CONFIG_YAML, encoding="utf-8")
    return config_path


def load_config(
    path: Path | None = None, create: bool = True
) -> tuple[dict[str, Any], bool]:
    """Load configuration from file, auto-creating if missing.

    Args:
        path: Optional path to config file. Uses ~/.cookiebridge.yml if not specified.
        create: Write the default file when missing. When False a missing
            file yields the defaults and nothing is written.

    Returns:
        Tuple of (config dict, was_created flag). was_created is True if
        config file was auto-created on this call.

    Raises:
        ConfigError: If the file is not valid YAML or has invalid values
    """
    config_path = path or get_config_path()
    was_created = False

    if not config_path.exists():
        if not create:
            return _merge_dicts(DEFAULT_CONFIG, {}), was_created
        config_path.write_text(DEFAULT_CONFIG_YAML, encoding="utf-8")
        was_created = True

    try:
        with open(config_path, encoding="utf-8") as f:
            file_config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file {config_path}: {e}") from e

    if not isinstance(file_config, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")

    config = _merge_dicts(DEFAULT_CONFIG, file_config)
    validate_config(config)
    return config, was_created


def merge_config(
    file_config: dict[str, Any], cli_overrides: dict[str, Any]
) -> dict[str, Any]:
    """Merge CLI overrides into file configuration.

    CLI overrides take precedence over file config.
    """
    config = _merge_dicts(file_config, cli_overrides)
    validate_config(config)
    return config


def _merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries. Override values take precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


def validate_config(config: dict[str, Any]) -> None:
    """Check value types and source entries.

    Raises:
        ConfigError: On the first invalid value found
    """
    timeout = config.get("timeout")
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ConfigError(f"timeout must be a positive number, got {timeout!r}")

    if not isinstance(config.get("gallery", {}), dict):
        raise ConfigError("gallery must be a mapping")

    sources = config.get("sources")
    if not isinstance(sources, list):
        raise ConfigError("sources must be a list")
    for index, entry in enumerate(sources):
        if not isinstance(entry, dict):
            raise ConfigError(f"sources[{index}] must be a mapping")
        if entry.get("type") not in SOURCE_TYPES:
            raise ConfigError(
                f"sources[{index}]: unknown type {entry.get('type')!r} "
                f"(expected one of: {', '.join(SOURCE_TYPES)})"
            )
        if not entry.get("path"):
            raise ConfigError(f"sources[{index}]: path is required")


def build_sources(config: dict[str, Any]) -> list[CookieSource]:
    """Create cookie source adapters in configured priority order.

    Store files are only opened at query time, so a missing file does not
    fail here.
    """
    validate_config(config)
    sources: list[CookieSource] = []
    for index, entry in enumerate(config["sources"]):
        path = Path(entry["path"]).expanduser()
        name = entry.get("name") or f"{entry['type']}:{index}"
        if entry["type"] == "jar":
            sources.append(DelegatedSource(JarStore(path=path), name=name))
        else:
            sources.append(SuffixMatchSource(NetscapeFileStore(path), name=name))
    return sources


def get_gallery_dir(config: dict[str, Any]) -> Path:
    """Return the app-namespaced gallery directory from the config."""
    gallery = config.get("gallery", {})
    directory = Path(gallery.get("directory", "~/Pictures")).expanduser()
    return directory / gallery.get("app_name", "cookiebridge")
