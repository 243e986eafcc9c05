"""Image persistence into the app's public gallery directory."""

import logging
import mimetypes
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_MIME = "image/jpeg"


def get_unique_filepath(base_path: Path) -> Path:
    """Get a unique filepath, appending numbers if file exists.

    Args:
        base_path: The desired file path

    Returns:
        A unique path (may have (1), (2), etc. appended to stem)
    """
    if not base_path.exists():
        return base_path

    stem = base_path.stem
    suffix = base_path.suffix
    parent = base_path.parent

    counter = 1
    while True:
        new_path = parent / f"{stem} ({counter}){suffix}"
        if not new_path.exists():
            return new_path
        counter += 1


def build_filename(name: str, mime: str | None) -> str:
    """Return a safe file name, adding an extension from mime if missing."""
    # Keep only the final path component
    filename = Path(name.replace("\\", "/")).name.strip() or "image"
    if not Path(filename).suffix:
        extension = mimetypes.guess_extension(mime or DEFAULT_MIME) or ""
        filename += extension
    return filename


def write_bytes_atomic(path: Path, data: bytes) -> None:
    """Write bytes to file atomically.

    Uses a temporary file and rename to ensure atomic write.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_path = tempfile.mkstemp(
        suffix=".tmp",
        prefix=".cookiebridge_",
        dir=path.parent,
    )
    temp_file = Path(temp_path)

    try:
        with open(fd, "wb") as f:
            f.write(data)
        temp_file.rename(path)
    except Exception:
        if temp_file.exists():
            temp_file.unlink()
        raise


def save_image(data: bytes, name: str, mime: str | None, gallery_dir: Path) -> bool:
    """Save image bytes into the gallery directory.

    Args:
        data: Raw image bytes
        name: Requested file name; an extension is derived from mime if absent
        mime: MIME type of the image
        gallery_dir: App-namespaced gallery directory

    Returns:
        True if the file was written, False otherwise.
    """
    if not isinstance(mime, str):
        mime = None
    if not data:
        logger.warning("Refusing to save empty image %r", name)
        return False
    try:
        filepath = get_unique_filepath(Path(gallery_dir) / build_filename(name or "", mime))
        write_bytes_atomic(filepath, bytes(data))
    except (OSError, TypeError) as e:
        logger.warning("Failed to save image %r: %s", name, e)
        return False
    logger.info("Saved image to %s", filepath)
    return True
