import logging
import secrets
import time
from pathlib import Path

from app.core.config import settings

logger = logging.getLogger(__name__)

BUCKETS = {"blogs", "countries", "audio"}


def _media_root() -> Path:
    return Path(settings.MEDIA_ROOT).resolve()


def _resolve(path: str) -> Path:
    root = _media_root()
    target = (root / path).resolve()
    if not target.is_relative_to(root) or target == root:
        raise ValueError(f"Invalid media path: {path}")
    return target


def unique_filename(extension: str, stem: str | None = None) -> str:
    timestamp = int(time.time() * 1000)
    suffix = stem or secrets.token_hex(4)
    return f"{timestamp}-{suffix}.{extension.lstrip('.').lower()}"


def public_url(path: str) -> str:
    return f"{settings.MEDIA_URL.rstrip('/')}/{path.lstrip('/')}"


def save_bytes(
    data: bytes, *, folder: str, extension: str, stem: str | None = None
) -> dict[str, str]:
    """Store data under MEDIA_ROOT/folder and return its relative path and public URL."""
    if folder not in BUCKETS:
        raise ValueError(f"Unknown media folder: {folder}")
    relative = f"{folder}/{unique_filename(extension, stem)}"
    target = _resolve(relative)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
    logger.info("Stored %s bytes at %s", len(data), relative)
    return {"path": relative, "url": public_url(relative)}


def delete_file(path: str) -> bool:
    target = _resolve(path)
    if not target.exists():
        return False
    target.unlink()
    return True
