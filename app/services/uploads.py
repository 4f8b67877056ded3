from __future__ import annotations

import logging
import os
import re
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path

from app.core.config import settings

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^a-zA-Z0-9_\-.]")
DEFAULT_NAME = "upload.bin"


@dataclass(frozen=True)
class StoredUpload:
    original_name: str
    stored_name: str
    local_path: Path
    public_path: str
    mime: str
    size: int
    preview: str


def safe_filename(original_name: str | None, now_ms: int | None = None) -> str:
    """``<base>_<epoch ms><ext>`` with the base cut to 80 chars and non [A-Za-z0-9_-.] chars replaced."""
    name = os.path.basename(original_name or "") or DEFAULT_NAME
    base, ext = os.path.splitext(name)
    base = _UNSAFE.sub("_", base[:80])
    ext = _UNSAFE.sub("_", ext)
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{base}_{stamp}{ext}"


def ensure_uploads_dir(preferred: str | Path | None = None) -> Path:
    """Create the uploads directory, falling back to <tmpdir>/uploads on read-only hosts."""
    primary = Path(preferred or settings.uploads_dir)
    try:
        primary.mkdir(parents=True, exist_ok=True)
        return primary
    except OSError as err:
        fallback = Path(tempfile.gettempdir()) / "uploads"
        try:
            fallback.mkdir(parents=True, exist_ok=True)
        except OSError:
            raise err
        logger.warning("Uploads dir %s not writable, using %s", primary, fallback)
        return fallback


def uploads_dirs() -> list[Path]:
    """Directories an upload may live in: the configured one, then the tmp fallback."""
    return [Path(settings.uploads_dir), Path(tempfile.gettempdir()) / "uploads"]


def find_upload(stored_name: str) -> Path | None:
    # Only names produced by safe_filename; no separators or dot-files
    if not stored_name or stored_name.startswith(".") or _UNSAFE.search(stored_name):
        return None
    for d in uploads_dirs():
        candidate = d / stored_name
        if candidate.is_file():
            return candidate
    return None


def extract_preview(data: bytes, mime: str | None) -> str:
    mime = mime or ""
    if not (mime.startswith("text/") or mime == "application/json"):
        return ""
    if len(data) > settings.preview_max_bytes:
        return ""
    return data.decode("utf-8", errors="replace")[: settings.preview_max_chars]


def save_upload(original_name: str | None, data: bytes, mime: str | None) -> StoredUpload:
    stored_name = safe_filename(original_name)
    out_dir = ensure_uploads_dir()
    out_path = out_dir / stored_name
    out_path.write_bytes(data)
    logger.info("Saved upload %s (%d bytes) to %s", original_name, len(data), out_path)
    prefix = settings.uploads_url_prefix.rstrip("/")
    return StoredUpload(
        original_name=original_name or DEFAULT_NAME,
        stored_name=stored_name,
        local_path=out_path,
        public_path=f"{prefix}/{stored_name}",
        mime=mime or "",
        size=len(data),
        preview=extract_preview(data, mime),
    )
