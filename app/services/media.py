"""Validate and store uploaded product/banner images and product videos."""

import logging
import re
import secrets
import unicodedata
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from app.core.errors import ValidationError

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

# Accepted image types -> stored extension.
IMAGE_TYPES: dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}

VIDEO_TYPES: dict[str, str] = {
    "video/mp4": ".mp4",
    "video/webm": ".webm",
    "video/ogg": ".ogv",
    "video/quicktime": ".mov",
    "video/x-matroska": ".mkv",
}

_VIDEO_EXTENSIONS: dict[str, str] = {
    ".mp4": "video/mp4",
    ".m4v": "video/mp4",
    ".webm": "video/webm",
    ".ogg": "video/ogg",
    ".ogv": "video/ogg",
    ".mov": "video/quicktime",
    ".mkv": "video/x-matroska",
}

# Multipart field names accepted for each kind of upload.
IMAGE_FIELDS = ("imagenes", "images", "image", "imagenes[]", "images[]")
VIDEO_FIELDS = ("video", "video_file")
BANNER_FIELDS = ("banner", "image", "imagen", "file")


@dataclass
class IncomingFile:
    """An uploaded file already read into memory."""

    filename: str
    content_type: str
    data: bytes


def sniff_image_type(data: bytes) -> str | None:
    """Identify an image by its magic bytes; None when not a supported image."""
    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return None


def slugify(value: str, fallback: str = "item") -> str:
    normalized = unicodedata.normalize("NFKD", value or "").encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", normalized.lower()).strip("-")
    return slug[:60] or fallback


class MediaStorage:
    """Writes files under MEDIA_ROOT and returns their public URLs under MEDIA_BASE_URL."""

    def __init__(self, settings: "Settings") -> None:
        self.settings = settings
        self.root = Path(settings.MEDIA_ROOT)

    def _store(self, data: bytes, folder: Path, extension: str) -> str:
        target_dir = self.root / folder
        target_dir.mkdir(parents=True, exist_ok=True)
        name = f"{secrets.token_hex(8)}{extension}"
        (target_dir / name).write_bytes(data)
        return f"{self.settings.MEDIA_BASE_URL}/{folder.as_posix()}/{name}"

    def _check_image(self, upload: IncomingFile) -> str:
        if not upload.data:
            raise ValidationError(f"File '{upload.filename}' is empty.")
        if len(upload.data) > self.settings.MEDIA_MAX_IMAGE_BYTES:
            limit_mb = self.settings.MEDIA_MAX_IMAGE_BYTES // (1024 * 1024)
            raise ValidationError(f"Image '{upload.filename}' exceeds {limit_mb} MB.")
        mime = sniff_image_type(upload.data)
        if mime is None:
            raise ValidationError(f"File '{upload.filename}' is not a JPEG, PNG, WEBP or GIF image.")
        return mime

    def save_product_images(
        self, uploads: list[IncomingFile], category: str, product: str
    ) -> list[str]:
        """Validate every image first, then store them; all or nothing."""
        if len(uploads) > self.settings.MEDIA_MAX_IMAGES:
            raise ValidationError(f"At most {self.settings.MEDIA_MAX_IMAGES} images are allowed.")
        checked = [(u, self._check_image(u)) for u in uploads]
        folder = Path(slugify(category, "sin-categoria")) / slugify(product, "producto")
        urls = [self._store(u.data, folder, IMAGE_TYPES[mime]) for u, mime in checked]
        logger.info("Product images stored", extra={"count": len(urls), "folder": folder.as_posix()})
        return urls

    def save_product_video(self, upload: IncomingFile, category: str, product: str) -> str:
        if not upload.data:
            raise ValidationError(f"File '{upload.filename}' is empty.")
        if len(upload.data) > self.settings.MEDIA_MAX_VIDEO_BYTES:
            limit_mb = self.settings.MEDIA_MAX_VIDEO_BYTES // (1024 * 1024)
            raise ValidationError(f"Video '{upload.filename}' exceeds {limit_mb} MB.")
        mime = (upload.content_type or "").split(";")[0].strip().lower()
        if mime not in VIDEO_TYPES:
            mime = _VIDEO_EXTENSIONS.get(Path(upload.filename or "").suffix.lower(), "")
        if mime not in VIDEO_TYPES:
            raise ValidationError(f"File '{upload.filename}' is not an MP4, WEBM, OGG, MOV or MKV video.")
        folder = Path(slugify(category, "sin-categoria")) / slugify(product, "producto")
        return self._store(upload.data, folder, VIDEO_TYPES[mime])

    def save_banner_image(self, upload: IncomingFile) -> str:
        mime = self._check_image(upload)
        return self._store(upload.data, Path("banners"), IMAGE_TYPES[mime])

    def discard(self, urls: list[str]) -> int:
        """
        Delete files previously returned by this storage, e.g. when the request
        that uploaded them is rejected. URLs outside MEDIA_BASE_URL are ignored.
        """
        prefix = f"{self.settings.MEDIA_BASE_URL}/"
        root = self.root.resolve()
        removed = 0
        for url in urls:
            if not url or not url.startswith(prefix):
                continue
            path = (root / url[len(prefix):]).resolve()
            if root not in path.parents:
                continue
            if path.is_file():
                path.unlink()
                removed += 1
        if removed:
            logger.info("Discarded stored media", extra={"count": removed})
        return removed
