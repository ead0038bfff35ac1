"""Unit tests for app.services.media: image sniffing, slugs and storage."""

import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock

from app.core.errors import ValidationError
from app.services.media import IncomingFile, MediaStorage, sniff_image_type, slugify

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 32


def _settings(root: str) -> MagicMock:
    settings = MagicMock()
    settings.MEDIA_ROOT = root
    settings.MEDIA_BASE_URL = "http://cdn.test/uploads"
    settings.MEDIA_MAX_IMAGE_BYTES = 1024
    settings.MEDIA_MAX_VIDEO_BYTES = 2048
    settings.MEDIA_MAX_IMAGES = 3
    return settings


class TestSniffAndSlug(unittest.TestCase):
    def test_sniff_known_types(self) -> None:
        self.assertEqual(sniff_image_type(PNG_BYTES), "image/png")
        self.assertEqual(sniff_image_type(JPEG_BYTES), "image/jpeg")
        self.assertEqual(sniff_image_type(b"GIF89a" + b"\x00" * 8), "image/gif")
        self.assertEqual(sniff_image_type(b"RIFF\x00\x00\x00\x00WEBPVP8 "), "image/webp")

    def test_sniff_rejects_other_content(self) -> None:
        self.assertIsNone(sniff_image_type(b"<svg></svg>"))
        self.assertIsNone(sniff_image_type(b""))

    def test_slugify(self) -> None:
        self.assertEqual(slugify("Electrónica Usada!"), "electronica-usada")
        self.assertEqual(slugify("¡¡¡", "fallback"), "fallback")


class TestMediaStorage(unittest.TestCase):
    """Files land under MEDIA_ROOT and URLs under MEDIA_BASE_URL."""

    def setUp(self) -> None:
        self.root = tempfile.mkdtemp(prefix="media-")
        self.storage = MediaStorage(_settings(self.root))

    def tearDown(self) -> None:
        shutil.rmtree(self.root, ignore_errors=True)

    def test_product_images_are_stored(self) -> None:
        uploads = [IncomingFile("a.png", "image/png", PNG_BYTES), IncomingFile("b.jpg", "image/jpeg", JPEG_BYTES)]
        urls = self.storage.save_product_images(uploads, "Celulares", "Moto G")
        self.assertEqual(len(urls), 2)
        self.assertTrue(urls[0].startswith("http://cdn.test/uploads/celulares/moto-g/"))
        self.assertTrue(urls[0].endswith(".png"))
        self.assertTrue(urls[1].endswith(".jpg"))
        stored = list(Path(self.root, "celulares", "moto-g").iterdir())
        self.assertEqual(len(stored), 2)

    def test_too_many_images(self) -> None:
        uploads = [IncomingFile(f"{i}.png", "image/png", PNG_BYTES) for i in range(4)]
        with self.assertRaises(ValidationError):
            self.storage.save_product_images(uploads, "c", "p")

    def test_declared_type_is_not_trusted(self) -> None:
        upload = IncomingFile("fake.png", "image/png", b"<?php echo 1; ?>")
        with self.assertRaises(ValidationError):
            self.storage.save_product_images([upload], "c", "p")
        self.assertFalse(Path(self.root, "c").exists())

    def test_image_size_limit(self) -> None:
        upload = IncomingFile("big.png", "image/png", PNG_BYTES + b"\x00" * 2048)
        with self.assertRaises(ValidationError):
            self.storage.save_banner_image(upload)

    def test_video_by_extension(self) -> None:
        url = self.storage.save_product_video(
            IncomingFile("clip.mp4", "application/octet-stream", b"\x00" * 64), "c", "p"
        )
        self.assertTrue(url.endswith(".mp4"))

    def test_video_rejects_unknown_type(self) -> None:
        with self.assertRaises(ValidationError):
            self.storage.save_product_video(IncomingFile("clip.exe", "application/x-msdownload", b"MZ"), "c", "p")

    def test_banner_image(self) -> None:
        url = self.storage.save_banner_image(IncomingFile("b.png", "image/png", PNG_BYTES))
        self.assertTrue(url.startswith("http://cdn.test/uploads/banners/"))

    def test_discard_removes_only_own_files(self) -> None:
        kept = self.storage.save_banner_image(IncomingFile("k.png", "image/png", PNG_BYTES))
        urls = self.storage.save_product_images([IncomingFile("a.png", "image/png", PNG_BYTES)], "c", "p")
        removed = self.storage.discard(
            urls + ["https://elsewhere.test/a.png", "http://cdn.test/uploads/../outside.png", ""]
        )
        self.assertEqual(removed, 1)
        self.assertEqual(list(Path(self.root, "c", "p").iterdir()), [])
        self.assertEqual(len(list(Path(self.root, "banners").iterdir())), 1)
        self.assertTrue(kept.startswith("http://cdn.test/uploads/banners/"))


if __name__ == "__main__":
    unittest.main()
