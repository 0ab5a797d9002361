"""
Kavin's Catalog Backend — Product Image Service
==================================================

What:  Validates, resizes and uploads product photos.
How:   Pillow decodes the image (which doubles as the content check), scales
       it down to the catalog's maximum size and re-encodes it as JPEG. The
       result is uploaded to the product bucket through the Supabase gateway.
Who:   The image upload route and ProductFormService (data: URLs in a form).

Pipeline for one image:
    1. Extension check (uploads only; data: URLs carry a MIME type instead)
    2. Size check against settings.max_file_size
    3. Pillow verify + decode (rejects renamed or truncated files)
    4. Resize:
         landscape (w > h) wider than image_max_width  → width  = max width
         otherwise, taller than image_max_height       → height = max height
    5. JPEG encode at image_jpeg_quality, RGB
    6. Upload as <epoch-ms>-<random>.jpg, return the public URL
"""

import base64
import binascii
import io
import logging
import re
import secrets
import string
import time
from pathlib import Path
from typing import List, Optional, Tuple

from PIL import Image, UnidentifiedImageError
from starlette.concurrency import run_in_threadpool

from app.config import settings
from app.exceptions import CatalogError, ValidationError
from app.schemas.product import ImageUploadResponse
from app.services.supabase_gateway import supabase_gateway

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp"}
ALLOWED_FORMATS = {"PNG", "JPEG", "WEBP"}

_DATA_URL = re.compile(r"^data:(?P<mime>image/[\w.+-]+)?(?P<b64>;base64)?,(?P<data>.*)$", re.DOTALL)
_NAME_ALPHABET = string.ascii_lowercase + string.digits


def scaled_size(width: int, height: int) -> Tuple[int, int]:
    """Target dimensions for a photo of the given size."""
    max_width = settings.image_max_width
    max_height = settings.image_max_height
    if width > height:
        if width > max_width:
            return max_width, max(1, round(height * max_width / width))
    elif height > max_height:
        return max(1, round(width * max_height / height)), max_height
    return width, height


def generate_object_name() -> str:
    suffix = "".join(secrets.choice(_NAME_ALPHABET) for _ in range(7))
    return f"{int(time.time() * 1000)}-{suffix}.jpg"


class ImageService:

    def validate_extension(self, filename: str) -> str:
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or filename}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="file",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content: bytes) -> None:
        if not content:
            raise ValidationError(message="The image file is empty.", field="file")
        if len(content) > settings.max_file_size:
            max_mb = settings.max_file_size / (1024 * 1024)
            raise ValidationError(
                message=(
                    f"File size ({len(content) / (1024 * 1024):.1f}MB) exceeds "
                    f"maximum of {max_mb:.0f}MB."
                ),
                field="file",
                context={"max_size_mb": max_mb, "actual_size": len(content)},
            )

    def resize(self, content: bytes) -> Tuple[bytes, int, int]:
        """
        Decode, scale down and re-encode one image as JPEG.

        Returns (jpeg_bytes, width, height). Blocking: call through the threadpool.
        """
        try:
            with Image.open(io.BytesIO(content)) as probe:
                probe.verify()
            # verify() leaves the image unusable, so decode again
            with Image.open(io.BytesIO(content)) as img:
                if img.format not in ALLOWED_FORMATS:
                    raise ValidationError(
                        message=f"Image format '{img.format}' is not supported. Use PNG, JPEG or WEBP.",
                        field="file",
                        context={"format": img.format},
                    )
                img = img.convert("RGB")
                width, height = scaled_size(*img.size)
                if (width, height) != img.size:
                    img = img.resize((width, height), Image.LANCZOS)
                out = io.BytesIO()
                img.save(out, format="JPEG", quality=settings.image_jpeg_quality, optimize=True)
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise ValidationError(
                message="The file is not a valid image.",
                field="file",
                context={"error": str(e)},
            )
        return out.getvalue(), width, height

    def decode_data_url(self, data_url: str) -> bytes:
        match = _DATA_URL.match(data_url.strip())
        if not match or not match.group("b64"):
            raise ValidationError(message="Images must be URLs or base64 data URLs.", field="images")
        try:
            return base64.b64decode(match.group("data"), validate=False)
        except (binascii.Error, ValueError) as e:
            raise ValidationError(
                message="The image data is not valid base64.",
                field="images",
                context={"error": str(e)},
            )

    async def process_and_upload(self, content: bytes) -> ImageUploadResponse:
        self.validate_size(content)
        jpeg, width, height = await run_in_threadpool(self.resize, content)
        url = await supabase_gateway.upload_image(generate_object_name(), jpeg)
        return ImageUploadResponse(url=url, width=width, height=height, size_bytes=len(jpeg))

    async def store_upload(self, filename: str, content: bytes) -> ImageUploadResponse:
        """Validate a multipart upload, resize it and store it in the bucket."""
        self.validate_extension(filename)
        result = await self.process_and_upload(content)
        logger.info(
            "Stored upload %s as %s (%dx%d)", filename, result.url, result.width, result.height
        )
        return result

    async def resolve_images(self, images: List[str]) -> List[str]:
        """
        Turn a form's image list into public URLs, preserving order.

        http(s) URLs are kept as they are. data: URLs are decoded, resized and
        uploaded. An image that cannot be processed or uploaded is skipped.
        """
        resolved: List[str] = []
        for position, image in enumerate(images):
            if image.startswith(("http://", "https://")):
                resolved.append(image)
                continue
            url = await self._upload_inline(image, position)
            if url:
                resolved.append(url)
        return resolved

    async def _upload_inline(self, image: str, position: int) -> Optional[str]:
        try:
            content = self.decode_data_url(image)
            result = await self.process_and_upload(content)
        except CatalogError as e:
            logger.warning("Skipping image #%d: %s", position, e.message)
            return None
        return result.url


image_service = ImageService()
