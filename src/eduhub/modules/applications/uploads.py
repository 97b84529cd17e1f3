"""
Upload handling for application documents and the profile picture.

Files over the size ceiling are only accepted if they are images that
shrink below it after downscaling and JPEG re-encoding. Image uploads
keep an inline data URL preview; other files store metadata only.
"""

import asyncio
import base64
import binascii
import io
import logging
import os
from datetime import UTC, datetime

from PIL import Image

from eduhub.core.config import settings
from eduhub.modules.applications.errors import UploadError
from eduhub.modules.applications.schemas import UploadedDocument

logger = logging.getLogger(__name__)


def is_image(content_type: str) -> bool:
    return content_type.lower().startswith("image/")


def decode_base64(data_base64: str) -> bytes:
    """Decode a raw base64 payload or a ``data:<type>;base64,`` URL."""
    payload = data_base64.split(",", 1)[1] if data_base64.startswith("data:") else data_base64
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise UploadError("File could not be read") from e


def to_data_url(content: bytes, content_type: str) -> str:
    return f"data:{content_type};base64,{base64.b64encode(content).decode('ascii')}"


def compress_image(content: bytes, max_dimension: int, quality: int) -> bytes:
    """
    Downscale so the longest edge is at most ``max_dimension`` and
    re-encode as JPEG. Aspect ratio is kept; smaller images are not
    upscaled.
    """
    with Image.open(io.BytesIO(content)) as image:
        image = image.convert("RGB")
        image.thumbnail((max_dimension, max_dimension), Image.LANCZOS)
        output = io.BytesIO()
        image.save(output, format="JPEG", quality=quality)
    return output.getvalue()


def _jpeg_name(name: str) -> str:
    return f"{os.path.splitext(name)[0]}.jpg"


async def _shrink(name: str, content: bytes) -> tuple[str, bytes]:
    compressed = await asyncio.to_thread(
        compress_image, content, settings.image_max_dimension, settings.image_quality
    )
    logger.info(f"Compressed {name}: {len(content)} -> {len(compressed)} bytes")
    return _jpeg_name(name), compressed


async def process_document(name: str, content_type: str, content: bytes) -> UploadedDocument:
    """
    Validate and prepare an application document.

    Raises:
        UploadError: File too large, or image compression failed
    """
    limit = settings.max_upload_bytes
    if len(content) > limit:
        if not is_image(content_type):
            raise UploadError("PDF too large (max 5MB)")
        try:
            name, content = await _shrink(name, content)
        except Exception as e:
            logger.warning(f"Compression of {name} failed: {e}")
            raise UploadError("Compression failed") from e
        content_type = "image/jpeg"
        if len(content) > limit:
            raise UploadError("Image too large (even after compression)")

    return UploadedDocument(
        name=name,
        size=len(content),
        type=content_type,
        upload_date=datetime.now(UTC),
        data_url=to_data_url(content, content_type) if is_image(content_type) else None,
    )


async def process_profile_picture(name: str, content_type: str, content: bytes) -> UploadedDocument:
    """
    Validate and prepare the profile picture. Only images are accepted.

    Raises:
        UploadError: Not an image, too large, or compression failed
    """
    if not is_image(content_type):
        raise UploadError("Invalid file type. Please upload an image.")

    limit = settings.max_upload_bytes
    if len(content) > limit:
        try:
            name, content = await _shrink(name, content)
        except Exception as e:
            logger.warning(f"Compression of profile picture {name} failed: {e}")
            raise UploadError("Failed to compress image.") from e
        content_type = "image/jpeg"
        if len(content) > limit:
            raise UploadError("Image too large even after compression.")

    return UploadedDocument(
        name=name,
        size=len(content),
        type=content_type,
        upload_date=datetime.now(UTC),
        data_url=to_data_url(content, content_type),
    )
