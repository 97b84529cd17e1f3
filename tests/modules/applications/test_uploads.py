"""
Unit tests for document and profile picture uploads.
"""

import base64
import io
import os

import pytest
from PIL import Image

from eduhub.core.config import settings
from eduhub.modules.applications.errors import UploadError
from eduhub.modules.applications.schemas import DocumentSlot
from eduhub.modules.applications.uploads import (
    compress_image,
    decode_base64,
    process_document,
    process_profile_picture,
)


def noisy_png(width: int = 300, height: int = 200) -> bytes:
    """Random pixels so the PNG does not compress to almost nothing."""
    image = Image.frombytes("RGB", (width, height), os.urandom(width * height * 3))
    output = io.BytesIO()
    image.save(output, format="PNG")
    return output.getvalue()


@pytest.fixture
def small_limits(monkeypatch):
    monkeypatch.setattr(settings, "max_upload_bytes", 50_000)
    monkeypatch.setattr(settings, "image_max_dimension", 40)


class TestDecodeBase64:
    def test_raw_payload(self):
        assert decode_base64(base64.b64encode(b"%PDF-1.4").decode()) == b"%PDF-1.4"

    def test_data_url(self):
        encoded = base64.b64encode(b"hello").decode()
        assert decode_base64(f"data:application/pdf;base64,{encoded}") == b"hello"

    def test_garbage(self):
        with pytest.raises(UploadError):
            decode_base64("not base64!!")


class TestCompressImage:
    def test_downscales_keeping_aspect_ratio(self):
        compressed = compress_image(noisy_png(300, 150), max_dimension=60, quality=70)

        with Image.open(io.BytesIO(compressed)) as image:
            assert image.format == "JPEG"
            assert image.size == (60, 30)


class TestProcessDocument:
    """Tests for process_document."""

    @pytest.mark.asyncio
    async def test_small_pdf_keeps_metadata_only(self):
        document = await process_document("results.pdf", "application/pdf", b"%PDF-1.4 tiny")

        assert document.name == "results.pdf"
        assert document.size == len(b"%PDF-1.4 tiny")
        assert document.data_url is None

    @pytest.mark.asyncio
    async def test_small_image_gets_preview(self):
        content = noisy_png(10, 10)
        document = await process_document("id.png", "image/png", content)

        assert document.type == "image/png"
        assert document.data_url.startswith("data:image/png;base64,")

    @pytest.mark.asyncio
    async def test_large_pdf_rejected(self, small_limits):
        with pytest.raises(UploadError) as exc_info:
            await process_document("results.pdf", "application/pdf", b"0" * 60_000)
        assert exc_info.value.message == "PDF too large (max 5MB)"

    @pytest.mark.asyncio
    async def test_large_image_is_compressed(self, small_limits):
        content = noisy_png()
        assert len(content) > settings.max_upload_bytes

        document = await process_document("id.png", "image/png", content)

        assert document.name == "id.jpg"
        assert document.type == "image/jpeg"
        assert document.size <= settings.max_upload_bytes
        assert document.data_url.startswith("data:image/jpeg;base64,")

    @pytest.mark.asyncio
    async def test_image_still_too_large(self, monkeypatch):
        monkeypatch.setattr(settings, "max_upload_bytes", 100)
        monkeypatch.setattr(settings, "image_max_dimension", 40)

        with pytest.raises(UploadError) as exc_info:
            await process_document("id.png", "image/png", noisy_png())
        assert exc_info.value.message == "Image too large (even after compression)"

    @pytest.mark.asyncio
    async def test_unreadable_image(self, small_limits):
        with pytest.raises(UploadError) as exc_info:
            await process_document("id.png", "image/png", b"x" * 60_000)
        assert exc_info.value.message == "Compression failed"


class TestProcessProfilePicture:
    @pytest.mark.asyncio
    async def test_rejects_non_image(self):
        with pytest.raises(UploadError) as exc_info:
            await process_profile_picture("cv.pdf", "application/pdf", b"%PDF")
        assert exc_info.value.message == "Invalid file type. Please upload an image."

    @pytest.mark.asyncio
    async def test_accepts_image(self):
        picture = await process_profile_picture("me.png", "image/png", noisy_png(10, 10))
        assert picture.data_url is not None


class TestWizardUploads:
    @pytest.mark.asyncio
    async def test_rejected_upload_sets_slot_error(self, wizard, small_limits):
        await wizard.restore()

        with pytest.raises(UploadError) as exc_info:
            await wizard.upload_document(
                DocumentSlot.ACADEMIC_RECORD, "results.pdf", "application/pdf", b"0" * 60_000
            )

        assert exc_info.value.field == "documents.academic_record"
        assert wizard.errors["documents.academic_record"] == "PDF too large (max 5MB)"
        assert wizard.form.documents.academic_record is None

    @pytest.mark.asyncio
    async def test_upload_then_remove(self, wizard):
        await wizard.restore()

        await wizard.upload_document(DocumentSlot.ID_DOCUMENT, "id.pdf", "application/pdf", b"%PDF")
        assert wizard.form.documents.id_document.name == "id.pdf"

        await wizard.remove_document(DocumentSlot.ID_DOCUMENT)
        assert wizard.form.documents.id_document is None

    @pytest.mark.asyncio
    async def test_profile_picture(self, wizard):
        await wizard.restore()

        await wizard.upload_profile_picture("me.png", "image/png", noisy_png(10, 10))
        assert wizard.form.profile_picture is not None

        await wizard.remove_profile_picture()
        assert wizard.form.profile_picture is None
