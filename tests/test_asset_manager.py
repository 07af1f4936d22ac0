"""
Tests for the asset lifecycle manager
"""

import asyncio
import pytest

from venue_booking.core.exceptions import AssetStoreError, ValidationFailedError
from venue_booking.services.asset_manager import AssetLifecycleManager, ImageUpload
from venue_booking.services.asset_store import InMemoryAssetStore
from venue_booking.services.validators import FieldErrors


class SlowAssetStore(InMemoryAssetStore):

    async def put(self, name: str, data: bytes, content_type: str) -> str:
        await asyncio.sleep(5)
        return await super().put(name, data, content_type)


@pytest.mark.unit
class TestAssetLifecycleManager:

    def test_generated_names_are_unique_and_safe(self):
        first = AssetLifecycleManager.generate_name("../../etc/my hall.png")
        second = AssetLifecycleManager.generate_name("../../etc/my hall.png")

        assert first != second
        assert first.endswith("-my-hall.png")
        assert "/" not in first

    def test_blank_filename_gets_a_default(self):
        assert AssetLifecycleManager.generate_name("").endswith("-image")

    def test_validate_collects_size_and_type_errors(self, asset_manager):
        errors = FieldErrors()
        upload = ImageUpload(filename="a.bmp", content_type="image/bmp", data=b"\x00" * (5 * 1024 * 1024 + 1))

        asset_manager.validate(upload, errors)

        with pytest.raises(ValidationFailedError) as exc_info:
            errors.raise_if_any()
        assert exc_info.value.errors == {"image": [
            "Image cannot be larger than 5 MB.",
            "Image must be a JPEG, PNG or GIF file.",
        ]}

    def test_content_type_parameters_are_ignored(self):
        upload = ImageUpload(filename="a.gif", content_type="IMAGE/GIF; charset=binary", data=b"GIF89a")
        assert upload.normalized_content_type == "image/gif"

    @pytest.mark.asyncio
    async def test_upload_timeout_raises_asset_store_error(self, image_factory):
        manager = AssetLifecycleManager(SlowAssetStore(), timeout_seconds=0.05)

        with pytest.raises(AssetStoreError) as exc_info:
            await manager.upload(image_factory())
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_discard_swallows_store_failures(self, failing_delete_store):
        manager = AssetLifecycleManager(failing_delete_store)

        assert await manager.discard("memory://venue-images/x.png", "test") is False
        assert failing_delete_store.delete_attempts == ["memory://venue-images/x.png"]

    @pytest.mark.asyncio
    async def test_discard_is_idempotent(self, asset_manager, asset_store, image_factory):
        handle = await asset_manager.upload(image_factory())

        assert await asset_manager.discard(handle, "test") is True
        assert await asset_manager.discard(handle, "test") is False
        assert await asset_manager.discard(None, "test") is False
        assert handle not in asset_store.assets
