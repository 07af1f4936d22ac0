"""
Asset lifecycle: validate, upload and release venue images around entity writes
"""

import asyncio
import logging
import os
import re
import uuid
from dataclasses import dataclass
from typing import Iterable, Optional

from venue_booking.config import settings
from venue_booking.core.exceptions import AssetStoreError
from venue_booking.core.metrics import metrics_collector
from venue_booking.services.asset_store import AssetStore
from venue_booking.services.validators import FieldErrors

logger = logging.getLogger(__name__)

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_CONTENT_TYPE_ALIASES = {"image/jpg": "image/jpeg", "image/pjpeg": "image/jpeg"}


@dataclass
class ImageUpload:
    """An uploaded image held in memory"""
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def normalized_content_type(self) -> str:
        content_type = (self.content_type or "").split(";", 1)[0].strip().lower()
        return _CONTENT_TYPE_ALIASES.get(content_type, content_type)


class AssetLifecycleManager:
    """
    Couples the asset store to venue writes.

    Uploads happen before the row is written and fail the mutation.
    Deletions of replaced or orphaned assets are best-effort: they are
    logged and counted but never raised.
    """

    def __init__(
        self,
        store: AssetStore,
        max_bytes: int = settings.ASSET_MAX_BYTES,
        allowed_content_types: Iterable[str] = tuple(settings.ASSET_ALLOWED_CONTENT_TYPES),
        timeout_seconds: float = settings.ASSET_STORE_TIMEOUT_SECONDS
    ):
        self.store = store
        self.max_bytes = max_bytes
        self.allowed_content_types = frozenset(ct.lower() for ct in allowed_content_types)
        self.timeout_seconds = timeout_seconds

    @staticmethod
    def present(upload: Optional[ImageUpload]) -> Optional[ImageUpload]:
        """An empty upload counts as no upload"""
        if upload is None or upload.size == 0:
            return None
        return upload

    def validate(self, upload: Optional[ImageUpload], errors: FieldErrors, field: str = "image") -> None:
        upload = self.present(upload)
        if upload is None:
            return
        if upload.size > self.max_bytes:
            limit_mb = self.max_bytes / (1024 * 1024)
            errors.add(field, f"Image cannot be larger than {limit_mb:g} MB.")
        if upload.normalized_content_type not in self.allowed_content_types:
            errors.add(field, "Image must be a JPEG, PNG or GIF file.")

    @staticmethod
    def generate_name(filename: str) -> str:
        base = os.path.basename((filename or "").replace("\\", "/"))
        safe = _UNSAFE_NAME_CHARS.sub("-", base).strip("-.")[:100] or "image"
        return f"{uuid.uuid4().hex}-{safe}"

    async def upload(self, upload: ImageUpload) -> str:
        """
        Store the image and return its handle. Callers must have validated it.
        """
        name = self.generate_name(upload.filename)
        try:
            handle = await asyncio.wait_for(
                self.store.put(name, upload.data, upload.normalized_content_type),
                timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError as e:
            metrics_collector.record_asset_failure("upload", best_effort=False)
            logger.error(f"Image upload timed out after {self.timeout_seconds}s: {name}")
            raise AssetStoreError("upload", "Image upload timed out") from e
        except Exception as e:
            metrics_collector.record_asset_failure("upload", best_effort=False)
            logger.error(f"Image upload failed: {type(e).__name__}: {e}")
            raise AssetStoreError("upload", f"Error uploading image: {e}") from e

        logger.info(f"Image uploaded: {handle}")
        return handle

    async def discard(self, handle: Optional[str], reason: str) -> bool:
        """
        Best-effort delete. Returns True only if the store removed the asset.
        """
        if not handle:
            return False
        try:
            removed = await asyncio.wait_for(self.store.delete(handle), timeout=self.timeout_seconds)
        except Exception as e:
            metrics_collector.record_asset_failure("delete", best_effort=True)
            logger.warning(
                f"Could not delete image {handle} ({reason}): {type(e).__name__}: {e}"
            )
            return False

        if removed:
            logger.info(f"Image deleted ({reason}): {handle}")
        else:
            logger.debug(f"Image already absent ({reason}): {handle}")
        return removed
