"""
Binary asset stores for venue images

Handles are durable URLs. delete() is idempotent: removing a handle that
does not exist returns False instead of raising.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, Tuple
from urllib.parse import unquote, urlparse

from azure.core.exceptions import ResourceExistsError, ResourceNotFoundError
from azure.storage.blob import BlobServiceClient, ContentSettings

from venue_booking.config import settings

logger = logging.getLogger(__name__)


class AssetStore(ABC):
    """Asset store contract"""

    @abstractmethod
    async def put(self, name: str, data: bytes, content_type: str) -> str:
        """Store the bytes under name and return a durable handle"""

    @abstractmethod
    async def delete(self, handle: str) -> bool:
        """Remove the asset; False if it was already gone"""


class AzureBlobAssetStore(AssetStore):
    """
    Azure Blob Storage backed store. The SDK client is synchronous, so calls
    run in a worker thread to keep the event loop free.
    """

    def __init__(self, connection_string: str, container_name: str):
        self._service = BlobServiceClient.from_connection_string(connection_string)
        self._container = self._service.get_container_client(container_name)
        self._container_name = container_name
        self._container_ready = False

    def _ensure_container(self) -> None:
        if self._container_ready:
            return
        try:
            self._container.create_container(public_access="blob")
            logger.info(f"Created blob container {self._container_name}")
        except ResourceExistsError:
            pass
        self._container_ready = True

    def _put_sync(self, name: str, data: bytes, content_type: str) -> str:
        self._ensure_container()
        blob_client = self._container.get_blob_client(name)
        blob_client.upload_blob(
            data,
            overwrite=False,
            content_settings=ContentSettings(content_type=content_type)
        )
        return blob_client.url

    def _blob_name(self, handle: str) -> str:
        path = unquote(urlparse(handle).path).lstrip("/")
        prefix = f"{self._container_name}/"
        if path.startswith(prefix):
            return path[len(prefix):]
        return path

    def _delete_sync(self, handle: str) -> bool:
        try:
            self._container.delete_blob(self._blob_name(handle))
            return True
        except ResourceNotFoundError:
            return False

    async def put(self, name: str, data: bytes, content_type: str) -> str:
        return await asyncio.to_thread(self._put_sync, name, data, content_type)

    async def delete(self, handle: str) -> bool:
        return await asyncio.to_thread(self._delete_sync, handle)


class InMemoryAssetStore(AssetStore):
    """Process-local store for development and tests"""

    def __init__(self, container_name: str = "venue-images"):
        self.container_name = container_name
        self.assets: Dict[str, Tuple[str, bytes]] = {}

    def handle_for(self, name: str) -> str:
        return f"memory://{self.container_name}/{name}"

    async def put(self, name: str, data: bytes, content_type: str) -> str:
        handle = self.handle_for(name)
        self.assets[handle] = (content_type, data)
        return handle

    async def delete(self, handle: str) -> bool:
        return self.assets.pop(handle, None) is not None


def create_asset_store() -> AssetStore:
    """
    Build the store selected by ASSET_STORE_BACKEND
    """
    if settings.ASSET_STORE_BACKEND == "azure":
        if not settings.AZURE_STORAGE_CONNECTION_STRING:
            raise RuntimeError(
                "AZURE_STORAGE_CONNECTION_STRING must be set when ASSET_STORE_BACKEND is 'azure'"
            )
        return AzureBlobAssetStore(
            settings.AZURE_STORAGE_CONNECTION_STRING,
            settings.AZURE_STORAGE_CONTAINER
        )
    return InMemoryAssetStore(settings.AZURE_STORAGE_CONTAINER)
