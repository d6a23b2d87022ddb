from abc import ABC, abstractmethod
from typing import BinaryIO

from fittrack.core.config import Settings


class StorageBackend(ABC):
    @abstractmethod
    async def put(self, key: str, body: BinaryIO | bytes, content_type: str | None = None) -> str:
        """Store file; return path or URI."""
        ...

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """Retrieve file bytes."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete file; missing keys are ignored."""
        ...

    @abstractmethod
    async def list(self, prefix: str) -> list[str]:
        """Return keys under prefix (e.g. "avatars/<user_id>/")."""
        ...


def get_storage(settings: Settings) -> StorageBackend:
    if settings.storage_backend == "gcs":
        from fittrack.storage.gcs import GCSStorage
        return GCSStorage(settings)
    from fittrack.storage.local import LocalStorage
    return LocalStorage(settings)
