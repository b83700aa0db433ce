# /markhub-backend/app/services/storage_service.py

"""
The blob boundary. The lifecycle only needs three capabilities from a blob
store: store bytes under a path, delete a path, and issue a short-lived
signed URL for a path. `LocalBlobStore` keeps blobs on disk and signs URLs
that are served back by the `/files` router.
"""

import logging
import os
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Optional
from urllib.parse import quote

from ..core import security
from ..core.config import settings

logger = logging.getLogger(__name__)


class BlobStoreError(Exception):
    pass


class BlobStore(ABC):
    @abstractmethod
    def store(self, path: str, content: bytes, content_type: Optional[str] = None) -> None:
        """Writes a new blob. Raises BlobStoreError on failure or if the path exists."""

    @abstractmethod
    def delete(self, path: str) -> None:
        """Removes a blob. Raises BlobStoreError on failure."""

    @abstractmethod
    def sign(self, path: str, ttl_seconds: int) -> str:
        """Returns a temporary download URL for an existing blob."""

    def open_path(self, path: str) -> str:
        """
        Local file backing a blob, for stores whose signed URLs point at the
        `/files` router. Stores that sign URLs on their own host don't serve
        through it.
        """
        raise BlobStoreError(f"{type(self).__name__} does not serve blobs through /files")

    def delete_quietly(self, path: str) -> bool:
        """Best-effort delete used for cleanup. Failures are logged, not raised."""
        try:
            self.delete(path)
            return True
        except BlobStoreError as e:
            logger.warning("Could not delete blob %s; it is now orphaned: %s", path, e)
            return False


class LocalBlobStore(BlobStore):
    def __init__(self, root_dir: str, base_url: str):
        self.root_dir = os.path.abspath(root_dir)
        self.base_url = base_url.rstrip("/")

    def _resolve(self, path: str) -> str:
        full_path = os.path.abspath(os.path.join(self.root_dir, path))
        if os.path.isabs(path) or not full_path.startswith(self.root_dir + os.sep):
            raise BlobStoreError(f"Refusing blob path outside the store: {path!r}")
        return full_path

    def store(self, path: str, content: bytes, content_type: Optional[str] = None) -> None:
        full_path = self._resolve(path)
        try:
            os.makedirs(os.path.dirname(full_path), exist_ok=True)
            # 'xb' refuses to overwrite, matching upsert=False semantics.
            with open(full_path, "xb") as buffer:
                buffer.write(content)
        except OSError as e:
            raise BlobStoreError(f"Failed to store {path}: {e}") from e

    def delete(self, path: str) -> None:
        full_path = self._resolve(path)
        try:
            os.remove(full_path)
        except FileNotFoundError:
            return
        except OSError as e:
            raise BlobStoreError(f"Failed to delete {path}: {e}") from e

    def sign(self, path: str, ttl_seconds: int) -> str:
        if not os.path.isfile(self._resolve(path)):
            raise BlobStoreError(f"No blob stored at {path}")
        token = security.create_download_token(path, ttl_seconds)
        return f"{self.base_url}/files/{quote(token)}"

    def open_path(self, path: str) -> str:
        """Filesystem location of a stored blob, for the download router."""
        full_path = self._resolve(path)
        if not os.path.isfile(full_path):
            raise BlobStoreError(f"No blob stored at {path}")
        return full_path


@lru_cache
def get_blob_store() -> BlobStore:
    """FastAPI dependency providing the process-wide blob store."""
    return LocalBlobStore(settings.blob_storage_dir, settings.public_base_url)
