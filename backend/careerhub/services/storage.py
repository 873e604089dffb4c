"""
Object Storage Service

Publishes uploaded binaries (job logos, counselor photos, community
images) and returns the public URL they can be fetched from.

Path Conventions:
    - job-logos/{job_id}/{filename} - Employer logos
    - counselors/{uuid}.{ext} - Counselor profile photos
    - community-images/{community_id}/{filename} - Community cover images

Usage:
    storage = get_storage()
    url = await storage.upload("job-logos/abc/logo.png", data, "image/png")
    await storage.delete(url)
"""

import asyncio
import logging
from pathlib import Path, PurePosixPath
from typing import Optional

from careerhub.config import get_settings

logger = logging.getLogger(__name__)


def job_logo_path(job_id: str, filename: str) -> str:
    return f"job-logos/{job_id}/{PurePosixPath(filename).name}"


def community_image_path(community_id: str, filename: str) -> str:
    return f"community-images/{community_id}/{PurePosixPath(filename).name}"


class ObjectStorage:
    """Interface for object storage backends."""

    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        raise NotImplementedError

    async def delete(self, url: str) -> bool:
        raise NotImplementedError

    def owns(self, url: str) -> bool:
        raise NotImplementedError


class LocalObjectStorage(ObjectStorage):
    """
    Filesystem-backed object storage.

    Files are written below ``root`` and served from ``base_url``; the API
    mounts ``root`` at ``/files``.

    Attributes:
        root: Directory holding stored objects
        base_url: Public URL prefix for stored objects
    """

    def __init__(self, root: str, base_url: str):
        self.root = Path(root).expanduser()
        self.base_url = base_url.rstrip("/")

    def _resolve(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if not target.is_relative_to(self.root.resolve()):
            raise ValueError(f"Storage path escapes root: {path}")
        return target

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path}"

    def owns(self, url: str) -> bool:
        return bool(url) and url.startswith(self.base_url + "/")

    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        """
        Store ``data`` at ``path`` and return its download URL.

        Args:
            path: Object path relative to the storage root
            data: Raw bytes
            content_type: MIME type (informational for the local backend)

        Returns:
            Public URL of the stored object
        """
        target = self._resolve(path)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            logger.error(f"Error uploading {path}: {e}")
            raise

        logger.info(f"Stored {len(data)} bytes at {path} ({content_type})")
        return self.url_for(path)

    async def delete(self, url: str) -> bool:
        """Delete an object by URL. Returns False if it is not ours or missing."""
        if not self.owns(url):
            return False

        target = self._resolve(url[len(self.base_url) + 1:])
        try:
            await asyncio.to_thread(target.unlink)
        except FileNotFoundError:
            return False
        return True


_storage_instance: Optional[ObjectStorage] = None


def get_storage() -> ObjectStorage:
    """Get or create the global object storage instance."""
    global _storage_instance

    if _storage_instance is None:
        settings = get_settings()
        _storage_instance = LocalObjectStorage(settings.storage_dir, settings.storage_base_url)

    return _storage_instance
