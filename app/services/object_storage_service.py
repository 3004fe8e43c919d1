from __future__ import annotations

import hashlib
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)

MAX_PHOTO_BYTES = int(os.getenv("OBJECT_STORAGE_MAX_BYTES", str(5 * 1024 * 1024)))

_BUCKET_NAME = re.compile(r"^[a-z0-9][a-z0-9-]*$")


class ObjectStorageError(Exception):
    pass


class ObjectStorageNotFoundError(ObjectStorageError):
    pass


@dataclass(frozen=True)
class StoredPhoto:
    bucket: str
    object_key: str
    size_bytes: int
    etag: str
    content_type: str
    path: Path


class LocalPhotoStore:
    """Photos on the local filesystem, one directory per bucket."""

    def __init__(self, root_dir: Path) -> None:
        self._root_dir = root_dir
        self._root_dir.mkdir(parents=True, exist_ok=True)

    def resolve(self, bucket: str, object_key: str) -> Path:
        if not _BUCKET_NAME.match(bucket):
            raise ObjectStorageError(f"invalid bucket: {bucket!r}")
        key = PurePosixPath(object_key)
        if not key.parts:
            raise ObjectStorageError("object key is empty")
        if key.is_absolute() or ".." in key.parts:
            raise ObjectStorageError("invalid object key")
        return self._root_dir.joinpath(bucket, *key.parts)

    def write(self, bucket: str, object_key: str, content: bytes, content_type: str, *, upsert: bool) -> StoredPhoto:
        path = self.resolve(bucket, object_key)
        if path.exists() and not upsert:
            raise ObjectStorageError(f"{bucket}/{object_key} already exists")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return StoredPhoto(
            bucket=bucket,
            object_key=object_key,
            size_bytes=len(content),
            etag=hashlib.sha256(content).hexdigest(),
            content_type=content_type,
            path=path,
        )

    def existing(self, bucket: str, object_key: str) -> Path:
        path = self.resolve(bucket, object_key)
        if not path.is_file():
            raise ObjectStorageNotFoundError(f"{bucket}/{object_key} not found")
        return path


class ObjectStorageService:
    def __init__(self) -> None:
        backend = os.getenv("OBJECT_STORAGE_BACKEND", "local").strip().lower()
        if backend != "local":
            raise ObjectStorageError(f"unsupported storage backend: {backend}")
        self._store = LocalPhotoStore(Path(os.getenv("OBJECT_STORAGE_ROOT", "data/object_storage")))
        self.public_base_url = os.getenv("OBJECT_STORAGE_PUBLIC_BASE_URL", "/media").rstrip("/")

    def upload(
        self,
        *,
        bucket: str,
        object_key: str,
        content: bytes,
        content_type: str,
        upsert: bool = True,
    ) -> StoredPhoto:
        if not content_type.startswith("image/"):
            raise ObjectStorageError(f"refusing non-image content type {content_type}")
        if len(content) > MAX_PHOTO_BYTES:
            raise ObjectStorageError(f"photo exceeds {MAX_PHOTO_BYTES} bytes")
        stored = self._store.write(bucket, object_key, content, content_type, upsert=upsert)
        logger.debug("stored %s/%s (%d bytes)", bucket, object_key, stored.size_bytes)
        return stored

    def public_url(self, *, bucket: str, object_key: str) -> str:
        return f"{self.public_base_url}/{bucket}/{object_key}"

    def get_download_path(self, *, bucket: str, object_key: str) -> Path:
        return self._store.existing(bucket, object_key)
