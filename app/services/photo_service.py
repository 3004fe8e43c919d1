from __future__ import annotations

import base64
import logging
import re

from app.infra.tenant import TenantContext, resolve_tenant_id
from app.services.errors import TenantContextError
from app.services.object_storage_service import ObjectStorageError, ObjectStorageService

logger = logging.getLogger(__name__)

PET_PHOTO_BUCKET = "pet-photos"
STRAY_PHOTO_BUCKET = "stray-photos"
ANNOUNCEMENT_PHOTO_BUCKET = "announcement-photos"
LOGO_BUCKET = "barangay-logos"

_DATA_URI = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^;,]*)*?);base64,(?P<data>.*)$", re.DOTALL)
_EXTENSION_ALIASES = {"jpeg": "jpg", "svg+xml": "svg"}


def is_inline_photo(value: str | None) -> bool:
    return bool(value) and value.startswith("data:")


def decode_data_uri(payload: str) -> tuple[bytes, str, str]:
    """Return ``(content, content_type, extension)`` for a base64 data URI."""
    match = _DATA_URI.match(payload)
    if match is None:
        raise ValueError("not a base64 data URI")
    content_type = match.group("mime") or "image/jpeg"
    content = base64.b64decode(match.group("data"), validate=True)
    if not content:
        raise ValueError("empty image payload")
    subtype = content_type.split("/", 1)[1] or "jpg"
    return content, content_type, _EXTENSION_ALIASES.get(subtype, subtype)


class PhotoService:
    def __init__(self, context: TenantContext, storage: ObjectStorageService | None = None) -> None:
        self._context = context
        self._storage = storage

    def _get_storage(self) -> ObjectStorageService:
        if self._storage is None:
            self._storage = ObjectStorageService()
        return self._storage

    def ingest(self, payload: str, bucket: str, logical_path: str) -> str:
        """Store an inline image and return its public URL.

        Falls back to returning ``payload`` unchanged when the image cannot be
        decoded or stored, so the caller can still persist something
        displayable.
        """
        barangay_id = resolve_tenant_id(self._context)
        if not barangay_id:
            raise TenantContextError("No barangay context for upload.")
        try:
            content, content_type, extension = decode_data_uri(payload)
            object_key = f"{barangay_id}/{logical_path}.{extension}"
            storage = self._get_storage()
            storage.upload(
                bucket=bucket,
                object_key=object_key,
                content=content,
                content_type=content_type,
                upsert=True,
            )
            return storage.public_url(bucket=bucket, object_key=object_key)
        except (ValueError, ObjectStorageError, OSError) as exc:
            logger.warning("photo upload to %s/%s failed, keeping inline payload: %s", bucket, logical_path, exc)
            return payload
