from __future__ import annotations

import mimetypes

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import FileResponse

from app.services.object_storage_service import (
    ObjectStorageError,
    ObjectStorageNotFoundError,
    ObjectStorageService,
)

router = APIRouter()


@router.get("/{bucket}/{object_key:path}")
def download_object(bucket: str, object_key: str) -> FileResponse:
    try:
        path = ObjectStorageService().get_download_path(bucket=bucket, object_key=object_key)
    except ObjectStorageNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="object not found") from exc
    except ObjectStorageError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    media_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return FileResponse(path, media_type=media_type)
