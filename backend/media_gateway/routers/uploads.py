from __future__ import annotations

import logging
import secrets
import string
import time

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from media_gateway.core.config import Settings
from media_gateway.core.deps import get_media_store, get_settings
from media_gateway.schemas.media import UploadResponse
from media_gateway.services.media_store import MediaStore, MediaStoreError

router = APIRouter(tags=["uploads"])

log = logging.getLogger(__name__)

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def new_public_id() -> str:
    """`<epoch millis>-<6 random [a-z0-9]>`; the original filename is never part of it."""
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(6))
    return f"{int(time.time() * 1000)}-{suffix}"


@router.post("/upload", response_model=UploadResponse)
def upload(
    file: list[UploadFile] | None = File(default=None),
    settings: Settings = Depends(get_settings),
    store: MediaStore = Depends(get_media_store),
):
    parts = file or []
    if not parts:
        raise HTTPException(status_code=400, detail="No file uploaded")
    if len(parts) > 1:
        for extra in parts:
            extra.file.close()
        raise HTTPException(status_code=400, detail="Unexpected field: only one 'file' part is accepted")

    part = parts[0]
    try:
        payload = part.file.read()
    finally:
        part.file.close()

    try:
        asset = store.upload(
            payload,
            mimetype=str(part.content_type or ""),
            public_id=new_public_id(),
            folder=settings.media_folder,
            filename=part.filename or None,
        )
    except MediaStoreError as e:
        log.warning("upload failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e)) from e

    log.info("uploaded %s (%d bytes) as %s", part.filename or "-", len(payload), asset.public_id)
    return UploadResponse(message="Upload successful", url=asset.url, public_id=asset.public_id)
