from __future__ import annotations

import logging
import mimetypes
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from media_gateway.core.config import Settings
from media_gateway.core.deps import get_media_store, get_settings
from media_gateway.schemas.media import AssetListResponse, AssetOut, MessageResponse
from media_gateway.services.media_store import MediaStore, MediaStoreError

router = APIRouter(prefix="/files", tags=["files"])

log = logging.getLogger(__name__)

LISTED_RESOURCE_TYPES = ("image", "video")


def _guess_mimetype(resource_type: str | None, fmt: str | None) -> str | None:
    ext = str(fmt or "").strip().lower()
    if not ext:
        return None
    guessed, _ = mimetypes.guess_type(f"asset.{ext}")
    if guessed:
        return guessed
    if resource_type in LISTED_RESOURCE_TYPES:
        return f"{resource_type}/{ext}"
    return None


def _int_or_none(value: Any) -> int | None:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def to_asset_out(resource: dict[str, Any]) -> AssetOut:
    resource_type = resource.get("resource_type")
    fmt = resource.get("format")
    return AssetOut(
        url=resource.get("secure_url"),
        public_id=str(resource.get("public_id") or ""),
        format=fmt,
        resource_type=resource_type,
        size=_int_or_none(resource.get("bytes")) or 0,
        mimetype=_guess_mimetype(resource_type, fmt),
        width=_int_or_none(resource.get("width")),
        height=_int_or_none(resource.get("height")),
        original_name=resource.get("display_name") or resource.get("original_filename"),
        created_at=resource.get("created_at"),
    )


@router.get("", response_model=AssetListResponse)
def list_files(
    max_results: int = Query(default=10, ge=1, le=500),
    settings: Settings = Depends(get_settings),
    store: MediaStore = Depends(get_media_store),
):
    resources: list[dict[str, Any]] = []
    try:
        # Each kind is capped separately; the combined list may hold 2 * max_results.
        for kind in LISTED_RESOURCE_TYPES:
            resources.extend(
                store.list_resources(resource_type=kind, prefix=settings.media_prefix, max_results=max_results)
            )
    except MediaStoreError as e:
        log.warning("listing failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e)) from e

    files = [to_asset_out(r) for r in resources]
    return AssetListResponse(
        files=files,
        total_files=len(files),
        total_size=sum(f.size for f in files),
    )


@router.delete("/{public_id:path}", response_model=MessageResponse)
def delete_file(
    public_id: str,
    store: MediaStore = Depends(get_media_store),
):
    try:
        # Destroy only removes the asset when called with its actual kind.
        resource_type = store.resource_type_of(public_id)
        store.destroy(public_id, resource_type=resource_type)
    except MediaStoreError as e:
        log.warning("delete of %s failed: %s", public_id, e)
        raise HTTPException(
            status_code=500,
            detail={"error": "Failed to delete file from Cloudinary", "details": str(e)},
        ) from e

    log.info("deleted %s (%s)", public_id, resource_type)
    return MessageResponse(message="File deleted successfully from Cloudinary")
