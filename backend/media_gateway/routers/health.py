from fastapi import APIRouter, Depends, HTTPException

from media_gateway.core.deps import get_media_store
from media_gateway.services.media_store import MediaStore, MediaStoreError

router = APIRouter(tags=["health"])


@router.get("/")
def root():
    return {"message": "Media uploader backend is running!"}


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/health/live")
def live():
    return {"status": "live"}


@router.get("/health/ready")
def ready(store: MediaStore = Depends(get_media_store)):
    try:
        store.ping()
    except MediaStoreError as e:
        raise HTTPException(status_code=503, detail="media store not ready") from e

    return {"status": "ready"}
