from __future__ import annotations

from fastapi import Request

from media_gateway.core.config import Settings
from media_gateway.services.media_store import MediaStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_media_store(request: Request) -> MediaStore:
    return request.app.state.media_store
