from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Any, Protocol

import cloudinary.api
import cloudinary.uploader
from cloudinary.exceptions import NotFound

from media_gateway.core.config import Settings


log = logging.getLogger(__name__)

# Order in which kinds are probed when an identifier's kind is unknown.
RESOURCE_TYPES: tuple[str, ...] = ("image", "video", "raw")


class MediaStoreError(Exception):
    """A failure reported by (or while talking to) the remote media store.

    The message is the provider's message, passed through unmodified.
    """


@dataclass(frozen=True)
class UploadedAsset:
    url: str
    public_id: str


class MediaStore(Protocol):
    def upload(
        self,
        payload: bytes,
        *,
        mimetype: str,
        public_id: str,
        folder: str,
        filename: str | None = None,
    ) -> UploadedAsset: ...

    def resource_type_of(self, public_id: str) -> str: ...

    def destroy(self, public_id: str, *, resource_type: str) -> None: ...

    def list_resources(self, *, resource_type: str, prefix: str, max_results: int) -> list[dict[str, Any]]: ...

    def ping(self) -> None: ...


def to_data_uri(payload: bytes, mimetype: str | None) -> str:
    mt = str(mimetype or "").strip() or "application/octet-stream"
    return f"data:{mt};base64,{base64.b64encode(payload).decode('ascii')}"


class CloudinaryMediaStore:
    """`MediaStore` backed by the Cloudinary upload and admin APIs.

    Credentials are sent as per-call options, so nothing is written to the
    SDK's global `cloudinary.config()`.
    """

    def __init__(self, settings: Settings):
        self._settings = settings

    def _options(self, **extra: Any) -> dict[str, Any]:
        opts: dict[str, Any] = {
            "cloud_name": self._settings.cloud_name,
            "api_key": self._settings.cloud_api_key,
            "api_secret": self._settings.cloud_api_secret,
            "secure": True,
        }
        opts.update(extra)
        return opts

    def upload(
        self,
        payload: bytes,
        *,
        mimetype: str,
        public_id: str,
        folder: str,
        filename: str | None = None,
    ) -> UploadedAsset:
        extra: dict[str, Any] = {
            "resource_type": "auto",
            "folder": folder,
            "use_filename": True,
            "unique_filename": False,
            "public_id": public_id,
        }
        if filename:
            extra["filename_override"] = filename

        try:
            result = cloudinary.uploader.upload(to_data_uri(payload, mimetype), **self._options(**extra))
        except Exception as e:
            raise MediaStoreError(str(e)) from e

        url = str(result.get("secure_url") or "")
        pid = str(result.get("public_id") or "")
        if not url or not pid:
            raise MediaStoreError("upload response missing secure_url or public_id")
        return UploadedAsset(url=url, public_id=pid)

    def resource_type_of(self, public_id: str) -> str:
        # Admin API lookups are scoped to a single kind (image by default),
        # so each kind is probed until one reports the asset.
        for kind in RESOURCE_TYPES:
            try:
                resource = cloudinary.api.resource(public_id, **self._options(resource_type=kind))
            except NotFound:
                continue
            except Exception as e:
                raise MediaStoreError(str(e)) from e
            return str(resource.get("resource_type") or kind)
        raise MediaStoreError(f"Resource not found - {public_id}")

    def destroy(self, public_id: str, *, resource_type: str) -> None:
        try:
            result = cloudinary.uploader.destroy(
                public_id,
                **self._options(resource_type=resource_type, invalidate=True),
            )
        except Exception as e:
            raise MediaStoreError(str(e)) from e

        outcome = str(result.get("result") or "")
        if outcome != "ok":
            raise MediaStoreError(f"destroy returned '{outcome or 'unknown'}' for {public_id}")

    def list_resources(self, *, resource_type: str, prefix: str, max_results: int) -> list[dict[str, Any]]:
        try:
            result = cloudinary.api.resources(
                **self._options(
                    type="upload",
                    resource_type=resource_type,
                    prefix=prefix,
                    max_results=int(max_results),
                )
            )
        except Exception as e:
            raise MediaStoreError(str(e)) from e
        return list(result.get("resources") or [])

    def ping(self) -> None:
        try:
            cloudinary.api.ping(**self._options())
        except Exception as e:
            raise MediaStoreError(str(e)) from e


def build_media_store(settings: Settings) -> MediaStore:
    if not settings.media_store_enabled:
        log.warning("cloudinary credentials are not configured; media store calls will fail")
    log.info("media store: cloudinary (cloud=%s)", settings.cloud_name or "-")
    return CloudinaryMediaStore(settings)
