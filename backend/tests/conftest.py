import sys
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

backend_dir = Path(__file__).resolve().parents[1]
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from media_gateway.core.config import Settings
from media_gateway.main import create_app
from media_gateway.services.media_store import MediaStoreError, UploadedAsset


class FakeMediaStore:
    """In-memory stand-in for Cloudinary, keyed by public id."""

    def __init__(self, cloud_name: str = "demo"):
        self.cloud_name = cloud_name
        self.assets: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.fail_on: dict[str, str] = {}

    def _maybe_fail(self, op: str) -> None:
        msg = self.fail_on.get(op)
        if msg:
            raise MediaStoreError(msg)

    def seed(
        self,
        public_id: str,
        *,
        resource_type: str = "image",
        fmt: str = "jpg",
        size: int = 100,
        display_name: str | None = None,
    ) -> dict[str, Any]:
        resource = {
            "public_id": public_id,
            "secure_url": f"https://res.cloudinary.com/{self.cloud_name}/{resource_type}/upload/v1/{public_id}.{fmt}",
            "format": fmt,
            "resource_type": resource_type,
            "type": "upload",
            "bytes": size,
            "width": 640 if resource_type in {"image", "video"} else None,
            "height": 480 if resource_type in {"image", "video"} else None,
            "display_name": display_name or public_id.rsplit("/", 1)[-1],
            "created_at": "2026-10-18T12:00:00Z",
        }
        self.assets[public_id] = resource
        return resource

    def upload(self, payload, *, mimetype, public_id, folder, filename=None):
        self.calls.append(
            ("upload", {"payload": payload, "mimetype": mimetype, "public_id": public_id, "folder": folder, "filename": filename})
        )
        self._maybe_fail("upload")
        major, _, minor = str(mimetype or "").partition("/")
        kind = major if major in {"image", "video"} else "raw"
        resource = self.seed(
            f"{folder}/{public_id}",
            resource_type=kind,
            fmt=minor or "bin",
            size=len(payload),
            display_name=filename,
        )
        return UploadedAsset(url=resource["secure_url"], public_id=resource["public_id"])

    def resource_type_of(self, public_id):
        self.calls.append(("resource_type_of", {"public_id": public_id}))
        self._maybe_fail("resource_type_of")
        resource = self.assets.get(public_id)
        if resource is None:
            raise MediaStoreError(f"Resource not found - {public_id}")
        return resource["resource_type"]

    def destroy(self, public_id, *, resource_type):
        self.calls.append(("destroy", {"public_id": public_id, "resource_type": resource_type}))
        self._maybe_fail("destroy")
        resource = self.assets.get(public_id)
        if resource is None or resource["resource_type"] != resource_type:
            raise MediaStoreError(f"destroy returned 'not found' for {public_id}")
        del self.assets[public_id]

    def list_resources(self, *, resource_type, prefix, max_results):
        self.calls.append(("list_resources", {"resource_type": resource_type, "prefix": prefix, "max_results": max_results}))
        self._maybe_fail(f"list_resources:{resource_type}")
        matching = [
            r for r in self.assets.values() if r["resource_type"] == resource_type and r["public_id"].startswith(prefix)
        ]
        return [dict(r) for r in matching[:max_results]]

    def ping(self):
        self.calls.append(("ping", {}))
        self._maybe_fail("ping")

    def ops(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture()
def settings():
    return Settings(
        _env_file=None,
        APP_ENV="test",
        CLOUD_NAME="demo",
        CLOUD_API_KEY="key",
        CLOUD_API_SECRET="secret",
    )


@pytest.fixture()
def store():
    return FakeMediaStore()


@pytest.fixture()
def client(settings, store):
    app = create_app(settings=settings, media_store=store)
    return TestClient(app)
