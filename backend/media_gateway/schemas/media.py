from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MessageResponse(BaseModel):
    message: str


class UploadResponse(BaseModel):
    message: str
    url: str
    public_id: str


class AssetOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str | None = None
    public_id: str
    format: str | None = None
    resource_type: str | None = None
    size: int = 0
    mimetype: str | None = None
    width: int | None = None
    height: int | None = None
    original_name: str | None = Field(default=None, alias="originalName")
    created_at: str | None = None


class AssetListResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    files: list[AssetOut]
    total_files: int = Field(alias="totalFiles")
    total_size: int = Field(alias="totalSize")
