from datetime import datetime

from pydantic import ConfigDict
from sqlmodel import SQLModel


class GalleryImageRead(SQLModel):
    id: int
    image_url: str
    original_name: str
    file_size: int
    mime_type: str
    alt_text: str | None = None
    created_at: datetime


class GalleryDeleteRequest(SQLModel):
    """
    Body of DELETE /gallery.

    Either `delete_all=true`, or `image_urls` as a single URL or a list.
    """

    model_config = ConfigDict(extra="forbid")

    delete_all: bool = False
    image_urls: str | list[str] | None = None


class UploadResult(SQLModel):
    urls: list[str]


class StorageDeleteRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    image_url: str
