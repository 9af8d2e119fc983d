from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class GalleryImage(SQLModel, table=True):
    """
    Uploaded image shared across the catalog.

    Referenced by products (thumbnail) and by `product_images`; only the
    gallery delete endpoint removes rows from this table.
    """

    __tablename__ = "gallery"

    id: int | None = Field(default=None, primary_key=True)

    image_url: str = Field(
        unique=True,
        index=True,
        description="Public URL stored in Supabase Storage",
    )

    original_name: str = Field(max_length=255)

    file_size: int = Field(default=0, ge=0, description="Size in bytes")

    mime_type: str = Field(max_length=100)

    alt_text: str | None = Field(default=None, max_length=255)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Upload timestamp (UTC)",
    )
