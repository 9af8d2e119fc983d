import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field

from app.models.category import SeoColumns


class Product(SeoColumns, table=True):
    """
    Product catalog entry.

    Leaf of the catalog tree: belongs to exactly one subcategory.
    Images live in the shared gallery and are linked through
    `product_images`; `thumbnail_id` points at the gallery directly.
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=255,
        index=True,
        description="Display name of the product",
    )

    slug: str = Field(
        max_length=255,
        unique=True,
        index=True,
        description="URL-friendly identifier (unique)",
    )

    description: str = Field(description="Long description / HTML")

    # Ordered key -> value pairs ("Material" -> "Cotton", ...)
    details: dict[str, str] | None = Field(
        default=None,
        sa_column=Column(JSON),
    )

    min_order: str | None = Field(default=None, max_length=255)

    delivery_info: str | None = Field(default=None)

    whatsapp_number: str = Field(max_length=32)

    thumbnail_id: int | None = Field(
        default=None,
        foreign_key="gallery.id",
        description="FK to gallery.id",
    )

    subcategory_id: int = Field(
        foreign_key="subcategories.id",
        index=True,
        description="FK to subcategories.id",
    )

    is_active: bool = Field(
        default=True,
        index=True,
        description="Whether this product is visible on the storefront",
    )

    # schema.org blob, see app.schemas.seo.ProductStructuredData
    structured_data: dict[str, Any] | None = Field(
        default=None,
        sa_column=Column(JSON),
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class ProductImage(SQLModel, table=True):
    """
    Ordered link between a product and a gallery image.

    display_order is always 0..n-1 within one product.
    """

    __tablename__ = "product_images"

    product_id: uuid.UUID = Field(
        foreign_key="products.id",
        primary_key=True,
        description="FK to products.id",
    )

    image_id: int = Field(
        foreign_key="gallery.id",
        primary_key=True,
        index=True,
        description="FK to gallery.id",
    )

    display_order: int = Field(
        default=0,
        ge=0,
        description="Position within the product's image list",
    )
