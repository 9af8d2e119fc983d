import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.schemas.category import SeoOverrides, SeoRead
from app.schemas.gallery import GalleryImageRead
from app.schemas.seo import ProductStructuredData


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("field cannot be empty")
    return v


class ProductImageRef(SQLModel):
    """
    Gallery image chosen for a product.

    `display_order` is a hint: the server sorts by it and then renumbers
    the whole set from 0.
    """

    model_config = ConfigDict(extra="forbid")

    image_id: int
    display_order: int | None = Field(default=None, ge=0)


class ProductCreate(SeoOverrides):
    """
    Payload for creating a product.

    - slug is always generated from `name` (suffixed if already taken).
    - `price` only feeds the generated structured data; it is not stored
      as a column.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=255)
    description: str
    details: dict[str, str] | None = None
    min_order: str | None = Field(default=None, max_length=255)
    delivery_info: str | None = None
    whatsapp_number: str = Field(max_length=32)
    thumbnail_id: int | None = None
    subcategory_id: int
    is_active: bool = True
    price: str | None = None
    images: list[ProductImageRef] = []

    @field_validator("name", "description", "whatsapp_number")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return _strip_required(v)


class ProductUpdate(SQLModel):
    """
    PUT payload for products. All fields are optional.

    `images`:
      - omitted / null => image links untouched
      - list (possibly empty) => replaces the whole image set
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=255)
    description: str | None = None
    details: dict[str, str] | None = None
    min_order: str | None = Field(default=None, max_length=255)
    delivery_info: str | None = None
    whatsapp_number: str | None = Field(default=None, max_length=32)
    thumbnail_id: int | None = None
    subcategory_id: int | None = None
    is_active: bool | None = None
    meta_title: str | None = Field(default=None, max_length=255)
    meta_description: str | None = Field(default=None, max_length=255)
    keywords: str | None = None
    canonical_url: str | None = Field(default=None, max_length=512)
    images: list[ProductImageRef] | None = None

    @field_validator("name", "description", "whatsapp_number")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _strip_required(v)


class ProductRead(SeoRead):
    """
    Product row as stored.
    """

    id: uuid.UUID
    name: str
    slug: str
    description: str
    details: dict[str, str] | None = None
    min_order: str | None = None
    delivery_info: str | None = None
    whatsapp_number: str
    thumbnail_id: int | None = None
    subcategory_id: int
    is_active: bool
    structured_data: ProductStructuredData | None = None
    created_at: datetime


# ----- Listing -----


class ThumbnailRead(SQLModel):
    id: int
    image_url: str
    original_name: str
    alt_text: str | None = None


class CategoryRef(SQLModel):
    id: int
    name: str
    slug: str
    meta_title: str | None = None
    meta_description: str | None = None


class ProductListItem(ProductRead):
    thumbnail: ThumbnailRead | None = None
    category: CategoryRef | None = None
    subcategory: CategoryRef | None = None


class Pagination(SQLModel):
    current_page: int
    page_size: int
    total_products: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool


class CategorySummary(SQLModel):
    id: int
    name: str
    slug: str
    product_count: int


class ProductSummary(SQLModel):
    total_active_products: int
    categories: list[CategorySummary]


class ListingSeo(SQLModel):
    title: str
    description: str
    canonical_url: str


class ProductListResponse(SQLModel):
    products: list[ProductListItem]
    pagination: Pagination
    summary: ProductSummary
    seo_metadata: ListingSeo


# ----- Detail -----


class ProductImageRead(GalleryImageRead):
    display_order: int


class ProductDetail(ProductRead):
    thumbnail: GalleryImageRead | None = None
    images: list[ProductImageRead] = []


# ----- Product <-> gallery links -----


class ProductImagesCreate(SQLModel):
    """
    Append gallery images to a product, after the ones it already has.
    """

    model_config = ConfigDict(extra="forbid")

    product_id: uuid.UUID
    gallery_ids: list[int]

    @field_validator("gallery_ids")
    @classmethod
    def not_empty(cls, v: list[int]) -> list[int]:
        if not v:
            raise ValueError("at least one gallery image is required")
        return v


class ProductImageLink(SQLModel):
    product_id: uuid.UUID
    image_id: int
    display_order: int


class ProductImagesResult(SQLModel):
    message: str
    associations: list[ProductImageLink]
