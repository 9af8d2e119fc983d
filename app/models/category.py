from datetime import datetime, timezone

from sqlmodel import SQLModel, Field, UniqueConstraint


class SeoColumns(SQLModel):
    """
    SEO metadata shared by categories, subcategories and products.

    Filled on creation from the entity name/description unless the
    caller supplies explicit values.
    """

    meta_title: str | None = Field(default=None, max_length=255)
    meta_description: str | None = Field(default=None, max_length=255)
    keywords: str | None = Field(default=None)
    canonical_url: str | None = Field(default=None, max_length=512)


class Category(SeoColumns, table=True):
    """
    Top level of the catalog tree.

    Owns zero or more subcategories; slug is unique across all categories.
    """

    __tablename__ = "categories"

    id: int | None = Field(default=None, primary_key=True)

    name: str = Field(max_length=255, index=True)

    slug: str = Field(
        max_length=255,
        unique=True,
        index=True,
        description="URL-friendly identifier (unique)",
    )

    description: str | None = Field(default=None)

    image: str | None = Field(
        default=None,
        description="Public URL of the category banner",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class Subcategory(SeoColumns, table=True):
    """
    Second level of the catalog tree.

    Belongs to exactly one category; slug is unique within that category.
    """

    __tablename__ = "subcategories"
    __table_args__ = (
        UniqueConstraint("category_id", "slug", name="uq_subcategories_category_slug"),
    )

    id: int | None = Field(default=None, primary_key=True)

    name: str = Field(max_length=255, index=True)

    slug: str = Field(max_length=255, index=True)

    description: str | None = Field(default=None)

    image: str | None = Field(default=None)

    category_id: int = Field(
        foreign_key="categories.id",
        index=True,
        description="FK to categories.id",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
