from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("name cannot be empty")
    return v


class SeoOverrides(SQLModel):
    """
    Optional SEO values supplied by the operator.

    Anything left out is generated from the name/description.
    """

    meta_title: str | None = Field(default=None, max_length=255)
    meta_description: str | None = Field(default=None, max_length=255)
    keywords: str | None = None
    canonical_url: str | None = Field(default=None, max_length=512)


class SeoRead(SQLModel):
    meta_title: str | None = None
    meta_description: str | None = None
    keywords: str | None = None
    canonical_url: str | None = None


# ----- Categories -----


class CategoryCreate(SeoOverrides):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=255)
    description: str | None = None
    image: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _strip_required(v)


class CategoryUpdate(SQLModel):
    """
    Partial update payload for categories.
    The slug follows the name; it cannot be set directly.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=255)
    description: str | None = None
    image: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _strip_required(v)


class CategoryRead(SeoRead):
    id: int
    name: str
    slug: str
    description: str | None = None
    image: str | None = None
    created_at: datetime


# ----- Subcategories -----


class SubcategoryCreate(SeoOverrides):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=255)
    category_id: int
    description: str | None = None
    image: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _strip_required(v)


class SubcategoryUpdate(SQLModel):
    """
    Partial update payload for subcategories.
    Setting `category_id` moves the subcategory under another category.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=255)
    description: str | None = None
    image: str | None = None
    category_id: int | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _strip_required(v)


class SubcategoryRead(SeoRead):
    id: int
    name: str
    slug: str
    description: str | None = None
    image: str | None = None
    category_id: int
    created_at: datetime
