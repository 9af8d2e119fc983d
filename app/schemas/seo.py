from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

EntityType = Literal["category", "subcategory", "product"]


class Offer(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["Offer"] = Field(default="Offer", alias="@type")
    price: str
    price_currency: str = Field(default="USD", alias="priceCurrency")


class ProductStructuredData(BaseModel):
    """
    schema.org Product blob embedded in product pages.

    Serialized with aliases ("@context", "@type") both in the DB JSON
    column and in API responses.
    """

    model_config = ConfigDict(populate_by_name=True)

    context: Literal["https://schema.org/"] = Field(
        default="https://schema.org/", alias="@context"
    )
    type: Literal["Product"] = Field(default="Product", alias="@type")
    name: str
    description: str
    image: str | None = None
    offers: Offer | None = None


class SeoFields(BaseModel):
    """
    Generated discoverability metadata for one entity.

    Only products carry `structured_data`.
    """

    entity_type: EntityType
    meta_title: str
    meta_description: str
    keywords: str
    canonical_url: str
    structured_data: ProductStructuredData | None = None
