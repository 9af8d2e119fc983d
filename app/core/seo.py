"""
SEO metadata generation for catalog entities.

All functions are pure: the caller supplies the site base URL and any
extra keywords, nothing is read from the database or the network.
"""
from typing import Iterable

from app.schemas.seo import EntityType, Offer, ProductStructuredData, SeoFields

DEFAULT_TITLE_SUFFIX = "| Sports Apparel"

META_TITLE_MAX = 57  # leaves room for the suffix
META_DESCRIPTION_MAX = 160
STRUCTURED_DESCRIPTION_MAX = 300
MAX_KEYWORDS = 10


def truncate_text(text: str, max_length: int) -> str:
    """
    Return `text` unchanged if it fits, else cut it to `max_length`
    characters including a trailing "...".
    """
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def generate_meta_title(name: str, suffix: str = DEFAULT_TITLE_SUFFIX) -> str:
    base_title = truncate_text(name, META_TITLE_MAX)
    return f"{base_title} {suffix}".strip()


def generate_meta_description(description: str | None, name: str) -> str:
    if description:
        return truncate_text(description, META_DESCRIPTION_MAX)

    return truncate_text(
        f"Discover {name}. High-quality product with exceptional features and value.",
        META_DESCRIPTION_MAX,
    )


def generate_keywords(name: str, additional_keywords: Iterable[str] = ()) -> str:
    """
    Comma-separated keywords: lowercased words of `name` followed by the
    additional keywords, deduplicated in first-seen order, at most 10.
    """
    words = [w.lower() for w in name.split()]
    merged: list[str] = []
    for kw in [*words, *additional_keywords]:
        if kw and kw not in merged:
            merged.append(kw)
    return ", ".join(merged[:MAX_KEYWORDS])


def generate_canonical_url(slug: str, base_url: str, entity_type: EntityType) -> str:
    clean_base_url = base_url.rstrip("/")
    return f"{clean_base_url}/{entity_type}/{slug}"


def generate_product_structured_data(
    name: str,
    description: str,
    thumbnail_url: str | None = None,
    price: str | None = None,
) -> ProductStructuredData:
    return ProductStructuredData(
        name=name,
        description=truncate_text(description, STRUCTURED_DESCRIPTION_MAX),
        image=thumbnail_url or None,
        offers=Offer(price=price) if price else None,
    )


def auto_generate_seo_fields(
    *,
    name: str,
    slug: str,
    entity_type: EntityType,
    base_url: str,
    description: str | None = None,
    additional_keywords: Iterable[str] = (),
    title_suffix: str = DEFAULT_TITLE_SUFFIX,
    thumbnail_url: str | None = None,
    price: str | None = None,
) -> SeoFields:
    """
    Build every SEO field for a freshly created entity.

    `structured_data` is only produced for products.
    """
    structured_data = None
    if entity_type == "product":
        structured_data = generate_product_structured_data(
            name=name,
            description=description or "",
            thumbnail_url=thumbnail_url,
            price=price,
        )

    return SeoFields(
        entity_type=entity_type,
        meta_title=generate_meta_title(name, title_suffix),
        meta_description=generate_meta_description(description, name),
        keywords=generate_keywords(name, additional_keywords),
        canonical_url=generate_canonical_url(slug, base_url, entity_type),
        structured_data=structured_data,
    )
