from app.core.seo import (
    auto_generate_seo_fields,
    generate_canonical_url,
    generate_keywords,
    generate_meta_description,
    generate_meta_title,
    truncate_text,
)


def test_truncate_text():
    assert truncate_text("short", 10) == "short"
    text = "x" * 200
    cut = truncate_text(text, 160)
    assert len(cut) == 160
    assert cut == "x" * 157 + "..."


def test_meta_title_appends_suffix():
    assert generate_meta_title("Running Shoes", "| Shop") == "Running Shoes | Shop"
    long_title = generate_meta_title("n" * 80, "| Shop")
    assert long_title.startswith("n" * 54 + "...")
    assert long_title.endswith("| Shop")


def test_meta_description_fallback():
    assert generate_meta_description(None, "Boots") == (
        "Discover Boots. High-quality product with exceptional features and value."
    )
    assert generate_meta_description("d" * 161, "Boots") == "d" * 157 + "..."


def test_keywords_dedupe_and_cap():
    assert generate_keywords("Red Shoes red", ["shoes", "sale"]) == "red, shoes, sale"
    words = " ".join(f"w{i}" for i in range(15))
    assert len(generate_keywords(words).split(", ")) == 10


def test_canonical_url():
    assert (
        generate_canonical_url("boots", "https://shop.test/", "product")
        == "https://shop.test/product/boots"
    )


def test_structured_data_only_for_products():
    category = auto_generate_seo_fields(
        name="Football",
        slug="football",
        entity_type="category",
        base_url="https://shop.test",
    )
    assert category.structured_data is None
    assert category.canonical_url == "https://shop.test/category/football"

    product = auto_generate_seo_fields(
        name="Match Ball",
        slug="match-ball",
        entity_type="product",
        base_url="https://shop.test",
        description="Size 5 ball",
        thumbnail_url="https://cdn.test/ball.png",
        price="29.99",
    )
    data = product.structured_data.model_dump(by_alias=True, exclude_none=True)
    assert data["@context"] == "https://schema.org/"
    assert data["@type"] == "Product"
    assert data["image"] == "https://cdn.test/ball.png"
    assert data["offers"] == {"@type": "Offer", "price": "29.99", "priceCurrency": "USD"}
