from sqlalchemy.exc import OperationalError

from app.models.category import Category, Subcategory
from app.models.gallery import GalleryImage
from app.models.product import Product, ProductImage
from app.routers import categories as categories_router

API = "/api/v1/category"


def test_create_category_generates_slug_and_seo(client, admin_headers):
    r = client.post(
        API,
        json={"name": "Running Shoes", "description": "Shoes for every distance"},
        headers=admin_headers,
    )
    assert r.status_code == 201
    body = r.json()
    assert body["slug"] == "running-shoes"
    assert body["meta_title"] == "Running Shoes | Sports Apparel"
    assert body["meta_description"] == "Shoes for every distance"
    assert body["keywords"] == "running, shoes"
    assert body["canonical_url"] == "https://yourwebsite.com/category/running-shoes"


def test_create_category_duplicate_name_conflicts(client, admin_headers):
    client.post(API, json={"name": "Football"}, headers=admin_headers)
    r = client.post(API, json={"name": "football"}, headers=admin_headers)
    assert r.status_code == 409


def test_create_category_symbols_only_name_rejected(client, admin_headers, count):
    r = client.post(API, json={"name": "!!!"}, headers=admin_headers)
    assert r.status_code == 400
    assert count(Category) == 0


def test_create_category_blank_name_is_validation_error(client, admin_headers):
    r = client.post(API, json={"name": "   "}, headers=admin_headers)
    assert r.status_code == 422


def test_list_and_get_category(client, admin_headers, factory):
    first = factory.category("Football").id
    factory.category("Tennis")

    r = client.get(API, headers=admin_headers)
    assert r.status_code == 200
    assert [c["name"] for c in r.json()] == ["Football", "Tennis"]

    assert client.get(f"{API}/{first}", headers=admin_headers).json()["slug"] == "football"
    assert client.get(f"{API}/9999", headers=admin_headers).status_code == 404


def test_rename_category_recomputes_slug(client, admin_headers, factory):
    category_id = factory.category("Football").id

    r = client.patch(
        f"{API}/{category_id}",
        json={"name": "Soccer Gear"},
        headers=admin_headers,
    )
    assert r.status_code == 200
    body = r.json()
    assert body["slug"] == "soccer-gear"
    assert body["canonical_url"].endswith("/category/soccer-gear")


def test_rename_category_refreshes_generated_seo_only(client, admin_headers):
    generated = client.post(API, json={"name": "Football"}, headers=admin_headers).json()
    custom = client.post(
        API,
        json={"name": "Tennis", "meta_title": "Tennis Rackets & Balls", "keywords": "tennis, rackets"},
        headers=admin_headers,
    ).json()

    body = client.patch(
        f"{API}/{generated['id']}", json={"name": "Soccer Gear"}, headers=admin_headers
    ).json()
    assert body["meta_title"] == "Soccer Gear | Sports Apparel"
    assert body["keywords"] == "soccer, gear"

    body = client.patch(
        f"{API}/{custom['id']}", json={"name": "Padel"}, headers=admin_headers
    ).json()
    assert body["meta_title"] == "Tennis Rackets & Balls"
    assert body["keywords"] == "tennis, rackets"


def test_delete_category_cascades_but_keeps_gallery(client, admin_headers, factory, count):
    category = factory.category("Football")
    other = factory.subcategory(factory.category("Tennis"), "Rackets")
    kept_product = factory.product(other, "Pro Racket")
    category_id = category.id
    kept_product_id = kept_product.id

    images = [factory.image() for _ in range(3)]
    for sub_name in ("Jerseys", "Boots"):
        sub = factory.subcategory(category, sub_name)
        for _ in range(3):
            factory.product(sub, images=images[:2], thumbnail=images[2])

    assert count(Product) == 7
    assert count(ProductImage) == 12

    r = client.delete(f"{API}/{category_id}", headers=admin_headers)

    assert r.status_code == 200
    assert r.json()["deleted"] == {"subcategories": 2, "products": 6, "product_images": 12}
    assert count(Category) == 1
    assert count(Subcategory) == 1
    assert count(Product) == 1
    assert count(ProductImage) == 0
    assert count(GalleryImage) == 3
    assert client.get(f"/api/v1/products/{kept_product_id}", headers=admin_headers).status_code == 200


def test_delete_category_failure_rolls_back(client, admin_headers, factory, count, monkeypatch):
    category = factory.category("Football")
    image = factory.image()
    for sub_name in ("Jerseys", "Boots"):
        sub = factory.subcategory(category, sub_name)
        factory.product(sub, images=[image])
    category_id = category.id

    def lose_connection(session, category):
        raise OperationalError("DELETE FROM categories", {}, Exception("connection lost"))

    monkeypatch.setattr(categories_router.service.repo, "delete", lose_connection)

    r = client.delete(f"{API}/{category_id}", headers=admin_headers)

    assert r.status_code == 503
    assert count(Category) == 1
    assert count(Subcategory) == 2
    assert count(Product) == 2
    assert count(ProductImage) == 2


def test_delete_missing_category(client, admin_headers):
    assert client.delete(f"{API}/42", headers=admin_headers).status_code == 404
