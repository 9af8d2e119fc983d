from app.models.category import Subcategory
from app.models.gallery import GalleryImage
from app.models.product import Product, ProductImage

API = "/api/v1/subcategories"


def test_create_subcategory(client, admin_headers, factory):
    category_id = factory.category("Running Gear").id

    r = client.post(
        API,
        json={"name": "Trail Shoes", "category_id": category_id},
        headers=admin_headers,
    )

    assert r.status_code == 201
    body = r.json()
    assert body["slug"] == "trail-shoes"
    assert body["category_id"] == category_id
    assert body["keywords"] == "trail, shoes, running, gear"
    assert body["canonical_url"] == "https://yourwebsite.com/subcategory/trail-shoes"


def test_create_subcategory_unknown_category(client, admin_headers, count):
    r = client.post(
        API,
        json={"name": "Orphans", "category_id": 999},
        headers=admin_headers,
    )
    assert r.status_code == 404
    assert r.json()["detail"] == "Specified category does not exist"
    assert count(Subcategory) == 0


def test_same_name_allowed_in_different_categories(client, admin_headers, factory):
    first = factory.category("Football").id
    second = factory.category("Tennis").id

    for category_id in (first, second):
        r = client.post(
            API,
            json={"name": "Accessories", "category_id": category_id},
            headers=admin_headers,
        )
        assert r.status_code == 201
        assert r.json()["slug"] == "accessories"

    r = client.post(
        API,
        json={"name": "ACCESSORIES", "category_id": first},
        headers=admin_headers,
    )
    assert r.status_code == 409


def test_list_subcategories(client, admin_headers, factory):
    category = factory.category("Football")
    factory.subcategory(category, "Jerseys")
    factory.subcategory(category, "Boots")
    factory.subcategory(factory.category("Tennis"), "Rackets")

    r = client.get(f"{API}/{category.id}", headers=admin_headers)

    assert r.status_code == 200
    assert sorted(s["name"] for s in r.json()) == ["Boots", "Jerseys"]
    assert client.get(f"{API}/999", headers=admin_headers).status_code == 404


def test_move_subcategory_to_another_category(client, admin_headers, factory):
    football = factory.category("Football")
    tennis_id = factory.category("Tennis").id
    factory.subcategory(factory.category("Golf"), "Bags")
    bags_id = factory.subcategory(football, "Bags").id

    r = client.patch(
        f"{API}/{bags_id}",
        json={"category_id": tennis_id},
        headers=admin_headers,
    )
    assert r.status_code == 200
    assert r.json()["category_id"] == tennis_id
    assert r.json()["slug"] == "bags"

    r = client.patch(
        f"{API}/{bags_id}",
        json={"category_id": 12345},
        headers=admin_headers,
    )
    assert r.status_code == 404


def test_rename_and_move_refresh_generated_keywords(client, admin_headers, factory):
    running_id = factory.category("Running Gear").id
    hiking_id = factory.category("Hiking").id
    sub_id = client.post(
        API,
        json={"name": "Trail Shoes", "category_id": running_id},
        headers=admin_headers,
    ).json()["id"]

    r = client.patch(
        f"{API}/{sub_id}",
        json={"name": "Trail Boots", "category_id": hiking_id},
        headers=admin_headers,
    )

    assert r.status_code == 200
    body = r.json()
    assert body["slug"] == "trail-boots"
    assert body["meta_title"] == "Trail Boots | Sports Apparel"
    assert body["keywords"] == "trail, boots, hiking"


def test_delete_subcategory_cascades(client, admin_headers, factory, count):
    category = factory.category("Football")
    sub = factory.subcategory(category, "Jerseys")
    image = factory.image()
    for _ in range(2):
        factory.product(sub, images=[image])
    sub_id = sub.id

    r = client.delete(f"{API}/{sub_id}", headers=admin_headers)

    assert r.status_code == 200
    assert r.json()["deleted"] == {"products": 2, "product_images": 2}
    assert count(Subcategory) == 0
    assert count(Product) == 0
    assert count(ProductImage) == 0
    assert count(GalleryImage) == 1
