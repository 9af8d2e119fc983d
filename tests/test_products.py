import uuid

from sqlalchemy.exc import OperationalError
from sqlmodel import select

from app.models.gallery import GalleryImage
from app.models.product import Product, ProductImage
from app.routers import products as products_router

API = "/api/v1/products"


def product_payload(subcategory_id: int, **overrides) -> dict:
    payload = {
        "name": "Match Ball",
        "description": "Official size 5 match ball",
        "whatsapp_number": "+15550000000",
        "subcategory_id": subcategory_id,
    }
    payload.update(overrides)
    return payload


def test_create_product_with_images(client, admin_headers, factory):
    sub_id = factory.subcategory(factory.category("Football"), "Balls").id
    first, second, thumb = (factory.image().id for _ in range(3))

    r = client.post(
        API,
        json=product_payload(
            sub_id,
            price="29.99",
            thumbnail_id=thumb,
            details={"Size": "5", "Material": "PU"},
            images=[
                {"image_id": second, "display_order": 3},
                {"image_id": first, "display_order": 0},
            ],
        ),
        headers=admin_headers,
    )

    assert r.status_code == 201
    body = r.json()
    assert body["slug"] == "match-ball"
    assert body["keywords"] == "match, ball, balls"
    assert body["canonical_url"] == "https://yourwebsite.com/product/match-ball"
    assert body["details"] == {"Size": "5", "Material": "PU"}
    data = body["structured_data"]
    assert data["@type"] == "Product"
    assert data["image"].endswith(".png")
    assert data["offers"]["price"] == "29.99"

    detail = client.get(f"{API}/{body['id']}", headers=admin_headers).json()
    assert [(i["id"], i["display_order"]) for i in detail["images"]] == [(first, 0), (second, 1)]
    assert detail["thumbnail"]["id"] == thumb


def test_duplicate_product_names_get_suffixed_slugs(client, admin_headers, factory):
    sub_id = factory.subcategory(factory.category("Football"), "Balls").id

    slugs = [
        client.post(API, json=product_payload(sub_id), headers=admin_headers).json()["slug"]
        for _ in range(3)
    ]

    assert slugs == ["match-ball", "match-ball-1", "match-ball-2"]


def test_create_product_unknown_references(client, admin_headers, factory, count):
    sub_id = factory.subcategory(factory.category("Football"), "Balls").id

    r = client.post(API, json=product_payload(999), headers=admin_headers)
    assert r.status_code == 404

    r = client.post(
        API,
        json=product_payload(sub_id, images=[{"image_id": 404}]),
        headers=admin_headers,
    )
    assert r.status_code == 404
    assert count(Product) == 0


def test_list_products_paginates_active_only(client, admin_headers, factory):
    football = factory.category("Football")
    tennis = factory.category("Tennis")
    balls = factory.subcategory(football, "Balls")
    rackets = factory.subcategory(tennis, "Rackets")
    factory.product(balls, "Match Ball")
    factory.product(balls, "Training Ball")
    factory.product(balls, "Old Ball", is_active=False)
    factory.product(rackets, "Pro Racket")

    r = client.get(API, params={"limit": 2}, headers=admin_headers)
    assert r.status_code == 200
    body = r.json()
    assert len(body["products"]) == 2
    assert body["pagination"] == {
        "current_page": 1,
        "page_size": 2,
        "total_products": 3,
        "total_pages": 2,
        "has_next_page": True,
        "has_previous_page": False,
    }
    assert body["summary"]["total_active_products"] == 3
    counts = {c["slug"]: c["product_count"] for c in body["summary"]["categories"]}
    assert counts == {"football": 2, "tennis": 1}
    assert body["seo_metadata"]["canonical_url"] == "https://yourwebsite.com/products"

    r = client.get(API, params={"category": "football"}, headers=admin_headers)
    names = sorted(p["name"] for p in r.json()["products"])
    assert names == ["Match Ball", "Training Ball"]
    assert r.json()["products"][0]["category"]["slug"] == "football"

    r = client.get(API, params={"search": "racket"}, headers=admin_headers)
    assert [p["name"] for p in r.json()["products"]] == ["Pro Racket"]

    r = client.get(API, params={"only_active": "false"}, headers=admin_headers)
    assert r.json()["pagination"]["total_products"] == 4


def test_search_treats_wildcards_literally(client, admin_headers, factory):
    sub = factory.subcategory(factory.category("Football"), "Jerseys")
    factory.product(sub, "100% Cotton Jersey")
    factory.product(sub, "1000 Thread Jersey")
    factory.product(sub, "Kit_2")
    factory.product(sub, "Kit12")

    r = client.get(API, params={"search": "100%"}, headers=admin_headers)
    assert [p["name"] for p in r.json()["products"]] == ["100% Cotton Jersey"]

    r = client.get(API, params={"search": "t_2"}, headers=admin_headers)
    assert [p["name"] for p in r.json()["products"]] == ["Kit_2"]


def test_list_products_rejects_bad_paging(client, admin_headers):
    assert client.get(API, params={"page": 0}, headers=admin_headers).status_code == 422
    assert client.get(API, params={"limit": 101}, headers=admin_headers).status_code == 422


def test_inactive_product_detail_hidden_by_default(client, admin_headers, factory):
    sub = factory.subcategory(factory.category("Football"), "Balls")
    product_id = factory.product(sub, is_active=False).id

    assert client.get(f"{API}/{product_id}", headers=admin_headers).status_code == 404
    r = client.get(
        f"{API}/{product_id}",
        params={"include_inactive": "true"},
        headers=admin_headers,
    )
    assert r.status_code == 200
    assert client.get(f"{API}/{uuid.uuid4()}", headers=admin_headers).status_code == 404


def test_update_replaces_image_set(client, admin_headers, factory, session):
    sub = factory.subcategory(factory.category("Football"), "Balls")
    a, b, c = (factory.image() for _ in range(3))
    a_id, b_id, c_id = a.id, b.id, c.id
    product_id = factory.product(sub, "Match Ball", images=[a, b]).id

    r = client.put(
        f"{API}/{product_id}",
        json={"images": [{"image_id": c_id}, {"image_id": a_id}]},
        headers=admin_headers,
    )
    assert r.status_code == 200
    assert [(i["id"], i["display_order"]) for i in r.json()["images"]] == [(c_id, 0), (a_id, 1)]

    # Omitting images leaves the set untouched
    r = client.put(
        f"{API}/{product_id}",
        json={"name": "Match Ball Pro", "min_order": "10 pieces"},
        headers=admin_headers,
    )
    body = r.json()
    assert body["slug"] == "match-ball-pro"
    assert body["min_order"] == "10 pieces"
    assert [i["id"] for i in body["images"]] == [c_id, a_id]

    r = client.put(f"{API}/{product_id}", json={"images": []}, headers=admin_headers)
    assert r.json()["images"] == []

    session.expire_all()
    links = session.exec(select(ProductImage).where(ProductImage.product_id == product_id)).all()
    assert links == []
    assert session.get(GalleryImage, b_id) is not None


def test_update_failure_rolls_back_fields_and_images(
    client, admin_headers, factory, session, monkeypatch
):
    sub = factory.subcategory(factory.category("Football"), "Balls")
    a, b, c = (factory.image() for _ in range(3))
    a_id, b_id, c_id = a.id, b.id, c.id
    product_id = factory.product(sub, "Match Ball", images=[a, b]).id

    def lose_connection(session, links):
        raise OperationalError("INSERT INTO product_images", {}, Exception("connection lost"))

    monkeypatch.setattr(products_router.service.repo, "add_links", lose_connection)

    r = client.put(
        f"{API}/{product_id}",
        json={"name": "Match Ball Pro", "images": [{"image_id": c_id}]},
        headers=admin_headers,
    )

    assert r.status_code == 503
    session.expire_all()
    product = session.get(Product, product_id)
    assert (product.name, product.slug) == ("Match Ball", "match-ball")
    links = session.exec(
        select(ProductImage)
        .where(ProductImage.product_id == product_id)
        .order_by(ProductImage.display_order)
    ).all()
    assert [(link.image_id, link.display_order) for link in links] == [(a_id, 0), (b_id, 1)]


def test_update_keeps_own_slug_on_same_name(client, admin_headers, factory):
    sub = factory.subcategory(factory.category("Football"), "Balls")
    product_id = factory.product(sub, "Match Ball").id

    r = client.put(
        f"{API}/{product_id}",
        json={"name": "Match Ball", "is_active": False},
        headers=admin_headers,
    )
    assert r.status_code == 200
    assert r.json()["slug"] == "match-ball"
    assert r.json()["is_active"] is False


def test_delete_product_keeps_gallery(client, admin_headers, factory, count):
    sub = factory.subcategory(factory.category("Football"), "Balls")
    images = [factory.image(), factory.image()]
    product_id = factory.product(sub, images=images).id

    r = client.delete(f"{API}/{product_id}", headers=admin_headers)

    assert r.status_code == 200
    assert count(Product) == 0
    assert count(ProductImage) == 0
    assert count(GalleryImage) == 2
    assert client.delete(f"{API}/{product_id}", headers=admin_headers).status_code == 404


def test_add_product_images_appends(client, admin_headers, factory):
    sub = factory.subcategory(factory.category("Football"), "Balls")
    a, b, c = (factory.image() for _ in range(3))
    a_id, b_id, c_id = a.id, b.id, c.id
    product_id = str(factory.product(sub, images=[a]).id)

    r = client.post(
        "/api/v1/productImages",
        json={"product_id": product_id, "gallery_ids": [b_id, c_id]},
        headers=admin_headers,
    )
    assert r.status_code == 200
    assert [(x["image_id"], x["display_order"]) for x in r.json()["associations"]] == [
        (b_id, 1),
        (c_id, 2),
    ]

    r = client.post(
        "/api/v1/productImages",
        json={"product_id": product_id, "gallery_ids": [a_id]},
        headers=admin_headers,
    )
    assert r.status_code == 409

    r = client.post(
        "/api/v1/productImages",
        json={"product_id": product_id, "gallery_ids": [9999]},
        headers=admin_headers,
    )
    assert r.status_code == 404

    r = client.post(
        "/api/v1/productImages",
        json={"product_id": product_id, "gallery_ids": []},
        headers=admin_headers,
    )
    assert r.status_code == 422
