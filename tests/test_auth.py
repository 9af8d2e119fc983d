import uuid

from jose import jwt
from sqlmodel import select

from app.models.user import User

PROTECTED = "/api/v1/category"


def test_health_check_is_public(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_missing_token(client):
    assert client.get(PROTECTED).status_code == 401


def test_garbage_token(client):
    r = client.get(PROTECTED, headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


def test_token_signed_with_other_secret(client):
    token = jwt.encode(
        {"sub": str(uuid.uuid4()), "email": "x@example.com"},
        "some-other-secret",
        algorithm="HS256",
    )
    r = client.get(PROTECTED, headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


def test_first_login_provisions_non_admin(client, operator_headers, session):
    r = client.get(PROTECTED, headers=operator_headers)

    assert r.status_code == 403
    user = session.exec(select(User).where(User.email == "staff@example.com")).one()
    assert user.role == "user"
    assert user.name == "staff"


def test_promoted_operator_gets_access(client, operator_headers, session):
    client.get(PROTECTED, headers=operator_headers)
    user = session.exec(select(User).where(User.email == "staff@example.com")).one()
    user.role = "admin"
    session.add(user)
    session.commit()

    assert client.get(PROTECTED, headers=operator_headers).status_code == 200


def test_admin_token(client, admin_headers, token_for):
    assert client.get(PROTECTED, headers=admin_headers).status_code == 200

    bad_sub = token_for("not-a-uuid", "admin@example.com")
    r = client.get(PROTECTED, headers={"Authorization": f"Bearer {bad_sub}"})
    assert r.status_code == 401
