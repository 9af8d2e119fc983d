import os
import uuid
from datetime import datetime, timedelta, timezone

# Settings are read once at import time; point them at throwaway values
# before anything under app/ is imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_URL"] = "https://test.supabase.co"
os.environ["SUPABASE_KEY"] = "anon-key"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service-role-key"

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.pool import StaticPool
from sqlalchemy import func
from sqlmodel import Session, SQLModel, create_engine, select

from app.core import storage_utils
from app.database import get_session
from app.main import app
from app.models.category import Category, Subcategory
from app.models.gallery import GalleryImage
from app.models.product import Product, ProductImage
from app.models.user import User

PUBLIC_PREFIX = "https://test.supabase.co/storage/v1/object/public/assets/"
ADMIN_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")
OPERATOR_ID = uuid.UUID("22222222-2222-2222-2222-222222222222")


def make_token(sub: uuid.UUID, email: str) -> str:
    claims = {
        "sub": str(sub),
        "email": email,
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
    }
    return jwt.encode(claims, os.environ["SUPABASE_JWT_SECRET"], algorithm="HS256")


class FakeBucket:
    """In-memory stand-in for a Supabase Storage bucket."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.fail_uploads = False
        # Number of uploads that succeed before every later one fails.
        self.fail_after: int | None = None

    def upload(self, path, file, file_options=None):
        if self.fail_uploads:
            raise RuntimeError("storage down")
        if self.fail_after is not None:
            if self.fail_after == 0:
                raise RuntimeError("storage down")
            self.fail_after -= 1
        self.objects[path] = file

    def get_public_url(self, path):
        return f"{PUBLIC_PREFIX}{path}"

    def remove(self, paths):
        for path in paths:
            self.objects.pop(path, None)

    def list(self, path=None, options=None):
        prefix = f"{path}/"
        limit = (options or {}).get("limit", 100)
        names = [key[len(prefix):] for key in self.objects if key.startswith(prefix)]
        return [{"name": name, "id": name} for name in names[:limit]]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def bucket(monkeypatch):
    fake = FakeBucket()
    monkeypatch.setattr(storage_utils, "_bucket", lambda: fake)
    return fake


@pytest.fixture
def client(engine, bucket):
    def get_session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(session):
    session.add(User(id=ADMIN_ID, email="admin@example.com", name="admin", role="admin"))
    session.commit()
    return {"Authorization": f"Bearer {make_token(ADMIN_ID, 'admin@example.com')}"}


@pytest.fixture
def operator_headers():
    return {"Authorization": f"Bearer {make_token(OPERATOR_ID, 'staff@example.com')}"}


@pytest.fixture
def count(session):
    """Row count of a table as currently committed."""

    def _count(model) -> int:
        session.expire_all()
        return session.exec(select(func.count()).select_from(model)).one()

    return _count


class CatalogFactory:
    """Inserts catalog rows directly, bypassing the API."""

    def __init__(self, session: Session):
        self.session = session
        self._n = 0

    def _save(self, obj):
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def category(self, name: str = "Football", slug: str | None = None) -> Category:
        return self._save(Category(name=name, slug=slug or name.lower().replace(" ", "-")))

    def subcategory(self, category: Category, name: str = "Jerseys") -> Subcategory:
        return self._save(
            Subcategory(
                name=name,
                slug=name.lower().replace(" ", "-"),
                category_id=category.id,
            )
        )

    def image(self, name: str | None = None) -> GalleryImage:
        self._n += 1
        name = name or f"img-{self._n}.png"
        return self._save(
            GalleryImage(
                image_url=f"{PUBLIC_PREFIX}product_images/{name}",
                original_name=name,
                file_size=10,
                mime_type="image/png",
            )
        )

    def product(
        self,
        subcategory: Subcategory,
        name: str | None = None,
        images: list[GalleryImage] = (),
        is_active: bool = True,
        thumbnail: GalleryImage | None = None,
    ) -> Product:
        self._n += 1
        name = name or f"Product {self._n}"
        product = self._save(
            Product(
                name=name,
                slug=name.lower().replace(" ", "-"),
                description=f"{name} description",
                whatsapp_number="+10000000000",
                subcategory_id=subcategory.id,
                is_active=is_active,
                thumbnail_id=thumbnail.id if thumbnail else None,
            )
        )
        for order, image in enumerate(images):
            self.session.add(
                ProductImage(product_id=product.id, image_id=image.id, display_order=order)
            )
        self.session.commit()
        self.session.refresh(product)
        return product


@pytest.fixture
def factory(session):
    return CatalogFactory(session)


@pytest.fixture
def token_for():
    return make_token
