from sqlalchemy import delete, func
from sqlmodel import Session, SQLModel, select

from app.models.category import Category, Subcategory
from app.models.contact import ContactMessage
from app.models.gallery import GalleryImage
from app.models.product import Product, ProductImage

# Children before parents, so foreign keys never dangle mid-reset.
CATALOG_TABLES_IN_DELETE_ORDER: tuple[type[SQLModel], ...] = (
    ProductImage,
    Product,
    GalleryImage,
    Subcategory,
    Category,
)


class DashboardRepository:
    """
    Aggregate counts for the admin dashboard, plus the catalog wipe.
    """

    def _count(self, session: Session, model: type[SQLModel]) -> int:
        # SQLModel's Session.exec() -> ScalarResult -> use .one()
        value = session.exec(select(func.count()).select_from(model)).one()
        return int(value or 0)

    def count_products(self, session: Session) -> int:
        return self._count(session, Product)

    def count_messages(self, session: Session) -> int:
        return self._count(session, ContactMessage)

    def count_categories(self, session: Session) -> int:
        return self._count(session, Category)

    def count_subcategories(self, session: Session) -> int:
        return self._count(session, Subcategory)

    def count_images(self, session: Session) -> int:
        return self._count(session, GalleryImage)

    def wipe_catalog(self, session: Session) -> dict[str, int]:
        """
        Delete every catalog row (no commit). Returns rows removed per table.
        """
        removed: dict[str, int] = {}
        for model in CATALOG_TABLES_IN_DELETE_ORDER:
            result = session.execute(delete(model))
            removed[model.__tablename__] = result.rowcount or 0
        session.flush()
        return removed
