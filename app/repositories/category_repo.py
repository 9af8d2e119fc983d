from sqlalchemy import func
from sqlmodel import Session, select

from app.models.category import Category, Subcategory


class CategoryRepository:
    """
    Data access layer for categories and subcategories.

    NOTE:
      - No commits here; deletes cascade over several tables.
        The service is responsible for calling session.commit().
    """

    # ----- Categories -----

    def get_by_id(self, session: Session, category_id: int) -> Category | None:
        return session.get(Category, category_id)

    def list_categories(self, session: Session) -> list[Category]:
        stmt = select(Category).order_by(Category.created_at, Category.id)
        return list(session.exec(stmt).all())

    def slugs(self, session: Session, exclude_id: int | None = None) -> list[str]:
        stmt = select(Category.slug)
        if exclude_id is not None:
            stmt = stmt.where(Category.id != exclude_id)
        return list(session.exec(stmt).all())

    def find_by_name(
        self,
        session: Session,
        name: str,
        exclude_id: int | None = None,
    ) -> Category | None:
        stmt = select(Category).where(func.lower(Category.name) == name.lower())
        if exclude_id is not None:
            stmt = stmt.where(Category.id != exclude_id)
        return session.exec(stmt).first()

    def save(self, session: Session, category: Category) -> Category:
        session.add(category)
        session.flush()
        session.refresh(category)
        return category

    def delete(self, session: Session, category: Category) -> None:
        session.delete(category)
        session.flush()

    # ----- Subcategories -----

    def get_subcategory(
        self,
        session: Session,
        subcategory_id: int,
    ) -> Subcategory | None:
        return session.get(Subcategory, subcategory_id)

    def list_subcategories(
        self,
        session: Session,
        category_id: int,
    ) -> list[Subcategory]:
        stmt = (
            select(Subcategory)
            .where(Subcategory.category_id == category_id)
            .order_by(Subcategory.created_at, Subcategory.id)
        )
        return list(session.exec(stmt).all())

    def subcategory_slugs(
        self,
        session: Session,
        category_id: int,
        exclude_id: int | None = None,
    ) -> list[str]:
        stmt = select(Subcategory.slug).where(Subcategory.category_id == category_id)
        if exclude_id is not None:
            stmt = stmt.where(Subcategory.id != exclude_id)
        return list(session.exec(stmt).all())

    def find_subcategory_by_name(
        self,
        session: Session,
        category_id: int,
        name: str,
        exclude_id: int | None = None,
    ) -> Subcategory | None:
        stmt = select(Subcategory).where(
            Subcategory.category_id == category_id,
            func.lower(Subcategory.name) == name.lower(),
        )
        if exclude_id is not None:
            stmt = stmt.where(Subcategory.id != exclude_id)
        return session.exec(stmt).first()

    def save_subcategory(
        self,
        session: Session,
        subcategory: Subcategory,
    ) -> Subcategory:
        session.add(subcategory)
        session.flush()
        session.refresh(subcategory)
        return subcategory

    def delete_subcategory(self, session: Session, subcategory: Subcategory) -> None:
        session.delete(subcategory)
        session.flush()
