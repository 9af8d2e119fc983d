import uuid

from sqlalchemy import and_, delete, func, or_
from sqlmodel import Session, select

from app.models.category import Category, Subcategory
from app.models.gallery import GalleryImage
from app.models.product import Product, ProductImage


def _escape_like(text: str) -> str:
    """Make `%` and `_` match literally in a LIKE pattern."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ProductRepository:
    """
    Data access layer for Product & ProductImage.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic, no commits: product writes go
      together with their image links, so the service commits once.
    """

    # ----- Products -----

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def slugs(
        self,
        session: Session,
        exclude_id: uuid.UUID | None = None,
    ) -> list[str]:
        stmt = select(Product.slug)
        if exclude_id is not None:
            stmt = stmt.where(Product.id != exclude_id)
        return list(session.exec(stmt).all())

    def list_for_subcategory(
        self,
        session: Session,
        subcategory_id: int,
    ) -> list[Product]:
        stmt = select(Product).where(Product.subcategory_id == subcategory_id)
        return list(session.exec(stmt).all())

    def save(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.flush()
        session.refresh(product)
        return product

    def delete(self, session: Session, product: Product) -> None:
        session.delete(product)
        session.flush()

    # ----- Listing -----

    @staticmethod
    def _filtered(
        stmt,
        only_active: bool,
        category_slug: str | None,
        subcategory_slug: str | None,
        search: str | None,
    ):
        stmt = (
            stmt.outerjoin(Subcategory, Product.subcategory_id == Subcategory.id)
            .outerjoin(Category, Subcategory.category_id == Category.id)
        )
        if only_active:
            stmt = stmt.where(Product.is_active == True)  # noqa: E712
        if category_slug:
            stmt = stmt.where(Category.slug == category_slug)
        if subcategory_slug:
            stmt = stmt.where(Subcategory.slug == subcategory_slug)
        if search:
            pattern = f"%{_escape_like(search)}%"
            stmt = stmt.where(
                or_(
                    Product.name.ilike(pattern, escape="\\"),
                    Product.description.ilike(pattern, escape="\\"),
                )
            )
        return stmt

    def count_listing(
        self,
        session: Session,
        only_active: bool = True,
        category_slug: str | None = None,
        subcategory_slug: str | None = None,
        search: str | None = None,
    ) -> int:
        stmt = self._filtered(
            select(func.count(Product.id)).select_from(Product),
            only_active,
            category_slug,
            subcategory_slug,
            search,
        )
        return int(session.exec(stmt).one() or 0)

    def list_with_relations(
        self,
        session: Session,
        offset: int = 0,
        limit: int = 10,
        only_active: bool = True,
        category_slug: str | None = None,
        subcategory_slug: str | None = None,
        search: str | None = None,
    ) -> list[tuple[Product, Subcategory | None, Category | None, GalleryImage | None]]:
        """
        Newest products first, each with its subcategory, category and
        thumbnail (any of which may be None).
        """
        stmt = self._filtered(
            select(Product, Subcategory, Category, GalleryImage),
            only_active,
            category_slug,
            subcategory_slug,
            search,
        )
        stmt = (
            stmt.outerjoin(GalleryImage, Product.thumbnail_id == GalleryImage.id)
            .order_by(Product.created_at.desc(), Product.id)
            .offset(offset)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def active_counts_by_category(self, session: Session) -> list[tuple]:
        """
        (category id, name, slug, active product count) for every category.
        """
        stmt = (
            select(Category.id, Category.name, Category.slug, func.count(Product.id))
            .select_from(Category)
            .outerjoin(Subcategory, Subcategory.category_id == Category.id)
            .outerjoin(
                Product,
                and_(
                    Product.subcategory_id == Subcategory.id,
                    Product.is_active == True,  # noqa: E712
                ),
            )
            .group_by(Category.id, Category.name, Category.slug)
            .order_by(Category.id)
        )
        return list(session.exec(stmt).all())

    # ----- Product images -----

    def list_images_for_product(
        self,
        session: Session,
        product_id: uuid.UUID,
    ) -> list[tuple[ProductImage, GalleryImage]]:
        stmt = (
            select(ProductImage, GalleryImage)
            .join(GalleryImage, ProductImage.image_id == GalleryImage.id)
            .where(ProductImage.product_id == product_id)
            .order_by(ProductImage.display_order)
        )
        return list(session.exec(stmt).all())

    def list_links(self, session: Session, product_id: uuid.UUID) -> list[ProductImage]:
        stmt = (
            select(ProductImage)
            .where(ProductImage.product_id == product_id)
            .order_by(ProductImage.display_order)
        )
        return list(session.exec(stmt).all())

    def list_links_for_images(
        self,
        session: Session,
        image_ids: list[int],
    ) -> list[ProductImage]:
        stmt = select(ProductImage).where(ProductImage.image_id.in_(image_ids))
        return list(session.exec(stmt).all())

    def delete_links(self, session: Session, product_id: uuid.UUID) -> int:
        """
        Remove every image link of a product. Returns the number removed.
        """
        result = session.execute(
            delete(ProductImage).where(ProductImage.product_id == product_id)
        )
        session.flush()
        return result.rowcount or 0

    def add_links(self, session: Session, links: list[ProductImage]) -> list[ProductImage]:
        session.add_all(links)
        session.flush()
        return links

    def products_with_thumbnails(
        self,
        session: Session,
        image_ids: list[int],
    ) -> list[Product]:
        stmt = select(Product).where(Product.thumbnail_id.in_(image_ids))
        return list(session.exec(stmt).all())
