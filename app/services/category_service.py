import logging

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.config import get_settings
from app.core.seo import (
    auto_generate_seo_fields,
    generate_canonical_url,
    generate_keywords,
    generate_meta_title,
)
from app.database import atomic
from app.models.category import Category, Subcategory
from app.repositories.category_repo import CategoryRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.category import (
    CategoryCreate,
    CategoryUpdate,
    SubcategoryCreate,
    SubcategoryUpdate,
)
from app.services.slugs import assign_slug

settings = get_settings()
logger = logging.getLogger(__name__)


def _words(name: str) -> list[str]:
    return [w.lower() for w in name.split()]


def _refresh_seo(entity, old_name: str, old_extra=(), new_extra=()) -> None:
    """
    Regenerate meta title and keywords after a rename or move.

    Only values still equal to what would have been generated from the old
    name are replaced; operator-written ones stay.
    """
    suffix = settings.SEO_TITLE_SUFFIX
    if entity.meta_title == generate_meta_title(old_name, suffix):
        entity.meta_title = generate_meta_title(entity.name, suffix)
    if entity.keywords == generate_keywords(old_name, old_extra):
        entity.keywords = generate_keywords(entity.name, new_extra)


class CategoryService:
    """
    Business logic for the two upper levels of the catalog tree.

    Responsibilities:
      - name uniqueness (global for categories, per category for
        subcategories) and slug assignment
      - SEO metadata on creation, refreshed on rename
      - cascading deletes down to products and their image links
        (gallery images are never touched)
    """

    def __init__(self, repo: CategoryRepository, product_repo: ProductRepository):
        self.repo = repo
        self.product_repo = product_repo

    # ----- Categories -----

    def list_categories(self, session: Session) -> list[Category]:
        return self.repo.list_categories(session)

    def get_category(self, session: Session, category_id: int) -> Category:
        category = self.repo.get_by_id(session, category_id)
        if not category:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Category not found",
            )
        return category

    def create_category(self, session: Session, payload: CategoryCreate) -> Category:
        """
        Create a category with a unique slug and generated SEO fields.

        - 409 if a category with the same name (case-insensitive) exists.
        - 400 if the name has nothing to build a slug from.
        """
        if self.repo.find_by_name(session, payload.name):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A category with this name already exists",
            )

        slug = assign_slug(payload.name, self.repo.slugs(session))
        seo = auto_generate_seo_fields(
            name=payload.name,
            slug=slug,
            entity_type="category",
            base_url=settings.SITE_BASE_URL,
            description=payload.description,
            title_suffix=settings.SEO_TITLE_SUFFIX,
        )

        category = Category(
            name=payload.name,
            slug=slug,
            description=payload.description or None,
            image=payload.image or None,
            meta_title=payload.meta_title or seo.meta_title,
            meta_description=payload.meta_description or seo.meta_description,
            keywords=payload.keywords or seo.keywords,
            canonical_url=payload.canonical_url or seo.canonical_url,
        )
        with atomic(session):
            self.repo.save(session, category)
        session.refresh(category)
        return category

    def update_category(
        self,
        session: Session,
        category_id: int,
        payload: CategoryUpdate,
    ) -> Category:
        """
        Partial update. Renaming recomputes the slug and canonical URL, and
        refreshes generated meta title and keywords.
        """
        category = self.get_category(session, category_id)

        if payload.name is not None and payload.name != category.name:
            if self.repo.find_by_name(session, payload.name, exclude_id=category.id):
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="A category with this name already exists",
                )
            old_name = category.name
            category.name = payload.name
            _refresh_seo(category, old_name)
            category.slug = assign_slug(
                payload.name, self.repo.slugs(session, exclude_id=category.id)
            )
            category.canonical_url = generate_canonical_url(
                category.slug, settings.SITE_BASE_URL, "category"
            )

        if payload.description is not None:
            category.description = payload.description

        if payload.image is not None:
            category.image = payload.image

        with atomic(session):
            self.repo.save(session, category)
        session.refresh(category)
        return category

    def delete_category(self, session: Session, category_id: int) -> dict[str, int]:
        """
        Delete a category with all of its subcategories, their products and
        the products' image links, in one transaction.

        Returns:
            Number of rows removed per level.
        """
        category = self.get_category(session, category_id)
        removed = {"subcategories": 0, "products": 0, "product_images": 0}

        with atomic(session):
            for subcategory in self.repo.list_subcategories(session, category.id):
                counts = self._purge_subcategory(session, subcategory)
                removed["subcategories"] += 1
                removed["products"] += counts["products"]
                removed["product_images"] += counts["product_images"]
            self.repo.delete(session, category)

        logger.info(
            "Deleted category %s (%d subcategories, %d products, %d image links)",
            category_id,
            removed["subcategories"],
            removed["products"],
            removed["product_images"],
        )
        return removed

    # ----- Subcategories -----

    def get_subcategory(self, session: Session, subcategory_id: int) -> Subcategory:
        subcategory = self.repo.get_subcategory(session, subcategory_id)
        if not subcategory:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Subcategory not found",
            )
        return subcategory

    def list_subcategories(self, session: Session, category_id: int) -> list[Subcategory]:
        self.get_category(session, category_id)
        return self.repo.list_subcategories(session, category_id)

    def create_subcategory(
        self,
        session: Session,
        payload: SubcategoryCreate,
    ) -> Subcategory:
        """
        Create a subcategory under an existing category.

        - 404 (and nothing inserted) if the category does not exist.
        - 409 if the category already has a subcategory with this name.
        """
        category = self.repo.get_by_id(session, payload.category_id)
        if not category:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Specified category does not exist",
            )

        if self.repo.find_subcategory_by_name(session, category.id, payload.name):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A subcategory with this name already exists in the category",
            )

        slug = assign_slug(payload.name, self.repo.subcategory_slugs(session, category.id))
        seo = auto_generate_seo_fields(
            name=payload.name,
            slug=slug,
            entity_type="subcategory",
            base_url=settings.SITE_BASE_URL,
            description=payload.description,
            additional_keywords=_words(category.name),
            title_suffix=settings.SEO_TITLE_SUFFIX,
        )

        subcategory = Subcategory(
            name=payload.name,
            slug=slug,
            description=payload.description or None,
            image=payload.image or None,
            category_id=category.id,
            meta_title=payload.meta_title or seo.meta_title,
            meta_description=payload.meta_description or seo.meta_description,
            keywords=payload.keywords or seo.keywords,
            canonical_url=payload.canonical_url or seo.canonical_url,
        )
        with atomic(session):
            self.repo.save_subcategory(session, subcategory)
        session.refresh(subcategory)
        return subcategory

    def update_subcategory(
        self,
        session: Session,
        subcategory_id: int,
        payload: SubcategoryUpdate,
    ) -> Subcategory:
        """
        Partial update.

        - `category_id` moves the subcategory (404 if the target is missing).
        - The slug is recomputed on rename; on a plain move it is only
          suffixed if it collides inside the new category.
        """
        subcategory = self.get_subcategory(session, subcategory_id)

        target_category_id = subcategory.category_id
        if payload.category_id is not None and payload.category_id != subcategory.category_id:
            if not self.repo.get_by_id(session, payload.category_id):
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Specified category does not exist",
                )
            target_category_id = payload.category_id

        new_name = payload.name if payload.name is not None else subcategory.name
        renamed = new_name != subcategory.name
        moved = target_category_id != subcategory.category_id

        if renamed or moved:
            if self.repo.find_subcategory_by_name(
                session, target_category_id, new_name, exclude_id=subcategory.id
            ):
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="A subcategory with this name already exists in the category",
                )
            taken = self.repo.subcategory_slugs(
                session, target_category_id, exclude_id=subcategory.id
            )
            if renamed:
                subcategory.slug = assign_slug(new_name, taken)
            elif subcategory.slug in taken:
                subcategory.slug = assign_slug(subcategory.slug, taken)
            old_name = subcategory.name
            old_category = self.repo.get_by_id(session, subcategory.category_id)
            new_category = self.repo.get_by_id(session, target_category_id)
            subcategory.name = new_name
            subcategory.category_id = target_category_id
            _refresh_seo(
                subcategory,
                old_name,
                _words(old_category.name),
                _words(new_category.name),
            )
            subcategory.canonical_url = generate_canonical_url(
                subcategory.slug, settings.SITE_BASE_URL, "subcategory"
            )

        if payload.description is not None:
            subcategory.description = payload.description

        if payload.image is not None:
            subcategory.image = payload.image

        with atomic(session):
            self.repo.save_subcategory(session, subcategory)
        session.refresh(subcategory)
        return subcategory

    def delete_subcategory(self, session: Session, subcategory_id: int) -> dict[str, int]:
        """
        Delete a subcategory with its products and their image links,
        in one transaction.
        """
        subcategory = self.get_subcategory(session, subcategory_id)
        with atomic(session):
            removed = self._purge_subcategory(session, subcategory)

        logger.info(
            "Deleted subcategory %s (%d products, %d image links)",
            subcategory_id,
            removed["products"],
            removed["product_images"],
        )
        return removed

    # ----- Helpers -----

    def _purge_subcategory(self, session: Session, subcategory: Subcategory) -> dict[str, int]:
        """
        Remove a subcategory and everything below it. Caller commits.
        """
        removed = {"products": 0, "product_images": 0}
        for product in self.product_repo.list_for_subcategory(session, subcategory.id):
            removed["product_images"] += self.product_repo.delete_links(session, product.id)
            self.product_repo.delete(session, product)
            removed["products"] += 1
        self.repo.delete_subcategory(session, subcategory)
        return removed
