import logging
import math
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.config import get_settings
from app.core.image_set import ImageSet
from app.core.seo import auto_generate_seo_fields, generate_canonical_url
from app.database import atomic
from app.models.product import Product, ProductImage
from app.repositories.category_repo import CategoryRepository
from app.repositories.gallery_repo import GalleryRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.gallery import GalleryImageRead
from app.schemas.product import (
    CategoryRef,
    CategorySummary,
    ListingSeo,
    Pagination,
    ProductCreate,
    ProductDetail,
    ProductImageLink,
    ProductImageRead,
    ProductImagesCreate,
    ProductImagesResult,
    ProductListItem,
    ProductListResponse,
    ProductSummary,
    ProductUpdate,
    ThumbnailRead,
)
from app.services.slugs import assign_slug

settings = get_settings()
logger = logging.getLogger(__name__)

LISTING_DESCRIPTION = (
    "Explore our wide range of high-quality products across various categories."
)


class ProductService:
    """
    Business logic for products and their ordered gallery images.

    Responsibilities:
      - reference checks (subcategory, thumbnail, gallery images)
      - slug generation & global uniqueness
      - SEO metadata + structured data on creation
      - image set replacement in the same transaction as the update
      - delete cascade to image links (gallery rows stay)
    """

    def __init__(
        self,
        repo: ProductRepository,
        category_repo: CategoryRepository,
        gallery_repo: GalleryRepository,
    ):
        self.repo = repo
        self.category_repo = category_repo
        self.gallery_repo = gallery_repo

    # ----- Lookups -----

    def get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    def _require_subcategory(self, session: Session, subcategory_id: int):
        subcategory = self.category_repo.get_subcategory(session, subcategory_id)
        if not subcategory:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Subcategory not found",
            )
        return subcategory

    def _require_thumbnail(self, session: Session, image_id: int):
        image = self.gallery_repo.get_by_id(session, image_id)
        if not image:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Thumbnail image not found",
            )
        return image

    def _require_gallery_images(self, session: Session, image_ids: list[int]) -> None:
        found = {img.id for img in self.gallery_repo.get_many(session, image_ids)}
        if found != set(image_ids):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="One or more gallery images not found",
            )

    # ----- Listing -----

    def list_products(
        self,
        session: Session,
        page: int = 1,
        limit: int = 10,
        only_active: bool = True,
        category: str | None = None,
        subcategory: str | None = None,
        search: str | None = None,
    ) -> ProductListResponse:
        """
        One page of products, newest first, with pagination metadata,
        per-category active counts and listing-level SEO metadata.
        """
        filters = dict(
            only_active=only_active,
            category_slug=category,
            subcategory_slug=subcategory,
            search=search,
        )
        offset = (page - 1) * limit
        total = self.repo.count_listing(session, **filters)
        rows = self.repo.list_with_relations(session, offset=offset, limit=limit, **filters)

        products: list[ProductListItem] = []
        for product, sub, cat, thumb in rows:
            products.append(
                ProductListItem(
                    **product.model_dump(),
                    thumbnail=ThumbnailRead.model_validate(thumb.model_dump()) if thumb else None,
                    category=CategoryRef.model_validate(cat.model_dump()) if cat else None,
                    subcategory=CategoryRef.model_validate(sub.model_dump()) if sub else None,
                )
            )

        pagination = Pagination(
            current_page=page,
            page_size=limit,
            total_products=total,
            total_pages=math.ceil(total / limit),
            has_next_page=offset + limit < total,
            has_previous_page=page > 1,
        )

        summary = ProductSummary(
            total_active_products=self.repo.count_listing(session, only_active=True),
            categories=[
                CategorySummary(id=cid, name=name, slug=slug, product_count=int(count or 0))
                for cid, name, slug, count in self.repo.active_counts_by_category(session)
            ],
        )

        seo = ListingSeo(
            title=f"Our Products {settings.SEO_TITLE_SUFFIX}".strip(),
            description=LISTING_DESCRIPTION,
            canonical_url=f"{settings.SITE_BASE_URL.rstrip('/')}/products",
        )

        return ProductListResponse(
            products=products,
            pagination=pagination,
            summary=summary,
            seo_metadata=seo,
        )

    def get_product_detail(
        self,
        session: Session,
        product_id: uuid.UUID,
        include_inactive: bool = False,
    ) -> ProductDetail:
        """
        Product with its thumbnail and images in display order.

        Inactive products are reported as missing unless
        `include_inactive` is set.
        """
        product = self.get_product(session, product_id)
        if not product.is_active and not include_inactive:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return self._build_detail(session, product)

    # ----- Create / update / delete -----

    def create_product(self, session: Session, payload: ProductCreate) -> Product:
        """
        Create a product, optionally with an initial image set.

        - 404 if the subcategory, thumbnail or any image does not exist.
        - Slug derived from the name, suffixed (-1, -2, ...) when taken.
        """
        subcategory = self._require_subcategory(session, payload.subcategory_id)
        thumbnail = None
        if payload.thumbnail_id is not None:
            thumbnail = self._require_thumbnail(session, payload.thumbnail_id)

        image_set = ImageSet.from_refs(payload.images)
        if len(image_set):
            self._require_gallery_images(session, image_set.ids())

        slug = assign_slug(payload.name, self.repo.slugs(session))
        seo = auto_generate_seo_fields(
            name=payload.name,
            slug=slug,
            entity_type="product",
            base_url=settings.SITE_BASE_URL,
            description=payload.description,
            additional_keywords=[subcategory.name.lower()],
            title_suffix=settings.SEO_TITLE_SUFFIX,
            thumbnail_url=thumbnail.image_url if thumbnail else None,
            price=payload.price,
        )

        product = Product(
            name=payload.name,
            slug=slug,
            description=payload.description,
            details=payload.details,
            min_order=payload.min_order,
            delivery_info=payload.delivery_info,
            whatsapp_number=payload.whatsapp_number,
            thumbnail_id=payload.thumbnail_id,
            subcategory_id=subcategory.id,
            is_active=payload.is_active,
            meta_title=payload.meta_title or seo.meta_title,
            meta_description=payload.meta_description or seo.meta_description,
            keywords=payload.keywords or seo.keywords,
            canonical_url=payload.canonical_url or seo.canonical_url,
            structured_data=seo.structured_data.model_dump(by_alias=True, exclude_none=True),
        )

        with atomic(session):
            self.repo.save(session, product)
            self._write_image_set(session, product.id, image_set)
        session.refresh(product)

        logger.info("Created product %s (%s)", product.id, product.slug)
        return product

    def update_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> ProductDetail:
        """
        Partial update of a product.

        - Renaming recomputes the slug (excluding this product's own slug).
        - `images`, when present, replaces the whole image set
          (delete-all-then-insert) inside the same transaction.
        """
        product = self.get_product(session, product_id)
        fields_set = payload.model_fields_set

        if payload.name is not None and payload.name != product.name:
            product.name = payload.name
            product.slug = assign_slug(
                payload.name, self.repo.slugs(session, exclude_id=product.id)
            )
            product.canonical_url = generate_canonical_url(
                product.slug, settings.SITE_BASE_URL, "product"
            )

        if payload.subcategory_id is not None:
            product.subcategory_id = self._require_subcategory(
                session, payload.subcategory_id
            ).id

        if "thumbnail_id" in fields_set:
            if payload.thumbnail_id is not None:
                self._require_thumbnail(session, payload.thumbnail_id)
            product.thumbnail_id = payload.thumbnail_id

        # Required columns: only overwrite with a value
        for name in ("description", "whatsapp_number", "is_active"):
            value = getattr(payload, name)
            if value is not None:
                setattr(product, name, value)

        # Nullable columns: an explicit null clears them
        for name in (
            "details",
            "min_order",
            "delivery_info",
            "meta_title",
            "meta_description",
            "keywords",
        ):
            if name in fields_set:
                setattr(product, name, getattr(payload, name))

        if payload.canonical_url is not None:
            product.canonical_url = payload.canonical_url

        image_set = None
        if payload.images is not None:
            image_set = ImageSet.from_refs(payload.images)
            if len(image_set):
                self._require_gallery_images(session, image_set.ids())

        with atomic(session):
            self.repo.save(session, product)
            if image_set is not None:
                self.repo.delete_links(session, product.id)
                self._write_image_set(session, product.id, image_set)
        session.refresh(product)

        logger.info("Updated product %s", product.id)
        return self._build_detail(session, product)

    def delete_product(self, session: Session, product_id: uuid.UUID) -> None:
        """
        Delete a product and its image links. Gallery images are kept.
        """
        product = self.get_product(session, product_id)
        with atomic(session):
            removed = self.repo.delete_links(session, product.id)
            self.repo.delete(session, product)
        logger.info("Deleted product %s (%d image links)", product_id, removed)

    # ----- Gallery links -----

    def add_images(
        self,
        session: Session,
        payload: ProductImagesCreate,
    ) -> ProductImagesResult:
        """
        Append gallery images to a product after its current images.

        - 404 if the product or any gallery image is missing.
        - 409 if an image is already linked to the product.
        """
        product = self.get_product(session, payload.product_id)
        self._require_gallery_images(session, list(set(payload.gallery_ids)))

        current = ImageSet.from_ids(
            link.image_id for link in self.repo.list_links(session, product.id)
        )
        already = set(current.ids()) & set(payload.gallery_ids)
        if already:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Images already linked to this product: {sorted(already)}",
            )

        start = len(current)
        current.add(*payload.gallery_ids)
        new_refs = current.entries()[start:]
        links = [
            ProductImage(
                product_id=product.id,
                image_id=ref.image_id,
                display_order=ref.display_order,
            )
            for ref in new_refs
        ]
        with atomic(session):
            self.repo.add_links(session, links)

        return ProductImagesResult(
            message="Images associated with product successfully",
            associations=[
                ProductImageLink(
                    product_id=product.id,
                    image_id=ref.image_id,
                    display_order=ref.display_order,
                )
                for ref in new_refs
            ],
        )

    # ----- Helpers -----

    def _write_image_set(
        self,
        session: Session,
        product_id: uuid.UUID,
        image_set: ImageSet,
    ) -> None:
        if not len(image_set):
            return
        self.repo.add_links(
            session,
            [
                ProductImage(
                    product_id=product_id,
                    image_id=ref.image_id,
                    display_order=ref.display_order,
                )
                for ref in image_set.entries()
            ],
        )

    def _build_detail(self, session: Session, product: Product) -> ProductDetail:
        thumbnail = None
        if product.thumbnail_id is not None:
            image = self.gallery_repo.get_by_id(session, product.thumbnail_id)
            if image:
                thumbnail = GalleryImageRead.model_validate(image.model_dump())

        images = [
            ProductImageRead(**image.model_dump(), display_order=link.display_order)
            for link, image in self.repo.list_images_for_product(session, product.id)
        ]

        return ProductDetail(
            **product.model_dump(),
            thumbnail=thumbnail,
            images=images,
        )

