import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.category_repo import CategoryRepository
from app.repositories.gallery_repo import GalleryRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.product import (
    ProductCreate,
    ProductDetail,
    ProductImagesCreate,
    ProductImagesResult,
    ProductListResponse,
    ProductRead,
    ProductUpdate,
)
from app.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])
images_router = APIRouter(prefix="/productImages", tags=["Products"])

repo = ProductRepository()
service = ProductService(repo, CategoryRepository(), GalleryRepository())


@router.get(
    "",
    response_model=ProductListResponse,
    dependencies=[Depends(require_admin)],
)
def list_products(
    session: Session = Depends(get_session),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    only_active: bool = True,
    category: str | None = None,
    subcategory: str | None = None,
    search: str | None = None,
):
    """
    Paginated product listing.

    Query params:
      - page / limit: 1-based page, page size (max 100)
      - only_active: hide inactive products (default)
      - category / subcategory: filter by slug
      - search: case-insensitive match on name or description
    """
    return service.list_products(
        session,
        page=page,
        limit=limit,
        only_active=only_active,
        category=category,
        subcategory=subcategory,
        search=search,
    )


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
):
    """
    Create a product (optionally with its ordered images).
    """
    return service.create_product(session, payload)


@router.get(
    "/{product_id}",
    response_model=ProductDetail,
    dependencies=[Depends(require_admin)],
)
def get_product(
    product_id: uuid.UUID,
    include_inactive: bool = False,
    session: Session = Depends(get_session),
):
    """
    Product with thumbnail and images in display order.
    """
    return service.get_product_detail(session, product_id, include_inactive)


@router.put(
    "/{product_id}",
    response_model=ProductDetail,
    dependencies=[Depends(require_admin)],
)
def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
):
    """
    Update product fields; `images` replaces the whole image set.
    """
    return service.update_product(session, product_id, payload)


@router.delete(
    "/{product_id}",
    dependencies=[Depends(require_admin)],
)
def delete_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
) -> dict[str, str]:
    """
    Delete a product and its image links (gallery images are kept).
    """
    service.delete_product(session, product_id)
    return {"message": "Product deleted successfully"}


@images_router.post(
    "",
    response_model=ProductImagesResult,
    dependencies=[Depends(require_admin)],
)
def add_product_images(
    payload: ProductImagesCreate,
    session: Session = Depends(get_session),
):
    """
    Link gallery images to a product, appended after its current images.
    """
    return service.add_images(session, payload)
