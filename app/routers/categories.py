from typing import Any

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.category_repo import CategoryRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.category import CategoryCreate, CategoryRead, CategoryUpdate
from app.services.category_service import CategoryService

router = APIRouter(prefix="/category", tags=["Categories"])

repo = CategoryRepository()
service = CategoryService(repo, ProductRepository())


@router.get(
    "",
    response_model=list[CategoryRead],
    dependencies=[Depends(require_admin)],
)
def list_categories(session: Session = Depends(get_session)):
    """
    List all categories (oldest first).
    """
    return service.list_categories(session)


@router.get(
    "/{category_id}",
    response_model=CategoryRead,
    dependencies=[Depends(require_admin)],
)
def get_category(category_id: int, session: Session = Depends(get_session)):
    return service.get_category(session, category_id)


@router.post(
    "",
    response_model=CategoryRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_category(
    payload: CategoryCreate,
    session: Session = Depends(get_session),
):
    """
    Create a category.

    - Slug and SEO fields are generated from the name/description.
    - 409 if a category with the same name exists.
    """
    return service.create_category(session, payload)


@router.patch(
    "/{category_id}",
    response_model=CategoryRead,
    dependencies=[Depends(require_admin)],
)
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    session: Session = Depends(get_session),
):
    """
    Update name / description / image. Renaming regenerates the slug.
    """
    return service.update_category(session, category_id, payload)


@router.delete(
    "/{category_id}",
    dependencies=[Depends(require_admin)],
)
def delete_category(
    category_id: int,
    session: Session = Depends(get_session),
) -> dict[str, Any]:
    """
    Delete a category with its subcategories, their products and the
    products' image links. Gallery images are kept.
    """
    removed = service.delete_category(session, category_id)
    return {"message": "Category deleted successfully", "deleted": removed}
