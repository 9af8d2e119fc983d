from typing import Any

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.category_repo import CategoryRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.category import SubcategoryCreate, SubcategoryRead, SubcategoryUpdate
from app.services.category_service import CategoryService

router = APIRouter(prefix="/subcategories", tags=["Subcategories"])

repo = CategoryRepository()
service = CategoryService(repo, ProductRepository())


@router.post(
    "",
    response_model=SubcategoryRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_subcategory(
    payload: SubcategoryCreate,
    session: Session = Depends(get_session),
):
    """
    Create a subcategory under `category_id`.

    - 404 if the category does not exist (nothing is inserted).
    - 409 if the name is already used inside that category.
    """
    return service.create_subcategory(session, payload)


@router.get(
    "/{category_id}",
    response_model=list[SubcategoryRead],
    dependencies=[Depends(require_admin)],
)
def list_subcategories(
    category_id: int,
    session: Session = Depends(get_session),
):
    """
    Subcategories of one category.
    """
    return service.list_subcategories(session, category_id)


@router.patch(
    "/{subcategory_id}",
    response_model=SubcategoryRead,
    dependencies=[Depends(require_admin)],
)
def update_subcategory(
    subcategory_id: int,
    payload: SubcategoryUpdate,
    session: Session = Depends(get_session),
):
    return service.update_subcategory(session, subcategory_id, payload)


@router.delete(
    "/{subcategory_id}",
    dependencies=[Depends(require_admin)],
)
def delete_subcategory(
    subcategory_id: int,
    session: Session = Depends(get_session),
) -> dict[str, Any]:
    """
    Delete a subcategory with its products and their image links.
    """
    removed = service.delete_subcategory(session, subcategory_id)
    return {"message": "Subcategory deleted successfully", "deleted": removed}
