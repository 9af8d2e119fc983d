from typing import Any

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.dashboard_repo import DashboardRepository
from app.schemas.dashboard import DashboardStats
from app.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])
reset_router = APIRouter(prefix="/reset", tags=["Dashboard"])

repo = DashboardRepository()
service = DashboardService(repo)


@router.get(
    "",
    response_model=DashboardStats,
    dependencies=[Depends(require_admin)],
)
def get_dashboard_stats(session: Session = Depends(get_session)):
    """
    Counters for the dashboard tiles: products, messages, categories,
    subcategories and gallery images.
    """
    return service.get_stats(session)


@reset_router.delete(
    "",
    dependencies=[Depends(require_admin)],
)
def reset_catalog(
    purge_media: bool = False,
    session: Session = Depends(get_session),
) -> dict[str, Any]:
    """
    Wipe product images, products, gallery, subcategories and categories.

    `purge_media=true` also empties the media folder in Storage.
    """
    return service.reset_catalog(session, purge_media=purge_media)
