import logging

from sqlmodel import Session

from app.core.config import get_settings
from app.core.storage_utils import delete_folder
from app.database import atomic
from app.repositories.dashboard_repo import DashboardRepository
from app.schemas.dashboard import DashboardStat, DashboardStats

settings = get_settings()
logger = logging.getLogger(__name__)


class DashboardService:
    """
    Orchestrates dashboard counters and the full catalog reset.
    """

    def __init__(self, repo: DashboardRepository):
        self.repo = repo

    def get_stats(self, session: Session) -> DashboardStats:
        return DashboardStats(
            stats=[
                DashboardStat(
                    label="Products",
                    value=self.repo.count_products(session),
                    icon="fa-box-open",
                ),
                DashboardStat(
                    label="Messages",
                    value=self.repo.count_messages(session),
                    icon="fa-envelope",
                ),
                DashboardStat(
                    label="Categories",
                    value=self.repo.count_categories(session),
                    icon="fa-layer-group",
                ),
                DashboardStat(
                    label="Subcategories",
                    value=self.repo.count_subcategories(session),
                    icon="fa-sitemap",
                ),
                DashboardStat(
                    label="Images",
                    value=self.repo.count_images(session),
                    icon="fa-image",
                ),
            ]
        )

    def reset_catalog(self, session: Session, purge_media: bool = False) -> dict:
        """
        Empty every catalog table in one transaction (contact messages and
        users are kept). With `purge_media`, also empty the Storage folder
        once the rows are gone.
        """
        with atomic(session):
            removed = self.repo.wipe_catalog(session)
        logger.warning("Catalog reset: %s", removed)

        purged = 0
        if purge_media:
            purged = delete_folder(settings.MEDIA_FOLDER)

        return {
            "message": "All tables have been reset successfully",
            "deleted": removed,
            "purged_objects": purged,
        }
