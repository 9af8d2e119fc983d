import logging
from collections import defaultdict
from typing import Iterable

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.config import get_settings
from app.core.storage_utils import (
    StorageError,
    delete_public_urls,
    extract_path_from_public_url,
    upload_many,
)
from app.database import atomic
from app.models.gallery import GalleryImage
from app.repositories.gallery_repo import GalleryRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.gallery import GalleryDeleteRequest

settings = get_settings()
logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB per image


class UploadedFile:
    """One multipart part, already read into memory."""

    def __init__(self, filename: str | None, content_type: str | None, data: bytes):
        self.filename = filename or "unknown"
        self.content_type = content_type or ""
        self.data = data

    @property
    def is_image(self) -> bool:
        return self.content_type.startswith("image/")


class GalleryService:
    """
    Business logic for the shared image gallery.

    Responsibilities:
      - upload orchestration (Storage first, then DB rows)
      - deleting images together with every reference to them:
        product links are removed and re-numbered, thumbnails cleared
    """

    def __init__(self, repo: GalleryRepository, product_repo: ProductRepository):
        self.repo = repo
        self.product_repo = product_repo

    def list_images(self, session: Session) -> list[GalleryImage]:
        return self.repo.list_images(session)

    def upload_images(
        self,
        session: Session,
        files: Iterable[UploadedFile],
    ) -> list[GalleryImage]:
        """
        Upload the image parts of a multipart request and record them.

        Non-image parts are dropped silently; if nothing is left => 400.
        """
        images = self._image_parts(files)
        urls = upload_many(
            [(f.content_type, f.data) for f in images],
            settings.MEDIA_FOLDER,
        )

        rows = [
            GalleryImage(
                image_url=url,
                original_name=f.filename,
                file_size=len(f.data),
                mime_type=f.content_type,
            )
            for url, f in zip(urls, images)
        ]
        try:
            with atomic(session):
                self.repo.create_many(session, rows)
        except Exception:
            # Rows were not recorded: drop the objects we just stored.
            self._delete_objects(urls)
            raise

        for row in rows:
            session.refresh(row)
        return rows

    def delete_images(
        self,
        session: Session,
        payload: GalleryDeleteRequest,
    ) -> dict[str, str]:
        """
        Delete gallery images by URL, or all of them.

        - `delete_all=true` wipes the gallery.
        - a single URL that is not in the gallery => 404.
        - for a list, unknown URLs are ignored.
        """
        if payload.delete_all:
            targets = self.repo.list_images(session)
            message = "All images deleted successfully"
        else:
            urls = payload.image_urls
            if not urls:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="No image URLs provided",
                )
            if isinstance(urls, str):
                targets = self.repo.get_by_urls(session, [urls])
                if not targets:
                    raise HTTPException(
                        status_code=status.HTTP_404_NOT_FOUND,
                        detail="Image not found",
                    )
                message = "Image deleted successfully"
            else:
                targets = self.repo.get_by_urls(session, urls)
                message = "Multiple images deleted successfully"

        if not targets:
            return {"message": message}

        image_ids = [img.id for img in targets]
        target_urls = [img.image_url for img in targets]

        with atomic(session):
            self._detach_from_products(session, image_ids)
            for image in targets:
                self.repo.delete(session, image)

        logger.info("Deleted %d gallery image(s)", len(targets))
        self._delete_objects(target_urls)
        return {"message": message}

    # ----- Storage only (no gallery rows) -----

    def upload_files(
        self,
        files: Iterable[UploadedFile],
        folder: str | None = None,
    ) -> list[str]:
        """
        Upload images (e.g. category banners) and return their public URLs
        without recording them in the gallery.
        """
        folder = (folder or settings.MEDIA_FOLDER).strip("/")
        if not folder or ".." in folder.split("/"):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid folder",
            )
        images = self._image_parts(files)
        return upload_many([(f.content_type, f.data) for f in images], folder)

    def delete_file(self, image_url: str) -> None:
        if extract_path_from_public_url(image_url) is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="URL does not belong to the media bucket",
            )
        delete_public_urls([image_url])

    # ----- Helpers -----

    @staticmethod
    def _image_parts(files: Iterable[UploadedFile]) -> list[UploadedFile]:
        images = [f for f in files if f.is_image]
        if not images:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No valid image files provided",
            )
        for f in images:
            if len(f.data) > MAX_IMAGE_BYTES:
                raise HTTPException(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    detail=f"{f.filename} is too large (max 5MB).",
                )
        return images

    def _detach_from_products(self, session: Session, image_ids: list[int]) -> None:
        """
        Remove product links to these images, re-number the remaining links
        of each affected product from 0, and clear matching thumbnails.
        Caller commits.
        """
        affected = defaultdict(list)
        for link in self.product_repo.list_links_for_images(session, image_ids):
            affected[link.product_id].append(link)
            session.delete(link)
        session.flush()

        for product_id in affected:
            for order, link in enumerate(self.product_repo.list_links(session, product_id)):
                link.display_order = order
                session.add(link)

        for product in self.product_repo.products_with_thumbnails(session, image_ids):
            product.thumbnail_id = None
            session.add(product)
        session.flush()

    def _delete_objects(self, urls: list[str]) -> None:
        """Best-effort Storage cleanup; the DB is already consistent."""
        try:
            delete_public_urls(urls)
        except StorageError:
            logger.exception("Could not delete %d object(s) from Storage", len(urls))
