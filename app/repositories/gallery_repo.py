from sqlmodel import Session, select

from app.models.gallery import GalleryImage


class GalleryRepository:
    """
    Data access layer for the shared image gallery.
    """

    def list_images(self, session: Session) -> list[GalleryImage]:
        stmt = select(GalleryImage).order_by(GalleryImage.created_at, GalleryImage.id)
        return list(session.exec(stmt).all())

    def get_by_id(self, session: Session, image_id: int) -> GalleryImage | None:
        return session.get(GalleryImage, image_id)

    def get_many(self, session: Session, image_ids: list[int]) -> list[GalleryImage]:
        stmt = select(GalleryImage).where(GalleryImage.id.in_(image_ids))
        return list(session.exec(stmt).all())

    def get_by_urls(self, session: Session, urls: list[str]) -> list[GalleryImage]:
        stmt = select(GalleryImage).where(GalleryImage.image_url.in_(urls))
        return list(session.exec(stmt).all())

    def create_many(
        self,
        session: Session,
        images: list[GalleryImage],
    ) -> list[GalleryImage]:
        session.add_all(images)
        session.flush()
        for image in images:
            session.refresh(image)
        return images

    def delete(self, session: Session, image: GalleryImage) -> None:
        session.delete(image)
        session.flush()
