from fastapi import APIRouter, Body, Depends, File, UploadFile
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.gallery_repo import GalleryRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.gallery import GalleryDeleteRequest, GalleryImageRead
from app.services.gallery_service import GalleryService, UploadedFile

router = APIRouter(prefix="/gallery", tags=["Gallery"])

repo = GalleryRepository()
service = GalleryService(repo, ProductRepository())


@router.get(
    "",
    response_model=list[GalleryImageRead],
    dependencies=[Depends(require_admin)],
)
def list_images(session: Session = Depends(get_session)):
    """
    All gallery images, oldest first.
    """
    return service.list_images(session)


@router.post(
    "",
    response_model=list[GalleryImageRead],
    dependencies=[Depends(require_admin)],
    summary="Upload one or more images to the gallery",
)
def upload_images(
    files: list[UploadFile] = File(...),
    session: Session = Depends(get_session),
):
    """
    Upload images to Storage and record them in the gallery.

    - Parts whose content type is not image/* are ignored.
    - 400 if no image is left.
    """
    parts = [UploadedFile(f.filename, f.content_type, f.file.read()) for f in files]
    return service.upload_images(session, parts)


@router.delete(
    "",
    dependencies=[Depends(require_admin)],
)
def delete_images(
    payload: GalleryDeleteRequest = Body(...),
    session: Session = Depends(get_session),
) -> dict[str, str]:
    """
    Delete one image, several images, or the whole gallery.

    Products lose their links to the deleted images (remaining images are
    re-numbered) and thumbnails pointing at them are cleared.
    """
    return service.delete_images(session, payload)
