from fastapi import APIRouter, Body, Depends, File, Form, UploadFile

from app.core.auth import require_admin
from app.routers.gallery import service
from app.schemas.gallery import StorageDeleteRequest, UploadResult
from app.services.gallery_service import UploadedFile

router = APIRouter(prefix="/upload", tags=["Uploads"])


@router.post(
    "",
    response_model=UploadResult,
    dependencies=[Depends(require_admin)],
)
def upload_files(
    files: list[UploadFile] = File(...),
    folder: str | None = Form(None),
):
    """
    Store images in the media bucket and return their public URLs.

    Used for category/subcategory banners: nothing is added to the gallery.
    """
    parts = [UploadedFile(f.filename, f.content_type, f.file.read()) for f in files]
    return UploadResult(urls=service.upload_files(parts, folder))


@router.delete(
    "",
    dependencies=[Depends(require_admin)],
)
def delete_file(payload: StorageDeleteRequest = Body(...)) -> dict[str, str]:
    service.delete_file(payload.image_url)
    return {"message": "Image deleted successfully"}
