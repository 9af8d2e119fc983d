import logging
import mimetypes
import uuid
from typing import Iterable

from app.core.config import get_settings
from app.core.supabase_client import supabase_admin

settings = get_settings()
logger = logging.getLogger(__name__)

# Supabase Storage caps list() pages at 1000; stay well below it.
LIST_PAGE_SIZE = 100


class StorageError(Exception):
    """Raised when the media-hosting API rejects or fails an operation."""


def _bucket():
    """
    Storage handle for the configured media bucket.

    Resolved lazily so importing this module never needs the
    service-role key.
    """
    return supabase_admin().storage.from_(settings.STORAGE_BUCKET)


def upload_to_storage(path: str, file_bytes: bytes, content_type: str) -> str:
    """
    Upload raw bytes to Supabase Storage and return a public URL.

    If a file already exists at this path, it will be overwritten
    thanks to the 'upsert' option.

    Args:
        path: Full object path inside the bucket.
              Example: "product_images/<uuid>.png"
        file_bytes: File content in bytes.
        content_type: MIME type stored alongside the object.

    Raises:
        StorageError: if Supabase rejects the upload.
    """
    bucket = _bucket()
    try:
        bucket.upload(
            path,
            file_bytes,
            {"content-type": content_type, "upsert": "true"},
        )
        return bucket.get_public_url(path)
    except Exception as exc:
        raise StorageError(f"Failed to upload {path}") from exc


def upload_many(files: Iterable[tuple[str, bytes]], folder: str) -> list[str]:
    """
    Upload several images into `folder`, one random filename each.

    All or nothing: if one upload fails, the objects already written by
    this call are removed before the error is re-raised.

    Args:
        files: iterable of (content_type, file_bytes)
        folder: folder label inside the bucket, e.g. "product_images"

    Returns:
        Public URLs, in the same order as `files`.
    """
    urls: list[str] = []
    written: list[str] = []
    try:
        for content_type, file_bytes in files:
            path = f"{folder.strip('/')}/{generate_filename(guess_extension(content_type))}"
            urls.append(upload_to_storage(path, file_bytes, content_type))
            written.append(path)
    except StorageError:
        if written:
            logger.warning("Upload to %s failed; removing %d partial object(s)", folder, len(written))
            try:
                delete_from_storage(written)
            except StorageError:
                logger.exception("Could not remove partial upload from %s", folder)
        raise
    logger.info("Uploaded %d file(s) to %s/%s", len(urls), settings.STORAGE_BUCKET, folder)
    return urls


def delete_from_storage(paths: list[str]) -> None:
    """
    Delete files from Supabase Storage by their object paths.

    Example path (relative to bucket):
        'product_images/<uuid>.png'
    """
    if not paths:
        return
    try:
        # Supabase Python client expects a list of paths.
        _bucket().remove(paths)
    except Exception as exc:
        raise StorageError(f"Failed to delete {len(paths)} object(s)") from exc
    logger.info("Deleted %d object(s) from %s", len(paths), settings.STORAGE_BUCKET)


def extract_path_from_public_url(url: str) -> str | None:
    """
    Given a public URL, extract the object path relative to the bucket.

    Example:
        https://<proj>.supabase.co/storage/v1/object/public/assets/product_images/a.png
        -> 'product_images/a.png'
    """
    marker = f"/storage/v1/object/public/{settings.STORAGE_BUCKET}/"
    idx = url.find(marker)
    if idx == -1:
        return None
    path = url[idx + len(marker) :]
    # get_public_url() may append an empty query string
    return path.split("?", 1)[0] or None


def delete_public_urls(urls: Iterable[str]) -> None:
    """
    Convenience helper: delete files by their public URLs.
    URLs that do not belong to this bucket are skipped.
    """
    paths = [p for p in (extract_path_from_public_url(u) for u in urls) if p]
    delete_from_storage(paths)


def delete_folder(prefix: str) -> int:
    """
    Remove every object stored under `prefix`.

    Lists the folder page by page and deletes each page, so folders larger
    than a single listing are fully purged.

    Returns:
        Number of objects removed.

    Raises:
        StorageError: if listing fails, or if a page is still listed after
        it was removed (the bucket refused the delete without an error).
    """
    folder = prefix.strip("/")
    bucket = _bucket()
    total = 0
    previous: list[str] = []
    while True:
        try:
            entries = bucket.list(folder, {"limit": LIST_PAGE_SIZE, "offset": 0})
        except Exception as exc:
            raise StorageError(f"Failed to list folder {folder}") from exc

        # Folder placeholders come back with id=None
        paths = [f"{folder}/{e['name']}" for e in entries if e.get("id")]
        if not paths:
            break
        if paths == previous:
            raise StorageError(f"Objects under {folder} were not removed")
        delete_from_storage(paths)
        total += len(paths)
        previous = paths
        if len(entries) < LIST_PAGE_SIZE:
            break

    logger.info("Purged %d object(s) from folder %s", total, folder)
    return total


def guess_extension(content_type: str) -> str:
    """
    Map a MIME type to a file extension without the dot ("bin" if unknown).
    """
    if content_type == "image/jpeg":
        return "jpg"
    ext = mimetypes.guess_extension(content_type) or ".bin"
    return ext.lstrip(".")


def generate_filename(ext: str) -> str:
    """
    Generate a random filename using UUID4.

    Args:
        ext: File extension without dot (e.g. "png", "jpg")

    Returns:
        A filename like "<uuid4>.png"
    """
    return f"{uuid.uuid4()}.{ext}"
