from typing import Iterable

from fastapi import HTTPException, status

from app.core.slug import EmptySlugError, SlugConflictError, slugify, unique_slug


def assign_slug(name: str, taken: Iterable[str]) -> str:
    """
    Slug for `name` that is free within `taken`.

    Raises:
        HTTPException(400): name has no usable characters.
        HTTPException(409): every suffix is already taken.
    """
    try:
        return unique_slug(slugify(name), taken)
    except EmptySlugError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Name must contain at least one letter or digit",
        )
    except SlugConflictError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Too many entries with this name",
        )
