from typing import Optional

from fastapi import HTTPException

MEDIA_KINDS = ("movie", "tv")


def require(value: Optional[str], name: str) -> str:
    """Reject a missing or blank query parameter with a 400."""
    if value is None or not str(value).strip():
        raise HTTPException(status_code=400, detail=f"{name} required")
    return value


def require_kind(kind: str) -> str:
    if kind not in MEDIA_KINDS:
        raise HTTPException(status_code=400, detail="type must be 'movie' or 'tv'")
    return kind
