from typing import Optional

from fastapi import APIRouter

from wolflix.config import IMDB_API_BASE
from wolflix.routes.params import require
from wolflix.services.upstream import fetch_json

router = APIRouter(prefix="/api/imdb", tags=["imdb"])


@router.get("/search")
async def search(q: Optional[str] = None):
    """Title search, answered as ``{"titles": [...]}`` by the upstream."""
    require(q, "q")
    return await fetch_json(f"{IMDB_API_BASE}/search/titles", params={"query": q})
