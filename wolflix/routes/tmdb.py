"""Pass-through routes for the TMDB metadata API."""
from typing import Optional

from fastapi import APIRouter, HTTPException

from wolflix.config import TMDB_API_BASE, TMDB_API_KEY
from wolflix.routes.params import require, require_kind
from wolflix.services.upstream import UpstreamError, fetch_json

router = APIRouter(prefix="/api/tmdb", tags=["tmdb"])

# Browse collections shown on the Series/Animation/Novel/Music/Most Viewed pages.
# Each maps onto one TMDB discover query.
CATEGORIES: dict[str, tuple[str, dict]] = {
    "series-trending": ("tv", {"sort_by": "popularity.desc"}),
    "series-top": ("tv", {"sort_by": "vote_average.desc", "vote_count.gte": 500}),
    "series-popular": ("tv", {"sort_by": "vote_count.desc"}),
    "series-new": ("tv", {"sort_by": "first_air_date.desc", "vote_count.gte": 50}),
    "animation-movies": ("movie", {"with_genres": "16", "sort_by": "popularity.desc"}),
    "animation-anime": ("tv", {"with_genres": "16", "with_original_language": "ja"}),
    "animation-tv": ("tv", {"with_genres": "16", "sort_by": "popularity.desc"}),
    "animation-family": ("movie", {"with_genres": "16,10751"}),
    "novel-adaptations": ("movie", {"with_keywords": "818", "sort_by": "popularity.desc"}),
    "novel-classics": ("movie", {"with_keywords": "818", "sort_by": "vote_average.desc", "vote_count.gte": 1000}),
    "novel-fantasy": ("movie", {"with_keywords": "818", "with_genres": "14"}),
    "novel-series": ("tv", {"with_keywords": "818"}),
    "music-documentary": ("movie", {"with_genres": "10402,99"}),
    "music-biopic": ("movie", {"with_genres": "10402,18"}),
    "music-concert": ("movie", {"with_genres": "10402", "sort_by": "popularity.desc"}),
    "music-musical": ("movie", {"with_genres": "10402", "sort_by": "vote_average.desc", "vote_count.gte": 200}),
    "most-trending": ("movie", {"sort_by": "popularity.desc"}),
    "most-popular": ("movie", {"sort_by": "vote_count.desc"}),
    "most-top-rated": ("movie", {"sort_by": "vote_average.desc", "vote_count.gte": 1000}),
    "most-tv-popular": ("tv", {"sort_by": "popularity.desc"}),
}


async def tmdb_get(path: str, params: Optional[dict] = None):
    if not TMDB_API_KEY:
        raise UpstreamError("TMDB_API_KEY is not configured")
    return await fetch_json(
        f"{TMDB_API_BASE}{path}",
        params={"api_key": TMDB_API_KEY, **(params or {})},
    )


@router.get("/trending")
async def trending(page: int = 1):
    return await tmdb_get("/trending/all/week", {"page": page})


@router.get("/popular/{kind}")
async def popular(kind: str, page: int = 1):
    return await tmdb_get(f"/{require_kind(kind)}/popular", {"page": page})


@router.get("/top-rated/{kind}")
async def top_rated(kind: str, page: int = 1):
    return await tmdb_get(f"/{require_kind(kind)}/top_rated", {"page": page})


@router.get("/discover/{kind}")
async def discover(kind: str, genre: Optional[str] = None, page: int = 1):
    require(genre, "genre")
    return await tmdb_get(
        f"/discover/{require_kind(kind)}",
        {"with_genres": genre, "page": page, "sort_by": "popularity.desc"},
    )


@router.get("/search/{query:path}")
async def search(query: str, page: int = 1):
    require(query, "query")
    return await tmdb_get("/search/multi", {"query": query, "page": page})


@router.get("/detail/{kind}/{tmdb_id}")
async def detail(kind: str, tmdb_id: str):
    return await tmdb_get(f"/{require_kind(kind)}/{tmdb_id}")


@router.get("/category/{key}")
async def category(key: str, page: int = 1):
    entry = CATEGORIES.get(key)
    if entry is None:
        raise HTTPException(status_code=400, detail=f"Unknown category: {key}")
    kind, params = entry
    return await tmdb_get(f"/discover/{kind}", {**params, "page": page})
