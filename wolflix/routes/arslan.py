"""Pass-through routes for the arslan sinhalasub scraping API."""
from typing import Optional

from fastapi import APIRouter

from wolflix.config import ARSLAN_API_BASE, ARSLAN_API_KEY
from wolflix.routes.params import require
from wolflix.services.upstream import fetch_json

router = APIRouter(prefix="/api/arslan", tags=["arslan"])


async def scraper_get(endpoint: str, params: dict):
    return await fetch_json(
        f"{ARSLAN_API_BASE}/movie/sinhalasub/{endpoint}",
        params={**params, "apikey": ARSLAN_API_KEY},
    )


@router.get("/search")
async def search(text: Optional[str] = None):
    require(text, "text")
    return await scraper_get("search", {"text": text})


@router.get("/movie")
async def movie(url: Optional[str] = None):
    require(url, "url")
    return await scraper_get("movie", {"url": url})


@router.get("/tvshow")
async def tvshow(url: Optional[str] = None):
    require(url, "url")
    return await scraper_get("tvshow", {"url": url})


@router.get("/episode")
async def episode(url: Optional[str] = None):
    require(url, "url")
    return await scraper_get("episode", {"url": url})
