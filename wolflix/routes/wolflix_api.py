"""Unauthenticated pass-through routes for the wolflix MovieBox mirror API.

These feed the browse pages (hot, trending, search) and both watch-page
lookups: showbox embed links and direct play streams.
"""
from typing import Optional

from fastapi import APIRouter, HTTPException

from wolflix.config import WOLFLIX_API_BASE
from wolflix.routes.params import require
from wolflix.services.upstream import fetch_json

router = APIRouter(prefix="/api/wolflix", tags=["wolflix"])


async def api_fetch(path: str, params: Optional[dict] = None):
    return await fetch_json(f"{WOLFLIX_API_BASE}{path}", params=params)


@router.get("/trending")
async def trending():
    return await api_fetch("/trending")


@router.get("/hot")
async def hot():
    return await api_fetch("/hot")


@router.get("/homepage")
async def homepage():
    return await api_fetch("/homepage")


@router.get("/popular-search")
async def popular_search():
    return await api_fetch("/popular-search")


@router.get("/search")
async def search(keyword: Optional[str] = None, page: str = "1"):
    require(keyword, "keyword")
    return await api_fetch("/search", {"keyword": keyword, "page": page})


@router.get("/detail")
async def detail(subjectId: Optional[str] = None):
    require(subjectId, "subjectId")
    return await api_fetch("/detail", {"subjectId": subjectId})


@router.get("/rich-detail")
async def rich_detail(detailPath: Optional[str] = None):
    require(detailPath, "detailPath")
    return await api_fetch("/rich-detail", {"detailPath": detailPath})


@router.get("/recommend")
async def recommend(subjectId: Optional[str] = None):
    require(subjectId, "subjectId")
    return await api_fetch("/recommend", {"subjectId": subjectId})


@router.get("/play")
async def play(
    subjectId: Optional[str] = None,
    detailPath: Optional[str] = None,
    season: Optional[str] = None,
    ep: Optional[str] = None,
):
    if not subjectId or not detailPath:
        raise HTTPException(status_code=400, detail="subjectId and detailPath required")
    return await api_fetch(
        "/play",
        {"subjectId": subjectId, "detailPath": detailPath, "ep": ep, "season": season},
    )


@router.get("/captions")
async def captions(
    subjectId: Optional[str] = None,
    season: Optional[str] = None,
    ep: Optional[str] = None,
):
    require(subjectId, "subjectId")
    return await api_fetch("/captions", {"subjectId": subjectId, "ep": ep, "season": season})


@router.get("/stream")
async def stream(
    subjectId: Optional[str] = None,
    season: Optional[str] = None,
    ep: Optional[str] = None,
):
    require(subjectId, "subjectId")
    return await api_fetch("/stream", {"subjectId": subjectId, "ep": ep, "season": season})


@router.get("/showbox/search")
async def showbox_search(keyword: Optional[str] = None):
    require(keyword, "keyword")
    return await api_fetch("/showbox/search", {"keyword": keyword})


@router.get("/showbox/movie")
async def showbox_movie(id: Optional[str] = None):
    require(id, "id")
    return await api_fetch("/showbox/movie", {"id": id})


@router.get("/showbox/tv")
async def showbox_tv(
    id: Optional[str] = None,
    season: Optional[str] = None,
    episode: Optional[str] = None,
):
    require(id, "id")
    return await api_fetch("/showbox/tv", {"id": id, "season": season, "episode": episode})
