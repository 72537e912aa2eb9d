"""Routes for the MovieBox-style aggregator. Every call carries the cached bearer token."""
from typing import Optional

from fastapi import APIRouter, Depends

from wolflix.config import WOLFMOVIE_API_BASE
from wolflix.routes.params import require
from wolflix.services.token import TokenProvider, get_token_provider
from wolflix.services.upstream import UpstreamError, fetch_json

router = APIRouter(prefix="/api/wolfmovieapi", tags=["wolfmovieapi"])

WEB_API = "/wefeed-h5-bff/web"


async def aggregator_call(
    provider: TokenProvider,
    path: str,
    *,
    method: str = "GET",
    params: Optional[dict] = None,
    json: Optional[dict] = None,
):
    token = await provider.get_token()
    try:
        return await fetch_json(
            f"{WOLFMOVIE_API_BASE}{path}",
            method=method,
            params=params,
            json=json,
            headers={"Authorization": f"Bearer {token}"},
        )
    except UpstreamError as e:
        # A rejected token is dropped so the next request fetches a new one
        if e.status_code == 401:
            provider.invalidate()
        raise


@router.get("/home")
async def home(provider: TokenProvider = Depends(get_token_provider)):
    return await aggregator_call(provider, f"{WEB_API}/home")


@router.get("/search")
async def search(
    keyword: Optional[str] = None,
    page: int = 1,
    perPage: int = 24,
    subjectType: int = 0,
    provider: TokenProvider = Depends(get_token_provider),
):
    require(keyword, "keyword")
    return await aggregator_call(
        provider,
        f"{WEB_API}/subject/search",
        method="POST",
        json={"keyword": keyword, "page": page, "perPage": perPage, "subjectType": subjectType},
    )


@router.get("/trending")
async def trending(
    page: int = 0,
    perPage: int = 18,
    provider: TokenProvider = Depends(get_token_provider),
):
    return await aggregator_call(
        provider, f"{WEB_API}/subject/trending", params={"page": page, "perPage": perPage}
    )


@router.get("/filter")
async def filter_subjects(
    page: int = 1,
    perPage: int = 24,
    channelId: int = 1,
    genre: Optional[str] = None,
    country: Optional[str] = None,
    year: Optional[str] = None,
    sort: Optional[str] = None,
    provider: TokenProvider = Depends(get_token_provider),
):
    body = {"page": page, "perPage": perPage, "channelId": channelId}
    for key, value in (("genre", genre), ("country", country), ("year", year), ("sort", sort)):
        if value:
            body[key] = value
    return await aggregator_call(provider, f"{WEB_API}/filter", method="POST", json=body)


@router.get("/detail")
async def detail(
    subjectId: Optional[str] = None,
    provider: TokenProvider = Depends(get_token_provider),
):
    require(subjectId, "subjectId")
    return await aggregator_call(
        provider, f"{WEB_API}/subject/detail", params={"subjectId": subjectId}
    )


@router.get("/stream-domain")
async def stream_domain(provider: TokenProvider = Depends(get_token_provider)):
    return await aggregator_call(provider, "/wefeed-h5-bff/media-player/get-domain")


@router.get("/everyone-search")
async def everyone_search(provider: TokenProvider = Depends(get_token_provider)):
    return await aggregator_call(provider, f"{WEB_API}/subject/everyone-search")
