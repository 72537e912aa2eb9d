from typing import Optional

from fastapi import APIRouter, HTTPException, Request

from wolflix.models import TV
from wolflix.routes.params import require, require_kind
from wolflix.services.query import QueryClient, local_query_client
from wolflix.services.resolver import ResolverState, Source, Subject, WatchResolver
from wolflix.services.sources import build_lookups

router = APIRouter(prefix="/api/watch", tags=["watch"])


def build_subject(
    media_type: str,
    subject_id: str,
    title: str,
    detail_path: str = "",
    season: Optional[int] = None,
    episode: Optional[int] = None,
) -> Subject:
    if media_type == TV:
        season = season or 1
        episode = episode or 1
    else:
        season = episode = None
    return Subject(
        id=subject_id,
        title=title,
        media_type=media_type,
        detail_path=detail_path,
        season=season,
        episode=episode,
    )


def parse_source(source: Optional[str]) -> Optional[Source]:
    if not source:
        return None
    if source == "native":
        return Source.DIRECT
    if source == "showbox":
        return Source.EMBED
    try:
        return Source(source)
    except ValueError:
        raise HTTPException(status_code=400, detail="source must be 'embed' or 'direct'")


async def resolve_sources(
    client: QueryClient,
    subject: Subject,
    source: Optional[Source] = None,
    index: int = 0,
) -> ResolverState:
    embed, direct = build_lookups(client)
    return await WatchResolver(embed, direct).resolve(subject, source=source, index=index)


@router.get("/sources")
async def sources(
    request: Request,
    title: Optional[str] = None,
    type: str = "movie",
    subjectId: str = "",
    detailPath: str = "",
    season: Optional[int] = None,
    episode: Optional[int] = None,
    source: Optional[str] = None,
    index: int = 0,
):
    require(title, "title")
    subject = build_subject(require_kind(type), subjectId, title, detailPath, season, episode)
    async with local_query_client(request.app) as client:
        state = await resolve_sources(client, subject, parse_source(source), index)
    return state.to_dict()
