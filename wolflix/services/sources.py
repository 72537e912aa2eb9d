"""Embed and direct stream lookups used by the watch page."""
from typing import Any, Optional

from wolflix.models import (
    TV,
    DirectStream,
    EmbedLink,
    Subtitle,
    dig,
    parse_direct_streams,
    parse_embed_links,
    parse_subtitles,
)
from wolflix.services.query import QueryClient
from wolflix.services.resolver import Subject

LOOKUP_RETRIES = 2
LOOKUP_RETRY_DELAY = 1.0


def _entries(payload: Any) -> list:
    data = payload.get("data", payload) if isinstance(payload, dict) else payload
    if isinstance(data, dict):
        data = data.get("items") or data.get("results") or data.get("list") or []
    return [e for e in data if isinstance(e, dict)] if isinstance(data, list) else []


def pick_showbox_match(payload: Any, title: str) -> Optional[dict]:
    """Best-effort title match: exact (case-insensitive) title, else the first hit."""
    entries = [e for e in _entries(payload) if e.get("id") is not None]
    if not entries:
        return None
    wanted = title.strip().lower()
    for entry in entries:
        name = str(entry.get("title") or entry.get("name") or "").strip().lower()
        if name == wanted:
            return entry
    return entries[0]


def pick_subject_match(payload: Any, subject_id: str) -> Optional[dict]:
    items = dig(payload, "data", "items", default=[])
    items = [i for i in items if isinstance(i, dict)] if isinstance(items, list) else []
    for item in items:
        if str(item.get("subjectId")) == subject_id:
            return item
    return items[0] if items else None


async def lookup_embed(client: QueryClient, subject: Subject) -> list[EmbedLink]:
    if not subject.title.strip():
        return []
    search = await client.get(
        "/api/wolflix/showbox/search",
        subject.title,
        params={"keyword": subject.title},
        retry=LOOKUP_RETRIES,
        retry_delay=LOOKUP_RETRY_DELAY,
    )
    if search.is_error:
        raise search.error
    match = pick_showbox_match(search.data, subject.title)
    if match is None:
        return []

    showbox_id = str(match["id"])
    if subject.media_type == TV:
        path = "/api/wolflix/showbox/tv"
        params = {"id": showbox_id, "season": subject.season, "episode": subject.episode}
    else:
        path = "/api/wolflix/showbox/movie"
        params = {"id": showbox_id}

    links = await client.get(
        path,
        showbox_id,
        subject.season,
        subject.episode,
        params=params,
        retry=LOOKUP_RETRIES,
        retry_delay=LOOKUP_RETRY_DELAY,
    )
    if links.is_error:
        raise links.error
    return parse_embed_links(links.data)


async def find_detail_path(client: QueryClient, subject: Subject) -> str:
    if subject.detail_path:
        return subject.detail_path
    if not subject.title:
        return ""
    search = await client.get(
        "/api/wolflix/search", subject.title, params={"keyword": subject.title}
    )
    if search.is_error:
        raise search.error
    match = pick_subject_match(search.data, subject.id)
    return str(match.get("detailPath") or "") if match else ""


async def lookup_direct(
    client: QueryClient, subject: Subject
) -> tuple[list[DirectStream], list[Subtitle]]:
    detail_path = await find_detail_path(client, subject)
    if not subject.id or not detail_path:
        return [], []

    play = await client.get(
        "/api/wolflix/play",
        subject.id,
        detail_path,
        subject.season,
        subject.episode,
        params={
            "subjectId": subject.id,
            "detailPath": detail_path,
            "season": subject.season,
            "ep": subject.episode,
        },
        retry=LOOKUP_RETRIES,
        retry_delay=LOOKUP_RETRY_DELAY,
    )
    if play.is_error:
        raise play.error
    return parse_direct_streams(play.data), parse_subtitles(play.data)


def build_lookups(client: QueryClient):
    """Bind both lookups to one query client for use with WatchResolver."""

    async def embed(subject: Subject) -> list[EmbedLink]:
        return await lookup_embed(client, subject)

    async def direct(subject: Subject) -> tuple[list[DirectStream], list[Subtitle]]:
        return await lookup_direct(client, subject)

    return embed, direct
