"""Normalized records built from upstream JSON.

Upstream payloads are loosely shaped, so every field is coerced here at the
boundary: missing or malformed values become empty strings, empty lists or
zero instead of raising.
"""
from dataclasses import dataclass
from typing import Any, Optional

TMDB_IMAGE_BASE = "https://image.tmdb.org/t/p"

MOVIE = "movie"
TV = "tv"


def _str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _list(value: Any) -> list:
    return value if isinstance(value, list) else []


def dig(payload: Any, *keys: str, default: Any = None) -> Any:
    """Walk nested dicts, returning ``default`` as soon as a level is missing."""
    current = payload
    for key in keys:
        if not isinstance(current, dict):
            return default
        current = current.get(key)
        if current is None:
            return default
    return current


def split_genres(raw: Any) -> tuple[str, ...]:
    if isinstance(raw, list):
        return tuple(_str(g) for g in raw if _str(g))
    return tuple(g.strip() for g in _str(raw).split(",") if g.strip())


def media_type_from_subject(subject_type: Any, default: str = MOVIE) -> str:
    # Aggregator subjectType: 1 = movie, 2 = series
    if subject_type is None or subject_type == "":
        return default
    return TV if _int(subject_type) == 2 else MOVIE


@dataclass(frozen=True)
class ContentItem:
    id: str
    title: str
    media_type: str = MOVIE
    release_date: str = ""
    rating: float = 0.0
    poster: str = ""
    genres: tuple[str, ...] = ()
    detail_path: str = ""
    description: str = ""
    duration: int = 0
    country: str = ""

    @property
    def year(self) -> str:
        return self.release_date.split("-")[0] if self.release_date else ""

    @property
    def is_series(self) -> bool:
        return self.media_type == TV


def from_moviebox(item: Any, default_type: str = MOVIE) -> Optional[ContentItem]:
    """Build a ContentItem from an aggregator subject record."""
    data = _dict(item)
    subject_id = _str(data.get("subjectId"))
    if not subject_id:
        return None
    cover = _dict(data.get("cover"))
    return ContentItem(
        id=subject_id,
        title=_str(data.get("title")) or "Untitled",
        media_type=media_type_from_subject(data.get("subjectType"), default_type),
        release_date=_str(data.get("releaseDate")),
        rating=_float(data.get("imdbRatingValue")),
        poster=_str(cover.get("url")),
        genres=split_genres(data.get("genre")),
        detail_path=_str(data.get("detailPath")),
        description=_str(data.get("description")),
        duration=_int(data.get("duration")),
        country=_str(data.get("countryName")),
    )


def tmdb_image(path: Any, size: str = "w342") -> str:
    path = _str(path)
    if not path:
        return ""
    return f"{TMDB_IMAGE_BASE}/{size}{path}"


def from_tmdb(item: Any, default_type: str = MOVIE) -> Optional[ContentItem]:
    data = _dict(item)
    tmdb_id = _str(data.get("id"))
    if not tmdb_id:
        return None
    media_type = _str(data.get("media_type")) or default_type
    return ContentItem(
        id=tmdb_id,
        title=_str(data.get("title") or data.get("name")) or "Untitled",
        media_type=TV if media_type == TV else MOVIE,
        release_date=_str(data.get("release_date") or data.get("first_air_date")),
        rating=_float(data.get("vote_average")),
        poster=tmdb_image(data.get("poster_path")),
        genres=tuple(_str(g.get("name")) for g in _list(data.get("genres")) if isinstance(g, dict)),
        description=_str(data.get("overview")),
        duration=_int(data.get("runtime")) * 60,
    )


def from_imdb(item: Any) -> Optional[ContentItem]:
    data = _dict(item)
    imdb_id = _str(data.get("id"))
    if not imdb_id:
        return None
    title_type = _str(data.get("type"))
    year = _str(data.get("startYear"))
    return ContentItem(
        id=imdb_id,
        title=_str(data.get("primaryTitle")) or "Untitled",
        media_type=TV if title_type.lower().startswith("tv") else MOVIE,
        release_date=year,
        rating=_float(dig(data, "rating", "aggregateRating")),
        poster=_str(dig(data, "primaryImage", "url")),
        genres=split_genres(data.get("genres")),
    )


def coerce_items(raw: Any, build=from_moviebox) -> list[ContentItem]:
    items = []
    for entry in _list(raw):
        item = build(entry)
        if item is not None:
            items.append(item)
    return items


@dataclass(frozen=True)
class EmbedLink:
    provider: str
    url: str
    quality: str = ""


@dataclass(frozen=True)
class DirectStream:
    id: str
    url: str
    format: str = ""
    resolution: int = 0
    size: int = 0
    duration: int = 0
    codec: str = ""


@dataclass(frozen=True)
class Subtitle:
    language: str
    language_code: str
    url: str


def parse_embed_links(payload: Any) -> list[EmbedLink]:
    """Extract embed links from a showbox movie/tv answer."""
    data = payload.get("data", payload) if isinstance(payload, dict) else payload
    if isinstance(data, dict):
        raw = data.get("links") or data.get("sources") or data.get("servers") or []
    else:
        raw = data
    links = []
    for index, entry in enumerate(_list(raw)):
        entry = _dict(entry)
        url = _str(entry.get("url") or entry.get("link") or entry.get("embed"))
        if not url:
            continue
        provider = _str(entry.get("provider") or entry.get("name") or entry.get("server"))
        links.append(EmbedLink(
            provider=provider or f"Server {index + 1}",
            url=url,
            quality=_str(entry.get("quality") or entry.get("label")),
        ))
    return links


def parse_direct_streams(payload: Any) -> list[DirectStream]:
    """Extract direct streams from a play answer, highest resolution first."""
    streams = []
    for entry in _list(dig(payload, "data", "streams", default=[])):
        entry = _dict(entry)
        url = _str(entry.get("url"))
        if not url:
            continue
        streams.append(DirectStream(
            id=_str(entry.get("id")) or url,
            url=url,
            format=_str(entry.get("format")),
            resolution=_int(entry.get("resolutions")),
            size=_int(entry.get("size")),
            duration=_int(entry.get("duration")),
            codec=_str(entry.get("codecName")),
        ))
    streams.sort(key=lambda s: s.resolution, reverse=True)
    return streams


def parse_subtitles(payload: Any) -> list[Subtitle]:
    subtitles = []
    for entry in _list(dig(payload, "data", "subtitles", default=[])):
        entry = _dict(entry)
        url = _str(entry.get("url"))
        if url:
            subtitles.append(Subtitle(
                language=_str(entry.get("language")),
                language_code=_str(entry.get("languageCode")),
                url=url,
            ))
    return subtitles
