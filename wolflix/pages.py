"""Server-rendered pages. Each page loads its data through a QueryClient that
calls the app's own REST endpoints, then renders a Jinja2 template.
"""
import asyncio
import os
from typing import Optional
from urllib.parse import quote, urlencode

from fastapi import APIRouter, Request
from fastapi.templating import Jinja2Templates

from wolflix.models import (
    MOVIE,
    TV,
    coerce_items,
    dig,
    from_imdb,
    from_moviebox,
    from_tmdb,
)
from wolflix.presentation import (
    detail_url,
    format_duration,
    format_file_size,
    format_rating,
    group_by_genre,
    new_releases,
    top_rated,
    watch_url,
)
from wolflix.routes.tmdb import CATEGORIES
from wolflix.routes.watch import build_subject, parse_source, resolve_sources
from wolflix.services.query import QueryClient, local_query_client
from wolflix.services.resolver import Phase, Source
from wolflix.services.sources import pick_subject_match

router = APIRouter(include_in_schema=False)

templates = Jinja2Templates(directory=os.path.join(os.path.dirname(__file__), "templates"))
templates.env.filters["rating"] = format_rating
templates.env.filters["duration"] = format_duration
templates.env.filters["filesize"] = format_file_size
templates.env.globals["detail_url"] = detail_url
templates.env.globals["watch_url"] = watch_url

NAV_MAIN = [
    ("Welcome", "/"),
    ("Movies", "/movies"),
    ("TV Shows", "/tv-shows"),
    ("Series", "/series"),
    ("Animation", "/animation"),
    ("Novel", "/novel"),
    ("Music", "/music"),
    ("Most Viewed", "/most-viewed"),
    ("Application", "/application"),
]
NAV_ACCOUNT = [
    ("Search", "/search"),
    ("Settings", "/settings"),
    ("Profile", "/profile"),
]

# (eyebrow, heading, blurb, [(row title, category key)])
CATEGORY_PAGES = {
    "series": ("Collections", "Series", "Complete series collections and episode guides", [
        ("Trending Series", "series-trending"),
        ("Top Rated Series", "series-top"),
        ("Popular Series", "series-popular"),
        ("New Series", "series-new"),
    ]),
    "animation": ("Explore", "Animation", "Animated movies, anime, and cartoon collections", [
        ("Animated Movies", "animation-movies"),
        ("Anime Series", "animation-anime"),
        ("Animated TV Shows", "animation-tv"),
        ("Family Animation", "animation-family"),
    ]),
    "novel": ("Library", "Novel", "Book adaptations and story-based content", [
        ("Book Adaptations", "novel-adaptations"),
        ("Literary Classics", "novel-classics"),
        ("Fantasy Epics", "novel-fantasy"),
        ("Story-Based Series", "novel-series"),
    ]),
    "music": ("Browse", "Music", "Music documentaries, biopics, concerts & musicals", [
        ("Music Documentaries", "music-documentary"),
        ("Music Biopics", "music-biopic"),
        ("Concert Films", "music-concert"),
        ("Musicals", "music-musical"),
    ]),
    "most-viewed": ("Charts", "Most Viewed", "What everyone is watching right now", [
        ("Most Popular", "most-popular"),
        ("Top Rated", "most-top-rated"),
        ("Popular TV", "most-tv-popular"),
    ]),
}


def render(request: Request, name: str, **context):
    return templates.TemplateResponse(request, name, {
        "nav_main": NAV_MAIN,
        "nav_account": NAV_ACCOUNT,
        "active": request.url.path,
        **context,
    })


def subjects(result, *keys: str, default_type: str = MOVIE):
    return coerce_items(
        dig(result.data_or({}), *keys, default=[]),
        lambda entry: from_moviebox(entry, default_type),
    )


async def load_category(client: QueryClient, key: str):
    kind, _ = CATEGORIES[key]
    result = await client.get(f"/api/tmdb/category/{key}", key)
    return coerce_items(
        dig(result.data_or({}), "results", default=[]),
        lambda entry: from_tmdb(entry, kind),
    )


@router.get("/")
async def welcome(request: Request):
    async with local_query_client(request.app) as client:
        trending, mb_trending, mb_home = await asyncio.gather(
            client.get("/api/tmdb/trending"),
            client.get("/api/wolfmovieapi/trending"),
            client.get("/api/wolfmovieapi/home"),
        )

    tmdb_items = coerce_items(dig(trending.data_or({}), "results", default=[]), from_tmdb)
    mb_trending_items = subjects(mb_trending, "data", "subjectList")

    home_sections = []
    for section in dig(mb_home.data_or({}), "data", "operatingList", default=[]):
        if not isinstance(section, dict) or section.get("type") != "SUBJECTS_MOVIE":
            continue
        items = coerce_items(section.get("subjects"))
        if items:
            home_sections.append((str(section.get("title") or "Featured"), items))
    home_sections = home_sections[:4]

    genres = group_by_genre(mb_trending_items, *(items for _, items in home_sections), limit=6)

    sections = [("Trending Now", tmdb_items[1:9], "row")]
    if mb_trending_items:
        sections.append(("Trending on WOLFLIX", mb_trending_items, "row"))
    sections.extend((title, items, "row") for title, items in home_sections)
    sections.extend((genre, items, "row") for genre, items in genres)

    return render(
        request,
        "welcome.html",
        featured=tmdb_items[0] if tmdb_items else None,
        sections=sections,
        loading_failed=trending.is_error and mb_trending.is_error,
    )


@router.get("/movies")
async def movies(request: Request):
    async with local_query_client(request.app) as client:
        hot, trending, popular = await asyncio.gather(
            client.get("/api/wolflix/hot"),
            client.get("/api/wolflix/trending"),
            client.get("/api/wolflix/popular-search"),
        )
        terms = [
            str(entry["title"])
            for entry in dig(popular.data_or({}), "data", "everyoneSearch", default=[])
            if isinstance(entry, dict) and entry.get("title")
        ][:4]
        searches = await asyncio.gather(*(
            client.get("/api/wolflix/search", term, params={"keyword": term})
            for term in terms
        ))

    hot_movies = subjects(hot, "data", "movie")
    all_trending = subjects(trending, "data", "subjectList")
    trending_movies = [i for i in all_trending if i.media_type == MOVIE]
    trending_all = [i for i in all_trending if i.poster]
    all_movie_items = hot_movies + [i for i in trending_all if i.media_type == MOVIE]

    sections = [("Hot Movies", hot_movies, "grid")]
    if trending_movies:
        sections.append(("Trending Movies", trending_movies, "grid"))
    best = top_rated(all_movie_items)
    if best:
        sections.append(("Top Rated", best, "grid"))
    latest = new_releases(all_movie_items)
    if latest:
        sections.append(("New Releases", latest, "grid"))
    for genre, items in group_by_genre(hot_movies, trending_all, media_type=MOVIE, limit=10):
        sections.append((genre, items, "grid"))
    for term, result in zip(terms, searches):
        items = [i for i in subjects(result, "data", "items") if i.media_type == MOVIE]
        if items:
            sections.append((term, items, "grid"))

    return render(request, "browse.html", eyebrow="Browse", heading="Movies", sections=sections)


@router.get("/tv-shows")
async def tv_shows(request: Request):
    async with local_query_client(request.app) as client:
        hot, trending = await asyncio.gather(
            client.get("/api/wolflix/hot"),
            client.get("/api/wolflix/trending"),
        )

    hot_tv = subjects(hot, "data", "tv", default_type=TV)
    trending_tv = [i for i in subjects(trending, "data", "subjectList") if i.media_type == TV]

    sections = [("Hot TV Shows", hot_tv, "grid")]
    if trending_tv:
        sections.append(("Trending TV Shows", trending_tv, "grid"))
    for genre, items in group_by_genre(hot_tv, trending_tv, limit=8):
        sections.append((genre, items, "grid"))

    return render(request, "browse.html", eyebrow="Browse", heading="TV Shows", sections=sections)


async def render_category(request: Request, page: str, ranked_key: Optional[str] = None):
    eyebrow, heading, blurb, rows = CATEGORY_PAGES[page]
    keys = [key for _, key in rows]
    if ranked_key:
        keys.append(ranked_key)
    async with local_query_client(request.app) as client:
        results = await asyncio.gather(*(load_category(client, key) for key in keys))
    sections = [(title, items, "row") for (title, _), items in zip(rows, results)]
    ranked = results[-1][:10] if ranked_key else []
    return render(
        request,
        "browse.html",
        eyebrow=eyebrow,
        heading=heading,
        blurb=blurb,
        sections=sections,
        ranked=ranked,
    )


@router.get("/series")
async def series(request: Request):
    return await render_category(request, "series")


@router.get("/animation")
async def animation(request: Request):
    return await render_category(request, "animation")


@router.get("/novel")
async def novel(request: Request):
    return await render_category(request, "novel")


@router.get("/music")
async def music(request: Request):
    return await render_category(request, "music")


@router.get("/most-viewed")
async def most_viewed(request: Request):
    return await render_category(request, "most-viewed", ranked_key="most-trending")


@router.get("/search")
async def search(request: Request, q: str = ""):
    term = q.strip()
    enabled = len(term) > 1
    async with local_query_client(request.app) as client:
        tmdb, imdb = await asyncio.gather(
            client.get(f"/api/tmdb/search/{quote(term, safe='')}", term, enabled=enabled),
            client.get("/api/imdb/search", term, params={"q": term}, enabled=enabled),
        )
    results = [
        i for i in coerce_items(dig(tmdb.data_or({}), "results", default=[]), from_tmdb)
        if i.poster
    ]
    imdb_results = coerce_items(dig(imdb.data_or({}), "titles", default=[]), from_imdb)
    return render(
        request,
        "search.html",
        query=term,
        results=results,
        imdb_results=imdb_results,
        failed=tmdb.is_error,
    )


@router.get("/detail/{media_type}/{subject_id}")
async def detail(request: Request, media_type: str, subject_id: str, title: str = "", detailPath: str = ""):
    async with local_query_client(request.app) as client:
        rich, basic, recommended = await asyncio.gather(
            client.get("/api/wolflix/rich-detail", detailPath,
                       params={"detailPath": detailPath}, enabled=bool(detailPath)),
            client.get("/api/wolflix/detail", subject_id,
                       params={"subjectId": subject_id}, enabled=not detailPath),
            client.get("/api/wolflix/recommend", subject_id, params={"subjectId": subject_id}),
        )

    data = dig(rich.data_or({}), "data") or dig(basic.data_or({}), "data") or {}
    record = dict(data) if isinstance(data, dict) else {}
    record["subjectId"] = record.get("subjectId") or subject_id
    record["title"] = record.get("title") or title
    record["detailPath"] = detailPath or record.get("detailPath")
    item = from_moviebox(record, TV if media_type == TV else MOVIE)

    cast = [
        staff for staff in record.get("staffList") or []
        if isinstance(staff, dict) and staff.get("name")
    ]
    return render(
        request,
        "detail.html",
        item=item,
        cast=cast[:12],
        recommended=subjects(recommended, "data", "items")[:12],
        loading_failed=rich.is_error or basic.is_error,
    )


def _watch_link(request: Request, **overrides) -> str:
    params = dict(request.query_params)
    for key, value in overrides.items():
        if value is None:
            params.pop(key, None)
        else:
            params[key] = value
    return f"{request.url.path}?{urlencode(params)}" if params else request.url.path


@router.get("/watch/{media_type}/{subject_id}")
async def watch(
    request: Request,
    media_type: str,
    subject_id: str,
    title: str = "",
    detailPath: str = "",
    season: Optional[int] = None,
    episode: Optional[int] = None,
    source: Optional[str] = None,
    index: int = 0,
):
    media_type = TV if media_type == TV else MOVIE
    subject = build_subject(media_type, subject_id, title, detailPath, season, episode)
    async with local_query_client(request.app) as client:
        # Shares its query key with the direct lookup's own detail-path search
        state, found, recommended = await asyncio.gather(
            resolve_sources(client, subject, parse_source(source), index),
            client.get("/api/wolflix/search", title, params={"keyword": title},
                       enabled=bool(title) and not detailPath),
            client.get("/api/wolflix/recommend", subject_id, params={"subjectId": subject_id}),
        )

    match = pick_subject_match(found.data_or({}), subject_id)
    item = from_moviebox(match, media_type) if match else None

    episode_links = {}
    if subject.season is not None:
        if subject.episode > 1:
            episode_links["previous"] = _watch_link(request, episode=subject.episode - 1, index=None, source=None)
        episode_links["next"] = _watch_link(request, episode=subject.episode + 1, index=None, source=None)

    return render(
        request,
        "watch.html",
        title=title or (item.title if item else ""),
        media_type=media_type,
        subject=subject,
        item=item,
        state=state,
        Phase=Phase,
        retry_link=_watch_link(request, source=None, index=None),
        embed_link=_watch_link(request, source=Source.EMBED.value, index=None),
        direct_link=_watch_link(request, source=Source.DIRECT.value, index=None),
        option_link=lambda i: _watch_link(request, source=state.source.value, index=i),
        episode_links=episode_links,
        recommended=subjects(recommended, "data", "items")[:12],
    )


@router.get("/profile")
async def profile(request: Request):
    history = [
        {"title": "The Matrix", "time": "2h ago", "rating": 8.7},
        {"title": "Inception", "time": "5h ago", "rating": 8.8},
        {"title": "Interstellar", "time": "1d ago", "rating": 8.6},
        {"title": "The Dark Knight", "time": "2d ago", "rating": 9.0},
    ]
    stats = [
        ("Movies Watched", "247"),
        ("Hours Streamed", "892"),
        ("Avg Rating", "8.4"),
        ("Watchlist", "56"),
    ]
    return render(request, "profile.html", history=history, stats=stats)


QUALITIES = ("480p", "720p", "1080p", "4K")
LANGUAGES = ("English", "Spanish", "French", "German", "Japanese")


@router.get("/settings")
async def settings(
    request: Request,
    quality: str = "1080p",
    language: str = "English",
    autoplay: bool = True,
    notifications: bool = True,
):
    return render(
        request,
        "settings.html",
        qualities=QUALITIES,
        languages=LANGUAGES,
        quality=quality if quality in QUALITIES else "1080p",
        language=language if language in LANGUAGES else "English",
        autoplay=autoplay,
        notifications=notifications,
    )


PLATFORMS = [
    ("Mobile App", "Stream on iOS and Android devices",
     ["Offline downloads", "Push notifications", "Picture-in-picture"], "Coming Soon"),
    ("Browser Extension", "Quick access from your browser toolbar",
     ["One-click streaming", "Bookmarks sync", "Dark mode"], "Available"),
    ("Desktop App", "Native app for Windows, Mac, and Linux",
     ["4K streaming", "Hardware acceleration", "System tray"], "Coming Soon"),
    ("Settings", "Configure your streaming preferences",
     ["Quality settings", "Subtitle preferences", "Playback speed"], "Available"),
]


@router.get("/application")
async def application(request: Request):
    return render(request, "application.html", platforms=PLATFORMS)
