"""Formatting and list shaping used by the page templates."""
from typing import Iterable, Optional
from urllib.parse import urlencode

from wolflix.models import ContentItem

MIN_GENRE_ITEMS = 3


def format_file_size(size) -> str:
    try:
        b = int(size)
    except (TypeError, ValueError):
        return ""
    if b <= 0:
        return ""
    if b < 1024 * 1024:
        return f"{b / 1024:.0f} KB"
    if b < 1024 * 1024 * 1024:
        return f"{b / (1024 * 1024):.0f} MB"
    return f"{b / (1024 * 1024 * 1024):.1f} GB"


def format_duration(seconds) -> str:
    if not seconds:
        return ""
    seconds = int(seconds)
    h, m = seconds // 3600, (seconds % 3600) // 60
    if h > 0:
        return f"{h}h {m}m"
    return f"{m}m"


def format_rating(rating: float) -> str:
    return f"{rating:.1f}"


def detail_url(item: ContentItem) -> str:
    query = {"title": item.title}
    if item.detail_path:
        query["detailPath"] = item.detail_path
    return f"/detail/{item.media_type}/{item.id}?{urlencode(query)}"


def watch_url(item: ContentItem, season: Optional[int] = None, episode: Optional[int] = None) -> str:
    query = {"title": item.title}
    if item.detail_path:
        query["detailPath"] = item.detail_path
    if season is not None:
        query["season"] = season
    if episode is not None:
        query["episode"] = episode
    return f"/watch/{item.media_type}/{item.id}?{urlencode(query)}"


def dedupe(items: Iterable[ContentItem]) -> list[ContentItem]:
    """Keep the first occurrence of each subject id."""
    seen = set()
    unique = []
    for item in items:
        if item.id in seen:
            continue
        seen.add(item.id)
        unique.append(item)
    return unique


def group_by_genre(
    *lists: Iterable[ContentItem],
    media_type: Optional[str] = None,
    min_items: int = MIN_GENRE_ITEMS,
    limit: int = 10,
) -> list[tuple[str, list[ContentItem]]]:
    """Bucket the merged lists by genre, largest buckets first.

    An item appears at most once per bucket even when it shows up in several
    of the merged lists, and buckets with fewer than ``min_items`` distinct
    items are dropped.
    """
    groups: dict[str, list[ContentItem]] = {}
    seen: dict[str, set] = {}
    for items in lists:
        for item in items:
            if not item.genres:
                continue
            if media_type and item.media_type != media_type:
                continue
            for genre in item.genres:
                ids = seen.setdefault(genre, set())
                if item.id in ids:
                    continue
                ids.add(item.id)
                groups.setdefault(genre, []).append(item)

    buckets = [(genre, items) for genre, items in groups.items() if len(items) >= min_items]
    buckets.sort(key=lambda entry: len(entry[1]), reverse=True)
    return buckets[:limit]


def top_rated(items: Iterable[ContentItem], limit: int = 21) -> list[ContentItem]:
    rated = [i for i in items if i.rating > 0]
    rated.sort(key=lambda i: i.rating, reverse=True)
    return dedupe(rated)[:limit]


def new_releases(items: Iterable[ContentItem], limit: int = 21) -> list[ContentItem]:
    dated = [i for i in items if i.release_date]
    dated.sort(key=lambda i: i.release_date, reverse=True)
    return dedupe(dated)[:limit]
