"""Watch-page source resolution.

Two independent lookups can feed the player: embed links from a showbox-style
provider list ("embed") and direct media streams ("direct"). The choice between
them is a small state machine:

    INIT -> TRYING_EMBED -> EMBED
                         -> TRYING_DIRECT -> DIRECT    (embed answered with no links)
                         -> FAILED                     (embed lookup failed)
    any  -> TRYING_DIRECT / DIRECT / EMBED             (manual switch)

The transition functions below are pure: each takes a ResolverState and
returns a new one. WatchResolver drives them against the two lookups.
"""
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Awaitable, Callable, Optional

from wolflix.models import MOVIE, DirectStream, EmbedLink, Subtitle

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    INIT = "init"
    TRYING_EMBED = "trying_embed"
    EMBED = "embed"
    TRYING_DIRECT = "trying_direct"
    DIRECT = "direct"
    FAILED = "failed"


class Source(str, Enum):
    EMBED = "embed"
    DIRECT = "direct"


@dataclass(frozen=True)
class Subject:
    id: str
    title: str
    media_type: str = MOVIE
    detail_path: str = ""
    season: Optional[int] = None
    episode: Optional[int] = None

    @property
    def identity(self) -> tuple:
        return (self.id, self.title, self.season, self.episode)


@dataclass(frozen=True)
class ResolverState:
    subject: Subject
    phase: Phase = Phase.INIT
    embed_links: tuple[EmbedLink, ...] = ()
    direct_streams: tuple[DirectStream, ...] = ()
    subtitles: tuple[Subtitle, ...] = ()
    embed_done: bool = False
    direct_done: bool = False
    embed_error: bool = False
    direct_error: bool = False
    selected_index: int = 0

    @property
    def source(self) -> Optional[Source]:
        if self.phase in (Phase.TRYING_EMBED, Phase.EMBED):
            return Source.EMBED
        if self.phase in (Phase.TRYING_DIRECT, Phase.DIRECT):
            return Source.DIRECT
        return None

    @property
    def is_loading(self) -> bool:
        return self.phase in (Phase.TRYING_EMBED, Phase.TRYING_DIRECT)

    @property
    def error(self) -> bool:
        return self.phase == Phase.FAILED

    @property
    def options(self) -> tuple:
        if self.phase == Phase.EMBED:
            return self.embed_links
        if self.phase == Phase.DIRECT:
            return self.direct_streams
        return ()

    @property
    def selected(self):
        options = self.options
        if 0 <= self.selected_index < len(options):
            return options[self.selected_index]
        return None

    @property
    def can_switch_to_embed(self) -> bool:
        return bool(self.embed_links) and self.phase != Phase.EMBED

    @property
    def can_switch_to_direct(self) -> bool:
        return self.source != Source.DIRECT

    def to_dict(self) -> dict:
        return {
            "subject": {
                "id": self.subject.id,
                "title": self.subject.title,
                "type": self.subject.media_type,
                "season": self.subject.season,
                "episode": self.subject.episode,
            },
            "phase": self.phase.value,
            "source": self.source.value if self.source else None,
            "loading": self.is_loading,
            "error": self.error,
            "embedError": self.embed_error,
            "directError": self.direct_error,
            "selectedIndex": self.selected_index,
            "embedLinks": [
                {"provider": l.provider, "url": l.url, "quality": l.quality}
                for l in self.embed_links
            ],
            "directStreams": [
                {
                    "id": s.id,
                    "url": s.url,
                    "format": s.format,
                    "resolution": s.resolution,
                    "size": s.size,
                    "duration": s.duration,
                    "codec": s.codec,
                }
                for s in self.direct_streams
            ],
            "subtitles": [
                {"language": s.language, "languageCode": s.language_code, "url": s.url}
                for s in self.subtitles
            ],
        }


def initial(subject: Subject) -> ResolverState:
    return ResolverState(subject=subject)


def start(state: ResolverState) -> ResolverState:
    """Begin resolution; the embed source is always tried first."""
    if state.phase != Phase.INIT:
        return state
    return replace(state, phase=Phase.TRYING_EMBED)


def embed_succeeded(state: ResolverState, links) -> ResolverState:
    links = tuple(links)
    state = replace(state, embed_links=links, embed_done=True, embed_error=False)
    if state.phase != Phase.TRYING_EMBED:
        # The user already moved to the other source; keep the links for a later switch
        return state
    if links:
        return replace(state, phase=Phase.EMBED, selected_index=0)
    logger.debug("No embed links for %r, falling back to direct streams", state.subject.title)
    return replace(state, phase=Phase.TRYING_DIRECT, selected_index=0)


def embed_failed(state: ResolverState) -> ResolverState:
    state = replace(state, embed_done=True, embed_error=True)
    if state.phase != Phase.TRYING_EMBED:
        return state
    return replace(state, phase=Phase.FAILED)


def direct_succeeded(state: ResolverState, streams, subtitles=()) -> ResolverState:
    state = replace(
        state,
        direct_streams=tuple(streams),
        subtitles=tuple(subtitles),
        direct_done=True,
        direct_error=False,
    )
    if state.phase != Phase.TRYING_DIRECT:
        return state
    return replace(state, phase=Phase.DIRECT)


def direct_failed(state: ResolverState) -> ResolverState:
    state = replace(state, direct_done=True, direct_error=True)
    if state.phase != Phase.TRYING_DIRECT:
        return state
    return replace(state, phase=Phase.FAILED)


def switch_source(state: ResolverState, source: Source) -> ResolverState:
    """Manual source switch.

    Switching to embed never re-fetches and is a no-op without embed links.
    Switching to direct reuses a finished direct lookup when there is one.
    """
    if source == Source.EMBED:
        if not state.embed_links or state.phase == Phase.EMBED:
            return state
        return replace(state, phase=Phase.EMBED, selected_index=0)

    if state.source == Source.DIRECT:
        return state
    if state.direct_done and not state.direct_error:
        return replace(state, phase=Phase.DIRECT, selected_index=0)
    return replace(state, phase=Phase.TRYING_DIRECT, selected_index=0, direct_error=False)


def select(state: ResolverState, index: int) -> ResolverState:
    """Pick an option of the active source; out-of-range indexes fall back to 0."""
    if not 0 <= index < len(state.options):
        index = 0
    return replace(state, selected_index=index)


def change_subject(state: ResolverState, subject: Subject) -> ResolverState:
    """Start over when the title/id or the season/episode changes."""
    if subject.identity == state.subject.identity:
        return state
    return initial(subject)


def retry(state: ResolverState) -> ResolverState:
    return initial(state.subject)


EmbedLookup = Callable[[Subject], Awaitable[list[EmbedLink]]]
DirectLookup = Callable[[Subject], Awaitable[tuple[list[DirectStream], list[Subtitle]]]]


class WatchResolver:
    """Runs the state machine against the embed and direct lookups."""

    def __init__(self, lookup_embed: EmbedLookup, lookup_direct: DirectLookup):
        self._lookup_embed = lookup_embed
        self._lookup_direct = lookup_direct

    async def run_embed(self, state: ResolverState) -> ResolverState:
        try:
            links = await self._lookup_embed(state.subject)
        except Exception as e:
            logger.warning("Embed lookup failed for %r: %s", state.subject.title, e)
            return embed_failed(state)
        return embed_succeeded(state, links)

    async def run_direct(self, state: ResolverState) -> ResolverState:
        try:
            streams, subtitles = await self._lookup_direct(state.subject)
        except Exception as e:
            logger.warning("Direct lookup failed for %r: %s", state.subject.title, e)
            return direct_failed(state)
        return direct_succeeded(state, streams, subtitles)

    async def resolve(
        self,
        subject: Subject,
        source: Optional[Source] = None,
        index: int = 0,
    ) -> ResolverState:
        state = start(initial(subject))
        state = await self.run_embed(state)
        if source is not None:
            state = switch_source(state, source)
        if state.phase == Phase.TRYING_DIRECT:
            state = await self.run_direct(state)
        return select(state, index)
