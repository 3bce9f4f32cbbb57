"""Interaction event handlers: route UI events to the counter use cases."""

from __future__ import annotations

import structlog

from cinetrend.application.use_cases.record_counter import KeyedCounterAggregator
from cinetrend.application.use_cases.trending import TrendingRanker
from cinetrend.domain.entities.counters import (
    CounterCollection,
    CounterDocument,
    CounterMetadata,
    DetailViewed,
    MovieSummary,
    PosterDiscovered,
    SearchSubmitted,
)

log = structlog.get_logger(__name__)

TMDB_POSTER_BASE = "https://image.tmdb.org/t/p/w500"


def poster_url_for(poster_path: str | None, base_url: str = TMDB_POSTER_BASE) -> str | None:
    if not poster_path:
        return None
    if poster_path.startswith(("http://", "https://")):
        return poster_path
    if not poster_path.startswith("/"):
        poster_path = f"/{poster_path}"
    return f"{base_url.rstrip('/')}{poster_path}"


class CounterEventHandler:
    """Consumes SearchSubmitted / DetailViewed / PosterDiscovered events.

    Click and poster events are followed by an explicit ranking re-read,
    returned to the caller so it can redraw the trending section.
    """

    def __init__(
        self,
        *,
        aggregator: KeyedCounterAggregator,
        ranker: TrendingRanker,
        searches: CounterCollection,
        clicks: CounterCollection,
        trending_limit: int = 5,
        poster_base_url: str = TMDB_POSTER_BASE,
    ) -> None:
        self._aggregator = aggregator
        self._ranker = ranker
        self.searches = searches
        self.clicks = clicks
        self.trending_limit = trending_limit
        self._poster_base_url = poster_base_url

    def metadata_for(self, movie: MovieSummary | None) -> CounterMetadata:
        if movie is None:
            return CounterMetadata()
        return CounterMetadata(
            title=movie.title,
            poster_url=poster_url_for(movie.poster_path, self._poster_base_url),
            movie_id=movie.id,
            vote_average=movie.vote_average,
            release_date=movie.release_date,
            original_language=movie.original_language,
        )

    async def on_search_submitted(self, event: SearchSubmitted) -> CounterDocument | None:
        if not event.term or not event.term.strip():
            log.debug("search_event_ignored", reason="blank_term")
            return None
        return await self._aggregator.record(
            self.searches, event.term, self.metadata_for(event.chosen_result)
        )

    async def on_detail_viewed(self, event: DetailViewed) -> list[CounterDocument]:
        if event.movie.id is None:
            log.debug("detail_event_ignored", reason="missing_movie_id")
        else:
            await self._aggregator.record(
                self.clicks, event.movie.id, self.metadata_for(event.movie)
            )
        return await self.trending()

    async def on_poster_discovered(self, event: PosterDiscovered) -> list[CounterDocument]:
        await self._aggregator.refresh_poster(self.clicks, event.movie_id, event.poster_url)
        return await self.trending()

    async def trending(self, limit: int | None = None) -> list[CounterDocument]:
        return await self._ranker.top_n(self.clicks, limit or self.trending_limit)
