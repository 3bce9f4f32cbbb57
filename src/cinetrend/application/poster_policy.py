"""Poster backfill policy: when may a stored poster URL be overwritten."""

from __future__ import annotations

from collections.abc import Iterable

NO_IMAGE_POSTER = "/no-movie.png"

# Substrings of third-party "no image" URLs.
DEFAULT_PLACEHOLDER_MARKERS: tuple[str, ...] = ("placeholder.com", "No+Image")


class PosterBackfillPolicy:
    """One-way ratchet for poster URLs.

    A placeholder (empty, sentinel or known "no image" URL) is always
    eligible for upgrade. A real poster may be replaced by a different real
    poster, never by a placeholder.
    """

    def __init__(
        self,
        *,
        no_image_poster: str = NO_IMAGE_POSTER,
        placeholder_markers: Iterable[str] = DEFAULT_PLACEHOLDER_MARKERS,
    ) -> None:
        self.no_image_poster = no_image_poster
        self._markers = tuple(placeholder_markers)

    def is_placeholder(self, url: str | None) -> bool:
        if not url:
            return True
        if url == self.no_image_poster or url.endswith(self.no_image_poster):
            return True
        return any(marker in url for marker in self._markers)

    def should_replace(self, candidate: str | None, current: str | None) -> bool:
        if not candidate or self.is_placeholder(candidate):
            return False
        if self.is_placeholder(current):
            return True
        return candidate != current
