"""Pairwise track similarity and the cached similarity matrix.

The matrix is a full O(n^2) precompute over the catalog. That is fine for
small and moderate catalogs; larger ones would need an approximate
nearest-neighbour index built lazily per query instead.
"""

import logging
import threading
from collections.abc import Mapping
from types import MappingProxyType

from harmony_discover.core.models import Track
from harmony_discover.services.catalog import CatalogStore

logger = logging.getLogger(__name__)

GENRE_WEIGHT = 0.4
ARTIST_WEIGHT = 0.3
PLAY_COUNT_WEIGHT = 0.2
RECENCY_WEIGHT = 0.1

_EMPTY_ROW: Mapping[str, float] = MappingProxyType({})


def _closeness(a: float, b: float) -> float:
    """1 - |a - b| / max(a, b), or 0 when max(a, b) is not positive."""
    upper = max(a, b)
    if upper <= 0:
        return 0.0
    return max(0.0, 1.0 - abs(a - b) / upper)


def track_similarity(a: Track, b: Track) -> float:
    """Weighted similarity of two tracks in [0, 1].

    Genre match 0.4, artist match 0.3, play-count closeness up to 0.2 and
    release-time closeness up to 0.1.
    """
    score = 0.0
    if a.genre == b.genre:
        score += GENRE_WEIGHT
    if a.artist == b.artist:
        score += ARTIST_WEIGHT
    score += PLAY_COUNT_WEIGHT * _closeness(a.play_count, b.play_count)
    score += RECENCY_WEIGHT * _closeness(a.created_at.timestamp(), b.created_at.timestamp())
    return min(score, 1.0)


class SimilarityIndex:
    """Similarity matrix over a catalog, rebuilt when the catalog changes.

    Rows are built into a fresh dict and published in a single assignment,
    so a reader sees either the previous matrix or the new one.
    """

    def __init__(self, catalog: CatalogStore):
        self.catalog = catalog
        self._lock = threading.Lock()
        self._matrix: dict[str, Mapping[str, float]] = {}
        self._built_version: int | None = None

    def _current(self) -> dict[str, Mapping[str, float]]:
        if self._built_version == self.catalog.version:
            return self._matrix
        with self._lock:
            if self._built_version != self.catalog.version:
                self._rebuild()
            return self._matrix

    def _rebuild(self) -> None:
        version = self.catalog.version
        tracks = self.catalog.tracks
        matrix: dict[str, Mapping[str, float]] = {}
        for track in tracks:
            row = {other.id: track_similarity(track, other) for other in tracks if other.id != track.id}
            matrix[track.id] = MappingProxyType(row)

        self._matrix = matrix
        self._built_version = version
        logger.info(f"Similarity matrix rebuilt for catalog version {version}: {self.pair_count} pairs")

    def rebuild(self) -> None:
        """Force a rebuild against the current catalog."""
        with self._lock:
            self._rebuild()

    def row(self, track_id: str) -> Mapping[str, float]:
        """Similarity of ``track_id`` to every other track (read-only)."""
        return self._current().get(track_id, _EMPTY_ROW)

    def similarity(self, a_id: str, b_id: str) -> float:
        return self.row(a_id).get(b_id, 0.0)

    def nearest(self, track_id: str, limit: int = 10, threshold: float = 0.0) -> list[tuple[str, float]]:
        """Most similar tracks to ``track_id`` with similarity above ``threshold``.

        Sorted by descending similarity; ties keep catalog order.
        """
        neighbours = [(other_id, score) for other_id, score in self.row(track_id).items() if score > threshold]
        neighbours.sort(key=lambda item: item[1], reverse=True)
        return neighbours[:limit]

    @property
    def pair_count(self) -> int:
        """Number of ordered (a, b) pairs in the built matrix."""
        return sum(len(row) for row in self._matrix.values())
