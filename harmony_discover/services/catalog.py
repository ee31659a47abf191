"""In-memory track/artist catalog and the sources that feed it."""

import asyncio
import logging
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Protocol

import pydantic
from pydantic import TypeAdapter

from harmony_discover.core.exceptions import CatalogSourceError, NotFoundError, ValidationError
from harmony_discover.core.models import Artist, CatalogSnapshot, InteractionEvent, Track

logger = logging.getLogger(__name__)


class CatalogSource(Protocol):
    """Anything that can hand the engine a catalog snapshot."""

    async def fetch_tracks(self) -> list[Track]: ...

    async def fetch_artists(self) -> list[Artist]: ...


class CatalogStore:
    """Owns the current set of tracks and artists.

    The store is replaced wholesale through ``replace``; each replacement
    bumps ``version`` so derived structures (the similarity matrix) know
    to rebuild. Readers always see one consistent snapshot.
    """

    def __init__(self, tracks: Iterable[Track] = (), artists: Iterable[Artist] = ()):
        self._lock = threading.Lock()
        self._version = 0
        self._tracks: dict[str, Track] = {}
        self._artists: dict[str, Artist] = {}
        tracks = list(tracks)
        artists = list(artists)
        if tracks or artists:
            self.replace(tracks, artists)

    @property
    def version(self) -> int:
        """Monotonic counter incremented on every reload."""
        return self._version

    @property
    def tracks(self) -> list[Track]:
        """Tracks in load order."""
        return list(self._tracks.values())

    @property
    def artists(self) -> list[Artist]:
        return list(self._artists.values())

    def replace(self, tracks: Iterable[Track], artists: Iterable[Artist] | None = None) -> None:
        """Swap in a new catalog snapshot.

        Args:
            tracks: The complete new track list.
            artists: The complete new artist list. ``None`` keeps the
                current artists.

        Raises:
            ValidationError: If two tracks share an ID.
        """
        by_id: dict[str, Track] = {}
        for track in tracks:
            if track.id in by_id:
                raise ValidationError(f"Duplicate track id in catalog: {track.id}")
            by_id[track.id] = track

        with self._lock:
            if artists is not None:
                self._artists = {artist.id: artist for artist in artists}
            self._tracks = by_id
            self._version += 1

        logger.info(
            f"Catalog loaded (version {self._version}): {len(by_id)} tracks, {len(self._artists)} artists"
        )

    def find(self, track_id: str) -> Track | None:
        return self._tracks.get(track_id)

    def get(self, track_id: str) -> Track:
        """Get a track by ID.

        Raises:
            NotFoundError: If the track is not in the catalog.
        """
        track = self._tracks.get(track_id)
        if track is None:
            raise NotFoundError(f"Track not found: {track_id}")
        return track

    def find_artist(self, name: str) -> Artist | None:
        """Look up an artist by display name (case-insensitive)."""
        wanted = name.strip().lower()
        for artist in self._artists.values():
            if artist.name.lower() == wanted:
                return artist
        return None

    def tracks_in_genres(self, genres: Iterable[str]) -> list[Track]:
        """Tracks whose genre is one of ``genres``, in catalog order."""
        wanted = set(genres)
        return [track for track in self._tracks.values() if track.genre in wanted]

    def get_stats(self) -> dict[str, Any]:
        """Summary statistics for display."""
        tracks = list(self._tracks.values())
        play_counts = [t.play_count for t in tracks]
        return {
            "total_tracks": len(tracks),
            "total_artists": len(self._artists),
            "unique_artists": len({t.artist for t in tracks}),
            "genres": sorted({t.genre for t in tracks}),
            "max_play_count": max(play_counts, default=0),
            "avg_play_count": sum(play_counts) / len(play_counts) if play_counts else 0.0,
        }

    def __len__(self) -> int:
        return len(self._tracks)

    def __contains__(self, track_id: object) -> bool:
        return track_id in self._tracks


class JsonCatalogSource:
    """Reads a ``CatalogSnapshot`` from a JSON file.

    The parsed snapshot is reused until the file's modification time or
    size changes, so one refresh parses the file once.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._snapshot: CatalogSnapshot | None = None
        self._stamp: tuple[int, int] | None = None

    async def fetch_tracks(self) -> list[Track]:
        snapshot = await self._load()
        return snapshot.tracks

    async def fetch_artists(self) -> list[Artist]:
        snapshot = await self._load()
        return snapshot.artists

    async def _load(self) -> CatalogSnapshot:
        stamp = self._file_stamp()
        if self._snapshot is None or stamp != self._stamp:
            self._snapshot = await asyncio.to_thread(self._read)
            self._stamp = stamp
        return self._snapshot

    def _file_stamp(self) -> tuple[int, int]:
        try:
            stat = self.path.stat()
        except OSError as e:
            raise CatalogSourceError(str(self.path), f"cannot read catalog: {e}") from e
        return stat.st_mtime_ns, stat.st_size

    def _read(self) -> CatalogSnapshot:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise CatalogSourceError(str(self.path), f"cannot read catalog: {e}") from e
        try:
            return CatalogSnapshot.model_validate_json(raw)
        except pydantic.ValidationError as e:
            raise CatalogSourceError(str(self.path), f"invalid catalog: {e}") from e


_EVENTS_ADAPTER = TypeAdapter(list[InteractionEvent])


def load_events(path: str | Path) -> list[InteractionEvent]:
    """Load a JSON array of interaction events.

    Raises:
        CatalogSourceError: If the file is missing or malformed.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogSourceError(str(path), f"cannot read events: {e}") from e
    try:
        return _EVENTS_ADAPTER.validate_json(raw)
    except pydantic.ValidationError as e:
        raise CatalogSourceError(str(path), f"invalid events: {e}") from e
