"""Shared test fixtures for Harmony Discover."""

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from harmony_discover.core.config import Settings
from harmony_discover.core.models import Artist, CatalogSnapshot, Track
from harmony_discover.services.catalog import CatalogStore
from harmony_discover.services.engine import RecommendationEngine
from harmony_discover.services.profiles import UserProfileStore

BASE_TIME = datetime(2024, 1, 1, tzinfo=UTC)


def make_track(
    track_id: str,
    genre: str = "Electronic",
    artist: str = "SynthMaster",
    play_count: int = 0,
    created_at: datetime = BASE_TIME,
    title: str | None = None,
) -> Track:
    """Build a track with sensible defaults."""
    return Track(
        id=track_id,
        title=title or f"Track {track_id}",
        artist=artist,
        genre=genre,
        play_count=play_count,
        created_at=created_at,
    )


@pytest.fixture
def sample_tracks() -> list[Track]:
    """Small catalog covering several genres. All share one release time."""
    return [
        make_track("t1", "Electronic", "SynthMaster", 5000, title="Electronic Dreams"),
        make_track("t2", "Rock", "GuitarHero", 3000, title="Rock Anthem"),
        make_track("t3", "Electronic", "SynthMaster", 800, title="Night Drive"),
        make_track("t4", "Ambient", "CalmWaves", 1200, title="Morning Mist"),
        make_track("t5", "Blues", "SlowHand", 400, title="Blue Hour"),
        make_track("t6", "Pop", "BrightSide", 2500, title="Sunny Pop"),
        make_track("t7", "Electronic", "NeonPulse", 4500, title="Neon Lights"),
    ]


@pytest.fixture
def sample_artists() -> list[Artist]:
    return [
        Artist(id="a1", name="SynthMaster", is_verified=True, total_tracks=2, total_plays=5800),
        Artist(id="a2", name="GuitarHero", total_tracks=1, total_plays=3000),
    ]


@pytest.fixture
def catalog(sample_tracks: list[Track], sample_artists: list[Artist]) -> CatalogStore:
    return CatalogStore(sample_tracks, sample_artists)


@pytest.fixture
def profiles() -> UserProfileStore:
    return UserProfileStore()


@pytest.fixture
def engine(catalog: CatalogStore, profiles: UserProfileStore) -> RecommendationEngine:
    return RecommendationEngine(catalog, profiles, settings=Settings())


@pytest.fixture
def taste_twins(engine: RecommendationEngine) -> RecommendationEngine:
    """Users u1 and u2 with near-identical taste.

    u2 has also played t6 twice, which u1 has never heard. Their similarity
    is (0.4 + 0.3 + 0.3 * 3/4) / 3.
    """
    catalog = engine.catalog
    for user_id in ("u1", "u2"):
        engine.update_user_profile(user_id, catalog.get("t1"), "like")
        engine.update_user_profile(user_id, catalog.get("t3"), "like")
        engine.update_user_profile(user_id, catalog.get("t2"), "play")
    engine.update_user_profile("u2", catalog.get("t6"), "play")
    engine.update_user_profile("u2", catalog.get("t6"), "play")
    return engine


@pytest.fixture
def catalog_file(tmp_path: Path, sample_tracks: list[Track], sample_artists: list[Artist]) -> Path:
    """Catalog JSON file on disk."""
    path = tmp_path / "catalog.json"
    snapshot = CatalogSnapshot(tracks=sample_tracks, artists=sample_artists)
    path.write_text(snapshot.model_dump_json(), encoding="utf-8")
    return path


@pytest.fixture
def events_file(tmp_path: Path) -> Path:
    """Interaction events matching the taste_twins fixture, plus one stale event."""
    events = []
    for user_id in ("u1", "u2"):
        events += [
            {"user_id": user_id, "track_id": "t1", "action": "like"},
            {"user_id": user_id, "track_id": "t3", "action": "like"},
            {"user_id": user_id, "track_id": "t2", "action": "play"},
        ]
    events += [
        {"user_id": "u2", "track_id": "t6", "action": "play"},
        {"user_id": "u2", "track_id": "t6", "action": "play"},
        {"user_id": "u2", "track_id": "gone", "action": "play"},
    ]
    path = tmp_path / "events.json"
    path.write_text(json.dumps(events), encoding="utf-8")
    return path


@pytest.fixture(name="make_track")
def make_track_fixture():
    """Factory fixture for ad-hoc tracks."""
    return make_track
