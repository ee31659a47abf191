"""Core data models for Harmony Discover."""

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from harmony_discover.utils.text import generate_track_id

TimeOfDay = Literal["morning", "afternoon", "evening", "night"]
Mood = Literal["happy", "sad", "energetic", "calm", "focused"]
Activity = Literal["working", "exercising", "relaxing", "socializing"]
InteractionAction = Literal["play", "skip", "like"]
StrategyName = Literal["collaborative", "content_based", "contextual", "trending"]

MAX_RECENT_TRACKS = 100


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Track(BaseModel):
    """Playable catalog item. Immutable once loaded."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    artist: str
    genre: str
    play_count: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=_utcnow)

    # Optional metadata
    artist_id: str | None = None
    duration: int | None = None  # seconds
    description: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _derive_id(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("id") and data.get("artist") and data.get("title"):
            data = {**data, "id": generate_track_id(data["artist"], data["title"])}
        return data


class Artist(BaseModel):
    """Creator of catalog tracks."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    is_verified: bool = False

    # Aggregated stats (denormalized)
    total_tracks: int = 0
    total_plays: int = 0

    created_at: datetime = Field(default_factory=_utcnow)


class UserProfile(BaseModel):
    """Learned listening preferences for one user."""

    user_id: str
    recent_tracks: list[Track] = Field(default_factory=list)  # most recent first
    play_counts: dict[str, int] = Field(default_factory=dict)
    skip_counts: dict[str, int] = Field(default_factory=dict)
    favorite_genres: set[str] = Field(default_factory=set)
    favorite_artists: set[str] = Field(default_factory=set)
    last_active: datetime = Field(default_factory=_utcnow)

    @property
    def history_track_ids(self) -> set[str]:
        """IDs of the tracks in the recent listening history."""
        return {track.id for track in self.recent_tracks}


class RecommendationContext(BaseModel):
    """Per-request input to the ranking pipeline."""

    current_track: Track | None = None
    recent_tracks: list[Track] = Field(default_factory=list, max_length=MAX_RECENT_TRACKS)
    user_profile: UserProfile | None = None
    time_of_day: TimeOfDay | None = None
    mood: Mood | None = None
    activity: Activity | None = None
    limit: int = Field(default=10, ge=1)


class Recommendation(BaseModel):
    """A ranked track with the signals that put it there."""

    track: Track
    score: float  # sum of weighted strategy scores
    reason: str  # contributing reasons, "; " separated
    confidence: float  # max over contributing strategies
    strategies: list[StrategyName] = Field(default_factory=list)


class InteractionEvent(BaseModel):
    """A recorded play, skip or like."""

    user_id: str
    track_id: str
    action: InteractionAction


class CatalogSnapshot(BaseModel):
    """Serialized catalog: the JSON shape read by file-based sources."""

    tracks: list[Track] = Field(default_factory=list)
    artists: list[Artist] = Field(default_factory=list)
