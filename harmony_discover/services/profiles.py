"""Per-user listening profiles and user-to-user similarity."""

import logging
import threading
from dataclasses import dataclass
from datetime import UTC, datetime

from harmony_discover.core.models import MAX_RECENT_TRACKS, InteractionAction, Track, UserProfile

logger = logging.getLogger(__name__)

GENRE_OVERLAP_WEIGHT = 0.4
ARTIST_OVERLAP_WEIGHT = 0.3
HISTORY_OVERLAP_WEIGHT = 0.3


@dataclass
class SimilarUser:
    """Another listener and how close their taste is."""

    profile: UserProfile
    similarity: float


def _jaccard(a: set[str], b: set[str]) -> float | None:
    """|a & b| / |a | b|, or None when both sets are empty."""
    union = a | b
    if not union:
        return None
    return len(a & b) / len(union)


def user_similarity(p1: UserProfile, p2: UserProfile) -> float:
    """Average of the weighted overlap factors that apply to both users.

    A factor (favorite genres, favorite artists, listening history) only
    counts when at least one of the users has data for it, so sparse
    profiles are not dragged down by signals they never produced.
    """
    factors = [
        (_jaccard(p1.favorite_genres, p2.favorite_genres), GENRE_OVERLAP_WEIGHT),
        (_jaccard(p1.favorite_artists, p2.favorite_artists), ARTIST_OVERLAP_WEIGHT),
        (_jaccard(p1.history_track_ids, p2.history_track_ids), HISTORY_OVERLAP_WEIGHT),
    ]
    applicable = [overlap * weight for overlap, weight in factors if overlap is not None]
    if not applicable:
        return 0.0
    return sum(applicable) / len(applicable)


class UserProfileStore:
    """Holds every known listener's profile.

    ``update`` is the only mutator. Updates for the same user are
    serialized by a per-user lock; different users proceed independently.
    """

    SIMILAR_USER_THRESHOLD = 0.3

    def __init__(self) -> None:
        self._profiles: dict[str, UserProfile] = {}
        self._user_locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, user_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._user_locks.get(user_id)
            if lock is None:
                lock = self._user_locks[user_id] = threading.Lock()
            return lock

    def get(self, user_id: str) -> UserProfile | None:
        """Get a profile, or None for users with no recorded events."""
        return self._profiles.get(user_id)

    def user_ids(self) -> list[str]:
        return list(self._profiles)

    def update(self, user_id: str, track: Track, action: InteractionAction) -> UserProfile:
        """Apply a play, skip or like to a user's profile.

        Args:
            user_id: Listener ID; the profile is created on first use.
            track: Track the user interacted with.
            action: "play", "skip" or "like".

        Returns:
            The updated profile.
        """
        with self._lock_for(user_id):
            profile = self._profiles.get(user_id)
            if profile is None:
                profile = UserProfile(user_id=user_id)
                with self._registry_lock:
                    self._profiles[user_id] = profile
                logger.info(f"Created profile for user {user_id}")

            if track.id not in profile.history_track_ids:
                profile.recent_tracks.insert(0, track)
                del profile.recent_tracks[MAX_RECENT_TRACKS:]

            if action == "play":
                profile.play_counts[track.id] = profile.play_counts.get(track.id, 0) + 1
            elif action == "skip":
                profile.skip_counts[track.id] = profile.skip_counts.get(track.id, 0) + 1
            elif action == "like":
                profile.favorite_genres.add(track.genre)
                profile.favorite_artists.add(track.artist)

            profile.last_active = datetime.now(UTC)
            return profile

    def find_similar_users(self, profile: UserProfile) -> list[SimilarUser]:
        """Other users whose similarity to ``profile`` exceeds the threshold.

        Sorted by descending similarity; ties keep store insertion order.

        Other profiles are read without taking their per-user locks, so a
        profile mid-update may be compared as it stands. Nothing here mutates
        another user's profile.
        """
        with self._registry_lock:
            others = [p for uid, p in self._profiles.items() if uid != profile.user_id]

        similar = []
        for other in others:
            score = user_similarity(profile, other)
            if score > self.SIMILAR_USER_THRESHOLD:
                similar.append(SimilarUser(profile=other, similarity=score))
        similar.sort(key=lambda s: s.similarity, reverse=True)
        return similar

    def __len__(self) -> int:
        return len(self._profiles)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._profiles
