"""Weighting, merging and ranking of strategy candidates."""

from collections.abc import Iterable

from harmony_discover.core.models import Recommendation, StrategyName
from harmony_discover.services.strategies import Candidate

STRATEGY_WEIGHTS: dict[StrategyName, float] = {
    "collaborative": 0.4,
    "content_based": 0.3,
    "contextual": 0.2,
    "trending": 0.1,
}

REASON_SEPARATOR = "; "


def apply_weight(candidates: Iterable[Candidate], weight: float) -> list[Candidate]:
    """Copies of ``candidates`` with their scores multiplied by ``weight``."""
    return [
        Candidate(
            track=c.track,
            score=c.score * weight,
            reason=c.reason,
            confidence=c.confidence,
            strategy=c.strategy,
        )
        for c in candidates
    ]


def merge_candidates(candidates: Iterable[Candidate]) -> list[Recommendation]:
    """Collapse candidates for the same track into one recommendation.

    Scores add up, reasons are joined in contribution order and the
    confidence is the highest single contribution. The result keeps the
    order in which each track was first seen.
    """
    merged: dict[str, Recommendation] = {}
    for candidate in candidates:
        existing = merged.get(candidate.track.id)
        if existing is None:
            merged[candidate.track.id] = Recommendation(
                track=candidate.track,
                score=candidate.score,
                reason=candidate.reason,
                confidence=candidate.confidence,
                strategies=[candidate.strategy],
            )
            continue

        existing.score += candidate.score
        existing.reason += f"{REASON_SEPARATOR}{candidate.reason}"
        existing.confidence = max(existing.confidence, candidate.confidence)
        if candidate.strategy not in existing.strategies:
            existing.strategies.append(candidate.strategy)
    return list(merged.values())


def rank(candidates: Iterable[Candidate], limit: int) -> list[Recommendation]:
    """Merge, sort by descending score and keep the top ``limit``.

    The sort is stable, so equal scores stay in first-seen order.
    """
    recommendations = merge_candidates(candidates)
    recommendations.sort(key=lambda r: r.score, reverse=True)
    return recommendations[:limit]
