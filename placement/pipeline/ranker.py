"""Rank a candidate's drives by match score."""

import logging
from collections.abc import Iterable

from placement.core.config import ScoringConfig
from placement.core.schemas import Candidate, Opportunity, Recommendation
from placement.pipeline.scorer import score_match

logger = logging.getLogger(__name__)


def rank_recommendations(
    candidate: Candidate,
    opportunities: Iterable[Opportunity],
    limit: int = 10,
    config: ScoringConfig | None = None,
) -> list[Recommendation]:
    """Score every drive and return the top ``limit`` by score, highest first.

    Equal scores keep their input order. A limit of zero or less yields an
    empty list.
    """
    if limit <= 0:
        return []
    scored = [
        Recommendation(opportunity=o, match=score_match(candidate, o, config))
        for o in opportunities
    ]
    # list.sort is stable with reverse=True too.
    scored.sort(key=lambda r: r.match.score, reverse=True)
    logger.debug("Ranked %d drives for student '%s'", len(scored), candidate.id)
    return scored[:limit]
