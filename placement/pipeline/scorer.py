"""Rule-based match scoring for (candidate, opportunity) pairs.

Score range: 0-100 (clamped). Bands from ScoringConfig, evaluated in order:
eligibility, branch fit, skill overlap, academic excellence, high-value fit.
Each band that awards points adds one reason, in that order.
"""

import logging
from collections.abc import Sequence

from placement.core.config import ScoreTier, ScoringConfig
from placement.core.schemas import Candidate, MatchResult, Opportunity, Unrestricted
from placement.pipeline.eligibility import ELIGIBLE_REASON, evaluate_eligibility

logger = logging.getLogger(__name__)


def score_match(
    candidate: Candidate,
    opportunity: Opportunity,
    config: ScoringConfig | None = None,
) -> MatchResult:
    """Score how well an opportunity fits a candidate.

    Args:
        candidate: The student profile.
        opportunity: The drive to score.
        config: Scoring weights; defaults to ScoringConfig().

    Returns:
        MatchResult with the clamped integer score, per-band reasons, and the
        full eligibility result.
    """
    config = config or ScoringConfig()
    score = 0
    reasons: list[str] = []

    # Eligibility band
    eligibility = evaluate_eligibility(candidate, opportunity)
    if eligibility.is_eligible:
        score += config.eligible_points
        reasons.append(ELIGIBLE_REASON)
    elif _near_miss(candidate, opportunity, config.near_miss_margin):
        score += config.near_miss_points
        reasons.append("CGPA is close to requirement")

    # Branch fit band
    policy = opportunity.allowed_branches
    if isinstance(policy, Unrestricted) and not policy.explicit:
        score += config.branch_open_points
        reasons.append("No branch restriction for this role")
    elif policy.allows(candidate.branch):
        score += config.branch_match_points
        reasons.append("Your branch is preferred for this role")

    # Skill overlap band
    required = opportunity.required_skills
    if required:
        matched = count_skill_matches(required, candidate.skills)
        points = _tier_points(matched / len(required), config.skill_tiers)
        if points:
            score += points
            reasons.append(f"{matched}/{len(required)} required skills matched")

    # Academic excellence bonus
    tier = _tier(candidate.cgpa, config.academic_tiers)
    if tier is not None and tier.points:
        score += tier.points
        reasons.append(tier.label or f"CGPA bonus (+{tier.points})")

    # High-value fit bonus
    if opportunity.ctc is not None and candidate.cgpa >= config.high_value_min_cgpa:
        tier = _tier(opportunity.ctc, config.ctc_tiers)
        if tier is not None and tier.points:
            score += tier.points
            reasons.append(tier.label or f"Compensation bonus (+{tier.points})")

    score = max(0, min(100, score))
    logger.debug(
        "Scored drive '%s' for student '%s': %d",
        opportunity.id, candidate.id, score,
    )
    return MatchResult(score=score, reasons=tuple(reasons), eligibility=eligibility)


def count_skill_matches(required: Sequence[str], declared: Sequence[str]) -> int:
    """Count required skills that overlap a declared skill.

    A required token matches when it is a substring of a declared token or a
    declared token is a substring of it ("node" matches "nodejs").
    """
    return sum(
        1 for r in required
        if any(r in d or d in r for d in declared)
    )


def _near_miss(candidate: Candidate, opportunity: Opportunity, margin: float) -> bool:
    if opportunity.min_cgpa is None:
        return False
    # round() strips float noise from the subtraction (7.5 - 0.3).
    return candidate.cgpa >= round(opportunity.min_cgpa - margin, 6)


def _tier(value: float, tiers: Sequence[ScoreTier]) -> ScoreTier | None:
    """Return the highest tier whose threshold ``value`` reaches."""
    for tier in tiers:
        if value >= tier.threshold:
            return tier
    return None


def _tier_points(value: float, tiers: Sequence[ScoreTier]) -> int:
    tier = _tier(value, tiers)
    return tier.points if tier is not None else 0
