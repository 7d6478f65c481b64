"""Candidate-level guidance: top sectors, skill gaps, and suggestions."""

import logging
from collections import Counter
from collections.abc import Iterable

from placement.core.schemas import Candidate, Opportunity, StudentInsights
from placement.pipeline.eligibility import evaluate_eligibility

logger = logging.getLogger(__name__)

MAX_SECTORS = 3
MAX_SKILL_GAPS = 5
LOW_CGPA = 8.0
STRONG_CGPA = 8.5
LOW_ELIGIBLE_RATIO = 0.3


def summarize_insights(
    candidate: Candidate,
    opportunities: Iterable[Opportunity],
) -> StudentInsights:
    """Summarize where a candidate stands across the whole drive market.

    Sectors come from the eligible drives only. Skill gaps are drawn from
    every drive's required skills, eligible or not.
    """
    drives = list(opportunities)
    eligible = [d for d in drives if evaluate_eligibility(candidate, d).is_eligible]

    # most_common keeps first-seen order among equal counts
    sectors = Counter(d.sector for d in eligible)
    top_sectors = tuple(s for s, _ in sectors.most_common(MAX_SECTORS))

    market_skills: dict[str, None] = {}
    for d in drives:
        for skill in d.required_skills:
            market_skills[skill] = None
    declared = set(candidate.skills)
    skill_gaps = tuple(s for s in market_skills if s not in declared)[:MAX_SKILL_GAPS]

    suggestions: list[str] = []
    if candidate.cgpa < LOW_CGPA:
        suggestions.append("Focus on improving your CGPA to unlock more opportunities")
    if candidate.backlogs > 0:
        suggestions.append("Clear your backlogs to become eligible for more drives")
    if skill_gaps:
        suggestions.append(f"Learn these in-demand skills: {', '.join(skill_gaps[:3])}")
    if len(eligible) < len(drives) * LOW_ELIGIBLE_RATIO:
        suggestions.append("Consider expanding your skill set to match more job requirements")
    if eligible and candidate.cgpa >= STRONG_CGPA:
        suggestions.append("You're a strong candidate! Apply to Dream companies")

    logger.debug(
        "Insights for student '%s': %d/%d eligible, %d gaps",
        candidate.id, len(eligible), len(drives), len(skill_gaps),
    )
    return StudentInsights(
        eligible_count=len(eligible),
        top_sectors=top_sectors,
        skill_gaps=skill_gaps,
        suggestions=tuple(suggestions),
    )
