"""Orchestrator: wires the filter chain, ranker, and insights for one student.

Data flow:
  1. Filter chain (active, open)      → open drives
  2. Filter chain (not applied)       → unapplied drives
  3. Ranker over unapplied drives     → recommendations
  4. Insights over all open drives    → guidance
"""

import logging
from collections.abc import Iterable
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from placement.core.config import Settings
from placement.core.schemas import (
    Application,
    Candidate,
    Opportunity,
    Recommendation,
    StudentInsights,
    utc_now,
)
from placement.pipeline.insights import summarize_insights
from placement.pipeline.matcher import (
    ActiveDriveFilter,
    NotAppliedFilter,
    OpenRegistrationFilter,
    run_filter_chain,
)
from placement.pipeline.ranker import rank_recommendations

logger = logging.getLogger(__name__)


class RecommendationReport(BaseModel):
    """Everything the recommendation page shows for one student."""

    model_config = ConfigDict(frozen=True)

    recommendations: tuple[Recommendation, ...]
    insights: StudentInsights
    total_drives: int
    unapplied_drives: int


def build_recommendation_report(
    candidate: Candidate,
    drives: Iterable[Opportunity],
    applications: Iterable[Application],
    settings: Settings | None = None,
    now: datetime | None = None,
) -> RecommendationReport:
    """Rank unapplied open drives and summarize insights for a student."""
    settings = settings or Settings()
    now = now or utc_now()

    open_drives = run_filter_chain(
        list(drives), [ActiveDriveFilter(), OpenRegistrationFilter(now)]
    )
    unapplied = run_filter_chain(open_drives, [NotAppliedFilter(candidate.id, applications)])

    recommendations = rank_recommendations(
        candidate,
        unapplied,
        limit=settings.recommendations.limit,
        config=settings.scoring,
    )
    insights = summarize_insights(candidate, open_drives)

    logger.info(
        "Student '%s': %d open drives, %d unapplied, %d recommended",
        candidate.id, len(open_drives), len(unapplied), len(recommendations),
    )
    return RecommendationReport(
        recommendations=tuple(recommendations),
        insights=insights,
        total_drives=len(open_drives),
        unapplied_drives=len(unapplied),
    )


def export_report_json(report: RecommendationReport) -> str:
    """Export a recommendation report as a JSON string."""
    return report.model_dump_json(indent=2)
