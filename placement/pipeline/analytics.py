"""Population analytics: placement rates, CTC statistics, recruiters, statuses.

Filters are applied to the application set first; every percentage is
relative to the filtered population. Divisions by zero yield 0 and CTC
statistics over an empty set are 0.
"""

import logging
import statistics
from collections import Counter
from collections.abc import Iterable

from placement.core.config import AnalyticsConfig
from placement.core.schemas import (
    AnalyticsFilters,
    Application,
    ApplicationStatus,
    BranchStats,
    Candidate,
    CTCStatistics,
    Opportunity,
    Overview,
    PopulationStats,
    RecruiterStats,
    StageBreakdown,
    StatusCount,
)

logger = logging.getLogger(__name__)


def aggregate_analytics(
    students: Iterable[Candidate],
    drives: Iterable[Opportunity],
    applications: Iterable[Application],
    filters: AnalyticsFilters | None = None,
    config: AnalyticsConfig | None = None,
) -> PopulationStats:
    """Aggregate a snapshot into PopulationStats.

    Args:
        students: Every student in the snapshot.
        drives: Every drive in the snapshot.
        applications: Every application in the snapshot.
        filters: Optional branch and applied-at date range pre-filters.
        config: Rounding and top-recruiter settings.

    Returns:
        PopulationStats computed over the filtered population.
    """
    filters = filters or AnalyticsFilters()
    config = config or AnalyticsConfig()
    places = config.decimal_places

    all_students = list(students)
    drive_list = list(drives)
    student_by_id = {s.id: s for s in all_students}
    drive_by_id = {d.id: d for d in drive_list}

    population = [
        s for s in all_students
        if filters.branch is None or s.branch == filters.branch
    ]
    apps = _filter_applications(applications, filters, student_by_id)
    offers = [a for a in apps if a.status is ApplicationStatus.OFFER]

    placed = _placed_student_count(offers)
    overview = Overview(
        total_students=len(population),
        placed_students=placed,
        placement_percentage=round(_percentage(placed, len(population)), places),
        total_drives=len(drive_list),
        total_applications=len(apps),
        total_offers=_offer_count(offers),
    )

    stats = PopulationStats(
        overview=overview,
        ctc=_ctc_statistics(_offer_ctcs(offers, drive_by_id), places),
        branch_wise=tuple(_branch_wise(population, offers, student_by_id, drive_by_id, places)),
        top_recruiters=tuple(
            _top_recruiters(offers, drive_by_id, places)[:config.top_recruiters]
        ),
        status_distribution=tuple(_status_distribution(apps, places)),
        stages=_stage_breakdown(apps, places),
    )
    logger.info(
        "Aggregated %d students, %d applications, %d offers",
        overview.total_students, overview.total_applications, overview.total_offers,
    )
    return stats


def _filter_applications(
    applications: Iterable[Application],
    filters: AnalyticsFilters,
    student_by_id: dict[str, Candidate],
) -> list[Application]:
    result: list[Application] = []
    for a in applications:
        if filters.start_date is not None and a.applied_at < filters.start_date:
            continue
        if filters.end_date is not None and a.applied_at > filters.end_date:
            continue
        if filters.branch is not None:
            student = student_by_id.get(a.student_id)
            if student is None or student.branch != filters.branch:
                continue
        result.append(a)
    return result


def _placed_student_count(offers: list[Application]) -> int:
    """Distinct students holding at least one offer."""
    return len({a.student_id for a in offers})


def _offer_count(offers: list[Application]) -> int:
    """Raw number of offers; a student with two offers counts twice."""
    return len(offers)


def _percentage(part: int, whole: int) -> float:
    return part / whole * 100 if whole else 0.0


def _mean(values: list[float]) -> float:
    return statistics.mean(values) if values else 0.0


def _offer_ctcs(
    offers: Iterable[Application],
    drive_by_id: dict[str, Opportunity],
) -> list[float]:
    """CTC of each offer's drive. Drives without a CTC are skipped, not zeroed."""
    values: list[float] = []
    for a in offers:
        drive = drive_by_id.get(a.drive_id)
        if drive is not None and drive.ctc is not None:
            values.append(drive.ctc)
    return values


def _ctc_statistics(values: list[float], places: int) -> CTCStatistics:
    if not values:
        return CTCStatistics()
    return CTCStatistics(
        average=round(statistics.mean(values), places),
        median=round(statistics.median(values), places),
        highest=max(values),
        lowest=min(values),
    )


def _branch_wise(
    population: list[Candidate],
    offers: list[Application],
    student_by_id: dict[str, Candidate],
    drive_by_id: dict[str, Opportunity],
    places: int,
) -> list[BranchStats]:
    sizes = Counter(s.branch for s in population)
    branch_offers: dict[str, list[Application]] = {b: [] for b in sizes}
    for a in offers:
        student = student_by_id.get(a.student_id)
        if student is not None and student.branch in branch_offers:
            branch_offers[student.branch].append(a)

    result: list[BranchStats] = []
    for branch in sorted(sizes):
        scoped = branch_offers[branch]
        placed = _placed_student_count(scoped)
        result.append(BranchStats(
            branch=branch,
            total_students=sizes[branch],
            placed_students=placed,
            placement_percentage=round(_percentage(placed, sizes[branch]), places),
            average_ctc=round(_mean(_offer_ctcs(scoped, drive_by_id)), places),
            offers_count=_offer_count(scoped),
        ))
    return result


def _top_recruiters(
    offers: list[Application],
    drive_by_id: dict[str, Opportunity],
    places: int,
) -> list[RecruiterStats]:
    by_company: dict[str, list[Application]] = {}
    for a in offers:
        drive = drive_by_id.get(a.drive_id)
        if drive is None:
            logger.debug("Offer '%s' references unknown drive '%s'", a.id, a.drive_id)
            continue
        by_company.setdefault(drive.company, []).append(a)

    result: list[RecruiterStats] = []
    for company, company_offers in by_company.items():
        ctcs = _offer_ctcs(company_offers, drive_by_id)
        result.append(RecruiterStats(
            company=company,
            offers_count=len(company_offers),
            average_ctc=round(_mean(ctcs), places),
            highest_ctc=max(ctcs) if ctcs else 0.0,
        ))
    result.sort(key=lambda r: r.offers_count, reverse=True)
    return result


def _status_distribution(apps: list[Application], places: int) -> list[StatusCount]:
    counts = Counter(a.status for a in apps)
    return [
        StatusCount(
            status=status,
            count=counts[status],
            percentage=round(_percentage(counts[status], len(apps)), places),
        )
        for status in ApplicationStatus
        if counts[status]
    ]


def _stage_breakdown(apps: list[Application], places: int) -> StageBreakdown:
    terminal = sum(1 for a in apps if a.status.is_terminal)
    offers = sum(1 for a in apps if a.status is ApplicationStatus.OFFER)
    return StageBreakdown(
        in_progress=len(apps) - terminal,
        shortlisted_or_further=sum(1 for a in apps if a.status.is_shortlisted_or_further),
        interview_stage=sum(1 for a in apps if a.status.is_interview_stage),
        terminal=terminal,
        offer_conversion=round(_percentage(offers, terminal), places),
    )
