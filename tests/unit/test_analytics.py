"""Tests for population analytics aggregation."""

from datetime import datetime

import pytest

from placement.core.config import AnalyticsConfig
from placement.core.schemas import (
    AnalyticsFilters,
    Application,
    ApplicationStatus,
    Candidate,
    Opportunity,
)
from placement.pipeline.analytics import aggregate_analytics

OFFER = ApplicationStatus.OFFER

Population = tuple[list[Candidate], list[Opportunity], list[Application]]


def _student(id: str, branch: str = "CSE") -> Candidate:
    return Candidate(id=id, cgpa=8.0, branch=branch)


def _drive(id: str, company: str, ctc: float | None) -> Opportunity:
    return Opportunity(id=id, company=company, ctc=ctc)


def _app(
    student_id: str,
    drive_id: str,
    status: ApplicationStatus = ApplicationStatus.APPLIED,
    applied_at: datetime = datetime(2026, 2, 1),
) -> Application:
    return Application(
        id=f"{student_id}-{drive_id}",
        student_id=student_id,
        drive_id=drive_id,
        status=status,
        applied_at=applied_at,
    )


# ---------------------------------------------------------------------------
# Empty inputs
# ---------------------------------------------------------------------------


class TestEmpty:
    def test_no_applications(self) -> None:
        stats = aggregate_analytics([_student("s1"), _student("s2", "IT")], [], [])
        assert stats.overview.total_students == 2
        assert stats.overview.placed_students == 0
        assert stats.overview.placement_percentage == 0
        assert stats.ctc.average == 0
        assert stats.ctc.median == 0
        assert stats.top_recruiters == ()
        assert stats.status_distribution == ()
        assert all(b.offers_count == 0 for b in stats.branch_wise)
        assert stats.stages.offer_conversion == 0

    def test_nothing_at_all(self) -> None:
        stats = aggregate_analytics([], [], [])
        assert stats.overview.total_students == 0
        assert stats.overview.placement_percentage == 0
        assert stats.branch_wise == ()


# ---------------------------------------------------------------------------
# Overview and CTC
# ---------------------------------------------------------------------------


class TestOverview:
    def test_placed_is_distinct_offers_is_raw(self) -> None:
        students = [_student("s1"), _student("s2"), _student("s3"), _student("s4")]
        drives = [_drive("d1", "Acme", 10), _drive("d2", "Globex", 20)]
        apps = [
            _app("s1", "d1", OFFER),
            _app("s1", "d2", OFFER),
            _app("s2", "d1", ApplicationStatus.REJECTED),
        ]
        stats = aggregate_analytics(students, drives, apps)
        assert stats.overview.placed_students == 1
        assert stats.overview.total_offers == 2
        assert stats.overview.placement_percentage == 25.0
        assert stats.overview.total_drives == 2
        assert stats.overview.total_applications == 3

    def test_percentage_rounded(self) -> None:
        students = [_student("s1"), _student("s2"), _student("s3")]
        stats = aggregate_analytics(students, [_drive("d1", "Acme", 5)], [_app("s1", "d1", OFFER)])
        assert stats.overview.placement_percentage == 33.33

    def test_ctc_statistics(self) -> None:
        students = [_student(f"s{i}") for i in range(4)]
        drives = [
            _drive("d1", "A", 4),
            _drive("d2", "B", 10),
            _drive("d3", "C", 6),
            _drive("d4", "D", 20),
        ]
        apps = [_app(f"s{i}", f"d{i + 1}", OFFER) for i in range(4)]
        ctc = aggregate_analytics(students, drives, apps).ctc
        assert ctc.average == 10.0
        assert ctc.median == 8.0
        assert ctc.highest == 20
        assert ctc.lowest == 4

    def test_odd_median(self) -> None:
        students = [_student(f"s{i}") for i in range(3)]
        drives = [_drive("d1", "A", 3), _drive("d2", "B", 9), _drive("d3", "C", 5)]
        apps = [_app(f"s{i}", f"d{i + 1}", OFFER) for i in range(3)]
        assert aggregate_analytics(students, drives, apps).ctc.median == 5

    def test_null_ctc_excluded_not_zeroed(self) -> None:
        students = [_student("s1"), _student("s2")]
        drives = [_drive("d1", "A", 12), _drive("d2", "B", None)]
        apps = [_app("s1", "d1", OFFER), _app("s2", "d2", OFFER)]
        ctc = aggregate_analytics(students, drives, apps).ctc
        assert ctc.average == 12
        assert ctc.lowest == 12

    def test_only_null_ctcs(self) -> None:
        stats = aggregate_analytics(
            [_student("s1")], [_drive("d1", "A", None)], [_app("s1", "d1", OFFER)],
        )
        assert stats.ctc.average == 0
        assert stats.ctc.highest == 0


# ---------------------------------------------------------------------------
# Branch-wise
# ---------------------------------------------------------------------------


class TestBranchWise:
    def test_branch_scenario(self) -> None:
        students = [_student(f"c{i}") for i in range(5)] + [_student("i1", "IT")]
        drives = [_drive("d1", "Acme", 10), _drive("d2", "Globex", 20)]
        apps = [_app("c0", "d1", OFFER), _app("c1", "d2", OFFER)]
        stats = aggregate_analytics(students, drives, apps)

        cse = next(b for b in stats.branch_wise if b.branch == "CSE")
        assert cse.total_students == 5
        assert cse.placed_students == 2
        assert cse.placement_percentage == 40
        assert cse.average_ctc == 15
        assert cse.offers_count == 2

        it = next(b for b in stats.branch_wise if b.branch == "IT")
        assert it.placed_students == 0
        assert it.placement_percentage == 0
        assert it.average_ctc == 0

    def test_branches_sorted(self) -> None:
        students = [_student("s1", "IT"), _student("s2", "CSE"), _student("s3", "ECE")]
        stats = aggregate_analytics(students, [], [])
        assert [b.branch for b in stats.branch_wise] == ["CSE", "ECE", "IT"]

    def test_branch_dedupes_placed(self) -> None:
        students = [_student("s1"), _student("s2")]
        drives = [_drive("d1", "A", 10), _drive("d2", "B", 20)]
        apps = [_app("s1", "d1", OFFER), _app("s1", "d2", OFFER)]
        cse = aggregate_analytics(students, drives, apps).branch_wise[0]
        assert cse.placed_students == 1
        assert cse.offers_count == 2
        assert cse.placement_percentage == 50


# ---------------------------------------------------------------------------
# Top recruiters
# ---------------------------------------------------------------------------


class TestTopRecruiters:
    def test_sorted_by_offer_count(self) -> None:
        students = [_student(f"s{i}") for i in range(4)]
        drives = [_drive("d1", "Acme", 10), _drive("d2", "Globex", 8), _drive("d3", "Globex", 12)]
        apps = [
            _app("s0", "d1", OFFER),
            _app("s1", "d2", OFFER),
            _app("s2", "d3", OFFER),
            _app("s3", "d1", ApplicationStatus.SHORTLISTED),
        ]
        recruiters = aggregate_analytics(students, drives, apps).top_recruiters
        assert [r.company for r in recruiters] == ["Globex", "Acme"]
        globex = recruiters[0]
        assert globex.offers_count == 2
        assert globex.average_ctc == 10
        assert globex.highest_ctc == 12

    def test_capped_by_config(self) -> None:
        students = [_student(f"s{i}") for i in range(12)]
        drives = [_drive(f"d{i}", f"Co{i}", 5) for i in range(12)]
        apps = [_app(f"s{i}", f"d{i}", OFFER) for i in range(12)]
        assert len(aggregate_analytics(students, drives, apps).top_recruiters) == 10
        stats = aggregate_analytics(
            students, drives, apps, config=AnalyticsConfig(top_recruiters=3),
        )
        assert len(stats.top_recruiters) == 3

    def test_company_without_ctc(self) -> None:
        recruiters = aggregate_analytics(
            [_student("s1")], [_drive("d1", "Acme", None)], [_app("s1", "d1", OFFER)],
        ).top_recruiters
        assert recruiters[0].average_ctc == 0
        assert recruiters[0].highest_ctc == 0


# ---------------------------------------------------------------------------
# Status distribution and stages
# ---------------------------------------------------------------------------


class TestStatusDistribution:
    def test_counts_and_percentages(self) -> None:
        students = [_student(f"s{i}") for i in range(4)]
        drives = [_drive("d1", "Acme", 10)]
        apps = [
            _app("s0", "d1", OFFER),
            _app("s1", "d1", ApplicationStatus.REJECTED),
            _app("s2", "d1", ApplicationStatus.REJECTED),
            _app("s3", "d1", ApplicationStatus.INTERVIEW_SCHEDULED),
        ]
        dist = aggregate_analytics(students, drives, apps).status_distribution
        by_status = {d.status: d for d in dist}
        assert by_status[ApplicationStatus.REJECTED].count == 2
        assert by_status[ApplicationStatus.REJECTED].percentage == 50
        assert by_status[OFFER].percentage == 25
        assert ApplicationStatus.APPLIED not in by_status

    def test_stage_breakdown(self) -> None:
        students = [_student(f"s{i}") for i in range(5)]
        drives = [_drive("d1", "Acme", 10)]
        apps = [
            _app("s0", "d1", OFFER),
            _app("s1", "d1", ApplicationStatus.WITHDRAWN),
            _app("s2", "d1", ApplicationStatus.INTERVIEW_CLEARED),
            _app("s3", "d1", ApplicationStatus.TEST_SCHEDULED),
            _app("s4", "d1", ApplicationStatus.APPLIED),
        ]
        stages = aggregate_analytics(students, drives, apps).stages
        assert stages.terminal == 2
        assert stages.in_progress == 3
        assert stages.shortlisted_or_further == 3
        assert stages.interview_stage == 1
        assert stages.offer_conversion == 50


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


class TestFilters:
    @pytest.fixture
    def snapshot(self) -> Population:
        students = [_student("c1"), _student("c2"), _student("i1", "IT"), _student("i2", "IT")]
        drives = [_drive("d1", "Acme", 10), _drive("d2", "Globex", 20)]
        apps = [
            _app("c1", "d1", OFFER, datetime(2026, 1, 10)),
            _app("c2", "d2", OFFER, datetime(2026, 3, 10)),
            _app("i1", "d2", OFFER, datetime(2026, 3, 12)),
            _app("i2", "d1", ApplicationStatus.REJECTED, datetime(2026, 3, 15)),
        ]
        return students, drives, apps

    def test_branch_filter_scopes_students_and_applications(self, snapshot: Population) -> None:
        students, drives, apps = snapshot
        stats = aggregate_analytics(students, drives, apps, AnalyticsFilters(branch="IT"))
        assert stats.overview.total_students == 2
        assert stats.overview.placed_students == 1
        assert stats.overview.placement_percentage == 50
        assert stats.overview.total_applications == 2
        assert [b.branch for b in stats.branch_wise] == ["IT"]
        assert [r.company for r in stats.top_recruiters] == ["Globex"]

    def test_date_filter_is_prefilter(self, snapshot: Population) -> None:
        students, drives, apps = snapshot
        filters = AnalyticsFilters(start_date=datetime(2026, 3, 1), end_date=datetime(2026, 3, 12))
        stats = aggregate_analytics(students, drives, apps, filters)
        assert stats.overview.total_applications == 2
        assert stats.overview.total_offers == 2
        assert stats.ctc.average == 20
        # percentages relative to the filtered application set
        assert stats.status_distribution[0].percentage == 100

    def test_date_bounds_inclusive(self, snapshot: Population) -> None:
        students, drives, apps = snapshot
        filters = AnalyticsFilters(start_date=datetime(2026, 1, 10), end_date=datetime(2026, 1, 10))
        assert aggregate_analytics(students, drives, apps, filters).overview.total_offers == 1

    def test_inputs_not_mutated(self, snapshot: Population) -> None:
        students, drives, apps = snapshot
        before = (list(students), list(drives), list(apps))
        aggregate_analytics(students, drives, apps, AnalyticsFilters(branch="CSE"))
        assert (students, drives, apps) == before

    def test_date_filter_with_utc_timestamps(self) -> None:
        apps = [
            Application(student_id="c1", drive_id="d1", status=OFFER, applied_at="2026-02-01T10:00:00Z"),  # type: ignore[arg-type]
            Application(student_id="c1", drive_id="d2", applied_at="2026-04-01T10:00:00+05:30"),  # type: ignore[arg-type]
        ]
        filters = AnalyticsFilters(start_date=datetime(2026, 1, 1), end_date=datetime(2026, 3, 1))
        stats = aggregate_analytics([_student("c1")], [_drive("d1", "Acme", 10)], apps, filters)
        assert stats.overview.total_applications == 1
        assert stats.overview.total_offers == 1
