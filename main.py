"""CLI entry point for the placement decision engine."""

import argparse
import logging
import sys
from datetime import datetime

from placement.core.config import Settings
from placement.core.schemas import AnalyticsFilters, to_utc
from placement.core.snapshot import Snapshot
from placement.pipeline.analytics import aggregate_analytics
from placement.pipeline.eligibility import evaluate_application
from placement.pipeline.export import export_analytics_csv, export_analytics_json
from placement.pipeline.orchestrator import build_recommendation_report, export_report_json


def iso_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 argument into an aware UTC datetime."""
    return to_utc(datetime.fromisoformat(value))


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--snapshot",
        default="data/snapshot.yaml",
        help="Path to snapshot YAML/JSON file (default: data/snapshot.yaml)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML file (default: built-in settings)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Placement decision engine - eligibility, recommendations, analytics",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- eligibility subcommand ---
    elig_parser = subparsers.add_parser(
        "eligibility",
        help="Check whether a student may apply to a drive",
    )
    _add_common(elig_parser)
    elig_parser.add_argument("--student", required=True, help="Student id")
    elig_parser.add_argument("--drive", required=True, help="Drive id")
    elig_parser.add_argument(
        "--now",
        type=iso_timestamp,
        default=None,
        help="Evaluate at this ISO timestamp instead of the current time",
    )

    # --- recommend subcommand ---
    rec_parser = subparsers.add_parser(
        "recommend",
        help="Rank open drives for a student and print insights",
    )
    _add_common(rec_parser)
    rec_parser.add_argument("--student", required=True, help="Student id")
    rec_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum recommendations (default: from settings)",
    )
    rec_parser.add_argument(
        "--now",
        type=iso_timestamp,
        default=None,
        help="Evaluate at this ISO timestamp instead of the current time",
    )
    rec_parser.add_argument(
        "--export",
        choices=["json"],
        help="Export the report to format (json)",
    )

    # --- analytics subcommand ---
    an_parser = subparsers.add_parser(
        "analytics",
        help="Aggregate placement statistics",
    )
    _add_common(an_parser)
    an_parser.add_argument("--branch", default=None, help="Restrict to one branch")
    an_parser.add_argument(
        "--start-date",
        type=iso_timestamp,
        default=None,
        help="Only applications on or after this ISO date",
    )
    an_parser.add_argument(
        "--end-date",
        type=iso_timestamp,
        default=None,
        help="Only applications on or before this ISO date",
    )
    an_parser.add_argument(
        "--export",
        choices=["csv", "json"],
        help="Export statistics to format (csv, json)",
    )

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_settings(path: str | None) -> Settings:
    if path is None:
        return Settings()
    return Settings.from_yaml(path)


def cmd_eligibility(args: argparse.Namespace, snapshot: Snapshot) -> None:
    """Handle eligibility subcommand."""
    student = snapshot.student(args.student)
    drive = snapshot.drive(args.drive)
    result = evaluate_application(student, drive, snapshot.applications, now=args.now)

    verdict = "ELIGIBLE" if result.is_eligible else "NOT ELIGIBLE"
    print(f"{student.id} -> {drive.company} {drive.title}: {verdict}")
    for reason in result.reasons:
        print(f"  - {reason}")


def cmd_recommend(args: argparse.Namespace, snapshot: Snapshot, settings: Settings) -> None:
    """Handle recommend subcommand."""
    if args.limit is not None:
        settings = settings.model_copy(update={
            "recommendations": settings.recommendations.model_copy(update={"limit": args.limit}),
        })
    student = snapshot.student(args.student)
    report = build_recommendation_report(
        student, snapshot.drives, snapshot.applications, settings, now=args.now,
    )

    if args.export == "json":
        print(export_report_json(report))
        return

    print(f"{report.total_drives} open drives, {report.unapplied_drives} not yet applied")
    for i, rec in enumerate(report.recommendations, start=1):
        d = rec.opportunity
        print(f"{i:>2}. [{rec.match.score:>3}] {d.company} - {d.title} ({d.id})")
        for reason in rec.match.reasons:
            print(f"      {reason}")

    insights = report.insights
    print(f"\nEligible for {insights.eligible_count} drives")
    if insights.top_sectors:
        print(f"  Top sectors: {', '.join(insights.top_sectors)}")
    if insights.skill_gaps:
        print(f"  Skill gaps: {', '.join(insights.skill_gaps)}")
    for suggestion in insights.suggestions:
        print(f"  * {suggestion}")


def cmd_analytics(args: argparse.Namespace, snapshot: Snapshot, settings: Settings) -> None:
    """Handle analytics subcommand."""
    filters = AnalyticsFilters(
        branch=args.branch,
        start_date=args.start_date,
        end_date=args.end_date,
    )
    stats = aggregate_analytics(
        snapshot.students,
        snapshot.drives,
        snapshot.applications,
        filters,
        settings.analytics,
    )

    if args.export == "csv":
        print(export_analytics_csv(stats))
        return
    if args.export == "json":
        print(export_analytics_json(stats))
        return

    o = stats.overview
    print(f"Students: {o.total_students}, placed: {o.placed_students} "
          f"({o.placement_percentage}%), offers: {o.total_offers}")
    print(f"CTC avg {stats.ctc.average}, median {stats.ctc.median}, "
          f"high {stats.ctc.highest}, low {stats.ctc.lowest}")
    for b in stats.branch_wise:
        print(f"  {b.branch}: {b.placed_students}/{b.total_students} placed "
              f"({b.placement_percentage}%), avg CTC {b.average_ctc}")
    for r in stats.top_recruiters:
        print(f"  {r.company}: {r.offers_count} offers, avg CTC {r.average_ctc}")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = load_settings(args.config)
        snapshot = Snapshot.from_file(args.snapshot)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading input: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.command == "eligibility":
            cmd_eligibility(args, snapshot)
        elif args.command == "recommend":
            cmd_recommend(args, snapshot, settings)
        else:
            cmd_analytics(args, snapshot, settings)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
