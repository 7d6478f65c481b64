"""Textual exports of PopulationStats (CSV and JSON)."""

import csv
import io

from placement.core.schemas import PopulationStats


def export_analytics_csv(stats: PopulationStats) -> str:
    """Serialize stats as sectioned CSV.

    Sections, in order: OVERVIEW, CTC STATISTICS, BRANCH-WISE PLACEMENT,
    TOP RECRUITERS, APPLICATION STATUS DISTRIBUTION. Each has a title row,
    a header row, and data rows; sections are separated by a blank line.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    o = stats.overview
    ctc = stats.ctc

    writer.writerow(["OVERVIEW"])
    writer.writerow(["Metric", "Value"])
    writer.writerow(["Total Students", o.total_students])
    writer.writerow(["Placed Students", o.placed_students])
    writer.writerow(["Placement Percentage", f"{_num(o.placement_percentage)}%"])
    writer.writerow(["Total Drives", o.total_drives])
    writer.writerow(["Total Applications", o.total_applications])
    writer.writerow(["Total Offers", o.total_offers])
    writer.writerow([])

    writer.writerow(["CTC STATISTICS"])
    writer.writerow(["Metric", "Value (LPA)"])
    writer.writerow(["Average CTC", _num(ctc.average)])
    writer.writerow(["Median CTC", _num(ctc.median)])
    writer.writerow(["Highest CTC", _num(ctc.highest)])
    writer.writerow(["Lowest CTC", _num(ctc.lowest)])
    writer.writerow([])

    writer.writerow(["BRANCH-WISE PLACEMENT"])
    writer.writerow([
        "Branch", "Total Students", "Placed Students",
        "Placement %", "Average CTC", "Total Offers",
    ])
    for b in stats.branch_wise:
        writer.writerow([
            b.branch, b.total_students, b.placed_students,
            f"{_num(b.placement_percentage)}%", _num(b.average_ctc), b.offers_count,
        ])
    writer.writerow([])

    writer.writerow(["TOP RECRUITERS"])
    writer.writerow(["Company", "Offers Count", "Average CTC", "Highest CTC"])
    for r in stats.top_recruiters:
        writer.writerow([r.company, r.offers_count, _num(r.average_ctc), _num(r.highest_ctc)])
    writer.writerow([])

    writer.writerow(["APPLICATION STATUS DISTRIBUTION"])
    writer.writerow(["Status", "Count", "Percentage"])
    for s in stats.status_distribution:
        writer.writerow([s.status.value, s.count, f"{_num(s.percentage)}%"])

    return buf.getvalue().rstrip("\n")


def export_analytics_json(stats: PopulationStats) -> str:
    """Serialize stats as indented JSON."""
    return stats.model_dump_json(indent=2)


def _num(value: float) -> str:
    """Render whole numbers without a trailing ``.0``."""
    return str(int(value)) if float(value).is_integer() else str(value)
