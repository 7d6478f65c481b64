"""Filter chain applied to drives before building recommendations.

Filter order:
  1. ActiveDriveFilter      — drop drives an admin has deactivated
  2. OpenRegistrationFilter — drop drives whose registration has closed
  3. NotAppliedFilter       — drop drives the student already applied to
"""

import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from placement.core.schemas import Application, Opportunity, to_utc

logger = logging.getLogger(__name__)

# A filter is a callable that takes drives and returns a subset.
Filter = Callable[[list[Opportunity]], list[Opportunity]]


class ActiveDriveFilter:
    """Keep only drives flagged active."""

    def __call__(self, drives: list[Opportunity]) -> list[Opportunity]:
        result = [d for d in drives if d.is_active]
        inactive = len(drives) - len(result)
        if inactive:
            logger.debug("ActiveDriveFilter: removed %d inactive drives", inactive)
        return result


class OpenRegistrationFilter:
    """Keep drives whose registration end is not in the past.

    Drives without a registration end are always kept.
    """

    def __init__(self, now: datetime) -> None:
        self._now = to_utc(now)

    def __call__(self, drives: list[Opportunity]) -> list[Opportunity]:
        result = [
            d for d in drives
            if d.registration_end is None or d.registration_end >= self._now
        ]
        closed = len(drives) - len(result)
        if closed:
            logger.debug("OpenRegistrationFilter: removed %d closed drives", closed)
        return result


class NotAppliedFilter:
    """Remove drives the student already holds an application for."""

    def __init__(self, student_id: str, applications: Iterable[Application]) -> None:
        self._applied = {a.drive_id for a in applications if a.student_id == student_id}

    def __call__(self, drives: list[Opportunity]) -> list[Opportunity]:
        if not self._applied:
            return drives
        result = [d for d in drives if d.id not in self._applied]
        applied = len(drives) - len(result)
        if applied:
            logger.debug("NotAppliedFilter: removed %d applied drives", applied)
        return result


def run_filter_chain(
    drives: list[Opportunity],
    filters: list[Filter],
) -> list[Opportunity]:
    """Apply filters in order, returning the surviving drives."""
    result = drives
    for f in filters:
        result = f(result)
    return result
