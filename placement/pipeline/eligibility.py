"""Eligibility gate: may this candidate apply to this drive?

All three checks (CGPA, backlogs, branch) run independently. Each failure
contributes exactly one reason, so a candidate failing two axes sees both.
"""

import logging
from collections.abc import Iterable
from datetime import datetime

from placement.core.schemas import (
    Application,
    Candidate,
    EligibilityResult,
    Opportunity,
    RestrictedTo,
    utc_now,
)

logger = logging.getLogger(__name__)

ELIGIBLE_REASON = "You meet all eligibility criteria"


def evaluate_eligibility(candidate: Candidate, opportunity: Opportunity) -> EligibilityResult:
    """Check CGPA floor, backlog ceiling, and branch allow-list.

    Boundaries are inclusive: ``cgpa == min_cgpa`` and
    ``backlogs == max_backlogs`` both pass. Branch codes compare
    case-sensitively.
    """
    reasons: list[str] = []

    if opportunity.min_cgpa is not None and candidate.cgpa < opportunity.min_cgpa:
        reasons.append(
            f"CGPA below minimum requirement (need {opportunity.min_cgpa}, "
            f"have {candidate.cgpa})"
        )

    if candidate.backlogs > opportunity.max_backlogs:
        reasons.append(
            f"Too many backlogs (max {opportunity.max_backlogs}, "
            f"have {candidate.backlogs})"
        )

    policy = opportunity.allowed_branches
    if isinstance(policy, RestrictedTo) and not policy.allows(candidate.branch):
        allowed = ", ".join(policy.branches)
        reasons.append(f"Branch not allowed (only {allowed} allowed)")

    if reasons:
        return EligibilityResult(is_eligible=False, reasons=tuple(reasons))
    return EligibilityResult(is_eligible=True, reasons=(ELIGIBLE_REASON,))


def evaluate_application(
    candidate: Candidate,
    opportunity: Opportunity,
    applications: Iterable[Application] = (),
    now: datetime | None = None,
) -> EligibilityResult:
    """Apply-time gate: registration window, duplicate check, then eligibility.

    Window and duplicate failures are listed ahead of eligibility reasons.
    """
    now = now or utc_now()
    reasons: list[str] = []

    if not opportunity.is_registration_open(now):
        reasons.append("Registration is not open for this drive")

    if any(
        a.student_id == candidate.id and a.drive_id == opportunity.id
        for a in applications
    ):
        reasons.append("You have already applied to this drive")

    eligibility = evaluate_eligibility(candidate, opportunity)
    if not eligibility.is_eligible:
        reasons.extend(eligibility.reasons)

    if reasons:
        logger.debug(
            "Application blocked for student '%s' on drive '%s': %d reasons",
            candidate.id, opportunity.id, len(reasons),
        )
        return EligibilityResult(is_eligible=False, reasons=tuple(reasons))
    return eligibility
