"""Core data models for the placement decision engine.

Every model is frozen. Callers build them from persisted records right
before invoking the engine; the engine never mutates them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

ALL_BRANCHES = "ALL"


def split_tokens(value: Any, *, lower: bool = False) -> tuple[str, ...]:
    """Parse a comma-delimited string (or sequence) into trimmed, unique tokens.

    Order of first appearance is kept. Empty tokens are dropped.
    """
    if value is None:
        return ()
    parts = value.split(",") if isinstance(value, str) else list(value)
    tokens: dict[str, None] = {}
    for part in parts:
        token = str(part).strip()
        if lower:
            token = token.lower()
        if token:
            tokens[token] = None
    return tuple(tokens)


def to_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime. Naive values are read as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Branch policy
# ---------------------------------------------------------------------------


class Unrestricted(BaseModel):
    """Any branch may apply.

    ``explicit`` is True when the allow-list named the ALL sentinel rather
    than being absent or empty.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["unrestricted"] = "unrestricted"
    explicit: bool = False

    def allows(self, branch: str) -> bool:
        return True


class RestrictedTo(BaseModel):
    """Only the listed branch codes may apply (case-sensitive)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["restricted"] = "restricted"
    branches: tuple[str, ...]

    def allows(self, branch: str) -> bool:
        return branch in self.branches


BranchPolicy = Annotated[Union[Unrestricted, RestrictedTo], Field(discriminator="kind")]


def parse_branch_policy(value: Any) -> Any:
    """Turn a raw allow-list into tagged BranchPolicy data."""
    if isinstance(value, (Unrestricted, RestrictedTo)):
        return value.model_dump()
    if isinstance(value, dict):
        return value
    tokens = split_tokens(value)
    if not tokens:
        return {"kind": "unrestricted", "explicit": False}
    if ALL_BRANCHES in tokens:
        return {"kind": "unrestricted", "explicit": True}
    return {"kind": "restricted", "branches": tokens}


# ---------------------------------------------------------------------------
# Input entities
# ---------------------------------------------------------------------------


class Candidate(BaseModel):
    """A student profile snapshot."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    id: str = ""
    cgpa: float = Field(ge=0.0, le=10.0)
    branch: str
    backlogs: int = Field(default=0, ge=0)
    skills: tuple[str, ...] = ()

    @field_validator("skills", mode="before")
    @classmethod
    def parse_skills(cls, v: Any) -> tuple[str, ...]:
        return split_tokens(v, lower=True)


class Opportunity(BaseModel):
    """A company drive with its eligibility criteria."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    id: str = ""
    company: str = ""
    title: str = ""
    role: str = ""
    sector: str = ""
    min_cgpa: float | None = Field(default=None, ge=0.0, le=10.0)
    max_backlogs: int = Field(default=0, ge=0)
    allowed_branches: BranchPolicy = Field(default_factory=Unrestricted)
    required_skills: tuple[str, ...] = ()
    ctc: float | None = Field(default=None, ge=0.0)
    registration_start: datetime | None = None
    registration_end: datetime | None = None
    is_active: bool = True

    @field_validator("allowed_branches", mode="before")
    @classmethod
    def parse_branches(cls, v: Any) -> Any:
        return parse_branch_policy(v)

    @field_validator("required_skills", mode="before")
    @classmethod
    def parse_required_skills(cls, v: Any) -> tuple[str, ...]:
        return split_tokens(v, lower=True)

    @field_validator("registration_start", "registration_end")
    @classmethod
    def window_in_utc(cls, v: datetime | None) -> datetime | None:
        return to_utc(v) if v is not None else None

    def is_registration_open(self, now: datetime) -> bool:
        """True when ``now`` falls inside the registration window (inclusive)."""
        now = to_utc(now)
        if self.registration_start is not None and now < self.registration_start:
            return False
        if self.registration_end is not None and now > self.registration_end:
            return False
        return True


class ApplicationStatus(str, Enum):
    """Application states. Any state may follow any non-terminal state."""

    APPLIED = "APPLIED"
    SHORTLISTED = "SHORTLISTED"
    TEST_SCHEDULED = "TEST_SCHEDULED"
    TEST_CLEARED = "TEST_CLEARED"
    INTERVIEW_SCHEDULED = "INTERVIEW_SCHEDULED"
    INTERVIEW_CLEARED = "INTERVIEW_CLEARED"
    OFFER = "OFFER"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL

    @property
    def is_shortlisted_or_further(self) -> bool:
        return self in _SHORTLISTED_OR_FURTHER

    @property
    def is_interview_stage(self) -> bool:
        return self in _INTERVIEW_STAGE


_TERMINAL = frozenset({
    ApplicationStatus.OFFER,
    ApplicationStatus.REJECTED,
    ApplicationStatus.WITHDRAWN,
})
_INTERVIEW_STAGE = frozenset({
    ApplicationStatus.INTERVIEW_SCHEDULED,
    ApplicationStatus.INTERVIEW_CLEARED,
})
_SHORTLISTED_OR_FURTHER = frozenset({
    ApplicationStatus.SHORTLISTED,
    ApplicationStatus.TEST_SCHEDULED,
    ApplicationStatus.TEST_CLEARED,
    ApplicationStatus.INTERVIEW_SCHEDULED,
    ApplicationStatus.INTERVIEW_CLEARED,
    ApplicationStatus.OFFER,
})


class Application(BaseModel):
    """Links one candidate to one drive. Unique per (student_id, drive_id)."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    student_id: str
    drive_id: str
    status: ApplicationStatus = ApplicationStatus.APPLIED
    applied_at: datetime = Field(default_factory=utc_now)

    @field_validator("applied_at")
    @classmethod
    def applied_in_utc(cls, v: datetime) -> datetime:
        return to_utc(v)


# ---------------------------------------------------------------------------
# Per-candidate results
# ---------------------------------------------------------------------------


class EligibilityResult(BaseModel):
    """Outcome of the eligibility gate. ``reasons`` is never empty."""

    model_config = ConfigDict(frozen=True)

    is_eligible: bool
    reasons: tuple[str, ...]


class MatchResult(BaseModel):
    """Fit score for one (candidate, opportunity) pair."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    reasons: tuple[str, ...] = ()
    eligibility: EligibilityResult


class Recommendation(BaseModel):
    """Wrapper that pairs a frozen Opportunity with its MatchResult."""

    model_config = ConfigDict(frozen=True)

    opportunity: Opportunity
    match: MatchResult


class StudentInsights(BaseModel):
    """Candidate-level guidance derived from the drive market."""

    model_config = ConfigDict(frozen=True)

    eligible_count: int
    top_sectors: tuple[str, ...] = ()
    skill_gaps: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Population analytics
# ---------------------------------------------------------------------------


class AnalyticsFilters(BaseModel):
    """Pre-filters applied to the application set before aggregation."""

    model_config = ConfigDict(frozen=True)

    branch: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None

    @field_validator("start_date", "end_date")
    @classmethod
    def range_in_utc(cls, v: datetime | None) -> datetime | None:
        return to_utc(v) if v is not None else None

    @model_validator(mode="after")
    def range_ordered(self) -> "AnalyticsFilters":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            msg = "start_date must not be after end_date"
            raise ValueError(msg)
        return self


class Overview(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_students: int = 0
    placed_students: int = 0
    placement_percentage: float = 0.0
    total_drives: int = 0
    total_applications: int = 0
    total_offers: int = 0


class CTCStatistics(BaseModel):
    model_config = ConfigDict(frozen=True)

    average: float = 0.0
    median: float = 0.0
    highest: float = 0.0
    lowest: float = 0.0


class BranchStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    branch: str
    total_students: int
    placed_students: int
    placement_percentage: float
    average_ctc: float
    offers_count: int


class RecruiterStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    company: str
    offers_count: int
    average_ctc: float
    highest_ctc: float


class StatusCount(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: ApplicationStatus
    count: int
    percentage: float


class StageBreakdown(BaseModel):
    """Applications grouped by pipeline stage class."""

    model_config = ConfigDict(frozen=True)

    in_progress: int = 0
    shortlisted_or_further: int = 0
    interview_stage: int = 0
    terminal: int = 0
    offer_conversion: float = 0.0


class PopulationStats(BaseModel):
    """Aggregates over a closed-world snapshot."""

    model_config = ConfigDict(frozen=True)

    overview: Overview = Field(default_factory=Overview)
    ctc: CTCStatistics = Field(default_factory=CTCStatistics)
    branch_wise: tuple[BranchStats, ...] = ()
    top_recruiters: tuple[RecruiterStats, ...] = ()
    status_distribution: tuple[StatusCount, ...] = ()
    stages: StageBreakdown = Field(default_factory=StageBreakdown)
