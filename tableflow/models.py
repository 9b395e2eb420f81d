"""Data models for tableflow."""

from dataclasses import dataclass, field
from typing import Literal

BlockStatus = Literal[
    "confirmed",
    "unconfirmed",
    "arriving",
    "seated",
    "completed",
    "no-show",
    "late",
]
BoundaryKind = Literal["next-reservation", "service-close"]
WarningKind = Literal["buffer", "risk", "info", "merge"]
Severity = Literal["warning", "info"]

# A clock-of-day value: minutes since midnight, or a raw "HH:MM" / "H:MM PM" string
ClockTime = int | str


@dataclass(frozen=True, order=True)
class TimeWindow:
    """Absolute minute offsets with end > start, relative to some anchor."""

    start: int
    end: int

    @property
    def minutes(self) -> int:
        return self.end - self.start

    def contains(self, minute: int) -> bool:
        return self.start <= minute < self.end

    def overlaps(self, other: "TimeWindow") -> bool:
        return self.start < other.end and other.start < self.end

    def shifted(self, days: int) -> "TimeWindow":
        return TimeWindow(self.start + days * 1440, self.end + days * 1440)


@dataclass(frozen=True)
class Table:
    """A physical table on the floor."""

    id: str
    seats: int
    zone: str = "main"
    label: str = ""
    adjacent: tuple[str, ...] = ()  # table ids this one can be pushed against

    @property
    def display_label(self) -> str:
        return self.label or self.id


@dataclass(frozen=True)
class ReservationBlock:
    """A raw reservation interval as authored, before sanitization."""

    id: str
    table_id: str
    start: str
    end: str
    status: BlockStatus = "confirmed"
    party_size: int = 2
    guest_name: str = ""
    tags: tuple[str, ...] = ()
    notes: str = ""


@dataclass(frozen=True)
class SanitizedBlock:
    """A reservation block with its repaired, non-overlapping window."""

    block: ReservationBlock
    window: TimeWindow

    @property
    def id(self) -> str:
        return self.block.id

    @property
    def status(self) -> str:
        return self.block.status

    @property
    def party_size(self) -> int:
        return self.block.party_size


@dataclass(frozen=True)
class MergedPairing:
    """Two tables pushed together for a window; blocks both lanes."""

    tables: frozenset[str]
    start: str
    end: str

    def other(self, table_id: str) -> str:
        (partner,) = self.tables - {table_id}
        return partner


@dataclass(frozen=True)
class ServicePeriod:
    """A named opening window such as Dinner 17:00-23:00."""

    id: str
    start: str
    end: str
    label: str = ""
    days: tuple[str, ...] = ()  # empty = every day


@dataclass(frozen=True)
class GuestHistory:
    """Guest record consumed by the conflict advisor."""

    visit_count: int = 0
    no_show_count: int = 0
    total_reservations: int = 0
    name: str = ""
    last_visit: str | None = None
    avg_stay_minutes: int | None = None


@dataclass(frozen=True)
class Policy:
    """Tunable venue rules. Every constant the engine uses lives here."""

    min_block_minutes: int = 15
    slot_step_minutes: int = 15
    grace_minutes: int = 8
    duration_grid_minutes: int = 15
    buffer_threshold_minutes: int = 10
    opens_soon_minutes: int = 90
    capacity_weight: int = 3
    risk_no_show_threshold: int = 2
    large_party_size: int = 6
    first_timer_no_show_rate: float = 0.23
    long_stay_visit_count: int = 10
    non_blocking_statuses: tuple[str, ...] = ("unconfirmed",)
    capacity_excluded_statuses: tuple[str, ...] = ("no-show",)
    # (max party size, minutes) tiers, checked in order; larger parties use the last entry
    party_durations: tuple[tuple[int, int], ...] = ((2, 75), (4, 90), (6, 105), (10_000, 120))
    high_traffic_days: tuple[str, ...] = ("fri", "sat")
    anchor: str = "05:00"  # business-day rollover for laying out lanes


@dataclass
class Venue:
    """Static reference data for one restaurant, as read from its venue file."""

    name: str = ""
    total_seats: int | None = None
    tables: list[Table] = field(default_factory=list)
    reservations: list[ReservationBlock] = field(default_factory=list)
    merges: list[MergedPairing] = field(default_factory=list)
    service_periods: list[ServicePeriod] = field(default_factory=list)
    guests: dict[str, GuestHistory] = field(default_factory=dict)
    policy: Policy = field(default_factory=Policy)


@dataclass
class AvailabilityQuery:
    """One unit of resolver work, built per call."""

    start: ClockTime
    duration: int
    table_id: str | None = None
    period: ServicePeriod | None = None
    now: ClockTime | None = None
    party_size: int = 1
    zone: str = "any"


@dataclass(frozen=True)
class ContinuousWindow:
    """How long a table stays free from a requested start."""

    free_minutes: int
    boundary_kind: BoundaryKind
    boundary_time: int  # minute of day


@dataclass(frozen=True)
class DurationLimit:
    """Recommended and maximum booking length at a slot."""

    recommended: int
    cap: int

    @property
    def disabled(self) -> bool:
        return self.cap == 0


@dataclass(frozen=True)
class BufferGaps:
    """Idle minutes either side of a proposed booking on one table."""

    before: int | None = None
    previous_end: int | None = None  # minute of day
    after: int | None = None
    next_start: int | None = None  # minute of day


@dataclass(frozen=True)
class Candidate:
    """A table scored for a party."""

    table: Table
    available_now: bool
    opens_at: int  # minute of day
    capacity_delta: int
    score: int
    wait_minutes: int = 0


@dataclass
class RankingSummary:
    """Ranked candidates split for progressive disclosure."""

    best: Candidate | None = None
    best_now: list[Candidate] = field(default_factory=list)
    available_now: list[Candidate] = field(default_factory=list)
    opens_soon: list[Candidate] = field(default_factory=list)
    later: list[Candidate] = field(default_factory=list)


@dataclass
class BookingSelection:
    """What the booking form currently has selected."""

    start: ClockTime
    party_size: int
    table_id: str | None = None
    duration: int | None = None
    weekday: str | None = None  # "mon".."sun"


@dataclass(frozen=True)
class ConflictWarning:
    """A human-facing advisory about a selection."""

    kind: WarningKind
    severity: Severity
    message: str
    suggestion: str | None = None


@dataclass(frozen=True)
class Occupancy:
    """Seat occupancy at an instant."""

    instant: int
    seated: int
    total: int
    pct: int


@dataclass(frozen=True)
class GhostSlot:
    """Projected next free window for an occupied table."""

    starts_at: int
    ends_at: int

    @property
    def minutes(self) -> int:
        return (self.ends_at - self.starts_at) % 1440 or 1440


@dataclass(frozen=True)
class PartyRequest:
    """A party waiting to be placed on a table."""

    id: str
    party_size: int
    start: ClockTime
    duration: int
    zone: str = "any"


@dataclass
class TableAssignment:
    """A party placed on a table by the batch optimizer."""

    request_id: str
    table_id: str
    score: float = 0.0


@dataclass
class BatchResult:
    """Result of the batch optimization."""

    assignments: list[TableAssignment]
    unassigned: list[str]
    total_score: float = 0.0
