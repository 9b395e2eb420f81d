"""Best-fit table ranking for a party."""

from tableflow.availability import ANY_ZONE, AvailabilityResolver
from tableflow.clock import MINUTES_PER_DAY, minutes_until, require_clock
from tableflow.models import Candidate, ClockTime, RankingSummary, ServicePeriod

AVAILABLE_NOW_SCORE = 1000
OPENS_LATER_SCORE = 700


def score_candidate(
    available_now: bool, wait_minutes: int, capacity_delta: int, weight: int
) -> int:
    """Availability dominates; each surplus seat costs `weight` points."""
    base = AVAILABLE_NOW_SCORE if available_now else max(0, OPENS_LATER_SCORE - wait_minutes)
    return base - capacity_delta * weight


def rank(
    resolver: AvailabilityResolver,
    start: ClockTime,
    duration: int,
    party_size: int,
    zone: str = ANY_ZONE,
    period: ServicePeriod | None = None,
    weight: int | None = None,
) -> list[Candidate]:
    """
    Score and order every table that seats the party.

    Order is score descending, then earliest opening, then smallest surplus,
    then label, so equal candidates always come back in the same order.
    A table that is free at `start` opens at `start` even when the stay does
    not fit; only an occupied table waits for its boundary. Tables outside
    service hours are left out. An empty list means nothing fits.
    """
    request = require_clock(start) % MINUTES_PER_DAY
    if weight is None:
        weight = resolver.policy.capacity_weight

    candidates: list[Candidate] = []
    for table in resolver.matching_tables(party_size, zone):
        window = resolver.continuous_window(table.id, request, period)
        if window.free_minutes == 0 and window.boundary_kind == "service-close":
            continue
        available_now = window.free_minutes >= duration
        occupied = window.free_minutes == 0
        opens_at = window.boundary_time if occupied else request
        wait = minutes_until(opens_at, request)
        delta = table.seats - party_size
        candidates.append(
            Candidate(
                table=table,
                available_now=available_now,
                opens_at=opens_at,
                capacity_delta=delta,
                score=score_candidate(available_now, wait, delta, weight),
                wait_minutes=wait,
            )
        )

    candidates.sort(
        key=lambda c: (-c.score, c.wait_minutes, c.capacity_delta, c.table.display_label)
    )
    return candidates


def summarize(candidates: list[Candidate], opens_soon_minutes: int = 90) -> RankingSummary:
    """Split a ranking into the top-2 bookable now and the remaining buckets."""
    if not candidates:
        return RankingSummary()

    best_now = [c for c in candidates if c.available_now][:2]
    summary = RankingSummary(best=candidates[0], best_now=best_now)
    for candidate in candidates:
        if candidate in best_now:
            continue
        if candidate.available_now:
            summary.available_now.append(candidate)
        elif candidate.wait_minutes <= opens_soon_minutes:
            summary.opens_soon.append(candidate)
        else:
            summary.later.append(candidate)
    return summary


def best_table(
    resolver: AvailabilityResolver,
    start: ClockTime,
    duration: int,
    party_size: int,
    zone: str = ANY_ZONE,
    period: ServicePeriod | None = None,
) -> Candidate | None:
    """The recommended table, if any table is free for the whole stay."""
    ranked = rank(resolver, start, duration, party_size, zone, period)
    if ranked and ranked[0].available_now:
        return ranked[0]
    return None
