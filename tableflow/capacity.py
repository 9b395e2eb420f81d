"""Point-in-time seat occupancy across the floor."""

from collections.abc import Sequence

import numpy as np

from tableflow.clock import MINUTES_PER_DAY, normalize_window, parse_clock, require_clock
from tableflow.models import ClockTime, Occupancy, ServicePeriod
from tableflow.store import IntervalStore


def _demand_arrays(store: IntervalStore) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """(start minute of day, length, party size) for every block that occupies seats."""
    excluded = set(store.policy.capacity_excluded_statuses)
    blocks = [sb for sb in store.iter_blocks() if sb.status not in excluded]
    starts = np.array([sb.window.start % MINUTES_PER_DAY for sb in blocks], dtype=np.int64)
    lengths = np.array([sb.window.minutes for sb in blocks], dtype=np.int64)
    sizes = np.array([sb.party_size for sb in blocks], dtype=np.int64)
    return starts, lengths, sizes


def _occupancy_grid(store: IntervalStore, instants: Sequence[int]) -> list[Occupancy]:
    total = store.total_seats
    points = np.asarray(instants, dtype=np.int64) % MINUTES_PER_DAY
    starts, lengths, sizes = _demand_arrays(store)

    # A window contains t when t lies less than `length` minutes after its start on the clock face
    offsets = np.mod(points[:, None] - starts[None, :], MINUTES_PER_DAY)
    active = offsets < lengths[None, :]
    demand = (active * sizes[None, :]).sum(axis=1)

    seated = np.clip(demand, 0, max(total, 0))
    if total > 0:
        pct = np.floor(seated * 100 / total + 0.5).astype(np.int64)
    else:
        pct = np.zeros_like(seated)

    return [
        Occupancy(instant=int(p), seated=int(s), total=total, pct=int(q))
        for p, s, q in zip(points, seated, pct)
    ]


def occupancy_at(store: IntervalStore, instant: ClockTime) -> Occupancy:
    """
    Seats in use at an instant, summed over every sanitized block.

    No-show blocks do not count. Demand above the venue's seat count is
    clamped, so `seated` never exceeds `total`.
    """
    return _occupancy_grid(store, [require_clock(instant)])[0]


def occupancy_timeline(
    store: IntervalStore,
    period: ServicePeriod,
    step: int = 30,
) -> list[Occupancy]:
    """Occupancy at every `step` minutes from the period's opening up to its close."""
    opening = parse_clock(period.start)
    service = normalize_window(period.start, period.end, opening) if opening is not None else None
    if service is None:
        return []
    return _occupancy_grid(store, list(range(service.start, service.end, step)))
