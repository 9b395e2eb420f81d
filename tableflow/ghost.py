"""Projection of when an occupied table frees up."""

from tableflow.clock import MINUTES_PER_DAY, align, normalize_window, require_clock
from tableflow.models import ClockTime, GhostSlot, ServicePeriod, TimeWindow
from tableflow.store import IntervalStore


def coalesce(windows: list[TimeWindow]) -> list[TimeWindow]:
    """Merge overlapping or touching windows into one ordered run."""
    merged: list[TimeWindow] = []
    for window in sorted(windows):
        if merged and window.start <= merged[-1].end:
            last = merged[-1]
            merged[-1] = TimeWindow(last.start, max(last.end, window.end))
        else:
            merged.append(window)
    return merged


def next_free_window(
    store: IntervalStore,
    table_id: str,
    period: ServicePeriod,
    now: ClockTime,
) -> GhostSlot | None:
    """
    The first gap after the table's current occupancy, within the service period.

    Returns None when the table is free right now or stays busy until close.
    """
    current = require_clock(now) % MINUTES_PER_DAY
    service = normalize_window(period.start, period.end, current)
    if service is None:
        return None

    windows = [align(w, current) for w in store.blocking_windows(table_id)]
    busy = coalesce([w for w in windows if w.overlaps(service)])

    for index, window in enumerate(busy):
        if not window.contains(current):
            continue
        frees_at = window.end
        if frees_at >= service.end:
            return None
        following = busy[index + 1].start if index + 1 < len(busy) else service.end
        return GhostSlot(
            starts_at=frees_at % MINUTES_PER_DAY,
            ends_at=min(following, service.end) % MINUTES_PER_DAY,
        )
    return None


def ghost_slots(
    store: IntervalStore,
    period: ServicePeriod,
    now: ClockTime,
) -> dict[str, GhostSlot]:
    """Projections for every occupied table that frees up before close."""
    slots: dict[str, GhostSlot] = {}
    for table in store.tables:
        slot = next_free_window(store, table.id, period, now)
        if slot is not None:
            slots[table.id] = slot
    return slots
