"""Free-window resolution shared by every availability surface."""

from collections.abc import Iterable

from tableflow.clock import (
    MINUTES_PER_DAY,
    align,
    normalize_window,
    parse_clock,
    require_clock,
    round_down,
    round_up,
)
from tableflow.models import (
    AvailabilityQuery,
    BufferGaps,
    ClockTime,
    ContinuousWindow,
    DurationLimit,
    ServicePeriod,
    Table,
    TimeWindow,
)
from tableflow.store import IntervalStore

ANY_ZONE = "any"


def _free_from(windows: list[TimeWindow], cursor: int) -> int:
    """Follow a chain of touching or overlapping windows to the first idle minute."""
    for window in windows:
        if window.start <= cursor < window.end:
            cursor = window.end
    return cursor


class AvailabilityResolver:
    """
    Answers "how long is this table free from here" for every caller.

    The floor map, the timeline and the booking form all go through
    continuous_window; nothing else re-derives interval math.
    """

    def __init__(self, store: IntervalStore, periods: Iterable[ServicePeriod] = ()):
        self.store = store
        self.policy = store.policy
        self.periods = list(periods)

    def period_for(self, minute: ClockTime) -> ServicePeriod | None:
        """First service period whose window contains the given time."""
        point = require_clock(minute) % MINUTES_PER_DAY
        for period in self.periods:
            window = normalize_window(period.start, period.end, point)
            if window is not None and window.contains(point):
                return period
        return None

    def periods_for_day(self, weekday: str) -> list[ServicePeriod]:
        day = weekday.lower()[:3]
        return [p for p in self.periods if not p.days or day in p.days]

    def matching_tables(self, party_size: int, zone: str | None = ANY_ZONE) -> list[Table]:
        """Tables that seat the party, restricted to a zone unless zone is "any"."""
        return [
            t
            for t in self.store.tables
            if t.seats >= party_size and (not zone or zone == ANY_ZONE or t.zone == zone)
        ]

    def _aligned(self, table_id: str, anchor: int) -> list[TimeWindow]:
        return sorted(align(w, anchor) for w in self.store.blocking_windows(table_id))

    def continuous_window(
        self,
        table_id: str,
        start: ClockTime,
        period: ServicePeriod | None = None,
    ) -> ContinuousWindow:
        """
        Longest uninterrupted free stretch on a table starting at `start`.

        Inside a blocking window the table has 0 free minutes and the boundary
        is the next moment it is free at all. Otherwise the stretch ends at the
        earlier of the service close and the next blocking window. Without a
        pinned period the one containing `start` is used; outside the period
        the venue is closed and nothing is free.
        """
        request = require_clock(start) % MINUTES_PER_DAY
        windows = self._aligned(table_id, request)

        for window in windows:
            if window.contains(request):
                free_at = _free_from(windows, window.end)
                return ContinuousWindow(0, "next-reservation", free_at % MINUTES_PER_DAY)

        if period is None:
            period = self.period_for(request)
        service = (
            normalize_window(period.start, period.end, request) if period is not None else None
        )
        if service is None or not service.contains(request):
            return ContinuousWindow(0, "service-close", request)

        close = service.end
        next_start = windows[0].start if windows else None
        if next_start is not None and next_start < close:
            boundary, kind = next_start, "next-reservation"
        else:
            boundary, kind = close, "service-close"
        return ContinuousWindow(max(0, boundary - request), kind, boundary % MINUTES_PER_DAY)

    def is_available(
        self,
        table_id: str,
        start: ClockTime,
        duration: int,
        period: ServicePeriod | None = None,
    ) -> bool:
        return self.continuous_window(table_id, start, period).free_minutes >= duration

    def candidate_start_times(
        self,
        period: ServicePeriod,
        step: int | None = None,
        now: ClockTime | None = None,
        grace: int | None = None,
    ) -> list[int]:
        """
        Slot starts across a service period, in service order.

        When `now` falls inside the period, slots before the rounded-up current
        time are dropped, except the bucket that started at most `grace`
        minutes ago. If that leaves nothing the full period is returned.
        """
        step = step or self.policy.slot_step_minutes
        grace = self.policy.grace_minutes if grace is None else grace

        opening = parse_clock(period.start)
        if opening is None:
            return []
        service = normalize_window(period.start, period.end, opening)
        if service is None:
            return []
        slots = list(range(service.start, service.end, step))

        if now is not None:
            current = require_clock(now) % MINUTES_PER_DAY
            if current < service.start:
                current += MINUTES_PER_DAY
            if service.contains(current):
                elapsed = current - service.start
                ceiling = service.start + round_up(elapsed, step)
                bucket = service.start + round_down(elapsed, step)
                upcoming = [s for s in slots if s >= ceiling]
                if bucket < ceiling and current - bucket <= grace:
                    upcoming.insert(0, bucket)
                if upcoming:
                    slots = upcoming

        return [s % MINUTES_PER_DAY for s in slots]

    def available_start_times(
        self,
        table_id: str | None,
        duration: int,
        period: ServicePeriod,
        now: ClockTime | None = None,
        party_size: int = 1,
        zone: str = ANY_ZONE,
    ) -> list[int]:
        """Candidate slots at which the table, or any matching table, is free for `duration`."""
        if table_id is not None:
            table_ids = [table_id]
        else:
            table_ids = [t.id for t in self.matching_tables(party_size, zone)]

        return [
            slot
            for slot in self.candidate_start_times(period, now=now)
            if any(self.is_available(tid, slot, duration, period) for tid in table_ids)
        ]

    def resolve(self, query: AvailabilityQuery) -> list[int]:
        """Run an AvailabilityQuery against the pinned or inferred period."""
        period = query.period or self.period_for(query.start)
        if period is None:
            return []
        return self.available_start_times(
            query.table_id,
            query.duration,
            period,
            now=query.now,
            party_size=query.party_size,
            zone=query.zone,
        )

    def duration_for_party(self, party_size: int) -> int:
        for max_size, minutes in self.policy.party_durations:
            if party_size <= max_size:
                return minutes
        return self.policy.party_durations[-1][1]

    def max_duration_at(
        self,
        table_id: str,
        start: ClockTime,
        period: ServicePeriod | None = None,
        party_size: int = 2,
    ) -> DurationLimit:
        """Longest bookable duration on the grid, and the party's policy duration within it."""
        grid = self.policy.duration_grid_minutes
        free = self.continuous_window(table_id, start, period).free_minutes
        cap = round_down(free, grid)
        if cap < grid:
            return DurationLimit(recommended=0, cap=0)
        return DurationLimit(recommended=min(self.duration_for_party(party_size), cap), cap=cap)

    def gaps_around(self, table_id: str, start: ClockTime, duration: int) -> BufferGaps:
        """Idle time between the previous booking and `start`, and after `start + duration`."""
        request = require_clock(start) % MINUTES_PER_DAY
        finish = request + duration
        windows = self._aligned(table_id, request)
        if not windows:
            return BufferGaps()

        # Aligned windows all end after the request, so a day earlier they end at or before it
        previous_end = max(w.end - MINUTES_PER_DAY for w in windows)
        before = request - previous_end

        following = [w.start for w in windows if w.start >= request]
        next_start = min(following) if following else None
        after = next_start - finish if next_start is not None else None

        return BufferGaps(
            before=before,
            previous_end=previous_end % MINUTES_PER_DAY,
            after=after,
            next_start=next_start % MINUTES_PER_DAY if next_start is not None else None,
        )
