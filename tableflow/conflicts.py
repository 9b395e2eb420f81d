"""Warnings for a booking-form selection."""

from itertools import combinations

from tableflow.availability import AvailabilityResolver
from tableflow.clock import (
    MINUTES_PER_DAY,
    format_clock_12,
    format_duration,
    require_clock,
    round_down,
    round_up,
)
from tableflow.models import BookingSelection, ConflictWarning, GuestHistory, Table

DAY_NAMES = {
    "mon": "Monday",
    "tue": "Tuesday",
    "wed": "Wednesday",
    "thu": "Thursday",
    "fri": "Friday",
    "sat": "Saturday",
    "sun": "Sunday",
}


def _pushed_together(a: Table, b: Table) -> bool:
    # Without adjacency data any two tables are assumed movable
    if not a.adjacent and not b.adjacent:
        return True
    return b.id in a.adjacent or a.id in b.adjacent


def merge_candidates(
    resolver: AvailabilityResolver,
    start: int,
    duration: int,
    party_size: int,
) -> list[tuple[Table, Table]]:
    """Two-table combinations that seat the party and are both free for the stay."""
    options: list[tuple[Table, Table]] = []
    for a, b in combinations(resolver.store.tables, 2):
        if a.seats + b.seats < party_size or not _pushed_together(a, b):
            continue
        if resolver.is_available(a.id, start, duration) and resolver.is_available(
            b.id, start, duration
        ):
            options.append((a, b))
    options.sort(
        key=lambda pair: (
            pair[0].seats + pair[1].seats,
            pair[0].display_label,
            pair[1].display_label,
        )
    )
    return options


def _buffer_warnings(
    resolver: AvailabilityResolver,
    table_id: str,
    start: int,
    duration: int,
) -> list[ConflictWarning]:
    policy = resolver.policy
    threshold = policy.buffer_threshold_minutes
    label = resolver.store.table(table_id).display_label
    gaps = resolver.gaps_around(table_id, start, duration)
    warnings: list[ConflictWarning] = []

    if gaps.before is not None and gaps.previous_end is not None and 0 <= gaps.before < threshold:
        clean_start = round_up(gaps.previous_end + threshold, policy.slot_step_minutes)
        warnings.append(
            ConflictWarning(
                kind="buffer",
                severity="warning",
                message=(
                    f"{label} has a reservation ending at {format_clock_12(gaps.previous_end)}. "
                    f"There's only a {gaps.before}-minute buffer."
                ),
                suggestion=f"Consider {format_clock_12(clean_start)} or a different table.",
            )
        )

    if gaps.after is not None and gaps.next_start is not None and 0 <= gaps.after < threshold:
        latest_start = round_down(
            gaps.next_start - threshold - duration, policy.slot_step_minutes
        )
        warnings.append(
            ConflictWarning(
                kind="buffer",
                severity="warning",
                message=(
                    f"{label} has a reservation starting at {format_clock_12(gaps.next_start)}. "
                    f"This booking leaves only a {gaps.after}-minute buffer."
                ),
                suggestion=(
                    f"Consider {format_clock_12(latest_start)}, a shorter stay "
                    "or a different table."
                ),
            )
        )

    return warnings


def _no_show_warning(guest: GuestHistory, threshold: int) -> ConflictWarning | None:
    if guest.no_show_count < threshold:
        return None
    total = max(guest.total_reservations, guest.no_show_count)
    rate = int(guest.no_show_count * 100 / total + 0.5)
    return ConflictWarning(
        kind="risk",
        severity="warning",
        message=(
            f"This guest has {guest.no_show_count} no-shows out of {total} reservations "
            f"({rate}% no-show rate). Consider requiring a deposit."
        ),
        suggestion="Require a deposit to hold the table.",
    )


def conflicts_for(
    resolver: AvailabilityResolver,
    selection: BookingSelection,
    guest: GuestHistory | None = None,
) -> list[ConflictWarning]:
    """
    Evaluate every advisory rule against a selection.

    Each rule fires independently and nothing is remembered between calls.
    """
    policy = resolver.policy
    start = require_clock(selection.start) % MINUTES_PER_DAY
    party = selection.party_size
    duration = selection.duration or resolver.duration_for_party(party)
    warnings: list[ConflictWarning] = []

    if selection.table_id is not None:
        warnings.extend(_buffer_warnings(resolver, selection.table_id, start, duration))

    if guest is not None:
        no_show = _no_show_warning(guest, policy.risk_no_show_threshold)
        if no_show is not None:
            warnings.append(no_show)

        weekday = (selection.weekday or "").lower()[:3]
        if (
            guest.visit_count == 0
            and party >= policy.large_party_size
            and weekday in policy.high_traffic_days
        ):
            risk_pct = int(policy.first_timer_no_show_rate * 100 + 0.5)
            warnings.append(
                ConflictWarning(
                    kind="risk",
                    severity="warning",
                    message=(
                        f"First-time guest booking for a {DAY_NAMES.get(weekday, weekday)} "
                        f"{format_clock_12(start)} {party}-top. "
                        f"Historical no-show risk: {risk_pct}%."
                    ),
                    suggestion="Consider requiring a deposit.",
                )
            )

        if (
            guest.visit_count >= policy.long_stay_visit_count
            and guest.avg_stay_minutes is not None
            and guest.avg_stay_minutes > duration
        ):
            name = guest.name or "This guest"
            visited = f" last visited {guest.last_visit} and" if guest.last_visit else ""
            extended = round_up(guest.avg_stay_minutes, policy.duration_grid_minutes)
            warnings.append(
                ConflictWarning(
                    kind="info",
                    severity="info",
                    message=(
                        f"{name}{visited} usually stays {format_duration(guest.avg_stay_minutes)}. "
                        f"Adjust duration?"
                    ),
                    suggestion=(
                        f"Book {format_duration(extended)} "
                        f"instead of {format_duration(duration)}."
                    ),
                )
            )

    if party > resolver.store.largest_table_seats:
        options = merge_candidates(resolver, start, duration, party)
        if options:
            listed = ", ".join(f"{a.display_label}+{b.display_label}" for a, b in options)
            message = f"Party of {party} requires merging tables. Options: {listed}"
            suggestion = None
        else:
            message = (
                f"Party of {party} requires merging tables, but no two-table merge is free at "
                f"{format_clock_12(start)}."
            )
            suggestion = "Try another time or split the party."
        warnings.append(
            ConflictWarning(kind="merge", severity="info", message=message, suggestion=suggestion)
        )

    return warnings
