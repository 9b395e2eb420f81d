"""Output formatting for tableflow."""

from tableflow.clock import format_clock_12, format_duration
from tableflow.models import (
    BatchResult,
    Candidate,
    ConflictWarning,
    ContinuousWindow,
    DurationLimit,
    GhostSlot,
    Occupancy,
    RankingSummary,
)


def format_window(
    table_label: str,
    start: int,
    window: ContinuousWindow,
    limit: DurationLimit | None = None,
) -> str:
    """Format a single table's free window."""
    lines = [f"=== {table_label} from {format_clock_12(start)} ==="]
    if window.free_minutes == 0:
        if window.boundary_kind == "next-reservation":
            lines.append(f"Occupied. Free again at {format_clock_12(window.boundary_time)}.")
        else:
            lines.append("Closed at this time.")
    else:
        until = "next reservation" if window.boundary_kind == "next-reservation" else "close"
        lines.append(
            f"Free for {format_duration(window.free_minutes)} "
            f"(until {format_clock_12(window.boundary_time)}, {until})"
        )
    if limit is not None:
        if limit.disabled:
            lines.append("Duration: not bookable")
        else:
            lines.append(
                f"Duration: recommended {format_duration(limit.recommended)}, "
                f"max {format_duration(limit.cap)}"
            )
    return "\n".join(lines)


def format_slots(slots: list[int], title: str = "Available times") -> str:
    """Format a list of start times, six per row."""
    if not slots:
        return f"=== {title} ===\nNo times available."
    lines = [f"=== {title} ==="]
    labels = [format_clock_12(s).rjust(8) for s in slots]
    for i in range(0, len(labels), 6):
        lines.append("  ".join(labels[i : i + 6]))
    return "\n".join(lines)


def _candidate_row(candidate: Candidate) -> str:
    table = candidate.table
    when = "now" if candidate.available_now else f"opens {format_clock_12(candidate.opens_at)}"
    return (
        f"  {table.display_label.ljust(6)} {str(table.seats).rjust(2)} seats  "
        f"{table.zone.ljust(8)} {when.ljust(17)} score {candidate.score}"
    )


def format_ranking(summary: RankingSummary, party_size: int, start: int) -> str:
    """Format a ranking summary for the booking form."""
    lines = [f"=== Tables for {party_size} at {format_clock_12(start)} ==="]
    if summary.best is None:
        lines.append("No tables fit this party.")
        return "\n".join(lines)

    lines.append(f"Recommended: {summary.best.table.display_label}")
    sections = [
        ("Best now", summary.best_now),
        ("Also available", summary.available_now),
        ("Opens soon", summary.opens_soon),
        ("Later", summary.later),
    ]
    for title, candidates in sections:
        if not candidates:
            continue
        lines.append("")
        lines.append(f"--- {title} ---")
        lines.extend(_candidate_row(c) for c in candidates)
    return "\n".join(lines)


def format_warnings(warnings: list[ConflictWarning]) -> str:
    if not warnings:
        return "No conflicts."
    lines = ["=== Conflicts ==="]
    for warning in warnings:
        marker = "!" if warning.severity == "warning" else "i"
        lines.append(f"[{marker}] {warning.kind}: {warning.message}")
        if warning.suggestion:
            lines.append(f"    -> {warning.suggestion}")
    return "\n".join(lines)


def format_occupancy(timeline: list[Occupancy], width: int = 30) -> str:
    """Format occupancy snapshots as a text capacity bar."""
    if not timeline:
        return "No occupancy data."
    lines = ["=== Occupancy ==="]
    for snap in timeline:
        filled = round(snap.pct * width / 100)
        bar = "#" * filled + "." * (width - filled)
        lines.append(
            f"  {format_clock_12(snap.instant).rjust(8)} [{bar}] "
            f"{str(snap.pct).rjust(3)}%  {snap.seated}/{snap.total}"
        )
    return "\n".join(lines)


def format_ghosts(ghosts: dict[str, GhostSlot], labels: dict[str, str] | None = None) -> str:
    if not ghosts:
        return "No tables freeing up before close."
    labels = labels or {}
    lines = ["=== Freeing up ==="]
    for table_id, slot in sorted(ghosts.items(), key=lambda item: (item[1].starts_at, item[0])):
        label = labels.get(table_id, table_id)
        lines.append(
            f"  {label.ljust(6)} available ~{format_clock_12(slot.starts_at)}"
            f" until {format_clock_12(slot.ends_at)} ({format_duration(slot.minutes)})"
        )
    return "\n".join(lines)


def format_batch(result: BatchResult) -> str:
    """Format batch assignment results for display."""
    lines: list[str] = []
    if not result.assignments:
        lines.append("No parties could be placed.")
    else:
        lines.append("=== Table Assignments ===")
        lines.append(f"Total score: {result.total_score:.0f}")
        for assignment in sorted(result.assignments, key=lambda a: a.request_id):
            lines.append(f"  {assignment.request_id.ljust(10)} -> {assignment.table_id}")
    if result.unassigned:
        lines.append("")
        lines.append(f"Unplaced: {', '.join(result.unassigned)}")
    return "\n".join(lines)
