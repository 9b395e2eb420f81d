"""Sanitized catalog of tables and their booked intervals."""

from collections.abc import Iterable, Iterator

import structlog

from tableflow.clock import format_clock_24, normalize_window, require_clock
from tableflow.models import (
    MergedPairing,
    Policy,
    ReservationBlock,
    SanitizedBlock,
    Table,
    TimeWindow,
)

logger = structlog.get_logger(__name__)


class DataIntegrityError(ValueError):
    """Raised when venue reference data contradicts itself."""


def place_blocks(blocks: Iterable[ReservationBlock], anchor: int) -> list[SanitizedBlock]:
    """
    Attach a normalized window to each raw block.

    Blocks whose times do not parse, or whose window is empty, are dropped.
    """
    placed: list[SanitizedBlock] = []
    for block in blocks:
        window = normalize_window(block.start, block.end, anchor)
        if window is None:
            logger.warning(
                "degenerate_block_dropped",
                block_id=block.id,
                table_id=block.table_id,
                start=block.start,
                end=block.end,
            )
            continue
        placed.append(SanitizedBlock(block=block, window=window))
    return placed


def sanitize_lane(lane: Iterable[SanitizedBlock], min_minutes: int = 15) -> list[SanitizedBlock]:
    """
    Repair one table's blocks into ordered, non-overlapping windows.

    Blocks are walked by (start, end, id). Each start is pushed to no earlier
    than the previous block's end and each end to at least start + min_minutes,
    so the earliest reservation keeps its original time. No block is dropped.
    Running this on its own output returns it unchanged.
    """
    ordered = sorted(lane, key=lambda sb: (sb.window.start, sb.window.end, sb.id))
    repaired: list[SanitizedBlock] = []
    previous_end: int | None = None

    for item in ordered:
        start = item.window.start
        if previous_end is not None:
            start = max(start, previous_end)
        end = max(item.window.end, start + min_minutes)

        if (start, end) != (item.window.start, item.window.end):
            logger.debug(
                "block_repaired",
                block_id=item.id,
                table_id=item.block.table_id,
                original=f"{format_clock_24(item.window.start)}-{format_clock_24(item.window.end)}",
                repaired=f"{format_clock_24(start)}-{format_clock_24(end)}",
            )
            item = SanitizedBlock(block=item.block, window=TimeWindow(start, end))

        repaired.append(item)
        previous_end = end

    return repaired


class IntervalStore:
    """
    Read-only view of the floor: tables, sanitized lanes and merge pairings.

    Built once from raw reference data. Lanes are sanitized at construction
    and never mutated afterwards; build a new store when the data changes.
    """

    def __init__(
        self,
        tables: Iterable[Table],
        blocks: Iterable[ReservationBlock],
        merges: Iterable[MergedPairing] = (),
        policy: Policy | None = None,
        total_seats: int | None = None,
    ):
        self.policy = policy or Policy()
        self.anchor = require_clock(self.policy.anchor)

        self._tables: dict[str, Table] = {}
        for table in tables:
            if table.id in self._tables:
                raise DataIntegrityError(f"Duplicate table id: {table.id}")
            self._tables[table.id] = table

        raw_lanes: dict[str, list[ReservationBlock]] = {tid: [] for tid in self._tables}
        block_count = 0
        for block in blocks:
            if block.table_id not in raw_lanes:
                raise DataIntegrityError(
                    f"Reservation {block.id} references unknown table {block.table_id}"
                )
            raw_lanes[block.table_id].append(block)
            block_count += 1

        self._lanes: dict[str, tuple[SanitizedBlock, ...]] = {
            tid: tuple(sanitize_lane(place_blocks(raw, self.anchor), self.policy.min_block_minutes))
            for tid, raw in raw_lanes.items()
        }

        self._merges: dict[str, list[tuple[MergedPairing, TimeWindow]]] = {
            tid: [] for tid in self._tables
        }
        for pairing in merges:
            self._add_merge(pairing)

        self._blocking: dict[str, tuple[TimeWindow, ...]] = {
            tid: self._build_blocking(tid) for tid in self._tables
        }

        self._total_seats = (
            total_seats if total_seats is not None else sum(t.seats for t in self._tables.values())
        )

        logger.info(
            "interval_store_built",
            tables=len(self._tables),
            blocks=block_count,
            sanitized_blocks=sum(len(lane) for lane in self._lanes.values()),
            merges=sum(len(m) for m in self._merges.values()) // 2,
            total_seats=self._total_seats,
        )

    def _add_merge(self, pairing: MergedPairing) -> None:
        names = sorted(pairing.tables)
        if len(names) != 2:
            raise DataIntegrityError(f"Merge pairing must join two distinct tables: {names}")
        for tid in names:
            if tid not in self._tables:
                raise DataIntegrityError(f"Merge pairing references unknown table {tid}")

        window = normalize_window(pairing.start, pairing.end, self.anchor)
        if window is None:
            logger.warning(
                "degenerate_merge_dropped",
                tables="+".join(names),
                start=pairing.start,
                end=pairing.end,
            )
            return

        for tid in names:
            for existing, existing_window in self._merges[tid]:
                if existing_window.overlaps(window):
                    raise DataIntegrityError(
                        f"Table {tid} is in overlapping merges: "
                        f"{'+'.join(sorted(existing.tables))} and {'+'.join(names)}"
                    )
        for tid in names:
            self._merges[tid].append((pairing, window))

    def _build_blocking(self, table_id: str) -> tuple[TimeWindow, ...]:
        skip = set(self.policy.non_blocking_statuses)
        windows = [sb.window for sb in self._lanes[table_id] if sb.status not in skip]
        windows.extend(window for _, window in self._merges[table_id])
        return tuple(sorted(windows))

    @property
    def tables(self) -> list[Table]:
        return list(self._tables.values())

    @property
    def total_seats(self) -> int:
        return self._total_seats

    @property
    def largest_table_seats(self) -> int:
        return max((t.seats for t in self._tables.values()), default=0)

    def table(self, table_id: str) -> Table:
        try:
            return self._tables[table_id]
        except KeyError:
            raise KeyError(f"Unknown table: {table_id}") from None

    def blocking_windows(self, table_id: str) -> list[TimeWindow]:
        """Windows that prevent a new booking: held reservations plus merges."""
        self.table(table_id)
        return list(self._blocking[table_id])

    def all_blocks(self, table_id: str) -> list[SanitizedBlock]:
        """Every sanitized block on a table, unconfirmed holds included."""
        self.table(table_id)
        return list(self._lanes[table_id])

    def merges_for(self, table_id: str) -> list[MergedPairing]:
        self.table(table_id)
        return [pairing for pairing, _ in self._merges[table_id]]

    def iter_blocks(self) -> Iterator[SanitizedBlock]:
        for lane in self._lanes.values():
            yield from lane
