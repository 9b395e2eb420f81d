"""YAML venue loading for tableflow."""

from dataclasses import fields
from pathlib import Path
from typing import Any

import structlog
import yaml

from tableflow.availability import AvailabilityResolver
from tableflow.models import (
    GuestHistory,
    MergedPairing,
    Policy,
    ReservationBlock,
    ServicePeriod,
    Table,
    Venue,
)
from tableflow.store import IntervalStore

logger = structlog.get_logger(__name__)

# Policy fields stored as tuples; YAML hands back lists
_TUPLE_POLICY_FIELDS = {
    "non_blocking_statuses",
    "capacity_excluded_statuses",
    "high_traffic_days",
}


def _clock_str(value: Any) -> str:
    """YAML reads unquoted 19:30 as a base-60 int; keep clock values as text."""
    if isinstance(value, int) and not isinstance(value, bool):
        hours, minutes = divmod(value, 60)
        return f"{hours:02d}:{minutes:02d}"
    return str(value)


def parse_policy(data: dict[str, Any] | None) -> Policy:
    """Build a Policy from a mapping, rejecting keys it does not know."""
    if not data:
        return Policy()

    known = {f.name for f in fields(Policy)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown policy settings: {', '.join(unknown)}")

    values: dict[str, Any] = {}
    for key, value in data.items():
        if key in _TUPLE_POLICY_FIELDS:
            values[key] = tuple(str(v) for v in value)
        elif key == "party_durations":
            values[key] = tuple((int(size), int(minutes)) for size, minutes in value)
        elif key == "anchor":
            values[key] = _clock_str(value)
        else:
            values[key] = value
    return Policy(**values)


def parse_venue(data: dict[str, Any]) -> Venue:
    """Convert a parsed venue document into model objects."""
    venue_info = data.get("venue") or {}

    tables = [
        Table(
            id=str(entry["id"]),
            seats=int(entry["seats"]),
            zone=entry.get("zone", "main"),
            label=str(entry.get("label", "")),
            adjacent=tuple(str(t) for t in entry.get("adjacent", [])),
        )
        for entry in data.get("tables") or []
    ]

    reservations = [
        ReservationBlock(
            id=str(entry["id"]),
            table_id=str(entry["table"]),
            start=_clock_str(entry["start"]),
            end=_clock_str(entry["end"]),
            status=entry.get("status", "confirmed"),
            party_size=int(entry.get("party_size", 2)),
            guest_name=entry.get("guest", ""),
            tags=tuple(entry.get("tags", [])),
            notes=entry.get("notes", ""),
        )
        for entry in data.get("reservations") or []
    ]

    merges = [
        MergedPairing(
            tables=frozenset(str(t) for t in entry["tables"]),
            start=_clock_str(entry["start"]),
            end=_clock_str(entry["end"]),
        )
        for entry in data.get("merges") or []
    ]

    periods = [
        ServicePeriod(
            id=str(entry["id"]),
            start=_clock_str(entry["start"]),
            end=_clock_str(entry["end"]),
            label=entry.get("label", str(entry["id"]).title()),
            days=tuple(d.lower()[:3] for d in entry.get("days", [])),
        )
        for entry in data.get("service_periods") or []
    ]

    guests = {
        str(entry["id"]): GuestHistory(
            visit_count=int(entry.get("visit_count", 0)),
            no_show_count=int(entry.get("no_show_count", 0)),
            total_reservations=int(entry.get("total_reservations", 0)),
            name=entry.get("name", ""),
            last_visit=entry.get("last_visit"),
            avg_stay_minutes=entry.get("avg_stay_minutes"),
        )
        for entry in data.get("guests") or []
    }

    return Venue(
        name=venue_info.get("name", ""),
        total_seats=venue_info.get("total_seats"),
        tables=tables,
        reservations=reservations,
        merges=merges,
        service_periods=periods,
        guests=guests,
        policy=parse_policy(data.get("policy")),
    )


def parse_venue_yaml(yaml_path: Path) -> Venue:
    """Parse a venue YAML file."""
    with yaml_path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not data:
        return Venue()
    if not isinstance(data, dict):
        raise ValueError(f"Venue file must contain a mapping: {yaml_path}")
    return parse_venue(data)


def build_resolver(venue: Venue) -> AvailabilityResolver:
    """Build the interval store for a venue and wrap it in a resolver."""
    store = IntervalStore(
        venue.tables,
        venue.reservations,
        venue.merges,
        policy=venue.policy,
        total_seats=venue.total_seats,
    )
    return AvailabilityResolver(store, venue.service_periods)


def load_venue(yaml_path: Path) -> tuple[Venue, AvailabilityResolver]:
    """Parse a venue file and build its store. Integrity errors propagate."""
    venue = parse_venue_yaml(yaml_path)
    logger.info(
        "venue_loaded",
        path=str(yaml_path),
        venue=venue.name,
        tables=len(venue.tables),
        reservations=len(venue.reservations),
    )
    return venue, build_resolver(venue)


def create_venue_template(output_path: Path, name: str = "My Restaurant"):
    """Create a starter venue YAML file."""
    template = {
        "venue": {"name": name, "total_seats": 10},
        "service_periods": [
            {"id": "dinner", "label": "Dinner", "start": "17:00", "end": "23:00"},
        ],
        "tables": [
            {"id": "T1", "seats": 2, "zone": "main", "adjacent": ["T2"]},
            {"id": "T2", "seats": 4, "zone": "main", "adjacent": ["T1"]},
            {"id": "T3", "seats": 4, "zone": "patio"},
        ],
        "reservations": [
            {
                "id": "r1",
                "table": "T2",
                "party_size": 4,
                "start": "19:00",
                "end": "20:30",
                "status": "confirmed",
                "guest": "Guest Name",
                "tags": [],
                "notes": "",
            }
        ],
        "merges": [],
        "guests": [],
        "policy": {"capacity_weight": 3, "buffer_threshold_minutes": 10},
    }

    # Add a comment header
    header = """\
# Venue file for tableflow
# Describe your floor, service periods and tonight's book here.
#
# Times are "HH:MM" (24h), "H:MM PM", or "24:00" for end of day.
# A reservation ending before it starts runs past midnight.
#
# Reservation status options:
#   confirmed, unconfirmed, arriving, seated, completed, no-show, late
#   (unconfirmed holds never block a new booking)
#
# Merges join two tables for a window and block both:
#   - tables: [T8, T9]
#     start: "19:00"
#     end: "21:15"

"""

    with output_path.open("w", encoding="utf-8") as f:
        f.write(header)
        yaml.dump(template, f, default_flow_style=False, sort_keys=False)
