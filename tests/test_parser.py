import pytest
import yaml

from tableflow.models import Policy, Venue
from tableflow.parser import (
    create_venue_template,
    load_venue,
    parse_policy,
    parse_venue,
    parse_venue_yaml,
)
from tableflow.store import DataIntegrityError


def test_unquoted_times_stay_clock_strings():
    data = yaml.safe_load(
        """
tables:
  - {id: A, seats: 4}
reservations:
  - {id: r1, table: A, start: 19:30, end: 21:00}
service_periods:
  - {id: dinner, start: 17:00, end: 24:00}
"""
    )
    venue = parse_venue(data)
    assert venue.reservations[0].start == "19:30"
    assert venue.reservations[0].end == "21:00"
    assert venue.service_periods[0].end == "24:00"
    assert venue.service_periods[0].label == "Dinner"


def test_defaults_for_optional_fields():
    venue = parse_venue(
        {
            "tables": [{"id": 7, "seats": 2}],
            "reservations": [{"id": "r1", "table": 7, "start": "18:00", "end": "19:00"}],
        }
    )
    table = venue.tables[0]
    assert (table.id, table.zone, table.adjacent) == ("7", "main", ())
    block = venue.reservations[0]
    assert (block.table_id, block.status, block.party_size) == ("7", "confirmed", 2)
    assert venue.total_seats is None
    assert venue.policy == Policy()


def test_policy_overrides():
    policy = parse_policy(
        {
            "capacity_weight": 5,
            "non_blocking_statuses": ["unconfirmed", "late"],
            "party_durations": [[2, 60], [99, 100]],
            "anchor": 240,
        }
    )
    assert policy.capacity_weight == 5
    assert policy.non_blocking_statuses == ("unconfirmed", "late")
    assert policy.party_durations == ((2, 60), (99, 100))
    assert policy.anchor == "04:00"


def test_unknown_policy_setting_is_rejected():
    with pytest.raises(ValueError, match="capacity_wieght"):
        parse_policy({"capacity_wieght": 3})


def test_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert parse_venue_yaml(path) == Venue()


def test_non_mapping_file(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- T1\n- T2\n")
    with pytest.raises(ValueError, match="mapping"):
        parse_venue_yaml(path)


def test_overlapping_merges_fail_to_load(tmp_path):
    path = tmp_path / "venue.yaml"
    path.write_text(
        """
tables:
  - {id: A, seats: 4}
  - {id: B, seats: 4}
  - {id: C, seats: 4}
merges:
  - {tables: [A, B], start: "19:00", end: "21:00"}
  - {tables: [B, C], start: "20:00", end: "22:00"}
"""
    )
    with pytest.raises(DataIntegrityError):
        load_venue(path)


def test_demo_venue_loads(demo_venue):
    venue, resolver = load_venue(demo_venue)

    assert venue.name == "Bella Vista"
    assert resolver.store.total_seats == 78
    assert len(venue.tables) == 18
    assert [p.id for p in resolver.periods_for_day("sat")] == ["dinner", "late"]
    assert [p.id for p in resolver.periods_for_day("mon")] == ["lunch", "dinner"]
    assert venue.guests["g3"].no_show_count == 2

    chen = next(sb for sb in resolver.store.all_blocks("T12") if sb.id == "tb12")
    assert (chen.window.start, chen.window.end) == (1185, 1290)


def test_template_round_trips(tmp_path):
    path = tmp_path / "venue.yaml"
    create_venue_template(path, name="Trattoria")
    assert path.read_text().startswith("# Venue file for tableflow")

    venue, resolver = load_venue(path)
    assert venue.name == "Trattoria"
    assert [t.id for t in venue.tables] == ["T1", "T2", "T3"]
    assert resolver.continuous_window("T2", "19:30").free_minutes == 0
