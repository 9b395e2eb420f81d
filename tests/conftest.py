from pathlib import Path

import pytest

from tableflow.availability import AvailabilityResolver
from tableflow.models import ReservationBlock, ServicePeriod, Table
from tableflow.store import IntervalStore

ROOT = Path(__file__).resolve().parents[1]
DEMO_VENUE = ROOT / "demo" / "bella_vista.yaml"

DINNER = ServicePeriod(id="dinner", start="17:00", end="23:00", label="Dinner")
LATE = ServicePeriod(id="late", start="22:00", end="02:00", label="Late Bar")


@pytest.fixture
def demo_venue():
    return DEMO_VENUE


@pytest.fixture
def make_resolver():
    """Build a resolver from tables, raw blocks and merges."""

    def _make(tables, blocks=(), merges=(), periods=(DINNER,), policy=None, total_seats=None):
        store = IntervalStore(tables, blocks, merges, policy=policy, total_seats=total_seats)
        return AvailabilityResolver(store, periods)

    return _make


@pytest.fixture
def floor(make_resolver):
    """
    A small dinner floor.

    T12 turns at 19:25, T7 is seated until 19:45 and booked again at 21:00,
    T20 only has an unconfirmed hold, T2 runs past midnight and the T22
    party never showed.
    """
    tables = [
        Table(id="T2", seats=2, zone="main"),
        Table(id="T7", seats=4, zone="main", adjacent=("T8",)),
        Table(id="T8", seats=4, zone="main", adjacent=("T7",)),
        Table(id="T12", seats=4, zone="main"),
        Table(id="T20", seats=4, zone="patio"),
        Table(id="T22", seats=6, zone="patio"),
    ]
    blocks = [
        ReservationBlock("b1", "T12", "18:00", "19:25", "confirmed", 4),
        ReservationBlock("b2", "T7", "18:30", "19:45", "seated", 4),
        ReservationBlock("b3", "T7", "21:00", "22:30", "confirmed", 4),
        ReservationBlock("b4", "T20", "19:30", "21:00", "unconfirmed", 4),
        ReservationBlock("b5", "T2", "22:30", "00:30", "confirmed", 2),
        ReservationBlock("b6", "T22", "19:00", "20:30", "no-show", 6),
    ]
    return make_resolver(tables, blocks, periods=(DINNER, LATE))
