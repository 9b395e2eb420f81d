from tableflow.models import ReservationBlock, Table
from tableflow.ranking import best_table, rank, score_candidate, summarize


def ids(candidates):
    return [c.table.id for c in candidates]


def test_free_table_beats_one_that_opens_later(make_resolver):
    resolver = make_resolver(
        [Table(id="T12", seats=4), Table(id="T7", seats=4)],
        [
            ReservationBlock("patel", "T12", "18:00", "19:25"),
            ReservationBlock("kim", "T7", "18:30", "19:45"),
        ],
    )
    first, second = rank(resolver, "19:30", 90, 4)

    assert (first.table.id, first.score, first.available_now) == ("T12", 1000, True)
    assert first.opens_at == 1170
    assert (second.table.id, second.score, second.available_now) == ("T7", 685, False)
    assert second.opens_at == 1185
    assert second.wait_minutes == 15


def test_floor_ordering(floor):
    ranked = rank(floor, "19:30", 90, 4)
    assert ids(ranked) == ["T12", "T20", "T8", "T7", "T22"]
    assert [c.score for c in ranked] == [1000, 1000, 1000, 685, 634]
    assert ranked[-1].capacity_delta == 2


def test_surplus_seats_cost_points(floor):
    ranked = rank(floor, "19:30", 75, 2)
    assert ranked[0].table.id == "T2"
    assert ranked[0].score == 1000
    assert all(c.score == 994 for c in ranked[1:4])


def test_weight_override(floor):
    ranked = rank(floor, "19:30", 75, 2, weight=0)
    assert [c.score for c in ranked[:4]] == [1000, 1000, 1000, 1000]
    # equal scores fall back to surplus seats, then label
    assert ids(ranked[:4]) == ["T2", "T12", "T20", "T8"]


def test_zone_restricts_candidates(floor):
    assert ids(rank(floor, "19:30", 90, 4, zone="patio")) == ["T20", "T22"]


def test_nothing_fits():
    assert summarize([]).best is None


def test_free_table_too_short_for_the_stay_opens_at_start(make_resolver):
    resolver = make_resolver(
        [Table(id="A", seats=4)], [ReservationBlock("r1", "A", "20:00", "21:00")]
    )
    (candidate,) = rank(resolver, "19:30", 90, 4)

    assert candidate.available_now is False
    assert candidate.opens_at == 1170
    assert candidate.wait_minutes == 0
    assert candidate.score == 700


def test_closed_venue_ranks_nothing(floor):
    assert rank(floor, "15:00", 90, 4) == []
    assert summarize(rank(floor, "15:00", 90, 4)).best is None


def test_party_too_large(floor):
    assert rank(floor, "19:30", 90, 7) == []
    assert best_table(floor, "19:30", 90, 7) is None


def test_long_wait_floors_at_zero():
    assert score_candidate(False, 800, 0, 3) == 0
    assert score_candidate(False, 800, 2, 3) == -6
    assert score_candidate(True, 0, 2, 3) == 994


def test_summary_buckets(floor):
    summary = summarize(rank(floor, "19:30", 90, 4), opens_soon_minutes=30)
    assert summary.best.table.id == "T12"
    assert ids(summary.best_now) == ["T12", "T20"]
    assert ids(summary.available_now) == ["T8"]
    assert ids(summary.opens_soon) == ["T7"]
    assert ids(summary.later) == ["T22"]


def test_best_table(floor):
    assert best_table(floor, "19:30", 90, 4).table.id == "T12"
    # nobody seats 6 for the full stay before the no-show window clears
    assert best_table(floor, "19:30", 105, 6) is None


def test_ranking_is_deterministic(floor):
    first = rank(floor, "20:15", 90, 2)
    second = rank(floor, "20:15", 90, 2)
    assert ids(first) == ids(second)
