from tableflow.models import PartyRequest, Table
from tableflow.optimizer import assign_parties


def placed(result):
    return {a.request_id: a.table_id for a in result.assignments}


def test_parties_get_distinct_tables(floor):
    requests = [
        PartyRequest(id="w1", party_size=4, start="19:30", duration=90),
        PartyRequest(id="w2", party_size=4, start="19:30", duration=90),
    ]
    result = assign_parties(floor, requests)

    tables = placed(result)
    assert set(tables) == {"w1", "w2"}
    assert tables["w1"] != tables["w2"]
    assert set(tables.values()) <= {"T8", "T12", "T20"}
    assert result.unassigned == []
    assert result.total_score == 2000


def test_exact_fit_preferred(floor):
    request = PartyRequest(id="w1", party_size=2, start="19:30", duration=75)
    result = assign_parties(floor, [request])
    assert placed(result) == {"w1": "T2"}
    assert result.total_score == 1000


def test_one_table_two_overlapping_parties(make_resolver):
    resolver = make_resolver([Table(id="A", seats=4)])
    requests = [
        PartyRequest(id="w1", party_size=2, start="19:30", duration=90),
        PartyRequest(id="w2", party_size=2, start="20:00", duration=90),
    ]
    result = assign_parties(resolver, requests)

    assert len(result.assignments) == 1
    assert len(result.unassigned) == 1


def test_back_to_back_stays_share_a_table(make_resolver):
    resolver = make_resolver([Table(id="A", seats=4)])
    requests = [
        PartyRequest(id="early", party_size=2, start="18:00", duration=90),
        PartyRequest(id="late", party_size=2, start="19:30", duration=90),
    ]
    result = assign_parties(resolver, requests)

    assert placed(result) == {"early": "A", "late": "A"}


def test_party_nobody_can_seat(floor):
    requests = [
        PartyRequest(id="big", party_size=12, start="19:30", duration=120),
        PartyRequest(id="pair", party_size=2, start="19:30", duration=75),
    ]
    result = assign_parties(floor, requests)

    assert placed(result) == {"pair": "T2"}
    assert result.unassigned == ["big"]


def test_zone_preference(floor):
    result = assign_parties(
        floor, [PartyRequest(id="w1", party_size=2, start="19:30", duration=75, zone="patio")]
    )
    assert placed(result) == {"w1": "T20"}


def test_no_requests(floor):
    result = assign_parties(floor, [])
    assert result.assignments == []
    assert result.unassigned == []
