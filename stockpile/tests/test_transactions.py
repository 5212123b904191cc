# tests/test_transactions.py
import threading
import pytest

from stockpile.auth.permissions import Actor, QUANTITY_EDIT
from stockpile.errors import InvalidUpdateRequest, NotFound, PersistenceError
from stockpile.schemas import ResourceUpdate
from stockpile.services import transactions
from stockpile.services.scoring import ScoringEngine
from stockpile.services.transactions import update_resource, delete_resource


def test_absolute_update_on_critical_resource(make_resource, db, load, member, sink):
    rid = make_resource(quantity=40, target_quantity=100)
    result = update_resource(db, rid, ResourceUpdate(quantity=120), member, sink=sink)

    assert result.resource.quantity == 120
    assert result.resource.last_updated_by == "alice"
    h = result.history
    assert (h.previous_quantity, h.new_quantity, h.change_amount, h.change_type) == (40, 120, 80, "absolute")
    calc = result.points_calculation
    assert calc.action_type == "SET"
    assert calc.magnitude == 80
    assert calc.status == "critical"
    assert sink.published == [calc]

    resource, history = load(rid)
    assert resource.quantity == 120
    assert len(history) == 1

def test_relative_removal(make_resource, db, member):
    rid = make_resource(quantity=100, target_quantity=100)
    result = update_resource(db, rid, ResourceUpdate(update_type="relative", value=-30), member)

    assert result.resource.quantity == 70
    assert result.history.change_amount == -30
    assert result.points_calculation.action_type == "REMOVE"
    assert result.points_calculation.magnitude == 30
    assert result.points_calculation.status == "at_target"

def test_status_is_taken_before_the_update(make_resource, db, member):
    rid = make_resource(quantity=10, target_quantity=100)
    result = update_resource(db, rid, ResourceUpdate(update_type="relative", value=500), member)
    assert result.points_calculation.status == "critical"

def test_same_quantity_records_history_without_points(make_resource, db, load, member, sink):
    rid = make_resource(quantity=25)
    result = update_resource(db, rid, ResourceUpdate(quantity=25, reason="recount"), member, sink=sink)

    assert result.history.change_amount == 0
    assert result.points_calculation is None
    assert result.points_earned == 0
    assert sink.published == []
    _, history = load(rid)
    assert [h.reason for h in history] == ["recount"]

def test_zero_change_does_not_call_scoring(make_resource, db, member, monkeypatch):
    rid = make_resource(quantity=5)
    engine = ScoringEngine()
    def boom(*a, **kw):
        raise AssertionError("scoring called for a no-op")
    monkeypatch.setattr(engine, "award_points", boom)
    update_resource(db, rid, ResourceUpdate(update_type="relative", value=0), member, engine=engine)

def test_every_quantity_update_appends_one_record(make_resource, db, load, member):
    rid = make_resource(quantity=0)
    for v in (3, -1, 4):
        update_resource(db, rid, ResourceUpdate(update_type="relative", value=v), member)
    resource, history = load(rid)
    assert resource.quantity == 6
    assert sorted(h.change_amount for h in history) == [-1, 3, 4]

def test_metadata_merge_applies_falsy_values(make_resource, db, load, admin):
    rid = make_resource(quantity=7, description="old", target_quantity=100, category="Raw Resources")
    req = ResourceUpdate.model_validate({"description": "", "targetQuantity": 0})
    result = update_resource(db, rid, req, admin)

    assert result.history is None
    assert result.points_calculation is None
    resource, history = load(rid)
    assert resource.description == ""
    assert resource.target_quantity == 0
    assert resource.category == "Raw Resources"
    assert resource.quantity == 7
    assert resource.last_updated_by == "root"
    assert history == []

def test_metadata_can_clear_target(make_resource, db, load, admin):
    rid = make_resource(target_quantity=100)
    update_resource(db, rid, ResourceUpdate.model_validate({"targetQuantity": None}), admin)
    resource, _ = load(rid)
    assert resource.target_quantity is None

@pytest.mark.parametrize("body", [
    {},
    {"name": None},
    {"multiplier": 0},
    {"quantity": 5, "name": "Renamed"},
    {"updateType": "relative"},
    {"quantity": -3},
    {"updateType": "relative", "value": -1},
    {"targetQuantity": 2**31},
    {"quantity": 10**20},
])
def test_invalid_requests_write_nothing(make_resource, db, load, admin, body):
    rid = make_resource(quantity=0, name="Iron Ore")
    with pytest.raises(InvalidUpdateRequest):
        update_resource(db, rid, ResourceUpdate.model_validate(body), admin)
    resource, history = load(rid)
    assert resource.quantity == 0
    assert resource.name == "Iron Ore"
    assert history == []

@pytest.mark.parametrize("multiplier", [float("inf"), float("-inf"), float("nan")])
def test_non_finite_multiplier_is_rejected(make_resource, db, load, admin, multiplier):
    rid = make_resource(multiplier=1.5)
    req = ResourceUpdate.model_construct(_fields_set={"multiplier"}, multiplier=multiplier)
    with pytest.raises(InvalidUpdateRequest):
        update_resource(db, rid, req, admin)
    resource, _ = load(rid)
    assert resource.multiplier == 1.5

def test_unknown_resource(db, member):
    with pytest.raises(NotFound):
        update_resource(db, "missing", ResourceUpdate(quantity=1), member)

def test_history_failure_rolls_back_quantity(make_resource, db, load, member, monkeypatch):
    rid = make_resource(quantity=10)
    def fail(self, record):
        raise PersistenceError("disk full")
    monkeypatch.setattr(transactions.HistoryLedger, "append", fail)

    with pytest.raises(PersistenceError):
        update_resource(db, rid, ResourceUpdate(quantity=50), member)
    resource, history = load(rid)
    assert resource.quantity == 10
    assert history == []

def test_sink_failure_keeps_committed_update(make_resource, db, load, member):
    class BrokenSink:
        def publish(self, calc):
            raise RuntimeError("broker down")
    rid = make_resource(quantity=0)
    result = update_resource(db, rid, ResourceUpdate(quantity=9), member, sink=BrokenSink())
    assert result.points_earned > 0
    resource, history = load(rid)
    assert resource.quantity == 9
    assert len(history) == 1

def test_concurrent_relative_updates_are_not_lost(make_resource, SessionLocal, load):
    rid = make_resource(quantity=0)
    barrier = threading.Barrier(2)
    errors = []

    def worker(actor_id, delta):
        actor = Actor(actor_id, frozenset({QUANTITY_EDIT}))
        with SessionLocal() as session:
            barrier.wait()
            try:
                update_resource(session, rid, ResourceUpdate(update_type="relative", value=delta), actor)
            except Exception as e:  # collected for the assertion below
                errors.append(e)

    threads = [threading.Thread(target=worker, args=("a", 10)),
               threading.Thread(target=worker, args=("b", 5))]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    assert errors == []
    resource, history = load(rid)
    assert resource.quantity == 15
    assert len(history) == 2
    assert sorted(h.new_quantity for h in history) in ([5, 15], [10, 15])

def test_delete_cascades_history(make_resource, db, load, member, admin):
    rid = make_resource(quantity=0)
    for v in (1, 2, 3):
        update_resource(db, rid, ResourceUpdate(update_type="relative", value=v), member)

    assert delete_resource(db, rid, admin) == 3
    resource, history = load(rid)
    assert resource is None
    assert history == []

def test_delete_unknown_resource(db, admin):
    with pytest.raises(NotFound):
        delete_resource(db, "missing", admin)
