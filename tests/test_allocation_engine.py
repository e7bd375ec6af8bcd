# tests/test_allocation_engine.py
"""Unit tests for entry, exit, promotion and billing."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import random
import pytest
from unittest.mock import MagicMock
from datetime import datetime, timedelta
from app.services.allocation_engine import (
    AllocationEngine, Parked, Queued, VisitRecord, billed_hours_for, compute_fee,
)
from app.services.exceptions import (
    AlreadyParked, AlreadyQueued, ClockError, InvalidVehicleId,
    PersistenceFailure, QueueFull, VehicleNotFound,
)
from app.services.lot import Lot
from app.services.wait_queue import WaitQueue

RATE = 20.0
T0 = datetime(2026, 3, 1, 9, 0, 0)


class FakeClock:
    def __init__(self, start=T0):
        self.now = start

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)

    def __call__(self):
        return self.now


def make_engine(rows=4, cols=5, queue_capacity=50):
    clock = FakeClock()
    sink = MagicMock()
    engine = AllocationEngine(Lot(rows, cols), WaitQueue(queue_capacity), sink,
                              rate_per_hour=RATE, clock=clock)
    return engine, sink, clock


def fill(engine, count, prefix="V"):
    for i in range(1, count + 1):
        engine.enter(f"{prefix}{i}")


def state_of(engine):
    return ([(r, c, s.occupied, s.vehicle_id, s.entry_time) for r, c, s in engine.lot.iter_slots()],
            engine.queue.peek_all())


class TestFees:
    @pytest.mark.parametrize("seconds,hours", [
        (0, 1), (1, 1), (3599, 1), (3600, 1), (3601, 2), (5400, 2), (7200, 2), (7201, 3),
    ])
    def test_billed_hours_round_up_with_minimum_one(self, seconds, hours):
        assert billed_hours_for(seconds) == hours

    def test_fee_is_monotonic_in_duration(self):
        fees = [compute_fee(s, RATE) for s in range(0, 5 * 3600, 97)]
        assert fees == sorted(fees)

    def test_minimum_fee_for_immediate_exit(self):
        engine, sink, clock = make_engine()
        engine.enter("KA01")
        result = engine.exit("KA01")
        assert result.visit.fee == RATE
        assert result.billed_hours == 1
        assert result.duration_seconds == 0

    @pytest.mark.parametrize("seconds,fee", [(3600, 20.0), (3601, 40.0)])
    def test_hour_boundary(self, seconds, fee):
        engine, sink, clock = make_engine()
        engine.enter("KA01")
        clock.advance(seconds)
        assert engine.exit("KA01").visit.fee == fee

    def test_clock_going_backwards_is_an_error(self):
        engine, sink, clock = make_engine()
        engine.enter("KA01")
        before = state_of(engine)
        with pytest.raises(ClockError):
            engine.exit("KA01", now=T0 - timedelta(seconds=10))
        assert state_of(engine) == before
        sink.record.assert_not_called()

    def test_timestamps_truncated_to_whole_seconds(self):
        engine, sink, clock = make_engine()
        result = engine.enter("KA01", now=T0.replace(microsecond=999999))
        assert result.entry_time == T0


class TestEnter:
    def test_first_vehicle_gets_first_slot(self):
        engine, sink, clock = make_engine()
        result = engine.enter("KA01")
        assert result == Parked("KA01", 0, 0, T0)
        assert engine.lot.slot(0, 0).vehicle_id == "KA01"

    def test_duplicate_entry_rejected_without_state_change(self):
        engine, sink, clock = make_engine()
        engine.enter("KA01")
        before = state_of(engine)
        with pytest.raises(AlreadyParked):
            engine.enter("KA01")
        assert state_of(engine) == before

    def test_duplicate_queued_vehicle_rejected(self):
        engine, sink, clock = make_engine(rows=1, cols=1)
        engine.enter("A")
        assert engine.enter("B") == Queued("B", 1)
        with pytest.raises(AlreadyQueued) as exc:
            engine.enter("B")
        assert exc.value.position == 1
        assert engine.queue.peek_all() == ["B"]

    def test_full_lot_queues_vehicle(self):
        engine, sink, clock = make_engine()
        fill(engine, 20)
        assert engine.enter("V21") == Queued("V21", 1)
        assert engine.enter("V22") == Queued("V22", 2)

    def test_full_queue_rejects_vehicle(self):
        engine, sink, clock = make_engine(rows=1, cols=1, queue_capacity=2)
        fill(engine, 3)
        before = state_of(engine)
        with pytest.raises(QueueFull):
            engine.enter("V4")
        assert state_of(engine) == before

    @pytest.mark.parametrize("vehicle_id", ["", "has space", "a,b", "X" * 32, None])
    def test_invalid_vehicle_ids(self, vehicle_id):
        engine, sink, clock = make_engine()
        with pytest.raises(InvalidVehicleId):
            engine.enter(vehicle_id)
        assert engine.lot.occupied_count == 0

    def test_31_char_id_accepted(self):
        engine, sink, clock = make_engine()
        assert isinstance(engine.enter("X" * 31), Parked)


class TestExit:
    def test_exit_unknown_vehicle(self):
        engine, sink, clock = make_engine()
        with pytest.raises(VehicleNotFound):
            engine.exit("NOPE")
        sink.record.assert_not_called()

    def test_queued_vehicle_cannot_exit(self):
        engine, sink, clock = make_engine(rows=1, cols=1)
        fill(engine, 2)
        with pytest.raises(VehicleNotFound):
            engine.exit("V2")
        assert engine.queue.peek_all() == ["V2"]

    def test_exit_records_visit_and_frees_slot(self):
        engine, sink, clock = make_engine()
        engine.enter("KA01")
        clock.advance(1800)
        result = engine.exit("KA01")
        sink.record.assert_called_once_with(
            VisitRecord("KA01", T0, T0 + timedelta(seconds=1800), 20.0)
        )
        assert (result.row, result.col) == (0, 0)
        assert result.promoted is None
        assert engine.lot.occupied_count == 0

    def test_sink_failure_leaves_vehicle_parked(self):
        engine, sink, clock = make_engine(rows=1, cols=1)
        fill(engine, 2)
        sink.record.side_effect = PersistenceFailure("disk full")
        before = state_of(engine)
        with pytest.raises(PersistenceFailure):
            engine.exit("V1")
        assert state_of(engine) == before

    def test_promotion_on_full_lot(self):
        engine, sink, clock = make_engine()
        fill(engine, 20)
        engine.enter("V21")
        clock.advance(600)
        result = engine.exit("V7")
        assert result.promoted == Parked("V21", result.row, result.col, clock.now)
        assert engine.lot.slot(result.row, result.col).entry_time == clock.now
        assert engine.lot.occupied_count == 20
        assert len(engine.queue) == 0

    def test_only_one_vehicle_promoted_per_exit(self):
        engine, sink, clock = make_engine(rows=1, cols=2)
        fill(engine, 4)
        engine.exit("V1")
        assert engine.queue.peek_all() == ["V4"]
        assert engine.lot.find_vehicle("V3") == (0, 0)

    def test_concrete_scenario(self):
        engine, sink, clock = make_engine()
        fill(engine, 20)
        assert engine.enter("V21") == Queued("V21", 1)
        clock.advance(5400)
        result = engine.exit("V1")
        assert result.billed_hours == 2
        assert result.visit.fee == 40.00
        assert result.promoted.vehicle_id == "V21"
        assert engine.lot.find_vehicle("V21") == (0, 0)
        assert engine.queue.is_empty


class TestSearch:
    def test_search_parked_queued_and_missing(self):
        engine, sink, clock = make_engine(rows=1, cols=1)
        fill(engine, 3)
        assert engine.search("V1") == Parked("V1", 0, 0, T0)
        assert engine.search("V3") == Queued("V3", 2)
        with pytest.raises(VehicleNotFound):
            engine.search("V9")


class TestInvariants:
    def test_random_traffic_keeps_lot_and_queue_consistent(self):
        engine, sink, clock = make_engine(rows=2, cols=2, queue_capacity=3)
        rng = random.Random(1234)
        ids = [f"C{i}" for i in range(10)]
        for _ in range(500):
            vid = rng.choice(ids)
            clock.advance(rng.randint(0, 4000))
            try:
                if rng.random() < 0.6:
                    engine.enter(vid)
                else:
                    engine.exit(vid)
            except (AlreadyParked, AlreadyQueued, QueueFull, VehicleNotFound):
                pass
            parked = [s.vehicle_id for _, _, s in engine.lot.iter_slots() if s.occupied]
            queued = engine.queue.peek_all()
            assert len(parked) + len(queued) <= engine.lot.capacity + engine.queue.capacity
            assert len(set(parked)) == len(parked)
            assert len(set(queued)) == len(queued)
            assert not set(parked) & set(queued)
            if queued:
                assert engine.lot.is_full
