import json
from datetime import datetime, timezone

import numpy as np
import pytest

from qbloch.circuit import CircuitModel
from qbloch.errors import SnapshotError
from qbloch.export import build_snapshot, circuit_from_snapshot, dumps_snapshot, loads_snapshot
from qbloch.simulator import run_circuit

STAMP = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def _circuit():
    c = CircuitModel(3)
    c.place(0, "H")
    c.place(1, "RY", 0.1234567890123)
    c.place(2, "CNOT", control=0)
    c.place(1, "T")
    return c


def test_snapshot_layout():
    c = _circuit()
    res = run_circuit(c, 3)
    doc = build_snapshot(c, res, step_mode=True, current_step=1, timestamp=STAMP)

    assert set(doc) == {"circuit", "blochVectors", "densityMatrices", "stepExecution", "timestamp"}
    assert doc["circuit"][0] == {"qubit": 0, "step": 0, "symbol": "H"}
    assert doc["circuit"][2] == {"qubit": 2, "step": 1, "symbol": "CNOT", "control": 0}
    assert doc["stepExecution"] == {"isStepMode": True, "currentStep": 1, "totalSteps": 2}
    assert doc["timestamp"] == "2026-01-02T03:04:05+00:00"
    assert len(doc["blochVectors"]) == 3
    assert set(doc["blochVectors"][0]) == {"x", "y", "z"}


def test_complex_entries_always_written_as_pairs():
    c = CircuitModel(1)
    res = run_circuit(c, 1)
    doc = build_snapshot(c, res, timestamp=STAMP)
    # |0><0| is purely real, but every entry is still a {real, imaginary} pair
    assert doc["densityMatrices"][0] == [
        [{"real": 1.0, "imaginary": 0.0}, {"real": 0.0, "imaginary": 0.0}],
        [{"real": 0.0, "imaginary": 0.0}, {"real": 0.0, "imaginary": 0.0}],
    ]


def test_empty_circuit_reports_one_step():
    c = CircuitModel(2)
    doc = build_snapshot(c, run_circuit(c, 2), timestamp=STAMP)
    assert doc["stepExecution"]["totalSteps"] == 1
    assert doc["circuit"] == []


def test_round_trip_is_bit_exact():
    c = _circuit()
    res = run_circuit(c, 3)
    snap = loads_snapshot(dumps_snapshot(c, res, timestamp=STAMP))

    assert snap.bloch_vectors == res.bloch_vectors
    assert snap.density_matrices == res.reduced_density_matrices
    assert snap.circuit == c.placements()
    assert snap.timestamp == STAMP
    assert snap.is_step_mode is False


def test_rebuilt_circuit_reproduces_state():
    c = _circuit()
    res = run_circuit(c, 3)
    snap = loads_snapshot(dumps_snapshot(c, res, timestamp=STAMP))
    again = run_circuit(circuit_from_snapshot(snap), 3)
    assert np.array_equal(again.state.vector(), res.state.vector())


def test_default_timestamp_is_iso8601():
    c = CircuitModel(1)
    doc = json.loads(dumps_snapshot(c, run_circuit(c, 1)))
    assert datetime.fromisoformat(doc["timestamp"]).tzinfo is not None


@pytest.mark.parametrize("text", ["not json", "[1, 2]", '{"circuit": []}'])
def test_malformed_snapshot(text):
    with pytest.raises(SnapshotError):
        loads_snapshot(text)
