import numpy as np
import pytest

from qbloch import gates as g
from qbloch.circuit import CircuitModel
from qbloch.config import EngineConfig
from qbloch.errors import CircuitSizeMismatch
from qbloch.simulator import CircuitExecutor, bloch_array, run_circuit, state_at_step
from qbloch.state import QuantumState


def _bell_circuit():
    c = CircuitModel(2)
    c.place(0, "H")
    c.place(1, "CNOT", control=0)
    return c


def test_empty_circuit_is_zero_state():
    res = run_circuit(CircuitModel(3), 3)
    assert np.allclose(res.state.vector(), [1, 0, 0, 0, 0, 0, 0, 0])
    assert len(res.bloch_vectors) == 3
    assert np.allclose(bloch_array(res), [[0, 0, 1]] * 3)
    assert res.total_steps == 0
    assert res.outcomes == ()


def test_full_run_bell_state():
    res = run_circuit(_bell_circuit(), 2)
    probs = res.state.probabilities()
    assert np.allclose(probs, [0.5, 0, 0, 0.5], atol=1e-12)
    for q in range(2):
        assert res.bloch_vectors[q].magnitude() < 1e-9
        rho = np.array([[complex(c) for c in row] for row in res.reduced_density_matrices[q]])
        assert np.allclose(rho, np.eye(2) / 2, atol=1e-12)
    assert len(res.applied) == 2
    assert res.is_complete


def test_step_cutoff_is_exclusive():
    c = _bell_circuit()
    ex = CircuitExecutor()

    r0 = ex.run(c, 2, up_to_step=0)
    assert r0.state.is_close(QuantumState(2))
    assert r0.outcomes == ()

    r1 = ex.run(c, 2, up_to_step=1)
    assert r1.state.is_close(QuantumState(2).apply_gate(g.H, 0))
    assert np.allclose(r1.bloch_vectors[0].as_array(), [1, 0, 0], atol=1e-12)
    assert not r1.is_complete

    r2 = ex.run(c, 2, up_to_step=2)
    assert r2.state.is_close(ex.run(c, 2).state)


def test_state_at_step_is_idempotent():
    c = _bell_circuit()
    a = state_at_step(c, 2, 1)
    b = state_at_step(c, 2, 1)
    assert a.state.is_close(b.state, atol=0.0)
    with pytest.raises(ValueError):
        state_at_step(c, 2, -1)


def test_negative_cutoff_rejected_by_run():
    c = _bell_circuit()
    with pytest.raises(ValueError):
        CircuitExecutor().run(c, 2, up_to_step=-1)
    with pytest.raises(ValueError):
        run_circuit(c, 2, -3)


def test_iter_steps_covers_every_cutoff():
    c = _bell_circuit()
    results = list(CircuitExecutor().iter_steps(c, 2))
    assert [r.up_to_step for r in results] == [0, 1, 2]
    assert results[-1].is_complete


def test_gates_sorted_by_step_not_insertion():
    c = CircuitModel(2)
    c.place(1, "X")      # q1 step 0
    c.place(1, "H")      # q1 step 1
    c.place(0, "X")      # q0 step 0, inserted last
    res = run_circuit(c, 2)
    steps = [o.placement.step for o in res.outcomes]
    assert steps == sorted(steps)
    assert [o.placement.symbol for o in res.outcomes] == ["X", "X", "H"]


def test_same_step_gates_each_applied_once():
    c = CircuitModel(3)
    for q in range(3):
        c.place(q, "X")
    res = run_circuit(c, 3)
    assert np.isclose(res.state.probabilities()[0b111], 1.0)
    assert len(res.applied) == 3


def test_rotation_angles_are_used():
    c = CircuitModel(1)
    c.place(0, "RX", np.pi)
    res = run_circuit(c, 1)
    assert np.allclose(res.bloch_vectors[0].as_array(), [0, 0, -1], atol=1e-12)


def test_editor_symbols_are_understood():
    c = CircuitModel(1)
    c.place(0, "Pₓ")
    c.place(0, "Pᵨ^1/2")
    res = run_circuit(c, 1)
    assert res.skipped == ()
    assert res.state.is_close(QuantumState(1).apply_gate(g.X, 0).apply_gate(g.S, 0))


def test_unsupported_gate_is_skipped_and_reported():
    c = CircuitModel(2)
    c.place(0, "FOO")
    c.place(0, "X")
    c.place(1, "RY")  # rotation without angle
    res = run_circuit(c, 2)

    assert [o.placement.symbol for o in res.skipped] == ["FOO", "RY"]
    assert all(o.reason for o in res.skipped)
    assert [p.symbol for p in res.applied] == ["X"]
    assert np.allclose(res.bloch_vectors[0].as_array(), [0, 0, -1])


def test_qubit_count_mismatch_fails_fast():
    c = _bell_circuit()
    with pytest.raises(CircuitSizeMismatch):
        run_circuit(c, 3)
    with pytest.raises(ValueError):
        CircuitExecutor().run(c, 1, up_to_step=1)
    with pytest.raises(CircuitSizeMismatch):
        next(CircuitExecutor().iter_steps(c, 3))


def test_executor_takes_config():
    ex = CircuitExecutor(EngineConfig(norm_tolerance=0.5))
    assert ex.config.norm_tolerance == 0.5
    res = ex.run(_bell_circuit(), 2)
    assert res.num_qubits == 2
