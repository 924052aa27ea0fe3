from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional

import numpy as np

from . import gates as g
from .circuit import CircuitGate, CircuitModel
from .complex import ComplexNumber
from .config import EngineConfig
from .errors import CircuitSizeMismatch, UnsupportedGate
from .logging import get_logger
from .state import BlochVector, QuantumState

log = get_logger(__name__)


@dataclass(frozen=True)
class GateOutcome:
    """Applied, or skipped with the reason it could not run."""
    placement: CircuitGate
    applied: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class ExecutionResult:
    state: QuantumState
    bloch_vectors: tuple[BlochVector, ...]
    reduced_density_matrices: tuple[tuple[tuple[ComplexNumber, ...], ...], ...]
    outcomes: tuple[GateOutcome, ...] = field(default_factory=tuple)
    up_to_step: Optional[int] = None
    total_steps: int = 0

    @property
    def num_qubits(self) -> int:
        return self.state.num_qubits

    @property
    def applied(self) -> tuple[CircuitGate, ...]:
        return tuple(o.placement for o in self.outcomes if o.applied)

    @property
    def skipped(self) -> tuple[GateOutcome, ...]:
        return tuple(o for o in self.outcomes if not o.applied)

    @property
    def is_complete(self) -> bool:
        return self.up_to_step is None or self.up_to_step >= self.total_steps


def _validate_model(model: CircuitModel, num_qubits: int) -> None:
    if model.num_qubits != num_qubits:
        raise CircuitSizeMismatch(model.num_qubits, num_qubits)


def _apply_placement(state: QuantumState, p: CircuitGate) -> QuantumState:
    spec = g.resolve(p.symbol, p.angle)

    if spec.kind is g.GateKind.CNOT:
        if p.control is None:
            raise UnsupportedGate(p.symbol, "CNOT placement has no control qubit")
        return state.apply_cnot(p.control, p.qubit)

    if p.control is not None:
        raise UnsupportedGate(p.symbol, f"{p.symbol} cannot take a control qubit")

    return state.apply_gate(spec.matrix(), p.qubit)


def _views(state: QuantumState):
    blochs = tuple(state.bloch_vector(q) for q in range(state.num_qubits))
    rhos = tuple(
        tuple(tuple(row) for row in state.reduced_density_matrix(q))
        for q in range(state.num_qubits)
    )
    return blochs, rhos


class CircuitExecutor:
    """
    Replays a CircuitModel on a fresh |0...0> state.

    Every call starts from scratch and takes all of its input explicitly, so
    stepping backwards is just another run with a smaller cutoff.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def run(
        self,
        model: CircuitModel,
        num_qubits: int,
        up_to_step: Optional[int] = None,
    ) -> ExecutionResult:
        _validate_model(model, num_qubits)
        if up_to_step is not None and up_to_step < 0:
            raise ValueError(f"step must be non-negative, got {up_to_step}")

        state = QuantumState(num_qubits)

        # sorted() is stable: gates sharing a step keep insertion order
        ordered = sorted(model.placements(), key=lambda p: p.step)

        outcomes: list[GateOutcome] = []
        for p in ordered:
            if up_to_step is not None and p.step >= up_to_step:
                break
            try:
                state = _apply_placement(state, p)
            except UnsupportedGate as e:
                log.warning("skipping %s on qubit %d at step %d: %s", p.symbol, p.qubit, p.step, e)
                outcomes.append(GateOutcome(p, applied=False, reason=str(e)))
                continue
            outcomes.append(GateOutcome(p, applied=True))

        drift = state.norm_drift()
        if drift > self.config.norm_tolerance:
            log.warning("state norm drifted by %.3e after %d gate(s); not renormalizing", drift, len(outcomes))

        blochs, rhos = _views(state)
        log.debug(
            "ran %d/%d placement(s) on %d qubit(s), cutoff=%s",
            len(outcomes), len(model), num_qubits, up_to_step,
        )

        return ExecutionResult(
            state=state,
            bloch_vectors=blochs,
            reduced_density_matrices=rhos,
            outcomes=tuple(outcomes),
            up_to_step=up_to_step,
            total_steps=model.depth(),
        )

    def state_at_step(self, model: CircuitModel, num_qubits: int, step: int) -> ExecutionResult:
        return self.run(model, num_qubits, up_to_step=step)

    def iter_steps(self, model: CircuitModel, num_qubits: int) -> Iterator[ExecutionResult]:
        """Results for every cutoff 0..depth, i.e. before the first step up to the full run."""
        _validate_model(model, num_qubits)
        for k in range(model.depth() + 1):
            yield self.run(model, num_qubits, up_to_step=k)


def run_circuit(model: CircuitModel, num_qubits: int, up_to_step: Optional[int] = None) -> ExecutionResult:
    return CircuitExecutor().run(model, num_qubits, up_to_step)


def state_at_step(model: CircuitModel, num_qubits: int, step: int) -> ExecutionResult:
    return CircuitExecutor().state_at_step(model, num_qubits, step)


def bloch_array(result: ExecutionResult) -> np.ndarray:
    """Bloch vectors of a result as an (n, 3) array."""
    return np.array([b.as_array() for b in result.bloch_vectors], dtype=float).reshape(-1, 3)
