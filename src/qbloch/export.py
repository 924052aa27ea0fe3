"""
One-shot JSON snapshot of a circuit and its derived per-qubit views.

Document layout::

    {
      "circuit": [{"qubit", "step", "symbol", ["angle"], ["control"]}, ...],
      "blochVectors": [{"x", "y", "z"}, ...],
      "densityMatrices": [[[{"real", "imaginary"}, ...], ...], ...],
      "stepExecution": {"isStepMode", "currentStep", "totalSteps"},
      "timestamp": "<ISO-8601>"
    }

Complex entries are always written as a {real, imaginary} pair. Python's json
writes floats with repr(), so values read back are bit-for-bit identical.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from .circuit import CircuitGate, CircuitModel
from .complex import ComplexNumber
from .errors import SnapshotError
from .logging import get_logger
from .simulator import ExecutionResult
from .state import BlochVector

log = get_logger(__name__)


@dataclass(frozen=True)
class Snapshot:
    circuit: tuple[CircuitGate, ...]
    bloch_vectors: tuple[BlochVector, ...]
    density_matrices: tuple[tuple[tuple[ComplexNumber, ...], ...], ...]
    is_step_mode: bool
    current_step: int
    total_steps: int
    timestamp: datetime


def build_snapshot(
    model: CircuitModel,
    result: ExecutionResult,
    *,
    step_mode: bool = False,
    current_step: int = 0,
    timestamp: Optional[datetime] = None,
) -> dict:
    if timestamp is None:
        timestamp = datetime.now(timezone.utc)

    return {
        "circuit": [p.to_dict() for p in model.placements()],
        "blochVectors": [b.to_dict() for b in result.bloch_vectors],
        "densityMatrices": [
            [[c.to_dict() for c in row] for row in matrix]
            for matrix in result.reduced_density_matrices
        ],
        "stepExecution": {
            "isStepMode": bool(step_mode),
            "currentStep": int(current_step),
            "totalSteps": model.total_steps,
        },
        "timestamp": timestamp.isoformat(),
    }


def dumps_snapshot(model: CircuitModel, result: ExecutionResult, **kwargs) -> str:
    doc = build_snapshot(model, result, **kwargs)
    log.info("exporting snapshot: %d gate(s), %d qubit(s)", len(doc["circuit"]), len(doc["blochVectors"]))
    return json.dumps(doc, indent=2, ensure_ascii=False)


def parse_snapshot(doc: dict) -> Snapshot:
    try:
        steps = doc["stepExecution"]
        return Snapshot(
            circuit=tuple(CircuitGate.from_dict(p) for p in doc["circuit"]),
            bloch_vectors=tuple(BlochVector.from_dict(b) for b in doc["blochVectors"]),
            density_matrices=tuple(
                tuple(tuple(ComplexNumber.from_dict(c) for c in row) for row in matrix)
                for matrix in doc["densityMatrices"]
            ),
            is_step_mode=bool(steps["isStepMode"]),
            current_step=int(steps["currentStep"]),
            total_steps=int(steps["totalSteps"]),
            timestamp=datetime.fromisoformat(doc["timestamp"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise SnapshotError(f"malformed snapshot: {e}") from e


def loads_snapshot(text: str) -> Snapshot:
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as e:
        raise SnapshotError(f"snapshot is not valid JSON: {e}") from e
    if not isinstance(doc, dict):
        raise SnapshotError("snapshot must be a JSON object")
    return parse_snapshot(doc)


def circuit_from_snapshot(snapshot: Snapshot, num_qubits: Optional[int] = None) -> CircuitModel:
    """
    Rebuild the circuit of a snapshot. Without ``num_qubits`` the width is
    taken from the number of exported Bloch vectors.
    """
    n = num_qubits if num_qubits is not None else len(snapshot.bloch_vectors)
    if n <= 0:
        raise SnapshotError("cannot infer num_qubits from an empty snapshot")
    return CircuitModel.from_placements(n, snapshot.circuit)
