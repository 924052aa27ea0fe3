"""Engine tolerances and the limits enforced at the application boundary.

Defaults can be overridden through ``QBLOCH_*`` environment variables, read
by ``load_config()``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

MAX_QUBITS = 5
MAX_GATES = 20
DEPTH_WARNING = 10
HILBERT_WARNING = 32
NORM_TOLERANCE = 1e-9
PURITY_THRESHOLD = 0.95


@dataclass(frozen=True)
class EngineConfig:
    max_qubits: int = MAX_QUBITS
    max_gates: int = MAX_GATES
    depth_warning: int = DEPTH_WARNING
    hilbert_warning: int = HILBERT_WARNING
    norm_tolerance: float = NORM_TOLERANCE
    purity_threshold: float = PURITY_THRESHOLD

    def __post_init__(self):
        if self.max_qubits <= 0:
            raise ValueError("max_qubits must be positive")
        if self.max_gates <= 0:
            raise ValueError("max_gates must be positive")
        if self.norm_tolerance < 0:
            raise ValueError("norm_tolerance must be non-negative")
        if not (0.0 <= self.purity_threshold <= 1.0):
            raise ValueError(f"purity_threshold must be in [0,1], got {self.purity_threshold}")


def load_config(environ=None) -> EngineConfig:
    env = os.environ if environ is None else environ
    return EngineConfig(
        max_qubits=int(env.get("QBLOCH_MAX_QUBITS", MAX_QUBITS)),
        max_gates=int(env.get("QBLOCH_MAX_GATES", MAX_GATES)),
        depth_warning=int(env.get("QBLOCH_DEPTH_WARNING", DEPTH_WARNING)),
        hilbert_warning=int(env.get("QBLOCH_HILBERT_WARNING", HILBERT_WARNING)),
        norm_tolerance=float(env.get("QBLOCH_NORM_TOLERANCE", NORM_TOLERANCE)),
        purity_threshold=float(env.get("QBLOCH_PURITY_THRESHOLD", PURITY_THRESHOLD)),
    )
