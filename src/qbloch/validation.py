"""Advisory checks of a circuit against the application's size limits."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from . import gates as g
from .circuit import CircuitModel
from .config import EngineConfig


@dataclass(frozen=True)
class Advisory:
    level: str  # "error" | "warning" | "info"
    message: str
    details: str = ""


def check_limits(model: CircuitModel, config: Optional[EngineConfig] = None) -> list[Advisory]:
    """
    Compare ``model`` with the configured limits.

    Only the gate count is a hard limit ("error"); depth, Hilbert-space size
    and unsupported symbols are warnings. The executor runs regardless.
    """
    cfg = config or EngineConfig()
    out: list[Advisory] = []

    if len(model) == 0:
        out.append(Advisory("info", "Empty circuit"))

    if len(model) > cfg.max_gates:
        out.append(Advisory(
            "error",
            "Circuit too complex",
            f"{len(model)} gates placed, maximum is {cfg.max_gates}",
        ))

    depth = model.depth()
    if depth > cfg.depth_warning:
        out.append(Advisory("warning", "Deep circuit", f"Circuit depth is {depth}"))

    dim = 2 ** model.num_qubits
    if dim > cfg.hilbert_warning:
        out.append(Advisory("warning", "Large Hilbert space", f"dimension {dim} exceeds {cfg.hilbert_warning}"))

    if model.num_qubits > cfg.max_qubits:
        out.append(Advisory("warning", "Too many qubits", f"{model.num_qubits} > {cfg.max_qubits}"))

    unsupported = [p.symbol for p in model if not g.is_supported(p.symbol, p.angle)]
    if unsupported:
        out.append(Advisory(
            "warning",
            "Unsupported gates detected",
            f"{len(unsupported)} gate(s) will be skipped: {', '.join(unsupported)}",
        ))

    return out


def has_errors(advisories: list[Advisory]) -> bool:
    return any(a.level == "error" for a in advisories)
