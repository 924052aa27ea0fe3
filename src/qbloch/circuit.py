from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from .apply import check_qubit


@dataclass(frozen=True)
class CircuitGate:
    """
    One gate placed at (qubit, step).

    For a CNOT ``qubit`` is the target and ``control`` the control qubit;
    the placement then occupies the same step on both.
    """
    qubit: int
    step: int
    symbol: str
    angle: Optional[float] = None
    control: Optional[int] = None

    @property
    def qubits(self) -> tuple[int, ...]:
        if self.control is None:
            return (self.qubit,)
        return (self.control, self.qubit)

    def occupies(self, qubit: int) -> bool:
        return qubit == self.qubit or qubit == self.control

    def to_dict(self) -> dict:
        d = {"qubit": self.qubit, "step": self.step, "symbol": self.symbol}
        if self.angle is not None:
            d["angle"] = self.angle
        if self.control is not None:
            d["control"] = self.control
        return d

    @classmethod
    def from_dict(cls, data: dict) -> "CircuitGate":
        angle = data.get("angle")
        control = data.get("control")
        return cls(
            qubit=int(data["qubit"]),
            step=int(data["step"]),
            symbol=str(data["symbol"]),
            angle=None if angle is None else float(angle),
            control=None if control is None else int(control),
        )


class CircuitModel:
    """
    Gates laid out on a (qubit, step) grid, in insertion order.

    A model is tied to its qubit count; changing the count means building a
    new model (``resized``), since every placement refers to the old width.
    """

    def __init__(self, num_qubits: int):
        if num_qubits <= 0:
            raise ValueError("num_qubits must be positive")
        self.num_qubits = int(num_qubits)
        self._gates: list[CircuitGate] = []

    @classmethod
    def from_placements(cls, num_qubits: int, placements: Iterable[CircuitGate]) -> "CircuitModel":
        """Rebuild a model keeping the given steps (e.g. from an export)."""
        model = cls(num_qubits)
        for g in placements:
            if g.step < 0:
                raise ValueError(f"step must be non-negative, got {g.step}")
            if g.control is not None and g.control == g.qubit:
                raise ValueError("control and target must be different")
            for q in g.qubits:
                check_qubit(q, model.num_qubits)
                if model.at(q, g.step) is not None:
                    raise ValueError(f"two placements share qubit {q} at step {g.step}")
            model._gates.append(g)
        return model

    def resized(self, num_qubits: int) -> "CircuitModel":
        return CircuitModel(num_qubits)

    def _last_step(self, qubit: int) -> int:
        steps = [g.step for g in self._gates if g.occupies(qubit)]
        return max(steps, default=-1)

    def place(self, qubit: int, symbol: str, angle: Optional[float] = None, *, control: Optional[int] = None) -> int:
        check_qubit(qubit, self.num_qubits)
        if control is not None:
            check_qubit(control, self.num_qubits)
            if control == qubit:
                raise ValueError("control and target must be different")

        step = self._last_step(qubit) + 1
        if control is not None:
            step = max(step, self._last_step(control) + 1)

        self._gates.append(CircuitGate(
            qubit=int(qubit),
            step=step,
            symbol=symbol,
            angle=None if angle is None else float(angle),
            control=None if control is None else int(control),
        ))
        return step

    def at(self, qubit: int, step: int) -> Optional[CircuitGate]:
        for g in self._gates:
            if g.step == step and g.occupies(qubit):
                return g
        return None

    def remove(self, qubit: int, step: int) -> Optional[CircuitGate]:
        g = self.at(qubit, step)
        if g is not None:
            self._gates.remove(g)
        return g

    def clear(self) -> None:
        self._gates.clear()

    def depth(self) -> int:
        return max((g.step for g in self._gates), default=-1) + 1

    @property
    def total_steps(self) -> int:
        # an empty circuit still shows one (empty) step
        return max(self.depth(), 1)

    def placements(self) -> tuple[CircuitGate, ...]:
        return tuple(self._gates)

    def symbols(self) -> list[str]:
        return [g.symbol for g in self._gates]

    def used_qubits(self) -> set[int]:
        used: set[int] = set()
        for g in self._gates:
            used.update(g.qubits)
        return used

    def __len__(self) -> int:
        return len(self._gates)

    def __iter__(self) -> Iterator[CircuitGate]:
        return iter(tuple(self._gates))

    def __repr__(self):
        return f"CircuitModel(num_qubits={self.num_qubits}, gates={len(self._gates)}, depth={self.depth()})"
