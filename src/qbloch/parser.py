"""
Plain-text circuit programs.

One instruction per line, ``#`` starts a comment:

  - single-qubit gates:  X 0 / H 1 / S⁻¹ 2 / Pₓ^1/2 0 ...
  - rotations:           RX <target> <theta>   (theta in radians, or pi/2, -3*pi/4 ...)
  - controlled-NOT:      CNOT <control> <target>

Each instruction is placed with CircuitModel.place, so steps are assigned
in program order. Symbols are not checked against the gate catalog here;
unknown gates are reported by the executor.
"""
from __future__ import annotations

import math
import re

from .circuit import CircuitModel
from .errors import InvalidQubitIndex, ProgramSyntaxError

_PI_RE = re.compile(r"^([+-]?\d*\.?\d*)\s*\*?\s*pi(?:\s*/\s*(\d*\.?\d+))?$", re.IGNORECASE)
_ROTATIONS = ("RX", "RY", "RZ")


def _strip_comment(line: str) -> str:
    return line.split("#", 1)[0].strip()


def parse_angle(text: str) -> float:
    t = text.strip()
    m = _PI_RE.match(t)
    if m:
        coeff, denom = m.group(1), m.group(2)
        if coeff in ("", "+"):
            c = 1.0
        elif coeff == "-":
            c = -1.0
        else:
            c = float(coeff)
        d = float(denom) if denom else 1.0
        if d == 0.0:
            raise ValueError(f"angle {text!r} divides by zero")
        return c * math.pi / d
    return float(t)


def _parse_qubit(text: str) -> int:
    return int(text)


def parse_program(program: str, num_qubits: int, circuit: CircuitModel | None = None) -> CircuitModel:
    c = circuit if circuit is not None else CircuitModel(num_qubits)

    if c.num_qubits != num_qubits:
        raise ValueError(f"Provided circuit has num_qubits={c.num_qubits}, but num_qubits={num_qubits} was requested")

    for line_no, raw in enumerate(program.splitlines(), start=1):
        line = _strip_comment(raw)
        if not line:
            continue

        parts = line.split()
        op = parts[0]
        args = parts[1:]

        try:
            if op.upper() in ("CNOT", "CX"):
                if len(args) != 2:
                    raise ProgramSyntaxError(line_no, raw, "CNOT expects 2 args: CNOT <control> <target>")
                c.place(_parse_qubit(args[1]), "CNOT", control=_parse_qubit(args[0]))
                continue

            if op.upper() in _ROTATIONS:
                # without an angle the gate is kept and reported as skipped by the executor
                if len(args) not in (1, 2):
                    raise ProgramSyntaxError(line_no, raw, f"{op} expects 1 or 2 args: {op} <target> [theta]")
                angle = parse_angle(args[1]) if len(args) == 2 else None
                c.place(_parse_qubit(args[0]), op.upper(), angle=angle)
                continue

            if len(args) != 1:
                raise ProgramSyntaxError(line_no, raw, f"{op} expects 1 arg: {op} <target>")
            c.place(_parse_qubit(args[0]), op)
        except (ValueError, InvalidQubitIndex) as e:
            if isinstance(e, ProgramSyntaxError):
                raise
            raise ProgramSyntaxError(line_no, raw, str(e)) from e

    return c


def program_from_circuit(c: CircuitModel) -> str:
    """
    Write a model back as program text, in step order.

    Re-parsing reproduces the steps of any model built with ``place``.
    Only rotations carry an angle; one stored on any other gate has no
    effect and is not written.
    """
    lines = [f"# qbloch program (num_qubits={c.num_qubits})"]

    for p in sorted(c.placements(), key=lambda p: p.step):
        if p.control is not None:
            lines.append(f"CNOT {p.control} {p.qubit}")
        elif p.angle is not None and p.symbol.upper() in _ROTATIONS:
            lines.append(f"{p.symbol} {p.qubit} {p.angle!r}")
        else:
            lines.append(f"{p.symbol} {p.qubit}")

    return "\n".join(lines) + "\n"

