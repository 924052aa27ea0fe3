from __future__ import annotations

import enum
from dataclasses import dataclass
from fractions import Fraction
from typing import Optional

import numpy as np

from .errors import UnsupportedGate


## 1 qubit gates

I = np.array([
    [1, 0],
    [0, 1],
], dtype=complex)

X = np.array([
    [0, 1],
    [1, 0],
], dtype=complex)

Y = np.array([
    [0, -1j],
    [1j, 0],
], dtype=complex)

Z = np.array([
    [1, 0],
    [0, -1],
], dtype=complex)

H = (1 / np.sqrt(2)) * np.array([
    [1, 1],
    [1, -1],
], dtype=complex)

S = np.array([
    [1, 0],
    [0, 1j],
], dtype=complex)

SDG = np.array([
    [1, 0],
    [0, -1j],
], dtype=complex)

T = np.array([
    [1, 0],
    [0, np.exp(1j * np.pi / 4)],
], dtype=complex)

TDG = np.array([
    [1, 0],
    [0, np.exp(-1j * np.pi / 4)],
], dtype=complex)

for _m in (I, X, Y, Z, H, S, SDG, T, TDG):
    _m.flags.writeable = False


def RZ(theta: float) -> np.ndarray:
    """
    RZ(theta) = exp(-i theta Z/2) =
    [[e^{-iθ/2}, 0],
     [0, e^{+iθ/2}]]
    """
    t = float(theta) / 2.0
    return np.array([
        [np.exp(-1j * t), 0.0],
        [0.0, np.exp(1j * t)],
    ], dtype=complex)


def RY(theta: float) -> np.ndarray:
    """
    RY(theta) = exp(-i theta Y/2) =
    [[cos(θ/2), -sin(θ/2)],
     [sin(θ/2),  cos(θ/2)]]
    """
    t = float(theta) / 2.0
    c = np.cos(t)
    s = np.sin(t)
    return np.array([
        [c, -s],
        [s,  c],
    ], dtype=complex)


def RX(theta: float) -> np.ndarray:
    """
    RX(theta) = exp(-i theta X/2) =
    [[cos(θ/2), -i sin(θ/2)],
     [-i sin(θ/2), cos(θ/2)]]
    """
    t = float(theta) / 2.0
    c = np.cos(t)
    s = np.sin(t)
    return np.array([
        [c, -1j * s],
        [-1j * s, c],
    ], dtype=complex)


_ROTATIONS = {"X": RX, "Y": RY, "Z": RZ}


def pauli_power(axis: str, exponent) -> np.ndarray:
    """
    P^t = exp(i pi t/2) R_P(pi t), so t=1 gives the Pauli itself,
    t=1/2 a quarter turn (Z^1/2 == S) and t=1/4 an eighth turn (Z^1/4 == T).
    """
    axis = axis.upper()
    if axis not in _ROTATIONS:
        raise ValueError("axis must be one of: 'X', 'Y', 'Z'")
    t = float(exponent)
    return np.exp(1j * np.pi * t / 2.0) * _ROTATIONS[axis](np.pi * t)


## 2 qubit gates (only used as a dense reference for the CNOT kernel)

CNOT = np.array([
    [1,0,0,0],
    [0,1,0,0],
    [0,0,0,1],
    [0,0,1,0],
], dtype=complex)
CNOT.flags.writeable = False


class GateKind(enum.Enum):
    I = "I"
    X = "X"
    Y = "Y"
    Z = "Z"
    H = "H"
    S = "S"
    SDG = "SDG"
    T = "T"
    TDG = "TDG"
    RX = "RX"
    RY = "RY"
    RZ = "RZ"
    POW = "POW"
    CNOT = "CNOT"

    @property
    def is_rotation(self) -> bool:
        return self in (GateKind.RX, GateKind.RY, GateKind.RZ)

    @property
    def is_two_qubit(self) -> bool:
        return self is GateKind.CNOT


_FIXED = {
    GateKind.I: I,
    GateKind.X: X,
    GateKind.Y: Y,
    GateKind.Z: Z,
    GateKind.H: H,
    GateKind.S: S,
    GateKind.SDG: SDG,
    GateKind.T: T,
    GateKind.TDG: TDG,
}

# symbols used by the circuit editor toolbox
_AXIS_ALIASES = {"Pₓ": "X", "Pᵧ": "Y", "Pᵨ": "Z", "X": "X", "Y": "Y", "Z": "Z"}

_SYMBOLS = {
    "I": GateKind.I,
    "ID": GateKind.I,
    "X": GateKind.X,
    "Pₓ": GateKind.X,
    "Y": GateKind.Y,
    "Pᵧ": GateKind.Y,
    "Z": GateKind.Z,
    "Pᵨ": GateKind.Z,
    "H": GateKind.H,
    "S": GateKind.S,
    "SDG": GateKind.SDG,
    "S†": GateKind.SDG,
    "S⁻¹": GateKind.SDG,
    "T": GateKind.T,
    "TDG": GateKind.TDG,
    "T†": GateKind.TDG,
    "T⁻¹": GateKind.TDG,
    "RX": GateKind.RX,
    "RY": GateKind.RY,
    "RZ": GateKind.RZ,
    "CNOT": GateKind.CNOT,
    "CX": GateKind.CNOT,
}


@dataclass(frozen=True)
class GateSpec:
    kind: GateKind
    symbol: str
    angle: Optional[float] = None
    axis: Optional[str] = None
    exponent: Optional[Fraction] = None

    def matrix(self) -> np.ndarray:
        return matrix_for(self.kind, angle=self.angle, axis=self.axis, exponent=self.exponent)


def matrix_for(kind: GateKind, *, angle: Optional[float] = None, axis: Optional[str] = None, exponent=None) -> np.ndarray:
    if kind in _FIXED:
        return _FIXED[kind]
    if kind is GateKind.RX:
        return RX(angle)
    if kind is GateKind.RY:
        return RY(angle)
    if kind is GateKind.RZ:
        return RZ(angle)
    if kind is GateKind.POW:
        return pauli_power(axis, exponent)
    if kind is GateKind.CNOT:
        raise UnsupportedGate("CNOT", "CNOT acts on two qubits and has no 2x2 matrix")
    raise UnsupportedGate(str(kind))


def _parse_power(symbol: str) -> Optional[GateSpec]:
    base, sep, exp_text = symbol.partition("^")
    if not sep:
        return None
    axis = _AXIS_ALIASES.get(base.strip()) or _AXIS_ALIASES.get(base.strip().upper())
    if axis is None:
        return None
    try:
        exponent = Fraction(exp_text.strip())
    except (ValueError, ZeroDivisionError):
        raise UnsupportedGate(symbol, f"bad exponent in gate symbol {symbol!r}") from None
    return GateSpec(GateKind.POW, symbol, axis=axis, exponent=exponent)


def resolve(symbol: str, angle: Optional[float] = None) -> GateSpec:
    """
    Map a placement symbol to its gate.

    Raises UnsupportedGate when the symbol is unknown or a rotation is
    missing its angle.
    """
    if not isinstance(symbol, str) or not symbol.strip():
        raise UnsupportedGate(repr(symbol), "gate symbol must be a non-empty string")

    s = symbol.strip()
    kind = _SYMBOLS.get(s) or _SYMBOLS.get(s.upper())
    if kind is None:
        spec = _parse_power(s)
        if spec is None:
            raise UnsupportedGate(symbol)
        return spec

    if kind.is_rotation:
        if angle is None:
            raise UnsupportedGate(symbol, f"{kind.value} needs an angle")
        return GateSpec(kind, symbol, angle=float(angle))

    return GateSpec(kind, symbol)


def is_supported(symbol: str, angle: Optional[float] = None) -> bool:
    try:
        resolve(symbol, angle)
    except UnsupportedGate:
        return False
    return True
