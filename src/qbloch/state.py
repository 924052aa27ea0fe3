from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

import numpy as np

from .apply import apply_cnot, apply_k_qubit_gate, bit_position, check_qubit, partial_trace_pure
from .complex import ComplexNumber
from .config import PURITY_THRESHOLD
from .errors import InvalidStateVector


@dataclass(frozen=True)
class BlochVector:
    x: float
    y: float
    z: float

    def magnitude(self) -> float:
        return float(np.sqrt(self.x ** 2 + self.y ** 2 + self.z ** 2))

    def is_pure(self, threshold: float = PURITY_THRESHOLD) -> bool:
        """Shorter than ``threshold`` means the qubit is mixed (entangled or decohered)."""
        return self.magnitude() > threshold

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "z": self.z}

    @classmethod
    def from_dict(cls, data: dict) -> "BlochVector":
        return cls(float(data["x"]), float(data["y"]), float(data["z"]))


def to_complex_rows(matrix: np.ndarray) -> list[list[ComplexNumber]]:
    return [[ComplexNumber.coerce(v) for v in row] for row in np.asarray(matrix)]


def as_gate_matrix(gate) -> np.ndarray:
    """Accept a numpy array or nested rows of ComplexNumber / complex."""
    if isinstance(gate, np.ndarray):
        return np.asarray(gate, dtype=complex)
    return np.array([[complex(ComplexNumber.coerce(v)) for v in row] for row in gate], dtype=complex)


def basis_state(index: int, num_qubits: int) -> "QuantumState":
    dim = 2 ** num_qubits
    if index < 0 or index >= dim:
        raise ValueError(f"index must be between 0 and {dim - 1}")

    psi = np.zeros(dim, dtype=complex)
    psi[index] = 1.0
    return QuantumState(num_qubits, psi)


def zero_state(num_qubits: int) -> "QuantumState":
    return QuantumState(num_qubits)


class QuantumState:
    """
    Pure state of ``num_qubits`` qubits as an amplitude vector.

    Basis index i holds qubit q's value in bit ``num_qubits-1-q`` (qubit 0 is
    the most significant bit). Instances never change after construction:
    gate application returns a new state, and derived views (density matrix,
    reduced matrices, Bloch vectors) are computed once and cached.

    Amplitudes are never renormalized; ``norm_drift`` reports accumulated
    floating-point drift without correcting it.
    """

    def __init__(self, num_qubits: int, amplitudes: Optional[Iterable] = None):
        if isinstance(num_qubits, bool) or not isinstance(num_qubits, (int, np.integer)) or num_qubits < 1:
            raise InvalidStateVector(num_qubits)

        self.num_qubits = int(num_qubits)
        dim = 2 ** self.num_qubits

        if amplitudes is None:
            psi = np.zeros(dim, dtype=complex)
            psi[0] = 1.0
        elif isinstance(amplitudes, np.ndarray):
            psi = np.array(amplitudes, dtype=complex, copy=True).reshape(-1)
        else:
            psi = np.array([complex(ComplexNumber.coerce(a)) for a in amplitudes], dtype=complex)

        if psi.shape != (dim,):
            raise InvalidStateVector(self.num_qubits, int(psi.size))

        psi.flags.writeable = False
        self._psi = psi
        self._cache: dict = {}

    @property
    def dim(self) -> int:
        return 2 ** self.num_qubits

    def amplitudes(self) -> list[ComplexNumber]:
        return [ComplexNumber.coerce(a) for a in self._psi]

    def vector(self) -> np.ndarray:
        return self._psi.copy()

    def amplitude(self, index: int) -> ComplexNumber:
        return ComplexNumber.coerce(self._psi[index])

    def probabilities(self) -> np.ndarray:
        psi = self._psi
        return psi.real * psi.real + psi.imag * psi.imag

    def marginal_probabilities(self, qubit: int) -> tuple[float, float]:
        check_qubit(qubit, self.num_qubits)
        mask = 1 << bit_position(qubit, self.num_qubits)
        probs = self.probabilities()
        p0 = 0.0
        p1 = 0.0
        for i, p in enumerate(probs):
            if i & mask:
                p1 += float(p)
            else:
                p0 += float(p)
        return p0, p1

    def norm(self) -> float:
        return float(np.linalg.norm(self._psi))

    def norm_drift(self) -> float:
        return abs(self.norm() - 1.0)

    def basis_label(self, index: int) -> str:
        return "|" + format(index, f"0{self.num_qubits}b") + "⟩"

    def density_matrix(self) -> np.ndarray:
        """Full outer product |psi><psi|; O(4**n), intended only for small n."""
        if "rho" not in self._cache:
            rho = np.outer(self._psi, self._psi.conj())
            rho.flags.writeable = False
            self._cache["rho"] = rho
        return self._cache["rho"]

    def reduced_density_array(self, qubit: int) -> np.ndarray:
        """
        2x2 reduced density matrix of ``qubit`` by partial trace.

        The full matrix is viewed as rho[a, i, b, a', j, b'] where a/b are the
        bits above/below ``qubit``; entries with a == a' and b == b' (all
        other bits identical) are summed into reduced[i][j].
        """
        check_qubit(qubit, self.num_qubits)
        key = ("reduced", qubit)
        if key not in self._cache:
            above = 2 ** qubit
            below = 2 ** bit_position(qubit, self.num_qubits)
            r = self.density_matrix().reshape(above, 2, below, above, 2, below)
            reduced = np.einsum("aibajb->ij", r)
            reduced.flags.writeable = False
            self._cache[key] = reduced
        return self._cache[key]

    def reduced_density_matrix(self, qubit: int) -> list[list[ComplexNumber]]:
        return to_complex_rows(self.reduced_density_array(qubit))

    def reduced_density_matrix_of(self, qubits: Sequence[int]) -> np.ndarray:
        """Reduced density matrix of an ordered subset of qubits."""
        return partial_trace_pure(self._psi, [int(q) for q in qubits], self.num_qubits)

    def bloch_vector(self, qubit: int) -> BlochVector:
        key = ("bloch", qubit)
        if key not in self._cache:
            rho = self.reduced_density_array(qubit)
            x = (rho[0, 1] + rho[1, 0]).real
            y = (-1j * (rho[0, 1] - rho[1, 0])).real
            z = (rho[0, 0] - rho[1, 1]).real
            self._cache[key] = BlochVector(float(x), float(y), float(z))
        return self._cache[key]

    def apply_gate(self, gate, qubit: int) -> "QuantumState":
        U = as_gate_matrix(gate)
        if U.shape != (2, 2):
            raise ValueError(f"single-qubit gate must be 2x2, got shape {U.shape}")
        check_qubit(qubit, self.num_qubits)
        return QuantumState(self.num_qubits, apply_k_qubit_gate(self._psi, U, [qubit], self.num_qubits))

    def apply_cnot(self, control: int, target: int) -> "QuantumState":
        return QuantumState(self.num_qubits, apply_cnot(self._psi, control, target, self.num_qubits))

    def is_close(self, other: "QuantumState", atol: float = 1e-9) -> bool:
        if other.num_qubits != self.num_qubits:
            return False
        return bool(np.allclose(self._psi, other._psi, atol=atol, rtol=0.0))

    def describe(self, tol: float = 1e-12, max_terms: Optional[int] = 32) -> str:
        """State as a sum of basis kets, largest probability first."""
        terms = []
        for i, amp in enumerate(self._psi):
            if abs(amp) < tol:
                continue
            terms.append((i, amp, float(abs(amp) ** 2)))

        terms.sort(key=lambda t: t[2], reverse=True)
        if max_terms is not None:
            terms = terms[:max_terms]

        lines = [f"{self.num_qubits}-qubit state |ψ⟩ with {len(terms)} shown term(s):"]
        for i, amp, prob in terms:
            lines.append(f"  {amp.real:+.6f}{amp.imag:+.6f}j  {self.basis_label(i)}   P={prob:.6f}")
        return "\n".join(lines)

    def __repr__(self):
        return f"QuantumState(num_qubits={self.num_qubits}, dim={self.dim})"
