"""
Array-level kernels behind QuantumState.

Conventions (shared by every module through ``bit_position``):
- statevector length is 2**num_qubits
- qubit indices are 0...num_qubits-1
- qubit 0 is the most significant bit in basis ordering
"""
from __future__ import annotations

import numpy as np

from .errors import InvalidQubitIndex


def bit_position(qubit: int, num_qubits: int) -> int:
    return (num_qubits - 1) - qubit


def bit_of(index: int, qubit: int, num_qubits: int) -> int:
    return (index >> bit_position(qubit, num_qubits)) & 1


def check_qubit(qubit: int, num_qubits: int) -> int:
    if isinstance(qubit, bool) or not isinstance(qubit, (int, np.integer)):
        raise TypeError(f"qubit index must be an int, got {qubit!r}")
    if qubit < 0 or qubit >= num_qubits:
        raise InvalidQubitIndex(int(qubit), num_qubits)
    return int(qubit)


def _inverse_permutation(perm: list[int]) -> list[int]:
    inv = [0] * len(perm)
    for i, p in enumerate(perm):
        inv[p] = i
    return inv


def apply_k_qubit_gate(state: np.ndarray, U: np.ndarray, targets: list[int], num_qubits: int) -> np.ndarray:
    """
    Apply a k-qubit operator U to ``state`` on the given targets and return a
    new vector. For k=1 this is the per-index rule

        new[rest | b << pos] += state[s] * U[b][bit(s)]

    evaluated for every basis index s at once.
    """
    U = np.asarray(U, dtype=complex)
    state = np.asarray(state, dtype=complex)

    k = len(targets)
    if k == 0:
        return state.copy()

    if len(set(targets)) != k:
        raise ValueError(f"targets must be unique, got {targets}")

    for t in targets:
        check_qubit(t, num_qubits)

    dim_k = 2 ** k
    if U.shape != (dim_k, dim_k):
        raise ValueError(f"gate shape must be {(dim_k, dim_k)} for k={k}, got {U.shape}")

    psi = state.reshape((2,) * num_qubits)

    remaining = [q for q in range(num_qubits) if q not in targets]
    perm = list(targets) + remaining

    psi_mat = np.transpose(psi, axes=perm).reshape(dim_k, -1)
    psi_mat2 = U @ psi_mat

    psi2 = np.transpose(psi_mat2.reshape((2,) * num_qubits), axes=_inverse_permutation(perm))
    return psi2.reshape(-1)


def apply_cnot(state: np.ndarray, control: int, target: int, num_qubits: int) -> np.ndarray:
    """
    Flip ``target`` wherever ``control`` is 1.

    Walks only the indices whose target bit is 0, so each pair
    (s, s ^ target_mask) is swapped exactly once.
    """
    check_qubit(control, num_qubits)
    check_qubit(target, num_qubits)
    if control == target:
        raise ValueError("control and target must be different")

    control_mask = 1 << bit_position(control, num_qubits)
    target_mask = 1 << bit_position(target, num_qubits)

    new_state = np.array(state, dtype=complex, copy=True)
    for i in range(2 ** num_qubits):
        if (i & control_mask) and not (i & target_mask):
            j = i | target_mask
            new_state[i], new_state[j] = new_state[j], new_state[i]

    return new_state


def partial_trace_pure(state: np.ndarray, keep: list[int], num_qubits: int) -> np.ndarray:
    """
    Reduced density matrix of the qubits in ``keep`` (in that order).

    Moves the kept axes to the front, so the remaining axes index exactly the
    basis states of the traced-out qubits; rho = M @ M^dagger then sums over
    all of them at once.
    """
    if len(keep) == 0:
        raise ValueError("keep must name at least one qubit")
    if len(set(keep)) != len(keep):
        raise ValueError(f"keep must be unique, got {keep}")
    for q in keep:
        check_qubit(q, num_qubits)

    psi = np.asarray(state, dtype=complex).reshape((2,) * num_qubits)
    rest = [q for q in range(num_qubits) if q not in keep]
    M = np.transpose(psi, axes=list(keep) + rest).reshape(2 ** len(keep), -1)
    return M @ M.conj().T
