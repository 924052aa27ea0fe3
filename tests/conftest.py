import numpy as np
import pytest

from qbloch.state import QuantumState


def random_state(num_qubits: int, seed: int) -> QuantumState:
    rng = np.random.default_rng(seed)
    dim = 2 ** num_qubits
    psi = rng.normal(size=dim) + 1j * rng.normal(size=dim)
    psi /= np.linalg.norm(psi)
    return QuantumState(num_qubits, psi)


@pytest.fixture
def rand_state():
    return random_state
