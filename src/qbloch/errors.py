from __future__ import annotations


class QBlochError(Exception):
    """Base class for every error raised by the engine."""


class InvalidStateVector(QBlochError, ValueError):
    def __init__(self, num_qubits: int, length: int | None = None):
        self.num_qubits = num_qubits
        self.length = length
        if length is None:
            msg = f"num_qubits must be positive, got {num_qubits}"
        else:
            msg = f"state vector for {num_qubits} qubit(s) needs {2 ** num_qubits} amplitudes, got {length}"
        super().__init__(msg)


class InvalidQubitIndex(QBlochError, IndexError):
    def __init__(self, qubit: int, num_qubits: int):
        self.qubit = qubit
        self.num_qubits = num_qubits
        super().__init__(f"qubit index must be in [0, {num_qubits - 1}], got {qubit}")


class UnsupportedGate(QBlochError, KeyError):
    def __init__(self, symbol: str, reason: str | None = None):
        self.symbol = symbol
        self.reason = reason or f"no gate registered for symbol {symbol!r}"
        super().__init__(self.reason)

    # KeyError quotes its argument; keep the plain message
    def __str__(self) -> str:
        return self.reason


class CircuitSizeMismatch(QBlochError, ValueError):
    def __init__(self, circuit_qubits: int, requested_qubits: int):
        self.circuit_qubits = circuit_qubits
        self.requested_qubits = requested_qubits
        super().__init__(
            f"circuit was built for num_qubits={circuit_qubits}, but num_qubits={requested_qubits} was requested"
        )


class ProgramSyntaxError(QBlochError, ValueError):
    def __init__(self, line_no: int, line: str, reason: str):
        self.line_no = line_no
        self.line = line
        self.reason = reason
        super().__init__(f"line {line_no}: {reason} ({line.strip()!r})")


class SnapshotError(QBlochError, ValueError):
    """Export document is malformed."""
