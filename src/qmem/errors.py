"""Exceptions raised by qmem."""


class QubitIndexError(IndexError):
    """A qubit index fell outside the register's fixed slot range."""

    def __init__(self, index, n_qubits: int, name: str = "qubit"):
        self.index = index
        self.n_qubits = n_qubits
        super().__init__(f"{name} {index!r} out of range [0, {n_qubits})")
