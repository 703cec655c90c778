"""
qmem: a 64-slot quantum memory register.

Features:
- Bitmask state: classical value + superposition flag per qubit
- Per-qubit collapse probability
- Pair and group entanglement with correlated collapse
- Gates built from measure + set: H, X, SWAP, CNOT
- Seedable measurement for reproducible runs

Quick Start:
    >>> from qmem import QuantumRegister
    >>> reg = QuantumRegister(seed=42)
    >>> reg.entangle_group([3, 4, 5])
    >>> a, b, correlated = reg.bells_test(3, 5)
    >>> correlated
    True
"""
__version__ = "0.1.0"

from .errors import QubitIndexError
from .entanglement import EntanglementGroups, EntanglementPairs
from .register import (
    DEFAULT_PROBABILITY,
    FULL_MASK,
    N_QUBITS,
    QuantumRegister,
    RegisterSnapshot,
)

__all__ = [
    # Register
    'QuantumRegister',
    'RegisterSnapshot',
    'N_QUBITS',
    'FULL_MASK',
    'DEFAULT_PROBABILITY',
    # Entanglement
    'EntanglementPairs',
    'EntanglementGroups',
    # Errors
    'QubitIndexError',
]
