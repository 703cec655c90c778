"""
64-slot quantum memory register.

Each slot holds one "qubit" that is either collapsed to a classical bit
or in superposition with a single probability of measuring 1. Qubits may
be entangled in pairs or groups; collapsing one forces every superposed
partner to the same value.

State layout:
  state          64-bit int, bit i = collapsed value of qubit i
  superposition  64-bit int, bit i = 1 while qubit i is undetermined
  probability    float64[64], P(measure 1) for superposed qubits

This is bookkeeping, not a physics simulator: there are no amplitudes,
no interference, and gates are built from measure + set.

Usage:
    >>> from qmem import QuantumRegister
    >>> reg = QuantumRegister(seed=7)
    >>> reg.entangle(0, 63)
    >>> reg.set_qubit(0, True)
    >>> reg.measure(63)
    True
"""

import functools
import logging
import threading
import types
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Sequence, Tuple

import numpy as np

from qmem.entanglement import EntanglementGroups, EntanglementPairs
from qmem.errors import QubitIndexError

logger = logging.getLogger(__name__)

N_QUBITS = 64
FULL_MASK = (1 << N_QUBITS) - 1
DEFAULT_PROBABILITY = 0.5

# apply() operation names -> method names
_OPERATIONS = {
    "set": "set_qubit",
    "set_qubit": "set_qubit",
    "h": "hadamard",
    "hadamard": "hadamard",
    "x": "pauli_x",
    "pauli_x": "pauli_x",
    "cx": "cnot",
    "cnot": "cnot",
    "swap": "swap",
    "measure": "measure",
    "entangle": "entangle",
    "entangle_group": "entangle_group",
    "disentangle": "disentangle",
}


def _synchronized(method):
    """Run a register method under the register's lock."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


@dataclass(frozen=True)
class RegisterSnapshot:
    """
    Read-only copy of a register's state for inspection or rendering.

    ``pairs`` and ``groups`` are read-only mapping views.
    """
    state: int
    superposition: int
    probabilities: Tuple[float, ...]
    pairs: Mapping[int, int]
    groups: Mapping[int, FrozenSet[int]]

    def is_superposed(self, index: int) -> bool:
        return bool((self.superposition >> index) & 1)

    def value(self, index: int) -> Optional[bool]:
        """Collapsed value of a qubit, or None while it is superposed."""
        if self.is_superposed(index):
            return None
        return bool((self.state >> index) & 1)


class QuantumRegister:
    """
    Fixed-width register of 64 qubits with superposition and entanglement.

    A new register has every qubit superposed at probability 0.5 and no
    entanglement. Gates return ``self`` so calls can be chained:

        >>> reg = QuantumRegister(seed=1).hadamard(0).entangle(0, 1)

    Parameters
    ----------
    seed : int, optional
        Seed for the measurement generator.
    rng : numpy.random.Generator, optional
        Source of uniform draws. Only ``random()`` is called, so any
        object providing it works. Takes precedence over ``seed``.
    """

    def __init__(self, seed: Optional[int] = None,
                 rng: Optional[np.random.Generator] = None):
        self._rng = rng if rng is not None else np.random.default_rng(seed)
        self._lock = threading.RLock()
        self._pairs = EntanglementPairs()
        self._groups = EntanglementGroups()
        self._probability = np.full(N_QUBITS, DEFAULT_PROBABILITY, dtype=np.float64)
        self._state = 0
        self._superposition = FULL_MASK

    @property
    def n_qubits(self) -> int:
        return N_QUBITS

    @_synchronized
    def reset(self) -> "QuantumRegister":
        """Return to the construction state: all superposed, no links."""
        self._state = 0
        self._superposition = FULL_MASK
        self._probability.fill(DEFAULT_PROBABILITY)
        self._pairs.clear()
        self._groups.clear()
        return self

    @_synchronized
    def copy(self) -> "QuantumRegister":
        """Deep copy with its own generator, seeded from this one."""
        new = QuantumRegister.__new__(QuantumRegister)
        # Only random() is required of an injected generator
        new._rng = np.random.default_rng(int(self._rng.random() * 2 ** 63))
        new._lock = threading.RLock()
        new._pairs = self._pairs.copy()
        new._groups = self._groups.copy()
        new._probability = self._probability.copy()
        new._state = self._state
        new._superposition = self._superposition
        return new

    # ─── Core state transitions ──────────────────────────────────────

    def _validate_qubit(self, q, name: str = "qubit") -> int:
        if isinstance(q, bool) or not isinstance(q, (int, np.integer)):
            raise QubitIndexError(q, N_QUBITS, name)
        if not (0 <= q < N_QUBITS):
            raise QubitIndexError(q, N_QUBITS, name)
        return int(q)

    def _write(self, q: int, value: bool) -> None:
        """Collapse q to value without touching its partners."""
        bit = 1 << q
        if value:
            self._state |= bit
        else:
            self._state &= ~bit
        self._superposition &= ~bit

    def _propagate(self, q: int, value: bool) -> None:
        """Force q's superposed partner and group members to value."""
        targets = set(self._groups.members(q))
        partner = self._pairs.partner(q)
        if partner is not None:
            targets.add(partner)
        targets.discard(q)

        collapsed = [t for t in sorted(targets) if (self._superposition >> t) & 1]
        for t in collapsed:
            self._write(t, value)
        if collapsed:
            logger.debug("qubit %d collapsed to %d, forced %s", q, value, collapsed)

    @_synchronized
    def set_qubit(self, index: int, value: Optional[bool],
                  prob: Optional[float] = None) -> "QuantumRegister":
        """
        Set a qubit to 0, 1 or superposition.

        Parameters
        ----------
        index : int
            Qubit index (0-63).
        value : bool or None
            True for 1, False for 0, None for superposition.
        prob : float, optional
            P(measure 1) when entering superposition. Defaults to 0.5.
            Ignored for definite values.

        A definite value collapses the qubit's direct partner and every
        member of its group that is still superposed to the same value.
        This is one step: a partner's own partner is not followed.
        """
        index = self._validate_qubit(index)
        if value is None:
            p = DEFAULT_PROBABILITY if prob is None else float(prob)
            if not (0.0 <= p <= 1.0):
                raise ValueError(f"Probability must be in [0,1], got {prob}")
            self._superposition |= 1 << index
            self._probability[index] = p
        else:
            value = bool(value)
            self._write(index, value)
            self._propagate(index, value)
        return self

    @_synchronized
    def measure(self, index: int) -> bool:
        """
        Measure a qubit, collapsing it (and its partners) if superposed.

        A collapsed qubit returns its stored value without drawing.
        """
        index = self._validate_qubit(index)
        if not (self._superposition >> index) & 1:
            return bool((self._state >> index) & 1)
        outcome = bool(self._rng.random() < self._probability[index])
        self.set_qubit(index, outcome)
        return outcome

    @_synchronized
    def measure_all(self) -> str:
        """Measure qubits 0..63 in order. Returns a bitstring, qubit 0 first."""
        return "".join("1" if self.measure(q) else "0" for q in range(N_QUBITS))

    # ─── Gates ───────────────────────────────────────────────────────

    def hadamard(self, index: int) -> "QuantumRegister":
        """Put a qubit into an even 50/50 superposition."""
        return self.set_qubit(index, None, DEFAULT_PROBABILITY)

    def h(self, index: int) -> "QuantumRegister":
        """Alias for hadamard()."""
        return self.hadamard(index)

    @_synchronized
    def pauli_x(self, index: int) -> "QuantumRegister":
        """Measure the qubit, then store the opposite value."""
        current = self.measure(index)
        return self.set_qubit(index, not current)

    def x(self, index: int) -> "QuantumRegister":
        """Alias for pauli_x()."""
        return self.pauli_x(index)

    @_synchronized
    def swap(self, a: int, b: int) -> "QuantumRegister":
        """
        Exchange the measured values of two qubits.

        Both qubits are measured first, so superposition is not carried
        across. Swapping a qubit with itself does nothing.
        """
        a = self._validate_qubit(a)
        b = self._validate_qubit(b)
        if a == b:
            return self
        value_a = self.measure(a)
        value_b = self.measure(b)
        self.set_qubit(a, value_b)
        self.set_qubit(b, value_a)
        return self

    @_synchronized
    def cnot(self, control: int, target: int) -> "QuantumRegister":
        """
        Controlled NOT: if control measures 1, flip the measured target.

        When control measures 0 the target is left exactly as it was,
        superposition and probability included.
        """
        control = self._validate_qubit(control, "control")
        target = self._validate_qubit(target, "target")
        if control == target:
            return self
        if self.measure(control):
            self.set_qubit(target, not self.measure(target))
        return self

    def cx(self, control: int, target: int) -> "QuantumRegister":
        """Alias for cnot()."""
        return self.cnot(control, target)

    # ─── Entanglement ────────────────────────────────────────────────

    @_synchronized
    def entangle(self, a: int, b: int) -> "QuantumRegister":
        """
        Pair two qubits so they collapse to the same value.

        Nothing is collapsed now. A qubit already paired elsewhere loses
        its old partner.
        """
        a = self._validate_qubit(a)
        b = self._validate_qubit(b)
        self._pairs.link(a, b)
        return self

    @_synchronized
    def entangle_group(self, indices: Sequence[int]) -> "QuantumRegister":
        """
        Entangle several qubits as one group.

        Any group already containing one of ``indices`` is merged in, so
        every member ends up with the same full member set. Fewer than
        two distinct qubits is a no-op.
        """
        indices = [self._validate_qubit(q) for q in indices]
        if len(set(indices)) < 2:
            return self
        merged = self._groups.union(indices)
        logger.debug("entangled group %s", sorted(merged))
        return self

    @_synchronized
    def disentangle(self, index: int) -> "QuantumRegister":
        """Drop a qubit's pair link and remove it from its group."""
        index = self._validate_qubit(index)
        self._pairs.unlink(index)
        self._groups.remove(index)
        return self

    # ─── Diagnostics ─────────────────────────────────────────────────

    @_synchronized
    def bells_test(self, a: int, b: int) -> Tuple[bool, bool, bool]:
        """
        Measure two qubits and check whether they agree.

        Returns
        -------
        tuple
            (value of a, value of b, whether they are correlated)
        """
        a = self._validate_qubit(a)
        b = self._validate_qubit(b)
        a_measured = self.measure(a)
        b_measured = self.measure(b)
        return a_measured, b_measured, a_measured == b_measured

    @_synchronized
    def sample(self, index: int, shots: int = 1024) -> Dict[str, int]:
        """
        Measure a qubit on ``shots`` independent copies of the register.

        The register itself is not collapsed.

        Returns
        -------
        dict
            Outcome counts, e.g. {"0": 498, "1": 526}.
        """
        index = self._validate_qubit(index)
        if shots < 1:
            raise ValueError(f"shots must be ≥ 1, got {shots}")
        counts: Dict[str, int] = {}
        for _ in range(shots):
            outcome = "1" if self.copy().measure(index) else "0"
            counts[outcome] = counts.get(outcome, 0) + 1
        return counts

    # ─── Batch operations ────────────────────────────────────────────

    def apply(self, operations: Iterable[Tuple]) -> "QuantumRegister":
        """
        Apply a sequence of operations.

        Parameters
        ----------
        operations : iterable of tuples
            Each tuple is (name, *args), e.g.:
            [("h", 0), ("entangle", 0, 1), ("x", 0),
             ("entangle_group", [2, 3, 4]), ("set", 5, None, 0.9)]

        The batch is all-or-nothing: if any operation raises, the
        register is restored to its state before the call and the error
        is re-raised. Generator draws already made are not rewound.
        """
        operations = list(operations)
        for op in operations:
            if op[0].lower() not in _OPERATIONS:
                raise ValueError(
                    f"Unknown operation '{op[0]}'. "
                    f"Supported: {', '.join(sorted(_OPERATIONS))}"
                )

        with self._lock:
            saved = (self._state, self._superposition, self._probability.copy(),
                     self._pairs.copy(), self._groups.copy())
            try:
                for op in operations:
                    getattr(self, _OPERATIONS[op[0].lower()])(*op[1:])
            except Exception:
                (self._state, self._superposition, self._probability,
                 self._pairs, self._groups) = saved
                raise
        return self

    # ─── Accessors ───────────────────────────────────────────────────

    @property
    def state(self) -> int:
        """Classical bit mask."""
        return self._state

    @property
    def superposition(self) -> int:
        """Superposition mask; bit i set while qubit i is undetermined."""
        return self._superposition

    @property
    def probabilities(self) -> np.ndarray:
        return self._probability.copy()

    def get_state(self) -> int:
        return self._state

    def get_superposition(self) -> int:
        return self._superposition

    @_synchronized
    def get_entangled_pairs(self) -> Dict[int, int]:
        return self._pairs.as_dict()

    @_synchronized
    def get_entangled_groups(self) -> Dict[int, FrozenSet[int]]:
        return self._groups.as_dict()

    @_synchronized
    def get_group(self, index: int) -> FrozenSet[int]:
        """Members of the qubit's group; just the qubit when ungrouped."""
        index = self._validate_qubit(index)
        return self._groups.members(index)

    @_synchronized
    def get_partner(self, index: int) -> Optional[int]:
        index = self._validate_qubit(index)
        return self._pairs.partner(index)

    @_synchronized
    def probability(self, index: int) -> float:
        index = self._validate_qubit(index)
        return float(self._probability[index])

    @_synchronized
    def is_superposed(self, index: int) -> bool:
        index = self._validate_qubit(index)
        return bool((self._superposition >> index) & 1)

    @_synchronized
    def snapshot(self) -> RegisterSnapshot:
        return RegisterSnapshot(
            state=self._state,
            superposition=self._superposition,
            probabilities=tuple(float(p) for p in self._probability),
            pairs=types.MappingProxyType(self._pairs.as_dict()),
            groups=types.MappingProxyType(self._groups.as_dict()),
        )

    def __repr__(self) -> str:
        return (
            f"QuantumRegister(superposed={bin(self._superposition).count('1')}, "
            f"pairs={len(self._pairs) // 2}, "
            f"grouped={len(self._groups)})"
        )
