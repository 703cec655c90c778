"""Tests for gates built on measure + set: H, X, SWAP, CNOT."""

import pytest

from qmem import QuantumRegister


def collapsed(values):
    """Register with qubits 0..len(values)-1 set to the given bits."""
    reg = QuantumRegister(seed=0)
    for q, v in enumerate(values):
        reg.set_qubit(q, v)
    return reg


# ---------------------------------------------------------------------------
# Hadamard
# ---------------------------------------------------------------------------

class TestHadamard:

    def test_resuperposes_collapsed_qubit(self):
        reg = collapsed([True])
        reg.hadamard(0)
        assert reg.is_superposed(0)
        assert reg.probability(0) == 0.5

    def test_discards_bias(self):
        reg = QuantumRegister()
        reg.set_qubit(0, None, 0.9)
        reg.h(0)
        assert reg.probability(0) == 0.5

    def test_keeps_entanglement(self):
        reg = QuantumRegister()
        reg.entangle(0, 1)
        reg.set_qubit(0, True).hadamard(0)
        assert reg.get_partner(0) == 1


# ---------------------------------------------------------------------------
# Pauli-X
# ---------------------------------------------------------------------------

class TestPauliX:

    @pytest.mark.parametrize("value", [True, False])
    def test_flips_collapsed(self, value):
        reg = collapsed([value])
        reg.pauli_x(0)
        assert reg.measure(0) is (not value)

    @pytest.mark.parametrize("value", [True, False])
    def test_twice_restores_collapsed(self, value):
        reg = collapsed([value])
        reg.x(0).x(0)
        assert reg.measure(0) is value

    @pytest.mark.parametrize("prob,first", [(1.0, True), (0.0, False)])
    def test_collapses_superposed(self, prob, first):
        reg = QuantumRegister(seed=0)
        reg.set_qubit(0, None, prob)
        reg.pauli_x(0)
        assert not reg.is_superposed(0)
        assert reg.measure(0) is (not first)

    @pytest.mark.parametrize("seed", range(8))
    def test_twice_restores_measured_value(self, seed):
        # Same seed, same first draw
        expected = QuantumRegister(seed=seed).measure(0)
        reg = QuantumRegister(seed=seed)
        reg.pauli_x(0).pauli_x(0)
        assert not reg.is_superposed(0)
        assert reg.measure(0) is expected

    def test_flip_propagates_to_superposed_partner(self):
        reg = collapsed([True])
        reg.entangle(0, 1)
        reg.pauli_x(0)
        assert reg.measure(1) is False


# ---------------------------------------------------------------------------
# SWAP
# ---------------------------------------------------------------------------

class TestSwap:

    @pytest.mark.parametrize("a,b", [(True, False), (False, True), (True, True)])
    def test_exchanges_values(self, a, b):
        reg = collapsed([a, b])
        reg.swap(0, 1)
        assert reg.measure(0) is b
        assert reg.measure(1) is a

    def test_swap_superposed(self):
        reg = QuantumRegister(seed=0)
        reg.set_qubit(3, None, 1.0)
        reg.set_qubit(60, None, 0.0)
        reg.swap(3, 60)
        assert reg.measure(3) is False
        assert reg.measure(60) is True
        assert not reg.is_superposed(3)
        assert not reg.is_superposed(60)

    def test_self_swap_noop(self):
        reg = QuantumRegister(seed=0)
        reg.set_qubit(2, None, 0.3)
        before = reg.snapshot()
        reg.swap(2, 2)
        assert reg.snapshot() == before

    def test_returns_self(self):
        reg = collapsed([True, False])
        assert reg.swap(0, 1) is reg


# ---------------------------------------------------------------------------
# CNOT
# ---------------------------------------------------------------------------

class TestCNOT:

    def test_control_zero_leaves_superposed_target(self):
        reg = QuantumRegister(seed=0)
        reg.set_qubit(0, False)
        reg.set_qubit(1, None, 0.3)
        reg.cnot(0, 1)
        assert reg.is_superposed(1)
        assert reg.probability(1) == pytest.approx(0.3)

    @pytest.mark.parametrize("target", [True, False])
    def test_control_zero_leaves_collapsed_target(self, target):
        reg = collapsed([False, target])
        reg.cnot(0, 1)
        assert reg.measure(1) is target

    @pytest.mark.parametrize("target", [True, False])
    def test_control_one_flips_target(self, target):
        reg = collapsed([True, target])
        reg.cx(0, 1)
        assert reg.measure(1) is (not target)
        assert reg.measure(0) is True

    def test_control_one_collapses_superposed_target(self):
        reg = QuantumRegister(seed=0)
        reg.set_qubit(0, True)
        reg.set_qubit(1, None, 1.0)
        reg.cnot(0, 1)
        assert not reg.is_superposed(1)
        assert reg.measure(1) is False

    def test_superposed_control_is_measured(self):
        reg = QuantumRegister(seed=0)
        reg.set_qubit(0, None, 0.0)
        reg.set_qubit(1, None, 0.6)
        reg.cnot(0, 1)
        assert not reg.is_superposed(0)
        assert reg.is_superposed(1)

    def test_same_qubit_noop(self):
        reg = QuantumRegister(seed=0)
        before = reg.snapshot()
        reg.cnot(4, 4)
        assert reg.snapshot() == before
