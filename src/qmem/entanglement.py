"""
Entanglement bookkeeping for the quantum register.

Two relations are tracked independently:

  Pairs   direct, symmetric a↔b links. A qubit has at most one partner.
  Groups  multi-qubit sets. Every member sees the same full member set,
          and declaring a group that touches an existing one merges both.

Groups are stored as a disjoint-set forest keyed by qubit index
(union by size, path compression), with the member set kept on each
root so "which qubits share my group?" is answered without a scan.

Usage:
    >>> groups = EntanglementGroups()
    >>> groups.union([3, 7])
    frozenset({3, 7})
    >>> _ = groups.union([3, 4, 5])
    >>> sorted(groups.members(7))
    [3, 4, 5, 7]
"""

from typing import Dict, FrozenSet, Iterable, Optional, Set


class EntanglementPairs:
    """Symmetric one-to-one partner map."""

    __slots__ = ("_partner",)

    def __init__(self):
        self._partner: Dict[int, int] = {}

    def link(self, a: int, b: int) -> None:
        """Pair a with b, dropping any previous partner of either."""
        if a == b:
            return
        self.unlink(a)
        self.unlink(b)
        self._partner[a] = b
        self._partner[b] = a

    def unlink(self, q: int) -> Optional[int]:
        """Remove q's link on both sides. Returns the old partner, if any."""
        partner = self._partner.pop(q, None)
        if partner is not None:
            self._partner.pop(partner, None)
        return partner

    def partner(self, q: int) -> Optional[int]:
        return self._partner.get(q)

    def as_dict(self) -> Dict[int, int]:
        return dict(self._partner)

    def clear(self) -> None:
        self._partner.clear()

    def copy(self) -> "EntanglementPairs":
        new = EntanglementPairs()
        new._partner = dict(self._partner)
        return new

    def __contains__(self, q: int) -> bool:
        return q in self._partner

    def __len__(self) -> int:
        return len(self._partner)


class EntanglementGroups:
    """
    Disjoint-set forest over qubit indices.

    Only qubits that have been placed in a group are stored; any other
    qubit is implicitly its own singleton.
    """

    __slots__ = ("_parent", "_members")

    def __init__(self):
        self._parent: Dict[int, int] = {}
        # root -> every member of that root's set
        self._members: Dict[int, Set[int]] = {}

    def find(self, q: int) -> int:
        """Return the representative of q's group, compressing the path."""
        parent = self._parent
        if q not in parent:
            return q
        root = q
        while parent[root] != root:
            root = parent[root]
        while parent[q] != root:
            parent[q], q = root, parent[q]
        return root

    def union(self, qubits: Iterable[int]) -> FrozenSet[int]:
        """
        Merge the given qubits, and every group they already belong to,
        into a single group.

        Returns
        -------
        frozenset
            The merged member set. Fewer than two distinct qubits leaves
            the forest unchanged and returns the current membership.
        """
        qubits = list(dict.fromkeys(qubits))
        if len(qubits) < 2:
            return self.members(qubits[0]) if qubits else frozenset()

        for q in qubits:
            if q not in self._parent:
                self._parent[q] = q
                self._members[q] = {q}

        roots = {self.find(q) for q in qubits}
        # Largest set absorbs the others so trees stay shallow
        target = max(roots, key=lambda r: len(self._members[r]))
        merged = self._members[target]
        for root in roots:
            if root == target:
                continue
            self._parent[root] = target
            merged |= self._members.pop(root)
        return frozenset(merged)

    def remove(self, q: int) -> None:
        """Take q out of its group. The remaining members stay grouped."""
        if q not in self._parent:
            return
        root = self.find(q)
        rest = self._members.pop(root) - {q}
        for member in rest | {q}:
            del self._parent[member]
        if len(rest) >= 2:
            self.union(rest)

    def members(self, q: int) -> FrozenSet[int]:
        """Full member set of q's group, including q itself."""
        if q not in self._parent:
            return frozenset((q,))
        return frozenset(self._members[self.find(q)])

    def as_dict(self) -> Dict[int, FrozenSet[int]]:
        """Map every grouped qubit to its full member set."""
        frozen = {root: frozenset(m) for root, m in self._members.items()}
        return {q: frozen[self.find(q)] for q in self._parent}

    def clear(self) -> None:
        self._parent.clear()
        self._members.clear()

    def copy(self) -> "EntanglementGroups":
        new = EntanglementGroups()
        new._parent = dict(self._parent)
        new._members = {root: set(m) for root, m in self._members.items()}
        return new

    def __contains__(self, q: int) -> bool:
        return q in self._parent

    def __len__(self) -> int:
        return len(self._parent)
