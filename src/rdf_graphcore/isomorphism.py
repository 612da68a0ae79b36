"""
Graph isomorphism under blank-node renaming.

Two graphs are equal when a bijection between their blank nodes maps the
triples of one exactly onto the triples of the other. URIs and literals are
never renamed, which keeps the search small:

1. Ground triples (no blank node) must already coincide.
2. Both graphs must reference the same number of blank nodes.
3. Each blank node gets a local signature: the multiset of
   (position, predicate, other term) entries of the triples touching it,
   where another blank node is reduced to a marker. Only nodes with equal
   signatures can map onto each other.
4. A backtracking search commits one blank node at a time in breadth-first
   order over each connected component. Every triple whose blank nodes are
   all mapped is checked as soon as possible, and the full mapping is
   verified before reporting success.
"""

import logging
from collections import Counter, deque
from typing import Iterable, Optional

from rdf_graphcore.config import DEFAULT_CONFIG, EngineConfig
from rdf_graphcore.graph import Graph
from rdf_graphcore.models import Triple
from rdf_graphcore.terms import BlankNode

logger = logging.getLogger(__name__)

# Markers used in signatures in place of blank nodes
_SELF = "self"
_OTHER_BLANK = "blank"


def _blank_nodes(triples: Iterable[Triple]) -> set[BlankNode]:
    nodes = set()
    for t in triples:
        if isinstance(t.subject, BlankNode):
            nodes.add(t.subject)
        if isinstance(t.object, BlankNode):
            nodes.add(t.object)
    return nodes


def _other(term, node: BlankNode):
    if term == node:
        return _SELF
    if isinstance(term, BlankNode):
        return _OTHER_BLANK
    return term


def _incidence(triples: Iterable[Triple]) -> dict[BlankNode, list[Triple]]:
    """Map each blank node to the triples that reference it."""
    incident: dict[BlankNode, list[Triple]] = {}
    for t in triples:
        if isinstance(t.subject, BlankNode):
            incident.setdefault(t.subject, []).append(t)
        if isinstance(t.object, BlankNode) and t.object != t.subject:
            incident.setdefault(t.object, []).append(t)
    return incident


def _signature(node: BlankNode, triples: list[Triple]) -> frozenset:
    entries = Counter()
    for t in triples:
        if t.subject == node:
            entries[("s", t.predicate, _other(t.object, node))] += 1
        if t.object == node:
            entries[("o", t.predicate, _other(t.subject, node))] += 1
    return frozenset(entries.items())


def _apply(triple: Triple, mapping: dict[BlankNode, BlankNode]) -> Optional[Triple]:
    """Rename the blank nodes of a triple, or None if one is still unmapped."""
    subject, obj = triple.subject, triple.object
    if isinstance(subject, BlankNode):
        subject = mapping.get(subject)
        if subject is None:
            return None
    if isinstance(obj, BlankNode):
        obj = mapping.get(obj)
        if obj is None:
            return None
    return Triple(subject, triple.predicate, obj)


def _neighbours(node: BlankNode, triples: list[Triple]) -> set[BlankNode]:
    found = set()
    for t in triples:
        for term in (t.subject, t.object):
            if isinstance(term, BlankNode) and term != node:
                found.add(term)
    return found


def _search_order(
    nodes: set[BlankNode],
    candidates: dict[BlankNode, list[BlankNode]],
    incident: dict[BlankNode, list[Triple]],
) -> list[BlankNode]:
    """
    Order blank nodes so each one follows a neighbour where possible.

    Every component starts at its most constrained node and is walked
    breadth-first, so a node is usually committed after a mapped neighbour
    that pins down its candidates.
    """
    def rank(n: BlankNode):
        return (len(candidates[n]), n.id)

    remaining = set(nodes)
    order = []
    while remaining:
        start = min(remaining, key=rank)
        remaining.discard(start)
        queue = deque([start])
        while queue:
            node = queue.popleft()
            order.append(node)
            for neighbour in sorted(_neighbours(node, incident[node]) & remaining, key=rank):
                remaining.discard(neighbour)
                queue.append(neighbour)
    return order


class _BijectionSearch:
    """
    Backtracking search for a blank-node bijection.

    The search runs on an explicit stack of
    (index, mapping, used, candidate iterator) frames. Each frame holds its
    own copy of the partial mapping, so a failed branch never has to undo
    anything.
    """

    def __init__(
        self,
        order: list[BlankNode],
        candidates: dict[BlankNode, list[BlankNode]],
        incident: dict[BlankNode, list[Triple]],
        source: list[Triple],
        target: set[Triple],
    ):
        self.order = order
        self.candidates = candidates
        self.incident = incident
        self.source = source
        self.target = target
        self.attempts = 0
        self._candidate_sets = {n: set(c) for n, c in candidates.items()}

        self._subjects: dict[tuple, set] = {}
        self._objects: dict[tuple, set] = {}
        for t in target:
            self._subjects.setdefault((t.predicate, t.object), set()).add(t.subject)
            self._objects.setdefault((t.subject, t.predicate), set()).add(t.object)

    def _narrow(self, node: BlankNode, allowed: set) -> list[BlankNode]:
        own = self._candidate_sets[node]
        return sorted((c for c in allowed if c in own), key=lambda n: n.id)

    def _candidates_for(self, node: BlankNode, mapping: dict[BlankNode, BlankNode]) -> list[BlankNode]:
        """Narrow a node's candidates through its first fixed neighbour."""
        for t in self.incident.get(node, ()):
            if t.subject == node and t.object != node:
                other = mapping.get(t.object, t.object)
                if not isinstance(other, BlankNode) or t.object in mapping:
                    return self._narrow(node, self._subjects.get((t.predicate, other), set()))
            elif t.object == node and t.subject != node:
                other = mapping.get(t.subject, t.subject)
                if not isinstance(other, BlankNode) or t.subject in mapping:
                    return self._narrow(node, self._objects.get((other, t.predicate), set()))
        return self.candidates[node]

    def _consistent(self, node: BlankNode, mapping: dict[BlankNode, BlankNode]) -> bool:
        for t in self.incident.get(node, ()):
            mapped = _apply(t, mapping)
            if mapped is not None and mapped not in self.target:
                return False
        return True

    def _verify(self, mapping: dict[BlankNode, BlankNode]) -> bool:
        return {_apply(t, mapping) for t in self.source} == self.target

    def run(self) -> bool:
        if not self.order:
            return self._verify({})

        first = self.order[0]
        stack = [(0, {}, frozenset(), iter(self._candidates_for(first, {})))]
        while stack:
            index, mapping, used, candidates = stack[-1]
            node = self.order[index]
            for candidate in candidates:
                if candidate in used:
                    continue
                self.attempts += 1
                extended = {**mapping, node: candidate}
                if not self._consistent(node, extended):
                    continue
                if index + 1 == len(self.order):
                    if self._verify(extended):
                        return True
                    continue
                following = self.order[index + 1]
                stack.append((
                    index + 1,
                    extended,
                    used | {candidate},
                    iter(self._candidates_for(following, extended)),
                ))
                break
            else:
                stack.pop()
        return False


def is_isomorphic(a: Graph, b: Graph, config: Optional[EngineConfig] = None) -> bool:
    """
    Check whether two graphs are equal up to a renaming of blank nodes.

    Args:
        a: First graph
        b: Second graph
        config: Engine settings (signature pruning on/off)

    Returns:
        True if a blank-node bijection maps ``a`` exactly onto ``b``
    """
    if not isinstance(a, Graph) or not isinstance(b, Graph):
        raise TypeError("is_isomorphic expects two Graph instances")
    config = config or DEFAULT_CONFIG

    if len(a) != len(b):
        logger.debug(f"Not isomorphic: sizes differ ({len(a)} vs {len(b)})")
        return False

    if a.ground_triples() != b.ground_triples():
        logger.debug("Not isomorphic: ground triples differ")
        return False

    source = [t for t in a if not t.is_ground()]
    target = {t for t in b if not t.is_ground()}

    nodes_a = _blank_nodes(source)
    nodes_b = _blank_nodes(target)
    if len(nodes_a) != len(nodes_b):
        logger.debug(
            f"Not isomorphic: blank node counts differ ({len(nodes_a)} vs {len(nodes_b)})"
        )
        return False
    if not nodes_a:
        return True

    incident_a = _incidence(source)
    incident_b = _incidence(target)
    targets = sorted(nodes_b, key=lambda n: n.id)

    if config.use_signatures:
        sig_a = {n: _signature(n, incident_a[n]) for n in nodes_a}
        sig_b = {n: _signature(n, incident_b[n]) for n in nodes_b}
        if Counter(sig_a.values()) != Counter(sig_b.values()):
            logger.debug("Not isomorphic: blank node signatures differ")
            return False
        by_signature: dict[frozenset, list[BlankNode]] = {}
        for m in targets:
            by_signature.setdefault(sig_b[m], []).append(m)
        candidates = {n: by_signature.get(sig_a[n], []) for n in nodes_a}
    else:
        candidates = {n: list(targets) for n in nodes_a}

    order = _search_order(nodes_a, candidates, incident_a)

    search = _BijectionSearch(order, candidates, incident_a, source, target)
    found = search.run()
    logger.debug(
        f"Isomorphism search over {len(order)} blank nodes: "
        f"{'match' if found else 'no match'} after {search.attempts} attempts"
    )
    return found


def equals(a: Graph, b: Graph) -> bool:
    """Alias of ``is_isomorphic`` with default settings."""
    return is_isomorphic(a, b)
