"""
In-memory RDF graph.

A Graph is a duplicate-free collection of Triples. Iteration follows
insertion order, but order carries no meaning: two graphs compare equal when
they are isomorphic, i.e. identical up to a renaming of blank nodes.
"""

from typing import Iterable, Iterator, Optional, Sequence

from rdf_graphcore.models import Triple, TriplePattern
from rdf_graphcore.terms import BlankNode


class Graph:
    """
    A set of RDF triples.

    Blank-node identifiers in a graph only address nodes within that same
    graph instance.

    Example:
        g = Graph([Triple(uri("s"), uri("p"), literal("o"))])
        g.where([TriplePattern(variable("s"), uri("p"), variable("o"))])
    """

    __hash__ = None

    def __init__(self, triples: Optional[Iterable[Triple]] = None):
        # dict keys give set semantics with stable iteration order
        self._triples: dict[Triple, None] = {}
        if triples is not None:
            self.update(triples)

    # ========== Mutation ==========

    def add(self, triple: Triple) -> bool:
        """
        Add a triple.

        Returns:
            True if the triple was new, False if it was already present
        """
        if not isinstance(triple, Triple):
            raise TypeError(f"Graph can only hold Triple, got {type(triple).__name__}")
        if triple in self._triples:
            return False
        self._triples[triple] = None
        return True

    def update(self, triples: Iterable[Triple]) -> int:
        """Add many triples, returning how many were new."""
        added = 0
        for triple in triples:
            if self.add(triple):
                added += 1
        return added

    def remove(self, triple: Triple) -> bool:
        """Remove a triple, returning False if it was not present."""
        if triple in self._triples:
            del self._triples[triple]
            return True
        return False

    def copy(self) -> "Graph":
        return Graph(self._triples)

    # ========== Read access ==========

    def __len__(self) -> int:
        return len(self._triples)

    def __iter__(self) -> Iterator[Triple]:
        return iter(self._triples)

    def __contains__(self, triple) -> bool:
        return triple in self._triples

    def __bool__(self) -> bool:
        return bool(self._triples)

    def __repr__(self) -> str:
        return f"<Graph with {len(self)} triples>"

    def __str__(self) -> str:
        return "".join(f"{t}\n" for t in self._triples)

    def triples(self) -> list[Triple]:
        return list(self._triples)

    def blank_nodes(self) -> set[BlankNode]:
        """Return every blank node referenced by this graph."""
        nodes = set()
        for triple in self._triples:
            if isinstance(triple.subject, BlankNode):
                nodes.add(triple.subject)
            if isinstance(triple.object, BlankNode):
                nodes.add(triple.object)
        return nodes

    def ground_triples(self) -> set[Triple]:
        """Return the triples that reference no blank node."""
        return {t for t in self._triples if t.is_ground()}

    # ========== Comparison and querying ==========

    def eq(self, other: "Graph") -> bool:
        """Check whether two graphs are equal up to blank-node renaming."""
        from rdf_graphcore.isomorphism import is_isomorphic
        return is_isomorphic(self, other)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Graph):
            return NotImplemented
        return self.eq(other)

    def where(self, patterns: Sequence[TriplePattern], config=None) -> "Graph":
        """
        Return the triples used by at least one solution of the patterns.

        See ``rdf_graphcore.query.matcher.where``.
        """
        from rdf_graphcore.query.matcher import where
        return where(self, patterns, config=config)
