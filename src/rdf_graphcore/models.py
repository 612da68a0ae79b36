"""
Triples and triple patterns.

A Triple holds concrete terms only. A TriplePattern may hold a Variable in
any position. Position legality is checked when the record is built, so the
matching and isomorphism code never sees an ill-formed statement.
"""

from dataclasses import dataclass
from typing import Iterator

from rdf_graphcore.terms import (
    BlankNode,
    Object,
    OBJECT_TYPES,
    PatternTerm,
    Predicate,
    PREDICATE_TYPES,
    Subject,
    SUBJECT_TYPES,
    TermPositionError,
    Variable,
)


POSITIONS = ("subject", "predicate", "object")


def _check_position(position: str, term, allowed: tuple) -> None:
    if not isinstance(term, allowed):
        kinds = ", ".join(t.__name__ for t in allowed)
        raise TermPositionError(
            f"{type(term).__name__} is not valid as {position} (expected {kinds})"
        )


@dataclass(frozen=True)
class Triple:
    """
    An RDF Triple, also known as an RDF statement.

    subject is a URI or BlankNode, predicate a URI, object a URI, BlankNode
    or Literal.
    """
    subject: Subject
    predicate: Predicate
    object: Object

    def __post_init__(self):
        _check_position("subject", self.subject, SUBJECT_TYPES)
        _check_position("predicate", self.predicate, PREDICATE_TYPES)
        _check_position("object", self.object, OBJECT_TYPES)

    def __iter__(self) -> Iterator:
        return iter((self.subject, self.predicate, self.object))

    def __str__(self) -> str:
        return f"{self.subject} {self.predicate} {self.object} ."

    def is_ground(self) -> bool:
        """True when no position holds a blank node."""
        return not (
            isinstance(self.subject, BlankNode) or isinstance(self.object, BlankNode)
        )


@dataclass(frozen=True)
class TriplePattern:
    """
    A basic graph pattern matching triples in a graph.

    Each position can be a variable (for matching) or a concrete term (for
    filtering).
    """
    subject: PatternTerm
    predicate: PatternTerm
    object: PatternTerm

    def __post_init__(self):
        _check_position("pattern subject", self.subject, SUBJECT_TYPES + (Variable,))
        _check_position("pattern predicate", self.predicate, PREDICATE_TYPES + (Variable,))
        _check_position("pattern object", self.object, OBJECT_TYPES + (Variable,))

    def __iter__(self) -> Iterator:
        return iter((self.subject, self.predicate, self.object))

    def __str__(self) -> str:
        return f"{self.subject} {self.predicate} {self.object} ."

    def get_variables(self) -> set[Variable]:
        """Return all variables in this pattern."""
        return {term for term in self if isinstance(term, Variable)}

    def is_ground(self) -> bool:
        """True when the pattern holds no variables."""
        return not self.get_variables()

    @classmethod
    def from_triple(cls, triple: Triple) -> "TriplePattern":
        return cls(triple.subject, triple.predicate, triple.object)
