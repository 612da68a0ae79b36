"""
RDF term model.

Terms are immutable value objects of four kinds:

- URI: a globally unique named node
- Literal: a data value with an optional language tag or datatype
- BlankNode: an unnamed node, meaningful only inside one graph
- Variable: a placeholder that only appears in triple patterns

Every term renders to its N-Triples form through ``str()``.
"""

import re
import uuid
from dataclasses import dataclass
from typing import Optional, Union


XSD_STRING = "http://www.w3.org/2001/XMLSchema#string"
RDF_LANGSTRING = "http://www.w3.org/1999/02/22-rdf-syntax-ns#langString"


class TermError(ValueError):
    """Raised when a term cannot be constructed from the given input."""
    pass


class TermPositionError(TermError):
    """Raised when a term kind is not allowed in a triple position."""
    pass


# Characters never allowed inside an IRIREF
_INVALID_URI_CHARS = re.compile(r'[\x00-\x20<>"{}|^`\\]')
_LANG_TAG = re.compile(r"^[a-zA-Z]+(-[a-zA-Z0-9]+)*$")
_NAME = re.compile(r"^\w[\w.\-]*$")
# Same as an N-Triples BLANK_NODE_LABEL: no trailing '.'
_BLANK_LABEL = re.compile(r"^\w(?:[\w.\-]*[\w\-])?$")

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def escape_string(value: str) -> str:
    """Escape a literal's lexical form for N-Triples output."""
    return "".join(_ESCAPES.get(ch, ch) for ch in value)


# =============================================================================
# Term Types
# =============================================================================

@dataclass(frozen=True)
class URI:
    """
    A URI; a globally unique named RDF node.

    Two URIs are equal iff their identifier strings are equal.
    """
    value: str

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value:
            raise TermError("URI cannot be empty")
        if _INVALID_URI_CHARS.search(self.value):
            raise TermError(f"URI contains invalid characters: {self.value!r}")

    def __str__(self) -> str:
        return f"<{self.value}>"


@dataclass(frozen=True)
class Literal:
    """
    An RDF Literal.

    A literal carries either a language tag or a datatype, never both. The
    datatype is normalized on construction: plain literals get ``xsd:string``
    and language-tagged literals get ``rdf:langString``. A plain literal is
    therefore equal to the same value annotated explicitly with
    ``xsd:string``.
    """
    value: str
    language: Optional[str] = None
    datatype: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.value, str):
            raise TermError(f"Literal value must be a string, got {type(self.value).__name__}")

        if self.language is not None:
            if not _LANG_TAG.fullmatch(self.language):
                raise TermError(f"Invalid language tag: {self.language!r}")
            if self.datatype is not None and self.datatype != RDF_LANGSTRING:
                raise TermError("Literal cannot have both a language tag and a datatype")
            object.__setattr__(self, "datatype", RDF_LANGSTRING)
        elif self.datatype is None:
            object.__setattr__(self, "datatype", XSD_STRING)
        else:
            if self.datatype == RDF_LANGSTRING:
                raise TermError("rdf:langString literal requires a language tag")
            # Validates the datatype IRI
            URI(self.datatype)

    @classmethod
    def typed(cls, value: str, datatype: Union["URI", str]) -> "Literal":
        """Create a literal with an explicit datatype."""
        if isinstance(datatype, URI):
            datatype = datatype.value
        return cls(value, datatype=datatype)

    @classmethod
    def lang(cls, value: str, language: str) -> "Literal":
        """Create a language-tagged literal."""
        return cls(value, language=language)

    @property
    def datatype_uri(self) -> URI:
        return URI(self.datatype)

    def __str__(self) -> str:
        base = f'"{escape_string(self.value)}"'
        if self.language:
            return f"{base}@{self.language}"
        if self.datatype == XSD_STRING:
            return base
        return f"{base}^^<{self.datatype}>"


@dataclass(frozen=True)
class BlankNode:
    """
    A Blank Node; an unnamed RDF node.

    The identifier only addresses the node inside the graph that holds it.
    Comparing blank nodes of two different graphs by identifier says nothing
    about the graphs; use ``rdf_graphcore.isomorphism`` for that.
    """
    id: str

    def __post_init__(self):
        if not isinstance(self.id, str) or not _BLANK_LABEL.fullmatch(self.id):
            raise TermError(f"Invalid blank node identifier: {self.id!r}")

    def __str__(self) -> str:
        return f"_:{self.id}"


@dataclass(frozen=True)
class Variable:
    """
    A query variable (e.g. ?name).

    Variables are bound to graph terms while matching patterns and never
    appear in a stored triple.
    """
    name: str

    def __post_init__(self):
        if not isinstance(self.name, str) or not _NAME.fullmatch(self.name):
            raise TermError(f"Invalid variable name: {self.name!r}")

    def __str__(self) -> str:
        return f"?{self.name}"


# Concrete terms that can appear in a stored triple
Term = Union[URI, Literal, BlankNode]

# Terms allowed per triple position
Subject = Union[URI, BlankNode]
Predicate = URI
Object = Union[URI, BlankNode, Literal]

# Anything that can appear in a triple pattern
PatternTerm = Union[URI, Literal, BlankNode, Variable]

SUBJECT_TYPES = (URI, BlankNode)
PREDICATE_TYPES = (URI,)
OBJECT_TYPES = (URI, BlankNode, Literal)


# =============================================================================
# Construction helpers
# =============================================================================

def uri(value: str) -> URI:
    return URI(value)


def literal(value: str) -> Literal:
    """Create a plain (xsd:string) literal."""
    return Literal(value)


def lang_literal(value: str, language: str) -> Literal:
    return Literal(value, language=language)


def typed_literal(value: str, datatype: Union[URI, str]) -> Literal:
    return Literal.typed(value, datatype)


def bnode(id: Optional[str] = None) -> BlankNode:
    """Create a blank node, generating a fresh identifier when none is given."""
    if id is None:
        id = f"b{uuid.uuid4().hex}"
    return BlankNode(id)


def variable(name: str) -> Variable:
    return Variable(name)
