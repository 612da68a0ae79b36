"""
rdf-graphcore: an in-memory RDF graph model.

Graph equality up to blank-node renaming and conjunctive triple-pattern
matching over small, immutable-by-convention graphs.
"""

__version__ = "0.1.0"

from rdf_graphcore.terms import (
    URI,
    Literal,
    BlankNode,
    Variable,
    TermError,
    TermPositionError,
    XSD_STRING,
    RDF_LANGSTRING,
    uri,
    literal,
    lang_literal,
    typed_literal,
    bnode,
    variable,
)
from rdf_graphcore.models import Triple, TriplePattern
from rdf_graphcore.graph import Graph
from rdf_graphcore.isomorphism import equals, is_isomorphic
from rdf_graphcore.query import PatternMatcher, group_by_variable, where
from rdf_graphcore.config import EngineConfig, ConfigValidationError, DEFAULT_CONFIG

__all__ = [
    # Terms
    "URI",
    "Literal",
    "BlankNode",
    "Variable",
    "TermError",
    "TermPositionError",
    "XSD_STRING",
    "RDF_LANGSTRING",
    "uri",
    "literal",
    "lang_literal",
    "typed_literal",
    "bnode",
    "variable",
    # Statements and graphs
    "Triple",
    "TriplePattern",
    "Graph",
    # Operations
    "equals",
    "is_isomorphic",
    "group_by_variable",
    "where",
    "PatternMatcher",
    # Configuration
    "EngineConfig",
    "ConfigValidationError",
    "DEFAULT_CONFIG",
]
