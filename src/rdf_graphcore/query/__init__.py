"""
Conjunctive triple-pattern queries over a Graph.
"""

from rdf_graphcore.query.grouping import group_by_variable
from rdf_graphcore.query.matcher import PatternMatcher, where

__all__ = [
    "group_by_variable",
    "PatternMatcher",
    "where",
]
