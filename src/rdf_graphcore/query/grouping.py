"""
Partition triple patterns into independent groups.

Two patterns belong to the same group when they are connected through a
chain of shared variables. Groups share no variables, so each can be
evaluated on its own.
"""

from typing import Sequence

from rdf_graphcore.models import TriplePattern
from rdf_graphcore.terms import Variable


class _VariableSets:
    """Union-find over variables."""

    def __init__(self):
        self._parent: dict[Variable, Variable] = {}

    def find(self, var: Variable) -> Variable:
        parent = self._parent.setdefault(var, var)
        while parent != var:
            grandparent = self._parent[parent]
            self._parent[var] = grandparent
            var, parent = parent, grandparent
        return var

    def union(self, a: Variable, b: Variable) -> None:
        root_a, root_b = self.find(a), self.find(b)
        if root_a != root_b:
            self._parent[root_b] = root_a


def _ordered_variables(pattern: TriplePattern) -> list[Variable]:
    seen = []
    for term in pattern:
        if isinstance(term, Variable) and term not in seen:
            seen.append(term)
    return seen


def group_by_variable(patterns: Sequence[TriplePattern]) -> list[list[TriplePattern]]:
    """
    Group patterns connected by shared variables.

    Patterns keep their relative input order inside a group, and groups are
    ordered by the position of their first member. A pattern without
    variables forms a group of its own.

    Example:
        [?a knows ?b], [?c knows <h2>], [?b knows ?c], [<h1> knows <h2>]
        => [[?a knows ?b], [?c knows <h2>], [?b knows ?c]], [[<h1> knows <h2>]]
    """
    sets = _VariableSets()
    pattern_vars = []
    for pattern in patterns:
        variables = _ordered_variables(pattern)
        pattern_vars.append(variables)
        for var in variables[1:]:
            sets.union(variables[0], var)

    groups: dict[object, list[TriplePattern]] = {}
    for index, (pattern, variables) in enumerate(zip(patterns, pattern_vars)):
        key = sets.find(variables[0]) if variables else ("ground", index)
        groups.setdefault(key, []).append(pattern)

    return list(groups.values())
