"""
Basic graph pattern matching.

A list of triple patterns is evaluated as a conjunctive query. The patterns
are split into groups that share no variables; each group is solved with a
backtracking join, and the result is the graph of every triple used by at
least one solution of its group. Results of the groups are unioned.

Matching rules for one pattern position:
- a concrete term must equal the triple's term
- a bound variable must equal its bound value
- an unbound variable matches anything and extends the bindings
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterator, Optional, Sequence

from rdf_graphcore.config import ConfigValidator, DEFAULT_CONFIG, EngineConfig
from rdf_graphcore.graph import Graph
from rdf_graphcore.models import Triple, TriplePattern
from rdf_graphcore.query.grouping import group_by_variable
from rdf_graphcore.terms import Term, Variable

logger = logging.getLogger(__name__)

Bindings = dict[str, Term]


def _pattern_selectivity(pattern: TriplePattern) -> float:
    """Lower is more selective; bound subjects narrow the most."""
    score = 1.0
    if not isinstance(pattern.subject, Variable):
        score *= 0.001
    if not isinstance(pattern.predicate, Variable):
        score *= 0.1
    if not isinstance(pattern.object, Variable):
        score *= 0.01
    return score


def _match(pattern: TriplePattern, triple: Triple, bindings: Bindings) -> Optional[Bindings]:
    """
    Match one triple against a pattern under the current bindings.

    Returns:
        The (possibly extended) bindings, or None if the triple does not fit.
        The input bindings are never modified.
    """
    extended = bindings
    for pattern_term, term in zip(pattern, triple):
        if isinstance(pattern_term, Variable):
            bound = extended.get(pattern_term.name)
            if bound is None:
                if extended is bindings:
                    extended = dict(bindings)
                extended[pattern_term.name] = term
            elif bound != term:
                return None
        elif pattern_term != term:
            return None
    return extended


class _TripleIndex:
    """Per-position lookup tables over one graph snapshot."""

    def __init__(self, graph: Graph):
        self.all = graph.triples()
        self.positions: tuple[dict, dict, dict] = ({}, {}, {})
        for triple in self.all:
            for table, term in zip(self.positions, triple):
                table.setdefault(term, []).append(triple)

    def candidates(self, pattern: TriplePattern, bindings: Bindings) -> list[Triple]:
        """Return the smallest triple list that can hold a match."""
        best = self.all
        for table, term in zip(self.positions, pattern):
            if isinstance(term, Variable):
                term = bindings.get(term.name)
                if term is None:
                    continue
            found = table.get(term, [])
            if len(found) < len(best):
                best = found
        return best


class PatternMatcher:
    """
    Evaluates triple patterns against a graph.

    Example:
        matcher = PatternMatcher()
        result = matcher.where(graph, [
            TriplePattern(variable("w"), uri("hasMainTitle"), literal("Le Cosmicomiche")),
            TriplePattern(variable("p"), uri("isPublicationOf"), variable("w")),
        ])
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or DEFAULT_CONFIG
        ConfigValidator.validate_or_raise(self.config)

    def _order(self, group: Sequence[TriplePattern]) -> list[TriplePattern]:
        if self.config.pattern_order == "given":
            return list(group)
        # sorted() is stable, so ties keep their input order
        return sorted(group, key=_pattern_selectivity)

    def _search(
        self,
        index: _TripleIndex,
        patterns: list[TriplePattern],
        position: int,
        bindings: Bindings,
        path: tuple[Triple, ...],
    ) -> Iterator[tuple[Bindings, tuple[Triple, ...]]]:
        if position == len(patterns):
            yield bindings, path
            return

        pattern = patterns[position]
        for triple in index.candidates(pattern, bindings):
            extended = _match(pattern, triple, bindings)
            if extended is None:
                continue
            yield from self._search(index, patterns, position + 1, extended, path + (triple,))

    def solutions(self, graph: Graph, group: Sequence[TriplePattern]) -> Iterator[Bindings]:
        """
        Yield every variable binding that satisfies all patterns of a group.

        Bindings map variable names to graph terms. A group without
        variables yields one empty binding when all its patterns are present.
        """
        index = _TripleIndex(graph)
        for bindings, _ in self._search(index, self._order(group), 0, {}, ()):
            yield bindings

    def _evaluate_group(self, index: _TripleIndex, group: list[TriplePattern]) -> dict[Triple, None]:
        used: dict[Triple, None] = {}
        solutions = 0
        for _, path in self._search(index, self._order(group), 0, {}, ()):
            solutions += 1
            for triple in path:
                used[triple] = None
        logger.debug(
            f"Pattern group of {len(group)} patterns: "
            f"{solutions} solutions, {len(used)} triples"
        )
        return used

    def where(self, graph: Graph, patterns: Sequence[TriplePattern]) -> Graph:
        """
        Return a new graph with every triple used by a solution.

        Args:
            graph: The graph to match against
            patterns: Triple patterns, joined on shared variables

        Returns:
            A Graph; empty when there are no patterns or no solutions
        """
        result = Graph()
        if not patterns:
            return result

        groups = group_by_variable(patterns)
        index = _TripleIndex(graph)

        if self.config.parallel_groups and len(groups) > 1:
            workers = min(self.config.max_workers, len(groups))
            logger.debug(f"Evaluating {len(groups)} pattern groups on {workers} threads")
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [executor.submit(self._evaluate_group, index, g) for g in groups]
                group_results = [future.result() for future in futures]
        else:
            group_results = [self._evaluate_group(index, g) for g in groups]

        for used in group_results:
            result.update(used)
        return result


def where(
    graph: Graph,
    patterns: Sequence[TriplePattern],
    config: Optional[EngineConfig] = None,
) -> Graph:
    """Evaluate ``patterns`` against ``graph``; see ``PatternMatcher.where``."""
    return PatternMatcher(config).where(graph, patterns)
