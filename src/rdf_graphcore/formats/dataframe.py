"""
Polars DataFrame interop.

A graph is exposed as a string view with one row per triple and the
columns ``subject``, ``predicate`` and ``object``, each holding the term in
N-Triples notation. This is the same shape a triple store materializes for
column-oriented processing.
"""

import polars as pl

from rdf_graphcore.formats.ntriples import parse_term
from rdf_graphcore.graph import Graph
from rdf_graphcore.models import Triple

COLUMNS = ("subject", "predicate", "object")


def to_dataframe(graph: Graph) -> pl.DataFrame:
    """Materialize a graph as a three-column string DataFrame."""
    triples = graph.triples()
    return pl.DataFrame(
        {
            "subject": [str(t.subject) for t in triples],
            "predicate": [str(t.predicate) for t in triples],
            "object": [str(t.object) for t in triples],
        },
        schema={name: pl.Utf8 for name in COLUMNS},
    )


def from_dataframe(df: pl.DataFrame) -> Graph:
    """
    Build a graph from a DataFrame produced by ``to_dataframe``.

    Raises:
        ValueError: If a required column is missing
        NTriplesParseError: If a cell is not a valid term
    """
    missing = [name for name in COLUMNS if name not in df.columns]
    if missing:
        raise ValueError(f"DataFrame is missing columns: {', '.join(missing)}")

    graph = Graph()
    for s, p, o in df.select(list(COLUMNS)).iter_rows():
        graph.add(Triple(parse_term(s), parse_term(p), parse_term(o)))
    return graph
