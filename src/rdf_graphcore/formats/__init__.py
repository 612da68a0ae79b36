"""
Text and tabular formats for graphs.

- N-Triples (.nt): line-based triple notation
- Polars DataFrame: three-column string view
"""

from rdf_graphcore.formats.ntriples import (
    NTriplesParseError,
    NTriplesParser,
    NTriplesSerializer,
    decode,
    decode_triples,
    encode,
    parse_term,
)
from rdf_graphcore.formats.dataframe import from_dataframe, to_dataframe

__all__ = [
    "NTriplesParseError",
    "NTriplesParser",
    "NTriplesSerializer",
    "decode",
    "decode_triples",
    "encode",
    "parse_term",
    "from_dataframe",
    "to_dataframe",
]
