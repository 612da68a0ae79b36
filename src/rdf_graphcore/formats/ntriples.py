"""
N-Triples Parser and Serializer using pyparsing.

Grammar:
  ntriplesDoc ::= triple? (EOL triple)* EOL?
  triple      ::= subject predicate object '.'
  subject     ::= IRIREF | BLANK_NODE_LABEL
  predicate   ::= IRIREF
  object      ::= IRIREF | BLANK_NODE_LABEL | literal
  literal     ::= STRING_LITERAL_QUOTE ('^^' IRIREF | LANGTAG)?

Statements may be separated by any whitespace, and '#' starts a comment
that runs to the end of the line.

Reference: https://www.w3.org/TR/n-triples/
"""

import logging
import re
from typing import Iterable, Optional, Union

import pyparsing as pp
from pyparsing import Group, Opt, Regex, StringEnd, Suppress, ZeroOrMore

from rdf_graphcore.graph import Graph
from rdf_graphcore.models import Triple
from rdf_graphcore.terms import BlankNode, Literal, Term, TermError, URI

logger = logging.getLogger(__name__)


class NTriplesParseError(ValueError):
    """Raised when N-Triples input cannot be decoded."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.line = line
        self.column = column
        if line is not None:
            message = f"line {line}, column {column}: {message}"
        super().__init__(message)


_ECHARS = {
    "t": "\t",
    "b": "\b",
    "n": "\n",
    "r": "\r",
    "f": "\f",
    '"': '"',
    "'": "'",
    "\\": "\\",
}

_ESCAPE = re.compile(r"\\(?:u([0-9A-Fa-f]{4})|U([0-9A-Fa-f]{8})|(.))", re.DOTALL)


def unescape(value: str) -> str:
    """Resolve ECHAR and UCHAR escapes in a string literal body."""
    def replace(match: re.Match) -> str:
        short, long, char = match.groups()
        if short or long:
            return chr(int(short or long, 16))
        if char in _ECHARS:
            return _ECHARS[char]
        raise NTriplesParseError(f"Invalid escape sequence: \\{char}")

    return _ESCAPE.sub(replace, value)


class NTriplesParser:
    """
    Parser for N-Triples documents.

    Produces Triple objects; blank-node labels are kept as they appear in
    the document.
    """

    def __init__(self):
        self._build_grammar()

    def _build_grammar(self):
        """Build the pyparsing grammar for N-Triples."""

        # =================================================================
        # Terms
        # =================================================================

        def make_iri(tokens):
            return URI(tokens[0][1:-1])

        iriref = Regex(r'<[^<>"{}|^`\\\x00-\x20]*>').set_parse_action(make_iri)

        def make_blank_node(tokens):
            return BlankNode(tokens[0][2:])

        blank_node = Regex(r"_:\w(?:[\w.\-]*[\w\-])?").set_parse_action(make_blank_node)

        string_literal = Regex(r'"(?:[^"\\\n\r]|\\.)*"')
        lang_tag = Regex(r"@[a-zA-Z]+(?:-[a-zA-Z0-9]+)*").leave_whitespace()
        datatype = Suppress(pp.Literal("^^").leave_whitespace()) + iriref.copy().leave_whitespace()

        def make_literal(tokens):
            value = unescape(tokens[0][1:-1])
            if len(tokens) > 1:
                if isinstance(tokens[1], URI):
                    return Literal.typed(value, tokens[1])
                return Literal.lang(value, tokens[1][1:])
            return Literal(value)

        literal = (string_literal + Opt(lang_tag | datatype)).set_parse_action(make_literal)

        # =================================================================
        # Statements
        # =================================================================

        subject = iriref | blank_node
        obj = iriref | blank_node | literal

        def make_triple(tokens):
            s, p, o = tokens[0]
            return Triple(s, p, o)

        triple = Group(subject + iriref + obj + Suppress(".")).set_parse_action(make_triple)

        comment = Regex(r"#[^\n]*")

        self._term = (obj + StringEnd()).parse_with_tabs()
        self._document = (ZeroOrMore(triple) + StringEnd()).parse_with_tabs()
        self._document.ignore(comment)

    def parse(self, text: str) -> list[Triple]:
        """
        Parse an N-Triples document.

        Raises:
            NTriplesParseError: If the text is not valid N-Triples
        """
        try:
            triples = list(self._document.parse_string(text, parse_all=True))
        except pp.ParseBaseException as e:
            raise NTriplesParseError(e.msg, line=e.lineno, column=e.col) from e
        except TermError as e:
            raise NTriplesParseError(str(e)) from e
        logger.debug(f"Decoded {len(triples)} triples")
        return triples

    def parse_term(self, text: str) -> Term:
        """Parse a single term in N-Triples notation."""
        try:
            return self._term.parse_string(text.strip(), parse_all=True)[0]
        except pp.ParseBaseException as e:
            raise NTriplesParseError(e.msg, line=e.lineno, column=e.col) from e
        except TermError as e:
            raise NTriplesParseError(str(e)) from e


class NTriplesSerializer:
    """Serializer for N-Triples documents, one statement per line."""

    def __init__(self, sort: bool = False):
        self.sort = sort

    def serialize(self, triples: Iterable[Triple]) -> str:
        lines = [str(t) for t in triples]
        if self.sort:
            lines.sort()
        return "".join(f"{line}\n" for line in lines)


_parser: Optional[NTriplesParser] = None


def _get_parser() -> NTriplesParser:
    global _parser
    if _parser is None:
        _parser = NTriplesParser()
    return _parser


def decode_triples(text: str) -> list[Triple]:
    """Decode N-Triples text into a list of triples (duplicates kept)."""
    return _get_parser().parse(text)


def decode(text: str) -> Graph:
    """Decode N-Triples text into a Graph."""
    return Graph(decode_triples(text))


def parse_term(text: str) -> Term:
    """Decode one term, e.g. ``<http://example.org/a>`` or ``"chat"@fr``."""
    return _get_parser().parse_term(text)


def encode(triples: Union[Graph, Iterable[Triple]], sort: bool = False) -> str:
    """Encode a graph or triple sequence as N-Triples text."""
    return NTriplesSerializer(sort=sort).serialize(triples)
