"""
Tests for triple-pattern matching.
"""

import pytest

from rdf_graphcore import (
    EngineConfig,
    Graph,
    PatternMatcher,
    Triple,
    TriplePattern,
    ConfigValidationError,
    equals,
    lang_literal,
    literal,
    typed_literal,
    uri,
    variable,
    where,
)
from rdf_graphcore.formats import decode, encode

XSD_GYEAR = "http://www.w3.org/2001/XMLSchema#gYear"

LIBRARY = """
<a1> <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> <Person> .
<a1> <hasName> "Italo Calvino" .
<a1> <hasBirthYear> "1923"^^<http://www.w3.org/2001/XMLSchema#gYear> .
<a1> <hasDeathYear> "1985"^^<http://www.w3.org/2001/XMLSchema#gYear> .

<w1> <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> <Work> .
<w1> <hasMainTitle> "Le Cosmicomiche" .
<w1> <hasPublicationYear> "1965"^^<http://www.w3.org/2001/XMLSchema#gYear> .
<w1> <hasContributor> _:c1 .

_:c1 <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> <Contribution> .
_:c1 <hasRole> <author> .
_:c1 <hasAgent> <a1> .

<p1> <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> <Publication> .
<p1> <isPublicationOf> <w1> .
<p1> <hasMainTitle> "The Complete Cosmicomics" .
<p1> <hasISBN> "9781846141652" .
<p1> <hasPublishYear> "2009"^^<http://www.w3.org/2001/XMLSchema#gYear> .
<p1> <isPublishedBy> <c1> .
<p1> <hasContributor> _:c2 .
<p1> <hasContributor> _:c3 .
<p1> <hasContributor> _:c4 .
<p1> <hasAbstract> "The definitive edition of Calvino’s cosmicomics, bringing together all of these enchanting stories—including some never before translated — in one volume for the first time" .

_:c2 <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> <Contribution> .
_:c2 <hasRole> <translator> .
_:c2 <hasAgent> <a2> .

_:c3 <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> <Contribution> .
_:c3 <hasRole> <translator> .
_:c3 <hasAgent> <a3> .

_:c4 <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> <Contribution> .
_:c4 <hasRole> <translator> .
_:c4 <hasAgent> <a4> .

<a2> <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> <Person> .
<a2> <hasName> "Martin L. McLaughlin" .

<a3> <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> <Person> .
<a3> <hasName> "Tim Parks" .

<a4> <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> <Person> .
<a4> <hasName> "William Weaver" .

<c1> <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> <Corporation> .
<c1> <hasName> "Penguin" .

<w2> <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> <Work> .
<w2> <hasMainTitle> "Il barone rampante" .
<w2> <hasPublicationYear> "1957"^^<http://www.w3.org/2001/XMLSchema#gYear> .
<w2> <hasContributor> _:c5 .

_:c5 <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> <Contribution> .
_:c5 <hasRole> <author> .
_:c5 <hasAgent> <a1> .

<p2> <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> <Publication> .
<p2> <isPublicationOf> <w2> .
<p2> <hasMainTitle> "Klatrebaronen" .
<p2> <hasPublishYear> "1961"^^<http://www.w3.org/2001/XMLSchema#gYear> .
<p2> <isPublishedBy> <c2> .
<p2> <hasContributor> _:c6 .

_:c6 <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> <Contribution> .
_:c6 <hasRole> <translator> .
_:c6 <hasAgent> <a4> .

<a5> <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> <Person> .
<a5> <hasName> "Ingeborg Hagemann" .

<c1> <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> <Corporation> .
<c1> <hasName> "Gyldendal" .
"""


@pytest.fixture(scope="module")
def library():
    return decode(LIBRARY)


def tp(s, p, o):
    return TriplePattern(s, p, o)


QUERIES = [
    pytest.param([], "", id="no-patterns"),
    pytest.param(
        [tp(variable("pub"), uri("hasMainTitle"), variable("title"))],
        """
        <w1> <hasMainTitle> "Le Cosmicomiche" .
        <p1> <hasMainTitle> "The Complete Cosmicomics" .
        <w2> <hasMainTitle> "Il barone rampante" .
        <p2> <hasMainTitle> "Klatrebaronen" .
        """,
        id="all-titles",
    ),
    pytest.param(
        [tp(uri("p2"), uri("hasPublishYear"), typed_literal("1961", XSD_GYEAR))],
        '<p2> <hasPublishYear> "1961"^^<http://www.w3.org/2001/XMLSchema#gYear> .',
        id="ground-pattern",
    ),
    pytest.param(
        [tp(uri("p2"), variable("p"), variable("o"))],
        """
        <p2> <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> <Publication> .
        <p2> <isPublicationOf> <w2> .
        <p2> <hasMainTitle> "Klatrebaronen" .
        <p2> <hasPublishYear> "1961"^^<http://www.w3.org/2001/XMLSchema#gYear> .
        <p2> <isPublishedBy> <c2> .
        <p2> <hasContributor> _:1 .
        """,
        id="describe-subject",
    ),
    pytest.param(
        [tp(variable("s"), variable("p"), literal("Penguin"))],
        '<c1> <hasName> "Penguin" .',
        id="plain-literal",
    ),
    pytest.param(
        [tp(variable("s"), variable("p"), lang_literal("Penguin", "en"))],
        "",
        id="language-tagged-literal",
    ),
    pytest.param(
        [
            tp(variable("w"), uri("hasMainTitle"), literal("Le Cosmicomiche")),
            tp(variable("p"), uri("isPublicationOf"), variable("w")),
            tp(variable("p"), uri("hasMainTitle"), variable("pubTitle")),
        ],
        """
        <w1> <hasMainTitle> "Le Cosmicomiche" .
        <p1> <isPublicationOf> <w1> .
        <p1> <hasMainTitle> "The Complete Cosmicomics" .
        """,
        id="three-way-join",
    ),
    pytest.param(
        [
            tp(uri("p1"), uri("hasContributor"), variable("c")),
            tp(variable("c"), uri("hasRole"), uri("translator")),
            tp(variable("c"), uri("hasAgent"), variable("agent")),
            tp(variable("agent"), uri("hasName"), variable("name")),
        ],
        """
        <p1> <hasContributor> _:x2 .
        <p1> <hasContributor> _:x3 .
        <p1> <hasContributor> _:x4 .
        _:x2 <hasRole> <translator> .
        _:x2 <hasAgent> <a2> .
        _:x3 <hasRole> <translator> .
        _:x3 <hasAgent> <a3> .
        _:x4 <hasRole> <translator> .
        _:x4 <hasAgent> <a4> .
        <a2> <hasName> "Martin L. McLaughlin" .
        <a3> <hasName> "Tim Parks" .
        <a4> <hasName> "William Weaver" .
        """,
        id="multiple-translators",
    ),
]


class TestWhere:
    @pytest.mark.parametrize("patterns,expected", QUERIES)
    def test_query(self, library, patterns, expected):
        got = library.where(patterns)
        assert equals(got, decode(expected)), encode(got)

    @pytest.mark.parametrize("patterns,expected", QUERIES)
    def test_given_order_same_result(self, library, patterns, expected):
        matcher = PatternMatcher(EngineConfig(pattern_order="given"))
        assert equals(matcher.where(library, patterns), decode(expected))

    def test_match_everything(self, library):
        result = where(library, [tp(variable("s"), variable("p"), variable("o"))])
        assert equals(result, library)
        assert len(result) == len(library)

    def test_empty_graph(self):
        assert len(where(Graph(), [tp(variable("s"), variable("p"), variable("o"))])) == 0

    def test_returns_new_graph(self, library):
        result = library.where([tp(variable("s"), variable("p"), variable("o"))])
        assert result is not library

    def test_unsatisfied_join(self, library):
        patterns = [
            tp(variable("w"), uri("hasMainTitle"), literal("Klatrebaronen")),
            tp(variable("p"), uri("isPublicationOf"), variable("w")),
        ]
        assert len(library.where(patterns)) == 0

    def test_missing_ground_pattern(self, library):
        patterns = [tp(uri("p2"), uri("hasISBN"), literal("9781846141652"))]
        assert len(library.where(patterns)) == 0

    def test_groups_are_unioned(self, library):
        patterns = [
            tp(variable("x"), uri("hasName"), literal("Penguin")),
            tp(variable("y"), uri("hasName"), literal("Nobody")),
            tp(uri("p1"), uri("hasISBN"), literal("9781846141652")),
        ]
        expected = decode(
            '<c1> <hasName> "Penguin" .\n'
            '<p1> <hasISBN> "9781846141652" .'
        )
        assert equals(library.where(patterns), expected)

    def test_repeated_variable_in_pattern(self):
        g = decode("<a> <knows> <a> .\n<a> <knows> <b> .")
        result = g.where([tp(variable("x"), uri("knows"), variable("x"))])
        assert equals(result, decode("<a> <knows> <a> ."))

    def test_variable_predicate_join(self):
        g = decode("<a> <p> <b> .\n<b> <p> <c> .\n<b> <q> <c> .")
        patterns = [
            tp(uri("a"), variable("rel"), variable("mid")),
            tp(variable("mid"), variable("rel"), variable("end")),
        ]
        assert equals(g.where(patterns), decode("<a> <p> <b> .\n<b> <p> <c> ."))

    def test_blank_node_in_pattern(self):
        g = decode("_:n <p> <a> .\n_:m <p> <b> .")
        result = g.where([tp(g.triples()[0].subject, uri("p"), variable("o"))])
        assert result.triples() == [g.triples()[0]]

    def test_explicit_string_datatype_matches_plain(self, library):
        pattern = tp(
            variable("s"),
            uri("hasName"),
            typed_literal("Penguin", "http://www.w3.org/2001/XMLSchema#string"),
        )
        assert equals(library.where([pattern]), decode('<c1> <hasName> "Penguin" .'))


class TestParallelGroups:
    def test_parallel_matches_sequential(self, library):
        patterns = [
            tp(variable("pub"), uri("hasMainTitle"), variable("title")),
            tp(variable("x"), uri("hasName"), literal("Penguin")),
            tp(variable("w"), uri("hasPublicationYear"), variable("year")),
        ]
        sequential = PatternMatcher().where(library, patterns)
        parallel = PatternMatcher(EngineConfig(parallel_groups=True, max_workers=2)).where(
            library, patterns
        )
        assert len(sequential) == 7
        assert equals(parallel, sequential)

    def test_invalid_config_rejected(self):
        with pytest.raises(ConfigValidationError):
            PatternMatcher(EngineConfig(max_workers=0))


class TestSolutions:
    def test_bindings(self, library):
        group = [
            tp(variable("w"), uri("hasMainTitle"), literal("Le Cosmicomiche")),
            tp(variable("p"), uri("isPublicationOf"), variable("w")),
        ]
        solutions = list(PatternMatcher().solutions(library, group))
        assert solutions == [{"w": uri("w1"), "p": uri("p1")}]

    def test_every_assignment_reported(self, library):
        group = [tp(variable("c"), uri("hasRole"), uri("translator"))]
        solutions = list(PatternMatcher().solutions(library, group))
        assert len(solutions) == 4

    def test_ground_group(self, library):
        group = [tp(uri("c1"), uri("hasName"), literal("Penguin"))]
        assert list(PatternMatcher().solutions(library, group)) == [{}]

    def test_no_solution(self, library):
        group = [tp(variable("s"), uri("hasName"), literal("Nobody"))]
        assert list(PatternMatcher().solutions(library, group)) == []


def test_triple_matching_does_not_touch_input(library):
    before = library.triples()
    library.where([tp(variable("s"), uri("hasName"), variable("name"))])
    assert library.triples() == before
    assert isinstance(before[0], Triple)
