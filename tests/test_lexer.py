import pytest
from hypothesis import given
from hypothesis import strategies as st

from jinjalite.jinjalite_constants import TokenType, keyword_hashmap
from jinjalite.jinjalite_lexer import CharacterStream, Lexer, Token


def tokenize(source: str) -> list[Token]:
    stream = CharacterStream(source, 0, 1, 1)
    lexer = Lexer(stream)
    tokens = []
    while True:
        tok = lexer.next_token()
        if tok.type == "EOF":
            break
        tokens.append(tok)
    return tokens


def types_of(source: str) -> list[str]:
    return [t.type for t in tokenize(source)]


def test_plain_text_is_one_token() -> None:
    tokens = tokenize("Hello, world!\nSecond line")
    assert len(tokens) == 1
    assert tokens[0].type == "TEXT"
    assert tokens[0].value == "Hello, world!\nSecond line"


def test_expression_tag_tokens() -> None:
    tokens = tokenize("Hello {{ name }}!")
    assert [(t.type, t.value) for t in tokens] == [
        ("TEXT", "Hello "),
        ("OPEN_EXPRESSION", "{{"),
        ("IDENT", "name"),
        ("CLOSE_EXPRESSION", "}}"),
        ("TEXT", "!"),
    ]


def test_token_positions() -> None:
    tokens = tokenize("ab\n{{ x }}")
    assert (tokens[0].line, tokens[0].col) == (1, 1)
    assert (tokens[1].line, tokens[1].col) == (2, 1)
    assert (tokens[2].line, tokens[2].col) == (2, 4)


def test_statement_keywords() -> None:
    code = "{% if a %}{% elif b %}{% else %}{% endif %}{% for x in y %}{% endfor %}{% set z = 1 %}"
    assert types_of(code) == [
        "OPEN_STATEMENT", "IF", "IDENT", "CLOSE_STATEMENT",
        "OPEN_STATEMENT", "ELIF", "IDENT", "CLOSE_STATEMENT",
        "OPEN_STATEMENT", "ELSE", "CLOSE_STATEMENT",
        "OPEN_STATEMENT", "ENDIF", "CLOSE_STATEMENT",
        "OPEN_STATEMENT", "FOR", "IDENT", "IN", "IDENT", "CLOSE_STATEMENT",
        "OPEN_STATEMENT", "ENDFOR", "CLOSE_STATEMENT",
        "OPEN_STATEMENT", "SET", "IDENT", "EQUALS", "NUMBER", "CLOSE_STATEMENT",
    ]  # fmt: skip


def test_operator_tokens() -> None:
    code = "{{ == != < > <= >= + - * / // % ~ | . , : ( ) [ ] = }}"
    assert types_of(code)[1:-1] == [
        "COMPARISON_OP", "COMPARISON_OP", "COMPARISON_OP", "COMPARISON_OP",
        "COMPARISON_OP", "COMPARISON_OP",
        "ADDITIVE_OP", "ADDITIVE_OP",
        "MULTIPLICATIVE_OP", "MULTIPLICATIVE_OP", "MULTIPLICATIVE_OP",
        "MULTIPLICATIVE_OP", "MULTIPLICATIVE_OP",
        "PIPE", "DOT", "COMMA", "COLON", "LPAREN", "RPAREN", "LBRACK", "RBRACK",
        "EQUALS",
    ]  # fmt: skip


def test_longest_match_operators() -> None:
    tokens = tokenize("{{ a // b <= c }}")
    assert [t.value for t in tokens[1:-1]] == ["a", "//", "b", "<=", "c"]


def test_logical_keywords_and_booleans() -> None:
    assert types_of("{{ not a and b or true is false }}")[1:-1] == [
        "NOT", "IDENT", "AND", "IDENT", "OR", "BOOLEAN", "IS", "BOOLEAN",
    ]  # fmt: skip


def test_not_in_is_single_token() -> None:
    tokens = tokenize("{{ a not  in b }}")
    assert [(t.type, t.value) for t in tokens[1:-1]] == [
        ("IDENT", "a"),
        ("NOT_IN", "not in"),
        ("IDENT", "b"),
    ]


def test_not_followed_by_identifier_starting_with_in() -> None:
    assert types_of("{{ not inner }}")[1:-1] == ["NOT", "IDENT"]


def test_string_token_with_escapes() -> None:
    tokens = tokenize(r"""{{ "a\"b\n" ~ 'it\'s' }}""")
    assert tokens[1].type == "STRING"
    assert tokens[1].value == 'a"b\n'
    assert tokens[3].value == "it's"


def test_number_tokens() -> None:
    tokens = tokenize("{{ 123 + 4.5 }}")
    assert (tokens[1].type, tokens[1].value) == ("NUMBER", "123")
    assert (tokens[3].type, tokens[3].value) == ("NUMBER", "4.5")


def test_numbers_have_no_exponent_form() -> None:
    tokens = tokenize("{{ 1e5 }}")
    assert [(t.type, t.value) for t in tokens[1:3]] == [("NUMBER", "1"), ("IDENT", "e5")]


def test_negative_number_after_operator() -> None:
    tokens = tokenize("{{ [-1, a - 2, a-3] }}")
    values = [t.value for t in tokens[1:-1]]
    assert values == ["[", "-1", ",", "a", "-", "2", ",", "a", "-", "3", "]"]


def test_nested_object_braces_do_not_close_tag() -> None:
    assert types_of("{{ {'a': {'b': 1}} }}") == [
        "OPEN_EXPRESSION",
        "LBRACE", "STRING", "COLON",
        "LBRACE", "STRING", "COLON", "NUMBER", "RBRACE",
        "RBRACE",
        "CLOSE_EXPRESSION",
    ]  # fmt: skip


def test_comments_are_dropped() -> None:
    tokens = tokenize("a{# ignored {{ x }} #}b{# again #}")
    assert [(t.type, t.value) for t in tokens] == [("TEXT", "a"), ("TEXT", "b")]


def test_lone_brace_in_text() -> None:
    tokens = tokenize("f(x) = {x}")
    assert [(t.type, t.value) for t in tokens] == [("TEXT", "f(x) = {x}")]


def test_tokenize_omits_eof() -> None:
    tokens = Lexer(CharacterStream("{{ x }}")).tokenize()
    assert tokens[-1].type == "CLOSE_EXPRESSION"


def test_eof_token_repeats() -> None:
    lexer = Lexer(CharacterStream(""))
    assert lexer.next_token().type == "EOF"
    assert lexer.next_token().type == "EOF"


@pytest.mark.parametrize(
    "source,message",
    [
        ("{{ 'abc }}", "Unterminated string"),
        ("{{ x ", "Unterminated tag"),
        ("{% if x", "Unterminated tag"),
        ("{# never closed", "Unterminated comment"),
        ("{{ x ? y }}", "Unexpected character"),
        ("{{ a ! b }}", "Unexpected character"),
    ],
)
def test_lexer_errors(source: str, message: str) -> None:
    with pytest.raises(SyntaxError, match=message):
        tokenize(source)


def test_token_equality_and_hash() -> None:
    a = Token("IDENT", "x", 1, 2)
    b = Token("IDENT", "x", 1, 2)
    assert a == b
    assert hash(a) == hash(b)
    assert a != Token("IDENT", "x", 1, 3)
    assert a != "IDENT"
    assert repr(a) == "Token(IDENT, x)"


def test_character_stream_peek_and_next() -> None:
    cs = CharacterStream("a\nb")
    assert cs.peek() == "a"
    assert cs.peek(5) == ""
    assert cs.next() == "a"
    assert cs.next() == "\n"
    assert (cs.line, cs.column) == (2, 1)
    assert cs.peek() == "b"
    cs.next()
    assert cs.end_of_file()
    with pytest.raises(Exception, match="past end"):
        cs.next()


def test_character_stream_mark_reset() -> None:
    cs = CharacterStream("abc")
    mark = cs.mark()
    cs.next()
    cs.next()
    cs.reset(mark)
    assert (cs.position, cs.line, cs.column) == (0, 1, 1)


@given(
    st.from_regex(r"[A-Za-z_][A-Za-z0-9_]{0,10}", fullmatch=True).filter(
        lambda s: s not in keyword_hashmap
    )
)  # type: ignore[misc]
def test_identifiers_fuzz(ident: str) -> None:
    tokens = tokenize("{{ " + ident + " }}")
    assert tokens[1].type == TokenType.IDENT
    assert tokens[1].value == ident


@given(st.text(alphabet=st.characters(blacklist_characters="{"), max_size=40))  # type: ignore[misc]
def test_text_without_tags_is_single_token(text: str) -> None:
    tokens = tokenize(text)
    if text:
        assert [t.type for t in tokens] == ["TEXT"]
        assert tokens[0].value == text
    else:
        assert tokens == []
