"""
Lexical analyzer for jinjalite templates.

This module provides the components that turn raw template source into the flat
token stream consumed by the parser:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: Represents a single token with type, value, and source location.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Features:
    - Plain text between tags becomes a single `TEXT` token
    - `{# ... #}` comments are dropped
    - Inside `{% ... %}` and `{{ ... }}`:
        * Identifiers and keywords (`not in` collapses into one `NOT_IN` token)
        * Numbers (integer and float, with a folded leading minus where unambiguous)
        * Strings (single or double quoted, with escape sequences)
        * Longest-match operators and punctuation

Raises:
    SyntaxError: On unterminated strings, tags or comments, and unknown characters.

Example:
    >>> lexer = Lexer(CharacterStream("Hi {{ name }}"))
    >>> lexer.next_token()
    Token(TEXT, Hi )

Exports:
    - CharacterStream
    - Token
    - Lexer
    - token_hashmap
"""

from typing import Any

from jinjalite.jinjalite_constants import TokenType, keyword_hashmap, token_hashmap

ESCAPES: dict[str, str] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "'": "'",
    '"': '"',
    "\\": "\\",
}

# A "-" directly followed by a digit is a negative literal only after one of these.
NEGATIVE_NUMBER_CONTEXT: set[str] = {
    TokenType.OPEN_STATEMENT,
    TokenType.OPEN_EXPRESSION,
    TokenType.COMPARISON_OP,
    TokenType.ADDITIVE_OP,
    TokenType.MULTIPLICATIVE_OP,
    TokenType.LPAREN,
    TokenType.LBRACK,
    TokenType.LBRACE,
    TokenType.COMMA,
    TokenType.COLON,
    TokenType.EQUALS,
    TokenType.PIPE,
    TokenType.IN,
    TokenType.NOT_IN,
    TokenType.IS,
    TokenType.NOT,
    TokenType.AND,
    TokenType.OR,
    TokenType.IF,
    TokenType.ELIF,
    TokenType.ELSE,
    TokenType.SET,
}

TAG_OPENERS: dict[str, str] = {
    "{%": TokenType.OPEN_STATEMENT,
    "{{": TokenType.OPEN_EXPRESSION,
}

TAG_CLOSERS: dict[str, str] = {
    TokenType.OPEN_STATEMENT: "%}",
    TokenType.OPEN_EXPRESSION: "}}",
}

# Operators recognised inside a tag; tag delimiters are handled separately.
TAG_OPERATORS: dict[str, str] = {
    k: v
    for k, v in token_hashmap.items()
    if k not in ("{%", "%}", "{{", "}}")
}


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            Exception: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise Exception(
                f"CharacterStreamError: Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character at `offset` without advancing, or "" when out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def startswith(self, text: str) -> bool:
        return self.source.startswith(text, self.position)

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)

    def mark(self) -> tuple[int, int, int]:
        """Returns the current (position, line, column) so it can be restored with `reset`."""
        return self.position, self.line, self.column

    def reset(self, mark: tuple[int, int, int]) -> None:
        self.position, self.line, self.column = mark


class Token:
    """Represents a single lexical token in a jinjalite template.

    Attributes:
        type (str): The canonical token type (e.g. 'IDENT', 'NUMBER', 'EOF').
        value (str): The string payload associated with the token.
        line (int): The 1-based line number where the token appears.
        col (int): The 1-based column number where the token starts.
    """

    def __init__(self, type_: str, value: str, line: int = 0, col: int = 0):
        self.type = type_
        self.value = value
        self.line = line
        self.col = col

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.type, self.value, self.line, self.col))


class Lexer:
    """Lexical analyzer for jinjalite templates.

    The lexer alternates between text mode (outside any tag) and tag mode
    (between `{%`/`%}` or `{{`/`}}`). Tokens are produced one at a time by
    `next_token`; `tokenize` drains the whole stream.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
        open_tag (str | None): Token type of the tag currently open, if any.
        brace_depth (int): Nesting depth of `{` inside an expression tag, used to
            tell a closing `}}` apart from two object-literal braces.
        last_type (str | None): Type of the most recently emitted token.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream
        self.open_tag: str | None = None
        self.brace_depth: int = 0
        self.last_type: str | None = None

    def peek(self) -> str:
        return self.stream.peek()

    def advance(self) -> str:
        return self.stream.next()

    def emit(self, type_: str, value: str, line: int, col: int) -> Token:
        self.last_type = type_
        return Token(type_, value, line, col)

    def skip_whitespace(self) -> None:
        while not self.stream.end_of_file() and self.peek() in " \t\r\n":
            self.advance()

    def skip_comment(self) -> None:
        """Skips a `{# ... #}` comment; the stream must be positioned on `{#`."""
        line, col = self.stream.line, self.stream.column
        self.advance()
        self.advance()
        while not self.stream.startswith("#}"):
            if self.stream.end_of_file():
                raise SyntaxError(f"Unterminated comment at line {line}, col {col}")
            self.advance()
        self.advance()
        self.advance()

    def match_operator(self) -> Token | None:
        """Attempts to match the longest valid operator from the current position.

        Returns:
            Token | None: A Token if a match is found, otherwise None.
        """
        line, col = self.stream.line, self.stream.column
        max_token = None
        match_len = 0
        candidate = ""

        for i in range(2):  # longest operator is two characters
            ch = self.stream.peek(i)
            if ch == "":
                break
            candidate += ch
            if candidate in TAG_OPERATORS:
                max_token = candidate
                match_len = i + 1

        if max_token:
            for _ in range(match_len):
                self.advance()
            return self.emit(TAG_OPERATORS[max_token], max_token, line, col)

        return None

    def read_text(self) -> Token:
        line, col = self.stream.line, self.stream.column
        text = ""
        while not self.stream.end_of_file() and not (
            self.peek() == "{" and self.stream.peek(1) in ("%", "{", "#")
        ):
            text += self.advance()
        return self.emit(TokenType.TEXT, text, line, col)

    def read_identifier(self, line: int, col: int) -> Token:
        ident = ""
        while not self.stream.end_of_file() and (
            self.peek().isalnum() or self.peek() == "_"
        ):
            ident += self.advance()

        if ident == "not":
            # `not in` is a single membership operator
            mark = self.stream.mark()
            self.skip_whitespace()
            if self.stream.startswith("in") and not (
                self.stream.peek(2).isalnum() or self.stream.peek(2) == "_"
            ):
                self.advance()
                self.advance()
                return self.emit(TokenType.NOT_IN, "not in", line, col)
            self.stream.reset(mark)

        if ident in keyword_hashmap:
            return self.emit(keyword_hashmap[ident], ident, line, col)
        return self.emit(TokenType.IDENT, ident, line, col)

    def read_number(self, line: int, col: int, prefix: str = "") -> Token:
        num = prefix
        while not self.stream.end_of_file() and self.peek().isdigit():
            num += self.advance()
        if self.peek() == "." and self.stream.peek(1).isdigit():
            num += self.advance()
            while not self.stream.end_of_file() and self.peek().isdigit():
                num += self.advance()
        return self.emit(TokenType.NUMBER, num, line, col)

    def read_string(self, line: int, col: int) -> Token:
        quote = self.advance()
        val = ""
        while not self.stream.end_of_file():
            ch = self.peek()
            if ch == "\\":
                self.advance()
                if self.stream.end_of_file():
                    break
                escaped = self.advance()
                val += ESCAPES.get(escaped, "\\" + escaped)
            elif ch == quote:
                self.advance()
                return self.emit(TokenType.STRING, val, line, col)
            else:
                val += self.advance()
        raise SyntaxError(f"Unterminated string at line {line}, col {col}")

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Raises:
            SyntaxError: If a malformed token is encountered.
        """
        if self.open_tag is None:
            while self.stream.startswith("{#"):
                self.skip_comment()
            line, col = self.stream.line, self.stream.column
            if self.stream.end_of_file():
                return Token(TokenType.EOF, "EOF", line, col)
            for opener, type_ in TAG_OPENERS.items():
                if self.stream.startswith(opener):
                    self.advance()
                    self.advance()
                    self.open_tag = type_
                    self.brace_depth = 0
                    return self.emit(type_, opener, line, col)
            return self.read_text()

        self.skip_whitespace()
        line, col = self.stream.line, self.stream.column

        if self.stream.end_of_file():
            closer = TAG_CLOSERS[self.open_tag]
            raise SyntaxError(
                f"Unterminated tag, expected {closer!r} at line {line}, col {col}"
            )

        # 1. Tag closer
        closer = TAG_CLOSERS[self.open_tag]
        if self.stream.startswith(closer) and not (
            closer == "}}" and self.brace_depth > 0
        ):
            self.advance()
            self.advance()
            close_type = token_hashmap[closer]
            self.open_tag = None
            return self.emit(close_type, closer, line, col)

        ch = self.peek()

        # 2. Identifier or keyword
        if ch.isalpha() or ch == "_":
            return self.read_identifier(line, col)

        # 3. Number, possibly negative
        if ch.isdigit():
            return self.read_number(line, col)
        if (
            ch == "-"
            and self.stream.peek(1).isdigit()
            and self.last_type in NEGATIVE_NUMBER_CONTEXT
        ):
            self.advance()
            return self.read_number(line, col, prefix="-")

        # 4. String
        if ch in ('"', "'"):
            return self.read_string(line, col)

        # 5. Operator or punctuation
        token = self.match_operator()
        if token:
            if token.type == TokenType.LBRACE:
                self.brace_depth += 1
            elif token.type == TokenType.RBRACE and self.brace_depth > 0:
                self.brace_depth -= 1
            return token

        # 6. Unknown character
        raise SyntaxError(f"Unexpected character {ch!r} at line {line}, col {col}")

    def tokenize(self) -> list[Token]:
        """Drains the stream and returns every token except the trailing EOF."""
        tokens: list[Token] = []
        while True:
            tok = self.next_token()
            if tok.type == TokenType.EOF:
                break
            tokens.append(tok)
        return tokens


__all__ = ["CharacterStream", "Lexer", "Token", "token_hashmap"]
