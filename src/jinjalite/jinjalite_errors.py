"""
Parser error taxonomy.

Every error is a `SyntaxError` so callers can treat lexer and parser failures
alike. Each carries the token at which parsing stopped (when there is one) and
renders its line/column into the message.
"""

from jinjalite.jinjalite_lexer import Token


def describe(token: Token | None) -> str:
    if token is None:
        return "end of input"
    where = f" at line {token.line}, col {token.col}" if token.line else ""
    return f"{token.type} ({token.value!r}){where}"


class ParserError(SyntaxError):
    """Base class for all structural violations found while parsing."""

    def __init__(self, message: str, token: Token | None = None) -> None:
        super().__init__(message)
        self.token = token


class UnexpectedToken(ParserError):
    """No production applies to the current token."""

    def __init__(self, token: Token | None, context: str = "") -> None:
        where = f" in {context}" if context else ""
        super().__init__(f"Unexpected token{where}: {describe(token)}", token)


class ExpectedToken(ParserError):
    """A required token was missing.

    Attributes:
        expected (str): Token type that was required.
        actual (str): Token type actually found (`EOF` at end of input).
    """

    def __init__(self, expected: str, token: Token | None) -> None:
        self.expected = expected
        self.actual = token.type if token is not None else "EOF"
        super().__init__(f"Expected {expected}, got {describe(token)}", token)


class InvalidLoopVariable(ParserError):
    def __init__(self, found: str, token: Token | None = None) -> None:
        super().__init__(
            f"Expected identifier for the loop variable, got {found}", token
        )


class InvalidKeywordArgumentTarget(ParserError):
    def __init__(self, found: str, token: Token | None = None) -> None:
        super().__init__(
            f"Expected identifier for keyword argument, got {found}", token
        )


class InvalidTestName(ParserError):
    def __init__(self, found: str, token: Token | None = None) -> None:
        super().__init__(f"Expected identifier for the test, got {found}", token)


class InvalidFilterName(ParserError):
    def __init__(self, found: str, token: Token | None = None) -> None:
        super().__init__(f"Expected identifier for the filter, got {found}", token)


class InvalidPropertyAccess(ParserError):
    def __init__(self, found: str, token: Token | None = None) -> None:
        super().__init__(
            f"Expected identifier following dot operator, got {found}", token
        )


class MalformedSlice(ParserError):
    def __init__(self, count: int, token: Token | None = None) -> None:
        self.count = count
        super().__init__(
            f"Expected 0-3 arguments for slice expression, got {count}", token
        )


class EmptyIndexExpression(ParserError):
    def __init__(self, token: Token | None = None) -> None:
        super().__init__(
            f"Expected at least one argument for member/slice expression near {describe(token)}",
            token,
        )


class NestingTooDeep(ParserError):
    """Input nests deeper than the interpreter stack allows."""

    def __init__(self, token: Token | None = None) -> None:
        super().__init__(f"Nesting too deep near {describe(token)}", token)


__all__ = [
    "ParserError",
    "UnexpectedToken",
    "ExpectedToken",
    "InvalidLoopVariable",
    "InvalidKeywordArgumentTarget",
    "InvalidTestName",
    "InvalidFilterName",
    "InvalidPropertyAccess",
    "MalformedSlice",
    "EmptyIndexExpression",
    "NestingTooDeep",
]
