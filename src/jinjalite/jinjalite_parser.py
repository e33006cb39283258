"""
jinjalite Template Parser

Turns the flat token stream produced by `jinjalite_lexer.Lexer` into a `Program`
tree of `jinjalite_ast` nodes.

Supported Constructs
--------------------
- Top level:
    * Plain text (kept as string literals)
    * Output tags: `{{ expr }}`
    * Statement tags: `{% set %}`, `{% if %}`/`{% elif %}`/`{% else %}`/`{% endif %}`,
      `{% for x in xs %}`/`{% endfor %}`

- Expressions, loosest binding first:
    1. Inline conditional: `a if cond else b`
    2. `or`
    3. `and`
    4. `not` (right-associative prefix)
    5. Comparison and membership: `== != < > <= >= in not in` (one tier, folds left)
    6. Additive: `+ -`
    7. Multiplicative: `* / // % ~`
    8. Tests: `x is [not] name`, `x is name(args)`
    9. Filters: `x | name`, `x | name(args)`
    10. Postfix chains: `a.b`, `a[i]`, `a[1:2:3]`, `f(x, key=y)`, in any order
    11. Primary: numbers, strings, booleans, identifiers, `( )`, `[ ]`, `{ k: v }`

Parser Behavior
---------------
- Single left-to-right pass with at most two tokens of lookahead; no backtracking.
- Fail-fast: the first structural violation raises a `ParserError` subclass
  (itself a `SyntaxError`) and no partial tree is returned.
- Nesting past the interpreter stack raises `NestingTooDeep` rather than
  `RecursionError`.
- Filter and test names are not resolved here; any identifier is accepted.

Entry Points
------------
- `Parser(tokens).parse()`: Parse a full token stream into a `Program`.
- `Parser(tokens).parse_expression()`: Parse one expression at the cursor.
- `parse_template(source)`: Lex and parse template source text.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from jinjalite.jinjalite_ast import (
    ArrayLiteral,
    BinaryExpression,
    BooleanLiteral,
    CallExpression,
    Expression,
    FilterExpression,
    For,
    Identifier,
    If,
    KeywordArgumentExpression,
    MemberExpression,
    NumericLiteral,
    ObjectLiteral,
    Program,
    SetStatement,
    SliceExpression,
    Statement,
    StringLiteral,
    TestExpression,
    UnaryExpression,
)
from jinjalite.jinjalite_constants import TokenType
from jinjalite.jinjalite_errors import (
    EmptyIndexExpression,
    ExpectedToken,
    InvalidFilterName,
    InvalidKeywordArgumentTarget,
    InvalidLoopVariable,
    InvalidPropertyAccess,
    InvalidTestName,
    MalformedSlice,
    NestingTooDeep,
    UnexpectedToken,
    describe,
)
from jinjalite.jinjalite_lexer import CharacterStream, Lexer, Token

T = TypeVar("T")


class Parser:
    """
    jinjalite Parser Class

    Owns the token list and the cursor for exactly one parse. Parse methods are
    layered so that each expression tier delegates to the next tighter one.

    Attributes
    ----------
    tokens : list[Token]
        The input token stream (a trailing `EOF` token, if present, is dropped).
    position : int
        Current index into the token stream.
    comparison_ops : set[str]
        Token types sharing the comparison/membership tier.
    """

    def __init__(self, tokens: list[Token]) -> None:
        if tokens and tokens[-1].type == TokenType.EOF:
            tokens = tokens[:-1]
        self.tokens: list[Token] = list(tokens)
        self.position: int = 0

        self.comparison_ops: set[str] = {
            TokenType.COMPARISON_OP,
            TokenType.IN,
            TokenType.NOT_IN,
        }

    # Cursor

    def at_end(self) -> bool:
        return self.position >= len(self.tokens)

    def current(self) -> Token:
        return (
            self.tokens[self.position]
            if self.position < len(self.tokens)
            else Token(TokenType.EOF, "EOF")
        )

    def advance(self) -> Token:
        """Consume the current token and return it."""
        tok = self.current()
        self.position += 1
        return tok

    def expect(self, type_: str) -> Token:
        """Consume the current token if it has type `type_`, otherwise raise `ExpectedToken`."""
        tok = self.current()
        if self.at_end() or tok.type != type_:
            raise ExpectedToken(type_, tok)
        return self.advance()

    def matches_at(self, *types: str) -> bool:
        """True when the next `len(types)` tokens have exactly these types. Never consumes."""
        if self.position + len(types) > len(self.tokens):
            return False
        return all(
            self.tokens[self.position + i].type == type_ for i, type_ in enumerate(types)
        )

    def parse_delimited(self, close_type: str, parse_item: Callable[[], T]) -> list[T]:
        """Parse comma-separated items up to and including `close_type`.

        A trailing comma before the closer is allowed.
        """
        items: list[T] = []
        while self.current().type != close_type:
            if self.at_end():
                raise ExpectedToken(close_type, self.current())
            items.append(parse_item())
            if self.current().type == TokenType.COMMA:
                self.advance()
            elif self.current().type != close_type:
                raise ExpectedToken(TokenType.COMMA, self.current())
        self.expect(close_type)
        return items

    # Dispatch

    def parse(self) -> Program:
        """Parse the whole token stream into a `Program`."""
        body: list[Statement] = []
        try:
            while not self.at_end():
                body.append(self.parse_any())
        except RecursionError as e:
            raise NestingTooDeep(self.current()) from e
        return Program(tuple(body))

    def parse_any(self) -> Statement:
        tok = self.current()
        if tok.type == TokenType.TEXT:
            return StringLiteral(self.advance().value)
        if tok.type == TokenType.OPEN_STATEMENT:
            return self.parse_statement()
        if tok.type == TokenType.OPEN_EXPRESSION:
            return self.parse_output()
        raise UnexpectedToken(tok)

    def parse_output(self) -> Expression:
        """Parse `{{ expr }}`."""
        self.expect(TokenType.OPEN_EXPRESSION)
        result = self.parse_expression()
        self.expect(TokenType.CLOSE_EXPRESSION)
        return result

    def parse_statement(self) -> Statement:
        """Parse one `{% ... %}` statement including its closing tag, if it has one."""
        self.expect(TokenType.OPEN_STATEMENT)
        tok = self.current()

        result: Statement
        if tok.type == TokenType.SET:
            self.advance()
            result = self.parse_set()
            self.expect(TokenType.CLOSE_STATEMENT)
        elif tok.type == TokenType.IF:
            self.advance()
            result = self.parse_if()
            self.expect_end_tag(TokenType.ENDIF)
        elif tok.type == TokenType.FOR:
            self.advance()
            result = self.parse_for()
            self.expect_end_tag(TokenType.ENDFOR)
        else:
            raise UnexpectedToken(tok, "statement")
        return result

    def expect_end_tag(self, keyword: str) -> None:
        self.expect(TokenType.OPEN_STATEMENT)
        self.expect(keyword)
        self.expect(TokenType.CLOSE_STATEMENT)

    # Statements

    def parse_set(self) -> Statement:
        """Parse `target = value`; a bare expression is returned unchanged."""
        left = self.parse_expression()
        if self.current().type == TokenType.EQUALS:
            self.advance()
            value = self.parse_set()
            return SetStatement(left, value)
        return left

    def parse_body(self, *terminators: str, missing: str) -> list[Statement]:
        """Parse statements until a `{% <terminator>` pair is next."""
        body: list[Statement] = []
        while not any(
            self.matches_at(TokenType.OPEN_STATEMENT, t) for t in terminators
        ):
            if self.at_end():
                raise ExpectedToken(missing, self.current())
            body.append(self.parse_any())
        return body

    def parse_if(self) -> If:
        """Parse the rest of an `if` or `elif` tag and its branches.

        The caller consumes the final `{% endif %}`.
        """
        test = self.parse_expression()
        self.expect(TokenType.CLOSE_STATEMENT)

        body = self.parse_body(
            TokenType.ELIF, TokenType.ELSE, TokenType.ENDIF, missing=TokenType.ENDIF
        )

        alternate: list[Statement] = []
        if self.matches_at(TokenType.OPEN_STATEMENT, TokenType.ELIF):
            self.advance()
            self.advance()
            alternate.append(self.parse_if())
        elif self.matches_at(TokenType.OPEN_STATEMENT, TokenType.ELSE):
            self.advance()
            self.advance()
            self.expect(TokenType.CLOSE_STATEMENT)
            alternate = self.parse_body(TokenType.ENDIF, missing=TokenType.ENDIF)

        return If(test, tuple(body), tuple(alternate))

    def parse_for(self) -> For:
        """Parse `x in iterable %}` and the loop body; the caller consumes `{% endfor %}`."""
        start = self.current()
        loop_variable = self.parse_call_member()
        match loop_variable:
            case Identifier():
                pass
            case _:
                raise InvalidLoopVariable(loop_variable.kind, start)

        self.expect(TokenType.IN)
        iterable = self.parse_expression()
        self.expect(TokenType.CLOSE_STATEMENT)

        body = self.parse_body(TokenType.ENDFOR, missing=TokenType.ENDFOR)
        return For(loop_variable, iterable, tuple(body))

    # Expressions

    def parse_expression(self) -> Expression:
        """Parse a full expression, including the inline `a if b else c` form."""
        try:
            left = self.parse_or()
            if self.current().type == TokenType.IF:
                self.advance()
                test = self.parse_or()
                self.expect(TokenType.ELSE)
                right = self.parse_or()
                return If(test, (left,), (right,))
            return left
        except RecursionError as e:
            # every bracket level costs one pass through all tiers
            raise NestingTooDeep(self.current()) from e

    def parse_or(self) -> Expression:
        left = self.parse_and()
        while self.current().type == TokenType.OR:
            op = self.advance()
            right = self.parse_and()
            left = BinaryExpression(op.value, left, right)
        return left

    def parse_and(self) -> Expression:
        left = self.parse_not()
        while self.current().type == TokenType.AND:
            op = self.advance()
            right = self.parse_not()
            left = BinaryExpression(op.value, left, right)
        return left

    def parse_not(self) -> Expression:
        if self.current().type == TokenType.NOT:
            op = self.advance()
            return UnaryExpression(op.value, self.parse_not())
        return self.parse_comparison()

    def parse_comparison(self) -> Expression:
        # Comparison and membership share a tier: `a in b == c` is `(a in b) == c`.
        left = self.parse_additive()
        while self.current().type in self.comparison_ops:
            op = self.advance()
            right = self.parse_additive()
            left = BinaryExpression(op.value, left, right)
        return left

    def parse_additive(self) -> Expression:
        left = self.parse_multiplicative()
        while self.current().type == TokenType.ADDITIVE_OP:
            op = self.advance()
            right = self.parse_multiplicative()
            left = BinaryExpression(op.value, left, right)
        return left

    def parse_multiplicative(self) -> Expression:
        # Operands are tests: `4 * 4 is divisibleby(2)` is `4 * (4 is divisibleby(2))`.
        left = self.parse_test()
        while self.current().type == TokenType.MULTIPLICATIVE_OP:
            op = self.advance()
            right = self.parse_test()
            left = BinaryExpression(op.value, left, right)
        return left

    def parse_test(self) -> Expression:
        operand = self.parse_filter()
        while self.current().type == TokenType.IS:
            self.advance()
            negate = self.current().type == TokenType.NOT
            if negate:
                self.advance()

            tok = self.current()
            if tok.type not in (TokenType.IDENT, TokenType.BOOLEAN):
                raise InvalidTestName(describe(tok), tok)
            self.advance()
            # `is true` names a test called "true"
            test: Identifier | CallExpression = Identifier(tok.value)
            if self.current().type == TokenType.LPAREN:
                test = self.parse_call(test)
            operand = TestExpression(operand, negate, test)
        return operand

    def parse_filter(self) -> Expression:
        operand = self.parse_call_member()
        while self.current().type == TokenType.PIPE:
            self.advance()
            tok = self.current()
            if tok.type != TokenType.IDENT:
                raise InvalidFilterName(describe(tok), tok)
            self.advance()
            name: Identifier | CallExpression = Identifier(tok.value)
            if self.current().type == TokenType.LPAREN:
                name = self.parse_call(name)
            operand = FilterExpression(operand, name)
        return operand

    # Postfix: member access, indexing, slicing, calls

    def parse_call_member(self) -> Expression:
        """Parse a primary followed by any chain of `.name`, `[...]` and `(...)`."""
        expr = self.parse_primary()
        while True:
            tok_type = self.current().type
            if tok_type in (TokenType.DOT, TokenType.LBRACK):
                expr = self.parse_member(expr)
            elif tok_type == TokenType.LPAREN:
                expr = self.parse_call(expr)
            else:
                return expr

    def parse_member(self, obj: Expression) -> MemberExpression:
        operator = self.advance()
        if operator.type == TokenType.DOT:
            tok = self.current()
            if tok.type != TokenType.IDENT:
                raise InvalidPropertyAccess(describe(tok), tok)
            self.advance()
            return MemberExpression(obj, Identifier(tok.value), computed=False)

        prop = self.parse_member_arguments()
        self.expect(TokenType.RBRACK)
        return MemberExpression(obj, prop, computed=True)

    def parse_member_arguments(self) -> Expression | SliceExpression:
        """Parse the inside of `[...]`: a single index, or up to three slice components.

        Missing slice components are None, e.g. `[:2]` gives `SliceExpression(None, 2, None)`.
        """
        components: list[Expression | None] = []
        is_slice = False
        while self.current().type != TokenType.RBRACK:
            if self.at_end():
                raise ExpectedToken(TokenType.RBRACK, self.current())
            if self.current().type == TokenType.COLON:
                components.append(None)
                self.advance()
                is_slice = True
            else:
                components.append(self.parse_expression())
                if self.current().type == TokenType.COLON:
                    self.advance()
                    is_slice = True
                elif self.current().type != TokenType.RBRACK:
                    raise ExpectedToken(TokenType.RBRACK, self.current())

        if not components:
            raise EmptyIndexExpression(self.current())

        if is_slice:
            if len(components) > 3:
                raise MalformedSlice(len(components), self.current())
            return SliceExpression(*components)

        return components[0]  # type: ignore[return-value]

    def parse_call(self, callee: Expression) -> CallExpression:
        """Parse `(args)` after `callee`; directly repeated calls (`f()()`) chain."""
        call = CallExpression(callee, tuple(self.parse_args()))
        while self.current().type == TokenType.LPAREN:
            call = CallExpression(call, tuple(self.parse_args()))
        return call

    def parse_args(self) -> list[Expression | KeywordArgumentExpression]:
        self.expect(TokenType.LPAREN)
        return self.parse_delimited(TokenType.RPAREN, self.parse_argument)

    def parse_argument(self) -> Expression | KeywordArgumentExpression:
        start = self.current()
        argument = self.parse_expression()
        if self.current().type != TokenType.EQUALS:
            return argument

        self.advance()
        match argument:
            case Identifier():
                return KeywordArgumentExpression(argument, self.parse_expression())
            case _:
                raise InvalidKeywordArgumentTarget(argument.kind, start)

    # Primary

    def parse_primary(self) -> Expression:
        tok = self.current()
        if self.at_end():
            raise UnexpectedToken(tok, "expression")

        if tok.type == TokenType.NUMBER:
            self.advance()
            if "." in tok.value:
                return NumericLiteral(float(tok.value))
            return NumericLiteral(int(tok.value))
        if tok.type == TokenType.STRING:
            self.advance()
            return StringLiteral(tok.value)
        if tok.type == TokenType.BOOLEAN:
            self.advance()
            return BooleanLiteral(tok.value.lower() == "true")
        if tok.type == TokenType.IDENT:
            self.advance()
            return Identifier(tok.value)
        if tok.type == TokenType.LPAREN:
            self.advance()
            expression = self.parse_expression()
            self.expect(TokenType.RPAREN)
            return expression
        if tok.type == TokenType.LBRACK:
            self.advance()
            return ArrayLiteral(
                tuple(self.parse_delimited(TokenType.RBRACK, self.parse_expression))
            )
        if tok.type == TokenType.LBRACE:
            self.advance()
            return ObjectLiteral(
                tuple(self.parse_delimited(TokenType.RBRACE, self.parse_object_pair))
            )

        raise UnexpectedToken(tok, "expression")

    def parse_object_pair(self) -> tuple[Expression, Expression]:
        key = self.parse_expression()
        self.expect(TokenType.COLON)
        value = self.parse_expression()
        return key, value


def tokenize(source: str) -> list[Token]:
    """Lex template source into tokens (no trailing EOF)."""
    return Lexer(CharacterStream(source, 0, 1, 1)).tokenize()


def parse_template(source: str) -> Program:
    """Lex and parse template source text into a `Program`."""
    return Parser(tokenize(source)).parse()


__all__ = ["Parser", "parse_template", "tokenize"]
