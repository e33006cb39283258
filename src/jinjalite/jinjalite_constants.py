"""
Token vocabulary shared by the jinjalite lexer and parser.

Exports:
    TokenType: Namespace of canonical token type names.
    keyword_hashmap: Maps reserved words found inside tags to their token type.
    token_hashmap: Maps operator and punctuation spellings to their token type.
"""


class TokenType:
    """Canonical token type names.

    Token types are plain strings so that tokens stay trivially printable and
    comparable; this class only groups the names.
    """

    TEXT = "TEXT"

    OPEN_STATEMENT = "OPEN_STATEMENT"  # {%
    CLOSE_STATEMENT = "CLOSE_STATEMENT"  # %}
    OPEN_EXPRESSION = "OPEN_EXPRESSION"  # {{
    CLOSE_EXPRESSION = "CLOSE_EXPRESSION"  # }}

    SET = "SET"
    IF = "IF"
    ELIF = "ELIF"
    ELSE = "ELSE"
    ENDIF = "ENDIF"
    FOR = "FOR"
    ENDFOR = "ENDFOR"

    IN = "IN"
    NOT_IN = "NOT_IN"
    IS = "IS"
    NOT = "NOT"
    AND = "AND"
    OR = "OR"

    NUMBER = "NUMBER"
    STRING = "STRING"
    BOOLEAN = "BOOLEAN"
    IDENT = "IDENT"

    COMPARISON_OP = "COMPARISON_OP"
    ADDITIVE_OP = "ADDITIVE_OP"
    MULTIPLICATIVE_OP = "MULTIPLICATIVE_OP"

    DOT = "DOT"
    LBRACK = "LBRACK"
    RBRACK = "RBRACK"
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    LBRACE = "LBRACE"
    RBRACE = "RBRACE"
    COMMA = "COMMA"
    COLON = "COLON"
    EQUALS = "EQUALS"
    PIPE = "PIPE"

    EOF = "EOF"


keyword_hashmap: dict[str, str] = {
    "set": TokenType.SET,
    "if": TokenType.IF,
    "elif": TokenType.ELIF,
    "else": TokenType.ELSE,
    "endif": TokenType.ENDIF,
    "for": TokenType.FOR,
    "endfor": TokenType.ENDFOR,
    "in": TokenType.IN,
    "is": TokenType.IS,
    "not": TokenType.NOT,
    "and": TokenType.AND,
    "or": TokenType.OR,
    "true": TokenType.BOOLEAN,
    "false": TokenType.BOOLEAN,
}

token_hashmap: dict[str, str] = {
    # Tag delimiters
    "{%": TokenType.OPEN_STATEMENT,
    "%}": TokenType.CLOSE_STATEMENT,
    "{{": TokenType.OPEN_EXPRESSION,
    "}}": TokenType.CLOSE_EXPRESSION,
    # Comparison
    "==": TokenType.COMPARISON_OP,
    "!=": TokenType.COMPARISON_OP,
    "<": TokenType.COMPARISON_OP,
    ">": TokenType.COMPARISON_OP,
    "<=": TokenType.COMPARISON_OP,
    ">=": TokenType.COMPARISON_OP,
    # Arithmetic
    "+": TokenType.ADDITIVE_OP,
    "-": TokenType.ADDITIVE_OP,
    "*": TokenType.MULTIPLICATIVE_OP,
    "/": TokenType.MULTIPLICATIVE_OP,
    "//": TokenType.MULTIPLICATIVE_OP,
    "%": TokenType.MULTIPLICATIVE_OP,
    "~": TokenType.MULTIPLICATIVE_OP,
    # Punctuation
    ".": TokenType.DOT,
    "[": TokenType.LBRACK,
    "]": TokenType.RBRACK,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ",": TokenType.COMMA,
    ":": TokenType.COLON,
    "=": TokenType.EQUALS,
    "|": TokenType.PIPE,
}

__all__ = ["TokenType", "keyword_hashmap", "token_hashmap"]
