"""
Typed errors raised by the lexer and parser.

Both stages fail fast: the first violation raises, and no partial token
list or tree is returned. Every error subclasses SyntaxError so callers
that already guard parsing with ``except SyntaxError`` keep working.

Example:
    >>> try:
    ...     tokenize('echo "abc')
    ... except LexError as e:
    ...     print(e.kind.name, e.pos)
    UNTERMINATED_QUOTE 5
"""

from enum import Enum, auto
from typing import Optional


class LexErrorKind(Enum):
    """Lexical failures"""
    UNTERMINATED_QUOTE = auto()
    UNTERMINATED_COMMENT = auto()   # only with strict_comments
    DANGLING_CONTEXT = auto()       # context stack not empty at end of input
    INPUT_TOO_LONG = auto()


class ParseErrorKind(Enum):
    """Structural failures"""
    UNEXPECTED_END_OF_INPUT = auto()
    INVALID_COMMAND_HEAD = auto()
    UNBALANCED_PARENTHESIS = auto()
    UNBALANCED_QUOTE = auto()
    INVALID_QUOTE_CONTENTS = auto()
    INVALID_SUBSTITUTION = auto()
    INVALID_REDIRECT = auto()
    UNEXPECTED_TOKEN = auto()
    NESTING_TOO_DEEP = auto()


class ShellSyntaxError(SyntaxError):
    """
    Base class for lexer and parser failures.

    Attributes:
        kind: LexErrorKind or ParseErrorKind member
        pos: offset in the input line, when known
        token: offending token, when there is one
    """

    def __init__(self, kind: Enum, message: str, pos: Optional[int] = None, token=None):
        self.kind = kind
        self.pos = pos
        self.token = token
        if pos is not None:
            message = f"{message} at pos {pos}"
        super().__init__(message)

    def __repr__(self):
        return f"{type(self).__name__}({self.kind.name}, {self.msg!r})"


class LexError(ShellSyntaxError):
    """Raised by the lexer"""


class ParseError(ShellSyntaxError):
    """Raised by the parser"""
