"""
Token vocabulary shared by the lexer and the parser.

============================================================================
TOKEN TYPES
============================================================================

    LITERAL          - Bare word: command, argument, path, flag
    SYMBOL           - | = ; " ' ( ) < > << >> $
    CONTROL_OPERATOR - Reserved word: if then else fi
    IDENTIFIER       - Name after $: VAR, {VAR}
    WILDCARD         - Word containing an unescaped *
    STR              - Text inside an open quote
    COMMENT          - From # to end of line

Every token value is an exact substring of the input line. An '=' symbol
also records whether it touches the word before it and the token after
it, which is what tells NAME=value apart from "a = b".
"""

from enum import Enum, auto
from dataclasses import dataclass, field
from typing import Optional


class TokenType(Enum):
    """Token types for the shell lexer"""
    LITERAL = auto()
    SYMBOL = auto()
    CONTROL_OPERATOR = auto()
    IDENTIFIER = auto()
    WILDCARD = auto()
    STR = auto()
    COMMENT = auto()


@dataclass(frozen=True)
class Token:
    """Token with type, value, and position"""
    type: TokenType
    value: str
    # Diagnostics only, left out of equality
    pos: Optional[int] = field(default=None, compare=False)
    # Set on '=' only: no whitespace before / after it
    joined_left: bool = False
    joined_right: bool = False

    @property
    def end(self) -> Optional[int]:
        """Offset just past the last character"""
        if self.pos is None:
            return None
        return self.pos + len(self.value)

    def is_symbol(self, *values: str) -> bool:
        """True for a SYMBOL token, optionally one of the given values"""
        if self.type != TokenType.SYMBOL:
            return False
        return not values or self.value in values

    def __repr__(self):
        extra = ''
        if self.pos is not None:
            extra += f", pos={self.pos}"
        if self.joined_left:
            extra += ", joined_left=True"
        if self.joined_right:
            extra += ", joined_right=True"
        return f"Token({self.type.name}, {self.value!r}{extra})"
