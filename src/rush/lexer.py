"""
Shell Lexer - character-level state machine

OBJECTIVE: Split one command line into the token vocabulary of tokens.py.

============================================================================
USAGE
============================================================================

    >>> from rush.lexer import tokenize
    >>> tokenize('echo "this is $VAR right here"')
    [Token(LITERAL, 'echo', pos=0), Token(SYMBOL, '"', pos=5),
     Token(STR, 'this is ', pos=6), Token(SYMBOL, '$', pos=14),
     Token(IDENTIFIER, 'VAR', pos=15), Token(STR, ' right here', pos=18),
     Token(SYMBOL, '"', pos=29)]

============================================================================
ARCHITECTURE
============================================================================

The lexer folds the line one character at a time. A single buffer holds
the token being built; each state handler either keeps buffering, emits a
token, or emits a token and hands the same character to another state
(the ')' that ends `ls -a)` is also a symbol of its own).

Nested contexts are resumed through an explicit stack:

    echo "a $(ls) b"
             ^ '$' pushes InQuote('"')
               ^ '(' keeps that entry until its ')'
                  ^ ')' pops back into the quote

    - every '$' pushes the state to resume afterwards
    - an identifier end pops it
    - a bare '(' pushes Start, every ')' pops

============================================================================
STATES
============================================================================

    START           - Between tokens
    IN_LITERAL      - Bare word
    IN_WILDCARD     - Bare word that has seen '*'
    IN_QUOTE        - Inside '...' or "..." (char = quote)
    IN_SUBSTITUTION - After '$'
    IN_OPERATOR     - After '<' or '>' (char = direction)
    IN_COMMENT      - After '#'
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import List, Optional
import logging

from .constants import (
    ASSIGN,
    COMMENT_CHAR,
    CONTROL_FLOW_KEYWORDS,
    DEFAULT_MAX_INPUT_LENGTH,
    DIRECTION_CHARS,
    ESCAPE_CHAR,
    IDENTIFIER_CHARS,
    LPAREN,
    PATH_CHARS,
    QUOTE_CHARS,
    RPAREN,
    SINGLE_SYMBOLS,
    SUBSTITUTION_SIGIL,
    WILDCARD_CHAR,
)
from .errors import LexError, LexErrorKind
from .tokens import Token, TokenType


class LexerState(Enum):
    """Lexer states"""
    START = auto()
    IN_LITERAL = auto()
    IN_WILDCARD = auto()
    IN_QUOTE = auto()
    IN_SUBSTITUTION = auto()
    IN_OPERATOR = auto()
    IN_COMMENT = auto()


@dataclass(frozen=True)
class LexerContext:
    """
    A state plus its payload.

    char is the quote character for IN_QUOTE and the direction for
    IN_OPERATOR. pos is where the context was opened, used to report
    unterminated quotes and dangling substitutions.
    """
    state: LexerState
    char: str = ''
    pos: Optional[int] = None


START = LexerContext(LexerState.START)


class ShellLexer:
    """
    Lexer for shell command lines.

    Handles:
    - Words, flags, paths and reserved words
    - Wildcards (*)
    - Quotes with embedded $VAR and $(...) substitutions
    - Redirections (<, <<, >, >>), pipes, assignment, separators
    - Comments (#)
    - Escapes (\\)
    """

    def __init__(self, text: str, logger=None, strict_comments: bool = False,
                 max_length: Optional[int] = DEFAULT_MAX_INPUT_LENGTH):
        """
        Initialize lexer

        Args:
            text: Command line to tokenize
            logger: Logger instance
            strict_comments: Fail on a comment not closed by a newline
            max_length: Reject longer inputs (None = unbounded)
        """
        self.text = text
        self.logger = logger or logging.getLogger('ShellLexer')
        self.strict_comments = strict_comments
        self.max_length = max_length

        self.tokens: List[Token] = []
        self.stack: List[LexerContext] = []
        self._buffer: List[str] = []
        self._buffer_pos: Optional[int] = None
        self._escaped = False

    def tokenize(self) -> List[Token]:
        """Tokenize input into list of tokens"""
        if self.max_length is not None and len(self.text) > self.max_length:
            self._fail(LexErrorKind.INPUT_TOO_LONG,
                       f"Input of {len(self.text)} chars exceeds limit of {self.max_length}")

        self.tokens = []
        self.stack = []
        self._buffer = []
        self._buffer_pos = None
        self._escaped = False

        # Positions refer to the untrimmed text
        offset = len(self.text) - len(self.text.lstrip())
        context = START
        for pos, char in enumerate(self.text.strip(), offset):
            context = self._step(context, char, pos)

        self._finish(context)
        self.logger.debug(f"Tokenized {len(self.text)} chars into {len(self.tokens)} tokens")
        return self.tokens

    # ------------------------------------------------------------------
    # Buffer and emission
    # ------------------------------------------------------------------

    def _push_char(self, char: str, pos: int) -> None:
        if not self._buffer:
            self._buffer_pos = pos
        self._buffer.append(char)

    def _emit(self, type_: TokenType, value: str, pos: Optional[int]) -> None:
        self.tokens.append(Token(type_, value, pos))

    def _emit_assign(self, pos: int) -> None:
        """Emit '=' with what it touches on either side"""
        joined_left = bool(self.tokens) and self.tokens[-1].end == pos
        after = self.text[pos + 1:pos + 2]
        joined_right = bool(after) and not after.isspace() and after != COMMENT_CHAR
        self.tokens.append(Token(TokenType.SYMBOL, ASSIGN, pos, joined_left, joined_right))

    def _flush(self, type_: TokenType, pos: Optional[int] = None) -> None:
        """
        Emit the buffer as one token and clear it.

        pos is only used when the buffer is empty (an empty Str fragment
        sits where the next symbol starts).
        """
        if self._buffer:
            pos = self._buffer_pos
        self._emit(type_, ''.join(self._buffer), pos)
        self._buffer = []
        self._buffer_pos = None

    def _flush_word(self) -> None:
        """Emit a bare word, promoting an exact reserved word"""
        if ''.join(self._buffer) in CONTROL_FLOW_KEYWORDS:
            self._flush(TokenType.CONTROL_OPERATOR)
        else:
            self._flush(TokenType.LITERAL)

    def _pop(self) -> LexerContext:
        """Resume the enclosing context (Start when there is none)"""
        if self.stack:
            return self.stack.pop()
        return START

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _step(self, context: LexerContext, char: str, pos: int) -> LexerContext:
        """Feed one character, return the next context"""
        if self._escaped:
            # Escaped characters never change state
            self._escaped = False
            self._push_char(char, pos)
            return context

        state = context.state
        if state == LexerState.START:
            return self._on_start(char, pos)
        if state == LexerState.IN_LITERAL:
            return self._on_literal(context, char, pos)
        if state == LexerState.IN_WILDCARD:
            return self._on_wildcard(context, char, pos)
        if state == LexerState.IN_QUOTE:
            return self._on_quote(context, char, pos)
        if state == LexerState.IN_SUBSTITUTION:
            return self._on_substitution(context, char, pos)
        if state == LexerState.IN_OPERATOR:
            return self._on_operator(context, char, pos)
        return self._on_comment(context, char, pos)

    def _on_start(self, char: str, pos: int) -> LexerContext:
        if char.isspace():
            return START

        if char == ESCAPE_CHAR:
            self._push_char(char, pos)
            self._escaped = True
            return LexerContext(LexerState.IN_LITERAL)

        if char in QUOTE_CHARS:
            self._emit(TokenType.SYMBOL, char, pos)
            return LexerContext(LexerState.IN_QUOTE, char, pos)

        if char in DIRECTION_CHARS:
            self._push_char(char, pos)
            return LexerContext(LexerState.IN_OPERATOR, char)

        if char == ASSIGN:
            self._emit_assign(pos)
            return START

        if char in SINGLE_SYMBOLS:
            self._emit(TokenType.SYMBOL, char, pos)
            return START

        if char == COMMENT_CHAR:
            self._push_char(char, pos)
            return LexerContext(LexerState.IN_COMMENT)

        if char == SUBSTITUTION_SIGIL:
            self._emit(TokenType.SYMBOL, char, pos)
            self.stack.append(LexerContext(LexerState.START, pos=pos))
            return LexerContext(LexerState.IN_SUBSTITUTION)

        if char == LPAREN:
            self._emit(TokenType.SYMBOL, char, pos)
            self.stack.append(LexerContext(LexerState.START, pos=pos))
            return START

        if char == RPAREN:
            self._emit(TokenType.SYMBOL, char, pos)
            return self._pop()

        self._push_char(char, pos)
        if char == WILDCARD_CHAR:
            return LexerContext(LexerState.IN_WILDCARD)
        return LexerContext(LexerState.IN_LITERAL)

    def _on_literal(self, context: LexerContext, char: str, pos: int) -> LexerContext:
        if char.isalnum() or char in PATH_CHARS:
            self._push_char(char, pos)
            return context

        if char == ESCAPE_CHAR:
            self._push_char(char, pos)
            self._escaped = True
            return context

        if char == WILDCARD_CHAR:
            self._push_char(char, pos)
            return LexerContext(LexerState.IN_WILDCARD)

        self._flush_word()
        return self._on_start(char, pos)

    def _on_wildcard(self, context: LexerContext, char: str, pos: int) -> LexerContext:
        if char.isalnum() or char in PATH_CHARS or char == WILDCARD_CHAR:
            self._push_char(char, pos)
            return context

        if char == ESCAPE_CHAR:
            self._push_char(char, pos)
            self._escaped = True
            return context

        self._flush(TokenType.WILDCARD)
        return self._on_start(char, pos)

    def _on_operator(self, context: LexerContext, char: str, pos: int) -> LexerContext:
        if char == context.char:
            # << or >>
            self._push_char(char, pos)
            self._flush(TokenType.SYMBOL)
            return START

        self._flush(TokenType.SYMBOL)
        return self._on_start(char, pos)

    def _on_substitution(self, context: LexerContext, char: str, pos: int) -> LexerContext:
        if char.isalnum() or char in IDENTIFIER_CHARS:
            self._push_char(char, pos)
            return context

        if char == LPAREN and not self._buffer:
            # $( - the entry pushed by '$' now waits for the matching ')'
            self._emit(TokenType.SYMBOL, char, pos)
            return START

        if self._buffer:
            self._flush(TokenType.IDENTIFIER)
        return self._step(self._pop(), char, pos)

    def _on_quote(self, context: LexerContext, char: str, pos: int) -> LexerContext:
        if char == ESCAPE_CHAR:
            self._push_char(char, pos)
            self._escaped = True
            return context

        if char == SUBSTITUTION_SIGIL:
            self._flush(TokenType.STR, pos)
            self._emit(TokenType.SYMBOL, char, pos)
            self.stack.append(context)
            return LexerContext(LexerState.IN_SUBSTITUTION)

        if char != context.char:
            self._push_char(char, pos)
            return context

        self._flush(TokenType.STR, pos)
        self._emit(TokenType.SYMBOL, char, pos)
        return START

    def _on_comment(self, context: LexerContext, char: str, pos: int) -> LexerContext:
        if char == '\n':
            self._flush(TokenType.COMMENT)
            return START

        self._push_char(char, pos)
        return context

    # ------------------------------------------------------------------
    # End of input
    # ------------------------------------------------------------------

    def _finish(self, context: LexerContext) -> None:
        """Flush the last token and check that every context was closed"""
        # An identifier may be the last thing inside a quote or subshell
        while context.state == LexerState.IN_SUBSTITUTION:
            if self._buffer:
                self._flush(TokenType.IDENTIFIER)
            context = self._pop()

        state = context.state
        if state == LexerState.IN_QUOTE:
            self._fail(LexErrorKind.UNTERMINATED_QUOTE,
                       f"Unterminated {context.char} quote", context.pos)

        if state == LexerState.IN_COMMENT and self.strict_comments:
            self._fail(LexErrorKind.UNTERMINATED_COMMENT,
                       "Comment not terminated by a newline", self._buffer_pos)

        if self._buffer:
            if state == LexerState.IN_LITERAL:
                self._flush_word()
            elif state == LexerState.IN_WILDCARD:
                self._flush(TokenType.WILDCARD)
            elif state == LexerState.IN_OPERATOR:
                self._flush(TokenType.SYMBOL)
            elif state == LexerState.IN_COMMENT:
                self._flush(TokenType.COMMENT)

        if self.stack:
            opened = self.stack[-1]
            self._fail(LexErrorKind.DANGLING_CONTEXT,
                       f"{len(self.stack)} unclosed substitution or group context(s)", opened.pos)

    def _fail(self, kind: LexErrorKind, message: str, pos: Optional[int] = None) -> None:
        self.logger.warning(f"Lex error {kind.name}: {message}")
        raise LexError(kind, message, pos)


# ============================================================================
# PUBLIC API
# ============================================================================

def tokenize(line: str, **options) -> List[Token]:
    """
    Tokenize a command line.

    Args:
        line: Shell command line
        **options: ShellLexer keyword arguments (logger, strict_comments, max_length)

    Returns:
        Tokens in source order

    Raises:
        LexError: on the first lexical error
    """
    return ShellLexer(line, **options).tokenize()
