"""
Shell Parser - recursive descent over the lexer's tokens

OBJECTIVE: Turn one tokenized command line into a command tree.

============================================================================
USAGE
============================================================================

    >>> from rush.parser import parse_command_line
    >>> parse_command_line("history | grep git | xargs rm")
    Pipe(Pipe(Command(Literal('history'), []),
              Command(Literal('grep'), [Literal('git')])),
         Command(Literal('xargs'), [Literal('rm')]))

    >>> parse_command_line("echo $(ls -a)")
    Command(Literal('echo'), [Subshell(Command(Literal('ls'), [Literal('-a')]))])

============================================================================
GRAMMAR
============================================================================

    list         → pipeline (';' pipeline)* ';'?
    pipeline     → command ('|' command)*
    command      → (assignment | redirect)* [head (arg | redirect)*]
    head         → LITERAL | CONTROL_OPERATOR | substitution
    arg          → assignment | LITERAL | CONTROL_OPERATOR | WILDCARD
                   | '=' | quote | substitution
    assignment   → LITERAL '=' value?          ('=' joined to the word)
    redirect     → ('<' | '>' | '>>' | '<<') target
    quote        → QUOTE STR ('$' substitution STR)* QUOTE
    substitution → '$' (IDENTIFIER | '(' list ')')

Each rule is one method; recursion depth follows the nesting of
subshells and quotes in the input. Comments are dropped up front.
Control-flow keywords have no production of their own and are kept as
plain words.
"""

from typing import List, Optional
import logging
import re

from .ast_nodes import (
    ASTNode,
    Assign,
    Command,
    Identifier,
    Literal,
    Pipe,
    Quote,
    Redirect,
    Sequence,
    String,
    Subshell,
    Wildcard,
)
from .constants import (
    ASSIGN,
    DEFAULT_MAX_DEPTH,
    LPAREN,
    PIPE,
    QUOTE_CHARS,
    REDIRECT_OPERATORS,
    RPAREN,
    SEMICOLON,
    SUBSTITUTION_SIGIL,
)
from .errors import ParseError, ParseErrorKind
from .lexer import tokenize
from .tokens import Token, TokenType

# Variable names accepted before the command head
ASSIGNMENT_NAME_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')

WORD_TYPES = (TokenType.LITERAL, TokenType.CONTROL_OPERATOR)


class ShellParser:
    """
    Parser for shell command lines - constructs the command tree.

    PRECEDENCE (lowest to highest):
    1. ; (sequence)
    2. | (pipeline)
    3. Command with arguments and redirects
    4. Quotes and substitutions
    """

    def __init__(self, tokens: List[Token], logger=None, max_depth: int = DEFAULT_MAX_DEPTH):
        """
        Initialize parser

        Args:
            tokens: Output of the lexer (or an equivalent hand-built list)
            logger: Logger instance
            max_depth: Deepest allowed nesting of substitutions and quotes
        """
        self.tokens = [t for t in tokens if t.type != TokenType.COMMENT]
        self.comment_only = bool(tokens) and not self.tokens
        self.logger = logger or logging.getLogger('ShellParser')
        self.max_depth = max_depth
        self.pos = 0
        self.depth = 0

    def parse(self) -> ASTNode:
        """
        Parse tokens into a command tree.

        A line holding nothing but comments is an empty Sequence; a line
        with no tokens at all raises UNEXPECTED_END_OF_INPUT.
        """
        if self.comment_only:
            self.logger.debug("Only comments, nothing to parse")
            return Sequence([])

        tree = self._parse_sequence()

        trailing = self._current()
        if trailing is not None:
            if trailing.is_symbol(RPAREN):
                self._fail(ParseErrorKind.UNBALANCED_PARENTHESIS, "Unmatched ')'", trailing)
            self._fail(ParseErrorKind.UNEXPECTED_TOKEN,
                       f"Unexpected {trailing.type.name} {trailing.value!r}", trailing)

        self.logger.debug(f"Parsed {len(self.tokens)} tokens into {type(tree).__name__}")
        return tree

    # ------------------------------------------------------------------
    # Token access
    # ------------------------------------------------------------------

    def _current(self) -> Optional[Token]:
        """Get current token (None at end of input)"""
        if self.pos >= len(self.tokens):
            return None
        return self.tokens[self.pos]

    def _peek(self, offset: int = 1) -> Optional[Token]:
        """Peek ahead"""
        pos = self.pos + offset
        if pos >= len(self.tokens):
            return None
        return self.tokens[pos]

    def _consume(self) -> Token:
        """Consume and return current token"""
        token = self._current()
        if token is None:
            self._fail(ParseErrorKind.UNEXPECTED_END_OF_INPUT, "Unexpected end of input")
        self.pos += 1
        return token

    def _fail(self, kind: ParseErrorKind, message: str, token: Optional[Token] = None) -> None:
        pos = token.pos if token is not None else None
        self.logger.warning(f"Parse error {kind.name}: {message}")
        raise ParseError(kind, message, pos, token)

    def _enter(self, token: Token) -> None:
        self.depth += 1
        if self.depth > self.max_depth:
            self._fail(ParseErrorKind.NESTING_TOO_DEEP,
                       f"Nesting deeper than {self.max_depth} levels", token)

    def _leave(self) -> None:
        self.depth -= 1

    # ------------------------------------------------------------------
    # Lists and pipelines
    # ------------------------------------------------------------------

    def _parse_sequence(self) -> ASTNode:
        """
        Parse pipelines separated by ;

        sequence → pipeline (';' pipeline)* ';'?
        """
        commands = [self._parse_pipeline()]

        while self._is_symbol(SEMICOLON):
            self._consume()
            # Trailing ; before end of input or a closing subshell
            if self._current() is None or self._is_symbol(RPAREN):
                break
            commands.append(self._parse_pipeline())

        if len(commands) == 1:
            return commands[0]
        return Sequence(commands)

    def _parse_pipeline(self) -> ASTNode:
        """
        Parse pipe chain (left-associative).

        pipeline → command ('|' command)*
        """
        tree = self._parse_command()

        while self._is_symbol(PIPE):
            self._consume()
            tree = Pipe(tree, self._parse_command())

        return tree

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _parse_command(self) -> Command:
        """
        Parse one command.

        command → (assignment | redirect)* [head (arg | redirect)*]

        Assignments and redirects may precede the head; a command made
        only of them has no name (MY_VAR="value").
        """
        assignments = []
        redirects = []

        while True:
            if self._is_assignment(prefix=True):
                assignments.append(self._parse_assignment())
            elif self._is_redirect():
                redirects.append(self._parse_redirect())
            else:
                break

        token = self._current()
        if token is None:
            if assignments or redirects:
                return Command(None, [], redirects, assignments)
            self._fail(ParseErrorKind.UNEXPECTED_END_OF_INPUT, "Expected command")

        if token.type in WORD_TYPES:
            name = Literal(self._consume().value)
        elif token.is_symbol(SUBSTITUTION_SIGIL):
            name = self._parse_substitution()
        elif assignments or redirects:
            return Command(None, [], redirects, assignments)
        else:
            self._fail(ParseErrorKind.INVALID_COMMAND_HEAD,
                       f"Expected command, got {token.type.name} {token.value!r}", token)

        args = []
        while True:
            arg = self._parse_arg()
            if arg is not None:
                args.append(arg)
            elif self._is_redirect():
                redirects.append(self._parse_redirect())
            else:
                # |, ;, ) or end of input - done with this command
                break

        return Command(name, args, redirects, assignments)

    def _parse_arg(self) -> Optional[ASTNode]:
        """Parse one argument, None when the current token cannot start one"""
        if self._is_assignment():
            return self._parse_assignment()

        token = self._current()
        if token is not None and token.is_symbol(ASSIGN):
            # test "$a" = "$b"
            return Literal(self._consume().value)
        return self._parse_value()

    def _parse_value(self) -> Optional[ASTNode]:
        """
        Parse a word, quote or substitution.

        Shared by arguments, assignment values and redirect targets.
        """
        token = self._current()
        if token is None:
            return None

        if token.type in WORD_TYPES:
            return Literal(self._consume().value)
        if token.type == TokenType.WILDCARD:
            return Wildcard(self._consume().value)
        if token.is_symbol(SUBSTITUTION_SIGIL):
            return self._parse_substitution()
        if token.is_symbol(*QUOTE_CHARS):
            return self._parse_quote()
        return None

    def _is_assignment(self, prefix: bool = False) -> bool:
        """
        Check for NAME=... at the current token.

        Before the head only shell variable names qualify; as an argument
        any word does (--color=auto).
        """
        name = self._current()
        sign = self._peek()
        if name is None or sign is None:
            return False
        if name.type != TokenType.LITERAL or not sign.is_symbol(ASSIGN):
            return False
        if prefix and not ASSIGNMENT_NAME_RE.match(name.value):
            return False
        return sign.joined_left

    def _parse_assignment(self) -> Assign:
        """
        Parse NAME=value.

        assignment → LITERAL '=' value?
        """
        name = self._consume()
        sign = self._consume()

        value = None
        if sign.joined_right:
            value = self._parse_value()
        return Assign(name.value, value)

    def _is_redirect(self) -> bool:
        """Check if current token is redirect operator"""
        token = self._current()
        return token is not None and token.is_symbol(*REDIRECT_OPERATORS)

    def _parse_redirect(self) -> Redirect:
        """
        Parse redirection.

        redirect → ('<' | '>' | '>>' | '<<') target

        For << the target is the here-doc delimiter; the body is not read.
        """
        op = self._consume()
        target = self._parse_value()
        if target is None:
            self._fail(ParseErrorKind.INVALID_REDIRECT, f"Missing target after {op.value!r}", op)
        return Redirect(op.value, target)

    # ------------------------------------------------------------------
    # Substitutions and quotes
    # ------------------------------------------------------------------

    def _parse_substitution(self) -> ASTNode:
        """
        Parse $NAME or $( ... ).

        substitution → '$' (IDENTIFIER | '(' list ')')
        """
        sigil = self._consume()
        try:
            self._enter(sigil)
            token = self._current()
            if token is None:
                self._fail(ParseErrorKind.UNEXPECTED_END_OF_INPUT, "Expected name or '(' after '$'", sigil)

            if token.type == TokenType.IDENTIFIER:
                return Identifier(self._consume().value)

            if token.is_symbol(LPAREN):
                self._consume()
                inner = self._parse_sequence()
                if not self._is_symbol(RPAREN):
                    self._fail(ParseErrorKind.UNBALANCED_PARENTHESIS, "Missing ')'", token)
                self._consume()
                return Subshell(inner)

            self._fail(ParseErrorKind.INVALID_SUBSTITUTION,
                       f"Invalid substitution {token.type.name} {token.value!r}", token)
        finally:
            self._leave()

    def _parse_quote(self) -> ASTNode:
        """
        Parse a quoted argument.

        quote → QUOTE STR ('$' substitution STR)* QUOTE

        Without substitutions the quote collapses to one String that keeps
        its delimiters; otherwise a Quote holds fragments and substitutions
        in order, empty fragments included.
        """
        opening = self._consume()
        quote_char = opening.value
        try:
            self._enter(opening)
            parts = []
            while True:
                fragment = self._current()
                if fragment is None:
                    self._fail(ParseErrorKind.UNBALANCED_QUOTE,
                               f"Unterminated {quote_char} quote", opening)
                if fragment.type != TokenType.STR:
                    self._fail(ParseErrorKind.INVALID_QUOTE_CONTENTS,
                               f"Expected quoted text, got {fragment.type.name} {fragment.value!r}", fragment)
                self._consume()

                symbol = self._current()
                if symbol is None:
                    self._fail(ParseErrorKind.UNBALANCED_QUOTE,
                               f"Unterminated {quote_char} quote", opening)

                if symbol.is_symbol(quote_char):
                    self._consume()
                    if not parts:
                        return String(f"{quote_char}{fragment.value}{quote_char}")
                    parts.append(String(fragment.value))
                    return Quote(quote_char, parts)

                if symbol.is_symbol(SUBSTITUTION_SIGIL):
                    parts.append(String(fragment.value))
                    parts.append(self._parse_substitution())
                    continue

                self._fail(ParseErrorKind.INVALID_QUOTE_CONTENTS,
                           f"Unexpected {symbol.type.name} {symbol.value!r} inside quote", symbol)
        finally:
            self._leave()

    def _is_symbol(self, *values: str) -> bool:
        token = self._current()
        return token is not None and token.is_symbol(*values)


# ============================================================================
# PUBLIC API
# ============================================================================

def parse(tokens: List[Token], **options) -> ASTNode:
    """
    Parse a token list into a command tree.

    Args:
        tokens: Lexer output
        **options: ShellParser keyword arguments (logger, max_depth)

    Raises:
        ParseError: on the first structural error
    """
    return ShellParser(tokens, **options).parse()


def parse_command_line(line: str, logger=None) -> ASTNode:
    """
    Tokenize and parse a command line.

    Example:
        >>> parse_command_line('ls ./src/*.rs')
        Command(Literal('ls'), [Wildcard('./src/*.rs')])
    """
    if logger is None:
        return parse(tokenize(line))
    return parse(tokenize(line, logger=logger), logger=logger)
