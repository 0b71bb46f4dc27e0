"""
Command tree produced by the parser.

============================================================================
AST NODE TYPES
============================================================================

    Pipe        - left | right (left-associative)
    Sequence    - pipelines separated by ;
    Command     - head word, arguments, redirects, leading assignments
    Subshell    - $( ... ), its output is the substitution value
    Quote       - quoted text with embedded substitutions
    Redirect    - < file, > file, >> file, << WORD
    Assign      - NAME=value

    Literal     - bare word
    Wildcard    - bare word with *, expanded by the evaluator
    Identifier  - $NAME target, resolved by the evaluator
    String      - quoted text fragment

Nodes are immutable and own their children; traversal is top-down only.
Child lists are stored as tuples, lists given to a constructor are
converted so hand-built trees compare equal to parsed ones.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union


class ASTNode:
    """Base class for AST nodes"""
    pass


def _freeze(node: ASTNode, *names: str) -> None:
    """Replace list-valued fields of a frozen node with tuples"""
    for name in names:
        object.__setattr__(node, name, tuple(getattr(node, name)))


# ============================================================================
# LEAVES
# ============================================================================

@dataclass(frozen=True)
class Literal(ASTNode):
    text: str

    def __repr__(self):
        return f"Literal({self.text!r})"


@dataclass(frozen=True)
class Wildcard(ASTNode):
    """Word containing an unescaped *, passed through verbatim"""
    text: str

    def __repr__(self):
        return f"Wildcard({self.text!r})"


@dataclass(frozen=True)
class Identifier(ASTNode):
    """Name after $, without the sigil"""
    text: str

    def __repr__(self):
        return f"Identifier({self.text!r})"


@dataclass(frozen=True)
class String(ASTNode):
    """
    Quoted text.

    A quote without substitutions becomes one String that keeps its
    delimiters: String('"My name"'). Fragments inside a Quote do not.
    """
    text: str

    def __repr__(self):
        return f"String({self.text!r})"


# ============================================================================
# COMPOSITES
# ============================================================================

@dataclass(frozen=True)
class Subshell(ASTNode):
    """
    Command substitution $(pipeline).

    Example: echo $(ls -a)
    """
    pipeline: ASTNode

    def __repr__(self):
        return f"Subshell({self.pipeline!r})"


@dataclass(frozen=True)
class Quote(ASTNode):
    """
    Quoted text with at least one substitution.

    parts alternates String fragments and substitutions, in source order.
    Example: "this is $VAR right here"
        Quote('"', [String('this is '), Identifier('VAR'), String(' right here')])
    """
    quote_char: str
    parts: Tuple[ASTNode, ...]

    def __post_init__(self):
        _freeze(self, 'parts')

    def __repr__(self):
        return f"Quote({self.quote_char!r}, {list(self.parts)!r})"


@dataclass(frozen=True)
class Redirect(ASTNode):
    """
    Redirection operation.

    Examples:
        > file      - stdout to file
        >> file     - stdout append to file
        < file      - stdin from file
        << EOF      - here-doc delimiter (body not captured)
    """
    op: str
    target: ASTNode

    def __repr__(self):
        return f"{self.op}{self.target!r}"


@dataclass(frozen=True)
class Assign(ASTNode):
    """
    NAME=value, value is None for NAME=

    Before the head word it sets the command environment
    (MY_VAR="value" cmd), as an argument it is a plain word (export A=1).
    """
    name: str
    value: Optional[ASTNode] = None

    def __repr__(self):
        return f"Assign({self.name!r}, {self.value!r})"


@dataclass(frozen=True)
class Command(ASTNode):
    """
    Single command with arguments.

    name is None when the command only sets variables or redirects:
        MY_VAR="value"
    """
    name: Optional[ASTNode]
    args: Tuple[ASTNode, ...] = ()
    redirects: Tuple[Redirect, ...] = ()
    assignments: Tuple[Assign, ...] = ()

    def __post_init__(self):
        _freeze(self, 'args', 'redirects', 'assignments')

    def __repr__(self):
        extra = ''
        if self.redirects:
            extra += f", redirects={list(self.redirects)!r}"
        if self.assignments:
            extra += f", assignments={list(self.assignments)!r}"
        return f"Command({self.name!r}, {list(self.args)!r}{extra})"


@dataclass(frozen=True)
class Pipe(ASTNode):
    """
    left's output feeds right's input.

    Example: history | grep git | xargs rm
        Pipe(Pipe(history, grep git), xargs rm)
    """
    left: ASTNode
    right: ASTNode

    def __repr__(self):
        return f"Pipe({self.left!r}, {self.right!r})"


@dataclass(frozen=True)
class Sequence(ASTNode):
    """
    Pipelines connected by ; (unconditional sequence).

    Example: cd /tmp ; ls

    Empty when the line held only comments.
    """
    commands: Tuple[ASTNode, ...]

    def __post_init__(self):
        _freeze(self, 'commands')

    def __repr__(self):
        return f"Seq({' ; '.join(repr(c) for c in self.commands)})"


# Convenience union type (for type hints only; use isinstance() at runtime)
Node = Union[Pipe, Sequence, Command, Subshell, Quote, Redirect, Assign,
             Literal, Wildcard, Identifier, String]
