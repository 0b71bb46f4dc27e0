"""
rush - Shell command line front end

Main components:
- ShellLexer: Character-level state machine, line -> tokens
- ShellParser: Recursive descent, tokens -> command tree
- ast_nodes: Command tree (Pipe, Command, Quote, Subshell, ...)
- tree_utils: Pretty printing and execution planning
"""

from .errors import LexError, LexErrorKind, ParseError, ParseErrorKind, ShellSyntaxError
from .tokens import Token, TokenType
from .lexer import ShellLexer, tokenize
from .parser import ShellParser, parse, parse_command_line
from .tree_utils import format_tree, get_execution_plan, print_ast_tree, walk

__all__ = [
    'ShellLexer',
    'ShellParser',
    'Token',
    'TokenType',
    'tokenize',
    'parse',
    'parse_command_line',
    'format_tree',
    'print_ast_tree',
    'get_execution_plan',
    'walk',
    'ShellSyntaxError',
    'LexError',
    'LexErrorKind',
    'ParseError',
    'ParseErrorKind',
]
