"""
Constants and configuration for the rush lexer and parser
"""

# ============================================================================
# CHARACTER CLASSES
# ============================================================================
# Besides alphanumerics, these characters continue a bare word.
# '-' covers flags (-F, --group-directories-first), the rest covers paths.
PATH_CHARS = frozenset('_~/.-')

# Characters allowed in a substitution target: $VAR, ${VAR}
IDENTIFIER_CHARS = frozenset('_{}')

QUOTE_CHARS = frozenset('\'"')

# Emitted as Symbol tokens the moment they are seen
SINGLE_SYMBOLS = frozenset('|=;')

# May double up: < << > >>
DIRECTION_CHARS = frozenset('<>')

ESCAPE_CHAR = '\\'
COMMENT_CHAR = '#'
SUBSTITUTION_SIGIL = '$'
WILDCARD_CHAR = '*'


# ============================================================================
# RESERVED WORDS
# ============================================================================
# Only an exact, case-sensitive match of the whole word is reserved.
CONTROL_FLOW_KEYWORDS = frozenset({'if', 'then', 'else', 'fi'})


# ============================================================================
# GRAMMAR SYMBOLS
# ============================================================================
PIPE = '|'
ASSIGN = '='
SEMICOLON = ';'
LPAREN = '('
RPAREN = ')'

REDIRECT_OPERATORS = frozenset({'<', '>', '>>', '<<'})


# ============================================================================
# LIMITS
# ============================================================================
# Each nested subshell or quote costs the parser about six frames,
# stay well below the interpreter recursion limit.
DEFAULT_MAX_DEPTH = 100

# None means unbounded
DEFAULT_MAX_INPUT_LENGTH = None
