"""
AST utilities - Pretty print and execution planning

    >>> print_ast_tree(parse_command_line("echo $(ls -a)"))
    COMMAND
    ├──LITERAL: echo
    └──ARGS
        └──SUBSHELL
            └──COMMAND
                ├──LITERAL: ls
                └──ARGS
                    └──LITERAL: -a
"""

from typing import Iterator, List

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

BRANCH = '├──'
LAST = '└──'
PIPE_PAD = '│   '
BLANK_PAD = '    '


def _children(label: str, children: List[ASTNode], pad: str) -> str:
    """Render label followed by one line per child"""
    lines = [label]
    for i, child in enumerate(children):
        last = i == len(children) - 1
        connector = LAST if last else BRANCH
        child_pad = pad + (BLANK_PAD if last else PIPE_PAD)
        lines.append(f"{pad}{connector}{_format(child, child_pad)}")
    return '\n'.join(lines)


def _pipeline_stages(node: Pipe) -> List[ASTNode]:
    """Stages of a left-nested Pipe chain, in source order"""
    stages = []
    while isinstance(node, Pipe):
        stages.append(node.right)
        node = node.left
    stages.append(node)
    stages.reverse()
    return stages


def _format(node: ASTNode, pad: str) -> str:
    if isinstance(node, Pipe):
        # a | b | c is drawn as one PIPE with three stages
        return _children('PIPE', _pipeline_stages(node), pad)

    if isinstance(node, Sequence):
        return _children('SEQUENCE', node.commands, pad)

    if isinstance(node, Command):
        # name and the ARGS line are always shown, even when empty
        lines = ['COMMAND']
        if node.assignments:
            lines.append(f"{pad}{BRANCH}" + _children('ASSIGNMENTS', node.assignments, pad + PIPE_PAD))
        name = _format(node.name, pad + PIPE_PAD) if node.name is not None else 'NO NAME'
        lines.append(f"{pad}{BRANCH}{name}")
        if node.redirects:
            lines.append(f"{pad}{BRANCH}" + _children('REDIRECTS', node.redirects, pad + PIPE_PAD))
        lines.append(f"{pad}{LAST}" + _children('ARGS', node.args, pad + BLANK_PAD))
        return '\n'.join(lines)

    if isinstance(node, Subshell):
        return _children('SUBSHELL', [node.pipeline], pad)

    if isinstance(node, Quote):
        return _children(f"QUOTE {node.quote_char}", node.parts, pad)

    if isinstance(node, Redirect):
        return _children(f"REDIRECT {node.op}", [node.target], pad)

    if isinstance(node, Assign):
        values = [node.value] if node.value is not None else []
        return _children(f"ASSIGN: {node.name}", values, pad)

    if isinstance(node, Literal):
        return f"LITERAL: {node.text}"
    if isinstance(node, Wildcard):
        return f"WILDCARD: {node.text}"
    if isinstance(node, Identifier):
        return f"IDENT: {node.text}"
    if isinstance(node, String):
        return f"STRING: {node.text}"

    return f"UNKNOWN: {type(node).__name__}"


def format_tree(node: ASTNode) -> str:
    """Render the command tree with box-drawing characters"""
    return _format(node, '')


def print_ast_tree(node: ASTNode) -> None:
    """
    Pretty print AST as tree structure.

    Useful for debugging and understanding command structure.
    """
    print(format_tree(node))


def _children_of(node: ASTNode) -> List[ASTNode]:
    """Direct children in source order"""
    if isinstance(node, Pipe):
        return [node.left, node.right]
    if isinstance(node, Sequence):
        return list(node.commands)
    if isinstance(node, Command):
        children = list(node.assignments)
        if node.name is not None:
            children.append(node.name)
        children.extend(node.args)
        children.extend(node.redirects)
        return children
    if isinstance(node, Subshell):
        return [node.pipeline]
    if isinstance(node, Quote):
        return list(node.parts)
    if isinstance(node, Redirect):
        return [node.target]
    if isinstance(node, Assign) and node.value is not None:
        return [node.value]
    return []


def walk(node: ASTNode) -> Iterator[ASTNode]:
    """Yield node and all of its descendants, pre-order, source order"""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(_children_of(current)))


def nesting_depth(node: ASTNode) -> int:
    """Deepest chain of nested subshells"""
    deepest = 0
    stack = [(node, 0)]
    while stack:
        current, depth = stack.pop()
        if isinstance(current, Subshell):
            depth += 1
            deepest = max(deepest, depth)
        stack.extend((child, depth) for child in _children_of(current))
    return deepest


def get_execution_plan(node: ASTNode) -> dict:
    """
    Extract execution plan from the command tree.

    Returns dict with:
        - type: Root node type
        - commands: Head words of every command, in source order
        - identifiers: Variables the evaluator must resolve
        - wildcards: Patterns the evaluator must expand
        - requires_*: Capabilities required (pipe, subshell, redirect)
        - nesting_depth: Deepest subshell nesting
        - complexity: Estimated complexity score
    """
    plan = {
        'type': type(node).__name__,
        'commands': [],
        'identifiers': [],
        'wildcards': [],
        'requires_pipe': False,
        'requires_subshell': False,
        'requires_redirect': False,
        'nesting_depth': nesting_depth(node),
        'complexity': 0,
    }

    for child in walk(node):
        if isinstance(child, Command):
            plan['complexity'] += 1
            if isinstance(child.name, Literal):
                plan['commands'].append(child.name.text)
        elif isinstance(child, Pipe):
            plan['requires_pipe'] = True
            plan['complexity'] += 1
        elif isinstance(child, Subshell):
            plan['requires_subshell'] = True
            plan['complexity'] += 2
        elif isinstance(child, Redirect):
            plan['requires_redirect'] = True
            plan['complexity'] += 0.5
        elif isinstance(child, Identifier):
            plan['identifiers'].append(child.text)
        elif isinstance(child, Wildcard):
            plan['wildcards'].append(child.text)

    return plan
