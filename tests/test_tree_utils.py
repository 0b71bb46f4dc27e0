"""
Tests for rush.tree_utils - pretty printing and execution planning
"""
from rush.ast_nodes import Command, Identifier, Literal, Subshell
from rush.parser import parse_command_line
from rush.tree_utils import format_tree, get_execution_plan, print_ast_tree, walk


def test_format_subshell():
    expected = "\n".join([
        "COMMAND",
        "├──LITERAL: echo",
        "└──ARGS",
        "    └──SUBSHELL",
        "        └──COMMAND",
        "            ├──LITERAL: ls",
        "            └──ARGS",
        "                └──LITERAL: -a",
    ])
    assert format_tree(parse_command_line("echo $(ls -a)")) == expected


def test_format_pipe():
    expected = "\n".join([
        "PIPE",
        "├──COMMAND",
        "│   ├──LITERAL: a",
        "│   └──ARGS",
        "└──COMMAND",
        "    ├──LITERAL: b",
        "    └──ARGS",
        "        └──IDENT: X",
    ])
    assert format_tree(parse_command_line("a | b $X")) == expected


def test_format_quote_redirect_and_assignment():
    tree = parse_command_line('A=1 echo "hi $USER" > out')
    expected = "\n".join([
        "COMMAND",
        "├──ASSIGNMENTS",
        "│   └──ASSIGN: A",
        "│       └──LITERAL: 1",
        "├──LITERAL: echo",
        "├──REDIRECTS",
        "│   └──REDIRECT >",
        "│       └──LITERAL: out",
        "└──ARGS",
        '    └──QUOTE "',
        "        ├──STRING: hi ",
        "        ├──IDENT: USER",
        "        └──STRING: ",
    ])
    assert format_tree(tree) == expected


def test_print_ast_tree(capsys):
    print_ast_tree(parse_command_line("ls"))
    assert capsys.readouterr().out == "COMMAND\n├──LITERAL: ls\n└──ARGS\n"


def test_walk_is_preorder():
    tree = parse_command_line("echo $(ls $DIR)")
    assert list(walk(tree)) == [
        tree,
        Literal("echo"),
        Subshell(Command(Literal("ls"), [Identifier("DIR")])),
        Command(Literal("ls"), [Identifier("DIR")]),
        Literal("ls"),
        Identifier("DIR"),
    ]


def test_execution_plan():
    plan = get_execution_plan(parse_command_line("cat $(ls *.txt) | grep $PATTERN > out"))
    assert plan['type'] == 'Pipe'
    assert plan['commands'] == ['cat', 'ls', 'grep']
    assert plan['identifiers'] == ['PATTERN']
    assert plan['wildcards'] == ['*.txt']
    assert plan['requires_pipe']
    assert plan['requires_subshell']
    assert plan['requires_redirect']
    assert plan['nesting_depth'] == 1
    assert plan['complexity'] == 6.5


def test_plan_for_simple_command():
    plan = get_execution_plan(parse_command_line("ls -la"))
    assert plan['commands'] == ['ls']
    assert not plan['requires_pipe']
    assert not plan['requires_subshell']
    assert plan['nesting_depth'] == 0


def test_nesting_depth_counts_nested_substitutions():
    """Test depth equals the number of $( still open at the deepest point"""
    assert get_execution_plan(parse_command_line("echo $(a) $(b)"))['nesting_depth'] == 1
    assert get_execution_plan(parse_command_line("echo $(a $(b $(c)))"))['nesting_depth'] == 3
    assert get_execution_plan(parse_command_line('echo "x $(a "$(b)")"'))['nesting_depth'] == 2


def test_format_flattens_pipe_chain():
    expected = "\n".join([
        "PIPE",
        "├──COMMAND",
        "│   ├──LITERAL: a",
        "│   └──ARGS",
        "├──COMMAND",
        "│   ├──LITERAL: b",
        "│   └──ARGS",
        "└──COMMAND",
        "    ├──LITERAL: c",
        "    └──ARGS",
    ])
    assert format_tree(parse_command_line("a | b | c")) == expected


def test_long_pipeline():
    """Test utilities handle a pipeline longer than the recursion limit"""
    stages = 2000
    tree = parse_command_line(" | ".join(["a"] * stages))

    assert sum(1 for _ in walk(tree)) == 3 * stages - 1
    assert len(format_tree(tree).splitlines()) == 1 + 3 * stages

    plan = get_execution_plan(tree)
    assert plan['commands'] == ["a"] * stages
    assert plan['nesting_depth'] == 0
    assert plan['complexity'] == 2 * stages - 1


def test_empty_sequence():
    tree = parse_command_line("# nothing here")
    assert format_tree(tree) == "SEQUENCE"
    assert get_execution_plan(tree)['commands'] == []
