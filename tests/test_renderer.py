import re

import pytest

from mcp_dice_notation.errors import ExpressionTooDeepError
from mcp_dice_notation.parser import parse
from mcp_dice_notation.renderer import GraphWriter, render, render_dot, render_mermaid


EXPECTED_DOT = """\
digraph {
    graph [rankdir=TB]
    node [shape=rect]
    edge [fontsize=10]
    node0001 [label="Add"]
    node0002 [label="2"]
    node0001 -> node0002 [label="left"]
    node0003 [label="Roll"]
    node0004 [label="1"]
    node0003 -> node0004 [label="count"]
    node0005 [label="6"]
    node0003 -> node0005 [label="sides"]
    node0006 [label="Keep Highest"]
    node0007 [label="3"]
    node0006 -> node0007 [label="count"]
    node0003 -> node0006 [label="select"]
    node0001 -> node0003 [label="right"]
}
"""

EXPECTED_MERMAID = """\
graph TB
    node0001("Negate")
    node0002("Roll")
    node0003("4")
    node0002 -- count --> node0003
    node0004("20")
    node0002 -- sides --> node0004
    node0005("Discard Lowest")
    node0006("1")
    node0005 -- count --> node0006
    node0002 -- select --> node0005
    node0007("Advantage")
    node0002 -- select --> node0007
    node0001 -- inner --> node0002
"""


def test_dot_output():
    assert render_dot(parse("2 + d6kh3")) == EXPECTED_DOT


def test_mermaid_output():
    assert render_mermaid(parse("-4d20d adv")) == EXPECTED_MERMAID


@pytest.mark.parametrize("fmt", ["dot", "mermaid"])
@pytest.mark.parametrize(
    "text",
    ["d20", "(4d6kh3 + 2) * 3 - -1", "2d10 dl1 kh1 dis / 2", "d%adv"],
)
def test_repeated_renders_are_identical(fmt, text):
    root = parse(text)
    assert render(root, fmt) == render(root, fmt)
    writer = GraphWriter(fmt)
    assert writer.write(root) == writer.write(root)


@pytest.mark.parametrize(
    ("text", "nodes", "labels"),
    [
        ("7", 1, ["7"]),
        ("1 - 2 * 3 / 4", 7, ["Subtract", "1", "Divide", "Multiply", "2", "3", "4"]),
        ("2d8dh2dis", 6, ["Roll", "2", "8", "Discard Highest", "2", "Disadvantage"]),
        ("d4kl", 5, ["Roll", "1", "4", "Keep Lowest", "1"]),
    ],
)
def test_every_node_once_and_one_edge_per_child(text, nodes, labels):
    out = render_dot(parse(text))
    declared = re.findall(r'^    (node\w+) \[label="([^"]*)"\]$', out, re.MULTILINE)
    edges = re.findall(r"^    (node\w+) -> (node\w+) ", out, re.MULTILINE)

    assert [label for _, label in declared] == labels
    ids = [node_id for node_id, _ in declared]
    assert len(set(ids)) == nodes
    # A tree: every node but the root is the child of exactly one edge.
    assert len(edges) == nodes - 1
    assert sorted(child for _, child in edges) == sorted(ids[1:])


def test_edge_roles():
    out = render_dot(parse("-(1 + 2d6)"))
    assert sorted(set(re.findall(r'-> node\w+ \[label="(\w+)"\]', out))) == [
        "count",
        "inner",
        "left",
        "right",
        "sides",
    ]


def test_unknown_format():
    with pytest.raises(ValueError):
        GraphWriter("svg")


@pytest.mark.parametrize("fmt", ["dot", "mermaid"])
def test_long_chain_is_rejected(fmt):
    root = parse("+".join(["1"] * 5000))
    with pytest.raises(ExpressionTooDeepError) as exc:
        render(root, fmt)
    assert str(exc.value).startswith("[EXPRESSION_TOO_DEEP]")
    assert exc.value.stage == "render"
