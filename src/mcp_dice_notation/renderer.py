"""Graphviz DOT and Mermaid renderings of a dice syntax tree."""

from __future__ import annotations

from .errors import ExpressionTooDeepError
from .models import (
    Add,
    Advantage,
    Disadvantage,
    Discard,
    Divide,
    GraphFormat,
    Keep,
    Literal,
    Multiply,
    Negate,
    Node,
    Roll,
    Selector,
    Subtract,
)


_BINARY_LABELS = {
    Add: "Add",
    Subtract: "Subtract",
    Multiply: "Multiply",
    Divide: "Divide",
}


def _selector_label(selector: Selector) -> str:
    if isinstance(selector, Advantage):
        return "Advantage"
    if isinstance(selector, Disadvantage):
        return "Disadvantage"
    action = "Keep" if isinstance(selector, Keep) else "Discard"
    mode = "Highest" if selector.mode == "high" else "Lowest"
    return f"{action} {mode}"


def _escape(label: str) -> str:
    return label.replace("\\", "\\\\").replace('"', '\\"')


class GraphWriter:
    """Walks a tree in pre-order, numbering nodes as they are first visited."""

    def __init__(self, fmt: GraphFormat) -> None:
        if fmt not in ("dot", "mermaid"):
            raise ValueError(f"Unknown graph format: {fmt!r}")
        self.fmt = fmt
        self._lines: list[str] = []
        self._next_id = 1

    def write(self, root: Node) -> str:
        self._lines = []
        self._next_id = 1

        if self.fmt == "dot":
            self._lines += [
                "digraph {",
                "    graph [rankdir=TB]",
                "    node [shape=rect]",
                "    edge [fontsize=10]",
            ]
        else:
            self._lines.append("graph TB")

        try:
            self._visit(root)
        except RecursionError:
            raise ExpressionTooDeepError("render") from None

        if self.fmt == "dot":
            self._lines.append("}")
        return "\n".join(self._lines) + "\n"

    def _node(self, label: str) -> str:
        node_id = f"node{self._next_id:04x}"
        self._next_id += 1
        if self.fmt == "dot":
            self._lines.append(f'    {node_id} [label="{_escape(label)}"]')
        else:
            self._lines.append(f'    {node_id}("{label}")')
        return node_id

    def _edge(self, parent: str, child: str, role: str) -> None:
        if self.fmt == "dot":
            self._lines.append(f'    {parent} -> {child} [label="{role}"]')
        else:
            self._lines.append(f"    {parent} -- {role} --> {child}")

    def _visit(self, node: Node) -> str:
        if isinstance(node, Literal):
            return self._node(str(node.value))

        if isinstance(node, Negate):
            node_id = self._node("Negate")
            self._edge(node_id, self._visit(node.inner), "inner")
            return node_id

        if isinstance(node, Roll):
            node_id = self._node("Roll")
            self._edge(node_id, self._visit(node.count), "count")
            self._edge(node_id, self._visit(node.sides), "sides")
            for selector in node.selectors:
                self._edge(node_id, self._visit_selector(selector), "select")
            return node_id

        node_id = self._node(_BINARY_LABELS[type(node)])
        self._edge(node_id, self._visit(node.left), "left")
        self._edge(node_id, self._visit(node.right), "right")
        return node_id

    def _visit_selector(self, selector: Selector) -> str:
        node_id = self._node(_selector_label(selector))
        if isinstance(selector, (Keep, Discard)):
            self._edge(node_id, self._node(str(selector.n)), "count")
        return node_id


def render(root: Node, fmt: GraphFormat = "dot") -> str:
    return GraphWriter(fmt).write(root)


def render_dot(root: Node) -> str:
    return render(root, "dot")


def render_mermaid(root: Node) -> str:
    return render(root, "mermaid")
