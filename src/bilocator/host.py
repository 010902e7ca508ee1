"""
Reference host tree.

The engine only needs two things from a host: the parent of a position and a way to
schedule a position for re-evaluation (see ``TreeHost``). ``Node`` and ``NodeHost`` are
a minimal host used by the demos and tests; UI toolkits adapt their own element trees.
"""

from __future__ import annotations

from collections.abc import Iterator


class Node:
    """A position in a hierarchical tree with a needs-update flag."""

    def __init__(self, label: str = "", parent: Node | None = None):
        self.label = label
        self.parent: Node | None = None
        self.children: list[Node] = []
        self.needs_update = False
        self.update_requests = 0
        if parent is not None:
            parent.add_child(self)

    def add_child(self, child: Node) -> Node:
        if child.parent is not None:
            child.parent.remove_child(child)
        child.parent = self
        self.children.append(child)
        return child

    def child(self, label: str = "") -> Node:
        """Create and attach a new child."""
        return Node(label, self)

    def remove_child(self, child: Node) -> None:
        self.children.remove(child)
        child.parent = None

    def ancestors(self) -> Iterator[Node]:
        """This node, then each parent up to the root."""
        node: Node | None = self
        while node is not None:
            yield node
            node = node.parent

    def post_order(self) -> Iterator[Node]:
        """Descendants before their parents, this node last."""
        for child in list(self.children):
            yield from child.post_order()
        yield self

    def is_descendant_of(self, other: Node) -> bool:
        return any(node is other for node in self.ancestors())

    def mark_needs_update(self) -> None:
        self.needs_update = True
        self.update_requests += 1

    def clear_needs_update(self) -> None:
        self.needs_update = False

    @property
    def path(self) -> str:
        return "/".join(reversed([node.label or "?" for node in self.ancestors()]))

    def __repr__(self) -> str:
        return f"Node({self.path!r})"


class NodeHost:
    """TreeHost over ``Node`` objects."""

    def parent_of(self, position: Node) -> Node | None:
        return position.parent

    def mark_needs_update(self, position: Node) -> None:
        position.mark_needs_update()
