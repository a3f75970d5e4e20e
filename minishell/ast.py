"""Binary syntax tree used to describe a command line."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Iterator, Optional


class NodeType(Enum):
    """Kind of a syntax tree node."""

    COMMAND = auto()
    PIPE = auto()


@dataclass(eq=False)
class AstNode:
    """A node of the syntax tree.

    ``root`` points at the root of the tree the node was created for and
    defaults to the node itself.
    """

    data: Any = None
    type: NodeType = NodeType.COMMAND
    root: Optional["AstNode"] = None
    parent: Optional["AstNode"] = field(default=None, repr=False)
    left: Optional["AstNode"] = None
    right: Optional["AstNode"] = None

    def __post_init__(self) -> None:
        if self.root is None:
            self.root = self

    def add_left(self, node: Optional["AstNode"]) -> None:
        """Attach ``node`` as the left child; ``None`` is ignored."""
        if node is None:
            return
        self.left = node
        node.parent = self

    def add_right(self, node: Optional["AstNode"]) -> None:
        """Attach ``node`` as the right child; ``None`` is ignored."""
        if node is None:
            return
        self.right = node
        node.parent = self

    def add_left_right(
        self, left: Optional["AstNode"], right: Optional["AstNode"]
    ) -> None:
        """Attach both children at once; nothing changes if either is missing."""
        if left is None or right is None:
            return
        self.add_left(left)
        self.add_right(right)

    def postorder(self) -> Iterator["AstNode"]:
        """Yield the left subtree, the right subtree, then this node."""
        if self.left is not None:
            yield from self.left.postorder()
        if self.right is not None:
            yield from self.right.postorder()
        yield self