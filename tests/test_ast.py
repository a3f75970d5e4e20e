import pytest

from minishell.ast import AstNode, NodeType


def test_root_defaults_to_self():
    node = AstNode("ls")
    assert node.root is node
    assert node.parent is None
    assert node.left is None and node.right is None


def test_explicit_root_is_kept():
    top = AstNode(None, NodeType.PIPE)
    child = AstNode("cat", NodeType.COMMAND, root=top)
    assert child.root is top


def test_add_left_sets_parent():
    parent = AstNode(None, NodeType.PIPE)
    child = AstNode("ls")
    parent.add_left(child)
    assert parent.left is child
    assert child.parent is parent


def test_add_right_sets_parent():
    parent = AstNode(None, NodeType.PIPE)
    child = AstNode("wc")
    parent.add_right(child)
    assert parent.right is child
    assert child.parent is parent


@pytest.mark.parametrize("method", ["add_left", "add_right"])
def test_adding_none_changes_nothing(method):
    parent = AstNode(None, NodeType.PIPE)
    getattr(parent, method)(None)
    assert parent.left is None
    assert parent.right is None


def test_add_left_right_links_both():
    parent = AstNode(None, NodeType.PIPE)
    left, right = AstNode("a"), AstNode("b")
    parent.add_left_right(left, right)
    assert (parent.left, parent.right) == (left, right)
    assert left.parent is parent and right.parent is parent


@pytest.mark.parametrize("which", ["left", "right"])
def test_add_left_right_needs_both(which):
    parent = AstNode(None, NodeType.PIPE)
    node = AstNode("x")
    if which == "left":
        parent.add_left_right(node, None)
    else:
        parent.add_left_right(None, node)
    assert parent.left is None and parent.right is None
    assert node.parent is None


def test_postorder_visits_children_before_parent():
    top = AstNode("top", NodeType.PIPE)
    inner = AstNode("inner", NodeType.PIPE)
    a, b, c = AstNode("a"), AstNode("b"), AstNode("c")
    inner.add_left_right(a, b)
    top.add_left_right(inner, c)
    assert [n.data for n in top.postorder()] == ["a", "b", "inner", "c", "top"]


def test_postorder_single_node():
    node = AstNode("only")
    assert list(node.postorder()) == [node]