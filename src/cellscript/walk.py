"""Traversal helpers over tree-sitter syntax trees.

All walks are iterative and visit named nodes in source order.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

from tree_sitter import Node

FUNCTION_TYPES: frozenset[str] = frozenset(
	{
		"function_declaration",
		"generator_function_declaration",
		"function_expression",
		"function",
		"generator_function",
		"arrow_function",
		"method_definition",
	}
)


def walk(node: Node, *, skip: Callable[[Node], bool] | None = None) -> Iterator[Node]:
	"""Yield `node` and its named descendants in pre-order.

	When `skip` returns True for a descendant, that descendant and its subtree
	are not visited. The root is always visited.
	"""
	stack = [node]
	while stack:
		current = stack.pop()
		yield current
		for child in reversed(current.named_children):
			if skip is not None and skip(child):
				continue
			stack.append(child)


def walk_with_ancestors(node: Node) -> Iterator[tuple[Node, tuple[Node, ...]]]:
	"""Yield `(node, ancestors)` pairs; `ancestors` ends with the node itself."""
	stack: list[tuple[Node, tuple[Node, ...]]] = [(node, (node,))]
	while stack:
		current, ancestors = stack.pop()
		yield current, ancestors
		for child in reversed(current.named_children):
			stack.append((child, (*ancestors, child)))


def is_function(node: Node) -> bool:
	return node.type in FUNCTION_TYPES


def first_expression(node: Node) -> Node | None:
	"""First named child that is not a comment."""
	for child in node.named_children:
		if child.type != "comment":
			return child
	return None


def node_name(node: Node) -> str:
	text = node.text
	return text.decode("utf-8") if text is not None else ""
