from __future__ import annotations

from collections.abc import Iterator

from tree_sitter import Node

from cellscript.walk import is_function, walk


def is_for_await(node: Node) -> bool:
	return node.type == "for_in_statement" and any(
		child.type == "await" for child in node.children
	)


def _outside_functions(node: Node) -> Iterator[Node]:
	if is_function(node):
		return iter(())
	return walk(node, skip=is_function)


def find_awaits(node: Node) -> list[Node]:
	"""Suspend points of `node`: await expressions and `for await` loops.

	Nested function bodies are not searched; their suspend points do not make
	the enclosing cell asynchronous.
	"""
	return [
		current
		for current in _outside_functions(node)
		if current.type == "await_expression" or is_for_await(current)
	]


def find_yields(node: Node) -> list[Node]:
	"""Yield expressions of `node` outside of nested functions."""
	return [
		current
		for current in _outside_functions(node)
		if current.type == "yield_expression"
	]
