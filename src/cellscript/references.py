"""Free-reference analysis.

An identifier is a free reference when no enclosing scope of the cell declares
it. Free references become the declared inputs of a transpiled cell.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

from tree_sitter import Node

from cellscript.globals import DEFAULT_GLOBALS
from cellscript.walk import FUNCTION_TYPES, node_name, walk_with_ancestors

ReferenceFilter = Callable[[Node], bool]

SCOPE_TYPES: frozenset[str] = FUNCTION_TYPES | {"program"}
BLOCK_SCOPE_TYPES: frozenset[str] = SCOPE_TYPES | {
	"statement_block",
	"for_statement",
	"for_in_statement",
	"switch_statement",
}
REFERENCE_TYPES: frozenset[str] = frozenset(
	{
		"identifier",
		"shorthand_property_identifier",
		"shorthand_property_identifier_pattern",
	}
)
# Identifiers inside these nodes name module bindings, not cell values.
_MODULE_BINDING_TYPES: frozenset[str] = frozenset(
	{"import_statement", "export_clause", "export_specifier"}
)


def pattern_identifiers(node: Node | None) -> Iterator[Node]:
	"""Yield the binding identifiers of a declaration or parameter pattern."""
	if node is None:
		return
	kind = node.type
	if kind in ("identifier", "shorthand_property_identifier_pattern"):
		yield node
	elif kind == "pair_pattern":
		yield from pattern_identifiers(node.child_by_field_name("value"))
	elif kind in ("assignment_pattern", "object_assignment_pattern"):
		yield from pattern_identifiers(node.child_by_field_name("left"))
	elif kind in ("object_pattern", "array_pattern", "rest_pattern", "formal_parameters"):
		for child in node.named_children:
			yield from pattern_identifiers(child)


def import_locals(node: Node) -> list[Node]:
	"""The local binding identifiers introduced by an import declaration."""
	locals_: list[Node] = []
	for clause in node.named_children:
		if clause.type != "import_clause":
			continue
		for child in clause.named_children:
			if child.type == "identifier":
				locals_.append(child)
			elif child.type == "namespace_import":
				locals_.extend(c for c in child.named_children if c.type == "identifier")
			elif child.type == "named_imports":
				for specifier in child.named_children:
					if specifier.type != "import_specifier":
						continue
					local = specifier.child_by_field_name(
						"alias"
					) or specifier.child_by_field_name("name")
					if local is not None and local.type == "identifier":
						locals_.append(local)
	return locals_


def _not_global(node: Node) -> bool:
	return node_name(node) not in DEFAULT_GLOBALS


def _nearest(ancestors: tuple[Node, ...], types: frozenset[str]) -> Node | None:
	for node in reversed(ancestors):
		if node.type in types:
			return node
	return None


def find_references(
	node: Node,
	*,
	filter_reference: ReferenceFilter | None = None,
) -> list[Node]:
	"""Return the identifier nodes of `node` not bound within `node`.

	Identifiers are returned in source order; the same name may appear more
	than once. By default references to host globals are left out; pass
	`filter_reference` to select a different subset.
	"""
	if filter_reference is None:
		filter_reference = _not_global

	locals_: dict[int, set[str]] = {}

	def declare_local(scope: Node | None, name: str) -> None:
		locals_.setdefault((scope or node).id, set()).add(name)

	def declare_pattern(pattern: Node | None, scope: Node | None) -> None:
		for identifier in pattern_identifiers(pattern):
			declare_local(scope, node_name(identifier))

	def declare_function(fn: Node) -> None:
		declare_pattern(fn.child_by_field_name("parameters"), fn)
		declare_pattern(fn.child_by_field_name("parameter"), fn)
		if fn.type != "method_definition" and not fn.type.endswith("_declaration"):
			name = fn.child_by_field_name("name")
			if name is not None:
				declare_local(fn, node_name(name))
		if fn.type != "arrow_function":
			declare_local(fn, "arguments")

	for current, ancestors in walk_with_ancestors(node):
		parents = ancestors[:-1]
		kind = current.type
		if kind in ("variable_declaration", "lexical_declaration"):
			types = SCOPE_TYPES if kind == "variable_declaration" else BLOCK_SCOPE_TYPES
			scope = _nearest(parents, types)
			for declarator in current.named_children:
				if declarator.type == "variable_declarator":
					declare_pattern(declarator.child_by_field_name("name"), scope)
		elif kind == "for_in_statement":
			keyword = current.child_by_field_name("kind")
			if keyword is not None:
				scope = _nearest(parents, SCOPE_TYPES) if keyword.type == "var" else current
				declare_pattern(current.child_by_field_name("left"), scope)
		elif kind in ("function_declaration", "generator_function_declaration"):
			name = current.child_by_field_name("name")
			if name is not None:
				declare_local(_nearest(parents, SCOPE_TYPES), node_name(name))
			declare_function(current)
		elif kind in FUNCTION_TYPES:
			declare_function(current)
		elif kind == "class_declaration":
			name = current.child_by_field_name("name")
			if name is not None:
				declare_local(_nearest(parents, BLOCK_SCOPE_TYPES), node_name(name))
		elif kind == "class":
			name = current.child_by_field_name("name")
			if name is not None:
				declare_local(current, node_name(name))
		elif kind == "catch_clause":
			declare_pattern(current.child_by_field_name("parameter"), current)
		elif kind == "import_statement":
			for local in import_locals(current):
				declare_local(node, node_name(local))

	references: list[Node] = []
	for current, ancestors in walk_with_ancestors(node):
		if current.type not in REFERENCE_TYPES:
			continue
		parents = ancestors[:-1]
		if any(parent.type in _MODULE_BINDING_TYPES for parent in parents):
			continue
		name = node_name(current)
		if any(name in locals_.get(parent.id, ()) for parent in parents):
			continue
		if not filter_reference(current):
			continue
		references.append(current)
	return references
