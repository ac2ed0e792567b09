from __future__ import annotations

from collections.abc import Sequence

from tree_sitter import Node

from cellscript.errors import AssignmentError, syntax_error
from cellscript.globals import DEFAULT_GLOBALS
from cellscript.offsets import SourceOffsets
from cellscript.walk import node_name, walk

# Node type -> field holding the assignment target
_TARGET_FIELDS: dict[str, str] = {
	"assignment_expression": "left",
	"augmented_assignment_expression": "left",
	"assignment_pattern": "left",
	"object_assignment_pattern": "left",
	"update_expression": "argument",
}
_LEAF_TYPES: frozenset[str] = frozenset(
	{
		"identifier",
		"shorthand_property_identifier",
		"shorthand_property_identifier_pattern",
		"undefined",
	}
)
# Destructuring targets, as patterns or as the literals they are parsed from
_CONTAINER_TYPES: frozenset[str] = frozenset(
	{
		"object_pattern",
		"array_pattern",
		"rest_pattern",
		"object",
		"array",
		"spread_element",
		"parenthesized_expression",
	}
)


def check_assignments(
	node: Node,
	references: Sequence[Node],
	offsets: SourceOffsets,
) -> None:
	"""Reject assignments to bindings the cell does not own.

	A cell may not assign a free reference (it belongs to another cell) nor a
	host global. Raises AssignmentError for the first violation in source order.
	"""
	external = {reference.id for reference in references}

	def check_const(target: Node | None) -> None:
		if target is None:
			return
		kind = target.type
		if kind in _LEAF_TYPES:
			name = node_name(target)
			if target.id in external:
				raise syntax_error(
					f"Assignment to external variable '{name}'",
					offsets.start(target),
					offsets.source,
					AssignmentError,
				)
			if name in DEFAULT_GLOBALS:
				raise syntax_error(
					f"Assignment to global '{name}'",
					offsets.start(target),
					offsets.source,
					AssignmentError,
				)
		elif kind in ("pair_pattern", "pair"):
			check_const(target.child_by_field_name("value"))
		elif kind in ("assignment_pattern", "object_assignment_pattern"):
			check_const(target.child_by_field_name("left"))
		elif kind in _CONTAINER_TYPES:
			for child in target.named_children:
				check_const(child)

	for current in walk(node):
		field = _TARGET_FIELDS.get(current.type)
		if field is not None:
			check_const(current.child_by_field_name(field))
		elif current.type == "for_in_statement":
			# for (x of xs) assigns x; for (const x of xs) declares it
			if current.child_by_field_name("kind") is None:
				check_const(current.child_by_field_name("left"))
