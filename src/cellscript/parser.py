"""
JavaScript parsing for notebook cells.

Cells are parsed with tree-sitter. A cell is first tried as a single
expression (parsed wrapped in parentheses, so that `{a: 1}` is an object and
not a block); otherwise it is parsed as a program. The resulting
`JavaScriptCell` carries everything the transpiler needs: free references,
top-level declarations and the async/generator/expression flags.
"""

from __future__ import annotations

from dataclasses import dataclass

import tree_sitter_javascript
from tree_sitter import Language, Node, Parser, Tree

from cellscript.assignments import check_assignments
from cellscript.awaits import find_awaits, find_yields
from cellscript.errors import AssignmentError, ParseError, syntax_error
from cellscript.globals import DEFAULT_GLOBALS
from cellscript.offsets import SourceOffsets
from cellscript.references import find_references, import_locals, pattern_identifiers
from cellscript.walk import first_expression, node_name, walk

JS_LANGUAGE = Language(tree_sitter_javascript.language())

# Named function and class expressions are treated as declarations.
_NAMED_EXPRESSION_TYPES: frozenset[str] = frozenset(
	{"function_expression", "function", "generator_function", "class"}
)
_DECLARATION_TYPES: frozenset[str] = frozenset(
	{"function_declaration", "generator_function_declaration", "class_declaration"}
)


@dataclass(slots=True)
class JavaScriptCell:
	"""A parsed script cell."""

	source: str
	tree: Tree
	body: Node
	"""The program, or the expression for expression cells."""
	references: list[Node]
	"""Free identifiers, in source order."""
	declarations: list[Node] | None
	"""Top-level declared identifiers; None for expression cells."""
	expression: bool
	is_async: bool
	generator: bool
	offsets: SourceOffsets


def _parse(text: str) -> Tree:
	# A parser per call: parsers are stateful and not shared across threads.
	return Parser(JS_LANGUAGE).parse(text.encode("utf-8"))


def _first_error(root: Node) -> Node | None:
	node = root
	while not (node.is_error or node.is_missing):
		child = next((c for c in node.children if c.has_error or c.is_missing), None)
		if child is None:
			return node if node is not root else None
		node = child
	return node


def _error_from_tree(root: Node, offsets: SourceOffsets) -> ParseError:
	node = _first_error(root) or root
	pos = offsets.start(node)
	if node.is_missing:
		return syntax_error(f"Expected '{node.type}'", pos, offsets.source)
	leaf = node
	while leaf.children:
		leaf = leaf.children[0]
	fragment = offsets.text(leaf) or offsets.text(node)
	if not fragment or pos >= len(offsets.source):
		return syntax_error("Unexpected end of input", pos, offsets.source)
	return syntax_error(f"Unexpected token '{fragment}'", pos, offsets.source)


def _parse_wrapped(text: str) -> tuple[Tree, Node | None]:
	"""Parse `text` as one parenthesized expression.

	Returns the tree and the expression node, or None for the node when `text`
	is not exactly one complete expression.
	"""
	wrapped = f"({text}\n)"
	tree = _parse(wrapped)
	root = tree.root_node
	if root.has_error:
		return tree, None
	statements = [c for c in root.named_children if c.type != "comment"]
	if len(statements) != 1 or statements[0].type != "expression_statement":
		return tree, None
	parens = first_expression(statements[0])
	if (
		parens is None
		or parens.type != "parenthesized_expression"
		or parens.start_byte != 0
		or parens.end_byte != len(wrapped.encode("utf-8"))
	):
		return tree, None
	return tree, first_expression(parens)


def _let_identifier(node: Node) -> Node | None:
	# Cells are modules: `let` is reserved and never names a value, so
	# `let [a] = b` is a declaration and not an assignment to `let[a]`.
	return next(
		(n for n in walk(node) if n.type == "identifier" and node_name(n) == "let"),
		None,
	)


def parse_expression(text: str) -> tuple[Tree, Node, SourceOffsets]:
	"""Parse `text` as a single expression, raising ParseError otherwise."""
	tree, expression = _parse_wrapped(text)
	offsets = SourceOffsets(text, shift=1)
	if expression is None:
		if tree.root_node.has_error:
			raise _error_from_tree(tree.root_node, offsets)
		raise syntax_error("Expected a single expression", 0, text)
	return tree, expression, offsets


def find_declarations(program: Node, offsets: SourceOffsets) -> list[Node]:
	"""Top-level names declared by a program, in source order."""
	declarations: list[Node] = []

	def declare_local(node: Node) -> None:
		name = node_name(node)
		if name in DEFAULT_GLOBALS or name == "arguments":
			raise syntax_error(
				f"Global '{name}' cannot be redefined",
				offsets.start(node),
				offsets.source,
				AssignmentError,
			)
		declarations.append(node)

	for child in program.named_children:
		if child.type in ("variable_declaration", "lexical_declaration"):
			for declarator in child.named_children:
				if declarator.type == "variable_declarator":
					name = declarator.child_by_field_name("name")
					for identifier in pattern_identifiers(name):
						declare_local(identifier)
		elif child.type in _DECLARATION_TYPES:
			name = child.child_by_field_name("name")
			if name is not None:
				declare_local(name)
		elif child.type == "import_statement":
			for local in import_locals(child):
				declare_local(local)
	return declarations


def parse_javascript(source: str) -> JavaScriptCell:
	"""Parse a script cell.

	Raises ParseError for malformed source and AssignmentError when the cell
	assigns or redeclares a binding it does not own.
	"""
	tree, expression = _parse_wrapped(source)
	if expression is not None and (
		(
			expression.type in _NAMED_EXPRESSION_TYPES
			and expression.child_by_field_name("name") is not None
		)
		or _let_identifier(expression) is not None
	):
		expression = None

	if expression is not None:
		body = expression
		offsets = SourceOffsets(source, shift=1)
	else:
		tree = _parse(source)
		body = tree.root_node
		offsets = SourceOffsets(source)
		if body.has_error:
			raise _error_from_tree(body, offsets)
		identifier = _let_identifier(body)
		if identifier is not None:
			raise syntax_error(
				"Unexpected token 'let'", offsets.start(identifier), source
			)

	references = find_references(body)
	check_assignments(body, references, offsets)
	declarations = None if expression is not None else find_declarations(body, offsets)
	return JavaScriptCell(
		source=source,
		tree=tree,
		body=body,
		references=references,
		declarations=declarations,
		expression=expression is not None,
		is_async=len(find_awaits(body)) > 0,
		generator=len(find_yields(body)) > 0,
		offsets=offsets,
	)
