"""Rewriting of import declarations and dynamic imports.

Static import declarations cannot appear inside a function body, so they are
turned into awaited dynamic imports:

	import {a as b} from "mod";   ->   const {a: b} = await import("mod");

Local specifiers (relative or absolute paths) can optionally be resolved
against `document.baseURI`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tree_sitter import Node

from cellscript.edits import EditBuffer
from cellscript.offsets import SourceOffsets
from cellscript.walk import first_expression, node_name, walk

if TYPE_CHECKING:
	from cellscript.parser import JavaScriptCell
	from cellscript.transpile import TranspileOptions

logger = logging.getLogger(__name__)


def is_local_import(specifier: str) -> bool:
	"""Whether a quoted module specifier names a local path."""
	value = specifier[1:-1]
	return value.startswith(("./", "../", "/"))


def has_import_declaration(body: Node) -> bool:
	return any(node.type == "import_statement" for node in walk(body))


def _resolve_specifier(specifier: str, options: TranspileOptions) -> str:
	if options.resolve_local_imports and is_local_import(specifier):
		return f"new URL({specifier}, document.baseURI).href"
	return specifier


def _rewrite_import_specifiers(node: Node, offsets: SourceOffsets) -> str:
	clause = next((c for c in node.named_children if c.type == "import_clause"), None)
	if clause is None:
		return "{}"
	for child in clause.named_children:
		if child.type == "namespace_import":
			return next(node_name(c) for c in child.named_children if c.type == "identifier")
	specifiers: list[str] = []
	for child in clause.named_children:
		if child.type == "identifier":
			specifiers.append(f"default: {node_name(child)}")
		elif child.type == "named_imports":
			for specifier in child.named_children:
				if specifier.type != "import_specifier":
					continue
				imported = offsets.text(specifier.child_by_field_name("name"))
				alias = specifier.child_by_field_name("alias")
				if alias is None or node_name(alias) == imported:
					specifiers.append(imported)
				else:
					specifiers.append(f"{imported}: {node_name(alias)}")
	return "{" + ", ".join(specifiers) + "}"


def rewrite_import_declarations(
	output: EditBuffer,
	cell: JavaScriptCell,
	options: TranspileOptions,
) -> None:
	"""Replace top-level import declarations with one awaited dynamic import."""
	if cell.expression:
		return
	offsets = cell.offsets
	source = output.source
	declarations = [c for c in cell.body.named_children if c.type == "import_statement"]
	specifiers: list[str] = []
	imports: list[str] = []
	for node in declarations:
		start, end = offsets.start(node), offsets.end(node)
		# Take the line break along, unless it belongs to trailing whitespace.
		if source.startswith("\n", end) and source[end + 1 :].strip():
			end += 1
		output.delete(start, end)
		specifiers.append(_rewrite_import_specifiers(node, offsets))
		module = offsets.text(node.child_by_field_name("source"))
		imports.append(f"import({_resolve_specifier(module, options)})")
	if len(declarations) > 1:
		output.insert_left(
			0,
			f"const [{', '.join(specifiers)}] = await Promise.all([{', '.join(imports)}]);\n",
		)
	elif len(declarations) == 1:
		output.insert_left(0, f"const {specifiers[0]} = await {imports[0]};\n")
	if declarations:
		logger.debug("Rewrote %d import declaration(s)", len(declarations))


def rewrite_import_expressions(
	output: EditBuffer,
	cell: JavaScriptCell,
	options: TranspileOptions,
) -> None:
	"""Resolve local specifiers of `import(...)` calls when requested."""
	if not options.resolve_local_imports:
		return
	offsets = cell.offsets
	for node in walk(cell.body):
		if node.type != "call_expression":
			continue
		callee = node.child_by_field_name("function")
		arguments = node.child_by_field_name("arguments")
		if callee is None or callee.type != "import" or arguments is None:
			continue
		specifier = first_expression(arguments)
		if specifier is None or specifier.type != "string":
			continue
		if is_local_import(offsets.text(specifier)):
			output.insert_left(offsets.start(specifier), "new URL(")
			output.insert_right(offsets.end(specifier), ", document.baseURI).href")
