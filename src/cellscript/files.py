from __future__ import annotations

from typing import TYPE_CHECKING

from cellscript.edits import EditBuffer
from cellscript.references import find_references
from cellscript.walk import first_expression, node_name, walk

if TYPE_CHECKING:
	from cellscript.parser import JavaScriptCell


def rewrite_file_expressions(output: EditBuffer, cell: JavaScriptCell) -> None:
	"""Resolve `FileAttachment(name)` relative to the emitted module.

	Only calls through a free `FileAttachment` reference are rewritten:

		FileAttachment("a.csv")  ->  FileAttachment(new URL("a.csv", import.meta.url).href)
	"""
	files = {
		node.id
		for node in find_references(
			cell.body,
			filter_reference=lambda node: node_name(node) == "FileAttachment",
		)
	}
	if not files:
		return
	offsets = cell.offsets
	for node in walk(cell.body):
		if node.type != "call_expression":
			continue
		callee = node.child_by_field_name("function")
		if callee is None or callee.id not in files:
			continue
		arguments = node.child_by_field_name("arguments")
		if arguments is None or arguments.type != "arguments":
			continue
		argument = first_expression(arguments)
		if argument is None:
			continue
		output.insert_left(offsets.start(argument), "new URL(")
		output.insert_right(offsets.end(argument), ", import.meta.url).href")
