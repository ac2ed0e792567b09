"""
Notebook cell -> JavaScript function transpiler.

A cell becomes the source of an arrow function whose parameters are the
cell's free references (inputs) and which returns an object of the cell's
top-level declarations (outputs):

	let z = x + 1   ->   (x) => {
	                     let z = x + 1
	                     return {z};
	                     }

Template cells (Markdown, HTML, TeX, SQL, dot) are first rewritten as a
tagged template literal and then transpiled like any script cell.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from cellscript.awaits import find_yields
from cellscript.cells import DEFAULT_TAGS, RAW_MODES, Cell, is_template_mode
from cellscript.edits import EditBuffer
from cellscript.errors import StructuralError, syntax_error
from cellscript.files import rewrite_file_expressions
from cellscript.imports import (
	has_import_declaration,
	rewrite_import_declarations,
	rewrite_import_expressions,
)
from cellscript.parser import parse_javascript
from cellscript.template import transpile_template
from cellscript.walk import node_name

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TranspiledJavaScript:
	"""The result of transpiling one cell."""

	body: str
	"""Source of a JavaScript function defining the cell's value."""
	inputs: list[str] = field(default_factory=list)
	"""Free references of the body, in order; the function's parameters."""
	outputs: list[str] = field(default_factory=list)
	"""Names of the object returned by the body; empty when the cell declares nothing."""
	output: str | None = None
	"""Single named output; alternative to `outputs`."""
	autodisplay: bool = False
	"""Whether to display the body value implicitly (expression cells)."""
	autoview: bool | None = None
	automutable: bool | None = None

	def to_dict(self) -> dict[str, Any]:
		"""Serializable form; absent fields are left out."""
		data: dict[str, Any] = {"body": self.body, "inputs": list(self.inputs)}
		if self.outputs:
			data["outputs"] = list(self.outputs)
		if self.output is not None:
			data["output"] = self.output
		data["autodisplay"] = self.autodisplay
		if self.autoview is not None:
			data["autoview"] = self.autoview
		if self.automutable is not None:
			data["automutable"] = self.automutable
		return data


ObservableTranspiler = Callable[[str, "TranspileOptions"], TranspiledJavaScript]


@dataclass(slots=True, frozen=True)
class TranspileOptions:
	resolve_local_imports: bool = False
	"""Resolve local import specifiers against `document.baseURI`."""
	resolve_files: bool = False
	"""Resolve `FileAttachment` names against `import.meta.url`."""
	tags: Mapping[str, str] = field(default_factory=dict)
	"""Per-mode renderer tag overrides for template cells."""
	transpile_observable: ObservableTranspiler | None = None
	"""Transpiler for `ojs` cells."""

	def tag(self, mode: str) -> str:
		return self.tags.get(mode, DEFAULT_TAGS[mode])


def transpile(
	source: str,
	mode: str = "js",
	options: TranspileOptions | None = None,
) -> TranspiledJavaScript:
	"""Transpile the source of a cell written in `mode`."""
	options = options or TranspileOptions()
	logger.debug("Transpiling %s cell (%d characters)", mode, len(source))
	if mode == "ojs":
		if options.transpile_observable is None:
			raise StructuralError("No transpiler configured for ojs cells")
		return options.transpile_observable(source, options)
	return transpile_javascript(transpile_mode(source, mode, options), options)


def transpile_cell(
	cell: Cell,
	options: TranspileOptions | None = None,
) -> TranspiledJavaScript:
	return transpile(cell.value, cell.mode, options)


def transpile_mode(source: str, mode: str, options: TranspileOptions) -> str:
	"""Rewrite the source of a non-ojs cell as script source."""
	if mode == "js":
		return source
	if not is_template_mode(mode):
		raise StructuralError(f"Unknown cell mode '{mode}'")
	return transpile_template(source, options.tag(mode), raw=mode in RAW_MODES)


def transpile_javascript(
	source: str,
	options: TranspileOptions | None = None,
) -> TranspiledJavaScript:
	"""Transpile script source into the body of a cell function."""
	options = options or TranspileOptions()
	cell = parse_javascript(source)
	if cell.generator:
		node = find_yields(cell.body)[0]
		raise syntax_error(
			"Cannot yield from a cell body",
			cell.offsets.start(node),
			source,
			StructuralError,
		)

	is_async = cell.is_async or has_import_declaration(cell.body)
	inputs = list(dict.fromkeys(node_name(node) for node in cell.references))
	outputs = list(dict.fromkeys(node_name(node) for node in cell.declarations or ()))

	output = EditBuffer(source).trim()
	output.insert_left(0, f"{'async ' if is_async else ''}({','.join(inputs)}) => {{\n")
	if cell.expression:
		output.insert_left(0, "return (\n")
	rewrite_import_declarations(output, cell, options)
	rewrite_import_expressions(output, cell, options)
	if options.resolve_files:
		rewrite_file_expressions(output, cell)
	if outputs:
		output.insert_right(len(source), f"\nreturn {{{','.join(outputs)}}};")
	if cell.expression:
		output.insert_right(len(source), "\n)")
	output.insert_right(len(source), "\n}")

	autodisplay = cell.expression and not ("display" in inputs or "view" in inputs)
	logger.debug(
		"Transpiled cell: inputs=%s outputs=%s async=%s autodisplay=%s",
		inputs,
		outputs,
		is_async,
		autodisplay,
	)
	return TranspiledJavaScript(
		body=str(output),
		inputs=inputs,
		outputs=outputs,
		autodisplay=autodisplay,
	)
