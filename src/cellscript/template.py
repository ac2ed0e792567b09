"""
Template cells: Markdown, HTML, TeX, SQL and dot content.

The whole content of a template cell is the body of a tagged template
literal, but authors write raw backticks and backslashes without escaping
them. The content is parsed into literal spans and `${...}` holes, the
literal spans are escaped through an EditBuffer, and the result is wrapped
as `tag`...``, a valid JavaScript expression.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass

from tree_sitter import Node

from cellscript.edits import EditBuffer
from cellscript.errors import ParseError, syntax_error
from cellscript.offsets import SourceOffsets
from cellscript.parser import parse_expression
from cellscript.walk import walk

ReadLiteral = Callable[[str, int], int]
"""Scans a literal span starting at an offset and returns where it ends."""

# Replacement for a terminal backslash: the hole `${'\\'}`.
TERMINAL_BACKSLASH = "${'\\\\'}"


# =============================================================================
# Literal/hole tree
# =============================================================================


@dataclass(slots=True, frozen=True)
class TemplateElement:
	"""A literal span `source[start:end]`; `tail` marks the last one."""

	start: int
	end: int
	tail: bool = False

	def raw(self, source: str) -> str:
		return source[self.start : self.end]


@dataclass(slots=True, frozen=True)
class TemplateHole:
	"""An embedded expression `source[start:end]`, between `${` and `}`."""

	start: int
	end: int

	def text(self, source: str) -> str:
		return source[self.start : self.end]


@dataclass(slots=True)
class TemplateLiteral:
	"""Literal spans interleaved with holes; one more span than holes."""

	start: int
	end: int
	quasis: list[TemplateElement]
	expressions: list[TemplateHole]


# =============================================================================
# Tokenizer/parser
# =============================================================================


def read_template_literal(source: str, pos: int) -> int:
	"""Default literal reader.

	A backslash always carries the following character with it, so `\\${`
	does not open a hole; raw backticks are ordinary characters. The span
	ends at the first `${` or at the end of input.
	"""
	n = len(source)
	while pos < n:
		char = source[pos]
		if char == "\\":
			if pos < n - 1:  # a terminal backslash is literal
				pos += 1
		elif char == "$" and source.startswith("{", pos + 1):
			return pos
		pos += 1
	return n


def _ends_in_line_comment(root: Node, offsets: SourceOffsets) -> bool:
	# `a // }` parses once the wrapping line break closes the comment
	return any(
		node.type == "comment"
		and offsets.text(node).startswith("//")
		and offsets.end(node) >= len(offsets.source)
		for node in walk(root)
	)


class TemplateParser:
	"""Parses template cell content into a TemplateLiteral.

	The literal reader is pluggable; holes are delimited and validated by the
	expression parser.
	"""

	source: str
	read_literal: ReadLiteral

	def __init__(
		self,
		source: str,
		*,
		read_literal: ReadLiteral = read_template_literal,
	) -> None:
		self.source = source
		self.read_literal = read_literal

	def parse(self) -> TemplateLiteral:
		source = self.source
		quasis: list[TemplateElement] = []
		expressions: list[TemplateHole] = []
		pos = 0
		while True:
			end = self.read_literal(source, pos)
			quasis.append(TemplateElement(pos, end))
			if end >= len(source):
				break
			if not source.startswith("${", end):
				raise syntax_error(
					f"Unexpected token '{source[end]}'", end, source
				)
			hole = self.read_hole(end + 2)
			expressions.append(hole)
			pos = hole.end + 1
		quasis[-1] = dataclasses.replace(quasis[-1], tail=True)
		return TemplateLiteral(0, len(source), quasis, expressions)

	def read_hole(self, start: int) -> TemplateHole:
		"""Read the expression of a hole opened just before `start`.

		The hole ends at the first `}` such that the text before it parses as
		a complete expression.
		"""
		source = self.source
		end = source.find("}", start)
		if end < 0:
			raise syntax_error("Unterminated template", start - 2, source)
		if not source[start:end].strip():
			raise syntax_error("Unexpected token '}'", end, source)
		first_error: ParseError | None = None
		while end >= 0:
			text = source[start:end]
			try:
				tree, _, offsets = parse_expression(text)
			except ParseError as error:
				if first_error is None:
					first_error = syntax_error(
						error.message, start + (error.pos or 0), source
					)
			else:
				if not _ends_in_line_comment(tree.root_node, offsets):
					return TemplateHole(start, end)
			end = source.find("}", end + 1)
		raise first_error or syntax_error("Unterminated template", start - 2, source)


def parse_template(
	source: str,
	*,
	read_literal: ReadLiteral = read_template_literal,
) -> TemplateLiteral:
	return TemplateParser(source, read_literal=read_literal).parse()


# =============================================================================
# Escaping
# =============================================================================


def escape_backtick(buffer: EditBuffer, quasi: TemplateElement) -> None:
	source = buffer.source
	for i in range(quasi.start, quasi.end):
		if source[i] == "`":
			buffer.insert_right(i, "\\")


def escape_backslash(buffer: EditBuffer, quasi: TemplateElement) -> None:
	"""Escape backslashes so they survive a cooked template literal.

	Two patterns are left alone: `$\\{` stays a literal dollar-brace, and an
	odd run of backslashes before `${` is already an escaped hole opener.
	"""
	source = buffer.source
	after_dollar = False
	odd_backslashes = False
	for i in range(quasi.start, quasi.end):
		char = source[i]
		if char == "$":
			after_dollar = True
			odd_backslashes = False
		elif char == "\\":
			odd_backslashes = not odd_backslashes
			if after_dollar and source.startswith("{", i + 1):
				continue
			if odd_backslashes and source.startswith("${", i + 1):
				continue
			buffer.insert_right(i, "\\")
		else:
			after_dollar = False
			odd_backslashes = False


def interpolate_terminal_backslash(buffer: EditBuffer) -> None:
	"""A raw template cannot end in a backslash; interpolate the last one."""
	source = buffer.source
	run = len(source) - len(source.rstrip("\\"))
	if run % 2 == 1:
		buffer.replace_right(len(source) - 1, len(source), TERMINAL_BACKSLASH)


def escape_template_elements(buffer: EditBuffer, node: TemplateLiteral) -> None:
	"""Cooked embedding: escape backticks and backslashes."""
	for quasi in node.quasis:
		escape_backtick(buffer, quasi)
		escape_backslash(buffer, quasi)


def escape_raw_template_elements(buffer: EditBuffer, node: TemplateLiteral) -> None:
	"""Raw embedding: escape backticks only."""
	for quasi in node.quasis:
		escape_backtick(buffer, quasi)
	interpolate_terminal_backslash(buffer)


def transpile_template(source: str, tag: str = "", raw: bool = False) -> str:
	"""Rewrite template content as a tagged template literal expression."""
	if not source:
		return source
	buffer = EditBuffer(source)
	node = parse_template(source)
	if raw:
		escape_raw_template_elements(buffer, node)
	else:
		escape_template_elements(buffer, node)
	buffer.insert_left(node.start, tag)
	buffer.insert_left(node.start, "`")
	buffer.insert_right(node.end, "`")
	return str(buffer)
