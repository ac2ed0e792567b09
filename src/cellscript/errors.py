from __future__ import annotations

from typing import TypeVar

_E = TypeVar("_E", bound="TranspileError")


class TranspileError(Exception):
	"""Error during transpilation of a cell.

	Carries the character offset of the offending fragment along with its
	1-based line and 0-based column in the cell source.
	"""

	message: str
	pos: int | None
	line: int | None
	column: int | None

	def __init__(
		self,
		message: str,
		*,
		pos: int | None = None,
		line: int | None = None,
		column: int | None = None,
	) -> None:
		self.message = message
		self.pos = pos
		self.line = line
		self.column = column
		if line is not None and column is not None:
			super().__init__(f"{message} ({line}:{column})")
		else:
			super().__init__(message)


class ParseError(TranspileError):
	"""Malformed cell source."""


class AssignmentError(TranspileError):
	"""A cell mutates a binding it does not own."""


class StructuralError(TranspileError):
	"""The caller asked for something the target mode cannot express."""


def line_info(source: str, pos: int) -> tuple[int, int]:
	"""Return the (line, column) of an offset; line is 1-based, column 0-based."""
	pos = max(0, min(pos, len(source)))
	line = source.count("\n", 0, pos) + 1
	column = pos - (source.rfind("\n", 0, pos) + 1)
	return line, column


def syntax_error(
	message: str,
	pos: int,
	source: str,
	cls: type[_E] = ParseError,
) -> _E:
	"""Build a positioned error for the fragment starting at `pos` in `source`."""
	line, column = line_info(source, pos)
	return cls(message, pos=pos, line=line, column=column)
