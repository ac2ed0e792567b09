"""Non-destructive text edits over an immutable source string.

Edits are recorded against offsets of the original text and only applied when
the buffer is flattened with `str(buffer)`. Every offset holds two ordered
lists of edits: left edits are emitted before right edits, and edits on the
same side are emitted in the order they were registered.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

Side = Literal["left", "right"]


@dataclass(slots=True, frozen=True)
class Edit:
	"""Replace `source[start:end]` with `value`. An insertion has start == end."""

	start: int
	end: int
	value: str

	@property
	def is_insert(self) -> bool:
		return self.start == self.end


@dataclass(slots=True)
class EditBuffer:
	"""Records insertions, deletions and replacements over `source`."""

	source: str
	_left: dict[int, list[Edit]] = field(default_factory=dict, init=False, repr=False)
	_right: dict[int, list[Edit]] = field(default_factory=dict, init=False, repr=False)
	_ranges: list[Edit] = field(default_factory=list, init=False, repr=False)

	# --- Insertions ---------------------------------------------------------

	def insert_left(self, pos: int, value: str) -> EditBuffer:
		"""Insert `value` at `pos`, before any right insertions at `pos`."""
		return self._add("left", pos, pos, value)

	def insert_right(self, pos: int, value: str) -> EditBuffer:
		"""Insert `value` at `pos`, after any left insertions at `pos`."""
		return self._add("right", pos, pos, value)

	# --- Ranges -------------------------------------------------------------

	def delete(self, start: int, end: int) -> EditBuffer:
		return self._add("right", start, end, "")

	def replace_left(self, start: int, end: int, value: str) -> EditBuffer:
		return self._add("left", start, end, value)

	def replace_right(self, start: int, end: int, value: str) -> EditBuffer:
		return self._add("right", start, end, value)

	def trim(self) -> EditBuffer:
		"""Delete leading and trailing whitespace; offsets are unaffected."""
		source = self.source
		stripped = source.lstrip()
		if not stripped:
			if source:
				self.delete(0, len(source))
			return self
		head = len(source) - len(stripped)
		if head:
			self.delete(0, head)
		tail = len(source.rstrip())
		if tail < len(source):
			self.delete(tail, len(source))
		return self

	# --- Flattening ---------------------------------------------------------

	def edits(self) -> list[Edit]:
		"""All edits in application order."""
		ordered: list[Edit] = []
		for pos in sorted(self._left.keys() | self._right.keys()):
			ordered.extend(self._left.get(pos, ()))
			ordered.extend(self._right.get(pos, ()))
		return ordered

	def __str__(self) -> str:
		source = self.source
		out: list[str] = []
		index = 0
		for edit in self.edits():
			if edit.start > index:
				out.append(source[index : edit.start])
				index = edit.start
			out.append(edit.value)
			index = max(index, edit.end)
		out.append(source[index:])
		return "".join(out)

	def _add(self, side: Side, start: int, end: int, value: str) -> EditBuffer:
		if start < 0 or end > len(self.source) or start > end:
			raise ValueError(
				f"Edit range [{start}, {end}) outside of [0, {len(self.source)}]"
			)
		edit = Edit(start, end, value)
		if not edit.is_insert:
			for other in self._ranges:
				if start < other.end and other.start < end:
					raise ValueError(
						f"Edit range [{start}, {end}) overlaps [{other.start}, {other.end})"
					)
			self._ranges.append(edit)
		edits = self._left if side == "left" else self._right
		edits.setdefault(start, []).append(edit)
		return self
