from __future__ import annotations

from tree_sitter import Node


class SourceOffsets:
	"""Maps tree-sitter byte offsets to character offsets in the cell source.

	tree-sitter reports UTF-8 byte offsets into the text it parsed. `shift` is
	the number of bytes prepended to the source before parsing (for example an
	opening parenthesis when parsing a cell as a single expression).
	"""

	__slots__: tuple[str, ...] = ("source", "shift", "_chars")

	source: str
	shift: int
	_chars: list[int] | None

	def __init__(self, source: str, shift: int = 0) -> None:
		self.source = source
		self.shift = shift
		if source.isascii():
			self._chars = None
		else:
			chars: list[int] = []
			for index, char in enumerate(source):
				chars.extend([index] * len(char.encode("utf-8")))
			chars.append(len(source))
			self._chars = chars

	def char(self, byte: int) -> int:
		"""Character offset of a byte offset, clamped to the cell source."""
		byte -= self.shift
		if self._chars is None:
			return max(0, min(byte, len(self.source)))
		return self._chars[max(0, min(byte, len(self._chars) - 1))]

	def start(self, node: Node) -> int:
		return self.char(node.start_byte)

	def end(self, node: Node) -> int:
		return self.char(node.end_byte)

	def text(self, node: Node) -> str:
		return self.source[self.start(node) : self.end(node)]
