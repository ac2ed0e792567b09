from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class IdCounter:
	"""Generates unique ids such as `cell-3` or `cell-chart-4`.

	The counter belongs to whoever creates it (a build, a CLI invocation);
	there is no module-wide counter.
	"""

	prefix: str = "cell"
	count: int = 0

	def next_id(self, name: str | None = None) -> str:
		self.count += 1
		if name:
			return f"{self.prefix}-{name}-{self.count}"
		return f"{self.prefix}-{self.count}"

	def reset(self) -> None:
		self.count = 0
