"""Environment configuration for the command line.

The transpiler itself never reads the environment; the CLI uses these values
as defaults for its options.
"""

from __future__ import annotations

import os

from cellscript.transpile import TranspileOptions

ENV_CELLSCRIPT_LOG_LEVEL = "CELLSCRIPT_LOG_LEVEL"
ENV_CELLSCRIPT_RESOLVE_FILES = "CELLSCRIPT_RESOLVE_FILES"
ENV_CELLSCRIPT_RESOLVE_LOCAL_IMPORTS = "CELLSCRIPT_RESOLVE_LOCAL_IMPORTS"

_TRUTHY = {"1", "true", "yes", "on"}


def _flag(name: str) -> bool:
	return os.environ.get(name, "").strip().lower() in _TRUTHY


class CellscriptEnv:
	"""Typed accessors over the process environment."""

	@property
	def log_level(self) -> str:
		return os.environ.get(ENV_CELLSCRIPT_LOG_LEVEL, "WARNING").upper()

	@property
	def resolve_files(self) -> bool:
		return _flag(ENV_CELLSCRIPT_RESOLVE_FILES)

	@property
	def resolve_local_imports(self) -> bool:
		return _flag(ENV_CELLSCRIPT_RESOLVE_LOCAL_IMPORTS)

	def options(
		self,
		*,
		resolve_files: bool | None = None,
		resolve_local_imports: bool | None = None,
	) -> TranspileOptions:
		"""TranspileOptions from explicit values, falling back to the environment."""
		return TranspileOptions(
			resolve_files=self.resolve_files if resolve_files is None else resolve_files,
			resolve_local_imports=(
				self.resolve_local_imports
				if resolve_local_imports is None
				else resolve_local_imports
			),
		)


env = CellscriptEnv()
