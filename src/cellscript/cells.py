"""Notebook cells and their modes."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, TypeAlias

CellMode: TypeAlias = Literal["js", "ojs", "md", "html", "tex", "dot", "sql"]

CELL_MODES: tuple[CellMode, ...] = ("js", "ojs", "md", "html", "tex", "dot", "sql")

# Template modes -> tag of the renderer the content is passed to
DEFAULT_TAGS: dict[str, str] = {
	"md": "md",
	"html": "html",
	"tex": "tex.block",
	"sql": "__sql(db, Inputs.table)",
	"dot": "dot",
}

# Template modes whose renderer receives the raw strings
RAW_MODES: frozenset[str] = frozenset({"md", "html"})

_EXTENSIONS: dict[str, CellMode] = {
	".js": "js",
	".mjs": "js",
	".ojs": "ojs",
	".md": "md",
	".markdown": "md",
	".html": "html",
	".htm": "html",
	".tex": "tex",
	".dot": "dot",
	".gv": "dot",
	".sql": "sql",
}


@dataclass(slots=True, frozen=True)
class Cell:
	"""One unit of notebook content: source text and the mode it is written in."""

	value: str = ""
	mode: CellMode = "js"
	id: str | None = None


def is_template_mode(mode: str) -> bool:
	return mode in DEFAULT_TAGS


def mode_for_path(path: Path) -> CellMode | None:
	"""Infer a cell mode from a file extension."""
	return _EXTENSIONS.get(path.suffix.lower())
