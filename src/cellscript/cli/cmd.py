"""
Command-line interface for cellscript.
Transpiles notebook cell files and prints the transpiled units as JSON.
"""
# typer relies on function calls used as default values
# pyright: reportCallInDefaultInitializer=false

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from cellscript.cells import CELL_MODES, DEFAULT_TAGS, RAW_MODES, Cell, mode_for_path
from cellscript.env import ENV_CELLSCRIPT_LOG_LEVEL, env
from cellscript.errors import TranspileError
from cellscript.ids import IdCounter
from cellscript.transpile import TranspiledJavaScript, TranspileOptions, transpile_cell

logger = logging.getLogger(__name__)

cli = typer.Typer(
	name="cellscript",
	help="Transpile reactive notebook cells into JavaScript functions",
	no_args_is_help=True,
)


def _configure_logging(level: str | None) -> None:
	logging.basicConfig(
		level=(level or env.log_level).upper(),
		format="%(message)s",
		handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
		force=True,
	)


def _resolve_mode(path: Path, mode: str | None) -> str:
	if mode is not None:
		if mode not in CELL_MODES:
			raise typer.BadParameter(
				f"Unknown mode '{mode}'. Expected one of: {', '.join(CELL_MODES)}"
			)
		return mode
	inferred = mode_for_path(path)
	if inferred is None:
		raise typer.BadParameter(
			f"Cannot infer the mode of '{path}'; pass --mode explicitly"
		)
	return inferred


def _transpile_files(
	console: Console,
	files: list[Path],
	mode: str | None,
	options: TranspileOptions,
	keep_going: bool,
) -> tuple[list[tuple[Path, Cell, TranspiledJavaScript]], int]:
	ids = IdCounter()
	results: list[tuple[Path, Cell, TranspiledJavaScript]] = []
	failures = 0
	for path in files:
		cell = Cell(
			path.read_text(encoding="utf-8"),
			_resolve_mode(path, mode),
			id=ids.next_id(),
		)
		try:
			unit = transpile_cell(cell, options)
		except TranspileError as exc:
			failures += 1
			console.log(f"❌ {escape(str(path))}: {escape(str(exc))}")
			if not keep_going:
				raise typer.Exit(1) from None
			continue
		logger.debug("Transpiled %s as %s (%s)", path, cell.mode, cell.id)
		results.append((path, cell, unit))
	return results, failures


@cli.command("transpile")
def transpile_command(
	files: list[Path] = typer.Argument(
		...,
		exists=True,
		dir_okay=False,
		readable=True,
		help="Cell files to transpile",
	),
	mode: str | None = typer.Option(
		None, "--mode", "-m", help="Cell mode; inferred from the extension by default"
	),
	resolve_files: bool | None = typer.Option(
		None,
		"--resolve-files/--no-resolve-files",
		help="Resolve FileAttachment names against import.meta.url",
	),
	resolve_local_imports: bool | None = typer.Option(
		None,
		"--resolve-local-imports/--no-resolve-local-imports",
		help="Resolve local imports against document.baseURI",
	),
	keep_going: bool = typer.Option(
		False, "--keep-going", help="Report broken cells and continue"
	),
	log_level: str | None = typer.Option(
		None, "--log-level", help=f"Log level (default: ${ENV_CELLSCRIPT_LOG_LEVEL})"
	),
):
	"""Transpile cell files and print the results as a JSON array."""
	_configure_logging(log_level)
	console = Console(stderr=True)
	options = env.options(
		resolve_files=resolve_files, resolve_local_imports=resolve_local_imports
	)
	results, failures = _transpile_files(console, files, mode, options, keep_going)

	payload: list[dict[str, Any]] = []
	for path, cell, unit in results:
		payload.append(
			{
				"id": cell.id,
				"file": str(path),
				"mode": cell.mode,
				**unit.to_dict(),
			}
		)
	typer.echo(json.dumps(payload, indent=2))
	if failures:
		raise typer.Exit(1)


@cli.command("check")
def check_command(
	files: list[Path] = typer.Argument(
		..., exists=True, dir_okay=False, readable=True, help="Cell files to check"
	),
	mode: str | None = typer.Option(
		None, "--mode", "-m", help="Cell mode; inferred from the extension by default"
	),
	log_level: str | None = typer.Option(None, "--log-level", help="Log level"),
):
	"""Parse and validate cell files without printing their bodies."""
	_configure_logging(log_level)
	console = Console()
	results, failures = _transpile_files(
		Console(stderr=True), files, mode, env.options(), keep_going=True
	)
	for path, cell, unit in results:
		inputs = ", ".join(unit.inputs) or "-"
		outputs = ", ".join(unit.outputs) or "-"
		console.print(
			f"✅ {escape(str(path))} [dim]({cell.mode})[/dim] "
			f"inputs: {escape(inputs)} outputs: {escape(outputs)}"
		)
	if failures:
		raise typer.Exit(1)


@cli.command("modes")
def modes_command():
	"""List the supported cell modes."""
	table = Table(title="Cell modes")
	table.add_column("Mode")
	table.add_column("Embedding")
	table.add_column("Renderer tag")
	for mode in CELL_MODES:
		if mode in DEFAULT_TAGS:
			embedding = "raw" if mode in RAW_MODES else "cooked"
			table.add_row(mode, embedding, DEFAULT_TAGS[mode])
		elif mode == "js":
			table.add_row(mode, "script", "-")
		else:
			table.add_row(mode, "delegated", "-")
	Console().print(table)


def main():
	"""Main CLI entry point."""
	try:
		cli()
	except Exception:
		console = Console()
		console.print_exception()
		raise typer.Exit(1) from None


if __name__ == "__main__":
	main()
