"""Implementation of the render command."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

logger = logging.getLogger(__name__)

# Command line argument annotations
InputArg = Annotated[
	str,
	typer.Argument(
		help="LSIF dump (newline-delimited JSON), or '-' to read from stdin",
		show_default=True,
	),
]

OutputOpt = Annotated[
	Path | None,
	typer.Option(
		"--output",
		"-o",
		help="Write the DSL to this file instead of stdout",
	),
]

ConfigOpt = Annotated[
	Path | None,
	typer.Option(
		"--config",
		"-c",
		help="Path to config file",
	),
]

ScopesFlag = Annotated[
	bool | None,
	typer.Option(
		"--preserve-scopes/--flat",
		help="Keep nested scopes as elements (overrides config)",
		show_default=False,
	),
]


def register_command(app: typer.Typer) -> None:
	"""Register the render command with the CLI app."""

	@app.command(name="render")
	def render_command(
		input_path: InputArg = "-",
		output: OutputOpt = None,
		config: ConfigOpt = None,
		preserve_scopes: ScopesFlag = None,
	) -> None:
		"""
		Render an LSIF dump as a LikeC4 architecture diagram.

		Examples:
		        lsif-diagram render dump.lsif -o model.c4
		        lsif-diagram render --flat - < dump.lsif

		"""
		_render_command_impl(input_path=input_path, output=output, config=config, preserve_scopes=preserve_scopes)


# --- Implementation Function (Heavy imports deferred here) ---


def _render_command_impl(
	input_path: str,
	output: Path | None,
	config: Path | None,
	preserve_scopes: bool | None,
) -> None:
	from lsifdiagram.config.config_loader import ConfigError, ConfigLoader
	from lsifdiagram.errors import LsifDiagramError
	from lsifdiagram.lsif.reader import read_records
	from lsifdiagram.pipeline import DiagramPipeline
	from lsifdiagram.utils.cli_utils import exit_with_error, progress_indicator

	try:
		app_config = ConfigLoader(config).get
	except ConfigError as e:
		exit_with_error(f"Invalid configuration: {e}", exception=e)

	pipeline = DiagramPipeline(app_config)
	try:
		with progress_indicator("Rendering diagram..."):
			text = pipeline.run(read_records(input_path), preserve_scopes=preserve_scopes)
	except LsifDiagramError as e:
		exit_with_error(f"Could not convert {input_path}: {e}", exception=e)
	except OSError as e:
		exit_with_error(f"Could not read {input_path}: {e}", exception=e)

	if output is None:
		typer.echo(text, nl=False)
		return

	try:
		if output.parent != Path():
			output.parent.mkdir(parents=True, exist_ok=True)
		output.write_text(text, encoding="utf-8")
	except OSError as e:
		exit_with_error(f"Could not write {output}: {e}", exception=e)
	logger.info("Wrote diagram to %s", output)
