"""Utility functions for CLI operations in lsif-diagram."""

from __future__ import annotations

import contextlib
import logging
import os
from typing import TYPE_CHECKING, NoReturn

import typer

from lsifdiagram.utils.log_setup import console, display_error_summary

if TYPE_CHECKING:
	from collections.abc import Iterator

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def progress_indicator(message: str) -> Iterator[None]:
	"""
	Display a spinner on stderr while a step runs.

	Args:
	    message: Message to display alongside the spinner

	Yields:
	    None

	"""
	# Skip visual indicators in testing/CI environments and when stderr is not a terminal
	if os.environ.get("PYTEST_CURRENT_TEST") or os.environ.get("CI") or not console.is_terminal:
		yield
		return

	with console.status(message):
		yield


def show_error(message: str, exception: Exception | None = None) -> None:
	"""
	Display an error summary with standardized formatting.

	Args:
	        message: The error message to display
	        exception: Optional exception that caused the error

	"""
	error_text = message
	if exception:
		error_text += f"\n\nDetails: {exception!s}"
		logger.debug("Error occurred", exc_info=exception)

	display_error_summary(error_text)


def exit_with_error(message: str, exit_code: int = 1, exception: Exception | None = None) -> NoReturn:
	"""
	Display an error message and exit.

	Args:
	        message: Error message to display
	        exit_code: Exit code to use
	        exception: Optional exception that caused the error

	"""
	show_error(message, exception)
	raise typer.Exit(exit_code) from exception
