"""Exceptions raised while ingesting and resolving LSIF graphs."""

from __future__ import annotations


class LsifDiagramError(Exception):
	"""Base exception for lsif-diagram."""


class LsifParseError(LsifDiagramError):
	"""Raised when an input line is not a valid LSIF vertex or edge."""

	def __init__(self, message: str, line_number: int | None = None) -> None:
		"""
		Initialize the parse error.

		Args:
		    message: Description of the problem
		    line_number: 1-based input line, when known

		"""
		self.line_number = line_number
		if line_number is not None:
			message = f"line {line_number}: {message}"
		super().__init__(message)


class GraphStructureError(LsifDiagramError, LookupError):
	"""Raised when the graph violates a structural invariant (unknown ids, missing edges, cycles)."""


class MonikerResolutionError(LsifDiagramError):
	"""Raised when a range does not resolve to exactly the expected number of monikers."""
