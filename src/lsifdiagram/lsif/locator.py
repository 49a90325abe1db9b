"""Locating the innermost definition range around a source position."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lsifdiagram.lsif.protocol import Document, EdgeLabel, LspRange, Position, Range

if TYPE_CHECKING:
	from lsifdiagram.lsif.store import GraphStore

logger = logging.getLogger(__name__)


def contains_position(span: LspRange, position: Position) -> bool:
	"""Check whether a position lies within a range, bounds included."""
	return span.start.as_tuple() <= position.as_tuple() <= span.end.as_tuple()


def contains_range(outer: LspRange, inner: LspRange) -> bool:
	"""Check whether ``outer`` covers ``inner``, bounds included."""
	return contains_position(outer, inner.start) and contains_position(outer, inner.end)


def strictly_contains_range(outer: LspRange, inner: LspRange) -> bool:
	"""Check whether ``outer`` covers ``inner`` and the two differ."""
	return outer != inner and contains_range(outer, inner)


def location_to_string(uri: str, span: LspRange) -> str:
	"""
	Format a location as ``uri:startLine:startChar - endLine:endChar``.

	Lines and characters are converted to 1-based values.

	"""
	return (
		f"{uri}:{span.start.line + 1}:{span.start.character + 1} - "
		f"{span.end.line + 1}:{span.end.character + 1}"
	)


def location_to_link(uri: str, span: LspRange) -> str:
	"""The link part (``uri:line:char``) of a formatted location."""
	return location_to_string(uri, span).split(" - ")[0]


class RangeLocator:
	"""
	Finds definition ranges enclosing a position.

	Candidate lists are cached per uri, so the store must be fully ingested
	before the locator is queried.

	"""

	def __init__(self, store: GraphStore) -> None:
		"""
		Initialize the locator.

		Args:
		    store: A fully ingested graph store

		"""
		self.store = store
		self._candidates: dict[str, list[Range]] = {}

	def _definition_ranges(self, uri: str) -> list[Range]:
		if uri in self._candidates:
			return self._candidates[uri]

		candidates: list[Range] = []
		for document in self.store.documents_for_uri(uri):
			for item in self.store.out_vertices(document.id, EdgeLabel.CONTAINS):
				if not isinstance(item, Range) or not item.is_definition:
					continue
				# An empty tag text marks the range covering the whole file
				if item.tag.text == "" or item.tag.full_range is None:
					continue
				candidates.append(item)
		self._candidates[uri] = candidates
		return candidates

	def find_enclosing_definition_range(self, document_uri: str, position: Position) -> Range | None:
		"""
		Find the innermost definition or declaration range covering a position.

		Args:
		    document_uri: Uri of the document to search
		    position: Zero-based position inside the document

		Returns:
		    The most deeply nested qualifying range, or None when the document is
		    unknown or no tagged range covers the position

		"""
		if not self.store.documents_for_uri(document_uri):
			logger.debug("No document registered for %s", document_uri)
			return None

		best: Range | None = None
		for candidate in self._definition_ranges(document_uri):
			full_range = candidate.tag.full_range
			if not contains_position(full_range, position):
				continue
			if best is None or strictly_contains_range(best.tag.full_range, full_range):
				best = candidate
		return best

	def link_for_range(self, range_vertex: Range, document: Document | None = None) -> str:
		"""Source link (``uri:line:char``) for a range vertex."""
		document = document or self.store.document_of(range_vertex.id)
		uri = document.uri if document else ""
		return location_to_link(uri, range_vertex.span)
