"""Diagram elements and relations."""

from __future__ import annotations

from dataclasses import dataclass, field

from lsifdiagram.naming.names import SEPARATOR


@dataclass(frozen=True)
class DiagramElement:
	"""A node of the diagram tree, addressed by its dotted id."""

	id: str
	"""Hierarchical name; the parent is implied by the dotted path."""

	kind: str
	"""Element kind, e.g. ``class``, ``function`` or ``scope``."""

	title: str
	"""Human readable title."""

	description: str = ""
	"""Free text, usually the hover text of the symbol."""

	technology: str | None = None
	"""Language of the defining document."""

	tags: frozenset[str] = field(default_factory=frozenset)
	"""Tags used by views and styling."""

	links: tuple[str, ...] = ()
	"""Source links (``uri:line:character``)."""

	@property
	def name(self) -> str:
		"""The last segment of the id."""
		return self.id.rsplit(SEPARATOR, 1)[-1]

	@property
	def parent_id(self) -> str | None:
		"""Id of the enclosing element, or None for a root."""
		if SEPARATOR not in self.id:
			return None
		return self.id.rsplit(SEPARATOR, 1)[0]

	@property
	def depth(self) -> int:
		"""Number of segments in the id."""
		return self.id.count(SEPARATOR) + 1


@dataclass(frozen=True)
class DiagramRelation:
	"""A directed edge between two elements."""

	source: str
	target: str
	title: str = ""
	tags: frozenset[str] = field(default_factory=frozenset)

	@property
	def key(self) -> tuple[str, str, str]:
		"""Identity used to collapse duplicates."""
		return self.source, self.target, self.title
