"""
Model index.

Holds the elements and relations of a diagram and validates them as they are
added. Elements may be added before their parents; relations need both ends.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from collections.abc import Iterator

	from lsifdiagram.model.elements import DiagramElement, DiagramRelation

logger = logging.getLogger(__name__)


class ModelValidationError(ValueError):
	"""Raised when an element or relation cannot be added to the model."""


class DuplicateElementError(ModelValidationError):
	"""An element with the same id but different content already exists."""


class SourceNotFoundError(ModelValidationError):
	"""The source of a relation is not an element of the model."""


class TargetNotFoundError(ModelValidationError):
	"""The target of a relation is not an element of the model."""


class ModelIndex:
	"""Element table with child and relation indices."""

	def __init__(self) -> None:
		"""Initialize an empty model."""
		self._elements: dict[str, DiagramElement] = {}
		self._children: dict[str | None, list[str]] = defaultdict(list)
		self._relations: list[DiagramRelation] = []
		self._relation_keys: set[tuple[str, str, str]] = set()

	def __len__(self) -> int:
		"""Return the number of elements."""
		return len(self._elements)

	def __contains__(self, element_id: object) -> bool:
		"""Check whether an element id exists."""
		return element_id in self._elements

	def __iter__(self) -> Iterator[DiagramElement]:
		"""Iterate over elements in insertion order."""
		return iter(self._elements.values())

	def add_element(self, element: DiagramElement) -> DiagramElement:
		"""
		Add an element.

		Adding an element equal to an existing one is a no-op.

		Raises:
		    DuplicateElementError: If the id is taken by a different element

		"""
		existing = self._elements.get(element.id)
		if existing is not None:
			if existing == element:
				return existing
			msg = f"Element {element.id!r} already exists with different content"
			raise DuplicateElementError(msg)

		self._elements[element.id] = element
		self._children[element.parent_id].append(element.id)
		return element

	def add_relation(self, relation: DiagramRelation) -> bool:
		"""
		Add a relation.

		Returns:
		    False when an identical relation was already present

		Raises:
		    SourceNotFoundError: If the source element is missing
		    TargetNotFoundError: If the target element is missing

		"""
		if relation.source not in self._elements:
			msg = f"Relation source {relation.source!r} is not in the model"
			raise SourceNotFoundError(msg)
		if relation.target not in self._elements:
			msg = f"Relation target {relation.target!r} is not in the model"
			raise TargetNotFoundError(msg)
		if relation.key in self._relation_keys:
			return False
		self._relation_keys.add(relation.key)
		self._relations.append(relation)
		return True

	def get(self, element_id: str) -> DiagramElement | None:
		"""Look up an element."""
		return self._elements.get(element_id)

	def children(self, element_id: str | None) -> list[DiagramElement]:
		"""Direct children of an element (or the roots for None), sorted by id."""
		return [self._elements[child] for child in sorted(self._children.get(element_id, ()))]

	def root_elements(self) -> list[DiagramElement]:
		"""Elements without a parent, sorted by id."""
		return self.children(None)

	def orphans(self) -> list[DiagramElement]:
		"""Elements whose parent id is not an element, sorted by id."""
		return sorted(
			(e for e in self._elements.values() if e.parent_id is not None and e.parent_id not in self._elements),
			key=lambda e: e.id,
		)

	@property
	def elements(self) -> list[DiagramElement]:
		"""All elements in insertion order."""
		return list(self._elements.values())

	@property
	def relations(self) -> list[DiagramRelation]:
		"""All relations in insertion order."""
		return list(self._relations)
