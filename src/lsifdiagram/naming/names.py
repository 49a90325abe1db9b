"""Hierarchical names and the sanitizing rules for their segments."""

from __future__ import annotations

import re
from dataclasses import dataclass

RESERVED_CHARS = re.compile(r"[^A-Za-z0-9_]")
SEPARATOR = "."


def sanitize_segment(segment: str) -> str:
	"""
	Make a single name segment safe for use as a DSL identifier.

	Reserved characters become ``_`` and a leading digit gets a ``_`` prefix.

	"""
	cleaned = RESERVED_CHARS.sub("_", segment) or "_"
	if cleaned[0].isdigit():
		cleaned = f"_{cleaned}"
	return cleaned


def sanitize_identifier(value: str) -> str:
	"""Collapse an arbitrary string (such as a qualified title) into one identifier."""
	return sanitize_segment(value.replace(SEPARATOR, "_"))


@dataclass(frozen=True)
class HierarchicalName:
	"""A dot-separated element id and the kind of its root container."""

	segments: tuple[str, ...]
	root_kind: str = "scope"
	root_title: str | None = None

	def __post_init__(self) -> None:
		"""Reject empty names."""
		if not self.segments:
			msg = "A hierarchical name needs at least one segment"
			raise ValueError(msg)

	@classmethod
	def parse(cls, fqn: str) -> HierarchicalName:
		"""Split a dotted id into a name."""
		return cls(tuple(fqn.split(SEPARATOR)))

	@property
	def fqn(self) -> str:
		"""The dotted id."""
		return SEPARATOR.join(self.segments)

	@property
	def depth(self) -> int:
		"""Number of segments."""
		return len(self.segments)

	@property
	def parent(self) -> HierarchicalName | None:
		"""The enclosing name, or None at the root."""
		if len(self.segments) == 1:
			return None
		return HierarchicalName(self.segments[:-1], self.root_kind, self.root_title)

	@property
	def root(self) -> HierarchicalName:
		"""The first segment as a name of its own."""
		return HierarchicalName(self.segments[:1], self.root_kind, self.root_title)

	def __str__(self) -> str:
		"""Return the dotted id."""
		return self.fqn
