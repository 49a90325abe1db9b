"""Segment trie mirroring the hierarchical names of the model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from lsifdiagram.naming.names import SEPARATOR

if TYPE_CHECKING:
	from collections.abc import Iterator

	from lsifdiagram.model.elements import DiagramElement


@dataclass
class TrieNode:
	"""One path segment; ``element`` is set once the node is materialized."""

	segment: str
	path: str
	element: DiagramElement | None = None
	children: dict[str, TrieNode] = field(default_factory=dict)

	@property
	def depth(self) -> int:
		"""Number of segments in ``path``."""
		return self.path.count(SEPARATOR) + 1


class NameTrie:
	"""Trie over dotted ids, used to find missing ancestors."""

	def __init__(self) -> None:
		"""Initialize an empty trie."""
		self.roots: dict[str, TrieNode] = {}

	def insert(self, path: str, element: DiagramElement | None = None) -> TrieNode:
		"""Insert a dotted path, creating intermediate nodes, and return its node."""
		if not path:
			msg = "Cannot insert an empty path"
			raise ValueError(msg)
		children = self.roots
		node = None
		prefix: list[str] = []
		for segment in path.split(SEPARATOR):
			prefix.append(segment)
			node = children.get(segment)
			if node is None:
				node = TrieNode(segment=segment, path=SEPARATOR.join(prefix))
				children[segment] = node
			children = node.children
		if element is not None:
			node.element = element
		return node

	def find(self, path: str) -> TrieNode | None:
		"""The node for a dotted path, if present."""
		children = self.roots
		node = None
		for segment in path.split(SEPARATOR):
			node = children.get(segment)
			if node is None:
				return None
			children = node.children
		return node

	def walk(self) -> Iterator[TrieNode]:
		"""Depth-first, pre-order traversal with siblings in lexicographic order."""
		stack = [self.roots[key] for key in sorted(self.roots, reverse=True)]
		while stack:
			node = stack.pop()
			yield node
			stack.extend(node.children[key] for key in sorted(node.children, reverse=True))
