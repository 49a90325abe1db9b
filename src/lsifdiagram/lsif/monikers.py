"""
Moniker resolution over an ingested LSIF graph.

A definition range reaches its symbol identity through ``next`` edges to a
result set, which carries a ``moniker`` edge. Monikers may in turn be aliased
by more global monikers through ``attach`` edges (``outV`` is attached to the
more local ``inV``). The resolver walks those chains to find the canonical
moniker of a range and the most unique alias of a moniker.

"""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

from lsifdiagram.errors import GraphStructureError, MonikerResolutionError
from lsifdiagram.lsif.protocol import (
	Document,
	EdgeLabel,
	HoverResult,
	ItemProperty,
	Moniker,
	PackageInformation,
	Range,
	ResultSet,
	Vertex,
	VertexId,
)

if TYPE_CHECKING:
	from collections.abc import Mapping

	from lsifdiagram.lsif.store import GraphStore

logger = logging.getLogger(__name__)

DEFAULT_UNIQUENESS_RANKS: dict[str, int] = {
	"local": 0,
	"group": 1,
	"document": 2,
	"project": 3,
	"package": 4,
	"scheme": 5,
	"global": 6,
}


class UniquenessRanking:
	"""Total order over moniker uniqueness levels."""

	def __init__(self, ranks: Mapping[str, int] | None = None) -> None:
		"""
		Initialize the ranking.

		Args:
		    ranks: Level name to rank; higher is more unique. Defaults to
		        ``DEFAULT_UNIQUENESS_RANKS``.

		"""
		self.ranks = dict(ranks if ranks is not None else DEFAULT_UNIQUENESS_RANKS)

	def rank(self, level: str) -> int:
		"""Rank of a level; unknown levels rank below every known one."""
		return self.ranks.get(level, -1)

	def is_narrower(self, level: str, than: str) -> bool:
		"""Whether ``level`` is strictly less unique than ``than``."""
		return self.rank(level) < self.rank(than)


class MonikerResolver:
	"""Resolves canonical and alternate monikers for ranges and monikers."""

	def __init__(
		self,
		store: GraphStore,
		ranking: UniquenessRanking | None = None,
		scheme: str | None = None,
		expected_count: int = 1,
	) -> None:
		"""
		Initialize the resolver.

		Args:
		    store: A fully ingested graph store
		    ranking: Uniqueness ranking used by ``most_unique_moniker``
		    scheme: Scheme of the analyzer that produced the dump; monikers of
		        other schemes are ignored when picking the canonical moniker.
		        ``None`` accepts every scheme.
		    expected_count: Number of canonical monikers a range must resolve to

		"""
		self.store = store
		self.ranking = ranking or UniquenessRanking()
		self.scheme = scheme
		self.expected_count = expected_count

	# --- Result chains --- #

	def _result_path(self, vertex_id: VertexId) -> list[Vertex]:
		"""Follow ``next`` edges from a vertex until the one carrying references."""
		path: list[Vertex] = []
		seen: set[VertexId] = set()
		current = self.store.vertex(vertex_id)
		while True:
			if current.id in seen:
				msg = f"Cycle in 'next' chain at vertex {current.id!r}"
				raise GraphStructureError(msg)
			seen.add(current.id)
			path.append(current)
			if self.store.edges_out(current.id, EdgeLabel.REFERENCES):
				return path
			successors = self.store.out_vertices(current.id, EdgeLabel.NEXT)
			if not successors:
				return path
			current = successors[0]

	def canonical_moniker(self, range_id: VertexId) -> Moniker | None:
		"""
		Resolve the canonical moniker of a range.

		The candidates are the monikers of the vertex that carries the
		``textDocument/references`` edge, or else of the deepest vertex on the
		``next`` chain that has any. They are filtered to the governing scheme.

		Args:
		    range_id: Id of a range vertex

		Returns:
		    The canonical moniker, or None when no vertex on the chain has one

		Raises:
		    GraphStructureError: If the range has no ``next`` edge
		    MonikerResolutionError: If the number of candidates in the governing
		        scheme differs from ``expected_count``

		"""
		if not self.store.edges_out(range_id, EdgeLabel.NEXT):
			msg = f"Range {range_id!r} has no 'next' edge"
			raise GraphStructureError(msg)

		path = self._result_path(range_id)
		candidates: list[Moniker] = []
		for vertex in reversed(path):
			candidates = [m for m in self.store.out_vertices(vertex.id, EdgeLabel.MONIKER) if isinstance(m, Moniker)]
			if candidates:
				break
		if not candidates:
			return None

		matching = [m for m in candidates if self.scheme is None or m.scheme == self.scheme]
		if len(matching) != self.expected_count:
			found = ", ".join(f"{m.scheme}:{m.identifier}" for m in candidates)
			msg = (
				f"Range {range_id!r} resolves to {len(matching)} monikers in scheme "
				f"{self.scheme or '*'} (expected {self.expected_count}): {found}"
			)
			raise MonikerResolutionError(msg)
		return matching[0]

	# --- Aliases --- #

	def attach_chain(self, moniker: Moniker) -> list[Moniker]:
		"""
		Monikers attached to ``moniker``, transitively, nearest first.

		Raises:
		    GraphStructureError: If the attach edges form a cycle

		"""
		chain: list[Moniker] = []
		visited: set[VertexId] = {moniker.id}
		queue: deque[Moniker] = deque([moniker])
		while queue:
			current = queue.popleft()
			for attached in self.store.in_vertices(current.id, EdgeLabel.ATTACH):
				if attached.id in visited:
					msg = f"Attach cycle through moniker {attached.id!r}"
					raise GraphStructureError(msg)
				visited.add(attached.id)
				if isinstance(attached, Moniker):
					chain.append(attached)
					queue.append(attached)
		return chain

	def _result_sets_from(self, start: ResultSet) -> list[ResultSet]:
		reached = [start]
		seen = {start.id}
		current: Vertex = start
		while True:
			successors = [v for v in self.store.out_vertices(current.id, EdgeLabel.NEXT) if isinstance(v, ResultSet)]
			if not successors or successors[0].id in seen:
				return reached
			current = successors[0]
			seen.add(current.id)
			reached.append(current)

	def alternate_monikers(self, moniker: Moniker) -> list[Moniker]:
		"""
		Every other moniker that names the same symbol.

		Collects the attach chain of ``moniker`` and, for each result set that
		points at it, the monikers (with their attach chains) of the result sets
		reachable through ``next`` edges.

		Returns:
		    Alternates in first-seen order, without ``moniker`` itself

		"""
		found: dict[VertexId, Moniker] = {}

		def collect(items: list[Moniker]) -> None:
			for item in items:
				if item.id != moniker.id:
					found.setdefault(item.id, item)

		collect(self.attach_chain(moniker))

		for holder in self.store.in_vertices(moniker.id, EdgeLabel.MONIKER):
			if not isinstance(holder, ResultSet):
				continue
			for result_set in self._result_sets_from(holder):
				for other in self.store.out_vertices(result_set.id, EdgeLabel.MONIKER):
					if isinstance(other, Moniker):
						collect([other, *self.attach_chain(other)])

		return list(found.values())

	def most_unique_moniker(self, moniker: Moniker) -> Moniker:
		"""
		Pick the most unique moniker among ``moniker`` and its alternates.

		Ties keep the first one seen, so ``moniker`` wins over equally ranked
		alternates.

		"""
		best = moniker
		for candidate in self.alternate_monikers(moniker):
			if self.ranking.rank(candidate.unique) > self.ranking.rank(best.unique):
				best = candidate
		return best

	# --- Related lookups --- #

	def reference_ranges(self, range_id: VertexId) -> list[Range]:
		"""
		Ranges referencing the symbol of a range.

		Follows ``item`` edges tagged ``references`` of the reference result,
		including nested ``referenceResults``.

		"""
		path = self._result_path(range_id)
		results = self.store.out_vertices(path[-1].id, EdgeLabel.REFERENCES)
		ranges: dict[VertexId, Range] = {}
		seen: set[VertexId] = set()
		queue = deque(result.id for result in results)
		while queue:
			result_id = queue.popleft()
			if result_id in seen:
				continue
			seen.add(result_id)
			groups = self.store.item_groups(result_id)
			for target in groups.get(ItemProperty.REFERENCES.value, []):
				vertex = self.store.vertex(target)
				if isinstance(vertex, Range):
					ranges.setdefault(vertex.id, vertex)
			queue.extend(groups.get(ItemProperty.REFERENCE_RESULTS.value, []))
		return list(ranges.values())

	def hover_text(self, range_id: VertexId) -> str | None:
		"""Hover text of the first vertex on the range's ``next`` chain that has one."""
		seen: set[VertexId] = set()
		current = self.store.vertex(range_id)
		while current.id not in seen:
			seen.add(current.id)
			for hover in self.store.out_vertices(current.id, EdgeLabel.HOVER):
				if isinstance(hover, HoverResult):
					return hover.text() or None
			successors = self.store.out_vertices(current.id, EdgeLabel.NEXT)
			if not successors:
				break
			current = successors[0]
		return None

	def package_information(self, moniker: Moniker) -> PackageInformation | None:
		"""Package information attached to a moniker, if any."""
		for info in self.store.out_vertices(moniker.id, EdgeLabel.PACKAGE_INFORMATION):
			if isinstance(info, PackageInformation):
				return info
		return None

	def containing_documents(self, moniker: Moniker) -> list[Document]:
		"""
		Documents holding ranges that resolve to a moniker.

		Walks backwards from the moniker through ``moniker``, ``next`` and
		``attach`` edges to ranges, then to their documents. Documents of
		definition or declaration ranges come before those that only reference
		the symbol.

		"""
		ranges: list[Range] = []
		seen: set[VertexId] = {moniker.id}
		queue: deque[Vertex] = deque([moniker])
		while queue:
			current = queue.popleft()
			if isinstance(current, Range):
				ranges.append(current)
				continue

			neighbours: list[Vertex] = []
			if isinstance(current, Moniker):
				neighbours.extend(self.store.in_vertices(current.id, EdgeLabel.MONIKER))
				neighbours.extend(self.store.out_vertices(current.id, EdgeLabel.ATTACH))
			else:
				neighbours.extend(self.store.in_vertices(current.id, EdgeLabel.NEXT))
			for neighbour in neighbours:
				if neighbour.id not in seen:
					seen.add(neighbour.id)
					queue.append(neighbour)

		documents: dict[VertexId, Document] = {}
		for range_vertex in sorted(ranges, key=lambda r: not r.is_definition):
			document = self.store.document_of(range_vertex.id)
			if document is not None:
				documents.setdefault(document.id, document)
		return list(documents.values())
