"""
In-memory graph store for an LSIF dump.

The store is filled once by ``ingest`` and then only queried. It keeps the
vertex table plus, per edge label, an index of edges leaving and entering
every vertex. ``item`` edges are also bucketed by their ``property``.

"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING, TypeVar

from lsifdiagram.errors import GraphStructureError
from lsifdiagram.lsif.protocol import (
	Document,
	Edge,
	EdgeLabel,
	ItemProperty,
	MetaData,
	Project,
	Record,
	Vertex,
	VertexId,
)

if TYPE_CHECKING:
	from collections.abc import Iterable

logger = logging.getLogger(__name__)

V = TypeVar("V", bound=Vertex)


def _label(label: EdgeLabel | str) -> str:
	return label.value if isinstance(label, EdgeLabel) else label


class GraphStore:
	"""Vertex table and forward/reverse adjacency indices for one LSIF dump."""

	def __init__(self) -> None:
		"""Initialize an empty store."""
		self._vertices: dict[VertexId, Vertex] = {}
		self._out: dict[str, dict[VertexId, list[Edge]]] = defaultdict(lambda: defaultdict(list))
		self._in: dict[str, dict[VertexId, list[Edge]]] = defaultdict(lambda: defaultdict(list))
		self._items: dict[VertexId, dict[str, list[VertexId]]] = defaultdict(dict)
		self._by_label: dict[str, list[Vertex]] = defaultdict(list)
		self._documents_by_uri: dict[str, list[Document]] = defaultdict(list)
		self._metadata: MetaData | None = None
		self.edge_count = 0

	# --- Ingestion --- #

	def ingest(self, record: Record) -> None:
		"""
		Add a vertex or an edge to the store.

		Args:
		    record: The parsed record

		Raises:
		    GraphStructureError: If an edge references an id that has not been
		        seen, a vertex id is reused, or a moniker gets a second attach target

		"""
		if isinstance(record, Edge):
			self._ingest_edge(record)
		else:
			self._ingest_vertex(record)

	def ingest_all(self, records: Iterable[Record]) -> int:
		"""Ingest every record and return how many were processed."""
		count = 0
		for record in records:
			self.ingest(record)
			count += 1
		logger.debug("Ingested %d records (%d vertices, %d edges)", count, len(self._vertices), self.edge_count)
		return count

	def _ingest_vertex(self, vertex: Vertex) -> None:
		if vertex.id in self._vertices:
			msg = f"Duplicate vertex id {vertex.id!r} ({vertex.label})"
			raise GraphStructureError(msg)
		self._vertices[vertex.id] = vertex
		self._by_label[vertex.label].append(vertex)
		if isinstance(vertex, Document):
			self._documents_by_uri[vertex.uri].append(vertex)
		elif isinstance(vertex, MetaData):
			self._metadata = vertex

	def _ingest_edge(self, edge: Edge) -> None:
		self._require(edge.out_v, edge)
		targets = edge.targets
		for target in targets:
			self._require(target, edge)

		if edge.label == EdgeLabel.ATTACH.value and self._out[edge.label].get(edge.out_v):
			msg = f"Moniker {edge.out_v!r} is attached to more than one moniker (edge {edge.id!r})"
			raise GraphStructureError(msg)

		self._out[edge.label][edge.out_v].append(edge)
		for target in targets:
			self._in[edge.label][target].append(edge)

		if edge.label == EdgeLabel.ITEM.value:
			bucket = edge.item_property or ItemProperty.UNDEFINED.value
			self._items[edge.out_v].setdefault(bucket, []).extend(targets)

		self.edge_count += 1

	def _require(self, vertex_id: VertexId, edge: Edge) -> None:
		if vertex_id not in self._vertices:
			msg = f"Edge {edge.id!r} ({edge.label}) references unknown vertex {vertex_id!r}"
			raise GraphStructureError(msg)

	# --- Queries --- #

	def __len__(self) -> int:
		"""Return the number of vertices."""
		return len(self._vertices)

	def __contains__(self, vertex_id: object) -> bool:
		"""Check whether a vertex id is known."""
		return vertex_id in self._vertices

	def vertex(self, vertex_id: VertexId) -> Vertex:
		"""
		Look up a vertex by id.

		Raises:
		    GraphStructureError: If the id is unknown

		"""
		try:
			return self._vertices[vertex_id]
		except KeyError as e:
			msg = f"Unknown vertex {vertex_id!r}"
			raise GraphStructureError(msg) from e

	def edges_out(self, vertex_id: VertexId, label: EdgeLabel | str) -> list[Edge]:
		"""Edges with the given label leaving a vertex, in ingestion order."""
		return list(self._out[_label(label)].get(vertex_id, ()))

	def edges_in(self, vertex_id: VertexId, label: EdgeLabel | str) -> list[Edge]:
		"""Edges with the given label entering a vertex, in ingestion order."""
		return list(self._in[_label(label)].get(vertex_id, ()))

	def out_vertices(self, vertex_id: VertexId, label: EdgeLabel | str) -> list[Vertex]:
		"""Target vertices of the edges leaving a vertex."""
		return [self._vertices[t] for edge in self.edges_out(vertex_id, label) for t in edge.targets]

	def in_vertices(self, vertex_id: VertexId, label: EdgeLabel | str) -> list[Vertex]:
		"""Source vertices of the edges entering a vertex."""
		return [self._vertices[edge.out_v] for edge in self.edges_in(vertex_id, label)]

	def item_groups(self, vertex_id: VertexId) -> dict[str, list[VertexId]]:
		"""
		Targets of the ``item`` edges leaving a result vertex, grouped by property.

		Edges without a property are grouped under ``"undefined"``.

		"""
		return {prop: list(targets) for prop, targets in self._items.get(vertex_id, {}).items()}

	def vertices_by_label(self, label: str, kind: type[V] = Vertex) -> list[V]:
		"""All vertices with a label, in ingestion order."""
		return [v for v in self._by_label.get(label, ()) if isinstance(v, kind)]

	def documents(self) -> list[Document]:
		"""All document vertices in ingestion order."""
		return self.vertices_by_label("document", Document)

	def documents_for_uri(self, uri: str) -> list[Document]:
		"""Document vertices registered for a uri."""
		return list(self._documents_by_uri.get(uri, ()))

	def document_of(self, vertex_id: VertexId) -> Document | None:
		"""The document that ``contains`` a vertex, if any."""
		for container in self.in_vertices(vertex_id, EdgeLabel.CONTAINS):
			if isinstance(container, Document):
				return container
		return None

	def project_of(self, document_id: VertexId) -> Project | None:
		"""The project that ``contains`` a document, if any."""
		for container in self.in_vertices(document_id, EdgeLabel.CONTAINS):
			if isinstance(container, Project):
				return container
		return None

	@property
	def metadata(self) -> MetaData | None:
		"""The dump's ``metaData`` vertex, if one was ingested."""
		return self._metadata
