"""
Model builder.

Walks an ingested LSIF graph and produces a ``ModelIndex``:

1. seed pass: definitions that reference a configured marker symbol,
2. exhaustive pass: the enclosing definition of every tagged range,
3. relation pass: ``referencer -> referenced`` for every element,
4. scope synthesis: an element for every missing ancestor in the name trie.

Lookups that fail for a single item are logged and skipped. Structural and
ambiguity errors raised by the resolver propagate and abort the build.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from lsifdiagram.lsif.protocol import EdgeLabel, Range, symbol_kind_name
from lsifdiagram.model.elements import DiagramElement, DiagramRelation
from lsifdiagram.model.index import (
	DuplicateElementError,
	ModelIndex,
	ModelValidationError,
	SourceNotFoundError,
	TargetNotFoundError,
)
from lsifdiagram.model.trie import NameTrie
from lsifdiagram.naming.names import sanitize_segment

if TYPE_CHECKING:
	from collections.abc import Iterable

	from lsifdiagram.lsif.locator import RangeLocator
	from lsifdiagram.lsif.monikers import MonikerResolver
	from lsifdiagram.lsif.protocol import VertexId
	from lsifdiagram.lsif.store import GraphStore
	from lsifdiagram.model.trie import TrieNode
	from lsifdiagram.naming.names import HierarchicalName
	from lsifdiagram.naming.synthesizer import NamingSynthesizer

logger = logging.getLogger(__name__)

DEFAULT_TEST_PATTERN = r"(?:^|_)(?:tests?|specs?|stor(?:y|ies)|mocks?)(?:_|$)"

KIND_SCOPE = "scope"
KIND_UNKNOWN = "unknown"
RELATION_TITLE = "references"
TAG_REFERENCE = "reference"
TAG_SCOPE = "scope"
TAG_SINGLE_CHILD = "single_child"
TAG_SYNTHESIZED = "synthesized"
TAG_TEST = "test"


@dataclass
class BuildContext:
	"""Mutable state of a single build."""

	preserve_scopes: bool = True
	index: ModelIndex = field(default_factory=ModelIndex)
	trie: NameTrie = field(default_factory=NameTrie)
	processed_result_sets: dict[VertexId, VertexId] = field(default_factory=dict)
	"""Result set id to the id of the range that claimed it."""
	element_by_range: dict[VertexId, str] = field(default_factory=dict)
	synthesized: list[tuple[str, Range]] = field(default_factory=list)
	"""Elements backed by a definition range, in creation order."""
	range_by_name: dict[str, VertexId] = field(default_factory=dict)
	name_by_range: dict[VertexId, HierarchicalName | None] = field(default_factory=dict)
	seen_relations: set[tuple[str, str]] = field(default_factory=set)


def _collapse_whitespace(text: str) -> str:
	return " ".join(text.split())


class ModelBuilder:
	"""Synthesizes diagram elements and relations from an LSIF graph."""

	def __init__(
		self,
		store: GraphStore,
		locator: RangeLocator,
		resolver: MonikerResolver,
		synthesizer: NamingSynthesizer,
		markers: Iterable[str] = (),
		test_pattern: str = DEFAULT_TEST_PATTERN,
	) -> None:
		"""
		Initialize the builder.

		Args:
		    store: A fully ingested graph store
		    locator: Range locator over the same store
		    resolver: Moniker resolver over the same store
		    synthesizer: Naming synthesizer
		    markers: Names of marker definitions whose implementers are seeded first
		    test_pattern: Regex (case-insensitive) marking scope segments as tests

		"""
		self.store = store
		self.locator = locator
		self.resolver = resolver
		self.synthesizer = synthesizer
		self.markers = tuple(markers)
		self.test_pattern = re.compile(test_pattern, re.IGNORECASE)

	def build(self, preserve_scopes: bool = True) -> ModelIndex:
		"""
		Run every pass and return the populated model.

		Args:
		    preserve_scopes: Keep intermediate scopes in names and materialize them

		Returns:
		    A model index in which every element's parent exists

		Raises:
		    GraphStructureError: On structural defects of the graph
		    MonikerResolutionError: When a range has an ambiguous moniker

		"""
		context = BuildContext(preserve_scopes=preserve_scopes)
		self.seed_pass(context)
		self.exhaustive_pass(context)
		self.relation_pass(context)
		if preserve_scopes:
			self.synthesize_scopes(context)
		logger.info(
			"Built model with %d elements and %d relations",
			len(context.index),
			len(context.index.relations),
		)
		return context.index

	# --- Passes --- #

	def seed_pass(self, context: BuildContext) -> None:
		"""Synthesize the definitions enclosing references to marker symbols."""
		if not self.markers:
			return

		for marker in self.store.vertices_by_label("range", Range):
			if not marker.is_definition or marker.text not in self.markers:
				continue
			tag = sanitize_segment(marker.text)
			references = self.resolver.reference_ranges(marker.id)
			logger.debug("Marker %s has %d references", marker.text, len(references))
			for reference in references:
				enclosing = self._enclosing_definition(reference)
				if enclosing is None:
					logger.error(
						"No enclosing definition for reference to %s at %s",
						marker.text,
						self.locator.link_for_range(reference),
					)
					continue
				if enclosing.id == marker.id:
					continue
				self.synthesize_element(context, enclosing, tags=(tag,))

	def exhaustive_pass(self, context: BuildContext) -> None:
		"""Synthesize the enclosing definition of every tagged range."""
		for document in self.store.documents():
			for item in self.store.out_vertices(document.id, EdgeLabel.CONTAINS):
				if not isinstance(item, Range) or item.tag is None:
					continue
				enclosing = self.locator.find_enclosing_definition_range(document.uri, item.start)
				if enclosing is None or enclosing.id in context.element_by_range:
					continue
				self.synthesize_element(context, enclosing)

	def relation_pass(self, context: BuildContext) -> None:
		"""Add a relation from every referencing element to the element it references."""
		for target_id, target_range in list(context.synthesized):
			for reference in self.resolver.reference_ranges(target_range.id):
				link = self.locator.link_for_range(reference)
				enclosing = self._enclosing_definition(reference)
				if enclosing is None:
					logger.error("No enclosing definition for reference to %s at %s", target_id, link)
					continue
				if enclosing.id == target_range.id:
					logger.debug("Skipping self reference of %s at %s", target_id, link)
					continue

				source_id = context.element_by_range.get(enclosing.id)
				if source_id is None:
					name = self.resolve_name(context, enclosing)
					if name is None:
						continue
					source_id = name.fqn
				if source_id == target_id:
					logger.warning("Skipping self reference of %s through a different range at %s", target_id, link)
					continue

				if (source_id, target_id) in context.seen_relations:
					continue
				relation = DiagramRelation(
					source=source_id,
					target=target_id,
					title=RELATION_TITLE,
					tags=frozenset({TAG_REFERENCE}),
				)
				if self._commit_relation(context, relation, enclosing, link):
					context.seen_relations.add((source_id, target_id))

	def synthesize_scopes(self, context: BuildContext) -> None:
		"""Materialize a ``scope`` element for every trie node without one."""
		created = 0
		for node in context.trie.walk():
			if node.element is not None:
				continue
			element = DiagramElement(
				id=node.path,
				kind=KIND_SCOPE,
				title=node.segment,
				tags=frozenset(self._scope_tags(node)),
			)
			node.element = context.index.add_element(element)
			created += 1
		logger.debug("Synthesized %d scope elements", created)

	# --- Elements --- #

	def resolve_name(self, context: BuildContext, range_vertex: Range) -> HierarchicalName | None:
		"""
		The hierarchical name of the symbol defined by a range.

		Returns:
		    The name, or None when the range resolves to no moniker

		"""
		if range_vertex.id in context.name_by_range:
			return context.name_by_range[range_vertex.id]

		name = None
		moniker = self.resolver.canonical_moniker(range_vertex.id)
		if moniker is None:
			logger.debug("No moniker for range %s (%s)", range_vertex.id, range_vertex.text)
		else:
			unique = self.resolver.most_unique_moniker(moniker)
			name = self.synthesizer.to_hierarchical_name(unique, context.preserve_scopes)
		context.name_by_range[range_vertex.id] = name
		return name

	def synthesize_element(
		self,
		context: BuildContext,
		range_vertex: Range,
		tags: Iterable[str] = (),
	) -> DiagramElement | None:
		"""
		Create the element for a definition range.

		Returns:
		    The element, or None when the range was skipped

		"""
		existing = context.element_by_range.get(range_vertex.id)
		if existing is not None:
			return context.index.get(existing)

		result_set = self._result_set_id(range_vertex)
		if result_set is not None:
			claimed_by = context.processed_result_sets.get(result_set)
			if claimed_by is not None and claimed_by != range_vertex.id:
				logger.warning(
					"Result set %s of %s was already processed for range %s",
					result_set,
					range_vertex.text,
					claimed_by,
				)
				return None

		name = self.resolve_name(context, range_vertex)
		if name is None:
			return None
		if name.fqn in context.index:
			logger.warning("Skipping %s: element %s already exists", range_vertex.text, name.fqn)
			return None

		document = self.store.document_of(range_vertex.id)
		element = DiagramElement(
			id=name.fqn,
			kind=symbol_kind_name(range_vertex.tag.kind if range_vertex.tag else None),
			title=range_vertex.text or name.segments[-1],
			description=_collapse_whitespace(self.resolver.hover_text(range_vertex.id) or ""),
			technology=document.language_id if document is not None else None,
			tags=frozenset(tags),
			links=(self.locator.link_for_range(range_vertex, document),),
		)
		context.index.add_element(element)
		context.trie.insert(element.id, element)
		if result_set is not None:
			context.processed_result_sets[result_set] = range_vertex.id
		context.element_by_range[range_vertex.id] = element.id
		context.range_by_name[element.id] = range_vertex.id
		context.synthesized.append((element.id, range_vertex))
		self._ensure_root(context, name)
		return element

	def _ensure_root(self, context: BuildContext, name: HierarchicalName) -> None:
		if name.depth == 1:
			return
		root = name.root
		if root.fqn in context.index:
			return
		element = DiagramElement(
			id=root.fqn,
			kind=name.root_kind,
			title=name.root_title or root.fqn,
			tags=frozenset({name.root_kind}),
		)
		context.index.add_element(element)
		context.trie.insert(root.fqn, element)

	def _synthesize_placeholder(self, context: BuildContext, range_vertex: Range, link: str) -> DiagramElement | None:
		name = self.resolve_name(context, range_vertex)
		if name is None:
			return None
		element = DiagramElement(
			id=name.fqn,
			kind=KIND_UNKNOWN,
			title=range_vertex.text or name.segments[-1],
			description=f"Synthesized from reference at {link}",
			tags=frozenset({TAG_SYNTHESIZED}),
			links=(link,),
		)
		try:
			context.index.add_element(element)
		except DuplicateElementError:
			logger.exception("Could not synthesize placeholder %s", name.fqn)
			return None
		context.trie.insert(element.id, element)
		self._ensure_root(context, name)
		logger.info("Synthesized placeholder element %s", element.id)
		return element

	def _commit_relation(self, context: BuildContext, relation: DiagramRelation, source_range: Range, link: str) -> bool:
		try:
			context.index.add_relation(relation)
		except SourceNotFoundError:
			if self._synthesize_placeholder(context, source_range, link) is None:
				logger.error("Dropping relation %s -> %s: source is not in the model", relation.source, relation.target)
				return False
			try:
				context.index.add_relation(relation)
			except ModelValidationError as e:
				logger.error("Dropping relation %s -> %s: %s", relation.source, relation.target, e)
				return False
		except TargetNotFoundError as e:
			logger.error("Dropping relation %s -> %s: %s", relation.source, relation.target, e)
			return False
		return True

	# --- Helpers --- #

	def _enclosing_definition(self, range_vertex: Range) -> Range | None:
		document = self.store.document_of(range_vertex.id)
		if document is None:
			return None
		return self.locator.find_enclosing_definition_range(document.uri, range_vertex.start)

	def _result_set_id(self, range_vertex: Range) -> VertexId | None:
		successors = self.store.out_vertices(range_vertex.id, EdgeLabel.NEXT)
		return successors[0].id if successors else None

	def _scope_tags(self, node: TrieNode) -> set[str]:
		tags = {TAG_SCOPE, f"depth_{node.depth}"}
		if len(node.children) == 1:
			tags.add(TAG_SINGLE_CHILD)
		if self.test_pattern.search(node.segment):
			tags.add(TAG_TEST)
		return tags
