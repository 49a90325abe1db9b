"""
End-to-end conversion from LSIF records to DSL text.

``DiagramPipeline`` wires the stages together with settings taken from an
``AppConfigSchema``: the graph store is filled first, then the locator,
resolver and naming synthesizer are created over it for the model builder,
and the resulting model is rendered.

"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lsifdiagram.config.config_schema import AppConfigSchema
from lsifdiagram.dsl.emitter import DslEmitter, EmitterOptions
from lsifdiagram.lsif.locator import RangeLocator
from lsifdiagram.lsif.monikers import MonikerResolver, UniquenessRanking
from lsifdiagram.lsif.store import GraphStore
from lsifdiagram.model.builder import ModelBuilder
from lsifdiagram.naming.package_roots import PackageRegistry, SuffixPackageRootStrategy
from lsifdiagram.naming.synthesizer import NamingSynthesizer

if TYPE_CHECKING:
	from collections.abc import Iterable

	from lsifdiagram.lsif.protocol import Record
	from lsifdiagram.model.index import ModelIndex

logger = logging.getLogger(__name__)


class DiagramPipeline:
	"""Runs ingest, build and render for one LSIF dump."""

	def __init__(self, config: AppConfigSchema | None = None) -> None:
		"""
		Initialize the pipeline.

		Args:
		    config: Application configuration; defaults apply when omitted

		"""
		self.config = config or AppConfigSchema()

	def ingest(self, records: Iterable[Record]) -> GraphStore:
		"""Fill a new graph store with every record."""
		store = GraphStore()
		count = store.ingest_all(records)
		logger.info("Ingested %d records", count)
		return store

	def build(self, store: GraphStore, preserve_scopes: bool | None = None) -> ModelIndex:
		"""
		Build the diagram model over an ingested store.

		Args:
		    store: A fully ingested graph store
		    preserve_scopes: Overrides ``naming.preserve_scopes`` when given

		"""
		preserve = self.config.naming.preserve_scopes if preserve_scopes is None else preserve_scopes
		monikers = self.config.monikers
		extensions = self.config.naming.strip_extensions

		resolver = MonikerResolver(
			store,
			ranking=UniquenessRanking(monikers.uniqueness_ranks),
			scheme=monikers.scheme,
			expected_count=monikers.expected_count,
		)
		synthesizer = NamingSynthesizer(
			store,
			resolver,
			registry=PackageRegistry(SuffixPackageRootStrategy(extensions)),
			package_schemes=monikers.package_schemes,
			extensions=extensions,
		)
		builder = ModelBuilder(
			store,
			RangeLocator(store),
			resolver,
			synthesizer,
			markers=self.config.model.markers,
			test_pattern=self.config.model.test_pattern,
		)
		return builder.build(preserve_scopes=preserve)

	def render(self, index: ModelIndex, preserve_scopes: bool | None = None) -> str:
		"""Render a model as DSL text."""
		preserve = self.config.naming.preserve_scopes if preserve_scopes is None else preserve_scopes
		options = EmitterOptions(
			preserve_scopes=preserve,
			view_depth=self.config.views.depth,
			clutter_kinds=tuple(self.config.model.clutter_kinds),
		)
		return DslEmitter(options).render(index)

	def run(self, records: Iterable[Record], preserve_scopes: bool | None = None) -> str:
		"""
		Convert LSIF records to DSL text.

		Raises:
		    LsifDiagramError: On malformed input, structural defects or ambiguous monikers

		"""
		store = self.ingest(records)
		index = self.build(store, preserve_scopes)
		return self.render(index, preserve_scopes)
