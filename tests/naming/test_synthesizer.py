"""Tests for hierarchical name synthesis."""

from __future__ import annotations

import pytest

from lsifdiagram.lsif.monikers import MonikerResolver
from lsifdiagram.naming.synthesizer import NamingSynthesizer
from tests.lsif_builder import KIND_FUNCTION, LsifGraphBuilder, function_pair


def _synthesizer(lsif: LsifGraphBuilder) -> tuple[NamingSynthesizer, MonikerResolver]:
	store = lsif.store()
	resolver = MonikerResolver(store)
	return NamingSynthesizer(store, resolver), resolver


@pytest.mark.unit
class TestProjectNames:
	"""Monikers narrower than ``scheme`` are qualified by project and path."""

	def test_preserved_scopes(self, lsif: LsifGraphBuilder) -> None:
		"""Path segments and the symbol become separate segments."""
		ids = function_pair(lsif)
		synthesizer, resolver = _synthesizer(lsif)
		moniker = resolver.canonical_moniker(ids["foo"])

		name = synthesizer.to_hierarchical_name(moniker, preserve_scopes=True)
		assert name.fqn == "demo.src.index.foo"
		assert name.root_kind == "project"
		assert name.root_title == "demo"

	def test_flat(self, lsif: LsifGraphBuilder) -> None:
		"""Without scopes everything below the container is one segment."""
		ids = function_pair(lsif)
		synthesizer, resolver = _synthesizer(lsif)
		moniker = resolver.canonical_moniker(ids["foo"])

		assert synthesizer.to_hierarchical_name(moniker, preserve_scopes=False).fqn == "demo.src_index_foo"

	def test_memoized(self, lsif: LsifGraphBuilder) -> None:
		"""The same moniker always yields the same name object."""
		ids = function_pair(lsif)
		synthesizer, resolver = _synthesizer(lsif)
		moniker = resolver.canonical_moniker(ids["bar"])

		assert synthesizer.to_hierarchical_name(moniker) is synthesizer.to_hierarchical_name(moniker)

	def test_project_resource_is_the_fallback_root(self, lsif: LsifGraphBuilder) -> None:
		"""Without metadata root the project resource directory is used."""
		project = lsif.project("app", resource="file:///work/app/tsconfig.json")
		doc = lsif.document("file:///work/app/lib/run.ts", project)
		rs = lsif.result_set()
		lsif.moniker(rs, "tsc", "lib/run:main")
		definition = lsif.definition(doc, "main", (0, 16), ((0, 0), (3, 1)), result_set=rs)
		synthesizer, resolver = _synthesizer(lsif)

		name = synthesizer.to_hierarchical_name(resolver.canonical_moniker(definition))
		assert name.fqn == "app.lib.run.main"

	def test_symbol_scopes(self, lsif: LsifGraphBuilder) -> None:
		"""Dotted symbols keep their enclosing scopes."""
		lsif.metadata("file:///repo")
		project = lsif.project("demo")
		doc = lsif.document("file:///repo/src/shapes.ts", project)
		rs = lsif.result_set()
		lsif.moniker(rs, "tsc", "src/shapes:Circle.area")
		definition = lsif.definition(doc, "area", (3, 2), ((3, 2), (5, 3)), result_set=rs)
		synthesizer, resolver = _synthesizer(lsif)

		name = synthesizer.to_hierarchical_name(resolver.canonical_moniker(definition))
		assert name.segments == ("demo", "src", "shapes", "Circle", "area")


@pytest.mark.unit
class TestPackageNames:
	"""Package-scheme monikers are qualified by package and inferred root."""

	def _package_dump(self, lsif: LsifGraphBuilder) -> dict[str, int]:
		lsif.metadata("file:///repo")
		project = lsif.project("acme-workspace")
		doc = lsif.document("file:///repo/packages/acme/src/util.ts", project)
		rs = lsif.result_set()
		exported = lsif.moniker(rs, "npm", "acme:lib/util:helper", unique="package")
		lsif.package_information(exported, "@acme/core")
		helper = lsif.definition(doc, "helper", (0, 16), ((0, 0), (2, 1)), kind=KIND_FUNCTION, result_set=rs)

		inner_rs = lsif.result_set()
		lsif.moniker(inner_rs, "tsc", "src/util:internal", unique="document")
		internal = lsif.definition(doc, "internal", (4, 9), ((4, 0), (6, 1)), result_set=inner_rs)
		return {"helper": helper, "internal": internal, "project": project}

	def test_package_root_is_inferred(self, lsif: LsifGraphBuilder) -> None:
		"""The document path relative to the inferred root follows the package name."""
		ids = self._package_dump(lsif)
		synthesizer, resolver = _synthesizer(lsif)

		name = synthesizer.to_hierarchical_name(resolver.canonical_moniker(ids["helper"]))
		assert name.fqn == "_acme_core.util.helper"
		assert name.root_kind == "package"
		assert name.root_title == "@acme/core"
		assert synthesizer.registry.package_for_project(ids["project"]) == "@acme/core"

	def test_project_local_names_use_the_associated_package(self, lsif: LsifGraphBuilder) -> None:
		"""Once a project publishes a package, its local symbols live under it."""
		ids = self._package_dump(lsif)
		synthesizer, resolver = _synthesizer(lsif)
		synthesizer.to_hierarchical_name(resolver.canonical_moniker(ids["helper"]))

		name = synthesizer.to_hierarchical_name(resolver.canonical_moniker(ids["internal"]))
		assert name.fqn == "_acme_core.util.internal"

	def test_failed_inference_degrades_to_project_name(self, lsif: LsifGraphBuilder) -> None:
		"""An unrelated package path falls back to the project-qualified name."""
		lsif.metadata("file:///repo")
		project = lsif.project("demo")
		doc = lsif.document("file:///repo/src/main.ts", project)
		rs = lsif.result_set()
		lsif.moniker(rs, "npm", "demo-pkg:dist/bundle/entry:start", unique="package")
		definition = lsif.definition(doc, "start", (0, 16), ((0, 0), (2, 1)), result_set=rs)
		synthesizer, resolver = _synthesizer(lsif)

		name = synthesizer.to_hierarchical_name(resolver.canonical_moniker(definition))
		assert name.fqn == "demo.src.main.start"
		assert name.root_kind == "project"

	def test_without_document(self, lsif: LsifGraphBuilder) -> None:
		"""Monikers without documents use the identifier path."""
		moniker = lsif.moniker(None, "npm", "left-pad:index.js:leftPad", unique="package")
		store = lsif.store()
		resolver = MonikerResolver(store)
		synthesizer = NamingSynthesizer(store, resolver)

		assert synthesizer.to_hierarchical_name(store.vertex(moniker)).fqn == "left_pad.index.leftPad"


@pytest.mark.unit
def test_scheme_names(lsif: LsifGraphBuilder) -> None:
	"""Scheme-unique monikers of other schemes live under the scheme."""
	moniker = lsif.moniker(None, "java", "com/acme:Widget.render", unique="scheme")
	store = lsif.store()
	resolver = MonikerResolver(store)
	synthesizer = NamingSynthesizer(store, resolver)

	name = synthesizer.to_hierarchical_name(store.vertex(moniker))
	assert name.segments == ("java", "com", "acme", "Widget", "render")
	assert name.root_kind == "scheme"


@pytest.mark.unit
class TestNameCollisions:
	"""Distinct symbols never share a name."""

	def test_colliding_names_get_a_stable_suffix(self, lsif: LsifGraphBuilder) -> None:
		"""The second identity mapping to a taken name is suffixed deterministically."""
		first = lsif.moniker(None, "tsc", "src/a/b:run", unique="document")
		second = lsif.moniker(None, "tsc", "src/a_b:run", unique="document")
		store = lsif.store()
		resolver = MonikerResolver(store)

		def names() -> list[str]:
			synthesizer = NamingSynthesizer(store, resolver)
			return [synthesizer.to_hierarchical_name(store.vertex(m), preserve_scopes=False).fqn for m in (first, second)]

		first_run = names()
		assert first_run[0] == "workspace.run"
		assert first_run[1].startswith("workspace.run_")
		assert names() == first_run

	def test_same_identity_shares_the_name(self, lsif: LsifGraphBuilder) -> None:
		"""Two moniker vertices with one scheme and identifier are one symbol."""
		first = lsif.moniker(None, "tsc", "src/index:foo", unique="document")
		second = lsif.moniker(None, "tsc", "src/index:foo", unique="document")
		store = lsif.store()
		synthesizer = NamingSynthesizer(store, MonikerResolver(store))

		assert synthesizer.to_hierarchical_name(store.vertex(first)).fqn == "workspace.foo"
		assert synthesizer.to_hierarchical_name(store.vertex(second)).fqn == "workspace.foo"
