"""Tests for the model builder."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

import pytest

from lsifdiagram.errors import MonikerResolutionError
from lsifdiagram.model.builder import BuildContext
from tests.lsif_builder import KIND_CLASS, KIND_FUNCTION, KIND_INTERFACE, LsifGraphBuilder, function_pair, make_builder

if TYPE_CHECKING:
	from lsifdiagram.model.index import ModelIndex


def _functions(index: ModelIndex) -> dict[str, str]:
	return {element.title: element.id for element in index.elements if element.kind == "function"}


@pytest.mark.unit
class TestExhaustiveBuild:
	"""Elements and relations of a full build."""

	def test_single_reference(self, lsif: LsifGraphBuilder) -> None:
		"""``bar`` calling ``foo`` yields two function elements and one relation."""
		function_pair(lsif)
		index = make_builder(lsif.store()).build(preserve_scopes=False)

		functions = _functions(index)
		assert set(functions) == {"foo", "bar"}
		assert len(index.relations) == 1
		relation = index.relations[0]
		assert (relation.source, relation.target) == (functions["bar"], functions["foo"])
		assert relation.tags == frozenset({"reference"})
		assert relation.title == "references"

	def test_element_details(self, lsif: LsifGraphBuilder) -> None:
		"""Elements carry kind, hover description, language and a source link."""
		function_pair(lsif)
		index = make_builder(lsif.store()).build(preserve_scopes=False)

		foo = index.get("demo.src_index_foo")
		assert foo.kind == "function"
		assert foo.description == "function foo(): void"
		assert foo.technology == "typescript"
		assert foo.links == ("file:///repo/src/index.ts:1:17",)

		root = index.get("demo")
		assert root.kind == "project"
		assert root.tags == frozenset({"project"})

	def test_opposite_directions_are_independent(self, lsif: LsifGraphBuilder) -> None:
		"""Mutual references produce one relation per direction."""
		function_pair(lsif, bar_calls_foo=True, foo_calls_bar=True)
		index = make_builder(lsif.store()).build(preserve_scopes=False)

		functions = _functions(index)
		pairs = {(r.source, r.target) for r in index.relations}
		assert pairs == {(functions["bar"], functions["foo"]), (functions["foo"], functions["bar"])}
		assert len(index.relations) == 2

	def test_repeated_references_collapse(self, lsif: LsifGraphBuilder) -> None:
		"""Two calls from the same function give one relation."""
		lsif.metadata("file:///repo")
		project = lsif.project("demo")
		doc = lsif.document("file:///repo/src/index.ts", project)
		rs_foo = lsif.result_set()
		rs_bar = lsif.result_set()
		lsif.moniker(rs_foo, "tsc", "src/index:foo")
		lsif.moniker(rs_bar, "tsc", "src/index:bar")
		foo = lsif.definition(doc, "foo", (0, 16), ((0, 0), (2, 1)), result_set=rs_foo)
		bar = lsif.definition(doc, "bar", (4, 16), ((4, 0), (8, 1)), result_set=rs_bar)
		first = lsif.reference(doc, "foo", (5, 2), rs_foo)
		second = lsif.reference(doc, "foo", (6, 2), rs_foo)
		lsif.references(rs_foo, doc, definitions=[foo], references=[first, second])
		lsif.references(rs_bar, doc, definitions=[bar])

		index = make_builder(lsif.store()).build(preserve_scopes=False)
		assert len(index.relations) == 1

	def test_missing_enclosing_definition(self, lsif: LsifGraphBuilder, caplog: pytest.LogCaptureFixture) -> None:
		"""A top-level reference is logged and dropped while the build completes."""
		lsif.metadata("file:///repo")
		project = lsif.project("demo")
		doc = lsif.document("file:///repo/src/index.ts", project)
		rs_foo = lsif.result_set()
		rs_bar = lsif.result_set()
		lsif.moniker(rs_foo, "tsc", "src/index:foo")
		lsif.moniker(rs_bar, "tsc", "src/index:bar")
		foo = lsif.definition(doc, "foo", (0, 16), ((0, 0), (2, 1)), result_set=rs_foo)
		bar = lsif.definition(doc, "bar", (4, 16), ((4, 0), (6, 1)), result_set=rs_bar)
		top_level = lsif.reference(doc, "foo", (10, 0), rs_foo)
		lsif.references(rs_foo, doc, definitions=[foo], references=[top_level])
		lsif.references(rs_bar, doc, definitions=[bar])

		with caplog.at_level(logging.ERROR, logger="lsifdiagram.model.builder"):
			index = make_builder(lsif.store()).build(preserve_scopes=False)

		assert set(_functions(index)) == {"foo", "bar"}
		assert index.relations == []
		assert "No enclosing definition for reference to demo.src_index_foo" in caplog.text

	def test_names_are_unique_across_scopes(self, lsif: LsifGraphBuilder, caplog: pytest.LogCaptureFixture) -> None:
		"""Symbols sharing a local name in different scopes never collide."""
		lsif.metadata("file:///repo")
		project = lsif.project("demo")
		for module in ("a", "b"):
			doc = lsif.document(f"file:///repo/src/{module}.ts", project)
			for line, owner in enumerate(("Reader", "Writer")):
				rs = lsif.result_set()
				lsif.moniker(rs, "tsc", f"src/{module}:{owner}.run")
				lsif.definition(doc, "run", (line * 5, 2), ((line * 5, 2), (line * 5 + 3, 3)), result_set=rs)

		with caplog.at_level(logging.WARNING):
			index = make_builder(lsif.store()).build(preserve_scopes=True)

		runs = sorted(e.id for e in index.elements if e.title == "run")
		assert runs == [
			"demo.src.a.Reader.run",
			"demo.src.a.Writer.run",
			"demo.src.b.Reader.run",
			"demo.src.b.Writer.run",
		]
		assert "already exists" not in caplog.text

	def test_reference_emitted_before_definition(self, lsif: LsifGraphBuilder, caplog: pytest.LogCaptureFixture) -> None:
		"""A symbol is named after the file defining it, not a file referencing it first."""
		lsif.metadata("file:///repo")
		project = lsif.project("demo")
		doc_b = lsif.document("file:///repo/src/b.ts", project)
		doc_a = lsif.document("file:///repo/src/a.ts", project)
		rs_a = lsif.result_set()
		rs_b = lsif.result_set()
		lsif.moniker(rs_a, "tsc", "src/a:foo")
		lsif.moniker(rs_b, "tsc", "src/b:foo")

		foo_b = lsif.definition(doc_b, "foo", (0, 16), ((0, 0), (3, 1)), result_set=rs_b)
		call = lsif.reference(doc_b, "foo", (1, 2), rs_a)
		foo_a = lsif.definition(doc_a, "foo", (0, 16), ((0, 0), (2, 1)), result_set=rs_a)
		lsif.references(rs_a, doc_a, definitions=[foo_a], references=[call])
		lsif.references(rs_b, doc_b, definitions=[foo_b])

		with caplog.at_level(logging.WARNING):
			index = make_builder(lsif.store()).build(preserve_scopes=True)

		assert sorted(e.id for e in index.elements if e.title == "foo") == ["demo.src.a.foo", "demo.src.b.foo"]
		assert [(r.source, r.target) for r in index.relations] == [("demo.src.b.foo", "demo.src.a.foo")]
		assert "already exists" not in caplog.text

	@pytest.mark.parametrize(
		("modules", "preserve_scopes", "base"),
		[
			(("a/b", "a_b"), False, "demo.src_a_b_run"),
			(("foo-bar", "foo_bar"), False, "demo.src_foo_bar_run"),
			(("foo-bar", "foo_bar"), True, "demo.src.foo_bar.run"),
		],
	)
	def test_sanitized_names_stay_distinct(
		self,
		modules: tuple[str, str],
		preserve_scopes: bool,
		base: str,
		caplog: pytest.LogCaptureFixture,
	) -> None:
		"""Paths that only differ in characters lost to sanitizing still give two elements."""

		def dump() -> LsifGraphBuilder:
			lsif = LsifGraphBuilder()
			lsif.metadata("file:///repo")
			project = lsif.project("demo")
			for module in modules:
				doc = lsif.document(f"file:///repo/src/{module}.ts", project)
				rs = lsif.result_set()
				lsif.moniker(rs, "tsc", f"src/{module}:run")
				lsif.definition(doc, "run", (0, 16), ((0, 0), (2, 1)), result_set=rs)
			return lsif

		with caplog.at_level(logging.WARNING):
			index = make_builder(dump().store()).build(preserve_scopes=preserve_scopes)
		rebuilt = make_builder(dump().store()).build(preserve_scopes=preserve_scopes)

		runs = [e.id for e in index.elements if e.title == "run"]
		assert len(runs) == 2
		assert runs[0] == base
		assert re.fullmatch(re.escape(base) + r"_[0-9a-f]{8}", runs[1])
		assert runs == [e.id for e in rebuilt.elements if e.title == "run"]
		assert "already exists" not in caplog.text

	def test_range_without_moniker_is_skipped(self, lsif: LsifGraphBuilder) -> None:
		"""Definitions whose chain has no moniker produce no element."""
		function_pair(lsif)
		doc = lsif.document("file:///repo/src/extra.ts")
		rs = lsif.result_set()
		lsif.definition(doc, "anonymous", (0, 0), ((0, 0), (1, 1)), result_set=rs)

		index = make_builder(lsif.store()).build(preserve_scopes=False)
		assert "anonymous" not in {e.title for e in index.elements}

	def test_shared_result_set_is_skipped_with_warning(
		self, lsif: LsifGraphBuilder, caplog: pytest.LogCaptureFixture
	) -> None:
		"""A second range on an already processed result set is skipped."""
		lsif.metadata("file:///repo")
		project = lsif.project("demo")
		doc = lsif.document("file:///repo/src/merge.ts", project)
		rs = lsif.result_set()
		lsif.moniker(rs, "tsc", "src/merge:Options")
		lsif.definition(doc, "Options", (0, 17), ((0, 0), (2, 1)), kind=KIND_INTERFACE, result_set=rs)
		lsif.definition(doc, "Options", (4, 17), ((4, 0), (6, 1)), kind=KIND_INTERFACE, result_set=rs)

		with caplog.at_level(logging.WARNING, logger="lsifdiagram.model.builder"):
			index = make_builder(lsif.store()).build(preserve_scopes=False)

		assert [e.id for e in index.elements if e.kind == "interface"] == ["demo.src_merge_Options"]
		assert "was already processed" in caplog.text

	def test_ambiguity_aborts(self, lsif: LsifGraphBuilder) -> None:
		"""Ambiguous monikers propagate out of the build."""
		doc = lsif.document("file:///repo/a.ts")
		rs = lsif.result_set()
		lsif.moniker(rs, "tsc", "a:foo")
		lsif.moniker(rs, "tsc", "a:foo2")
		lsif.definition(doc, "foo", (0, 9), ((0, 0), (1, 1)), result_set=rs)

		with pytest.raises(MonikerResolutionError):
			make_builder(lsif.store()).build()


@pytest.mark.unit
class TestSeedAndPlaceholders:
	"""Marker seeding and placeholder synthesis."""

	def _marker_dump(self, lsif: LsifGraphBuilder) -> None:
		"""
		``Widget implements Component`` and ``render`` uses ``Widget``.

		::

		    interface Component {}              // line 0-1
		    class Widget implements Component { // line 3
		    }                                   // line 5
		    function render() {                 // line 7
		      new Widget();                     // line 8
		    }                                   // line 9

		"""
		lsif.metadata("file:///repo")
		project = lsif.project("ui")
		doc = lsif.document("file:///repo/src/widgets.ts", project)
		rs_component = lsif.result_set()
		rs_widget = lsif.result_set()
		rs_render = lsif.result_set()
		lsif.moniker(rs_component, "tsc", "src/widgets:Component")
		lsif.moniker(rs_widget, "tsc", "src/widgets:Widget")
		lsif.moniker(rs_render, "tsc", "src/widgets:render")

		component = lsif.definition(doc, "Component", (0, 10), ((0, 0), (1, 1)), kind=KIND_INTERFACE, result_set=rs_component)
		widget = lsif.definition(doc, "Widget", (3, 6), ((3, 0), (5, 1)), kind=KIND_CLASS, result_set=rs_widget)
		render = lsif.definition(doc, "render", (7, 9), ((7, 0), (9, 1)), kind=KIND_FUNCTION, result_set=rs_render)
		implements = lsif.reference(doc, "Component", (3, 24), rs_component)
		usage = lsif.reference(doc, "Widget", (8, 6), rs_widget)

		lsif.references(rs_component, doc, definitions=[component], references=[implements])
		lsif.references(rs_widget, doc, definitions=[widget], references=[usage])
		lsif.references(rs_render, doc, definitions=[render])

	def test_seed_pass_tags_implementers(self, lsif: LsifGraphBuilder) -> None:
		"""Definitions referencing a marker are synthesized with the marker tag."""
		self._marker_dump(lsif)
		builder = make_builder(lsif.store(), markers=("Component",))
		context = BuildContext(preserve_scopes=False)

		builder.seed_pass(context)

		widget = context.index.get("ui.src_widgets_Widget")
		assert widget.kind == "class"
		assert widget.tags == frozenset({"Component"})
		assert [name for name, _ in context.synthesized] == ["ui.src_widgets_Widget"]

	def test_missing_source_gets_a_placeholder(self, lsif: LsifGraphBuilder) -> None:
		"""A referencing definition that is not an element yet is synthesized as ``unknown``."""
		self._marker_dump(lsif)
		builder = make_builder(lsif.store(), markers=("Component",))
		context = BuildContext(preserve_scopes=False)

		builder.seed_pass(context)
		builder.relation_pass(context)

		placeholder = context.index.get("ui.src_widgets_render")
		assert placeholder.kind == "unknown"
		assert placeholder.tags == frozenset({"synthesized"})
		assert placeholder.description == "Synthesized from reference at file:///repo/src/widgets.ts:9:7"
		assert [(r.source, r.target) for r in context.index.relations] == [
			("ui.src_widgets_render", "ui.src_widgets_Widget")
		]

	def test_full_build_keeps_marker_tags(self, lsif: LsifGraphBuilder) -> None:
		"""Seeded elements are not resynthesized by the exhaustive pass."""
		self._marker_dump(lsif)
		index = make_builder(lsif.store(), markers=("Component",)).build(preserve_scopes=False)

		assert index.get("ui.src_widgets_Widget").tags == frozenset({"Component"})
		assert index.get("ui.src_widgets_render").kind == "function"
		assert index.get("ui.src_widgets_Component").kind == "interface"
		assert {(r.source, r.target) for r in index.relations} == {
			("ui.src_widgets_Widget", "ui.src_widgets_Component"),
			("ui.src_widgets_render", "ui.src_widgets_Widget"),
		}


@pytest.mark.unit
class TestScopeSynthesis:
	"""Gap filling in preserve-scopes mode."""

	def test_every_parent_exists(self, lsif: LsifGraphBuilder) -> None:
		"""Missing ancestors become tagged scope elements."""
		function_pair(lsif)
		index = make_builder(lsif.store()).build(preserve_scopes=True)

		assert index.orphans() == []
		src = index.get("demo.src")
		assert src.kind == "scope"
		assert src.tags == frozenset({"scope", "depth_2", "single_child"})
		module = index.get("demo.src.index")
		assert module.tags == frozenset({"scope", "depth_3"})

	def test_test_scopes_are_tagged(self, lsif: LsifGraphBuilder) -> None:
		"""Scopes named like tests, stories or mocks get a test tag."""
		lsif.metadata("file:///repo")
		project = lsif.project("demo")
		doc = lsif.document("file:///repo/src/__tests__/button.stories.tsx", project)
		rs = lsif.result_set()
		lsif.moniker(rs, "tsc", "src/__tests__/button.stories:Primary")
		lsif.definition(doc, "Primary", (0, 13), ((0, 0), (2, 1)), kind=KIND_FUNCTION, result_set=rs)

		index = make_builder(lsif.store()).build(preserve_scopes=True)

		assert "test" in index.get("demo.src.__tests__").tags
		assert "test" in index.get("demo.src.__tests__.button_stories").tags
		assert "test" not in index.get("demo.src").tags
