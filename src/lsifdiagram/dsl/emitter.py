"""Renders a model index as LikeC4-style DSL text."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from lsifdiagram import __version__
from lsifdiagram.dsl.document import DslBlock, encode_link, quote
from lsifdiagram.model.builder import TAG_SCOPE
from lsifdiagram.naming.names import sanitize_identifier

if TYPE_CHECKING:
	from lsifdiagram.model.elements import DiagramElement, DiagramRelation
	from lsifdiagram.model.index import ModelIndex

logger = logging.getLogger(__name__)

DEFAULT_CLUTTER_KINDS: tuple[str, ...] = (
	"variable",
	"property",
	"field",
	"constant",
	"typeParameter",
	"enumMember",
	"string",
	"number",
	"boolean",
	"array",
	"object",
	"key",
	"null",
)
DEFAULT_VIEW_DEPTH = 2

INDEX_VIEW = "index"
FLATTENED_VIEW = "flattened"


@dataclass(frozen=True)
class EmitterOptions:
	"""Rendering options."""

	preserve_scopes: bool = True
	view_depth: int = DEFAULT_VIEW_DEPTH
	clutter_kinds: tuple[str, ...] = DEFAULT_CLUTTER_KINDS
	header: bool = True


class DslEmitter:
	"""Serializes a model index into ``specification``, ``model`` and ``views`` blocks."""

	def __init__(self, options: EmitterOptions | None = None) -> None:
		"""Initialize the emitter."""
		self.options = options or EmitterOptions()

	def render(self, index: ModelIndex) -> str:
		"""
		Render the whole document.

		Args:
		    index: A fully built model

		Returns:
		    DSL text ending with a newline

		"""
		for orphan in index.orphans():
			logger.warning("Skipping element %s: parent %s is not in the model", orphan.id, orphan.parent_id)

		document = DslBlock()
		if self.options.header:
			document.line(f"// Generated by lsif-diagram {__version__}")
			document.line("")
		document.items.append(self._specification(index))
		document.line("")
		document.items.append(self._model(index))
		document.line("")
		document.items.append(self._views(index))
		return document.serialize()

	# --- Blocks --- #

	def _specification(self, index: ModelIndex) -> DslBlock:
		block = DslBlock("specification")
		elements = index.elements
		for kind in sorted({element.kind for element in elements}):
			block.line(f"element {kind}")
		tags = {tag for element in elements for tag in element.tags}
		tags.update(tag for relation in index.relations for tag in relation.tags)
		for tag in sorted(tags):
			block.line(f"tag {tag}")
		return block

	def _model(self, index: ModelIndex) -> DslBlock:
		block = DslBlock("model")
		for root in index.root_elements():
			self._element(index, block, root)

		relations = index.relations
		if relations:
			block.line("")
			block.line("// relations")
			for relation in relations:
				self._relation(block, relation)
		return block

	def _element(self, index: ModelIndex, parent: DslBlock, element: DiagramElement) -> None:
		block = parent.block(f"{element.name} = {element.kind} {quote(element.title)}")
		if element.tags:
			block.line(" ".join(f"#{tag}" for tag in sorted(element.tags)))
		if element.technology:
			block.line(f"technology {quote(element.technology)}")
		if element.description:
			block.line(f"description {quote(element.description)}")
		for link in element.links:
			block.line(f"link {encode_link(link)}")
		for child in index.children(element.id):
			self._element(index, block, child)

	@staticmethod
	def _relation(parent: DslBlock, relation: DiagramRelation) -> None:
		header = f"{relation.source} -> {relation.target}"
		if relation.title:
			header = f"{header} {quote(relation.title)}"
		block = parent.block(header)
		if relation.tags:
			block.line(" ".join(f"#{tag}" for tag in sorted(relation.tags)))

	def _views(self, index: ModelIndex) -> DslBlock:
		block = DslBlock("views")
		landscape = block.block(f"view {INDEX_VIEW}")
		landscape.line(f"title {quote('Landscape')}")
		landscape.line("include *")

		used = {INDEX_VIEW}
		roots = index.root_elements()
		if self.options.preserve_scopes:
			flattened = block.block(f"view {FLATTENED_VIEW}")
			flattened.line(f"title {quote('Flattened')}")
			for root in roots:
				flattened.line(f"include {root.id}.**")
			self._exclusions(flattened)
			used.add(FLATTENED_VIEW)

			depth = max(self.options.view_depth, 1)
			depth_name = f"depth_{depth}"
			bounded = block.block(f"view {depth_name}")
			bounded.line(f"title {quote(f'Depth {depth}')}")
			for element in self._walk(index):
				if element.depth == 1:
					bounded.line(f"include {element.id}")
				if element.depth < depth:
					bounded.line(f"include {element.id}.*")
			self._exclusions(bounded)
			used.add(depth_name)

		for element in self._walk(index):
			if not index.children(element.id):
				continue
			name = self._unique_view_name(sanitize_identifier(self._qualified_title(index, element)), used)
			view = block.block(f"view {name} of {element.id}")
			view.line(f"title {quote(element.title)}")
			view.line("include *")
		return block

	def _exclusions(self, view: DslBlock) -> None:
		view.line(f"exclude element.tag = #{TAG_SCOPE}")
		for kind in self.options.clutter_kinds:
			view.line(f"exclude element.kind = {kind}")

	# --- Helpers --- #

	@staticmethod
	def _walk(index: ModelIndex) -> list[DiagramElement]:
		ordered: list[DiagramElement] = []
		stack = list(reversed(index.root_elements()))
		while stack:
			element = stack.pop()
			ordered.append(element)
			stack.extend(reversed(index.children(element.id)))
		return ordered

	@staticmethod
	def _qualified_title(index: ModelIndex, element: DiagramElement) -> str:
		titles = [element.title]
		parent_id = element.parent_id
		while parent_id is not None:
			parent = index.get(parent_id)
			if parent is None:
				break
			titles.append(parent.title)
			parent_id = parent.parent_id
		return ".".join(reversed(titles))

	@staticmethod
	def _unique_view_name(base: str, used: set[str]) -> str:
		name = base
		suffix = 2
		while name in used:
			name = f"{base}_{suffix}"
			suffix += 1
		used.add(name)
		return name


def render(index: ModelIndex, preserve_scopes: bool = True, options: EmitterOptions | None = None) -> str:
	"""
	Render a model index as DSL text.

	Args:
	    index: A fully built model
	    preserve_scopes: Emit the flattened and depth-bounded views
	    options: Further rendering options; ``preserve_scopes`` overrides theirs

	"""
	options = options or EmitterOptions()
	if options.preserve_scopes != preserve_scopes:
		options = replace(options, preserve_scopes=preserve_scopes)
	return DslEmitter(options).render(index)
