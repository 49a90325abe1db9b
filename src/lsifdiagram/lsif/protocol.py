"""
Typed LSIF wire records.

Every line of an LSIF dump is either a vertex or an edge. Vertices are parsed
into one model per label we care about, everything else becomes a
``GenericVertex``. Edges are normalized so that 1:1 (``inV``) and 1:N
(``inVs``) edges expose the same ``targets`` list.

"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from lsifdiagram.errors import LsifParseError

VertexId = int | str


class ElementType(str, Enum):
	"""Top-level record type."""

	VERTEX = "vertex"
	EDGE = "edge"


class VertexLabel(str, Enum):
	"""Vertex labels with a dedicated model."""

	META_DATA = "metaData"
	PROJECT = "project"
	DOCUMENT = "document"
	RANGE = "range"
	RESULT_SET = "resultSet"
	MONIKER = "moniker"
	PACKAGE_INFORMATION = "packageInformation"
	HOVER_RESULT = "hoverResult"
	REFERENCE_RESULT = "referenceResult"
	DEFINITION_RESULT = "definitionResult"


class EdgeLabel(str, Enum):
	"""Edge labels the resolver follows."""

	CONTAINS = "contains"
	NEXT = "next"
	MONIKER = "moniker"
	ATTACH = "attach"
	PACKAGE_INFORMATION = "packageInformation"
	ITEM = "item"
	HOVER = "textDocument/hover"
	REFERENCES = "textDocument/references"
	DEFINITION = "textDocument/definition"


class RangeTagType(str, Enum):
	"""Kinds of range tags."""

	DEFINITION = "definition"
	DECLARATION = "declaration"
	REFERENCE = "reference"
	UNKNOWN = "unknown"


class ItemProperty(str, Enum):
	"""Values of the ``property`` field on ``item`` edges."""

	DEFINITIONS = "definitions"
	DECLARATIONS = "declarations"
	REFERENCES = "references"
	REFERENCE_RESULTS = "referenceResults"
	REFERENCE_LINKS = "referenceLinks"
	IMPLEMENTATION_RESULTS = "implementationResults"
	UNDEFINED = "undefined"


class SymbolKind(IntEnum):
	"""LSP symbol kinds as emitted in range tags."""

	FILE = 1
	MODULE = 2
	NAMESPACE = 3
	PACKAGE = 4
	CLASS = 5
	METHOD = 6
	PROPERTY = 7
	FIELD = 8
	CONSTRUCTOR = 9
	ENUM = 10
	INTERFACE = 11
	FUNCTION = 12
	VARIABLE = 13
	CONSTANT = 14
	STRING = 15
	NUMBER = 16
	BOOLEAN = 17
	ARRAY = 18
	OBJECT = 19
	KEY = 20
	NULL = 21
	ENUM_MEMBER = 22
	STRUCT = 23
	EVENT = 24
	OPERATOR = 25
	TYPE_PARAMETER = 26


UNKNOWN_KIND = "unknown"


def symbol_kind_name(kind: int | None) -> str:
	"""
	Map an LSP symbol kind to a DSL-friendly element kind.

	``SymbolKind.ENUM_MEMBER`` becomes ``enumMember``; unknown or missing kinds
	map to ``unknown``.

	"""
	if kind is None:
		return UNKNOWN_KIND
	try:
		name = SymbolKind(kind).name
	except ValueError:
		return UNKNOWN_KIND
	head, *rest = name.lower().split("_")
	return head + "".join(part.capitalize() for part in rest)


# --- Positions --- #


class Position(BaseModel):
	"""Zero-based line/character position."""

	model_config = ConfigDict(frozen=True)

	line: int
	character: int

	def as_tuple(self) -> tuple[int, int]:
		"""Return the position as a sortable tuple."""
		return (self.line, self.character)


class LspRange(BaseModel):
	"""A start/end pair of positions."""

	model_config = ConfigDict(frozen=True)

	start: Position
	end: Position


class RangeTag(BaseModel):
	"""Symbol information attached to a range."""

	model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

	type: RangeTagType
	text: str = ""
	kind: int | None = None
	full_range: LspRange | None = Field(None, alias="fullRange")

	@property
	def is_definition(self) -> bool:
		"""Whether the tag marks a definition or a declaration."""
		return self.type in (RangeTagType.DEFINITION, RangeTagType.DECLARATION)


# --- Vertices --- #


class Vertex(BaseModel):
	"""Base for every vertex model."""

	model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

	id: VertexId
	type: ElementType = ElementType.VERTEX
	label: str


class GenericVertex(Vertex):
	"""A vertex whose label has no dedicated model."""


class MetaData(Vertex):
	"""Dump metadata, carries the workspace root."""

	version: str | None = None
	project_root: str | None = Field(None, alias="projectRoot")


class Project(Vertex):
	"""An analyzed project."""

	name: str | None = None
	kind: str | None = None
	resource: str | None = None


class Document(Vertex):
	"""A source document."""

	uri: str
	language_id: str | None = Field(None, alias="languageId")


class Range(Vertex):
	"""A source range, optionally tagged with symbol information."""

	start: Position
	end: Position
	tag: RangeTag | None = None

	@property
	def text(self) -> str:
		"""The tag text, or an empty string for untagged ranges."""
		return self.tag.text if self.tag else ""

	@property
	def is_definition(self) -> bool:
		"""Whether the range is tagged as a definition or declaration."""
		return self.tag is not None and self.tag.is_definition

	@property
	def span(self) -> LspRange:
		"""The range itself as an ``LspRange``."""
		return LspRange(start=self.start, end=self.end)


class ResultSet(Vertex):
	"""Indirection vertex shared by all ranges of one symbol."""


class Moniker(Vertex):
	"""A scheme-qualified symbol identifier."""

	scheme: str
	identifier: str
	unique: str = "document"
	kind: str | None = None


class PackageInformation(Vertex):
	"""Package metadata attached to monikers."""

	name: str | None = None
	manager: str | None = None
	version: str | None = None


class HoverResult(Vertex):
	"""Hover content for a symbol."""

	result: dict[str, Any] = Field(default_factory=dict)

	def text(self) -> str:
		"""Flatten the hover contents (markup, marked strings or lists) to plain text."""
		contents = self.result.get("contents")
		items = contents if isinstance(contents, list) else [contents]
		parts = []
		for item in items:
			if isinstance(item, str):
				parts.append(item)
			elif isinstance(item, dict) and isinstance(item.get("value"), str):
				parts.append(item["value"])
		return "\n".join(part for part in parts if part)


class ReferenceResult(Vertex):
	"""Target of ``textDocument/references`` edges."""


class DefinitionResult(Vertex):
	"""Target of ``textDocument/definition`` edges."""


VERTEX_MODELS: dict[str, type[Vertex]] = {
	VertexLabel.META_DATA.value: MetaData,
	VertexLabel.PROJECT.value: Project,
	VertexLabel.DOCUMENT.value: Document,
	VertexLabel.RANGE.value: Range,
	VertexLabel.RESULT_SET.value: ResultSet,
	VertexLabel.MONIKER.value: Moniker,
	VertexLabel.PACKAGE_INFORMATION.value: PackageInformation,
	VertexLabel.HOVER_RESULT.value: HoverResult,
	VertexLabel.REFERENCE_RESULT.value: ReferenceResult,
	VertexLabel.DEFINITION_RESULT.value: DefinitionResult,
}


# --- Edges --- #


class Edge(BaseModel):
	"""A directed, labeled edge."""

	model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

	id: VertexId
	type: ElementType = ElementType.EDGE
	label: str
	out_v: VertexId = Field(alias="outV")
	in_v: VertexId | None = Field(None, alias="inV")
	in_vs: list[VertexId] | None = Field(None, alias="inVs")
	item_property: str | None = Field(None, alias="property")
	document: VertexId | None = None

	@property
	def targets(self) -> list[VertexId]:
		"""All target ids, for 1:1 and 1:N edges alike."""
		if self.in_vs is not None:
			return list(self.in_vs)
		return [self.in_v] if self.in_v is not None else []


Record = Vertex | Edge


def parse_record(data: dict[str, Any], line_number: int | None = None) -> Record:
	"""
	Parse one decoded JSON object into a vertex or edge model.

	Args:
	    data: The decoded JSON object
	    line_number: Input line, used in error messages

	Returns:
	    The typed record

	Raises:
	    LsifParseError: If the object is not a valid vertex or edge

	"""
	if not isinstance(data, dict):
		msg = f"expected a JSON object, got {type(data).__name__}"
		raise LsifParseError(msg, line_number)

	record_type = data.get("type")
	try:
		if record_type == ElementType.EDGE.value:
			return Edge.model_validate(data)
		if record_type == ElementType.VERTEX.value:
			model = VERTEX_MODELS.get(data.get("label", ""), GenericVertex)
			return model.model_validate(data)
	except ValidationError as e:
		msg = f"invalid {record_type} {data.get('label')!r}: {e}"
		raise LsifParseError(msg, line_number) from e

	msg = f"unknown record type {record_type!r}"
	raise LsifParseError(msg, line_number)
