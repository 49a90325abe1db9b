"""Schemas for the lsif-diagram configuration file."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from lsifdiagram.dsl.emitter import DEFAULT_CLUTTER_KINDS, DEFAULT_VIEW_DEPTH
from lsifdiagram.lsif.monikers import DEFAULT_UNIQUENESS_RANKS
from lsifdiagram.model.builder import DEFAULT_TEST_PATTERN
from lsifdiagram.naming.package_roots import DEFAULT_STRIP_EXTENSIONS
from lsifdiagram.naming.synthesizer import DEFAULT_PACKAGE_SCHEMES


class MonikerSchema(BaseModel):
	"""How canonical monikers are picked and ranked."""

	scheme: str | None = None
	expected_count: int = Field(default=1, ge=1)
	package_schemes: list[str] = Field(default_factory=lambda: list(DEFAULT_PACKAGE_SCHEMES))
	uniqueness_ranks: dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_UNIQUENESS_RANKS))


class NamingSchema(BaseModel):
	"""Hierarchical name synthesis."""

	strip_extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_STRIP_EXTENSIONS))
	preserve_scopes: bool = True

	@field_validator("strip_extensions")
	@classmethod
	def extensions_start_with_dot(cls, value: list[str]) -> list[str]:
		"""Ensure every extension starts with a dot."""
		return [ext if ext.startswith(".") else f".{ext}" for ext in value]


class ModelSchema(BaseModel):
	"""Model building."""

	markers: list[str] = Field(default_factory=list)
	clutter_kinds: list[str] = Field(default_factory=lambda: list(DEFAULT_CLUTTER_KINDS))
	test_pattern: str = DEFAULT_TEST_PATTERN


class ViewsSchema(BaseModel):
	"""Generated views."""

	depth: int = Field(default=DEFAULT_VIEW_DEPTH, ge=1)


class AppConfigSchema(BaseModel):
	"""Top level configuration."""

	monikers: MonikerSchema = Field(default_factory=MonikerSchema)
	naming: NamingSchema = Field(default_factory=NamingSchema)
	model: ModelSchema = Field(default_factory=ModelSchema)
	views: ViewsSchema = Field(default_factory=ViewsSchema)
