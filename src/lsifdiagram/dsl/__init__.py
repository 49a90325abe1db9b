"""DSL rendering of diagram models."""

from lsifdiagram.dsl.document import DslBlock, encode_link, quote
from lsifdiagram.dsl.emitter import DEFAULT_CLUTTER_KINDS, DEFAULT_VIEW_DEPTH, DslEmitter, EmitterOptions, render

__all__ = [
	"DEFAULT_CLUTTER_KINDS",
	"DEFAULT_VIEW_DEPTH",
	"DslBlock",
	"DslEmitter",
	"EmitterOptions",
	"encode_link",
	"quote",
	"render",
]
