"""Diagram model: elements, the model index and the builder that fills it."""

from lsifdiagram.model.builder import BuildContext, ModelBuilder
from lsifdiagram.model.elements import DiagramElement, DiagramRelation
from lsifdiagram.model.index import (
	DuplicateElementError,
	ModelIndex,
	ModelValidationError,
	SourceNotFoundError,
	TargetNotFoundError,
)
from lsifdiagram.model.trie import NameTrie, TrieNode

__all__ = [
	"BuildContext",
	"DiagramElement",
	"DiagramRelation",
	"DuplicateElementError",
	"ModelBuilder",
	"ModelIndex",
	"ModelValidationError",
	"NameTrie",
	"SourceNotFoundError",
	"TargetNotFoundError",
	"TrieNode",
]
