"""Hierarchical naming of resolved monikers."""

from lsifdiagram.naming.names import HierarchicalName, sanitize_identifier, sanitize_segment
from lsifdiagram.naming.package_roots import (
	DEFAULT_STRIP_EXTENSIONS,
	PackageRegistry,
	PackageRootStrategy,
	SuffixPackageRootStrategy,
	strip_extensions,
)
from lsifdiagram.naming.synthesizer import DEFAULT_PACKAGE_SCHEMES, NamingSynthesizer

__all__ = [
	"DEFAULT_PACKAGE_SCHEMES",
	"DEFAULT_STRIP_EXTENSIONS",
	"HierarchicalName",
	"NamingSynthesizer",
	"PackageRegistry",
	"PackageRootStrategy",
	"SuffixPackageRootStrategy",
	"sanitize_identifier",
	"sanitize_segment",
	"strip_extensions",
]
