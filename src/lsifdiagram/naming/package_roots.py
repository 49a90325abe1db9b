"""
Package root inference.

Package-scheme monikers identify symbols as ``<package>:<path>[:<symbol>]``
where ``<path>`` is relative to the package root, often pointing into build
output (``lib/``, ``dist/``) rather than the analyzed sources. The strategy
recovers the root from the uri of a document defining the symbol, and the
registry caches results and remembers which project publishes which package.

"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
	from collections.abc import Iterable

	from lsifdiagram.lsif.protocol import VertexId

logger = logging.getLogger(__name__)

DEFAULT_STRIP_EXTENSIONS: tuple[str, ...] = (".d.ts", ".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".py")


def strip_extensions(value: str, extensions: Iterable[str] = DEFAULT_STRIP_EXTENSIONS) -> str:
	"""
	Remove source file extensions at the end of every ``:``-separated part.

	``"pkg:lib/index.d.ts:foo"`` becomes ``"pkg:lib/index:foo"``.

	"""
	ordered = sorted(extensions, key=len, reverse=True)
	if not ordered:
		return value
	pattern = "|".join(re.escape(ext) for ext in ordered)
	return re.sub(rf"(?:{pattern})(?=:|$)", "", value)


class PackageRootStrategy(Protocol):
	"""Infers the root uri of a package from one of its documents."""

	def infer_root(self, package_path: str, document_uri: str) -> str | None:
		"""Return the package root (ending in ``/``) or None when it cannot be inferred."""
		...


class SuffixPackageRootStrategy:
	"""
	Treat the package path as a suffix of the document uri.

	When the uri (extension stripped) ends with the path, or with the path
	minus its first segment to tolerate a build-output prefix, the root is
	whatever precedes that suffix.

	"""

	def __init__(self, extensions: Iterable[str] = DEFAULT_STRIP_EXTENSIONS) -> None:
		"""Initialize with the extensions to strip from document uris."""
		self.extensions = tuple(extensions)

	def _suffixes(self, package_path: str) -> list[str]:
		path = package_path.strip("/")
		if not path:
			return []
		suffixes = [path]
		_, _, rest = path.partition("/")
		if rest:
			suffixes.append(rest)
		return suffixes

	def infer_root(self, package_path: str, document_uri: str) -> str | None:
		"""See ``PackageRootStrategy.infer_root``."""
		stem = strip_extensions(document_uri, self.extensions)
		for suffix in self._suffixes(strip_extensions(package_path, self.extensions)):
			if not stem.endswith(suffix):
				continue
			root = stem[: -len(suffix)]
			if root == "" or root.endswith("/"):
				return root
		return None


class PackageRegistry:
	"""Caches inferred package roots and package/project associations."""

	def __init__(self, strategy: PackageRootStrategy | None = None) -> None:
		"""
		Initialize the registry.

		Args:
		    strategy: Root inference strategy, ``SuffixPackageRootStrategy`` by default

		"""
		self.strategy = strategy or SuffixPackageRootStrategy()
		self._roots: dict[str, str | None] = {}
		self._package_by_project: dict[VertexId, str] = {}
		self._project_by_package: dict[str, VertexId] = {}

	def resolve_root(
		self,
		package: str,
		package_path: str,
		document_uri: str,
		project_id: VertexId | None = None,
	) -> str | None:
		"""
		Return the root of ``package``, inferring and caching it on first use.

		Failures are cached as well, so a package resolves the same way for the
		whole run.

		Args:
		    package: Package name
		    package_path: Path part of the package moniker identifier
		    document_uri: Uri of a document defining a symbol of the package
		    project_id: Project containing that document, recorded on success

		Returns:
		    The root uri, or None when inference failed

		"""
		if package in self._roots:
			return self._roots[package]

		root = self.strategy.infer_root(package_path, document_uri)
		self._roots[package] = root
		if root is None:
			logger.info("Could not infer root of package %s from %s", package, document_uri)
			return None

		logger.debug("Package %s is rooted at %s", package, root)
		if project_id is not None:
			self.associate(package, project_id)
		return root

	def root_for(self, package: str) -> str | None:
		"""The cached root of a package, if inferred."""
		return self._roots.get(package)

	def associate(self, package: str, project_id: VertexId) -> None:
		"""Record that a project publishes a package (first association wins)."""
		self._package_by_project.setdefault(project_id, package)
		self._project_by_package.setdefault(package, project_id)

	def package_for_project(self, project_id: VertexId) -> str | None:
		"""The package associated with a project."""
		return self._package_by_project.get(project_id)

	def project_for_package(self, package: str) -> VertexId | None:
		"""The project associated with a package."""
		return self._project_by_package.get(package)
