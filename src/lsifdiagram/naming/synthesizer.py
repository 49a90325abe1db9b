"""
Naming synthesizer.

Turns a resolved moniker into a hierarchical diagram name. The first segment
is always a container: the package for package-scheme monikers, the
associated package or project for narrower monikers, and the scheme itself
for everything else.
"""

from __future__ import annotations

import hashlib
import logging
import posixpath
from dataclasses import replace
from typing import TYPE_CHECKING

from lsifdiagram.naming.names import HierarchicalName, sanitize_segment
from lsifdiagram.naming.package_roots import DEFAULT_STRIP_EXTENSIONS, PackageRegistry, strip_extensions

if TYPE_CHECKING:
	from collections.abc import Iterable

	from lsifdiagram.lsif.monikers import MonikerResolver
	from lsifdiagram.lsif.protocol import Document, Moniker, VertexId
	from lsifdiagram.lsif.store import GraphStore

logger = logging.getLogger(__name__)

DEFAULT_PACKAGE_SCHEMES: tuple[str, ...] = ("npm", "pypi", "maven", "nuget", "cargo", "gomod")
DEFAULT_PROJECT_NAME = "workspace"
FILE_SCHEME = "file://"

ROOT_KIND_PACKAGE = "package"
ROOT_KIND_PROJECT = "project"
ROOT_KIND_SCHEME = "scheme"


def _split_path(path: str) -> list[str]:
	return [part for part in path.split("/") if part]


def _split_symbol(symbol: str) -> list[str]:
	return [part for part in symbol.split(".") if part]


def _identity_digest(identity: tuple[str, str], attempt: int) -> str:
	seed = f"{identity[0]}:{identity[1]}#{attempt}"
	return hashlib.sha1(seed.encode("utf-8"), usedforsecurity=False).hexdigest()[:8]


def _with_suffix(name: HierarchicalName, digest: str) -> HierarchicalName:
	segments = (*name.segments[:-1], f"{name.segments[-1]}_{digest}")
	return replace(name, segments=segments)


class NamingSynthesizer:
	"""Builds deterministic hierarchical names for monikers."""

	def __init__(
		self,
		store: GraphStore,
		resolver: MonikerResolver,
		registry: PackageRegistry | None = None,
		package_schemes: Iterable[str] = DEFAULT_PACKAGE_SCHEMES,
		extensions: Iterable[str] = DEFAULT_STRIP_EXTENSIONS,
	) -> None:
		"""
		Initialize the synthesizer.

		Args:
		    store: A fully ingested graph store
		    resolver: Moniker resolver over the same store
		    registry: Package root registry shared for the whole run
		    package_schemes: Schemes whose identifiers are ``<package>:<path>[:<symbol>]``
		    extensions: File extensions stripped from identifiers and uris

		"""
		self.store = store
		self.resolver = resolver
		self.registry = registry or PackageRegistry()
		self.package_schemes = frozenset(package_schemes)
		self.extensions = tuple(extensions)
		self._memo: dict[tuple[VertexId, bool], HierarchicalName] = {}
		self._claims: dict[tuple[str, bool], tuple[str, str]] = {}

	def to_hierarchical_name(self, moniker: Moniker, preserve_scopes: bool = True) -> HierarchicalName:
		"""
		Compute the hierarchical name of a moniker.

		Args:
		    moniker: Usually the most unique moniker of a symbol
		    preserve_scopes: Keep path and symbol scopes as separate segments;
		        otherwise they collapse into one segment under the container

		Returns:
		    The name; the same moniker always yields the same name

		"""
		key = (moniker.id, preserve_scopes)
		if key not in self._memo:
			self._memo[key] = self._claim(moniker, self._synthesize(moniker, preserve_scopes), preserve_scopes)
		return self._memo[key]

	def _claim(self, moniker: Moniker, name: HierarchicalName, preserve_scopes: bool) -> HierarchicalName:
		"""
		Reserve a name for the symbol identity of a moniker.

		Sanitizing and flattening can map different identifiers to the same
		name. The first identity keeps it; later ones get a suffix derived from
		their scheme and identifier. Monikers with the same scheme and
		identifier share one name.

		"""
		identity = (moniker.scheme, moniker.identifier)
		candidate = name
		attempt = 0
		while (owner := self._claims.setdefault((candidate.fqn, preserve_scopes), identity)) != identity:
			attempt += 1
			logger.debug("Name %s is taken by %s:%s", candidate.fqn, *owner)
			candidate = _with_suffix(name, _identity_digest(identity, attempt))
		if attempt:
			logger.info("Renamed %s to %s to keep names unique", moniker.identifier, candidate.fqn)
		return candidate

	def _synthesize(self, moniker: Moniker, preserve_scopes: bool) -> HierarchicalName:
		identifier = strip_extensions(moniker.identifier, self.extensions)
		if moniker.scheme in self.package_schemes:
			return self._package_name(moniker, identifier, preserve_scopes)
		if self.resolver.ranking.is_narrower(moniker.unique, "scheme"):
			return self._project_name(moniker, identifier, preserve_scopes)

		symbol = identifier.replace(":", ".").replace("/", ".")
		return self._compose(moniker.scheme, ROOT_KIND_SCHEME, [], _split_symbol(symbol), preserve_scopes)

	# --- Package scheme --- #

	def _package_name(self, moniker: Moniker, identifier: str, preserve_scopes: bool) -> HierarchicalName:
		package, _, rest = identifier.partition(":")
		path, _, symbol = rest.partition(":")
		info = self.resolver.package_information(moniker)
		if info is not None and info.name:
			package = info.name

		document = self._first_document(moniker)
		if document is None:
			return self._compose(package, ROOT_KIND_PACKAGE, _split_path(path), _split_symbol(symbol), preserve_scopes)

		project = self.store.project_of(document.id)
		root = self.registry.resolve_root(
			package,
			path,
			document.uri,
			project.id if project is not None else None,
		)
		stem = strip_extensions(document.uri, self.extensions)
		if root is not None and stem.startswith(root):
			relative = stem[len(root) :]
			return self._compose(package, ROOT_KIND_PACKAGE, _split_path(relative), _split_symbol(symbol), preserve_scopes)

		logger.debug("Falling back to a project-qualified name for %s", moniker.identifier)
		return self._project_name(moniker, identifier, preserve_scopes, document=document, symbol=symbol)

	# --- Project and package local --- #

	def _project_name(
		self,
		moniker: Moniker,
		identifier: str,
		preserve_scopes: bool,
		document: Document | None = None,
		symbol: str | None = None,
	) -> HierarchicalName:
		if symbol is None:
			symbol = identifier.rsplit(":", 1)[-1]
		document = document or self._first_document(moniker)
		if document is None:
			return self._compose(DEFAULT_PROJECT_NAME, ROOT_KIND_PROJECT, [], _split_symbol(symbol), preserve_scopes)

		container, kind, base = self._container_for(document)
		path = self._relative_path(strip_extensions(document.uri, self.extensions), base)
		return self._compose(container, kind, _split_path(path), _split_symbol(symbol), preserve_scopes)

	def _container_for(self, document: Document) -> tuple[str, str, str | None]:
		project = self.store.project_of(document.id)
		if project is not None:
			package = self.registry.package_for_project(project.id)
			if package is not None:
				return package, ROOT_KIND_PACKAGE, self.registry.root_for(package)

		name = (project.name if project is not None else None) or DEFAULT_PROJECT_NAME
		return name, ROOT_KIND_PROJECT, self._workspace_root(project.resource if project is not None else None)

	def _workspace_root(self, resource: str | None) -> str | None:
		metadata = self.store.metadata
		if metadata is not None and metadata.project_root:
			root = metadata.project_root
		elif resource:
			root = posixpath.dirname(resource)
		else:
			return None
		return root if root.endswith("/") else f"{root}/"

	@staticmethod
	def _relative_path(stem: str, base: str | None) -> str:
		if base and stem.startswith(base):
			return stem[len(base) :]
		if stem.startswith(FILE_SCHEME):
			stem = stem[len(FILE_SCHEME) :]
		return stem.lstrip("/")

	def _first_document(self, moniker: Moniker) -> Document | None:
		documents = self.resolver.containing_documents(moniker)
		return documents[0] if documents else None

	# --- Composition --- #

	@staticmethod
	def _compose(
		container: str,
		root_kind: str,
		path_parts: list[str],
		symbol_parts: list[str],
		preserve_scopes: bool,
	) -> HierarchicalName:
		head = sanitize_segment(container)
		parts = path_parts + symbol_parts
		if preserve_scopes:
			segments = [head, *(sanitize_segment(part) for part in parts)]
		elif parts:
			segments = [head, sanitize_segment("_".join(parts))]
		else:
			segments = [head]
		return HierarchicalName(tuple(segments), root_kind=root_kind, root_title=container)
