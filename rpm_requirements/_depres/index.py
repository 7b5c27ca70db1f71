"""Capability index: which packages provide which capability."""

from types import MappingProxyType
from typing import Mapping

from ..logging_config import logger
from .._linkres import ResolutionOutcome, Resolved, SymlinkResolver
from .capabilities import is_path_capability, strip_version_constraint
from .models import PackageGraph

_EMPTY: frozenset[str] = frozenset()


class CapabilityIndex:
    """Read-only mapping from capability to the names of its providers.

    Path-shaped provisions and owned files are stored under their canonical
    path, so two symlink aliases of one file are a single capability. Lookups
    canonicalize path-shaped queries the same way.

    Example:
        index = CapabilityIndex.build(graph, {"/lib64": "usr/lib64"})
        index.providers("/lib64/libc.so.6")  # frozenset({"glibc"})
    """

    def __init__(
        self,
        entries: Mapping[str, frozenset[str]],
        resolver: SymlinkResolver,
        dropped_provisions: Mapping[str, Mapping[str, ResolutionOutcome]] | None = None,
    ) -> None:
        self._entries = MappingProxyType(dict(entries))
        self._resolver = resolver
        self._dropped = MappingProxyType(
            {name: MappingProxyType(dict(outcomes)) for name, outcomes in (dropped_provisions or {}).items()}
        )

    @classmethod
    def build(cls, graph: PackageGraph, links: Mapping[str, str] | SymlinkResolver) -> "CapabilityIndex":
        """Index every package of the graph.

        Each package provides its own name, its declared provisions (also
        under their version-stripped form) and the files it owns.

        Args:
            graph: Package database
            links: Link table, or a resolver already built from one

        Returns:
            Fully built index
        """
        resolver = links if isinstance(links, SymlinkResolver) else SymlinkResolver(links)
        entries: dict[str, set[str]] = {}
        dropped: dict[str, dict[str, ResolutionOutcome]] = {}

        def add(capability: str, provider: str) -> None:
            entries.setdefault(capability, set()).add(provider)

        def add_path(path: str, provider: str) -> None:
            outcome = resolver.resolve(path)
            if isinstance(outcome, Resolved):
                add(outcome.path, provider)
            else:
                logger.debug(f"Dropping provision [{path}] of [{provider}]: {outcome.status.value}")
                dropped.setdefault(provider, {})[path] = outcome

        for package in graph:
            add(package.name, package.name)

            for capability in package.provides:
                if is_path_capability(capability):
                    add_path(capability, package.name)
                    continue
                add(capability, package.name)
                stripped = strip_version_constraint(capability)
                if stripped and stripped != capability:
                    add(stripped, package.name)

            for path in package.files:
                if is_path_capability(path):
                    add_path(path, package.name)

        logger.debug(f"Indexed {len(entries)} capabilities from {len(graph)} packages")
        return cls({key: frozenset(value) for key, value in entries.items()}, resolver, dropped)

    @property
    def resolver(self) -> SymlinkResolver:
        return self._resolver

    @property
    def dropped_provisions(self) -> Mapping[str, Mapping[str, ResolutionOutcome]]:
        """Provider name to path provisions whose symlink resolution failed."""
        return self._dropped

    def __contains__(self, capability: object) -> bool:
        return capability in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def canonicalize(self, capability: str) -> ResolutionOutcome | str:
        """Return the key a capability is looked up under.

        Non-path capabilities are returned unchanged; path-shaped ones are
        returned as the outcome of symlink resolution.
        """
        capability = capability.strip()
        if is_path_capability(capability):
            return self._resolver.resolve(capability)
        return capability

    def providers(self, capability: str) -> frozenset[str]:
        """Names of the packages providing a capability, possibly empty.

        A versioned capability with no exact entry falls back to its
        version-stripped form. A path that cannot be resolved has no providers.
        """
        key = self.canonicalize(capability)

        if isinstance(key, str):
            found = self._entries.get(key, _EMPTY)
            if not found:
                found = self._entries.get(strip_version_constraint(key), _EMPTY)
            return found

        if isinstance(key, Resolved):
            return self._entries.get(key.path, _EMPTY)

        logger.debug(f"No providers for [{capability}]: path resolution is {key.status.value}")
        return _EMPTY
