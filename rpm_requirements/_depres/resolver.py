"""Transitive closure of package requirements."""

from collections import deque
from dataclasses import dataclass
from typing import Iterable, Mapping

from ..exceptions import ConfigurationError
from ..logging_config import logger
from .._linkres import SymlinkResolver
from .capabilities import ignored_reason, is_boolean_dependency, split_boolean_dependency
from .index import CapabilityIndex
from .models import MUST_HAVE_PSEUDO_PACKAGE, PackageGraph, RequirementsResult


@dataclass(frozen=True)
class ProviderLookup:
    """Outcome of looking up the providers of one requirement.

    Attributes:
        providers: Packages to pull into the closure
        satisfied: False when the requirement is unresolved
        conditional: Packages named by a boolean dependency, not pulled in
        ignored: True when the requirement was skipped as packaging-only
    """

    providers: frozenset[str] = frozenset()
    satisfied: bool = True
    conditional: frozenset[str] = frozenset()
    ignored: bool = False


class ClosureResolver:
    """Computes the set of packages required by a set of must-have packages.

    Requirements name capabilities, not packages: every requirement is looked
    up in the capability index and all of its providers join the closure.
    Picking one provider among alternatives would need a policy the package
    data does not carry, so the closure is sound but may over-include.

    Example:
        index = CapabilityIndex.build(graph, links)
        result = ClosureResolver(graph, index).resolve({"coreutils"})
        print(result.sorted_required())
    """

    def __init__(self, graph: PackageGraph | None, index: CapabilityIndex | None) -> None:
        self._graph = graph
        self._index = index

    def lookup(self, requirement: str) -> ProviderLookup:
        """Classify a requirement and find the packages satisfying it."""
        requirement = requirement.strip()

        reason = ignored_reason(requirement)
        if reason is not None:
            logger.debug(f"Ignoring known requirement [{requirement}]: {reason}")
            return ProviderLookup(ignored=True)

        if is_boolean_dependency(requirement):
            conditional: set[str] = set()
            for name in split_boolean_dependency(requirement):
                conditional.update(self._index.providers(name))
            return ProviderLookup(conditional=frozenset(conditional))

        providers = self._index.providers(requirement)
        return ProviderLookup(providers=providers, satisfied=bool(providers))

    def resolve(
        self,
        must_haves: Iterable[str],
        installed: Iterable[str] | None = None,
    ) -> RequirementsResult:
        """Resolve the closure of must_haves.

        Args:
            must_haves: Seed package names
            installed: Optional full list of installed package names; when
                given, packages outside the closure are reported

        Returns:
            RequirementsResult. Unsatisfied requirements and unknown seeds are
            reported in it rather than raised.

        Raises:
            ConfigurationError: If the graph or index is missing, there are no seeds,
                or must_haves or installed is a single string
        """
        if self._graph is None or self._index is None:
            raise ConfigurationError("A package graph and capability index are required for resolution")
        if isinstance(must_haves, str):
            raise ConfigurationError("must_haves must be a collection of package names, not a single string")
        if isinstance(installed, str):
            raise ConfigurationError("installed must be a collection of package names, not a single string")

        seeds = tuple(dict.fromkeys(name.strip() for name in must_haves if name and name.strip()))
        if not seeds:
            raise ConfigurationError("At least one must-have package is required")

        graph = self._graph
        required: set[str] = set()
        queue: deque[str] = deque()
        unresolved: dict[str, set[str]] = {}
        edges: dict[str, set[str]] = {}
        conditional: set[str] = set()
        ignored: dict[str, set[str]] = {}

        for name in seeds:
            if name not in graph:
                logger.debug(f"Must-have package [{name}] is not in the package graph")
                unresolved.setdefault(MUST_HAVE_PSEUDO_PACKAGE, set()).add(name)
                continue
            if name not in required:
                required.add(name)
                queue.append(name)

        while queue:
            package = graph[queue.popleft()]
            pulled_in = edges.setdefault(package.name, set())

            for requirement in package.requires:
                lookup = self.lookup(requirement)

                if lookup.ignored:
                    ignored.setdefault(package.name, set()).add(requirement)
                    continue
                if not lookup.satisfied:
                    unresolved.setdefault(package.name, set()).add(requirement)
                    continue

                conditional.update(lookup.conditional)
                if len(lookup.providers) > 1:
                    logger.debug(
                        f"Multiple providers {sorted(lookup.providers)} for [{requirement}] "
                        f"in [{package.name}], marking all as required"
                    )

                for provider in lookup.providers:
                    if provider != package.name:
                        pulled_in.add(provider)
                    if provider not in required:
                        required.add(provider)
                        queue.append(provider)

        installed_but_not_required = None
        if installed is not None:
            installed_but_not_required = frozenset(installed) - required

        logger.debug(
            f"Resolved {len(required)} required packages from {len(seeds)} must-haves, "
            f"{len(unresolved)} packages with unresolved requirements"
        )

        return RequirementsResult(
            must_haves=seeds,
            required_packages=frozenset(required),
            unresolved_requirements=unresolved,
            installed_but_not_required=installed_but_not_required,
            package_requirements=edges,
            conditionally_required=frozenset(conditional - required),
            ignored_requirements=ignored,
            dropped_provisions={name: frozenset(paths) for name, paths in self._index.dropped_provisions.items()},
        )


def resolve_requirements(
    graph: PackageGraph,
    links: Mapping[str, str] | SymlinkResolver,
    must_haves: Iterable[str],
    installed: Iterable[str] | None = None,
) -> RequirementsResult:
    """Build the capability index for a graph and resolve one set of must-haves.

    This is the main public API for requirement resolution.

    Args:
        graph: Package database
        links: Link table (or resolver) of the filesystem image
        must_haves: Seed package names
        installed: Optional full list of installed package names

    Returns:
        RequirementsResult for the run
    """
    if graph is None:
        raise ConfigurationError("A package graph is required for resolution")
    index = CapabilityIndex.build(graph, links)
    return ClosureResolver(graph, index).resolve(must_haves, installed)
