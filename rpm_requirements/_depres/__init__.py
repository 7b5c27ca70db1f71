"""Dependency closure resolution for RPM package databases.

Given the packages of an installed system and a few must-have package names,
this module computes which packages are actually needed, which requirements
nothing satisfies, and which installed packages could be removed.

Example usage:
    from rpm_requirements._depres import Package, PackageGraph, resolve_requirements

    graph = PackageGraph([
        Package("app", requires=("/lib/libx.so",)),
        Package("libx", files=frozenset({"/usr/lib/libx.so.1"})),
    ])
    result = resolve_requirements(graph, {"/lib/libx.so": "/usr/lib/libx.so.1"}, ["app"])
    print(result.sorted_required())  # ['app', 'libx']
"""

from .capabilities import (
    IGNORED_REQUIREMENT_PREFIXES,
    ignored_reason,
    is_boolean_dependency,
    is_path_capability,
    split_boolean_dependency,
    strip_version_constraint,
)
from .index import CapabilityIndex
from .models import MUST_HAVE_PSEUDO_PACKAGE, Package, PackageGraph, RequirementsResult, StatusMark
from .resolver import ClosureResolver, ProviderLookup, resolve_requirements

__all__ = [
    # Main API
    "resolve_requirements",
    "ClosureResolver",
    "CapabilityIndex",
    "ProviderLookup",
    # Models
    "Package",
    "PackageGraph",
    "RequirementsResult",
    "StatusMark",
    "MUST_HAVE_PSEUDO_PACKAGE",
    # Capability helpers
    "IGNORED_REQUIREMENT_PREFIXES",
    "ignored_reason",
    "is_boolean_dependency",
    "is_path_capability",
    "split_boolean_dependency",
    "strip_version_constraint",
]
