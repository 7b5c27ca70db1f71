"""Data models for RPM dependency resolution."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping

from ..logging_config import logger

# Pseudo-package under which must-have names missing from the graph are reported.
MUST_HAVE_PSEUDO_PACKAGE = "<must-have>"


def _ordered_unique(values: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(v.strip() for v in values if v and v.strip()))


@dataclass(frozen=True)
class Package:
    """An installed package and the capabilities it requires and provides.

    Attributes:
        name: Installed package name, case-sensitive
        requires: Required capability strings in declaration order
        provides: Provided capability strings in declaration order
        files: Absolute paths of files owned by the package
    """

    name: str
    requires: tuple[str, ...] = ()
    provides: tuple[str, ...] = ()
    files: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Package name must not be empty")
        object.__setattr__(self, "requires", _ordered_unique(self.requires))
        object.__setattr__(self, "provides", _ordered_unique(self.provides))
        object.__setattr__(self, "files", frozenset(f for f in self.files if f))


class PackageGraph:
    """Read-only package database keyed by package name.

    Iteration yields packages in the order they were supplied.
    """

    def __init__(self, packages: Iterable[Package] = ()) -> None:
        self._packages: dict[str, Package] = {}
        for package in packages:
            if package.name in self._packages:
                logger.warning(f"Duplicate package record for [{package.name}], keeping the last one")
            self._packages[package.name] = package

    def __contains__(self, name: object) -> bool:
        return name in self._packages

    def __getitem__(self, name: str) -> Package:
        return self._packages[name]

    def __iter__(self) -> Iterator[Package]:
        return iter(self._packages.values())

    def __len__(self) -> int:
        return len(self._packages)

    def get(self, name: str) -> Package | None:
        return self._packages.get(name)

    @property
    def names(self) -> frozenset[str]:
        return frozenset(self._packages)


class StatusMark(str, Enum):
    """Requirement evaluation of a package, as written to inventories."""

    REQUIRED = "required"
    CONDITIONAL = "conditional"
    OPTIONAL = "optional"


def _freeze_mapping(mapping: Mapping[str, Iterable[str]]) -> Mapping[str, frozenset[str]]:
    return MappingProxyType({key: frozenset(values) for key, values in mapping.items()})


@dataclass(frozen=True)
class RequirementsResult:
    """Snapshot of one resolution run.

    Attributes:
        must_haves: Seed package names as supplied
        required_packages: Packages transitively necessary for the seeds
        unresolved_requirements: Package name to requirements nothing satisfies.
            Invalid seeds are listed under MUST_HAVE_PSEUDO_PACKAGE.
        installed_but_not_required: Installed packages outside the closure,
            None when no installed list was supplied
        package_requirements: Required package to the packages it pulled in
        conditionally_required: Packages named only by boolean dependencies
        ignored_requirements: Package name to requirements skipped as packaging-only
        dropped_provisions: Package name to provided paths that failed symlink resolution
    """

    must_haves: tuple[str, ...]
    required_packages: frozenset[str]
    unresolved_requirements: Mapping[str, frozenset[str]] = field(default_factory=dict)
    installed_but_not_required: frozenset[str] | None = None
    package_requirements: Mapping[str, frozenset[str]] = field(default_factory=dict)
    conditionally_required: frozenset[str] = frozenset()
    ignored_requirements: Mapping[str, frozenset[str]] = field(default_factory=dict)
    dropped_provisions: Mapping[str, frozenset[str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "must_haves", tuple(self.must_haves))
        object.__setattr__(self, "required_packages", frozenset(self.required_packages))
        object.__setattr__(self, "conditionally_required", frozenset(self.conditionally_required))
        if self.installed_but_not_required is not None:
            object.__setattr__(self, "installed_but_not_required", frozenset(self.installed_but_not_required))
        for name in ("unresolved_requirements", "package_requirements", "ignored_requirements", "dropped_provisions"):
            object.__setattr__(self, name, _freeze_mapping(getattr(self, name)))

    @property
    def fully_resolved(self) -> bool:
        """True when every requirement of every required package was satisfied."""
        return not self.unresolved_requirements

    @property
    def unresolved_count(self) -> int:
        return sum(len(requirements) for requirements in self.unresolved_requirements.values())

    @property
    def invalid_must_haves(self) -> frozenset[str]:
        return self.unresolved_requirements.get(MUST_HAVE_PSEUDO_PACKAGE, frozenset())

    def sorted_required(self) -> list[str]:
        return sorted(self.required_packages)

    def sorted_installed_but_not_required(self) -> list[str]:
        return sorted(self.installed_but_not_required or ())

    def installed_but_not_required_from(self, installed: Iterable[str]) -> frozenset[str]:
        """Compute removal candidates against an arbitrary installed-package list."""
        return frozenset(installed) - self.required_packages

    def status_marks(self) -> dict[str, StatusMark]:
        """Evaluate every known package name, sorted by name.

        Installed packages start as optional, packages named by boolean
        dependencies become conditional, and required packages override both.
        """
        marks: dict[str, StatusMark] = {}
        for name in self.installed_but_not_required or ():
            marks[name] = StatusMark.OPTIONAL
        for name in self.conditionally_required:
            marks[name] = StatusMark.CONDITIONAL
        for name in self.required_packages:
            marks[name] = StatusMark.REQUIRED
        return dict(sorted(marks.items()))

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation with every collection sorted."""

        def _sorted_mapping(mapping: Mapping[str, frozenset[str]]) -> dict[str, list[str]]:
            return {key: sorted(values) for key, values in sorted(mapping.items())}

        return {
            "mustHaves": list(self.must_haves),
            "fullyResolved": self.fully_resolved,
            "requiredPackages": self.sorted_required(),
            "unresolvedRequirements": _sorted_mapping(self.unresolved_requirements),
            "installedButNotRequired": (
                None if self.installed_but_not_required is None else self.sorted_installed_but_not_required()
            ),
            "conditionallyRequired": sorted(self.conditionally_required),
            "packageRequirements": _sorted_mapping(self.package_requirements),
            "ignoredRequirements": _sorted_mapping(self.ignored_requirements),
            "droppedProvisions": _sorted_mapping(self.dropped_provisions),
        }
