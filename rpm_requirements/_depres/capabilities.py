"""Helpers for classifying and normalizing RPM capability strings."""

import re
from types import MappingProxyType

from ..logging_config import logger

# Requirement prefixes that never name an installed package, mapped to the reason they are skipped.
IGNORED_REQUIREMENT_PREFIXES = MappingProxyType(
    {
        "rpmlib(": "implicitly added during build; rpm feature only relevant for packaging and installation",
    }
)

# Keywords of RPM boolean (rich) dependencies, e.g. "(foo if bar)".
BOOLEAN_OPERATORS = ("and", "or", "if", "else", "with", "without", "unless")

_VERSION_CONSTRAINT = re.compile(r"[<>=][ =]+.*$")
_BOOLEAN_SPLIT = re.compile(r"[()]|\s+(?:" + "|".join(BOOLEAN_OPERATORS) + r")\s+")


def is_path_capability(capability: str) -> bool:
    """A capability is path-shaped when it is an absolute filesystem path."""
    return capability.startswith("/")


def is_boolean_dependency(capability: str) -> bool:
    """Boolean dependencies are the parenthesized rich dependencies of rpm >= 4.13."""
    return capability.startswith("(")


def strip_version_constraint(capability: str) -> str:
    """Remove a trailing version constraint such as ">= 1.2" or "= 3:4.1-2".

    No version comparison is ever performed; the stripped form only widens
    lookups so that "foo >= 2" can be matched by any provider of "foo".

    Examples:
        >>> strip_version_constraint("libfoo >= 1.2")
        'libfoo'
        >>> strip_version_constraint("libc.so.6(GLIBC_2.34)(64bit)")
        'libc.so.6(GLIBC_2.34)(64bit)'
    """
    return _VERSION_CONSTRAINT.sub("", capability).strip()


def ignored_reason(requirement: str) -> str | None:
    """Return why a requirement can be skipped, or None if it must be resolved."""
    for prefix, reason in IGNORED_REQUIREMENT_PREFIXES.items():
        if requirement.startswith(prefix):
            return reason
    return None


def split_boolean_dependency(requirement: str) -> set[str]:
    """Break a boolean dependency into the capability names it mentions.

    Operators, parentheses and version specifiers are discarded. This does
    not evaluate the expression; it only collects the names involved.

    Examples:
        >>> sorted(split_boolean_dependency("(pkgA >= 1.0 if (pkgB or pkgC))"))
        ['pkgA', 'pkgB', 'pkgC']
    """
    if not requirement.endswith(")"):
        logger.debug(f"Boolean dependency [{requirement}] does not end in a bracket")

    names: set[str] = set()
    for piece in _BOOLEAN_SPLIT.split(requirement):
        piece = piece.strip()
        if not piece or piece.startswith(("<", ">", "=")):
            continue

        name = strip_version_constraint(piece)
        if not name:
            continue
        if " " in name:
            logger.debug(f"Skipping odd capability [{name}] from boolean dependency [{requirement}]")
            continue
        names.add(name)

    return names
