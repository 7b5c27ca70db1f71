"""Symlink resolution over link tables captured from filesystem images.

Example usage:
    from rpm_requirements._linkres import SymlinkResolver, Resolved

    resolver = SymlinkResolver({"/lib": "usr/lib"})
    outcome = resolver.resolve("/lib/libc.so.6")
    if isinstance(outcome, Resolved):
        print(outcome.path)  # /usr/lib/libc.so.6
"""

from .models import Circular, ResolutionOutcome, ResolutionStatus, Resolved, Unresolved
from .resolver import (
    DEFAULT_MAX_HOPS,
    REASON_HOP_BUDGET,
    REASON_TRAVERSAL,
    SymlinkResolver,
    normalize_path,
    resolve_path,
    validate_link,
)

__all__ = [
    # Resolver
    "SymlinkResolver",
    "resolve_path",
    "normalize_path",
    "validate_link",
    "DEFAULT_MAX_HOPS",
    "REASON_HOP_BUDGET",
    "REASON_TRAVERSAL",
    # Outcomes
    "ResolutionOutcome",
    "ResolutionStatus",
    "Resolved",
    "Unresolved",
    "Circular",
]
