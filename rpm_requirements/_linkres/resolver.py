"""Resolution of Linux symlinks using only string paths.

The link table is the one captured by the extraction step: it maps the
absolute path of every symlink in the image to its raw target. Targets may be
absolute or relative to the directory containing the link, and links to
directories apply to everything beneath them. Resolution never touches the
real filesystem, so the image root is always treated as "/".
"""

import re
from types import MappingProxyType
from typing import Mapping

from ..logging_config import logger
from .models import Circular, ResolutionOutcome, Resolved, Unresolved

# Far above the nesting found on any real system.
DEFAULT_MAX_HOPS = 64

REASON_HOP_BUDGET = "hop budget exceeded"
REASON_TRAVERSAL = "traversal above root"

_MULTI_SLASH = re.compile(r"/{2,}")


def normalize_path(path: str) -> str:
    """Collapse repeated slashes and drop a trailing slash.

    Repeated slashes are meaningless on Linux, and a trailing slash after a
    directory would defeat exact lookups in the link table.
    """
    path = _MULTI_SLASH.sub("/", path)
    if len(path) > 1 and path.endswith("/"):
        path = path[:-1]
    return path


def validate_link(path: str, target: str) -> None:
    """Check that a single link table entry can be used for resolution.

    Raises:
        ValueError: If the entry is unusable
    """
    if not isinstance(path, str) or not isinstance(target, str):
        raise ValueError("symlink paths and targets must be strings")
    if not path.startswith("/"):
        raise ValueError(f"symlink path must be absolute: {path!r}")
    if ".." in path.split("/"):
        raise ValueError(f"symlink path contains traversal: {path!r}")
    if "\0" in path or "\0" in target:
        raise ValueError("symlink paths and targets must not contain NUL characters")
    if not target:
        raise ValueError(f"symlink at {path!r} has an empty target")


class SymlinkResolver:
    """Resolves paths through a fixed link table.

    Each call to resolve() starts from a fresh visited set, so one instance
    can be shared freely, including between threads.

    Example:
        resolver = SymlinkResolver({"/sbin": "usr/sbin"})
        resolver.resolve("/sbin/ldconfig")  # Resolved(path="/usr/sbin/ldconfig")
    """

    def __init__(self, links: Mapping[str, str], max_hops: int = DEFAULT_MAX_HOPS) -> None:
        if max_hops < 1:
            raise ValueError("max_hops must be at least 1")

        table: dict[str, str] = {}
        for path, target in links.items():
            validate_link(path, target)
            table[normalize_path(path)] = normalize_path(target)

        self._links = table
        self.max_hops = max_hops

    @property
    def links(self) -> Mapping[str, str]:
        """Read-only view of the normalized link table."""
        return MappingProxyType(self._links)

    def __len__(self) -> int:
        return len(self._links)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and normalize_path(path) in self._links

    def resolve(self, start_path: str) -> ResolutionOutcome:
        """Follow symlinks from start_path until a canonical path is reached.

        Args:
            start_path: Absolute path to resolve

        Returns:
            Resolved, Unresolved or Circular. Failures are values, not exceptions.

        Raises:
            ValueError: If start_path is not absolute
        """
        if not start_path.startswith("/"):
            raise ValueError(f"path must be absolute: {start_path!r}")

        current = normalize_path(start_path)
        visited: list[str] = []
        seen: set[str] = set()
        hops = 0

        while True:
            if current in seen:
                return Circular(visited=(*visited, current))
            seen.add(current)
            visited.append(current)

            step = self._follow_first_link(current)
            if not isinstance(step, str):
                return step

            if hops == self.max_hops:
                logger.debug(f"Symlink resolution of {start_path} stopped at {current} after {hops} hops")
                return Unresolved(last_path=current, reason=REASON_HOP_BUDGET)
            hops += 1
            current = step

    def _follow_first_link(self, path: str) -> str | Resolved | Unresolved:
        """Replace the first symlink component of path by its target.

        Returns the rewritten path, Resolved if no component is a link, or
        Unresolved if ".." climbs above the root.
        """
        components = path.split("/")[1:]
        prefix: list[str] = []

        for index, component in enumerate(components):
            if component in ("", "."):
                continue

            if component == "..":
                # Every component in prefix was already checked not to be a link.
                if not prefix:
                    return Unresolved(last_path=path, reason=REASON_TRAVERSAL)
                prefix.pop()
                continue

            prefix.append(component)
            candidate = "/" + "/".join(prefix)
            target = self._links.get(candidate)
            if target is None:
                continue

            if not target.startswith("/"):
                target = candidate.rsplit("/", 1)[0] + "/" + target

            return normalize_path("/".join([target, *components[index + 1 :]]))

        return Resolved(path="/" + "/".join(prefix))


def resolve_path(path: str, links: Mapping[str, str], max_hops: int = DEFAULT_MAX_HOPS) -> ResolutionOutcome:
    """Resolve a single path against a link table.

    Validates the whole table on every call; build a SymlinkResolver once
    when resolving many paths.
    """
    return SymlinkResolver(links, max_hops=max_hops).resolve(path)
