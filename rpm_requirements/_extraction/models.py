"""Data models for extraction directories."""

from dataclasses import dataclass, field

from .._depres import PackageGraph

# Layout written by the filesystem extraction step.
PACKAGE_DEPS_DIR = "package-deps"
PACKAGE_FILES_DIR = "package-files"
REQUIRES_FILE = "requires.txt"
PROVIDES_FILE = "provides.txt"
FILES_SUFFIX = "_files.txt"
SYMLINKS_FILE = "filesystem/symlinks.txt"
INSTALLED_FILE = "packages_rpm-name-only.txt"
SYMLINK_SEPARATOR = " --> "

# Directory entries that are never package data.
IGNORED_ENTRIES = frozenset({".DS_Store"})


@dataclass
class ExtractionData:
    """Package metadata loaded from an extraction directory."""

    graph: PackageGraph
    links: dict[str, str] = field(default_factory=dict)
    installed: frozenset[str] | None = None

    @property
    def has_installed_list(self) -> bool:
        return self.installed is not None
