"""Loading of extraction directories into a package graph and link table."""

from pathlib import Path

from ..exceptions import ExtractionDataError
from ..logging_config import logger
from .._depres import Package, PackageGraph
from .._linkres import validate_link
from .models import (
    FILES_SUFFIX,
    IGNORED_ENTRIES,
    INSTALLED_FILE,
    PACKAGE_DEPS_DIR,
    PACKAGE_FILES_DIR,
    PROVIDES_FILE,
    REQUIRES_FILE,
    SYMLINK_SEPARATOR,
    SYMLINKS_FILE,
    ExtractionData,
)


def _read_lines(file_path: Path) -> list[str]:
    """Read non-blank, stripped lines of a UTF-8 text file."""
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            return [line.strip() for line in f if line.strip()]
    except (OSError, UnicodeDecodeError) as e:
        raise ExtractionDataError(f"Failed to read {file_path}: {e}") from e


def _read_optional_lines(file_path: Path, what: str) -> list[str]:
    if not file_path.is_file():
        logger.warning(f"{what} file {file_path} doesn't exist, treating it as empty")
        return []
    return _read_lines(file_path)


def read_symlinks(symlinks_file: Path) -> dict[str, str]:
    """Parse a symlinks listing of "<absolute path> --> <target>" lines.

    Malformed lines are logged and skipped. A path listed twice keeps its
    last target.
    """
    symlinks: dict[str, str] = {}

    try:
        with open(symlinks_file, "r", encoding="utf-8") as f:
            lines = f.read().split("\n")
    except (OSError, UnicodeDecodeError) as e:
        raise ExtractionDataError(f"Failed to read {symlinks_file}: {e}") from e

    for line_number, line in enumerate(lines, 1):
        line = line.rstrip("\r")
        if not line.strip():
            continue

        path, separator, target = line.partition(SYMLINK_SEPARATOR)
        if not separator:
            logger.warning(f"Invalid line {line_number} in {symlinks_file.name}: no '{SYMLINK_SEPARATOR}' in [{line}]")
            continue

        try:
            validate_link(path, target)
        except ValueError as e:
            logger.warning(f"Invalid line {line_number} in {symlinks_file.name}: {e}")
            continue

        previous = symlinks.get(path)
        if previous is not None:
            logger.warning(f"Duplicate symlink path {path}: overriding target [{previous}] with [{target}]")
        symlinks[path] = target

    return symlinks


def read_owned_files(files_dir: Path) -> dict[str, frozenset[str]]:
    """Map package names to the paths listed in their *_files.txt."""
    owned: dict[str, frozenset[str]] = {}

    for files_file in sorted(files_dir.iterdir()):
        if files_file.name in IGNORED_ENTRIES:
            logger.debug(f"Ignoring {files_file}")
            continue
        if not files_file.is_file():
            logger.warning(f"Skipping {files_file}: not a file")
            continue
        if not files_file.name.endswith(FILES_SUFFIX):
            logger.warning(f"Skipping {files_file}: expected a name ending in '{FILES_SUFFIX}'")
            continue

        package_name = files_file.name[: -len(FILES_SUFFIX)]
        owned[package_name] = frozenset(_read_lines(files_file))

    return owned


def read_installed(installed_file: Path) -> frozenset[str] | None:
    """Read the installed-package name list, or None if the dump has none."""
    if not installed_file.is_file():
        logger.warning(f"{installed_file.name} not found; installed-but-not-required packages won't be reported")
        return None

    names = _read_lines(installed_file)
    if not names:
        logger.warning(f"{installed_file.name} is empty. This is likely an error.")
    return frozenset(names)


def read_package(package_dir: Path, files: frozenset[str] = frozenset()) -> Package:
    """Build a Package from one package-deps/<name>/ directory."""
    return Package(
        name=package_dir.name,
        requires=tuple(_read_optional_lines(package_dir / REQUIRES_FILE, "Requires")),
        provides=tuple(_read_optional_lines(package_dir / PROVIDES_FILE, "Provides")),
        files=files,
    )


def load_extraction(extraction_dir: str | Path) -> ExtractionData:
    """Load the package metadata of an extraction directory.

    Args:
        extraction_dir: Directory produced by the filesystem extraction step

    Returns:
        ExtractionData with package graph, link table and installed names

    Raises:
        ExtractionDataError: If the directory or its package-deps directory is missing
    """
    root = Path(extraction_dir)
    if not root.is_dir():
        raise ExtractionDataError(f"Extraction directory {root} does not exist")

    deps_dir = root / PACKAGE_DEPS_DIR
    if not deps_dir.is_dir():
        raise ExtractionDataError(f"Extraction directory {root} doesn't contain a {PACKAGE_DEPS_DIR} directory")

    files_dir = root / PACKAGE_FILES_DIR
    if files_dir.is_dir():
        owned = read_owned_files(files_dir)
    else:
        logger.warning(f"No {PACKAGE_FILES_DIR} directory in {root}. File requirements might not resolve.")
        owned = {}

    packages: list[Package] = []
    for package_dir in sorted(deps_dir.iterdir()):
        if package_dir.name in IGNORED_ENTRIES:
            logger.debug(f"Ignoring {package_dir}")
            continue
        if not package_dir.is_dir():
            logger.warning(f"Skipping {package_dir}: package entry is not a directory")
            continue
        packages.append(read_package(package_dir, owned.get(package_dir.name, frozenset())))

    known = {package.name for package in packages}
    for name in sorted(set(owned) - known):
        logger.warning(f"Package [{name}] owns files but has no {PACKAGE_DEPS_DIR} entry")
        packages.append(Package(name=name, files=owned[name]))

    symlinks_file = root / SYMLINKS_FILE
    if symlinks_file.is_file():
        links = read_symlinks(symlinks_file)
    else:
        logger.warning(f"No {SYMLINKS_FILE} in {root}. File dependencies might not resolve.")
        links = {}

    installed = read_installed(root / INSTALLED_FILE)

    logger.info(
        f"Loaded {len(packages)} packages, {len(links)} symlinks"
        + (f", {len(installed)} installed names" if installed is not None else "")
        + f" from {root}"
    )

    return ExtractionData(graph=PackageGraph(packages), links=links, installed=installed)
