"""Pytest configuration and shared fixtures for all tests."""

from pathlib import Path

import pytest

TEST_DATA_DIR = Path(__file__).parent / "test-data"

CLI_ENV_VARS = (
    "EXTRACTION_DIR",
    "MUST_HAVES",
    "MUST_HAVES_FILE",
    "JSON_REPORT",
    "INVENTORY_FILE",
    "CYCLONEDX_VERSION",
    "FAIL_ON_UNRESOLVED",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_cli_environment(monkeypatch):
    """Keep configuration from the developer's shell out of the tests.

    Every CLI option falls back to an environment variable, so a stray
    MUST_HAVES or EXTRACTION_DIR would change what the tests see.
    """
    for name in CLI_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def extraction_001() -> Path:
    """Small extraction: fake-package -> iamafake-lib -> coreutils -> linux."""
    return TEST_DATA_DIR / "extraction-001"


def write_extraction(
    root: Path,
    packages: dict[str, dict[str, list[str]]],
    symlinks: list[str] | None = None,
    installed: list[str] | None = None,
) -> Path:
    """Write an extraction directory.

    Args:
        root: Directory to create the layout in
        packages: Package name to {"requires": [...], "provides": [...], "files": [...]}
        symlinks: Raw "path --> target" lines, or None for no symlinks file
        installed: Installed package names, or None for no name list
    """
    for name, data in packages.items():
        package_dir = root / "package-deps" / name
        package_dir.mkdir(parents=True, exist_ok=True)
        (package_dir / "requires.txt").write_text("\n".join(data.get("requires", [])) + "\n")
        (package_dir / "provides.txt").write_text("\n".join(data.get("provides", [])) + "\n")
        if "files" in data:
            files_dir = root / "package-files"
            files_dir.mkdir(parents=True, exist_ok=True)
            (files_dir / f"{name}_files.txt").write_text("\n".join(data["files"]) + "\n")

    if symlinks is not None:
        (root / "filesystem").mkdir(parents=True, exist_ok=True)
        (root / "filesystem" / "symlinks.txt").write_text("\n".join(symlinks) + "\n")

    if installed is not None:
        (root / "packages_rpm-name-only.txt").write_text("\n".join(installed) + "\n")

    return root


@pytest.fixture
def make_extraction(tmp_path):
    """Factory fixture writing an extraction directory below tmp_path."""

    def _make(packages, symlinks=None, installed=None, name="extraction"):
        return write_extraction(tmp_path / name, packages, symlinks=symlinks, installed=installed)

    return _make
