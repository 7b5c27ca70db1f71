"""Command-line interface for rpm-requirements.

Every option can also be given through an environment variable so the tool
can run unchanged from CI jobs and build plugins.

# Exit codes
- 0: resolution ran (unresolved requirements are reported, not fatal)
- 1: configuration, extraction or export error
- 2: unresolved requirements with --fail-on-unresolved
"""

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

import click

from .. import __version__
from .._depres import RequirementsResult, resolve_requirements
from .._extraction import load_extraction, read_symlinks
from .._extraction.models import SYMLINKS_FILE
from .._linkres import Resolved, SymlinkResolver
from ..console import (
    console,
    print_final_failure,
    print_final_success,
    print_package_list,
    print_path_outcome,
    print_resolution_summary,
    print_unresolved_requirements,
)
from ..exceptions import ConfigurationError, RpmRequirementsError
from ..logging_config import logger, set_log_level
from ..serialization import DEFAULT_CYCLONEDX_VERSION, get_supported_cyclonedx_versions

RPM_REQUIREMENTS_VERSION = __version__

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_UNRESOLVED = 2

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@dataclass
class Config:
    """Configuration of one resolution run."""

    extraction_dir: str
    must_haves: list[str]
    json_report: Optional[str] = None
    inventory_file: Optional[str] = None
    spec_version: str = DEFAULT_CYCLONEDX_VERSION
    fail_on_unresolved: bool = False
    show_optional: bool = False

    def validate(self) -> None:
        """
        Validate configuration settings.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not self.must_haves:
            raise ConfigurationError("No must-have packages given. Use --must-have or --must-haves-file.")
        if not Path(self.extraction_dir).is_dir():
            raise ConfigurationError(f"Extraction directory does not exist: {self.extraction_dir}")
        if self.spec_version not in get_supported_cyclonedx_versions():
            raise ConfigurationError(
                f"Unsupported CycloneDX version: {self.spec_version}. "
                f"Supported versions: {', '.join(get_supported_cyclonedx_versions())}"
            )


def parse_must_haves(values: Iterable[str]) -> list[str]:
    """Split comma or whitespace separated package names, keeping first-seen order."""
    names: dict[str, None] = {}
    for value in values:
        for name in value.replace(",", " ").split():
            names[name] = None
    return list(names)


def read_must_haves_file(path: str) -> list[str]:
    """Read package names from a file, one per line, '#' starting a comment."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            lines = [line.split("#", 1)[0] for line in f]
    except OSError as e:
        raise ConfigurationError(f"Failed to read must-haves file {path}: {e}") from e
    return parse_must_haves(lines)


def build_config(
    extraction_dir: str,
    must_have: Iterable[str] = (),
    must_haves_file: Optional[str] = None,
    json_report: Optional[str] = None,
    inventory: Optional[str] = None,
    spec_version: str = DEFAULT_CYCLONEDX_VERSION,
    fail_on_unresolved: bool = False,
    show_optional: bool = False,
) -> Config:
    """
    Build and validate a Config from CLI values.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    must_haves = parse_must_haves(must_have)
    if must_haves_file:
        must_haves = parse_must_haves([*must_haves, *read_must_haves_file(must_haves_file)])

    config = Config(
        extraction_dir=extraction_dir,
        must_haves=must_haves,
        json_report=json_report,
        inventory_file=inventory,
        spec_version=spec_version,
        fail_on_unresolved=fail_on_unresolved,
        show_optional=show_optional,
    )
    config.validate()
    return config


def run_pipeline(config: Config) -> int:
    """
    Load the extraction, resolve, report and export.

    Returns:
        Process exit code

    Raises:
        RpmRequirementsError: On extraction or export failures
    """
    data = load_extraction(config.extraction_dir)
    logger.info(f"Resolving requirements of {len(config.must_haves)} must-have packages")
    result: RequirementsResult = resolve_requirements(data.graph, data.links, config.must_haves, data.installed)

    print_resolution_summary(result)
    print_unresolved_requirements(result)
    if config.show_optional and result.installed_but_not_required is not None:
        print_package_list("Installed but not required", result.installed_but_not_required)

    if config.json_report:
        from ..export import write_json_report

        write_json_report(result, config.json_report)
    if config.inventory_file:
        from ..export import write_inventory

        write_inventory(result, config.inventory_file, spec_version=config.spec_version)

    if config.fail_on_unresolved and not result.fully_resolved:
        print_final_failure(f"{result.unresolved_count} requirements could not be resolved")
        return EXIT_UNRESOLVED

    print_final_success()
    return EXIT_OK


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(RPM_REQUIREMENTS_VERSION, "--version", prog_name="rpm-requirements")
@click.option(
    "--log-level",
    envvar="LOG_LEVEL",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="INFO",
    show_default=True,
    help="Logging verbosity.",
)
def cli(log_level: str) -> None:
    """Compute which RPM packages of an extracted filesystem image are required."""
    set_log_level(log_level)


@cli.command("resolve")
@click.argument("extraction_dir", envvar="EXTRACTION_DIR", type=click.Path(file_okay=False))
@click.option(
    "-m",
    "--must-have",
    "must_have",
    envvar="MUST_HAVES",
    multiple=True,
    help="Must-have package name. Repeatable; comma separated lists are accepted.",
)
@click.option(
    "--must-haves-file",
    envvar="MUST_HAVES_FILE",
    type=click.Path(exists=True, dir_okay=False),
    help="File with one must-have package name per line.",
)
@click.option("--json-report", envvar="JSON_REPORT", type=click.Path(dir_okay=False), help="Write a JSON report.")
@click.option(
    "--inventory",
    envvar="INVENTORY_FILE",
    type=click.Path(dir_okay=False),
    help="Write a CycloneDX inventory with the requirement evaluation of every package.",
)
@click.option(
    "--spec-version",
    envvar="CYCLONEDX_VERSION",
    type=click.Choice(get_supported_cyclonedx_versions()),
    default=DEFAULT_CYCLONEDX_VERSION,
    show_default=True,
    help="CycloneDX spec version of the inventory.",
)
@click.option(
    "--fail-on-unresolved/--no-fail-on-unresolved",
    envvar="FAIL_ON_UNRESOLVED",
    default=False,
    show_default=True,
    help="Exit with status 2 when any requirement is unresolved.",
)
@click.option(
    "--show-optional/--no-show-optional",
    default=False,
    help="List installed packages that are not required.",
)
def resolve_command(
    extraction_dir: str,
    must_have: tuple[str, ...],
    must_haves_file: Optional[str],
    json_report: Optional[str],
    inventory: Optional[str],
    spec_version: str,
    fail_on_unresolved: bool,
    show_optional: bool,
) -> None:
    """Resolve the required packages of EXTRACTION_DIR."""
    try:
        config = build_config(
            extraction_dir=extraction_dir,
            must_have=must_have,
            must_haves_file=must_haves_file,
            json_report=json_report,
            inventory=inventory,
            spec_version=spec_version,
            fail_on_unresolved=fail_on_unresolved,
            show_optional=show_optional,
        )
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        print_final_failure(str(e))
        sys.exit(EXIT_ERROR)

    try:
        exit_code = run_pipeline(config)
    except RpmRequirementsError as e:
        logger.error(f"Resolution failed: {e}")
        print_final_failure(str(e))
        sys.exit(EXIT_ERROR)

    sys.exit(exit_code)


@cli.command("resolve-path")
@click.argument("extraction_dir", type=click.Path(exists=True, file_okay=False))
@click.argument("paths", nargs=-1, required=True)
def resolve_path_command(extraction_dir: str, paths: tuple[str, ...]) -> None:
    """Show how PATHS resolve through the symlinks of EXTRACTION_DIR."""
    for path in paths:
        if not path.startswith("/"):
            raise click.BadParameter(f"'{path}' is not an absolute path", param_hint="PATHS")

    symlinks_file = Path(extraction_dir) / SYMLINKS_FILE
    try:
        links = read_symlinks(symlinks_file) if symlinks_file.is_file() else {}
    except RpmRequirementsError as e:
        print_final_failure(str(e))
        sys.exit(EXIT_ERROR)

    if not links:
        logger.warning(f"No symlinks found in {symlinks_file}")

    resolver = SymlinkResolver(links)
    console.print(f"[info]{len(resolver)} symlinks loaded[/info]")

    all_resolved = True
    for path in paths:
        outcome = resolver.resolve(path)
        print_path_outcome(path, outcome)
        all_resolved = all_resolved and isinstance(outcome, Resolved)

    sys.exit(EXIT_OK if all_resolved else EXIT_ERROR)


def main() -> None:
    """Console script entry point."""
    cli()
