"""Rich console utilities for rpm-requirements.

This module provides a shared Rich Console instance and helpers that render
resolution results, with GitHub Actions annotations when running in CI.
"""

import os
from contextlib import contextmanager
from typing import Any, Generator, Iterable, List, Optional, Tuple

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from ._depres import MUST_HAVE_PSEUDO_PACKAGE, RequirementsResult
from ._linkres import Circular, ResolutionOutcome, Resolved

# Detect GitHub Actions
IS_GITHUB_ACTIONS = os.getenv("GITHUB_ACTIONS") == "true"

custom_theme = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "step": "bold blue",
        "highlight": "magenta",
    }
)

# Force colors ON in GitHub Actions (it supports ANSI colors but Rich may incorrectly disable them)
console = Console(
    theme=custom_theme,
    force_terminal=IS_GITHUB_ACTIONS or None,
    color_system="auto",
)


@contextmanager
def gha_group(title: str) -> Generator[None, None, None]:
    """
    Context manager for GitHub Actions collapsible groups.

    Usage:
        with gha_group("Details"):
            console.print("This is collapsible in GHA")
    """
    if IS_GITHUB_ACTIONS:
        print(f"::group::{title}")
    try:
        yield
    finally:
        if IS_GITHUB_ACTIONS:
            print("::endgroup::")


def gha_warning(message: str, title: Optional[str] = None) -> None:
    """Emit a warning, as a job annotation when running in GitHub Actions."""
    if IS_GITHUB_ACTIONS:
        print(f"::warning title={title}::{message}" if title else f"::warning::{message}")
    elif title:
        console.print(f"[warning]Warning ({title}):[/warning] {message}")
    else:
        console.print(f"[warning]Warning:[/warning] {message}")


def gha_error(message: str, title: Optional[str] = None) -> None:
    """Emit an error, as a job annotation when running in GitHub Actions."""
    if IS_GITHUB_ACTIONS:
        print(f"::error title={title}::{message}" if title else f"::error::{message}")
    elif title:
        console.print(f"[error]Error ({title}):[/error] {message}")
    else:
        console.print(f"[error]Error:[/error] {message}")


def print_summary_table(
    title: str,
    data: List[Tuple[str, Any]],
    show_if_empty: bool = False,
) -> None:
    """
    Print a two-column summary table.

    Args:
        title: Table title
        data: List of (label, value) tuples
        show_if_empty: Whether to show rows whose value is 0/empty
    """
    if not show_if_empty:
        data = [(label, value) for label, value in data if value]

    if not data:
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    for label, value in data:
        table.add_row(label, str(value))

    console.print(table)


def print_resolution_summary(result: RequirementsResult) -> None:
    """Print the headline numbers of a resolution run."""
    data: List[Tuple[str, Any]] = [
        ("Must-have packages", len(result.must_haves)),
        ("Required packages", len(result.required_packages)),
        ("Packages with unresolved requirements", len(result.unresolved_requirements)),
        ("Unresolved requirements", result.unresolved_count),
        ("Conditionally required packages", len(result.conditionally_required)),
        ("Ignored requirements", sum(len(v) for v in result.ignored_requirements.values())),
        ("Dropped provisions", sum(len(v) for v in result.dropped_provisions.values())),
    ]
    if result.installed_but_not_required is not None:
        data.append(("Installed but not required", len(result.installed_but_not_required)))

    print_summary_table("Requirements Summary", data, show_if_empty=True)


def print_unresolved_requirements(result: RequirementsResult) -> None:
    """List every unsatisfied requirement grouped by package."""
    if result.fully_resolved:
        console.print("[success]✓ All requirements resolved[/success]")
        return

    invalid = result.invalid_must_haves
    if invalid:
        gha_warning(", ".join(sorted(invalid)), title="Unknown must-have packages")

    packages = {k: v for k, v in result.unresolved_requirements.items() if k != MUST_HAVE_PSEUDO_PACKAGE}
    if not packages:
        return

    gha_warning(
        f"{sum(len(v) for v in packages.values())} requirements in {len(packages)} packages "
        "could not be satisfied with the current data",
        title="Unresolved requirements",
    )

    table = Table(title="Unresolved Requirements", show_header=True, header_style="bold")
    table.add_column("Package", style="highlight")
    table.add_column("Requirement")
    for name, requirements in sorted(packages.items()):
        for i, requirement in enumerate(sorted(requirements)):
            table.add_row(name if i == 0 else "", requirement)

    with gha_group("Unresolved requirements"):
        console.print(table)


def print_package_list(title: str, names: Iterable[str]) -> None:
    """Print a sorted, numbered list of package names."""
    names = sorted(names)
    console.print(f"[step]{title}[/step] ({len(names)}):")
    with gha_group(title):
        for name in names:
            console.print(f"  - {name}")


def print_path_outcome(path: str, outcome: ResolutionOutcome) -> None:
    """Describe the outcome of resolving one path."""
    if isinstance(outcome, Resolved):
        console.print(f"[success]✓[/success] {path} -> {outcome.path}")
    elif isinstance(outcome, Circular):
        console.print(f"[error]✗ {path} is circular[/error]")
        for visited in outcome.visited:
            console.print(f"  -> {visited}")
    else:
        console.print(f"[warning]✗ {path} is unresolved ({outcome.reason})[/warning], stopped at {outcome.last_path}")


def print_final_success() -> None:
    """Print final success message."""
    console.print()
    if IS_GITHUB_ACTIONS:
        console.print("[bold green]✓ SUCCESS![/bold green] Requirements resolved.")
    else:
        console.rule("[bold green]SUCCESS[/bold green]", style="green")
    console.print()


def print_final_failure(message: str) -> None:
    """Print final failure message."""
    console.print()
    gha_error(message, title="Requirements Resolution Failed")
    if not IS_GITHUB_ACTIONS:
        console.rule("[bold red]FAILED[/bold red]", style="red")
    console.print()
