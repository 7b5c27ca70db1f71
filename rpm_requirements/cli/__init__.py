"""CLI module for rpm-requirements.

This module provides the command-line interface. It supports both CLI
arguments and environment variables for configuration.
"""

from .main import (
    Config,
    build_config,
    cli,
    main,
    parse_must_haves,
    run_pipeline,
)

__all__ = [
    "cli",
    "main",
    "Config",
    "build_config",
    "parse_must_haves",
    "run_pipeline",
]
