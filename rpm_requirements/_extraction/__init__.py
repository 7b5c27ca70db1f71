"""Reading of extraction directories produced from filesystem images."""

from .models import ExtractionData
from .parser import load_extraction, read_installed, read_owned_files, read_package, read_symlinks

__all__ = [
    "ExtractionData",
    "load_extraction",
    "read_installed",
    "read_owned_files",
    "read_package",
    "read_symlinks",
]
