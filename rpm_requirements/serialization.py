"""
CycloneDX serialization for requirement inventories.

Outputter classes are imported lazily, one per supported spec version.
"""

from pathlib import Path
from typing import Dict, Optional, Type

from cyclonedx.model.bom import Bom

from .exceptions import ExportError
from .logging_config import logger

_CYCLONEDX_OUTPUTTERS: Dict[str, Optional[Type]] = {
    "1.4": None,  # JsonV1Dot4
    "1.5": None,  # JsonV1Dot5
    "1.6": None,  # JsonV1Dot6
}

DEFAULT_CYCLONEDX_VERSION = "1.6"


def _normalize_version(spec_version: Optional[str]) -> str:
    if not spec_version:
        return DEFAULT_CYCLONEDX_VERSION
    return ".".join(spec_version.split(".")[:2])


def _get_cyclonedx_outputter(spec_version: Optional[str]) -> Type:
    """
    Get the CycloneDX JSON outputter class for a spec version.

    Raises:
        ValueError: If the version is not supported
    """
    major_minor = _normalize_version(spec_version)
    if major_minor not in _CYCLONEDX_OUTPUTTERS:
        raise ValueError(
            f"Unsupported CycloneDX version: {spec_version}. "
            f"Supported versions: {', '.join(get_supported_cyclonedx_versions())}"
        )

    if _CYCLONEDX_OUTPUTTERS[major_minor] is None:
        if major_minor == "1.4":
            from cyclonedx.output.json import JsonV1Dot4

            _CYCLONEDX_OUTPUTTERS["1.4"] = JsonV1Dot4
        elif major_minor == "1.5":
            from cyclonedx.output.json import JsonV1Dot5

            _CYCLONEDX_OUTPUTTERS["1.5"] = JsonV1Dot5
        elif major_minor == "1.6":
            from cyclonedx.output.json import JsonV1Dot6

            _CYCLONEDX_OUTPUTTERS["1.6"] = JsonV1Dot6

    return _CYCLONEDX_OUTPUTTERS[major_minor]


def serialize_cyclonedx_bom(bom: Bom, spec_version: Optional[str] = None) -> str:
    """
    Serialize a CycloneDX BOM to a JSON string.

    Args:
        bom: The BOM to serialize
        spec_version: CycloneDX spec version ("1.4", "1.5", "1.6"); defaults to 1.6

    Returns:
        JSON document as a string

    Raises:
        ValueError: If spec_version is unsupported
    """
    outputter_class = _get_cyclonedx_outputter(spec_version)
    logger.debug(f"Serializing CycloneDX BOM using version {_normalize_version(spec_version)}")
    return outputter_class(bom).output_as_string(indent=2)


def write_cyclonedx_bom(bom: Bom, output_file: str | Path, spec_version: Optional[str] = None) -> Path:
    """
    Serialize a BOM and write it to output_file.

    Raises:
        ExportError: If serialization or writing fails
    """
    output_path = Path(output_file)
    try:
        serialized = serialize_cyclonedx_bom(bom, spec_version)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(serialized, encoding="utf-8")
    except (OSError, ValueError) as e:
        raise ExportError(f"Failed to write CycloneDX inventory to {output_path}: {e}") from e
    return output_path


def get_supported_cyclonedx_versions() -> list[str]:
    """
    Get list of supported CycloneDX versions.

    Returns:
        List of version strings (e.g., ["1.4", "1.5", "1.6"])
    """
    return sorted(_CYCLONEDX_OUTPUTTERS.keys())
