"""Export of resolution results to reports and inventories.

The inventory is a CycloneDX BOM listing every known package with its
requirement evaluation (required, conditional, optional). It cannot be read
back into a RequirementsResult: unresolved requirements and provider details
are only kept in the JSON report.
"""

import json
from pathlib import Path

from cyclonedx.model import Property
from cyclonedx.model.bom import Bom
from cyclonedx.model.component import Component, ComponentType
from packageurl import PackageURL

from ._depres import RequirementsResult
from .exceptions import ExportError
from .logging_config import logger
from .serialization import write_cyclonedx_bom

EVALUATION_PROPERTY = "rpm-requirements:evaluation"
ROOT_BOM_REF = "rpm-requirements-root"
DEFAULT_ROOT_NAME = "installed-system"


def _package_component(name: str, evaluation: str) -> Component:
    return Component(
        name=name,
        type=ComponentType.LIBRARY,
        bom_ref=name,
        purl=PackageURL(type="rpm", name=name),
        properties=[Property(name=EVALUATION_PROPERTY, value=evaluation)],
    )


def build_inventory_bom(result: RequirementsResult, root_name: str = DEFAULT_ROOT_NAME) -> Bom:
    """Build a CycloneDX BOM from a resolution result.

    The analyzed system is the metadata component and depends on the
    must-haves; each required package depends on the packages it pulled in.

    Args:
        result: Resolution result to export
        root_name: Name of the metadata component representing the system

    Returns:
        BOM with one component per known package
    """
    bom = Bom()
    root = Component(name=root_name, type=ComponentType.OPERATING_SYSTEM, bom_ref=ROOT_BOM_REF)
    bom.metadata.component = root

    components: dict[str, Component] = {}
    for name, mark in result.status_marks().items():
        component = _package_component(name, mark.value)
        components[name] = component
        bom.components.add(component)

    bom.register_dependency(root, [components[name] for name in result.must_haves if name in components])
    for name, pulled_in in sorted(result.package_requirements.items()):
        bom.register_dependency(components[name], [components[dep] for dep in sorted(pulled_in)])

    logger.debug(f"Built inventory BOM with {len(components)} components")
    return bom


def write_inventory(
    result: RequirementsResult,
    output_file: str | Path,
    spec_version: str | None = None,
    root_name: str = DEFAULT_ROOT_NAME,
) -> Path:
    """Write the CycloneDX inventory of a result.

    Raises:
        ExportError: If the inventory cannot be written
    """
    bom = build_inventory_bom(result, root_name=root_name)
    path = write_cyclonedx_bom(bom, output_file, spec_version)
    logger.info(f"Wrote inventory with {len(bom.components)} packages to {path}")
    return path


def write_json_report(result: RequirementsResult, output_file: str | Path) -> Path:
    """Write the JSON report of a result.

    Raises:
        ExportError: If the report cannot be written
    """
    path = Path(output_file)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, indent=2)
            f.write("\n")
    except OSError as e:
        raise ExportError(f"Failed to write JSON report to {path}: {e}") from e

    logger.info(f"Wrote requirements report to {path}")
    return path
