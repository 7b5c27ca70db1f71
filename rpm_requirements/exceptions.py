"""Custom exceptions for rpm-requirements."""


class RpmRequirementsError(Exception):
    """Base exception for all rpm-requirements operations."""


class ConfigurationError(RpmRequirementsError):
    """Raised when configuration or resolver input validation fails."""


class ExtractionDataError(RpmRequirementsError):
    """Raised when an extraction directory cannot be read."""


class ExportError(RpmRequirementsError):
    """Raised when a report or inventory cannot be written."""
