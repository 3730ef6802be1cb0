"""Custom exceptions for the measure importer."""


class ImporterError(Exception):
    """Base exception for importer errors."""

    pass


class ConfigurationError(ImporterError):
    """Error in the extraction engine's configuration."""

    pass


class QueryError(ImporterError):
    """Error evaluating a location query against a document."""

    pass


class ValidationError(ImporterError):
    """Error during document validation."""

    pass
