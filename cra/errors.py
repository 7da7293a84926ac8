"""Exception hierarchy shared by the analyzer, the CLI and the API."""


class CRAError(Exception):
    """Base class for all analyzer errors."""


class ConfigError(CRAError, ValueError):
    """Raised when weights, chunk bounds or the rubric file are invalid."""


class DocumentParseError(CRAError):
    """Raised when the uploaded document cannot be read (corrupt or unsupported)."""


class InsufficientTextError(CRAError):
    """Raised when a document yields too little text to analyze."""


class ModelGatewayError(CRAError):
    """Raised when the model provider cannot be reached or fails."""
