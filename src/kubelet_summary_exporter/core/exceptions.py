from enum import Enum


class ScrapeErrorType(str, Enum):
    """
    Closed set of failure categories for a single collection.

    The value is the label emitted on ``kubelet_summary_exporter_errors``.
    """

    TOKEN_READ = "token-read-error"
    REQUEST_CONSTRUCTION = "request-construction-error"
    TRANSPORT = "transport-error"
    STATUS = "status-error"
    BODY_READ = "body-read-error"
    PARSE = "parse-error"


class ExporterError(Exception):
    """Base exception for the kubelet summary exporter."""

    pass


class ConfigurationError(ExporterError):
    """Raised when the exporter cannot start with the given configuration."""

    pass


class HostnameLookupError(ExporterError):
    """Raised when the node hostname cannot be resolved through the Kubernetes API."""

    pass


class ScrapeError(ExporterError):
    """Raised when one collection fails; carries the failure category."""

    def __init__(self, error_type: ScrapeErrorType, message: str):
        super().__init__(message)
        self.error_type = error_type
