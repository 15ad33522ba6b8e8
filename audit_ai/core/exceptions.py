"""Custom exception hierarchy.

Every error carries an HTTP-equivalent ``status_code`` and a short ``title``
so the API layer can map it to an RFC 7807 error body without a lookup table.
"""

from typing import Optional


class AppError(Exception):
    """Base exception for application errors."""

    status_code: int = 500
    title: str = "Internal Server Error"

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class NotFoundError(AppError):
    """Raised when a document, project or analysis does not exist."""
    status_code = 404
    title = "Not Found"


class DocumentNotFoundError(NotFoundError):
    """Raised when a document is not found."""
    title = "Document Not Found"


class ProjectNotFoundError(NotFoundError):
    """Raised when a project is not found."""
    title = "Project Not Found"


class AccessDeniedError(AppError):
    """Raised when the requester neither owns nor is assigned to the project."""
    status_code = 403
    title = "Access Denied"


class ValidationError(AppError):
    """Raised when input validation fails."""
    status_code = 400
    title = "Validation Error"


class AnalysisInProgressError(AppError):
    """Raised when another request currently holds the document's processing claim."""
    status_code = 409
    title = "Analysis In Progress"


class UpstreamServiceError(AppError):
    """Raised when an external service call fails."""
    status_code = 502
    title = "Upstream Service Error"


class APIClientError(UpstreamServiceError):
    """Raised when an external API call fails."""
    pass


class APITimeoutError(APIClientError):
    """Raised when an external API call times out."""
    pass


class AnalysisFailedError(AppError):
    """Raised when the analysis pipeline aborts; ``original_error`` holds the cause."""
    status_code = 502
    title = "Analysis Failed"


class DatabaseError(AppError):
    """Raised when a database operation fails."""
    pass


class ConfigurationError(AppError):
    """Raised when configuration is invalid or missing."""
    pass
