"""Exceptions raised by the render pipeline."""


class RenderException(Exception):
    """Base exception for render errors."""

    def __init__(self, message: str, error_type: str = "unknown", retryable: bool = False):
        super().__init__(message)
        self.error_type = error_type
        self.retryable = retryable


class UpstreamError(RenderException):
    """Render endpoint answered with a non-success status."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message, error_type="upstream", retryable=status_code >= 500)
        self.status_code = status_code


class MissingJobIdError(RenderException):
    """Submission returned neither images nor a job id."""

    def __init__(self, message: str = "Missing job id."):
        super().__init__(message, error_type="missing_job_id", retryable=False)


class RenderFailedError(RenderException):
    """Render job reported a failed status."""

    def __init__(self, message: str = "Render failed."):
        super().__init__(message, error_type="render_failed", retryable=False)


class RenderTimeoutError(RenderException):
    """Polling budget exhausted before the job resolved."""

    def __init__(self, message: str = "Render timed out."):
        super().__init__(message, error_type="timeout", retryable=True)


class EmptyImageError(RenderException):
    """Source image payload is empty."""

    def __init__(self, message: str = "Image is missing."):
        super().__init__(message, error_type="precondition", retryable=False)
