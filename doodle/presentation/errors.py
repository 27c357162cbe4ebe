from typing import Optional


class ServiceError(Exception):
    """
    An operation failed unexpectedly.

    Rendered by the app as a 500 ``{"error": message, "details": str(cause)}``.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.details = str(cause) if cause is not None else None
