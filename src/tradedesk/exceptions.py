"""Custom exceptions for the futures dashboard backend.

The signed exchange gateway never raises across its boundary (it returns
tagged ApiResult values). These exceptions are raised by the service layer
and translated into JSON error responses by the dashboard routes.
"""


class DeskError(Exception):
    """Base exception for all dashboard backend errors."""


class ConfigurationError(DeskError):
    """Raised when credentials or required settings are missing or invalid."""


class DataShapeError(DeskError):
    """Raised when an upstream response does not have the expected structure."""


class UpstreamRequestError(DeskError):
    """Raised when a gateway call fails and the caller needs an exception.

    Carries the error kind and HTTP status code of the failed ApiResult.
    """

    def __init__(self, message: str, kind: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


class TableStoreError(DeskError):
    """Raised when the configuration table-store backend call fails.

    ``status_code`` is the HTTP status to surface to the dashboard client
    (upstream status for non-2xx responses, 408 for timeouts, 500 otherwise).
    """

    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message)
        self.status_code = status_code
