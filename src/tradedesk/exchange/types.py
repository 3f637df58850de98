"""Exchange-specific type definitions for the signed Binance gateway.

The gateway reports outcomes as ApiResult values tagged with an ErrorKind
instead of raising, so callers decide what is fatal and what is skippable.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

# Returns the current time as integer Unix milliseconds.
Clock = Callable[[], int]


def now_ms() -> int:
    """Default clock: current wall time in Unix milliseconds."""
    return int(time.time() * 1000)


class ErrorKind(str, Enum):
    """Failure classes reported by the gateway."""

    CONFIGURATION = "configuration"  # missing/invalid credentials, never retryable
    TRANSPORT = "transport"  # network failure, retryable by the caller
    TIMEOUT = "timeout"  # request exceeded the fixed timeout
    UPSTREAM = "upstream"  # non-2xx HTTP response
    DATA_SHAPE = "data_shape"  # 2xx response with an unexpected body
    INVALID_REQUEST = "invalid_request"  # caller passed reserved/invalid parameters


@dataclass(frozen=True)
class Credential:
    """API key pair used to sign requests.

    Immutable; the secret is never included in repr or log output.
    """

    key: str
    secret: str

    @property
    def is_complete(self) -> bool:
        return bool(self.key) and bool(self.secret)

    def __repr__(self) -> str:
        return f"Credential(key={'set' if self.key else 'unset'}, secret=***)"


@dataclass(frozen=True)
class SignedRequest:
    """A request whose signature covers exactly ``query_string``."""

    method: str
    path: str
    params: tuple[tuple[str, str], ...]  # caller params + timestamp, in order
    query_string: str  # exact bytes covered by the signature
    timestamp: int
    signature: str

    @property
    def url(self) -> str:
        """Path plus the exact signed query and the appended signature."""
        return f"{self.path}?{self.query_string}&signature={self.signature}"


@dataclass
class ApiResult:
    """Uniform success/failure result of a gateway call."""

    success: bool
    data: Any = None
    error: str | None = None
    error_kind: ErrorKind | None = None
    status_code: int | None = None

    @classmethod
    def ok(cls, data: Any, status_code: int | None = 200) -> "ApiResult":
        return cls(success=True, data=data, status_code=status_code)

    @classmethod
    def fail(
        cls,
        kind: ErrorKind,
        error: str,
        status_code: int | None = None,
    ) -> "ApiResult":
        return cls(success=False, error=error, error_kind=kind, status_code=status_code)

    def to_dict(self) -> dict:
        """Serialize to the ``{success, data}`` / ``{success, error}`` wire shape."""
        if self.success:
            return {"success": True, "data": self.data}
        return {"success": False, "error": self.error}
