"""Exchange client layer -- signed Binance futures REST access via httpx."""

from tradedesk.exchange.client import SignedApiClient
from tradedesk.exchange.signing import build_signed_request, canonical_query, sign
from tradedesk.exchange.types import ApiResult, Credential, ErrorKind, SignedRequest

__all__ = [
    "ApiResult",
    "Credential",
    "ErrorKind",
    "SignedApiClient",
    "SignedRequest",
    "build_signed_request",
    "canonical_query",
    "sign",
]
