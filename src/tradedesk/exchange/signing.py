"""HMAC-SHA256 request signing for the Binance futures REST API.

The signature is computed over the canonical query string: parameters
form-encoded in insertion order as ``key=value`` joined by ``&``, with
``timestamp`` appended last. The same string is transmitted verbatim, so
nothing may be reordered or added between signing and sending.
"""

import hashlib
import hmac
from collections.abc import Iterable, Mapping
from urllib.parse import urlencode

from tradedesk.exchange.types import Credential, SignedRequest

RESERVED_PARAMS = frozenset({"timestamp", "signature"})

Params = Mapping[str, object] | Iterable[tuple[str, object]]


def _format_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def normalize_params(params: Params | None) -> list[tuple[str, str]]:
    """Return params as an ordered list of string pairs, dropping None values."""
    if params is None:
        return []
    items = params.items() if isinstance(params, Mapping) else params
    return [(str(k), _format_value(v)) for k, v in items if v is not None]


def canonical_query(params: Params | None) -> str:
    """Serialize params to the canonical ``key=value&...`` query string."""
    return urlencode(normalize_params(params))


def sign(query: str, secret: str) -> str:
    """Return the hex HMAC-SHA256 digest of ``query`` keyed by ``secret``."""
    return hmac.new(
        secret.encode("utf-8"), query.encode("utf-8"), hashlib.sha256
    ).hexdigest()


def build_signed_request(
    method: str,
    path: str,
    params: Params | None,
    credential: Credential,
    timestamp: int,
) -> SignedRequest:
    """Stamp, canonicalize, and sign a request.

    Args:
        method: HTTP method.
        path: API path, e.g. ``/fapi/v1/userTrades``.
        params: Caller parameters; must not contain ``timestamp`` or ``signature``.
        credential: Key pair whose secret keys the HMAC.
        timestamp: Request time in Unix milliseconds.

    Raises:
        ValueError: If params contain a reserved name.
    """
    pairs = normalize_params(params)
    reserved = RESERVED_PARAMS.intersection(k for k, _ in pairs)
    if reserved:
        raise ValueError(f"Reserved parameter(s) supplied: {', '.join(sorted(reserved))}")

    pairs.append(("timestamp", str(timestamp)))
    query = urlencode(pairs)
    signature = sign(query, credential.secret)
    return SignedRequest(
        method=method.upper(),
        path=path,
        params=tuple(pairs),
        query_string=query,
        timestamp=timestamp,
        signature=signature,
    )
