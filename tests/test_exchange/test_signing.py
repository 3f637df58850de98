"""Tests for canonical query serialization and HMAC request signing."""

import pytest

from tradedesk.exchange.signing import build_signed_request, canonical_query, sign
from tradedesk.exchange.types import Credential

# Published Binance API documentation example (HMAC SHA256 signature section)
DOC_SECRET = "NhqPtmdSJYdKjVHjA7PZj4Mge3R5YNiP1e3UZjInClVN65XAbvqqM6A7H5fATj0j"
DOC_QUERY = (
    "symbol=LTCBTC&side=BUY&type=LIMIT&timeInForce=GTC&quantity=1"
    "&price=0.1&recvWindow=5000&timestamp=1499827319559"
)
DOC_SIGNATURE = "c8db56825ae71d6d79447849e617115f4a920fa2acdcab2b053c4b2838bd6b71"


class TestCanonicalQuery:
    def test_preserves_insertion_order(self) -> None:
        query = canonical_query({"symbol": "BTCUSDT", "limit": 50, "startTime": 1})
        assert query == "symbol=BTCUSDT&limit=50&startTime=1"

    def test_drops_none_values(self) -> None:
        query = canonical_query({"symbol": None, "limit": 1000})
        assert query == "limit=1000"

    def test_accepts_pair_sequences(self) -> None:
        assert canonical_query([("b", 2), ("a", 1)]) == "b=2&a=1"

    def test_booleans_are_lowercase(self) -> None:
        assert canonical_query({"reduceOnly": True}) == "reduceOnly=true"

    def test_empty(self) -> None:
        assert canonical_query(None) == ""
        assert canonical_query({}) == ""


class TestSign:
    def test_matches_documented_vector(self) -> None:
        assert sign(DOC_QUERY, DOC_SECRET) == DOC_SIGNATURE

    def test_deterministic(self) -> None:
        assert sign("a=1&timestamp=5", "s") == sign("a=1&timestamp=5", "s")

    def test_changes_with_any_parameter(self) -> None:
        base = sign("symbol=BTCUSDT&limit=50&timestamp=5", "s")
        assert sign("symbol=BTCUSDT&limit=51&timestamp=5", "s") != base
        assert sign("symbol=ETHUSDT&limit=50&timestamp=5", "s") != base
        assert sign("symbol=BTCUSDT&limit=50&timestamp=6", "s") != base

    def test_changes_with_secret(self) -> None:
        assert sign("a=1", "secret-1") != sign("a=1", "secret-2")

    def test_is_lowercase_hex(self) -> None:
        signature = sign("a=1", "s")
        assert len(signature) == 64
        assert all(c in "0123456789abcdef" for c in signature)


class TestBuildSignedRequest:
    def test_timestamp_appended_last(self, credential: Credential) -> None:
        request = build_signed_request(
            "get", "/fapi/v1/userTrades", {"symbol": "BTCUSDT", "limit": 10}, credential, 1234
        )
        assert request.method == "GET"
        assert request.query_string == "symbol=BTCUSDT&limit=10&timestamp=1234"
        assert request.params[-1] == ("timestamp", "1234")

    def test_signature_covers_transmitted_query(self, credential: Credential) -> None:
        request = build_signed_request(
            "GET", "/fapi/v1/income", {"incomeType": "REALIZED_PNL"}, credential, 99
        )
        assert request.signature == sign(request.query_string, credential.secret)
        assert request.url == (
            f"/fapi/v1/income?{request.query_string}&signature={request.signature}"
        )

    def test_identical_inputs_give_identical_signature(self, credential: Credential) -> None:
        params = {"symbol": "BTCUSDT", "startTime": 1, "endTime": 2}
        first = build_signed_request("GET", "/p", params, credential, 42)
        second = build_signed_request("GET", "/p", params, credential, 42)
        assert first.signature == second.signature

    def test_altered_parameter_changes_signature(self, credential: Credential) -> None:
        first = build_signed_request("GET", "/p", {"endTime": 2}, credential, 42)
        second = build_signed_request("GET", "/p", {"endTime": 3}, credential, 42)
        assert first.signature != second.signature

    @pytest.mark.parametrize("reserved", ["timestamp", "signature"])
    def test_rejects_reserved_params(self, credential: Credential, reserved: str) -> None:
        with pytest.raises(ValueError, match=reserved):
            build_signed_request("GET", "/p", {reserved: "1"}, credential, 42)

    def test_no_params_signs_timestamp_only(self, credential: Credential) -> None:
        request = build_signed_request("GET", "/fapi/v2/account", None, credential, 7)
        assert request.query_string == "timestamp=7"


class TestCredential:
    def test_repr_hides_secret(self, credential: Credential) -> None:
        assert "test-api-secret" not in repr(credential)
        assert "test-api-key" not in repr(credential)

    def test_is_complete(self) -> None:
        assert Credential("k", "s").is_complete
        assert not Credential("", "s").is_complete
        assert not Credential("k", "").is_complete
