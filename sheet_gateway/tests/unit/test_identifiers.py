"""Unit tests for domain value objects - identifiers and requests."""

from __future__ import annotations

import json
from urllib.parse import quote

import pytest

from sheet_gateway.domain.errors import MalformedPayloadError
from sheet_gateway.domain.value_objects import (
    Action,
    GatewayRequest,
    Ref,
    as_text,
    decode_payload,
    numeric_id,
)


@pytest.mark.unit
class TestAsText:
    """Tests for the wire string form of cell values."""

    def test_none_is_empty(self) -> None:
        assert as_text(None) == ""

    def test_integral_float_drops_fraction(self) -> None:
        """A float id read back from the store addresses the same record as its int."""
        assert as_text(3.0) == "3"
        assert as_text(3) == "3"
        assert as_text("3") == "3"

    def test_fractional_float_kept(self) -> None:
        assert as_text(2.5) == "2.5"

    def test_booleans_are_lowercase(self) -> None:
        assert as_text(True) == "true"
        assert as_text(False) == "false"


@pytest.mark.unit
class TestNumericId:
    """Tests for numeric id interpretation."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(7, 7), ("7", 7), (7.0, 7), ("7.0", 7), (" 12 ", 12)],
    )
    def test_numeric(self, value: object, expected: int) -> None:
        assert numeric_id(value) == expected

    @pytest.mark.parametrize("value", ["abc", "", None, 1.5, True, "SKU-1"])
    def test_non_numeric(self, value: object) -> None:
        assert numeric_id(value) is None


@pytest.mark.unit
class TestRef:
    """Tests for batch reference placeholders."""

    def test_parse(self) -> None:
        ref = Ref.parse("__REF(0).id__")
        assert ref == Ref(0, "id")
        assert repr(ref) == "Ref(0.id)"

    def test_str_round_trips(self) -> None:
        assert str(Ref(3, "orderId")) == "__REF(3).orderId__"
        assert Ref.parse(str(Ref(3, "orderId"))) == Ref(3, "orderId")

    @pytest.mark.parametrize(
        "value",
        ["__REF(0)__", "REF(0).id", "prefix __REF(0).id__", "__REF(x).id__", 42, None],
    )
    def test_not_a_placeholder(self, value: object) -> None:
        assert Ref.parse(value) is None

    def test_negative_index_rejected(self) -> None:
        with pytest.raises(ValueError):
            Ref(-1, "id")


@pytest.mark.unit
class TestDecodePayload:
    """Tests for decoding the data parameter."""

    def test_missing(self) -> None:
        assert decode_payload(None) is None
        assert decode_payload("") is None

    def test_uri_encoded(self) -> None:
        raw = quote(json.dumps({"name": "Widget", "category": "Tools & Parts"}))
        assert decode_payload(raw) == {"name": "Widget", "category": "Tools & Parts"}

    def test_raw_json(self) -> None:
        assert decode_payload('{"name": "Widget"}') == {"name": "Widget"}

    def test_malformed(self) -> None:
        with pytest.raises(MalformedPayloadError) as exc_info:
            decode_payload("{not json")
        assert exc_info.value.message == "Invalid JSON data"


@pytest.mark.unit
class TestGatewayRequest:
    """Tests for building requests from flat parameters."""

    def test_defaults(self) -> None:
        request = GatewayRequest.from_params({})
        assert request.action == Action.GET.value
        assert request.sheet == "Products"
        assert request.record_id is None
        assert request.payload is None
        assert request.filters == {}
        assert request.interval == 0

    def test_default_sheet_override(self) -> None:
        request = GatewayRequest.from_params({}, default_sheet="Customers")
        assert request.sheet == "Customers"

    def test_reserved_keys_are_not_filters(self) -> None:
        request = GatewayRequest.from_params(
            {
                "sheet": "Products",
                "action": "get",
                "callback": "cb",
                "t": "1700000000000",
                "token": "secret",
                "limit": "5",
                "category": "Electronics",
                "type": "simple",
            }
        )
        assert request.filters == {"category": "Electronics", "type": "simple"}
        assert request.limit == 5
        assert request.token == "secret"

    def test_payload_is_decoded(self) -> None:
        request = GatewayRequest.from_params(
            {"action": "create", "data": quote('{"name":"Widget"}')}
        )
        assert request.payload == {"name": "Widget"}

    def test_decoded_body_used_as_is(self) -> None:
        request = GatewayRequest.from_params(
            {"action": "create"}, body={"name": "a%20b 100%25"}
        )
        assert request.payload == {"name": "a%20b 100%25"}

    def test_minimal_is_reserved(self) -> None:
        request = GatewayRequest.from_params({"minimal": "true", "category": "Tools"})
        assert request.minimal is True
        assert request.filters == {"category": "Tools"}
        assert GatewayRequest.from_params({"minimal": "no"}).minimal is False

    def test_malformed_payload_raises_before_dispatch(self) -> None:
        with pytest.raises(MalformedPayloadError):
            GatewayRequest.from_params({"action": "create", "data": "{oops"})

    @pytest.mark.parametrize("name", ["offset", "limit", "interval"])
    def test_invalid_numbers(self, name: str) -> None:
        with pytest.raises(MalformedPayloadError):
            GatewayRequest.from_params({name: "-3"})
        with pytest.raises(MalformedPayloadError):
            GatewayRequest.from_params({name: "many"})

    def test_params_kept_for_repoll(self) -> None:
        params = {"window": "products", "interval": "5000", "sheet": "Products"}
        request = GatewayRequest.from_params(params)
        assert request.params == params
        assert request.window == "products"
        assert request.interval == 5000
