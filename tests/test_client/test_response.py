"""Tests for response body helpers and status mapping."""

from __future__ import annotations

import httpx
import pytest

from plantstore.client.request import build_descriptor, raise_for_status
from plantstore.client.response import error_detail, extract_response_data, json_object
from plantstore.exceptions import TransportError, UnauthorizedError, ValidationError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_response(
    status_code: int = 200,
    json_data: object | None = None,
    text: str | None = None,
) -> httpx.Response:
    """Build an httpx.Response bound to a dummy request."""
    request = httpx.Request("GET", "https://api.example.com/plants")
    if json_data is not None:
        return httpx.Response(status_code, json=json_data, request=request)
    if text is not None:
        return httpx.Response(status_code, text=text, request=request)
    return httpx.Response(status_code, content=b"", request=request)


# ---------------------------------------------------------------------------
# extract_response_data / json_object
# ---------------------------------------------------------------------------


class TestExtractResponseData:
    def test_json_list(self) -> None:
        resp = _make_response(json_data=[{"_id": "1", "title": "Fern"}])
        assert extract_response_data(resp) == [{"_id": "1", "title": "Fern"}]

    def test_text_fallback(self) -> None:
        assert extract_response_data(_make_response(text="Created")) == "Created"

    def test_empty_body_is_none(self) -> None:
        assert extract_response_data(_make_response(204)) is None


class TestJsonObject:
    def test_dict_passes_through(self) -> None:
        assert json_object(_make_response(json_data={"accessToken": "x"})) == {"accessToken": "x"}

    @pytest.mark.parametrize(
        "resp",
        [
            _make_response(json_data=["x"]),
            _make_response(text="not json"),
            _make_response(204),
        ],
    )
    def test_non_objects_become_empty(self, resp: httpx.Response) -> None:
        assert json_object(resp) == {}


# ---------------------------------------------------------------------------
# error_detail / raise_for_status
# ---------------------------------------------------------------------------


class TestErrorDetail:
    def test_message_key(self) -> None:
        resp = _make_response(400, json_data={"message": "Invalid credentials"})
        assert error_detail(resp) == "HTTP 400: Invalid credentials"

    def test_detail_key(self) -> None:
        resp = _make_response(422, json_data={"detail": "bad field"})
        assert error_detail(resp) == "HTTP 422: bad field"

    def test_text_body_truncated(self) -> None:
        resp = _make_response(502, text="x" * 500)
        assert error_detail(resp) == "HTTP 502: " + "x" * 200

    def test_no_body(self) -> None:
        assert error_detail(_make_response(500)) == "HTTP 500"


class TestRaiseForStatus:
    def test_success_is_silent(self) -> None:
        raise_for_status(_make_response(201, json_data={}))

    def test_401_is_unauthorized(self) -> None:
        resp = _make_response(401, json_data={"message": "jwt expired"})
        with pytest.raises(UnauthorizedError) as exc_info:
            raise_for_status(resp)
        assert exc_info.value.response is resp
        assert str(exc_info.value) == "HTTP 401: jwt expired"

    def test_other_errors_are_transport_errors(self) -> None:
        resp = _make_response(409, json_data={"message": "duplicate"})
        with pytest.raises(TransportError) as exc_info:
            raise_for_status(resp)
        assert exc_info.value.status_code == 409
        assert exc_info.value.response is resp


# ---------------------------------------------------------------------------
# build_descriptor
# ---------------------------------------------------------------------------


class TestBuildDescriptor:
    def test_method_upper_cased_and_accept_header_set(self) -> None:
        descriptor = build_descriptor("delete", "plants/1")
        assert descriptor.method == "DELETE"
        assert descriptor.headers == {"Accept": "application/json"}

    def test_authorize_sets_and_clears_header(self) -> None:
        descriptor = build_descriptor("GET", "plants")
        descriptor.authorize("tok")
        assert descriptor.headers["Authorization"] == "Bearer tok"
        descriptor.authorize(None)
        assert "Authorization" not in descriptor.headers

    def test_body_only_sent_when_present(self) -> None:
        assert "json" not in build_descriptor("POST", "auth/refreshToken").to_httpx()
        kwargs = build_descriptor("POST", "plants", {"title": "Fern"}).to_httpx()
        assert kwargs["json"] == {"title": "Fern"}

    def test_headers_copied_per_send(self) -> None:
        descriptor = build_descriptor("GET", "plants")
        kwargs = descriptor.to_httpx()
        kwargs["headers"]["X-Extra"] = "1"
        assert "X-Extra" not in descriptor.headers

    @pytest.mark.parametrize(
        "path", ["http://other.example.com/plants", "//other.example.com/plants"]
    )
    def test_foreign_origin_rejected(self, path: str) -> None:
        with pytest.raises(ValidationError):
            build_descriptor("GET", path)
