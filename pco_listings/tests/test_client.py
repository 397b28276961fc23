"""
Tests for the Planning Center API client.

Uses httpx.MockTransport in place of the real API.
"""

import asyncio
import base64
import json

import httpx
import pytest

from pco_listings.client import PlanningCenterClient
from pco_listings.errors import (
    BadResponseError,
    InvalidPayloadError,
    MissingCredentialsError,
    PlanningCenterError,
    PlanningCenterRequestError,
)

ENDPOINT = "https://api.planningcenteronline.com/groups/v2/groups"


def fetch_with(handler, limit=5, app_id="app-id", app_secret="s3cret"):
    """Run client.fetch against a mock transport handler."""
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = PlanningCenterClient(app_id, app_secret, http_client=http)
            return await client.fetch(ENDPOINT, limit)

    return asyncio.run(run())


def json_response(payload, status=200):
    def handler(request):
        return httpx.Response(status, content=json.dumps(payload).encode())
    return handler


class TestFetchRequest:
    """Tests for the outgoing request."""

    def test_sends_basic_auth_and_page_size(self):
        """Should send Basic auth and the per_page parameter."""
        seen = {}

        def handler(request):
            seen["request"] = request
            return httpx.Response(200, json={"data": []})

        fetch_with(handler, limit=7)

        request = seen["request"]
        expected = base64.b64encode(b"app-id:s3cret").decode()
        assert request.method == "GET"
        assert request.headers["authorization"] == f"Basic {expected}"
        assert request.url.params["per_page"] == "7"
        assert str(request.url).startswith(ENDPOINT)

    @pytest.mark.parametrize("app_id,app_secret", [("", "s3cret"), ("app-id", ""), (None, None)])
    def test_missing_credentials_makes_no_request(self, app_id, app_secret):
        """Should fail before any request when a credential is empty."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"data": []})

        with pytest.raises(MissingCredentialsError):
            fetch_with(handler, app_id=app_id, app_secret=app_secret)

        assert calls == []


class TestFetchResponse:
    """Tests for response validation."""

    def test_returns_data_array(self):
        """Should return the data array unchanged."""
        items = [{"id": "1", "attributes": {"name": "Group"}}]

        assert fetch_with(json_response({"data": items, "meta": {}})) == items

    def test_empty_data_array(self):
        """Should accept an empty data array."""
        assert fetch_with(json_response({"data": []})) == []

    @pytest.mark.parametrize("status", [199, 301, 401, 404, 500])
    def test_non_2xx_status(self, status):
        """Should reject statuses outside 200-299."""
        with pytest.raises(BadResponseError) as exc_info:
            fetch_with(json_response({"data": []}, status=status))

        assert exc_info.value.status_code == status
        assert exc_info.value.code == "bad_response"

    def test_2xx_other_than_200_accepted(self):
        """Should accept any 2xx status."""
        assert fetch_with(json_response({"data": [{"id": "1"}]}, status=203)) == [{"id": "1"}]

    @pytest.mark.parametrize("payload", [
        {"errors": [{"title": "Forbidden"}]},
        {"data": None},
        {"data": {"id": "1"}},
        [{"id": "1"}],
        "data",
    ])
    def test_invalid_payload_shapes(self, payload):
        """Should reject bodies without a data list."""
        with pytest.raises(InvalidPayloadError):
            fetch_with(json_response(payload))

    def test_non_json_body(self):
        """Should reject non-JSON bodies and keep a preview."""
        def handler(request):
            return httpx.Response(200, content=b"<html>maintenance</html>")

        with pytest.raises(InvalidPayloadError) as exc_info:
            fetch_with(handler)

        assert exc_info.value.body_preview == "<html>maintenance</html>"

    def test_transport_error_is_wrapped(self):
        """Should wrap httpx transport errors."""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(PlanningCenterRequestError) as exc_info:
            fetch_with(handler)

        assert isinstance(exc_info.value, PlanningCenterError)
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


class TestClientLifecycle:
    """Tests for shared client ownership."""

    def test_shared_client_left_open(self):
        """Should not close a caller-owned client."""
        async def run():
            http = httpx.AsyncClient(transport=httpx.MockTransport(json_response({"data": []})))
            client = PlanningCenterClient("id", "secret", http_client=http)
            await client.fetch(ENDPOINT, 1)
            closed = http.is_closed
            await http.aclose()
            return closed

        assert asyncio.run(run()) is False
