import asyncio
import json

import httpx
import pytest

from app import config
from app.services import address_validation
from app.services.address_validation import AddressInput, validate_address

ADDRESS = AddressInput(street="1600 Amphitheatre Pkwy", city="Mountain View", state="CA", zip="94043")


def component(component_type, text, level="CONFIRMED"):
    return {
        "componentType": component_type,
        "componentName": {"text": text},
        "confirmationLevel": level,
    }


def google_response(complete=True, route_level="CONFIRMED"):
    return {
        "result": {
            "verdict": {"addressComplete": complete},
            "address": {
                "addressComponents": [
                    component("street_number", "1600"),
                    component("route", "Amphitheatre Parkway", route_level),
                    component("locality", "Mountain View"),
                    component("administrative_area_level_1", "CA"),
                    component("postal_code", "94043"),
                ]
            },
        }
    }


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setattr(config, "GOOGLE_MAPS_API_KEY", "test-key")


@pytest.fixture
def mock_google(monkeypatch, api_key):
    """Route the validator's HTTP calls to ``handler``"""

    def _install(handler):
        monkeypatch.setattr(
            address_validation,
            "_build_client",
            lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

    return _install


def test_missing_key_fails_open(monkeypatch):
    monkeypatch.setattr(config, "GOOGLE_MAPS_API_KEY", None)

    result = asyncio.run(validate_address(ADDRESS))

    assert result.isValid is True
    assert result.verdict == "ERROR"
    assert result.address_status == "unverified"


def test_confirmed_address_is_valid(mock_google):
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=google_response())

    mock_google(handler)
    result = asyncio.run(validate_address(ADDRESS))

    assert result.verdict == "VALID"
    assert result.isValid is True
    assert result.address_status == "verified"
    assert result.suggestedAddress.street == "1600 Amphitheatre Parkway"

    sent = json.loads(requests[0].content)
    assert requests[0].url.params["key"] == "test-key"
    assert sent["address"]["regionCode"] == "US"
    assert sent["address"]["postalCode"] == "94043"


def test_plausible_address_is_correctable(mock_google):
    body = google_response(route_level="UNCONFIRMED_BUT_PLAUSIBLE")
    mock_google(lambda request: httpx.Response(200, json=body))

    result = asyncio.run(validate_address(ADDRESS))

    assert result.verdict == "CORRECTABLE"
    assert result.isValid is False
    assert result.suggestedAddress is not None


@pytest.mark.parametrize(
    "body",
    [
        google_response(complete=False),
        google_response(route_level="UNCONFIRMED_AND_SUSPICIOUS"),
        {},
    ],
)
def test_suspicious_or_incomplete_address_is_undeliverable(mock_google, body):
    mock_google(lambda request: httpx.Response(200, json=body))

    result = asyncio.run(validate_address(ADDRESS))

    assert result.verdict == "UNDELIVERABLE"
    assert result.address_status == "undeliverable"


def test_timeout_fails_open(mock_google):
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    mock_google(handler)
    result = asyncio.run(validate_address(ADDRESS))

    assert result.verdict == "ERROR"
    assert result.isValid is True


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="upstream error"),
        httpx.Response(200, text="<html>not json</html>"),
    ],
)
def test_service_errors_fail_open(mock_google, response):
    mock_google(lambda request: response)

    result = asyncio.run(validate_address(ADDRESS))

    assert result.verdict == "ERROR"
    assert result.isValid is True
