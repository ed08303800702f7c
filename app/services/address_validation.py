"""
Google Address Validation integration.

Validation fails open: when the API key is missing, the service errors or
times out, the address is accepted as provisionally valid with verdict ERROR.
A bad address is caught again before shipment; blocking intake is worse.
"""

import logging
from typing import Optional

import httpx
from pydantic import BaseModel

from .. import config
from ..models import AddressStatus

logger = logging.getLogger(__name__)

VERDICT_VALID = "VALID"
VERDICT_CORRECTABLE = "CORRECTABLE"
VERDICT_UNDELIVERABLE = "UNDELIVERABLE"
VERDICT_ERROR = "ERROR"

ADDRESS_STATUS_BY_VERDICT = {
    VERDICT_VALID: AddressStatus.VERIFIED.value,
    VERDICT_CORRECTABLE: AddressStatus.CORRECTABLE.value,
    VERDICT_UNDELIVERABLE: AddressStatus.UNDELIVERABLE.value,
    VERDICT_ERROR: AddressStatus.UNVERIFIED.value,
}


class AddressInput(BaseModel):
    street: str
    apartment: Optional[str] = None
    city: str
    state: str
    zip: str


class AddressValidationResult(BaseModel):
    isValid: bool
    verdict: str
    originalAddress: AddressInput
    suggestedAddress: Optional[AddressInput] = None
    message: Optional[str] = None

    @property
    def address_status(self) -> str:
        return ADDRESS_STATUS_BY_VERDICT[self.verdict]


def _build_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=config.ADDRESS_VALIDATION_TIMEOUT)


def _fail_open(address: AddressInput, message: str) -> AddressValidationResult:
    return AddressValidationResult(
        isValid=True, verdict=VERDICT_ERROR, originalAddress=address, message=message
    )


def _component(components: list[dict], component_type: str) -> Optional[str]:
    for c in components:
        if c.get("componentType") == component_type:
            return (c.get("componentName") or {}).get("text")
    return None


def parse_validation_response(address: AddressInput, data: dict) -> AddressValidationResult:
    """Turn a validateAddress response body into a verdict"""
    result = data.get("result") or {}
    address_complete = (result.get("verdict") or {}).get("addressComplete")
    components = (result.get("address") or {}).get("addressComponents") or []
    levels = {c.get("confirmationLevel") for c in components}

    if "UNCONFIRMED_AND_SUSPICIOUS" in levels or not address_complete:
        return AddressValidationResult(
            isValid=False,
            verdict=VERDICT_UNDELIVERABLE,
            originalAddress=address,
            message="This address cannot be verified. Please check and try again.",
        )

    street_number = _component(components, "street_number") or ""
    route = _component(components, "route") or ""
    suggested = AddressInput(
        street=f"{street_number} {route}".strip() or address.street,
        apartment=_component(components, "subpremise") or address.apartment,
        city=_component(components, "locality") or address.city,
        state=_component(components, "administrative_area_level_1") or address.state,
        zip=_component(components, "postal_code") or address.zip,
    )

    if "UNCONFIRMED_BUT_PLAUSIBLE" in levels:
        return AddressValidationResult(
            isValid=False,
            verdict=VERDICT_CORRECTABLE,
            originalAddress=address,
            suggestedAddress=suggested,
            message="We found a similar address. Please review the suggestion.",
        )

    return AddressValidationResult(
        isValid=True, verdict=VERDICT_VALID, originalAddress=address, suggestedAddress=suggested
    )


async def validate_address(address: AddressInput) -> AddressValidationResult:
    """Validate a US mailing address with the Google Address Validation API"""
    if not config.GOOGLE_MAPS_API_KEY:
        logger.warning("⚠️ GOOGLE_MAPS_API_KEY not configured - accepting address without validation")
        return _fail_open(address, "Address validation unavailable")

    address_line = f"{address.street}, {address.apartment}" if address.apartment else address.street
    payload = {
        "address": {
            "regionCode": "US",
            "locality": address.city,
            "administrativeArea": address.state,
            "postalCode": address.zip,
            "addressLines": [address_line],
        }
    }

    try:
        async with _build_client() as client:
            resp = await client.post(
                config.ADDRESS_VALIDATION_URL,
                params={"key": config.GOOGLE_MAPS_API_KEY},
                json=payload,
            )
            resp.raise_for_status()
            data = resp.json()
    except httpx.TimeoutException:
        logger.warning("⚠️ Address validation timed out - accepting address provisionally")
        return _fail_open(address, "Address validation service unavailable. Proceeding without validation.")
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"⚠️ Address validation failed ({e}) - accepting address provisionally")
        return _fail_open(address, "Address validation service unavailable. Proceeding without validation.")

    result = parse_validation_response(address, data)
    logger.info(f"✅ Address validated: verdict={result.verdict}")
    return result
