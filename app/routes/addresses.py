"""
Address validation endpoint.

Proxies the Google Address Validation API so the key stays server-side.
Always answers 200: an unavailable validator yields verdict ERROR with
isValid=true.
"""

from fastapi import APIRouter, Depends
from pydantic import field_validator

from ..auth import get_current_account
from ..services.address_validation import AddressInput, AddressValidationResult, validate_address
from ..shared.validators import validate_state_code, validate_us_zip

router = APIRouter(prefix="/addresses", tags=["Addresses"])


class AddressValidationRequest(AddressInput):
    @field_validator("street", "city")
    @classmethod
    def validate_required(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Missing required address field")
        return v

    @field_validator("state")
    @classmethod
    def validate_state(cls, v):
        return validate_state_code(v)

    @field_validator("zip")
    @classmethod
    def validate_zip(cls, v):
        return validate_us_zip(v)


@router.post(
    "/validate",
    response_model=AddressValidationResult,
    dependencies=[Depends(get_current_account)],
)
async def validate(data: AddressValidationRequest):
    """Validate a US mailing address"""
    return await validate_address(AddressInput(**data.model_dump()))
