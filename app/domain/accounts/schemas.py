"""Account domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_name, validate_state_code, validate_us_zip


class ReturnAddressUpdate(BaseModel):
    """Schema for replacing the default return address printed on envelopes"""

    fullName: Optional[str] = None
    street: str
    apartment: Optional[str] = None
    city: str
    state: str
    zip: str

    @field_validator("fullName")
    @classmethod
    def validate_full_name(cls, v):
        return validate_name(v)

    @field_validator("street", "city")
    @classmethod
    def validate_required(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Missing required address field")
        return v

    @field_validator("apartment")
    @classmethod
    def validate_apartment(cls, v):
        if v is None:
            return v
        return v.strip() or None

    @field_validator("state")
    @classmethod
    def validate_state(cls, v):
        return validate_state_code(v)

    @field_validator("zip")
    @classmethod
    def validate_zip(cls, v):
        return validate_us_zip(v)


class ReturnAddressResponse(BaseModel):
    name: str
    street: str
    apartment: Optional[str] = None
    city: str
    state: str
    zip: str


class AccountResponse(BaseModel):
    """Schema for the signed-in account"""

    id: int
    email: str
    fullName: Optional[str] = None
    plan: Optional[str] = None
    subscriptionStatus: Optional[str] = None
    cardCredits: int
    returnAddress: Optional[ReturnAddressResponse] = None

    class Config:
        from_attributes = True
