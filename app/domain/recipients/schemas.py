"""Recipient domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from ...domain.calendar.vocabulary import PERSONAL_OCCASIONS, OccasionType, Relationship
from ...shared.validators import sanitize_note, validate_name, validate_state_code, validate_us_zip

REQUIRED_UPDATE_FIELDS = (
    "firstName",
    "lastName",
    "relationship",
    "street",
    "city",
    "state",
    "zip",
    "country",
)
ADDRESS_FIELDS = {"street", "apartment", "city", "state", "zip"}


class OccasionCreate(BaseModel):
    """Schema for adding an occasion to a recipient"""

    occasionType: OccasionType
    # Required for Birthday/Anniversary; ignored for holidays and Just Because
    occasionDate: Optional[date] = None
    notes: Optional[str] = None
    confirmDuplicate: bool = False

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v):
        return sanitize_note(v)

    @model_validator(mode="after")
    def check_date(self):
        if self.occasionType in PERSONAL_OCCASIONS:
            if self.occasionDate is None:
                raise ValueError(f"{self.occasionType.value} requires a date")
        else:
            # Holiday dates are derived per year; Just Because dates are computed
            self.occasionDate = None
        return self


class OccasionUpdate(BaseModel):
    """Schema for updating an existing occasion"""

    occasionDate: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v):
        return sanitize_note(v)


class RecipientCreate(BaseModel):
    """Schema for creating a recipient together with its occasions"""

    firstName: str
    lastName: str
    partnerFirstName: Optional[str] = None
    partnerLastName: Optional[str] = None
    relationship: Relationship
    street: str
    apartment: Optional[str] = None
    city: str
    state: str
    zip: str
    country: str = "United States"
    notes: Optional[str] = None
    occasions: list[OccasionCreate] = []
    # One optional note per occasion type, applied to occasions without their own note
    occasionNotes: dict[OccasionType, Optional[str]] = {}

    @field_validator("firstName", "lastName", "partnerFirstName", "partnerLastName")
    @classmethod
    def validate_names(cls, v):
        return validate_name(v)

    @field_validator("state")
    @classmethod
    def validate_state(cls, v):
        return validate_state_code(v)

    @field_validator("zip")
    @classmethod
    def validate_zip(cls, v):
        return validate_us_zip(v)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v):
        return sanitize_note(v)

    @field_validator("occasionNotes")
    @classmethod
    def validate_occasion_notes(cls, v):
        return {k: sanitize_note(note) for k, note in v.items()}

    @model_validator(mode="after")
    def apply_occasion_notes(self):
        for occasion in self.occasions:
            if occasion.notes is None:
                occasion.notes = self.occasionNotes.get(occasion.occasionType)
        return self


class RecipientUpdate(BaseModel):
    """Schema for updating an existing recipient"""

    firstName: Optional[str] = None
    lastName: Optional[str] = None
    partnerFirstName: Optional[str] = None
    partnerLastName: Optional[str] = None
    relationship: Optional[Relationship] = None
    street: Optional[str] = None
    apartment: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("firstName", "lastName", "partnerFirstName", "partnerLastName")
    @classmethod
    def validate_names(cls, v):
        return validate_name(v)

    @field_validator("state")
    @classmethod
    def validate_state(cls, v):
        return validate_state_code(v)

    @field_validator("zip")
    @classmethod
    def validate_zip(cls, v):
        return validate_us_zip(v)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v):
        return sanitize_note(v)

    @model_validator(mode="after")
    def check_required_not_cleared(self):
        # Only the optional fields may be sent as null to clear them
        for field in REQUIRED_UPDATE_FIELDS:
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be cleared")
        return self

    def has_address_change(self) -> bool:
        return bool(self.model_fields_set & ADDRESS_FIELDS)


class OccasionResponse(BaseModel):
    """Schema for occasion response"""

    id: int
    recipientId: int
    occasionType: str
    occasionDate: Optional[date] = None
    notes: Optional[str] = None
    isJustBecause: bool
    computedSendDate: Optional[date] = None
    cardVariation: Optional[str] = None
    lastSentYear: Optional[int] = None

    class Config:
        from_attributes = True


class CardAllocationResponse(BaseModel):
    """Schema for card allocation response"""

    scheduledCards: int
    subscriptionCards: int
    extraCards: int
    totalAvailable: int
    shortfall: int
    isOverLimit: bool


class OccasionMutationResponse(BaseModel):
    """Occasion after an add/edit, with the recomputed allocation for over-capacity warnings"""

    occasion: OccasionResponse
    allocation: CardAllocationResponse


class RecipientResponse(BaseModel):
    """Schema for recipient response"""

    id: int
    firstName: str
    lastName: str
    partnerFirstName: Optional[str] = None
    partnerLastName: Optional[str] = None
    displayName: str
    relationship: str
    street: str
    apartment: Optional[str] = None
    city: str
    state: str
    zip: str
    country: str
    addressStatus: str
    notes: Optional[str] = None
    occasions: list[OccasionResponse] = []
    inFlightOrders: int = 0
    isLocked: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
