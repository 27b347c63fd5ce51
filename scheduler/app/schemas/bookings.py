# scheduler/app/schemas/bookings.py
"""
Pydantic schemas for booking requests.

POST /resources/{id}/book-batch  → BookBatchRequest (one date)
POST /resources/{id}/book-multi  → BookMultiRequest (several dates)
"""

from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, Field, PlainSerializer

# Amounts travel as JSON numbers, not strings
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class SlotPayload(BaseModel):
    """Single grid slot on one unit."""
    start_time: str = Field(alias="startTime", pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    end_time: str = Field(alias="endTime", pattern=r"^([01]\d|2[0-4]):[0-5]\d$")
    unit: int = Field(default=1, ge=1)

    model_config = {"populate_by_name": True}


class ParticipantPayload(BaseModel):
    """Share of the total paid by one participant."""
    email: str
    amount: Money


class DayPayload(BaseModel):
    """Slots booked on one date."""
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    slots: list[SlotPayload] = Field(min_length=1)

    model_config = {"populate_by_name": True}


class BookBatchRequest(DayPayload):
    """Request body for a single-date booking."""
    participants: Optional[list[ParticipantPayload]] = None


class BookMultiRequest(BaseModel):
    """Request body for a booking spanning several dates."""
    days: list[DayPayload] = Field(min_length=1)
    participants: Optional[list[ParticipantPayload]] = None


def dump_request(request: BookBatchRequest | BookMultiRequest) -> dict:
    """JSON body with camelCase keys, without empty optional sections."""
    return request.model_dump(mode="json", by_alias=True, exclude_none=True)
