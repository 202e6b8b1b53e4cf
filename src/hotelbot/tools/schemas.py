"""Pydantic argument schemas for the LangChain tools. The session is bound separately."""
from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, Field


class NoInput(BaseModel):
    """Tool takes no arguments."""


class AvailabilityInput(BaseModel):
    check_in: str = Field(description="Check-in date (YYYY-MM-DD)")
    check_out: str = Field(description="Check-out date (YYYY-MM-DD)")


class CreateReservationInput(BaseModel):
    room_id: int = Field(description="Room ID (integer only)")
    check_in: str = Field(description="Check-in date (YYYY-MM-DD)")
    check_out: str = Field(description="Check-out date (YYYY-MM-DD)")
    guests: int = Field(default=1, description="Number of guests")
    customer_id: Optional[int] = Field(default=None, description="Customer ID, staff bookings only")


class UpdateReservationInput(BaseModel):
    reservation_id: Union[int, str] = Field(description="Reservation ID or RSV-XXXXXX code")
    room_id: Optional[int] = Field(default=None, description="New room ID")
    check_in: Optional[str] = Field(default=None, description="New check-in date (YYYY-MM-DD)")
    check_out: Optional[str] = Field(default=None, description="New check-out date (YYYY-MM-DD)")
    guests: Optional[int] = Field(default=None, description="New guest count")
    customer_id: Optional[int] = Field(default=None, description="New customer ID, staff only")


class ReservationIdInput(BaseModel):
    reservation_id: Union[int, str] = Field(description="Reservation ID or RSV-XXXXXX code")


class RoomMaintenanceInput(BaseModel):
    room_id: int = Field(description="Room ID (integer only)")
    under_maintenance: bool = Field(description="True to take the room out of service, False to return it")
