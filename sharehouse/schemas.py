"""Pydantic schemas shared across the services."""
from __future__ import annotations

from datetime import datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, EmailStr, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Uniform envelope returned by the booking endpoints."""

    message: Optional[str] = None
    error_code: Optional[str] = Field(default=None, serialization_alias="errorCode")
    data: Optional[T] = None


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    room_number: int = Field(..., gt=0)
    password: str = Field(..., min_length=8)


class UserUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=1, max_length=50)
    profile_picture: Optional[str] = Field(None, max_length=255)
    password: Optional[str] = Field(None, min_length=8)


class UserRead(BaseModel):
    id: int
    username: str
    email: Optional[EmailStr] = None
    room_number: int
    profile_picture: Optional[str] = None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class SessionRead(BaseModel):
    """Fresh token issued after a profile change, with the current user state."""

    user: UserRead
    token: Token


class SharedSpaceRead(BaseModel):
    id: int
    name_code: str
    name_en: str
    name_jp: str
    description_en: Optional[str] = None
    description_jp: Optional[str] = None
    picture: Optional[str] = None
    start_day_time: str
    end_day_time: str
    max_booking_hours: int
    max_booking_by_user: int

    model_config = {"from_attributes": True}


class BookingProposal(BaseModel):
    """Create or update intent. Presence of fields is checked by the scheduler."""

    shared_space_id: Optional[int] = None
    booking_id: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class BookingRead(BaseModel):
    id: int
    shared_space_id: int
    user_id: int
    username: str
    room_number: int
    picture: Optional[str] = None
    start_date: datetime
    end_date: datetime
    start_local: Optional[str] = None
    end_local: Optional[str] = None


class BookingDeleted(BaseModel):
    id: int
    room_number: int


class BookingCount(BaseModel):
    shared_space_id: int
    count: int
    max_booking_by_user: int
    remaining: int
