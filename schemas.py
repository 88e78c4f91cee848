# Pydantic Schemas for Request/Response
from datetime import date
from typing import List, Optional

from pydantic import BaseModel


class SocietyCreate(BaseModel):
    name: str
    address: str
    city: str
    state: str
    pincode: str


class SocietyReview(BaseModel):
    approve: bool


class SocietyRead(BaseModel):
    id: str
    name: str
    address: str
    city: str
    state: str
    pincode: str
    status: str


class MemberCreate(BaseModel):
    role: str = "resident"


class MemberRead(BaseModel):
    id: str
    society_id: str
    user_id: str
    role: str
    status: str


class SelectedSociety(BaseModel):
    society_id: Optional[str]


class FacilityCreate(BaseModel):
    name: str
    description: Optional[str] = None


class FacilityRead(BaseModel):
    id: str
    society_id: str
    name: str
    description: Optional[str]


class BookingCreate(BaseModel):
    facility_id: str
    booking_date: date
    start_time: str
    end_time: str


class BookingRead(BaseModel):
    id: str
    facility_id: str
    society_id: str
    user_id: str
    booking_date: date
    start_time: str
    end_time: str


class SlotOptions(BaseModel):
    time_slots: List[str]
    start_times: List[str]
    default_end_times: dict


class SlotStatus(BaseModel):
    start_time: str
    status: str
    booking_id: Optional[str]


class FacilitySchedule(BaseModel):
    facility_id: str
    facility_name: str
    schedule: List[SlotStatus]
