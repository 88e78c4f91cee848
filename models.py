import uuid
from typing import Optional
from datetime import date, datetime, timezone
from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint

# Society lifecycle
SOCIETY_PENDING = "pending_verification"
SOCIETY_ACTIVE = "active"
SOCIETY_REJECTED = "rejected"

# Membership lifecycle
MEMBER_PENDING = "pending"
MEMBER_ACTIVE = "active"

MEMBER_ROLES = ("resident", "watchman", "secretary", "admin")

# Roles allowed to manage society-wide records such as facilities
MANAGER_ROLES = ("secretary", "admin")


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Society(SQLModel, table=True):
    __tablename__ = "societies"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    address: str
    city: str
    state: str
    pincode: str
    status: str = Field(default=SOCIETY_PENDING, index=True)
    secretary_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class SocietyMember(SQLModel, table=True):
    __tablename__ = "society_members"
    __table_args__ = (
        UniqueConstraint("society_id", "user_id", name="unique_society_member"),
    )

    id: str = Field(default_factory=new_id, primary_key=True)
    society_id: str = Field(foreign_key="societies.id", index=True)
    user_id: str = Field(index=True)
    role: str = "resident"
    status: str = MEMBER_PENDING
    created_at: datetime = Field(default_factory=utcnow)


class Facility(SQLModel, table=True):
    __tablename__ = "facilities"

    id: str = Field(default_factory=new_id, primary_key=True)
    society_id: str = Field(foreign_key="societies.id", index=True)
    name: str
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class Booking(SQLModel, table=True):
    __tablename__ = "facility_bookings"
    __table_args__ = (
        # Database-level protection against double booking
        UniqueConstraint(
            "facility_id", "booking_date", "start_time", name="unique_facility_slot"
        ),
    )

    id: str = Field(default_factory=new_id, primary_key=True)
    facility_id: str = Field(foreign_key="facilities.id", index=True)
    society_id: str = Field(foreign_key="societies.id", index=True)
    user_id: str = Field(index=True)
    booking_date: date = Field(index=True)
    start_time: str  # "HH:MM", one of slots.TIME_SLOTS
    end_time: str
    created_at: datetime = Field(default_factory=utcnow)


class UserPreference(SQLModel, table=True):
    __tablename__ = "user_preferences"

    user_id: str = Field(primary_key=True)
    key: str = Field(primary_key=True)
    value: str
    updated_at: datetime = Field(default_factory=utcnow)
