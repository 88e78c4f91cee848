"""
Facility, booking and society services.

Each service wraps one request's database session. Authorization decisions
are made here against the SocietyContext, not left to the caller.
"""
import logging
from datetime import date
from typing import Iterable, List, Optional

from fastapi import Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from config import ADMIN_USER_IDS
from context import SocietyContext
from database import commit_or_rollback, get_session
from errors import ConflictError, NotAuthorizedError, NotFoundError, ValidationError
from models import (
    MEMBER_ACTIVE, MEMBER_PENDING, MEMBER_ROLES, SOCIETY_ACTIVE, SOCIETY_PENDING, SOCIETY_REJECTED,
    Booking, Facility, Society, SocietyMember,
)
from slots import TIME_SLOTS, is_slot_taken

logger = logging.getLogger("society_app")

SLOT_TAKEN_MESSAGE = "Time slot already booked"


class FacilityRegistry:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_facilities(self, ctx: SocietyContext) -> List[Facility]:
        result = await self.session.execute(
            select(Facility)
            .where(Facility.society_id == ctx.society_id)
            .order_by(Facility.name)
        )
        return list(result.scalars().all())

    async def get_facility(self, ctx: SocietyContext, facility_id: str) -> Facility:
        facility = await self.session.get(Facility, facility_id)
        if facility is None or facility.society_id != ctx.society_id:
            raise NotFoundError("Facility not found")
        return facility

    async def create_facility(self, ctx: SocietyContext, name: str, description: Optional[str] = None) -> Facility:
        if not ctx.is_manager:
            logger.warning("User %s (%s) tried to add a facility", ctx.user_id, ctx.role)
            raise NotAuthorizedError("Only secretaries can manage facilities")
        if not name or not name.strip():
            raise ValidationError("Name is required")

        facility = Facility(
            society_id=ctx.society_id,
            name=name.strip(),
            description=(description or "").strip() or None,
        )
        self.session.add(facility)
        await commit_or_rollback(self.session, "adding facility")
        await self.session.refresh(facility)
        logger.info("Facility %s (%s) added to society %s", facility.name, facility.id, ctx.society_id)
        return facility


class BookingLedger:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.facilities = FacilityRegistry(session)

    async def list_upcoming_bookings(self, ctx: SocietyContext, today: Optional[date] = None) -> List[Booking]:
        today = today or date.today()
        result = await self.session.execute(
            select(Booking).where(
                Booking.society_id == ctx.society_id,
                Booking.booking_date >= today,
            )
        )
        return list(result.scalars().all())

    async def create_booking(
        self,
        ctx: SocietyContext,
        facility_id: str,
        booking_date: date,
        start_time: str,
        end_time: str,
        known_bookings: Optional[Iterable[Booking]] = None,
    ) -> Booking:
        """Book a facility slot for the acting user.

        The slot is first checked against ``known_bookings`` (the caller's
        cached view, fetched fresh when not given). Two requests racing past
        that check are settled by the unique constraint on the table; the
        loser gets the same ConflictError either way.
        """
        facility = await self.facilities.get_facility(ctx, facility_id)

        if start_time not in TIME_SLOTS or end_time not in TIME_SLOTS:
            raise ValidationError("Start and end time must be hourly slots between 06:00 and 22:00")
        if start_time >= end_time:
            raise ValidationError("End time must be after start time")
        if booking_date < date.today():
            raise ValidationError("Cannot book a date in the past")

        if known_bookings is None:
            known_bookings = await self.list_upcoming_bookings(ctx)
        if is_slot_taken(known_bookings, facility.id, booking_date, start_time):
            logger.warning(
                "Slot %s %s on %s already booked (pre-check)", facility.id, start_time, booking_date
            )
            raise ConflictError(SLOT_TAKEN_MESSAGE)

        booking = Booking(
            facility_id=facility.id,
            society_id=ctx.society_id,
            user_id=ctx.user_id,
            booking_date=booking_date,
            start_time=start_time,
            end_time=end_time,
        )
        self.session.add(booking)
        try:
            await commit_or_rollback(self.session, "booking facility")
        except IntegrityError:
            # The unique constraint caught a booking the pre-check did not see
            logger.warning(
                "Slot %s %s on %s already booked (constraint)", facility_id, start_time, booking_date
            )
            raise ConflictError(SLOT_TAKEN_MESSAGE)

        await self.session.refresh(booking)
        logger.info(
            "User %s booked %s on %s %s-%s", ctx.user_id, facility.name, booking_date, start_time, end_time
        )
        return booking

    async def cancel_booking(self, ctx: SocietyContext, booking_id: str):
        booking = await self.session.get(Booking, booking_id)
        if booking is None or booking.society_id != ctx.society_id:
            raise NotFoundError("Booking not found")
        if booking.user_id != ctx.user_id:
            logger.warning("User %s tried to cancel booking %s owned by %s", ctx.user_id, booking_id, booking.user_id)
            raise NotAuthorizedError("You can only cancel your own bookings")

        await self.session.delete(booking)
        await commit_or_rollback(self.session, "cancelling booking")
        logger.info("Booking %s cancelled by %s", booking_id, ctx.user_id)


class SocietyDirectory:
    """Society registration, admin review and membership."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def register_society(self, user_id: str, name: str, address: str, city: str, state: str, pincode: str) -> Society:
        fields = {"name": name, "address": address, "city": city, "state": state, "pincode": pincode}
        missing = [key for key, value in fields.items() if not value or not value.strip()]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        society = Society(
            **{key: value.strip() for key, value in fields.items()},
            status=SOCIETY_PENDING,
            secretary_id=user_id,
        )
        self.session.add(society)
        self.session.add(SocietyMember(
            society_id=society.id, user_id=user_id, role="secretary", status=MEMBER_ACTIVE
        ))
        await commit_or_rollback(self.session, "registering society")
        await self.session.refresh(society)
        logger.info("Society %s registered by %s, awaiting verification", society.id, user_id)
        return society

    async def review_society(self, user_id: str, society_id: str, approve: bool) -> Society:
        if user_id not in ADMIN_USER_IDS:
            raise NotAuthorizedError("Only platform admins can review societies")
        society = await self.session.get(Society, society_id)
        if society is None:
            raise NotFoundError("Society not found")
        if society.status != SOCIETY_PENDING:
            raise ValidationError(f"Society is already {society.status}")

        society.status = SOCIETY_ACTIVE if approve else SOCIETY_REJECTED
        self.session.add(society)
        await commit_or_rollback(self.session, "reviewing society")
        await self.session.refresh(society)
        logger.info("Society %s marked %s by %s", society_id, society.status, user_id)
        return society

    async def list_user_societies(self, user_id: str) -> List[Society]:
        result = await self.session.execute(
            select(Society)
            .join(SocietyMember, SocietyMember.society_id == Society.id)
            .where(
                SocietyMember.user_id == user_id,
                SocietyMember.status == MEMBER_ACTIVE,
                Society.status == SOCIETY_ACTIVE,
            )
            .order_by(Society.name)
        )
        return list(result.scalars().all())

    async def join_society(self, user_id: str, society_id: str, role: str = "resident") -> SocietyMember:
        if role not in MEMBER_ROLES:
            raise ValidationError(f"Unknown role: {role}")
        # Elevated roles are handed out by the secretary, not self-selected
        if role in ("secretary", "admin"):
            raise NotAuthorizedError("This role cannot be requested")
        society = await self.session.get(Society, society_id)
        if society is None or society.status != SOCIETY_ACTIVE:
            raise NotFoundError("Society not found")

        member = SocietyMember(society_id=society_id, user_id=user_id, role=role, status=MEMBER_PENDING)
        self.session.add(member)
        try:
            await commit_or_rollback(self.session, "joining society")
        except IntegrityError:
            raise ConflictError("You have already requested to join this society")
        await self.session.refresh(member)
        logger.info("User %s requested to join %s as %s", user_id, society_id, role)
        return member

    async def approve_member(self, ctx: SocietyContext, member_id: str) -> SocietyMember:
        if not ctx.is_manager:
            raise NotAuthorizedError("Only secretaries can approve members")
        member = await self.session.get(SocietyMember, member_id)
        if member is None or member.society_id != ctx.society_id:
            raise NotFoundError("Member not found")

        member.status = MEMBER_ACTIVE
        self.session.add(member)
        await commit_or_rollback(self.session, "approving member")
        await self.session.refresh(member)
        logger.info("Member %s approved in %s by %s", member_id, ctx.society_id, ctx.user_id)
        return member


def get_facility_registry(session: AsyncSession = Depends(get_session)) -> FacilityRegistry:
    return FacilityRegistry(session)


def get_booking_ledger(session: AsyncSession = Depends(get_session)) -> BookingLedger:
    return BookingLedger(session)


def get_society_directory(session: AsyncSession = Depends(get_session)) -> SocietyDirectory:
    return SocietyDirectory(session)
