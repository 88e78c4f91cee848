import logging
from datetime import date
from typing import List

from fastapi import FastAPI, Depends, Response, status
from fastapi.middleware.cors import CORSMiddleware

from config import CORS_ORIGINS, LOG_LEVEL
from context import SocietyContext, get_current_user_id, get_society_context
from database import init_db
from errors import NotFoundError, ServiceError, service_error_handler
from preferences import SELECTED_SOCIETY_KEY, PreferenceStore, get_preference_store
from schemas import (
    BookingCreate, BookingRead, FacilityCreate, FacilityRead, FacilitySchedule,
    MemberCreate, MemberRead, SelectedSociety, SlotOptions, SocietyCreate,
    SocietyRead, SocietyReview,
)
from services import (
    BookingLedger, FacilityRegistry, SocietyDirectory,
    get_booking_ledger, get_facility_registry, get_society_directory,
)
from slots import (
    TIME_SLOTS, availability_grid, bookings_for_facility_on_date,
    default_end_time, my_bookings, start_time_choices,
)

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("society_app")

app = FastAPI(title="Society Facility Booking")
app.add_exception_handler(ServiceError, service_error_handler)


@app.on_event("startup")
async def on_startup():
    await init_db()
    logger.info("Database ready")


# --- Slots ---
@app.get("/slots", response_model=SlotOptions)
async def get_slots():
    return SlotOptions(
        time_slots=TIME_SLOTS,
        start_times=start_time_choices(),
        default_end_times={t: default_end_time(t) for t in start_time_choices()},
    )


# --- Societies & membership ---
@app.post("/societies", response_model=SocietyRead, status_code=status.HTTP_201_CREATED)
async def register_society(
    data: SocietyCreate,
    user_id: str = Depends(get_current_user_id),
    directory: SocietyDirectory = Depends(get_society_directory),
):
    return await directory.register_society(
        user_id, data.name, data.address, data.city, data.state, data.pincode
    )


@app.post("/admin/societies/{society_id}/review", response_model=SocietyRead)
async def review_society(
    society_id: str,
    data: SocietyReview,
    user_id: str = Depends(get_current_user_id),
    directory: SocietyDirectory = Depends(get_society_directory),
):
    return await directory.review_society(user_id, society_id, data.approve)


@app.post("/societies/{society_id}/members", response_model=MemberRead, status_code=status.HTTP_201_CREATED)
async def join_society(
    society_id: str,
    data: MemberCreate,
    user_id: str = Depends(get_current_user_id),
    directory: SocietyDirectory = Depends(get_society_directory),
):
    return await directory.join_society(user_id, society_id, data.role)


@app.post("/societies/{society_id}/members/{member_id}/approve", response_model=MemberRead)
async def approve_member(
    member_id: str,
    ctx: SocietyContext = Depends(get_society_context),
    directory: SocietyDirectory = Depends(get_society_directory),
):
    return await directory.approve_member(ctx, member_id)


@app.get("/me/societies", response_model=List[SocietyRead])
async def my_societies(
    user_id: str = Depends(get_current_user_id),
    directory: SocietyDirectory = Depends(get_society_directory),
):
    return await directory.list_user_societies(user_id)


# --- Selected society (persisted preference) ---
@app.get("/me/selected-society", response_model=SelectedSociety)
async def get_selected_society(
    user_id: str = Depends(get_current_user_id),
    directory: SocietyDirectory = Depends(get_society_directory),
    store: PreferenceStore = Depends(get_preference_store),
):
    society_id = await store.get(user_id, SELECTED_SOCIETY_KEY)
    if society_id is None:
        return SelectedSociety(society_id=None)

    societies = await directory.list_user_societies(user_id)
    if society_id not in {s.id for s in societies}:
        # Membership or society status changed since it was saved
        await store.delete(user_id, SELECTED_SOCIETY_KEY)
        return SelectedSociety(society_id=None)
    return SelectedSociety(society_id=society_id)


@app.put("/me/selected-society", response_model=SelectedSociety)
async def select_society(
    data: SelectedSociety,
    user_id: str = Depends(get_current_user_id),
    directory: SocietyDirectory = Depends(get_society_directory),
    store: PreferenceStore = Depends(get_preference_store),
):
    societies = await directory.list_user_societies(user_id)
    if data.society_id not in {s.id for s in societies}:
        raise NotFoundError("Society not found")
    await store.set(user_id, SELECTED_SOCIETY_KEY, data.society_id)
    return data


@app.delete("/me/selected-society", status_code=status.HTTP_204_NO_CONTENT)
async def clear_selected_society(
    user_id: str = Depends(get_current_user_id),
    store: PreferenceStore = Depends(get_preference_store),
):
    await store.delete(user_id, SELECTED_SOCIETY_KEY)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Facilities ---
@app.get("/societies/{society_id}/facilities", response_model=List[FacilityRead])
async def list_facilities(
    ctx: SocietyContext = Depends(get_society_context),
    registry: FacilityRegistry = Depends(get_facility_registry),
):
    return await registry.list_facilities(ctx)


@app.post("/societies/{society_id}/facilities", response_model=FacilityRead, status_code=status.HTTP_201_CREATED)
async def create_facility(
    data: FacilityCreate,
    ctx: SocietyContext = Depends(get_society_context),
    registry: FacilityRegistry = Depends(get_facility_registry),
):
    return await registry.create_facility(ctx, data.name, data.description)


@app.get("/societies/{society_id}/facilities/{facility_id}/bookings", response_model=List[BookingRead])
async def facility_bookings_on_date(
    facility_id: str,
    booking_date: date,
    ctx: SocietyContext = Depends(get_society_context),
    ledger: BookingLedger = Depends(get_booking_ledger),
):
    facility = await ledger.facilities.get_facility(ctx, facility_id)
    bookings = await ledger.list_upcoming_bookings(ctx)
    return bookings_for_facility_on_date(bookings, facility.id, booking_date)


@app.get("/societies/{society_id}/availability", response_model=List[FacilitySchedule])
async def get_availability(
    booking_date: date,
    ctx: SocietyContext = Depends(get_society_context),
    ledger: BookingLedger = Depends(get_booking_ledger),
):
    # One query each for facilities and bookings, then build the grid in memory
    facilities = await ledger.facilities.list_facilities(ctx)
    bookings = await ledger.list_upcoming_bookings(ctx)
    return availability_grid(facilities, bookings, booking_date)


# --- Bookings ---
@app.get("/societies/{society_id}/bookings", response_model=List[BookingRead])
async def list_bookings(
    ctx: SocietyContext = Depends(get_society_context),
    ledger: BookingLedger = Depends(get_booking_ledger),
):
    return await ledger.list_upcoming_bookings(ctx)


@app.get("/societies/{society_id}/bookings/mine", response_model=List[BookingRead])
async def list_my_bookings(
    ctx: SocietyContext = Depends(get_society_context),
    ledger: BookingLedger = Depends(get_booking_ledger),
):
    bookings = await ledger.list_upcoming_bookings(ctx)
    return my_bookings(bookings, ctx.user_id)


@app.post("/societies/{society_id}/bookings", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
async def book_slot(
    data: BookingCreate,
    ctx: SocietyContext = Depends(get_society_context),
    ledger: BookingLedger = Depends(get_booking_ledger),
):
    return await ledger.create_booking(
        ctx, data.facility_id, data.booking_date, data.start_time, data.end_time
    )


@app.delete("/societies/{society_id}/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_booking(
    booking_id: str,
    ctx: SocietyContext = Depends(get_society_context),
    ledger: BookingLedger = Depends(get_booking_ledger),
):
    await ledger.cancel_booking(ctx, booking_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
