"""
Slot enumeration, availability checks and derived booking views.

Everything here is a pure function over bookings that were already fetched;
nothing issues a query. Booking objects only need ``facility_id``,
``booking_date``, ``start_time`` and ``user_id`` attributes.
"""
from datetime import date
from typing import Dict, Iterable, List

# Hourly start times, 06:00 through 22:00
TIME_SLOTS = [f"{hour:02d}:00" for hour in range(6, 23)]


def start_time_choices() -> List[str]:
    # The last slot can only be an end time
    return TIME_SLOTS[:-1]


def end_time_choices(start_time: str) -> List[str]:
    if start_time not in TIME_SLOTS:
        return []
    return TIME_SLOTS[TIME_SLOTS.index(start_time) + 1:]


def default_end_time(start_time: str) -> str:
    choices = end_time_choices(start_time)
    return choices[0] if choices else TIME_SLOTS[-1]


def is_slot_taken(bookings: Iterable, facility_id: str, booking_date: date, start_time: str) -> bool:
    return any(
        b.facility_id == facility_id
        and b.booking_date == booking_date
        and b.start_time == start_time
        for b in bookings
    )


def my_bookings(bookings: Iterable, user_id: str) -> list:
    return [b for b in bookings if b.user_id == user_id]


def bookings_for_facility_on_date(bookings: Iterable, facility_id: str, booking_date: date) -> list:
    return [
        b for b in bookings
        if b.facility_id == facility_id and b.booking_date == booking_date
    ]


def availability_grid(facilities: Iterable, bookings: Iterable, booking_date: date) -> List[Dict]:
    """Build the per-facility slot badges for one date.

    Returns one entry per facility, each holding a ``schedule`` with the
    status (``available`` or ``booked``) of every bookable start slot.
    """
    # Key: (facility_id, start_time) -> Booking, for O(1) lookups below
    booking_map = {
        (b.facility_id, b.start_time): b
        for b in bookings
        if b.booking_date == booking_date
    }

    grid = []
    for facility in facilities:
        schedule = []
        for start_time in start_time_choices():
            existing = booking_map.get((facility.id, start_time))
            schedule.append({
                "start_time": start_time,
                "status": "booked" if existing else "available",
                "booking_id": existing.id if existing else None,
            })
        grid.append({
            "facility_id": facility.id,
            "facility_name": facility.name,
            "schedule": schedule,
        })
    return grid
