from datetime import date
from types import SimpleNamespace

from slots import (
    TIME_SLOTS, availability_grid, bookings_for_facility_on_date, default_end_time,
    end_time_choices, is_slot_taken, my_bookings, start_time_choices,
)

JUNE_1 = date(2025, 6, 1)
JUNE_2 = date(2025, 6, 2)


def booking(id, facility_id, booking_date, start_time, user_id="alice", end_time=None):
    return SimpleNamespace(
        id=id, facility_id=facility_id, booking_date=booking_date,
        start_time=start_time, end_time=end_time, user_id=user_id,
    )


BOOKINGS = [
    booking("b1", "club", JUNE_1, "09:00", "alice"),
    booking("b2", "club", JUNE_1, "10:00", "bob"),
    booking("b3", "pool", JUNE_1, "09:00", "alice"),
    booking("b4", "club", JUNE_2, "09:00", "carol"),
]


def test_time_slots_are_hourly_from_six_to_ten():
    assert len(TIME_SLOTS) == 17
    assert TIME_SLOTS[0] == "06:00"
    assert TIME_SLOTS[-1] == "22:00"


def test_last_slot_is_not_a_start_choice():
    assert "22:00" not in start_time_choices()
    assert len(start_time_choices()) == 16


def test_end_time_choices_are_strictly_later():
    assert end_time_choices("20:00") == ["21:00", "22:00"]
    assert end_time_choices("22:00") == []
    assert end_time_choices("09:30") == []


def test_default_end_time_is_next_hour():
    assert default_end_time("09:00") == "10:00"
    assert default_end_time("22:00") == "22:00"


def test_is_slot_taken_matches_exact_key_only():
    assert is_slot_taken(BOOKINGS, "club", JUNE_1, "09:00")
    assert not is_slot_taken(BOOKINGS, "club", JUNE_1, "11:00")
    assert not is_slot_taken(BOOKINGS, "gym", JUNE_1, "09:00")
    assert not is_slot_taken(BOOKINGS, "pool", JUNE_2, "09:00")
    assert not is_slot_taken([], "club", JUNE_1, "09:00")


def test_my_bookings_is_exact_and_exhaustive():
    mine = my_bookings(BOOKINGS, "alice")
    assert {b.id for b in mine} == {"b1", "b3"}
    assert all(b.user_id == "alice" for b in mine)
    assert my_bookings(BOOKINGS, "nobody") == []


def test_bookings_for_facility_on_date():
    result = bookings_for_facility_on_date(BOOKINGS, "club", JUNE_1)
    assert [b.id for b in result] == ["b1", "b2"]


def test_availability_grid_marks_booked_slots():
    facilities = [SimpleNamespace(id="club", name="Clubhouse"), SimpleNamespace(id="pool", name="Pool")]
    grid = availability_grid(facilities, BOOKINGS, JUNE_1)

    assert [f["facility_id"] for f in grid] == ["club", "pool"]
    club = {slot["start_time"]: slot for slot in grid[0]["schedule"]}
    assert len(club) == 16
    assert club["09:00"]["status"] == "booked"
    assert club["09:00"]["booking_id"] == "b1"
    assert club["10:00"]["status"] == "booked"
    assert club["11:00"] == {"start_time": "11:00", "status": "available", "booking_id": None}

    pool = {slot["start_time"]: slot["status"] for slot in grid[1]["schedule"]}
    assert pool["09:00"] == "booked"
    assert pool["10:00"] == "available"
