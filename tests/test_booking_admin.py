"""
Cancel-selection and edit flows over existing bookings.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from conftest import CHAT, MIRROR_CHAT, make_booking

from backoffice.application.use_cases.flow_base import OPTION_UNAVAILABLE
from backoffice.domain.entities.booking import BookingStatus
from backoffice.domain.entities.client import Client

PHONE = "971500000001"


def _seed_pending(stores, mirror, booking_id="BK0001"):
    stores.clients.insert(Client(phone=PHONE, address="Marina 1", name="Alice", map_link="https://m/a"))
    booking = make_booking(booking_id, phone=PHONE, status=BookingStatus.PENDING)
    stores.bookings.insert(booking)
    mirror.publish(booking)
    return booking


def _open_update_menu(chat, booking_id="BK0001"):
    chat.press("booking_update")
    chat.press(f"edit_{booking_id}")
    chat.press("update_booking")


# cancel selection


def test_cancel_selection_deletes_booking_and_mirror(chat, stores, mirror, gateway, scheduler):
    _seed_pending(stores, mirror)
    assert len(gateway.live_messages(MIRROR_CHAT)) == 1

    chat.press("booking_cancel")
    assert chat.last.text == "Select a booking to cancel:"
    assert chat.last.tokens == ["cancel_select_BK0001"]
    assert chat.last.choices[0][0].label == f"BK0001 - {PHONE}"

    chat.press("cancel_select_BK0001")
    assert chat.last.text.startswith("You selected booking BK0001 for cancellation.")
    assert chat.last.tokens == ["cancel_confirm", "cancel_abort"]

    chat.press("cancel_confirm")
    assert stores.bookings.find() == []
    assert gateway.live_messages(MIRROR_CHAT) == []
    assert chat.last.text == "Booking BK0001 has been deleted."
    assert CHAT in scheduler.tasks


def test_cancel_selection_touches_only_the_chosen_booking(chat, stores, mirror, gateway):
    stores.clients.insert(Client(phone=PHONE, address="Marina 1", name="Alice"))
    base = datetime(2025, 1, 1)
    for i in range(3):
        booking = make_booking(f"BK{i:04d}", phone=PHONE, created_at=base + timedelta(minutes=i))
        stores.bookings.insert(booking)
        mirror.publish(booking)

    chat.press("booking_cancel")
    assert chat.last.tokens == ["cancel_select_BK0002", "cancel_select_BK0001", "cancel_select_BK0000"]
    chat.press("cancel_select_BK0001")
    chat.press("cancel_confirm")

    remaining = sorted(b.booking_id for b in stores.bookings.find())
    assert remaining == ["BK0000", "BK0002"]
    live = gateway.live_messages(MIRROR_CHAT)
    assert len(live) == 2
    assert {m.message_id for m in live} == {
        stores.bookings.find_one({"booking_id": b}).mirror_message_id for b in remaining
    }
    assert not any("BK0001" in m.text for m in live)


def test_cancel_selection_lists_ten_most_recent_of_any_status(chat, stores):
    base = datetime(2025, 1, 1)
    for i in range(12):
        status = BookingStatus.COMPLETED if i % 2 else BookingStatus.CANCELED
        stores.bookings.insert(make_booking(f"BK{i:04d}", status=status, created_at=base + timedelta(minutes=i)))

    chat.press("booking_cancel")

    tokens = chat.last.tokens
    assert len(tokens) == 10
    assert tokens[0] == "cancel_select_BK0011"
    assert tokens[-1] == "cancel_select_BK0002"


def test_cancel_selection_abort_keeps_booking(chat, stores, mirror):
    _seed_pending(stores, mirror)
    chat.press("booking_cancel")
    chat.press("cancel_select_BK0001")
    chat.press("cancel_abort")

    assert chat.last.text == "Cancellation aborted."
    assert stores.bookings.find_one({"booking_id": "BK0001"}) is not None


def test_cancel_selection_without_bookings(chat, scheduler):
    chat.press("booking_cancel")
    assert chat.last.text == "No recent bookings found."
    assert CHAT in scheduler.tasks


def test_cancel_selection_rejects_booking_not_offered(chat, stores, mirror):
    _seed_pending(stores, mirror)
    chat.press("booking_cancel")
    chat.press("cancel_select_ZZZZZZ")
    assert chat.last.text == OPTION_UNAVAILABLE


def test_cancel_selection_of_vanished_booking_reports_not_found(chat, stores, mirror, scheduler):
    _seed_pending(stores, mirror)
    chat.press("booking_cancel")
    stores.bookings.delete_one({"booking_id": "BK0001"})
    chat.press("cancel_select_BK0001")

    assert chat.last.text == "Booking not found."
    assert CHAT in scheduler.tasks


# edit


def test_edit_lists_only_pending_bookings(chat, stores):
    stores.bookings.insert(make_booking("DONE01", status=BookingStatus.COMPLETED))
    stores.bookings.insert(make_booking("CONF01", status=BookingStatus.CONFIRMED))
    stores.bookings.insert(make_booking("PEND01", status=BookingStatus.PENDING))

    chat.press("booking_update")

    assert chat.last.text == "Select a booking to update/cancel:"
    assert chat.last.tokens == ["edit_PEND01"]


def test_edit_without_pending_bookings(chat, stores):
    stores.bookings.insert(make_booking("DONE01", status=BookingStatus.COMPLETED))
    chat.press("booking_update")
    assert chat.last.text == "No pending bookings found."


def test_edit_cancel_booking_sets_canceled_and_retracts_mirror(chat, stores, mirror, gateway):
    _seed_pending(stores, mirror)
    chat.press("booking_update")
    chat.press("edit_BK0001")
    assert chat.last.text == "Booking BK0001 selected."
    assert chat.last.tokens == ["cancel_booking", "update_booking"]

    chat.press("cancel_booking")

    booking = stores.bookings.find_one({"booking_id": "BK0001"})
    assert booking.status == BookingStatus.CANCELED
    assert booking.mirror_message_id is None
    assert booking.mirror_chat_id is None
    assert gateway.live_messages(MIRROR_CHAT) == []
    assert chat.last.text == "Booking BK0001 is now canceled."


def test_edit_staff_republishes_mirror(chat, stores, mirror, gateway):
    original = _seed_pending(stores, mirror)
    old_mirror_id = stores.bookings.find_one({"booking_id": "BK0001"}).mirror_message_id

    _open_update_menu(chat)
    assert chat.last.text == "What would you like to update?"
    chat.press("upd_staff")
    assert chat.last.tokens == ["staffsel_praw", "staffsel_jenny"]
    chat.press("staffsel_jenny")

    booking = stores.bookings.find_one({"booking_id": "BK0001"})
    assert booking.assigned_staff == "Jenny"
    assert booking.updated_at >= original.updated_at
    assert chat.last.text == "Booking BK0001 staff changed to Jenny."

    mirrored = gateway.live_messages(MIRROR_CHAT)
    assert len(mirrored) == 1
    assert mirrored[0].text.startswith("🔄 *Updated Booking:*")
    assert "*Staff:* Jenny" in mirrored[0].text
    assert booking.mirror_message_id == mirrored[0].message_id
    assert booking.mirror_message_id != old_mirror_id


def test_edit_timeslot_with_preset_date_and_time(chat, stores, mirror):
    _seed_pending(stores, mirror)
    _open_update_menu(chat)
    chat.press("upd_timeslot")
    assert chat.last.text == "Select new date:"
    assert "upd_timeslot_date_2025-03-15" in chat.last.tokens

    chat.press("upd_timeslot_date_2025-03-15")
    assert chat.last.text == "Select new time:"
    chat.press("upd_timeslot_time_2:00_PM")

    booking = stores.bookings.find_one({"booking_id": "BK0001"})
    assert booking.requested_date == datetime(2025, 3, 15, 14, 0)
    assert booking.requested_time_slot.start == datetime(2025, 3, 15, 14, 0)
    assert booking.requested_time_slot.end == datetime(2025, 3, 15, 15, 0)
    assert chat.last.text == "Booking BK0001 timeslot updated."


def test_edit_timeslot_with_custom_date_and_time(chat, stores, mirror):
    _seed_pending(stores, mirror)
    _open_update_menu(chat)
    chat.press("upd_timeslot")
    chat.press("upd_timeslot_date_custom")
    assert chat.last.text == "Enter new date (YYYY-MM-DD):"
    chat.type("2025-04-01")
    chat.press("upd_timeslot_time_custom")
    assert chat.last.text == "Enter new time (e.g. 4:30 PM):"
    chat.type("6:15 PM")

    booking = stores.bookings.find_one({"booking_id": "BK0001"})
    assert booking.requested_time_slot.start == datetime(2025, 4, 1, 18, 15)
    assert booking.requested_time_slot.end - booking.requested_time_slot.start == timedelta(minutes=60)


def test_edit_address_updates_client(chat, stores, mirror, gateway):
    _seed_pending(stores, mirror)
    _open_update_menu(chat)
    chat.press("upd_address")
    assert chat.last.text == "Enter new address:"
    chat.type("Tower 2, JBR")

    assert stores.clients.find_one({"phone": PHONE}).address == "Tower 2, JBR"
    assert chat.last.text == "Booking BK0001 client address updated."
    assert "Tower 2, JBR" in gateway.live_messages(MIRROR_CHAT)[0].text


def test_edit_map_link_none_clears_it(chat, stores, mirror):
    _seed_pending(stores, mirror)
    _open_update_menu(chat)
    chat.press("upd_map")
    assert chat.last.text == "Enter new map link or type none to clear:"
    chat.type("None")

    assert stores.clients.find_one({"phone": PHONE}).map_link == ""
    assert chat.last.text == "Booking BK0001 map link updated."


def test_edit_status(chat, stores, mirror):
    _seed_pending(stores, mirror)
    _open_update_menu(chat)
    chat.press("upd_status")
    assert chat.last.tokens == ["status_pending", "status_confirmed", "status_completed", "status_canceled"]
    chat.press("status_confirmed")

    assert stores.bookings.find_one({"booking_id": "BK0001"}).status == BookingStatus.CONFIRMED
    assert chat.last.text == "Booking BK0001 status is now Confirmed."


def test_edit_unknown_status_is_rejected(chat, stores, mirror):
    _seed_pending(stores, mirror)
    _open_update_menu(chat)
    chat.press("upd_status")
    chat.press("status_lost")

    assert chat.last.text == OPTION_UNAVAILABLE
    assert stores.bookings.find_one({"booking_id": "BK0001"}).status == BookingStatus.PENDING


def test_edit_vanished_booking_reports_not_found(chat, stores, mirror, scheduler):
    _seed_pending(stores, mirror)
    chat.press("booking_update")
    chat.press("edit_BK0001")
    stores.bookings.delete_one({"booking_id": "BK0001"})
    chat.press("cancel_booking")

    assert chat.last.text == "Booking not found."
    assert CHAT in scheduler.tasks


def test_edit_address_without_client_reports_not_found(chat, stores):
    stores.bookings.insert(make_booking("BK0001", phone="000", status=BookingStatus.PENDING))
    _open_update_menu(chat)
    chat.press("upd_address")
    chat.type("Somewhere")

    assert chat.last.text == "Client not found."
