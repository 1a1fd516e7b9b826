from __future__ import annotations

import re

from backoffice.application.utils.date_parser import format_date_for_display, format_time
from backoffice.application.utils.message_rules import format_amount
from backoffice.domain.entities.booking import Booking
from backoffice.domain.entities.client import Client
from backoffice.domain.entities.session import BookingDraft

NOT_PROVIDED = "Not provided"
NOT_ASSIGNED = "Not Assigned"

_MARKDOWN_SPECIAL = re.compile(r"([_*`\[])")


def escape_markdown(value: object) -> str:
    """Escape Telegram legacy Markdown control characters in user-entered values."""
    return _MARKDOWN_SPECIAL.sub(r"\\\1", str(value))


def draft_summary(draft: BookingDraft, currency: str) -> str:
    return "\n".join(
        [
            "Booking Summary:",
            "",
            f"Amount: {format_amount(draft.amount)} {currency}",
            f"Duration: {draft.duration} minutes",
            f"Payment: {draft.payment_method}",
            f"Profit: {draft.profit_share}",
            f"Staff: {draft.staff or NOT_ASSIGNED}",
            f"Service: {draft.service or NOT_PROVIDED}",
            f"Date: {format_date_for_display(draft.date)}",
            f"Time: {draft.time}",
            f"Phone: {draft.client_phone}",
            f"Name: {draft.name or NOT_PROVIDED}",
            f"Gender: {draft.gender or NOT_PROVIDED}",
            f"Address: {draft.address}",
            f"Map Link: {draft.map_link or NOT_PROVIDED}",
            "",
            "Confirm this booking?",
        ]
    )


def confirmed_booking(booking: Booking, client: Client | None, currency: str) -> str:
    """Markdown text for a newly created booking."""
    e = escape_markdown
    address = client.address if client and client.address else NOT_PROVIDED
    return "\n".join(
        [
            "✅ *Booking Confirmed!*",
            "",
            f"*Booking ID:* {e(booking.booking_id)}",
            f"*Amount:* {format_amount(booking.amount)} {currency}",
            f"*Duration:* {booking.duration} mins",
            f"*Payment:* {e(booking.payment_method or NOT_PROVIDED)}",
            f"*Profit:* {e(booking.profit_share or NOT_PROVIDED)}",
            f"*Staff:* {e(booking.assigned_staff or NOT_ASSIGNED)}",
            f"*Service:* {e(booking.service_type or NOT_PROVIDED)}",
            f"*Date:* {format_date_for_display(booking.requested_date)}",
            f"*Time:* {format_time(booking.requested_time_slot.start.time())}",
            f"*Phone:* {e(booking.client_phone)}",
            f"*Address:* {e(address)}",
        ]
    )


def updated_booking(booking: Booking, client: Client | None) -> str:
    """Markdown text for a booking republished after an edit."""
    e = escape_markdown
    return "\n".join(
        [
            "🔄 *Updated Booking:*",
            "",
            f"*Booking ID:* {e(booking.booking_id)}",
            f"*Service:* {e(booking.service_type or NOT_PROVIDED)}",
            f"*Duration:* {booking.duration} mins",
            f"*Status:* {booking.status.value}",
            f"*Staff:* {e(booking.assigned_staff or NOT_ASSIGNED)}",
            f"*Date:* {format_date_for_display(booking.requested_date)}",
            f"*Time:* {format_time(booking.requested_time_slot.start.time())}",
            f"*Phone:* {e(booking.client_phone)}",
            f"*Name:* {e((client and client.name) or NOT_PROVIDED)}",
            f"*Gender:* {e((client and client.gender) or NOT_PROVIDED)}",
            f"*Address:* {e((client and client.address) or NOT_PROVIDED)}",
            f"*Map Link:* {e((client and client.map_link) or NOT_PROVIDED)}",
        ]
    )


def cancel_details(booking: Booking) -> str:
    return "\n".join(
        [
            f"You selected booking {booking.booking_id} for cancellation.",
            "",
            "Details:",
            f"- Service: {booking.service_type or NOT_PROVIDED}",
            f"- Duration: {booking.duration} mins",
            f"- Date: {format_date_for_display(booking.requested_date)}",
            f"- Status: {booking.status.value}",
            "",
            "Confirm cancellation?",
        ]
    )


def booking_label(booking: Booking) -> str:
    return f"{booking.booking_id} - {booking.client_phone}"
