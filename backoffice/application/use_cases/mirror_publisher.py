from __future__ import annotations

import logging

from backoffice.application.exceptions import GatewayError, RecordNotFoundError
from backoffice.application.ports.chat_gateway import ChatGatewayPort
from backoffice.application.ports.record_store import RecordStorePort
from backoffice.application.utils.summaries import confirmed_booking, updated_booking
from backoffice.domain.entities.booking import Booking


class MirrorPublisher:
    """
    Keeps one summary message per booking in the receiver chat.

    The mirror is a best-effort copy of the booking, never authoritative:
    deletes are fire-and-forget and a failed send leaves the booking without
    a mirror reference. Updates delete the old message and post a new one,
    so the mirror's message id changes on every republish.
    """

    def __init__(
        self,
        gateway: ChatGatewayPort,
        bookings: RecordStorePort,
        clients: RecordStorePort,
        receiver_chat_id: str,
        currency: str = "AED",
    ) -> None:
        self._gateway = gateway
        self._bookings = bookings
        self._clients = clients
        self._receiver_chat_id = receiver_chat_id
        self._currency = currency
        self._logger = logging.getLogger(__name__)

    def publish(self, booking: Booking) -> str | None:
        """Post the confirmation for a new booking and store the reference on it."""
        client = self._clients.find_one({"phone": booking.client_phone})
        message_id = self._send(confirmed_booking(booking, client, self._currency), booking.booking_id)
        if message_id:
            self._store_reference(booking.booking_id, message_id)
        return message_id

    def republish(self, booking_id: str) -> str | None:
        """Replace the mirror with one rendered from the booking as it is stored now."""
        booking = self._require(booking_id)
        self._delete(booking)
        client = self._clients.find_one({"phone": booking.client_phone})
        message_id = self._send(updated_booking(booking, client), booking_id)
        self._store_reference(booking_id, message_id)
        return message_id

    def retract(self, booking_id: str) -> bool:
        """Delete the mirror without a replacement and clear the reference."""
        booking = self._bookings.find_one({"booking_id": booking_id})
        if booking is None or not booking.has_mirror:
            return False
        self._delete(booking)
        self._store_reference(booking_id, None)
        return True

    def _require(self, booking_id: str) -> Booking:
        booking = self._bookings.find_one({"booking_id": booking_id})
        if booking is None:
            raise RecordNotFoundError("Booking", booking_id)
        return booking

    def _send(self, text: str, booking_id: str) -> str | None:
        try:
            return self._gateway.send_text(self._receiver_chat_id, text, parse_mode="Markdown")
        except GatewayError as e:
            self._logger.exception("Mirror send failed", extra={"booking_id": booking_id, "error": str(e)})
            return None

    def _delete(self, booking: Booking) -> None:
        if not booking.has_mirror:
            return
        if not self._gateway.delete_message(booking.mirror_chat_id, booking.mirror_message_id):
            self._logger.info(
                "Mirror delete failed, ignoring",
                extra={"booking_id": booking.booking_id, "message_id": booking.mirror_message_id},
            )

    def _store_reference(self, booking_id: str, message_id: str | None) -> None:
        self._bookings.update_one(
            {"booking_id": booking_id},
            {
                "mirror_chat_id": self._receiver_chat_id if message_id else None,
                "mirror_message_id": message_id,
            },
        )
