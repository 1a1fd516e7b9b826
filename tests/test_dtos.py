from __future__ import annotations

from backoffice.application.dto.telegram_update import TelegramUpdateDTO
from backoffice.application.dto.whatsapp_event import WhatsAppWebhookDTO
from backoffice.domain.entities.event import EventKind


def test_telegram_callback_becomes_choice():
    update = TelegramUpdateDTO.model_validate(
        {
            "update_id": 1,
            "callback_query": {"id": "cbq-9", "data": "booking_new", "message": {"message_id": 5, "chat": {"id": 42}}},
        }
    )
    event = update.extract_event()

    assert event.kind == EventKind.CHOICE
    assert event.chat_id == "42"
    assert event.token == "booking_new"
    assert event.callback_id == "cbq-9"
    assert event.message_id is None


def test_telegram_start_and_text_messages():
    start = TelegramUpdateDTO.model_validate(
        {"message": {"message_id": 7, "chat": {"id": -100}, "text": "/start@back_office_bot"}}
    ).extract_event()
    text = TelegramUpdateDTO.model_validate(
        {"message": {"message_id": 8, "chat": {"id": -100}, "text": "971501234567"}}
    ).extract_event()

    assert start.kind == EventKind.START
    assert start.chat_id == "-100"
    assert text.kind == EventKind.TEXT
    assert text.body == "971501234567"
    assert text.message_id == "8"


def test_telegram_updates_without_usable_content_are_ignored():
    assert TelegramUpdateDTO.model_validate({"update_id": 3}).extract_event() is None
    assert TelegramUpdateDTO.model_validate({"message": {"chat": {"id": 1}, "photo": []}}).extract_event() is None
    assert TelegramUpdateDTO.model_validate({"callback_query": {"id": "x", "data": "a"}}).extract_event() is None


def _whatsapp(*messages):
    return {
        "object": "whatsapp_business_account",
        "entry": [{"changes": [{"field": "messages", "value": {"messages": list(messages)}}]}],
    }


def test_whatsapp_messages_become_events():
    payload = _whatsapp(
        {"from": "971500000001", "id": "wamid.1", "type": "text", "text": {"body": "Hi"}},
        {"from": "971500000001", "id": "wamid.2", "type": "text", "text": {"body": "Marina Tower"}},
        {
            "from": "971500000001",
            "id": "wamid.3",
            "type": "interactive",
            "interactive": {"type": "button_reply", "button_reply": {"id": "final_confirm", "title": "Confirm"}},
        },
        {
            "from": "971500000001",
            "id": "wamid.4",
            "type": "interactive",
            "interactive": {"type": "list_reply", "list_reply": {"id": "time_4:00_PM", "title": "4:00 PM"}},
        },
    )
    events = WhatsAppWebhookDTO.model_validate(payload).extract_events()

    assert [e.kind for e in events] == [EventKind.START, EventKind.TEXT, EventKind.CHOICE, EventKind.CHOICE]
    assert [e.message_id for e in events] == ["wamid.1", "wamid.2", "wamid.3", "wamid.4"]
    assert events[2].token == "final_confirm"
    assert events[3].token == "time_4:00_PM"
    assert all(e.channel == "whatsapp" and e.chat_id == "971500000001" for e in events)


def test_whatsapp_status_updates_and_media_are_skipped():
    payload = {
        "object": "whatsapp_business_account",
        "entry": [
            {"changes": [{"value": {"statuses": [{"id": "wamid.1", "status": "read"}]}}]},
            {"changes": [{"value": {"messages": [{"from": "1", "id": "m", "type": "image", "image": {}}]}}]},
        ],
    }
    assert WhatsAppWebhookDTO.model_validate(payload).extract_events() == []
