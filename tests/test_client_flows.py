from __future__ import annotations

from datetime import datetime

import pytest

from conftest import CHAT

from backoffice.application.use_cases.flow_base import OPTION_UNAVAILABLE
from backoffice.application.use_cases.record_flows import RecordFlow
from backoffice.domain.entities.client import Client
from backoffice.domain.entities.session import FlowKind, PendingInput


def _seed(stores, *clients):
    for client in clients:
        stores.clients.insert(client)


def test_add_client(chat, stores, scheduler):
    chat.press("client_add")
    assert chat.last.text == "Enter Client Phone Number:"
    assert chat.session.flow == FlowKind.CLIENT_ADD

    chat.type("+971 55 000 1111")
    assert chat.last.text == "Enter Client Address:"
    chat.type("Villa 3, Jumeirah")
    assert chat.last.text == "Enter Client Name (optional, or type 'skip'):"
    chat.type("skip")

    assert chat.last.text == "Client added successfully!"
    client = stores.clients.find_one({"phone": "971550001111"})
    assert client.address == "Villa 3, Jumeirah"
    assert client.name == ""
    assert CHAT in scheduler.tasks


def test_add_client_with_existing_phone_stops_early(chat, stores):
    _seed(stores, Client(phone="971550001111", address="Old"))
    chat.press("client_add")
    chat.type("971-55-000-1111")

    assert chat.last.text == "A client with phone 971550001111 already exists."
    assert len(stores.clients.find()) == 1


def test_add_client_rejects_empty_address(chat):
    chat.press("client_add")
    chat.type("0501112222")
    chat.type("   ")

    assert chat.last.text == "Invalid address: . Please use /start to begin again."


def test_view_all_lists_newest_first(chat, stores, scheduler):
    _seed(
        stores,
        Client(phone="1", address="a", created_at=datetime(2025, 1, 1)),
        Client(phone="2", address="b", name="Zed", created_at=datetime(2025, 2, 1)),
    )
    chat.press("client_viewall")

    assert chat.last.text == "All Clients:\n1. Zed - 2\n2. No Name - 1"
    assert chat.last.tokens == ["clear_chat"]
    assert scheduler.tasks == {}


def test_view_all_without_clients(chat):
    chat.press("client_viewall")
    assert chat.last.text == "No clients found."


def test_delete_client(chat, stores):
    _seed(stores, Client(phone="971550001111", address="a", name="Ann"))
    chat.press("client_delete")
    assert chat.last.text == "Select a client to delete:"
    assert chat.last.tokens == ["delete_client_971550001111"]

    chat.press("delete_client_971550001111")
    assert chat.last.text == "Are you sure you want to delete client 971550001111?"
    assert chat.last.tokens == ["confirm_delete_client", "cancel_delete_client"]

    chat.press("confirm_delete_client")
    assert chat.last.text == "Client deleted successfully!"
    assert stores.clients.find() == []


def test_delete_client_aborted(chat, stores):
    _seed(stores, Client(phone="1", address="a"))
    chat.press("client_delete")
    chat.press("delete_client_1")
    chat.press("cancel_delete_client")

    assert chat.last.text == "Client deletion canceled."
    assert len(stores.clients.find()) == 1


def test_delete_confirmation_for_another_record_kind_is_rejected(chat, stores):
    _seed(stores, Client(phone="1", address="a"))
    chat.press("client_delete")
    chat.press("delete_client_1")
    chat.press("confirm_delete_staff")

    assert chat.last.text == OPTION_UNAVAILABLE
    assert len(stores.clients.find()) == 1


def test_delete_without_clients(chat, scheduler):
    chat.press("client_delete")
    assert chat.last.text == "No clients to delete."
    assert CHAT in scheduler.tasks


def test_update_client_map_link(chat, stores):
    _seed(stores, Client(phone="971550001111", address="a"))
    chat.press("client_update")
    assert chat.last.text == "Select a client to update:"
    chat.press("select_update_client_971550001111")

    assert chat.last.text == "Which field do you want to update?"
    assert chat.last.tokens == [
        "update_client_field_name",
        "update_client_field_email",
        "update_client_field_phone",
        "update_client_field_address",
        "update_client_field_map_link",
    ]

    chat.press("update_client_field_map_link")
    assert chat.last.text == "Enter new value for Map Link:"
    assert chat.session.pending_input == PendingInput.FIELD_VALUE

    chat.type("https://maps.example/villa")
    assert chat.last.text == "Client updated successfully!"
    assert stores.clients.find_one({"phone": "971550001111"}).map_link == "https://maps.example/villa"


def test_update_phone_is_normalized(chat, stores):
    _seed(stores, Client(phone="1", address="a"))
    chat.press("client_update")
    chat.press("select_update_client_1")
    chat.press("update_client_field_phone")
    chat.type("+971 55 222 3333")

    assert stores.clients.find_one({"phone": "971552223333"}) is not None


def test_update_phone_to_existing_one_is_refused(chat, stores, scheduler):
    _seed(
        stores,
        Client(phone="1", address="a", created_at=datetime(2025, 1, 1)),
        Client(phone="2", address="b", created_at=datetime(2025, 1, 2)),
    )
    chat.press("client_update")
    chat.press("select_update_client_2")
    chat.press("update_client_field_phone")
    chat.type("1")

    assert chat.last.text == "That phone is already in use."
    assert stores.clients.find_one({"phone": "2"}) is not None
    assert CHAT in scheduler.tasks


def test_update_client_not_offered_is_rejected(chat, stores):
    _seed(stores, Client(phone="1", address="a"))
    chat.press("client_update")
    chat.press("select_update_client_999")

    assert chat.last.text == OPTION_UNAVAILABLE


def test_repeated_delete_confirmation_is_stale(chat, stores):
    _seed(stores, Client(phone="1", address="a"), Client(phone="2", address="b"))
    chat.press("client_delete")
    chat.press("delete_client_1")
    chat.press("confirm_delete_client")
    chat.press("confirm_delete_client")

    assert chat.last.text == OPTION_UNAVAILABLE
    assert [c.phone for c in stores.clients.find()] == ["2"]


def test_record_flow_subclass_must_provide_every_hook(ctx):
    class Unlisted(RecordFlow):
        store = property(lambda self: self._stores.clients)

        def label(self, record):
            return record.phone

        def start_add(self, chat_id):
            pass

    with pytest.raises(TypeError):
        Unlisted(ctx)
