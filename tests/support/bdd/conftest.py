"""Shared BDD fixtures and step definitions for the Support domain."""

import pytest
from pytest_bdd import given, parsers


@pytest.fixture()
def chat():
    return {"room_id": None, "admins_online": False, "reply": None}


@given("a guest has opened a chat")
def _(chat, join_chat):
    chat["room_id"] = join_chat(guest_id="guest-bdd", user_name="Khách")["room_id"]


@given("no admin is online")
def _(chat):
    chat["admins_online"] = False


@given("an admin is online")
def _(chat):
    chat["admins_online"] = True


@given(parsers.cfparse('the guest wrote "{text}"'))
def _(chat, send_message, text):
    send_message(chat["room_id"], text)
