"""Tests for inbox operations: sender writes, receiver updates, both read."""

import json

import pytest

from memos_core.access import Identity
from memos_core.exceptions import PermissionDenied, ResourceNotFound, ValidationError
from memos_core.schema.types import InboxStatus


@pytest.fixture
def carol(make_user):
    return make_user("carol")


class TestInbox:

    def test_send_sets_sender(self, core_as, alice, bob):
        message = core_as(alice).inbox.send(bob.user_id, {"type": "MEMO_COMMENT"})

        assert message["sender_id"] == alice.user_id
        assert message["receiver_id"] == bob.user_id
        assert message["status"] == "UNREAD"
        assert json.loads(message["message"]) == {"type": "MEMO_COMMENT"}

    def test_sender_and_receiver_read_third_party_does_not(self, core_as, alice, bob, carol):
        message = core_as(alice).inbox.send(bob.user_id)

        assert core_as(alice).inbox.get(id=message["id"])
        assert core_as(bob).inbox.get(id=message["id"])
        with pytest.raises(ResourceNotFound):
            core_as(carol).inbox.get(id=message["id"])

        assert core_as(carol).inbox.list_messages() == []

    def test_only_receiver_updates_status(self, core_as, alice, bob, carol):
        message = core_as(alice).inbox.send(bob.user_id)

        with pytest.raises(PermissionDenied):
            core_as(alice).inbox.set_status(message["id"], InboxStatus.ARCHIVED)
        with pytest.raises(ResourceNotFound):
            core_as(carol).inbox.set_status(message["id"], InboxStatus.ARCHIVED)

        updated = core_as(bob).inbox.set_status(message["id"], InboxStatus.ARCHIVED)
        assert updated["status"] == "ARCHIVED"

    def test_cannot_send_as_someone_else(self, core_as, alice, bob):
        with pytest.raises(PermissionDenied):
            core_as(bob).inbox.insert({
                "sender_id": alice.user_id,
                "receiver_id": bob.user_id,
                "status": "UNREAD",
            })

    def test_receiver_cannot_redirect_message(self, core_as, alice, bob, carol):
        message = core_as(alice).inbox.send(bob.user_id)
        with pytest.raises(ValidationError):
            core_as(bob).inbox.update({"id": message["id"]}, {"receiver_id": carol.user_id})

    def test_list_messages_by_status(self, core_as, alice, bob):
        first = core_as(alice).inbox.send(bob.user_id)
        core_as(alice).inbox.send(bob.user_id)
        core_as(bob).inbox.set_status(first["id"], InboxStatus.ARCHIVED)

        unread = core_as(bob).inbox.list_messages(status=InboxStatus.UNREAD)
        assert len(unread) == 1
        assert len(core_as(bob).inbox.list_messages()) == 2
        # Sender sees the messages too
        assert len(core_as(alice).inbox.list_messages()) == 2

    def test_send_to_missing_user_is_validation_error(self, core_as, alice):
        with pytest.raises(ValidationError):
            core_as(alice).inbox.send(9999)

    def test_anonymous_cannot_send(self, core_as, bob):
        with pytest.raises(PermissionDenied):
            core_as(None).inbox.send(bob.user_id)

    def test_identity_values_not_rows_decide(self, core_as, alice, bob):
        """An identity with the right id but no user row still acts as that user."""
        message = core_as(alice).inbox.send(bob.user_id)
        assert core_as(Identity(bob.user_id)).inbox.get(id=message["id"])
