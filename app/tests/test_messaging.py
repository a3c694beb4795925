from datetime import datetime

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.errors import NotFoundError, AuthorizationError, InvalidStateError
from app.db.models.conversation import Conversation, Message
from app.services import messaging


@pytest.fixture
def users(make_user):
    return make_user("zed"), make_user("amy"), make_user("bob")


def test_conversation_stores_lower_id_first(db, users):
    zed, amy, _ = users

    conversation = messaging.get_or_create_conversation(db, zed.id, amy.id)

    assert (conversation.participant1_id, conversation.participant2_id) == ("amy", "zed")


def test_one_conversation_per_unordered_pair(db, users):
    zed, amy, _ = users

    first = messaging.get_or_create_conversation(db, zed.id, amy.id)
    second = messaging.get_or_create_conversation(db, amy.id, zed.id)

    assert first.id == second.id
    assert db.query(Conversation).count() == 1


def test_conversation_needs_two_existing_users(db, users):
    zed, _, _ = users

    with pytest.raises(InvalidStateError):
        messaging.get_or_create_conversation(db, zed.id, zed.id)
    with pytest.raises(NotFoundError):
        messaging.get_or_create_conversation(db, zed.id, "ghost")


def test_direct_messages_flow_between_participants(db, users):
    zed, amy, _ = users
    conversation = messaging.get_or_create_conversation(db, zed.id, amy.id)

    hello = messaging.send_direct_message(db, conversation.id, zed, "hello amy")
    reply = messaging.send_direct_message(db, conversation.id, amy, "hi zed")

    assert hello.receiver_id == amy.id
    assert reply.receiver_id == zed.id
    assert hello.sent_at < reply.sent_at
    assert [m.content for m in messaging.list_messages(db, conversation_id=conversation.id)] == [
        "hello amy",
        "hi zed",
    ]


def test_outsider_cannot_use_conversation(db, users):
    zed, amy, bob = users
    conversation = messaging.get_or_create_conversation(db, zed.id, amy.id)

    with pytest.raises(AuthorizationError):
        messaging.send_direct_message(db, conversation.id, bob, "let me in")
    with pytest.raises(AuthorizationError):
        messaging.get_conversation_for(db, conversation.id, bob)


def test_unknown_conversation(db, users):
    zed, _, _ = users

    with pytest.raises(NotFoundError):
        messaging.send_direct_message(db, 12345, zed, "anyone?")


def test_list_messages_requires_exactly_one_thread(db):
    with pytest.raises(ValueError):
        messaging.list_messages(db)
    with pytest.raises(ValueError):
        messaging.list_messages(db, mentorship_id=1, conversation_id=1)


def test_message_must_belong_to_a_thread(db, users):
    zed, amy, _ = users
    db.add(Message(sender_id=zed.id, receiver_id=amy.id, content="orphan", sent_at=datetime.utcnow()))

    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_list_conversations_for_user(db, users):
    zed, amy, bob = users
    messaging.get_or_create_conversation(db, zed.id, amy.id)
    messaging.get_or_create_conversation(db, bob.id, amy.id)

    assert len(messaging.list_conversations_for_user(db, amy.id)) == 2
    assert len(messaging.list_conversations_for_user(db, zed.id)) == 1
