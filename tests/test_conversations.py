"""
Tests for the conversation manager and /api/conversations endpoints.
"""

import pytest
from sqlalchemy.exc import SQLAlchemyError

from tekasomba import db
from tekasomba.errors import (
    EmptyMessage,
    Forbidden,
    NotFound,
    SelfContactForbidden,
    StorageFailure,
    Unauthenticated,
    ValidationError,
)
from tekasomba.models import Conversation, Message
from tekasomba.services import conversations
from tests.conftest import BrokenQuery, _create_profile


class TestOpenOrCreateConversation:
    """Tests for conversations.open_or_create_conversation"""

    def test_creates_conversation_on_first_contact(self, db_session, second_user, test_product):
        conversation_id = conversations.open_or_create_conversation(
            second_user['id'], test_product['id']
        )

        conversation = db.session.get(Conversation, conversation_id)
        assert conversation.buyer_id == second_user['id']
        assert conversation.seller_id == test_product['seller_id']
        assert conversation.product_id == test_product['id']
        assert conversation.last_message is None

    def test_repeated_calls_return_same_conversation(self, db_session, second_user, test_product):
        first = conversations.open_or_create_conversation(second_user['id'], test_product['id'])
        second = conversations.open_or_create_conversation(
            second_user['id'], test_product['id'], test_product['seller_id']
        )

        assert first == second
        assert Conversation.query.count() == 1

    def test_other_buyer_gets_own_thread(self, db_session, second_user, test_product):
        third_user = _create_profile()

        first = conversations.open_or_create_conversation(second_user['id'], test_product['id'])
        other = conversations.open_or_create_conversation(third_user['id'], test_product['id'])

        assert first != other
        assert Conversation.query.count() == 2

    def test_self_contact_forbidden(self, db_session, test_user, test_product):
        with pytest.raises(SelfContactForbidden):
            conversations.open_or_create_conversation(
                test_user['id'], test_product['id'], test_user['id']
            )

        assert Conversation.query.count() == 0

    def test_requires_principal(self, db_session, test_product):
        with pytest.raises(Unauthenticated):
            conversations.open_or_create_conversation(None, test_product['id'])

    def test_unknown_product(self, db_session, second_user):
        with pytest.raises(NotFound):
            conversations.open_or_create_conversation(second_user['id'], 'missing-product')

    def test_seller_must_own_product(self, db_session, second_user, test_product):
        third_user = _create_profile()

        with pytest.raises(ValidationError):
            conversations.open_or_create_conversation(
                second_user['id'], test_product['id'], third_user['id']
            )

    def test_uniqueness_violation_returns_existing(self, db_session, monkeypatch, second_user, test_product):
        """A concurrent insert of the same triple is resolved to the existing row."""
        existing_id = conversations.open_or_create_conversation(second_user['id'], test_product['id'])
        db.session.expunge_all()

        real_find = conversations._find_conversation
        calls = {'n': 0}

        def find_missing_once(*args):
            calls['n'] += 1
            if calls['n'] == 1:
                return None
            return real_find(*args)

        monkeypatch.setattr(conversations, '_find_conversation', find_missing_once)

        conversation_id = conversations.open_or_create_conversation(second_user['id'], test_product['id'])

        assert conversation_id == existing_id
        assert Conversation.query.count() == 1

    def test_storage_failure_leaves_no_conversation(self, db_session, monkeypatch, second_user, test_product):
        def broken_commit():
            raise SQLAlchemyError('connection lost')

        monkeypatch.setattr(db.session, 'commit', broken_commit)

        with pytest.raises(StorageFailure):
            conversations.open_or_create_conversation(second_user['id'], test_product['id'])

        monkeypatch.undo()
        assert Conversation.query.count() == 0

    def test_read_failure_is_storage_failure(self, db_session, second_user, test_product, broken_get):
        with pytest.raises(StorageFailure):
            conversations.open_or_create_conversation(second_user['id'], test_product['id'])


class TestSendMessage:
    """Tests for conversations.send_message and list_messages"""

    @pytest.fixture
    def conversation_id(self, db_session, second_user, test_product):
        return conversations.open_or_create_conversation(second_user['id'], test_product['id'])

    def test_send_message(self, db_session, second_user, conversation_id):
        message_id = conversations.send_message(second_user['id'], conversation_id, '  Bonjour  ')

        message = db.session.get(Message, message_id)
        assert message.content == 'Bonjour'
        assert message.sender_id == second_user['id']

    @pytest.mark.parametrize('content', ['', '   ', None])
    def test_empty_message_rejected(self, db_session, second_user, conversation_id, content):
        with pytest.raises(EmptyMessage):
            conversations.send_message(second_user['id'], conversation_id, content)

        assert Message.query.count() == 0

    def test_message_too_long(self, db_session, second_user, conversation_id):
        with pytest.raises(ValidationError):
            conversations.send_message(second_user['id'], conversation_id, 'x' * 5001)

    def test_non_participant_forbidden(self, db_session, conversation_id):
        outsider = _create_profile()

        with pytest.raises(Forbidden):
            conversations.send_message(outsider['id'], conversation_id, 'Salut')

        assert Message.query.count() == 0

    def test_unknown_conversation(self, db_session, second_user):
        with pytest.raises(NotFound):
            conversations.send_message(second_user['id'], 'missing', 'Salut')

    def test_seller_can_reply(self, db_session, test_user, conversation_id):
        conversations.send_message(test_user['id'], conversation_id, 'Toujours disponible')

        assert Message.query.filter_by(sender_id=test_user['id']).count() == 1

    def test_updates_conversation_summary(self, db_session, second_user, conversation_id):
        before = db.session.get(Conversation, conversation_id).updated_at

        conversations.send_message(second_user['id'], conversation_id, 'Le prix est négociable ?')

        conversation = db.session.get(Conversation, conversation_id)
        assert conversation.last_message == 'Le prix est négociable ?'
        assert conversation.updated_at >= before

    def test_long_message_snippet_is_truncated(self, db_session, second_user, conversation_id):
        conversations.send_message(second_user['id'], conversation_id, 'a' * 300)

        snippet = db.session.get(Conversation, conversation_id).last_message
        assert len(snippet) == 100
        assert snippet.endswith('…')

    def test_messages_listed_in_creation_order(self, db_session, test_user, second_user, conversation_id):
        contents = ['Bonjour', 'Bonjour, oui ?', 'Il est toujours dispo ?', 'Oui']
        senders = [second_user['id'], test_user['id'], second_user['id'], test_user['id']]
        for sender, content in zip(senders, contents):
            conversations.send_message(sender, conversation_id, content)

        messages = conversations.list_messages(second_user['id'], conversation_id)

        assert [m.content for m in messages] == contents

    def test_equal_timestamps_keep_insertion_order(self, db_session, second_user, conversation_id, timestamps):
        for content in ('un', 'deux', 'trois'):
            db.session.add(Message(conversation_id=conversation_id, sender_id=second_user['id'],
                                   content=content, created_at=timestamps[0]))
        db.session.commit()

        messages = conversations.list_messages(second_user['id'], conversation_id)

        assert [m.content for m in messages] == ['un', 'deux', 'trois']

    def test_list_messages_requires_membership(self, db_session, conversation_id):
        outsider = _create_profile()

        with pytest.raises(Forbidden):
            conversations.list_messages(outsider['id'], conversation_id)

    def test_storage_failure_writes_nothing(self, db_session, monkeypatch, second_user, conversation_id):
        def broken_commit():
            raise SQLAlchemyError('disk full')

        monkeypatch.setattr(db.session, 'commit', broken_commit)

        with pytest.raises(StorageFailure):
            conversations.send_message(second_user['id'], conversation_id, 'Bonjour')

        monkeypatch.undo()
        assert Message.query.count() == 0
        assert db.session.get(Conversation, conversation_id).last_message is None

    def test_read_failure_on_send(self, db_session, second_user, conversation_id, broken_get):
        with pytest.raises(StorageFailure):
            conversations.send_message(second_user['id'], conversation_id, 'Bonjour')

    def test_read_failure_on_list_messages(self, db_session, monkeypatch, second_user, conversation_id):
        monkeypatch.setattr(Message, 'query', BrokenQuery())

        with pytest.raises(StorageFailure):
            conversations.list_messages(second_user['id'], conversation_id)


class TestListConversations:
    """Tests for conversations.list_conversations"""

    def test_lists_for_buyer_and_seller(self, db_session, test_user, second_user, test_product):
        conversation_id = conversations.open_or_create_conversation(second_user['id'], test_product['id'])

        assert [c.id for c in conversations.list_conversations(second_user['id'])] == [conversation_id]
        assert [c.id for c in conversations.list_conversations(test_user['id'])] == [conversation_id]

    def test_most_recent_activity_first(self, db_session, test_user, second_user, test_product, test_category):
        from tests.conftest import make_product

        other_product = make_product(test_user['id'], test_category['id'])
        older = conversations.open_or_create_conversation(second_user['id'], test_product['id'])
        newer = conversations.open_or_create_conversation(second_user['id'], other_product.id)

        conversations.send_message(second_user['id'], older, 'Relance')

        ids = [c.id for c in conversations.list_conversations(second_user['id'])]
        assert ids == [older, newer]

    def test_requires_principal(self, db_session):
        with pytest.raises(Unauthenticated):
            conversations.list_conversations(None)

    def test_read_failure_is_storage_failure(self, db_session, monkeypatch, second_user):
        monkeypatch.setattr(Conversation, 'query', BrokenQuery())

        with pytest.raises(StorageFailure):
            conversations.list_conversations(second_user['id'])


class TestConversationEndpoints:
    """Tests for /api/conversations"""

    def test_contact_send_and_return_scenario(self, client, second_auth_headers, test_product):
        """Buyer contacts the seller, sends a message, comes back: same thread, one message."""
        response = client.post('/api/conversations', json={'product_id': test_product['id']},
                               headers=second_auth_headers)
        assert response.status_code == 200
        conversation_id = response.json['conversation_id']

        response = client.post(f'/api/conversations/{conversation_id}/messages',
                               json={'content': 'Bonjour'}, headers=second_auth_headers)
        assert response.status_code == 201

        response = client.post('/api/conversations', json={'product_id': test_product['id']},
                               headers=second_auth_headers)
        assert response.status_code == 200
        assert response.json['conversation_id'] == conversation_id

        response = client.get(f'/api/conversations/{conversation_id}/messages',
                              headers=second_auth_headers)
        assert response.status_code == 200
        assert [m['content'] for m in response.json['messages']] == ['Bonjour']

    def test_self_contact_rejected(self, client, auth_headers, test_product):
        response = client.post('/api/conversations', json={'product_id': test_product['id']},
                               headers=auth_headers)

        assert response.status_code == 400
        assert 'error' in response.json

    def test_blank_message_rejected(self, client, second_auth_headers, test_product):
        response = client.post('/api/conversations', json={'product_id': test_product['id']},
                               headers=second_auth_headers)
        conversation_id = response.json['conversation_id']

        response = client.post(f'/api/conversations/{conversation_id}/messages',
                               json={'content': '   '}, headers=second_auth_headers)

        assert response.status_code == 400

    def test_conversation_list_shows_other_party(self, client, auth_headers, second_auth_headers,
                                                 second_user, test_product):
        client.post('/api/conversations', json={'product_id': test_product['id']},
                    headers=second_auth_headers)

        response = client.get('/api/conversations', headers=auth_headers)

        assert response.status_code == 200
        assert response.json['total'] == 1
        conversation = response.json['conversations'][0]
        assert conversation['other_participant']['id'] == second_user['id']
        assert conversation['product']['title'] == test_product['title']

    def test_outsider_cannot_read(self, client, second_auth_headers, test_product):
        response = client.post('/api/conversations', json={'product_id': test_product['id']},
                               headers=second_auth_headers)
        conversation_id = response.json['conversation_id']

        outsider = _create_profile()
        login = client.post('/api/auth/login', json={'email': outsider['email'],
                                                     'password': outsider['password']})
        headers = {'Authorization': f"Bearer {login.json['token']}"}

        response = client.get(f'/api/conversations/{conversation_id}', headers=headers)

        assert response.status_code == 403

    def test_unauthenticated(self, client, db_session):
        response = client.get('/api/conversations')

        assert response.status_code == 401

    def test_read_failure_returns_503(self, client, second_auth_headers, test_product, broken_get):
        response = client.post('/api/conversations', json={'product_id': test_product['id']},
                               headers=second_auth_headers)

        assert response.status_code == 503
        assert response.json == {'error': 'Storage backend unavailable'}
