"""Conversation manager: one thread per (product, buyer, seller).

Opening a conversation is idempotent. The unique constraint on the
triple is the source of truth; a uniqueness violation on insert is
treated as "already exists" and the existing thread is returned.

Sending a message appends it and updates the parent's ``last_message``
and ``updated_at`` in the same transaction, so the conversation list
never shows a stale preview or order.
"""

import logging
from datetime import datetime

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from tekasomba import db
from tekasomba.constants import MESSAGE_MAX_LENGTH, SNIPPET_LENGTH
from tekasomba.errors import (
    EmptyMessage,
    Forbidden,
    NotFound,
    SelfContactForbidden,
    StorageFailure,
    Unauthenticated,
    ValidationError,
)
from tekasomba.models import Conversation, Message, Product

logger = logging.getLogger(__name__)


def _find_conversation(product_id, buyer_id, seller_id):
    return Conversation.query.filter_by(
        product_id=product_id,
        buyer_id=buyer_id,
        seller_id=seller_id
    ).first()


def _get_for_participant(principal_id, conversation_id):
    """Load a conversation the principal takes part in."""
    if not principal_id:
        raise Unauthenticated()

    try:
        conversation = db.session.get(Conversation, conversation_id)
    except SQLAlchemyError as e:
        logger.error(f'Could not load conversation {conversation_id}: {e}')
        raise StorageFailure()
    if conversation is None:
        raise NotFound('Conversation not found')
    if not conversation.is_participant(principal_id):
        raise Forbidden()
    return conversation


def make_snippet(content):
    if len(content) <= SNIPPET_LENGTH:
        return content
    return content[:SNIPPET_LENGTH - 1].rstrip() + '…'


def open_or_create_conversation(principal_id, product_id, seller_id=None):
    """Return the id of the buyer's thread about product_id, creating it if needed."""
    if not principal_id:
        raise Unauthenticated()

    try:
        product = db.session.get(Product, product_id)
    except SQLAlchemyError as e:
        logger.error(f'Could not load product {product_id}: {e}')
        raise StorageFailure()
    if product is None:
        raise NotFound('Product not found')

    if seller_id is None:
        seller_id = product.seller_id
    elif seller_id != product.seller_id:
        raise ValidationError('seller_id does not match the product owner')

    if principal_id == seller_id:
        raise SelfContactForbidden()

    try:
        existing = _find_conversation(product_id, principal_id, seller_id)
        if existing:
            return existing.id

        conversation = Conversation(
            product_id=product_id,
            buyer_id=principal_id,
            seller_id=seller_id,
            last_message=None,
            updated_at=datetime.utcnow()
        )
        db.session.add(conversation)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        try:
            existing = _find_conversation(product_id, principal_id, seller_id)
        except SQLAlchemyError as e:
            logger.error(f'Could not reload conversation after conflict: {e}')
            raise StorageFailure()
        if existing is None:
            logger.error(f'Conversation insert conflicted but no row found for {product_id}')
            raise StorageFailure()
        logger.info(f'Conversation created concurrently, reusing {existing.id}')
        return existing.id
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f'Could not open conversation about {product_id}: {e}')
        raise StorageFailure()

    logger.info(f'Conversation {conversation.id} opened: {principal_id} -> {seller_id} about {product_id}')
    return conversation.id


def send_message(principal_id, conversation_id, content):
    """Append a message from principal_id. Returns the new message id."""
    if not principal_id:
        raise Unauthenticated()

    if content is not None and not isinstance(content, str):
        raise ValidationError('Message content must be text')
    content = (content or '').strip()
    if not content:
        raise EmptyMessage()
    if len(content) > MESSAGE_MAX_LENGTH:
        raise ValidationError(f'Message too long (max {MESSAGE_MAX_LENGTH} characters)')

    conversation = _get_for_participant(principal_id, conversation_id)

    now = datetime.utcnow()
    message = Message(
        conversation_id=conversation.id,
        sender_id=principal_id,
        content=content,
        created_at=now
    )

    try:
        db.session.add(message)
        conversation.last_message = make_snippet(content)
        conversation.updated_at = now
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f'Could not send message in conversation {conversation_id}: {e}')
        raise StorageFailure()

    logger.debug(f'Message {message.id} sent in conversation {conversation.id}')
    return message.id


def list_messages(principal_id, conversation_id):
    """Messages of a conversation, oldest first."""
    conversation = _get_for_participant(principal_id, conversation_id)
    try:
        return Message.query.filter_by(
            conversation_id=conversation.id
        ).order_by(Message.created_at.asc(), Message.id.asc()).all()
    except SQLAlchemyError as e:
        logger.error(f'Could not load messages of {conversation_id}: {e}')
        raise StorageFailure()


def get_conversation(principal_id, conversation_id):
    return _get_for_participant(principal_id, conversation_id)


def list_conversations(principal_id):
    """Conversations where the principal is buyer or seller, latest activity first."""
    if not principal_id:
        raise Unauthenticated()

    try:
        return Conversation.query.filter(
            or_(
                Conversation.buyer_id == principal_id,
                Conversation.seller_id == principal_id
            )
        ).order_by(Conversation.updated_at.desc()).all()
    except SQLAlchemyError as e:
        logger.error(f'Could not list conversations for {principal_id}: {e}')
        raise StorageFailure()
