"""Conversation routes for buyer-seller messaging."""

from flask import Blueprint, request, jsonify

from tekasomba.services import conversations
from tekasomba.utils.auth import token_required

messages_bp = Blueprint('messages', __name__)


@messages_bp.route('', methods=['GET'])
@token_required
def get_conversations(current_user_id):
    """Get all conversations for the current user."""
    items = conversations.list_conversations(current_user_id)
    return jsonify({
        'conversations': [conv.to_dict(current_user_id) for conv in items],
        'total': len(items)
    }), 200


@messages_bp.route('', methods=['POST'])
@token_required
def open_conversation(current_user_id):
    """Open the conversation about a product, creating it on first contact."""
    data = request.get_json(silent=True) or {}
    product_id = data.get('product_id')

    if not product_id:
        return jsonify({'error': 'product_id is required'}), 400

    conversation_id = conversations.open_or_create_conversation(
        current_user_id,
        product_id,
        data.get('seller_id')
    )
    conversation = conversations.get_conversation(current_user_id, conversation_id)

    return jsonify({
        'conversation_id': conversation_id,
        'conversation': conversation.to_dict(current_user_id)
    }), 200


@messages_bp.route('/<conversation_id>', methods=['GET'])
@token_required
def get_conversation(current_user_id, conversation_id):
    conversation = conversations.get_conversation(current_user_id, conversation_id)
    return jsonify({'conversation': conversation.to_dict(current_user_id)}), 200


@messages_bp.route('/<conversation_id>/messages', methods=['GET'])
@token_required
def get_messages(current_user_id, conversation_id):
    """Get all messages in a conversation, oldest first."""
    items = conversations.list_messages(current_user_id, conversation_id)
    return jsonify({
        'messages': [msg.to_dict() for msg in items],
        'total': len(items)
    }), 200


@messages_bp.route('/<conversation_id>/messages', methods=['POST'])
@token_required
def send_message(current_user_id, conversation_id):
    """Send a message in a conversation."""
    data = request.get_json(silent=True) or {}

    message_id = conversations.send_message(current_user_id, conversation_id, data.get('content'))

    return jsonify({
        'message_id': message_id,
        'message': 'Message sent'
    }), 201
