"""Message and Conversation models for buyer-seller communication."""

from datetime import datetime
from tekasomba import db
from tekasomba.models.base import new_id, utc_isoformat


class Conversation(db.Model):
    """Conversation between a buyer and the seller of one product."""

    __tablename__ = 'conversations'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    product_id = db.Column(db.String(36), db.ForeignKey('products.id'), nullable=False, index=True)
    buyer_id = db.Column(db.String(36), db.ForeignKey('profiles.id'), nullable=False, index=True)
    seller_id = db.Column(db.String(36), db.ForeignKey('profiles.id'), nullable=False, index=True)
    last_message = db.Column(db.String(255), nullable=True)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Relationships
    product = db.relationship('Product', backref='conversations')
    buyer = db.relationship('Profile', foreign_keys=[buyer_id], backref='conversations_as_buyer')
    seller = db.relationship('Profile', foreign_keys=[seller_id], backref='conversations_as_seller')
    messages = db.relationship('Message', backref='conversation', lazy='dynamic')

    # One thread per (product, buyer, seller) triple
    __table_args__ = (
        db.UniqueConstraint('product_id', 'buyer_id', 'seller_id', name='unique_conversation_triple'),
    )

    def is_participant(self, user_id):
        return user_id in (self.buyer_id, self.seller_id)

    def get_other_participant(self, user_id):
        """Get the other participant in the conversation."""
        if self.buyer_id == user_id:
            return self.seller
        return self.buyer

    def to_dict(self, current_user_id=None):
        """Convert conversation to dictionary."""
        other_participant = None
        if current_user_id:
            other_user = self.get_other_participant(current_user_id)
            if other_user:
                other_participant = {
                    'id': other_user.id,
                    'display_name': other_user.display_name,
                    'is_verified_pro': other_user.is_verified_pro,
                }

        product = None
        if self.product:
            product = {
                'id': self.product.id,
                'title': self.product.title,
                'cover_photo': self.product.cover_photo,
            }

        return {
            'id': self.id,
            'product_id': self.product_id,
            'buyer_id': self.buyer_id,
            'seller_id': self.seller_id,
            'product': product,
            'other_participant': other_participant,
            'last_message': self.last_message,
            'created_at': utc_isoformat(self.created_at),
            'updated_at': utc_isoformat(self.updated_at),
        }

    def __repr__(self):
        return f'<Conversation {self.id}: {self.buyer_id} -> {self.seller_id} about {self.product_id}>'


class Message(db.Model):
    """Message within a conversation. Append-only."""

    __tablename__ = 'messages'

    # Integer key doubles as the insertion-order tiebreaker for equal timestamps
    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    conversation_id = db.Column(db.String(36), db.ForeignKey('conversations.id'), nullable=False, index=True)
    sender_id = db.Column(db.String(36), db.ForeignKey('profiles.id'), nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    sender = db.relationship('Profile', backref='sent_messages')

    def to_dict(self):
        """Convert message to dictionary."""
        return {
            'id': self.id,
            'conversation_id': self.conversation_id,
            'sender_id': self.sender_id,
            'content': self.content,
            'created_at': utc_isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<Message {self.id} in Conversation {self.conversation_id}>'
