"""Favorite model for saving products to a user's favorites."""

from datetime import datetime
from tekasomba import db
from tekasomba.models.base import utc_isoformat


class Favorite(db.Model):
    """A (user, product) pair. The pair itself is the identity."""

    __tablename__ = 'favorites'

    user_id = db.Column(db.String(36), db.ForeignKey('profiles.id'), primary_key=True)
    product_id = db.Column(db.String(36), db.ForeignKey('products.id'), primary_key=True, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    user = db.relationship('Profile', backref=db.backref('favorites', lazy='dynamic'))
    product = db.relationship('Product')

    # Unique constraint to prevent duplicate favorites
    __table_args__ = (
        db.UniqueConstraint('user_id', 'product_id', name='unique_user_favorite'),
    )

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'product_id': self.product_id,
            'created_at': utc_isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<Favorite {self.user_id} -> {self.product_id}>'
