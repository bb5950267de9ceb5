"""Product model for classifieds listings."""

from datetime import datetime
from tekasomba import db
from tekasomba.constants import DEFAULT_CURRENCY, DEFAULT_CONDITION
from tekasomba.models.base import new_id, utc_isoformat


class Product(db.Model):
    """A listing posted by a seller."""

    __tablename__ = 'products'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    seller_id = db.Column(db.String(36), db.ForeignKey('profiles.id'), nullable=False, index=True)
    category_id = db.Column(db.String(36), db.ForeignKey('categories.id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False, index=True)
    description = db.Column(db.Text, nullable=False)
    price = db.Column(db.Numeric(14, 2), nullable=False)
    currency = db.Column(db.String(3), default=DEFAULT_CURRENCY, nullable=False)  # 'CDF', 'USD'
    location_city = db.Column(db.String(100), nullable=False, index=True)
    condition = db.Column(db.String(20), default=DEFAULT_CONDITION, nullable=False)
    photo_urls = db.Column(db.JSON, nullable=False, default=list)  # Ordered list of public URLs
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    category = db.relationship('Category', backref=db.backref('products', lazy='dynamic'))

    __table_args__ = (
        db.CheckConstraint('price > 0', name='product_price_positive'),
    )

    @property
    def cover_photo(self):
        """First photo URL, or None when the listing has no photos."""
        return self.photo_urls[0] if self.photo_urls else None

    def to_card_dict(self):
        """Compact payload used in listing grids."""
        return {
            'id': self.id,
            'title': self.title,
            'price': float(self.price) if self.price is not None else None,
            'currency': self.currency,
            'photo_urls': list(self.photo_urls or []),
            'location_city': self.location_city,
            'is_active': self.is_active,
            'created_at': utc_isoformat(self.created_at),
        }

    def to_dict(self, include_relations=False):
        """Convert product to dictionary."""
        data = self.to_card_dict()
        data.update({
            'description': self.description,
            'condition': self.condition,
            'seller_id': self.seller_id,
            'category_id': self.category_id,
            'updated_at': utc_isoformat(self.updated_at),
        })
        if include_relations:
            data['category'] = self.category.to_dict() if self.category else None
            data['seller'] = self.seller.to_public_dict() if self.seller else None
        return data

    def __repr__(self):
        return f'<Product {self.id}: {self.title}>'
