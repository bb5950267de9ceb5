"""Profile model: the authenticated principal and its public seller data."""

from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from tekasomba import db
from tekasomba.constants import DEFAULT_ACCOUNT_TYPE
from tekasomba.models.base import new_id, utc_isoformat


class Profile(db.Model):
    """Marketplace account, either an individual or a professional seller."""

    __tablename__ = 'profiles'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    email = db.Column(db.String(254), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    full_name = db.Column(db.String(120), nullable=True)
    account_type = db.Column(db.String(20), default=DEFAULT_ACCOUNT_TYPE, nullable=False)  # 'particulier', 'professionnel'
    phone_number = db.Column(db.String(20), nullable=True)
    city = db.Column(db.String(100), nullable=True)
    is_verified_pro = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    products = db.relationship('Product', backref='seller', lazy=True, foreign_keys='Product.seller_id')

    def set_password(self, password):
        """Hash and set the account password."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Check if the provided password matches the hash."""
        return check_password_hash(self.password_hash, password)

    @property
    def display_name(self):
        """Name shown to other users; falls back to the email local part."""
        if self.full_name:
            return self.full_name
        return self.email.split('@')[0] if self.email else 'Utilisateur'

    def to_public_dict(self):
        """Fields any visitor may see on a store page."""
        return {
            'id': self.id,
            'full_name': self.full_name,
            'display_name': self.display_name,
            'account_type': self.account_type,
            'is_verified_pro': self.is_verified_pro,
            'phone_number': self.phone_number,
            'city': self.city,
            'created_at': utc_isoformat(self.created_at),
        }

    def to_summary_dict(self):
        """Short seller block embedded in product and favorite payloads."""
        return {
            'id': self.id,
            'full_name': self.full_name,
            'display_name': self.display_name,
            'is_verified_pro': self.is_verified_pro,
        }

    def to_dict(self):
        """Full profile, only returned to its owner."""
        data = self.to_public_dict()
        data.update({
            'email': self.email,
            'updated_at': utc_isoformat(self.updated_at),
        })
        return data

    def __repr__(self):
        return f'<Profile {self.id}: {self.email}>'
