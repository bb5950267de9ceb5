"""Category model, seeded reference data."""

from tekasomba import db
from tekasomba.models.base import new_id


class Category(db.Model):
    __tablename__ = 'categories'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(80), unique=True, nullable=False)
    slug = db.Column(db.String(80), unique=True, nullable=False, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'slug': self.slug,
        }

    def __repr__(self):
        return f'<Category {self.slug}>'
