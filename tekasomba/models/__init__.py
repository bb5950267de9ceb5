"""Database models for the marketplace application."""

from .profile import Profile
from .category import Category
from .product import Product
from .favorite import Favorite
from .message import Conversation, Message

__all__ = ['Profile', 'Category', 'Product', 'Favorite', 'Conversation', 'Message']
