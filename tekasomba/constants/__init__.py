"""Shared constants for the application."""

from tekasomba.constants.listings import (
    SUPPORTED_CITIES,
    CURRENCIES,
    DEFAULT_CURRENCY,
    CONDITIONS,
    DEFAULT_CONDITION,
    ACCOUNT_TYPES,
    DEFAULT_ACCOUNT_TYPE,
    MAX_PHOTOS,
    MESSAGE_MAX_LENGTH,
    SNIPPET_LENGTH,
    DEFAULT_CATEGORIES,
    is_filter_value,
)

__all__ = [
    'SUPPORTED_CITIES',
    'CURRENCIES',
    'DEFAULT_CURRENCY',
    'CONDITIONS',
    'DEFAULT_CONDITION',
    'ACCOUNT_TYPES',
    'DEFAULT_ACCOUNT_TYPE',
    'MAX_PHOTOS',
    'MESSAGE_MAX_LENGTH',
    'SNIPPET_LENGTH',
    'DEFAULT_CATEGORIES',
    'is_filter_value',
]
