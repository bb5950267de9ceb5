"""Helpers shared by the model modules."""

from uuid import uuid4


def new_id():
    """Generate an opaque record identifier."""
    return str(uuid4())


def utc_isoformat(dt):
    """Convert datetime to ISO format with Z suffix to indicate UTC."""
    if dt is None:
        return None
    return dt.isoformat() + 'Z'
