"""Shared authentication utilities.

These decorators resolve the bearer token through the session provider
on every request, so expired, revoked or refreshed tokens are rejected
as soon as the provider knows about them.
"""

from functools import wraps
from flask import request, jsonify, g

from tekasomba.services.session import get_session


def _bearer_token():
    auth_header = request.headers.get('Authorization')
    if not auth_header:
        return None
    # Support both "Bearer <token>" and raw token formats
    return auth_header.split(' ')[1] if ' ' in auth_header else auth_header


def token_required(f):
    """
    Decorator to require a valid session.

    Passes the principal id as the first argument to the decorated
    function and stores the Session on ``g.session``.

    Usage:
        @bp.route('/protected')
        @token_required
        def protected_route(current_user_id):
            return jsonify({'user_id': current_user_id})
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        token = _bearer_token()
        if not token:
            return jsonify({'error': 'Token is missing'}), 401

        session = get_session(token)
        if session is None:
            return jsonify({'error': 'Token is invalid or expired'}), 401

        g.session = session
        return f(session.user_id, *args, **kwargs)
    return decorated


def token_optional(f):
    """
    Decorator that optionally resolves a session.

    Passes the principal id, or None for anonymous visitors.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        session = get_session(_bearer_token())
        g.session = session
        return f(session.user_id if session else None, *args, **kwargs)
    return decorated
