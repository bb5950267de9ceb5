"""Error taxonomy shared by services and routes.

Services raise these; the handler registered in create_app() turns them
into ``{'error': message}`` JSON responses with the matching status code.
"""

import logging
from flask import jsonify

logger = logging.getLogger(__name__)


class MarketplaceError(Exception):
    """Base class for errors surfaced to the client."""

    status_code = 400
    default_message = 'Request failed'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self):
        return {'error': self.message}


class ValidationError(MarketplaceError):
    status_code = 400
    default_message = 'Invalid data'


class EmptyMessage(MarketplaceError):
    status_code = 400
    default_message = 'Message content is required'


class SelfContactForbidden(MarketplaceError):
    status_code = 400
    default_message = 'Cannot start conversation with yourself'


class Unauthenticated(MarketplaceError):
    status_code = 401
    default_message = 'Authentication required'


class Forbidden(MarketplaceError):
    status_code = 403
    default_message = 'Access denied'


class NotFound(MarketplaceError):
    status_code = 404
    default_message = 'Not found'


class Conflict(MarketplaceError):
    status_code = 409
    default_message = 'Already exists'


class StorageFailure(MarketplaceError):
    status_code = 503
    default_message = 'Storage backend unavailable'


def register_error_handlers(app):
    """Render MarketplaceError subclasses as JSON."""

    @app.errorhandler(MarketplaceError)
    def handle_marketplace_error(error):
        if isinstance(error, StorageFailure):
            logger.error(f'Storage failure: {error.message}')
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def handle_not_found(error):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(429)
    def handle_rate_limited(error):
        return jsonify({'error': 'Too many requests'}), 429
