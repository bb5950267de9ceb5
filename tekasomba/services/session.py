"""Identity session provider.

Issues and resolves JWT sessions and broadcasts every auth state
transition on the ``auth-state-changed`` blinker signal. The provider is
the only writer of session state; anything interested in sign-in,
sign-out or refresh subscribes with ``on_auth_state_change`` instead of
keeping its own copy. Privileged request handlers re-resolve the bearer
token on every call, so a sign-out or refresh that happened in between
is always observed.
"""

import logging
import secrets
import threading
from datetime import datetime, timedelta

import jwt
from blinker import Namespace
from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from tekasomba import db
from tekasomba.constants import DEFAULT_ACCOUNT_TYPE
from tekasomba.errors import Conflict, StorageFailure, Unauthenticated, ValidationError
from tekasomba.models import Profile
from tekasomba.utils.phone import compose_phone
from tekasomba.utils.validation import validate_signup_data

logger = logging.getLogger(__name__)

SIGNED_IN = 'SIGNED_IN'
SIGNED_OUT = 'SIGNED_OUT'
TOKEN_REFRESHED = 'TOKEN_REFRESHED'
USER_UPDATED = 'USER_UPDATED'

_signals = Namespace()
auth_state_changed = _signals.signal('auth-state-changed')


class Session:
    """An authenticated principal and the token that proves it."""

    def __init__(self, user_id, access_token, jti, expires_at):
        self.user_id = user_id
        self.access_token = access_token
        self.jti = jti
        self.expires_at = expires_at

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'access_token': self.access_token,
            'token_type': 'bearer',
            'expires_at': self.expires_at.isoformat() + 'Z',
        }

    def __repr__(self):
        return f'<Session {self.user_id} ({self.jti})>'


class RevokedTokens:
    """Process-wide set of revoked token ids."""

    def __init__(self):
        self._lock = threading.Lock()
        self._revoked = {}

    def revoke(self, jti, expires_at):
        with self._lock:
            self._revoked[jti] = expires_at
            self._purge_expired()

    def is_revoked(self, jti):
        with self._lock:
            return jti in self._revoked

    def clear(self):
        with self._lock:
            self._revoked.clear()

    def _purge_expired(self):
        now = datetime.utcnow()
        for jti in [j for j, exp in self._revoked.items() if exp < now]:
            del self._revoked[jti]


class SessionProvider:
    """Single writer of auth state; broadcasts transitions to subscribers."""

    def __init__(self, signal=auth_state_changed, revoked=None):
        self.signal = signal
        self.revoked = revoked or RevokedTokens()

    # -- subscription ---------------------------------------------------

    def on_auth_state_change(self, callback):
        """Subscribe callback(event, session). Returns an unsubscribe function."""
        def receiver(sender, event=None, session=None):
            callback(event, session)

        self.signal.connect(receiver, weak=False)

        def unsubscribe():
            self.signal.disconnect(receiver)

        return unsubscribe

    def _emit(self, event, session):
        logger.debug(f'Auth state change: {event} for {session.user_id if session else None}')
        self.signal.send(self, event=event, session=session)

    # -- tokens ---------------------------------------------------------

    def _issue(self, user_id):
        jti = secrets.token_hex(16)
        expires_at = datetime.utcnow() + timedelta(seconds=current_app.config['JWT_ACCESS_TOKEN_EXPIRES'])
        payload = {
            'user_id': user_id,
            'jti': jti,
            'exp': expires_at,
        }
        token = jwt.encode(payload, current_app.config['JWT_SECRET_KEY'], algorithm='HS256')
        return Session(user_id, token, jti, expires_at.replace(microsecond=0))

    def get_session(self, token):
        """Resolve a bearer token to a Session, or None if invalid, expired or revoked."""
        if not token:
            return None
        try:
            payload = jwt.decode(token, current_app.config['JWT_SECRET_KEY'], algorithms=['HS256'])
        except jwt.ExpiredSignatureError:
            logger.debug('Rejected expired token')
            return None
        except jwt.InvalidTokenError:
            logger.debug('Rejected invalid token')
            return None

        jti = payload.get('jti')
        user_id = payload.get('user_id')
        if not jti or not user_id or self.revoked.is_revoked(jti):
            return None

        expires_at = datetime.utcfromtimestamp(payload['exp'])
        return Session(user_id, token, jti, expires_at)

    # -- transitions ----------------------------------------------------

    def _find_profile(self, email):
        try:
            return Profile.query.filter_by(email=email).first()
        except SQLAlchemyError as e:
            logger.error(f'Could not look up account {email}: {e}')
            raise StorageFailure()

    def sign_up(self, data):
        """Create an account and sign it in. Returns (profile, session)."""
        error = validate_signup_data(data)
        if error:
            raise ValidationError(error)

        email = data['email'].strip().lower()
        if self._find_profile(email):
            raise Conflict('Email already exists')

        full_name = data.get('full_name')
        profile = Profile(
            email=email,
            full_name=full_name.strip() if full_name else None,
            phone_number=compose_phone(data.get('phone_prefix', '+243'), data.get('phone_number')),
            account_type=data.get('account_type') or DEFAULT_ACCOUNT_TYPE,
        )
        profile.set_password(data['password'])

        try:
            db.session.add(profile)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise Conflict('Email already exists')
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f'Could not register account {email}: {e}')
            raise StorageFailure()

        logger.info(f'New account registered: {profile.id}')
        session = self._issue(profile.id)
        self._emit(SIGNED_IN, session)
        return profile, session

    def sign_in(self, email, password):
        """Authenticate with email and password. Returns (profile, session)."""
        if not email or not password:
            raise ValidationError('Missing email or password')

        profile = self._find_profile(email.strip().lower())
        if not profile or not profile.check_password(password):
            raise Unauthenticated('Invalid email or password')

        session = self._issue(profile.id)
        self._emit(SIGNED_IN, session)
        return profile, session

    def sign_out(self, session):
        """Revoke the session's token."""
        if session is None:
            raise Unauthenticated()
        self.revoked.revoke(session.jti, session.expires_at)
        self._emit(SIGNED_OUT, session)

    def refresh(self, session):
        """Swap the session's token for a fresh one."""
        if session is None:
            raise Unauthenticated()
        self.revoked.revoke(session.jti, session.expires_at)
        new_session = self._issue(session.user_id)
        self._emit(TOKEN_REFRESHED, new_session)
        return new_session

    def notify_user_updated(self, session):
        self._emit(USER_UPDATED, session)


provider = SessionProvider()


def on_auth_state_change(callback):
    return provider.on_auth_state_change(callback)


def get_session(token):
    return provider.get_session(token)


def _log_auth_event(event, session):
    logger.info(f'{event}: user {session.user_id if session else None}')


_listeners_registered = False


def register_session_listeners():
    """Attach the application's auth-state subscribers once per process."""
    global _listeners_registered
    if _listeners_registered:
        return

    from tekasomba.services.profiles import complete_profile_on_sign_in

    on_auth_state_change(_log_auth_event)
    on_auth_state_change(complete_profile_on_sign_in)
    _listeners_registered = True
