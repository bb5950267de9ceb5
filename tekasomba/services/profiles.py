"""Seller store view and profile management."""

import logging

from sqlalchemy.exc import SQLAlchemyError

from tekasomba import db
from tekasomba.errors import NotFound, StorageFailure, Unauthenticated, ValidationError
from tekasomba.models import Product, Profile
from tekasomba.utils.validation import validate_profile_data

logger = logging.getLogger(__name__)


def get_seller_public_view(seller_id, active_only=True):
    """Public profile of a seller plus their listings, newest first."""
    try:
        profile = db.session.get(Profile, seller_id)
        if profile is None:
            raise NotFound('Profile not found')

        query = Product.query.filter_by(seller_id=seller_id)
        if active_only:
            query = query.filter_by(is_active=True)
        products = query.order_by(Product.created_at.desc()).all()
    except SQLAlchemyError as e:
        logger.error(f'Could not load store of {seller_id}: {e}')
        raise StorageFailure()

    return {
        'profile': profile.to_public_dict(),
        'products': [p.to_card_dict() for p in products],
    }


def get_own_profile(principal_id):
    if not principal_id:
        raise Unauthenticated()
    try:
        profile = db.session.get(Profile, principal_id)
    except SQLAlchemyError as e:
        logger.error(f'Could not load profile {principal_id}: {e}')
        raise StorageFailure()
    if profile is None:
        raise NotFound('Profile not found')
    return profile


def update_profile(principal_id, changes):
    """Apply allowed profile changes for the signed-in user."""
    profile = get_own_profile(principal_id)

    error = validate_profile_data(changes)
    if error:
        raise ValidationError(error)

    for key, value in changes.items():
        setattr(profile, key, value.strip() if isinstance(value, str) else value)

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f'Could not update profile {principal_id}: {e}')
        raise StorageFailure()

    logger.info(f'Profile updated: {profile.id} ({", ".join(sorted(changes))})')
    return profile


def complete_profile_on_sign_in(event, session):
    """Fill a missing display name from the email local part on first sign-in."""
    from tekasomba.services.session import SIGNED_IN

    if event != SIGNED_IN or session is None:
        return

    profile = db.session.get(Profile, session.user_id)
    if profile is None or profile.full_name:
        return

    profile.full_name = profile.email.split('@')[0]
    try:
        db.session.commit()
        logger.info(f'Profile completed on sign-in: {profile.id}')
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f'Could not complete profile {profile.id}: {e}')
