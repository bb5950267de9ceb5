"""Favorite toggle and favorites listing.

The toggle is a single flip: remove the (user, product) pair if it
exists, insert it otherwise. It never reads before writing. The delete
reports whether a row existed, and a uniqueness violation on insert
means a concurrent request already favorited the product.
"""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from tekasomba import db
from tekasomba.errors import StorageFailure, Unauthenticated
from tekasomba.models import Favorite, Product

logger = logging.getLogger(__name__)

FAVORITED = 'favorited'
UNFAVORITED = 'unfavorited'


def _delete_pair(principal_id, product_id):
    """Delete the pair if present. Returns the number of rows removed."""
    return Favorite.query.filter_by(
        user_id=principal_id,
        product_id=product_id
    ).delete()


def toggle_favorite(principal_id, product_id):
    """Flip the favorite state of product_id for principal_id.

    Returns FAVORITED or UNFAVORITED.
    """
    if not principal_id:
        raise Unauthenticated()

    try:
        if _delete_pair(principal_id, product_id):
            db.session.commit()
            logger.debug(f'Favorite removed: {principal_id} -> {product_id}')
            return UNFAVORITED

        db.session.add(Favorite(user_id=principal_id, product_id=product_id))
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        try:
            already_favorited = is_favorited(principal_id, product_id)
        except SQLAlchemyError as e:
            logger.error(f'Could not reload favorite after conflict: {e}')
            raise StorageFailure()
        if already_favorited:
            # Lost a race with a concurrent insert of the same pair
            logger.info(f'Favorite already present: {principal_id} -> {product_id}')
            return FAVORITED
        logger.error(f'Favorite insert conflicted but no row found: {principal_id} -> {product_id}')
        raise StorageFailure()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f'Could not toggle favorite {principal_id} -> {product_id}: {e}')
        raise StorageFailure()

    logger.debug(f'Favorite added: {principal_id} -> {product_id}')
    return FAVORITED


def is_favorited(principal_id, product_id):
    """Check if a product is favorited by a user."""
    if not principal_id:
        return False
    return Favorite.query.filter_by(
        user_id=principal_id,
        product_id=product_id
    ).first() is not None


def check_favorites(principal_id, product_ids):
    """Map each product id to its favorite state for principal_id."""
    if not principal_id:
        raise Unauthenticated()
    if not product_ids:
        return {}

    try:
        favorited = {
            fav.product_id for fav in Favorite.query.filter(
                Favorite.user_id == principal_id,
                Favorite.product_id.in_(product_ids)
            )
        }
    except SQLAlchemyError as e:
        logger.error(f'Could not check favorites for {principal_id}: {e}')
        raise StorageFailure()
    return {pid: pid in favorited for pid in product_ids}


def list_favorites(principal_id):
    """Favorited products of principal_id, most recently favorited first."""
    if not principal_id:
        raise Unauthenticated()

    try:
        rows = db.session.query(Favorite, Product).join(
            Product, Product.id == Favorite.product_id
        ).filter(
            Favorite.user_id == principal_id
        ).order_by(Favorite.created_at.desc()).all()
    except SQLAlchemyError as e:
        logger.error(f'Could not list favorites for {principal_id}: {e}')
        raise StorageFailure()

    result = []
    for fav, product in rows:
        item = product.to_card_dict()
        item['seller'] = product.seller.to_summary_dict() if product.seller else None
        item['favorited_at'] = fav.to_dict()['created_at']
        result.append(item)
    return result
