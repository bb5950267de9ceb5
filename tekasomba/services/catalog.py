"""Listing catalog: product search, detail and seller-side listing management."""

import logging

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from tekasomba import db
from tekasomba.constants import DEFAULT_CONDITION, DEFAULT_CURRENCY, is_filter_value
from tekasomba.errors import Forbidden, NotFound, StorageFailure, Unauthenticated, ValidationError
from tekasomba.models import Category, Product
from tekasomba.services.storage import upload_product_photos
from tekasomba.utils.phone import whatsapp_contact_url
from tekasomba.utils.validation import parse_price, validate_product_data

logger = logging.getLogger(__name__)


def _escape_like(term):
    return term.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


def list_products(category=None, city=None, text=None):
    """Active products matching every given filter, newest first.

    Blank values and 'all' mean "no filter". ``text`` is a
    case-insensitive substring match on title or description.
    """
    query = Product.query.filter(Product.is_active.is_(True))

    if is_filter_value(category):
        query = query.filter(Product.category_id == category.strip())

    if is_filter_value(city):
        query = query.filter(Product.location_city == city.strip())

    if text and text.strip():
        pattern = f'%{_escape_like(text.strip())}%'
        query = query.filter(
            or_(
                Product.title.ilike(pattern, escape='\\'),
                Product.description.ilike(pattern, escape='\\')
            )
        )

    try:
        return query.order_by(Product.created_at.desc()).all()
    except SQLAlchemyError as e:
        logger.error(f'Product search failed: {e}')
        raise StorageFailure()


def list_categories():
    try:
        return Category.query.order_by(Category.name).all()
    except SQLAlchemyError as e:
        logger.error(f'Could not load categories: {e}')
        raise StorageFailure()


def _load_product(product_id):
    try:
        product = db.session.get(Product, product_id)
    except SQLAlchemyError as e:
        logger.error(f'Could not load product {product_id}: {e}')
        raise StorageFailure()
    if product is None:
        raise NotFound('Product not found')
    return product


def get_product(product_id):
    """Product with its category, seller and WhatsApp contact link."""
    product = _load_product(product_id)

    data = product.to_dict(include_relations=True)
    seller = product.seller
    data['whatsapp_url'] = whatsapp_contact_url(seller.phone_number, product.title) if seller else None
    return data


def _get_owned_product(principal_id, product_id):
    if not principal_id:
        raise Unauthenticated()
    product = _load_product(product_id)
    if product.seller_id != principal_id:
        raise Forbidden('Only the seller can modify this listing')
    return product


def _require_category(category_id):
    try:
        category = db.session.get(Category, category_id)
    except SQLAlchemyError as e:
        logger.error(f'Could not load category {category_id}: {e}')
        raise StorageFailure()
    if category is None:
        raise ValidationError('Please select a category')


def create_product(principal_id, data, photos=()):
    """Validate, upload photos, and insert a listing owned by principal_id.

    Returns (product, warnings). Failed photo uploads become warnings.
    """
    if not principal_id:
        raise Unauthenticated('You must be signed in to post a listing')

    error = validate_product_data(data)
    if error:
        raise ValidationError(error)
    _require_category(data['category_id'])

    photo_urls, warnings = upload_product_photos(photos) if photos else ([], [])

    product = Product(
        seller_id=principal_id,
        title=data['title'].strip(),
        description=data['description'].strip(),
        price=parse_price(data['price']),
        currency=data.get('currency') or DEFAULT_CURRENCY,
        condition=data.get('condition') or DEFAULT_CONDITION,
        location_city=data['location_city'],
        category_id=data['category_id'],
        photo_urls=photo_urls,
    )

    try:
        db.session.add(product)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f'Could not create product for {principal_id}: {e}')
        raise StorageFailure()

    logger.info(f'Product {product.id} created by {principal_id} with {len(photo_urls)} photo(s)')
    return product, warnings


def update_product(principal_id, product_id, changes):
    """Apply changes to a listing the principal owns."""
    product = _get_owned_product(principal_id, product_id)

    error = validate_product_data(changes, partial=True)
    if error:
        raise ValidationError(error)
    if 'category_id' in changes:
        _require_category(changes['category_id'])

    for key, value in changes.items():
        if key == 'price':
            value = parse_price(value)
        elif isinstance(value, str):
            value = value.strip()
        setattr(product, key, value)

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f'Could not update product {product_id}: {e}')
        raise StorageFailure()

    logger.info(f'Product {product.id} updated ({", ".join(sorted(changes))})')
    return product


def deactivate_product(principal_id, product_id):
    """Soft-remove a listing; it stays referenced by favorites and conversations."""
    product = _get_owned_product(principal_id, product_id)
    product.is_active = False

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f'Could not deactivate product {product_id}: {e}')
        raise StorageFailure()

    logger.info(f'Product {product.id} deactivated')
    return product


def seed_categories(categories=None):
    """Insert any missing reference categories. Returns the number added."""
    from tekasomba.constants import DEFAULT_CATEGORIES

    existing = {c.slug for c in Category.query.all()}
    added = 0
    for name, slug in categories or DEFAULT_CATEGORIES:
        if slug in existing:
            continue
        db.session.add(Category(name=name, slug=slug))
        added += 1

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f'Could not seed categories: {e}')
        raise StorageFailure()

    if added:
        logger.info(f'Seeded {added} categories')
    return added
