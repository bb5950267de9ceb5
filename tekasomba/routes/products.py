"""Product routes for the classifieds catalog."""

from flask import Blueprint, request, jsonify

from tekasomba.services import catalog
from tekasomba.utils.auth import token_required

products_bp = Blueprint('products', __name__)
categories_bp = Blueprint('categories', __name__)


@categories_bp.route('', methods=['GET'])
def get_categories():
    categories = catalog.list_categories()
    return jsonify({'categories': [c.to_dict() for c in categories]}), 200


@products_bp.route('', methods=['GET'])
def get_products():
    """Search active products.

    Query params:
    - category: category id ('all' for any)
    - city: exact city ('all' for any)
    - q: free text matched against title and description
    """
    products = catalog.list_products(
        category=request.args.get('category'),
        city=request.args.get('city'),
        text=request.args.get('q')
    )
    return jsonify({
        'products': [p.to_card_dict() for p in products],
        'total': len(products)
    }), 200


@products_bp.route('/<product_id>', methods=['GET'])
def get_product(product_id):
    return jsonify(catalog.get_product(product_id)), 200


@products_bp.route('', methods=['POST'])
@token_required
def create_product(current_user_id):
    """Create a listing. Accepts JSON, or multipart form data with up to 4 'photos'."""
    if request.files or request.form:
        data = request.form.to_dict()
        photos = [
            (f.read(), f.filename or 'photo.jpg', f.mimetype or 'image/jpeg')
            for f in request.files.getlist('photos') if f
        ]
    else:
        data = request.get_json(silent=True) or {}
        photos = []

    product, warnings = catalog.create_product(current_user_id, data, photos)

    return jsonify({
        'message': 'Listing published successfully',
        'product': product.to_dict(),
        'warnings': warnings
    }), 201


@products_bp.route('/<product_id>', methods=['PUT'])
@token_required
def update_product(current_user_id, product_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return jsonify({'error': 'No data provided'}), 400

    product = catalog.update_product(current_user_id, product_id, data)

    return jsonify({
        'message': 'Listing updated successfully',
        'product': product.to_dict()
    }), 200


@products_bp.route('/<product_id>', methods=['DELETE'])
@token_required
def deactivate_product(current_user_id, product_id):
    """Take a listing offline."""
    catalog.deactivate_product(current_user_id, product_id)
    return jsonify({'message': 'Listing deactivated'}), 200
