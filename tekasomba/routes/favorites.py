"""Favorites routes for managing a user's saved products."""

from flask import Blueprint, request, jsonify

from tekasomba.services import favorites
from tekasomba.utils.auth import token_required

favorites_bp = Blueprint('favorites', __name__)


@favorites_bp.route('', methods=['POST'])
@token_required
def toggle_favorite(current_user_id):
    """Toggle favorite status for a product (add if absent, remove if present)."""
    data = request.get_json(silent=True) or {}
    product_id = data.get('product_id')

    if not product_id:
        return jsonify({'error': 'product_id is required'}), 400

    state = favorites.toggle_favorite(current_user_id, product_id)

    return jsonify({
        'state': state,
        'is_favorited': state == favorites.FAVORITED,
        'message': 'Added to favorites' if state == favorites.FAVORITED else 'Removed from favorites'
    }), 200


@favorites_bp.route('', methods=['GET'])
@token_required
def get_favorites(current_user_id):
    """Get the current user's favorited products."""
    products = favorites.list_favorites(current_user_id)
    return jsonify({
        'favorites': products,
        'total': len(products)
    }), 200


@favorites_bp.route('/check', methods=['GET'])
@token_required
def check_favorites(current_user_id):
    """Check if multiple products are favorited by the current user.

    Query params:
    - ids: comma-separated product ids
    """
    ids_param = request.args.get('ids', '')
    product_ids = [pid.strip() for pid in ids_param.split(',') if pid.strip()]

    if not product_ids:
        return jsonify({'error': 'ids parameter is required'}), 400

    return jsonify({'favorites': favorites.check_favorites(current_user_id, product_ids)}), 200
