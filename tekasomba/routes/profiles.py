"""Public seller store pages."""

from flask import Blueprint, request, jsonify

from tekasomba.services import profiles

profiles_bp = Blueprint('profiles', __name__)


@profiles_bp.route('/<seller_id>', methods=['GET'])
def get_store(seller_id):
    """Seller profile and listings. Pass all=1 to include inactive listings."""
    include_inactive = request.args.get('all', '').lower() in ('1', 'true', 'yes')
    view = profiles.get_seller_public_view(seller_id, active_only=not include_inactive)
    return jsonify(view), 200
