"""Authentication routes: registration, login, logout, refresh and own profile."""

from flask import Blueprint, request, jsonify, g

from tekasomba import limiter
from tekasomba.services import profiles
from tekasomba.services.session import provider
from tekasomba.utils.auth import token_required

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/register', methods=['POST'])
@limiter.limit("5 per minute")
def register():
    """Register a new account and sign it in."""
    data = request.get_json(silent=True) or {}

    if not all(data.get(k) for k in ['email', 'password']):
        return jsonify({'error': 'Missing required fields'}), 400

    profile, session = provider.sign_up(data)

    return jsonify({
        'message': 'User registered successfully',
        'token': session.access_token,
        'session': session.to_dict(),
        'user': profile.to_dict()
    }), 201


@auth_bp.route('/login', methods=['POST'])
@limiter.limit("10 per minute")
def login():
    """Authenticate and return a session token."""
    data = request.get_json(silent=True) or {}

    profile, session = provider.sign_in(data.get('email'), data.get('password'))

    return jsonify({
        'message': 'Login successful',
        'token': session.access_token,
        'session': session.to_dict(),
        'user': profile.to_dict()
    }), 200


@auth_bp.route('/logout', methods=['POST'])
@token_required
def logout(current_user_id):
    """Revoke the current token."""
    provider.sign_out(g.session)
    return jsonify({'message': 'Logged out'}), 200


@auth_bp.route('/refresh', methods=['POST'])
@token_required
def refresh(current_user_id):
    """Exchange the current token for a new one."""
    session = provider.refresh(g.session)
    return jsonify({
        'token': session.access_token,
        'session': session.to_dict()
    }), 200


@auth_bp.route('/me', methods=['GET'])
@token_required
def get_me(current_user_id):
    profile = profiles.get_own_profile(current_user_id)
    return jsonify({'user': profile.to_dict()}), 200


@auth_bp.route('/me', methods=['PUT'])
@token_required
def update_me(current_user_id):
    """Update the signed-in user's profile."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return jsonify({'error': 'No data provided'}), 400

    profile = profiles.update_profile(current_user_id, data)
    provider.notify_user_updated(g.session)

    return jsonify({
        'message': 'Profile updated successfully',
        'user': profile.to_dict()
    }), 200
