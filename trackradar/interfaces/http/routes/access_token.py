import logging

from flask import Blueprint, current_app, jsonify

from trackradar.errors import TokenAcquisitionFailed

logger = logging.getLogger(__name__)

token_bp = Blueprint('token_bp', __name__, url_prefix='/api')


@token_bp.route('/token', methods=['GET'])
def get_access_token():
    """Hand a bearer token to the browser; the client secret never leaves the server."""
    provider = current_app.extensions['token_provider']
    try:
        token = provider.acquire_token()
    except TokenAcquisitionFailed as e:
        logger.error("Error getting Spotify access token: %s", e)
        return jsonify({"error": "Failed to get Spotify access token"}), 500
    return jsonify({"accessToken": token.access_token, "expiresAt": int(token.expires_at)}), 200
