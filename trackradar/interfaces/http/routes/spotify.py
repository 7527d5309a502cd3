import logging

from flask import Blueprint, current_app, jsonify, request

from trackradar.errors import InvalidRequest, UpstreamFailure

logger = logging.getLogger(__name__)

spotify_bp = Blueprint('spotify_bp', __name__, url_prefix='/api')


def get_catalog_proxy():
    return current_app.extensions['catalog_proxy']


@spotify_bp.route('/spotify', methods=['POST'])
def proxy_catalog():
    """
    Proxy one catalog read: ``{"query": ...}`` searches tracks,
    ``{"trackId": ...}`` fetches that track's audio features.
    """
    payload = request.get_json(silent=True)
    try:
        result = get_catalog_proxy().handle(payload)
    except InvalidRequest as e:
        logger.info("Rejected catalog request: %s", e)
        return jsonify({"error": "Invalid request"}), 400
    except UpstreamFailure:
        # The proxy already logged the cause; clients only get the generic message
        return jsonify({"error": "Failed to fetch data"}), 500

    if isinstance(result, list):
        return jsonify([track.model_dump(mode='json') for track in result]), 200
    return jsonify(result.model_dump(mode='json')), 200
