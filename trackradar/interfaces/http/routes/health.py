from __future__ import annotations

from flask import Blueprint, current_app, jsonify

health_bp = Blueprint("health_bp", __name__)


@health_bp.route("/healthz")
def healthz():
    settings = current_app.extensions.get("app_settings")
    checks = {}

    if settings is not None and settings.spotify_client_id and settings.spotify_client_secret:
        checks["credentials"] = "configured"
    else:
        checks["credentials"] = "missing"

    checks["catalog_proxy"] = "ok" if current_app.extensions.get("catalog_proxy") else "unavailable"
    checks["token_cache"] = "enabled" if settings is not None and settings.token_cache_enabled else "disabled"

    healthy = checks["credentials"] == "configured" and checks["catalog_proxy"] == "ok"
    status = 200 if healthy else 503
    return jsonify({"status": "ok" if healthy else "degraded", "checks": checks}), status
