from flask import Blueprint, jsonify


# Create Blueprint
main_routes_bp = Blueprint('main_routes', __name__)

SERVICE_NAME = "event-sheet-api"
SERVICE_VERSION = "0.1.0"


@main_routes_bp.route('/')
def index():
    """Health check."""
    return jsonify({"ok": True, "service": SERVICE_NAME, "version": SERVICE_VERSION})
