# app/routes/files.py
from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request, send_file, url_for

from services import file_service
from services.auth import admin_pass_required
from services.exceptions import ServiceError, UploadValidationError
from services.headers import HEADER_ALIASES
from services.normalizer import normalize_bytes

files_bp = Blueprint("files", __name__, url_prefix="/api")

logger = logging.getLogger(__name__)


def _upload_folder() -> str:
    return current_app.config["UPLOAD_FOLDER"]


@files_bp.errorhandler(ServiceError)
def handle_service_error(exc: ServiceError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.path} rejected ({exc.status_code}): {exc.message}")
    return jsonify({"ok": False, "error": exc.message}), exc.status_code


@files_bp.errorhandler(413)
def handle_too_large(_exc):
    return jsonify({"ok": False, "error": "File too large"}), 413


@files_bp.route("/files", methods=["GET"])
def list_files():
    files = [
        {
            "name": f["name"],
            "size": f["size"],
            "mtime": f["mtime"].isoformat(),
            "url": url_for("files.parsed_file", name=f["name"], _external=True),
        }
        for f in file_service.list_files(_upload_folder())
    ]
    return jsonify({"ok": True, "files": files})


@files_bp.route("/files/<path:name>/parsed", methods=["GET"])
def parsed_file(name):
    safe_name = file_service.validate_filename(name)
    data = file_service.read_file_bytes(_upload_folder(), safe_name)
    parsed = normalize_bytes(data, current_app.config.get("HEADER_ALIASES", HEADER_ALIASES))
    logger.info(f"Parsed {safe_name}: {len(parsed.rows)} rows from {len(parsed.sheet_counts)} sheet(s)")
    return jsonify(parsed.to_payload(safe_name))


@files_bp.route("/files/<path:name>/raw", methods=["GET"])
def raw_file(name):
    path = file_service.stored_path(_upload_folder(), name)
    return send_file(path, mimetype=file_service.XLSX_MIMETYPE, as_attachment=False)


@files_bp.route("/upload", methods=["POST"])
def upload_file():
    uploaded = request.files.get("file")
    if not file_service.validate_file(uploaded):
        raise UploadValidationError("Missing file")
    name, size = file_service.save_upload(_upload_folder(), uploaded)
    return jsonify({"ok": True, "name": name, "size": size})


@files_bp.route("/files/<path:name>", methods=["DELETE"])
@admin_pass_required
def delete_file(name):
    deleted = file_service.delete_file(_upload_folder(), name)
    return jsonify({"ok": True, "deleted": deleted})
