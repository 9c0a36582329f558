import hmac
import logging
from functools import wraps

from flask import current_app, request

from services.exceptions import AuthError


logger = logging.getLogger(__name__)

ADMIN_PASS_HEADER = "X-Admin-Pass"


def supplied_password():
    """Credential from the X-Admin-Pass header, ?password= or a JSON body "password"."""
    password = request.headers.get(ADMIN_PASS_HEADER) or request.args.get("password")
    if not password:
        body = request.get_json(silent=True)
        if isinstance(body, dict):
            password = body.get("password")
    return password if isinstance(password, str) else None


def check_admin_pass(supplied, expected):
    """
    Constant-time comparison of the shared delete secret.

    Raises:
        AuthError: If no secret is configured or the supplied one doesn't match.
    """
    if not expected:
        raise AuthError("Deletion is disabled")
    if not supplied or not hmac.compare_digest(supplied.encode("utf-8"), str(expected).encode("utf-8")):
        raise AuthError("Wrong password")


def admin_pass_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            check_admin_pass(supplied_password(), current_app.config.get("DELETE_PASS"))
        except AuthError:
            logger.warning(f"Rejected {request.method} {request.path} from {request.remote_addr}")
            raise
        return view(*args, **kwargs)
    return wrapper
