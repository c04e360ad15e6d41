"""Relay blueprint — /api/send-email

Public endpoint hit by the website's contact form. Forwards the message
to the business inbox and acknowledges the visitor.

Route Map:
  POST    /api/send-email — Accept form submission, relay via email
  OPTIONS /api/send-email — CORS preflight
  *       /api/send-email — 405, Allow: POST
"""

import logging

from flask import Blueprint, current_app, jsonify, make_response, request

from contact_relay.errors import MethodNotAllowed, RelayError
from contact_relay.services.relay_service import Disposition

relay_bp = Blueprint("relay", __name__, url_prefix="/api")

logger = logging.getLogger(__name__)

ALLOWED_METHOD = "POST"
RELAY_PATH = "/api/send-email"


def _cors_response(response):
    """Add CORS headers so cross-origin JS submissions work."""
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    return response


def _error_response(error):
    response = _cors_response(jsonify(error.to_dict()))
    response.status_code = error.status_code
    if isinstance(error, MethodNotAllowed):
        response.headers["Allow"] = ALLOWED_METHOD
    return response


def method_not_allowed_response():
    """405 for the relay route, whichever way the method was rejected."""
    return _error_response(MethodNotAllowed())


def _request_data():
    """Decoded body from either JSON or a standard HTML form POST."""
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form.to_dict()


@relay_bp.route(
    "/send-email",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
)
def send_email():
    """
    Accept a contact form submission and relay it via email.

    Accepts: { name, email, message, honeypot (hidden, must stay empty) }
    Returns: { ok: true } or { error: "..." }
    """
    if request.method == "OPTIONS":
        return _cors_response(make_response("", 204))

    if request.method != ALLOWED_METHOD:
        return method_not_allowed_response()

    relay = current_app.extensions["contact_relay"]

    try:
        disposition = relay.handle(_request_data())
    except RelayError as e:
        if e.status_code >= 500:
            logger.error(f"send-email error: {e}", exc_info=True)
        return _error_response(e)
    except Exception as e:
        logger.error(f"send-email error: {e}", exc_info=True)
        return _error_response(RelayError())

    if disposition is Disposition.DISCARDED:
        # Same answer as a real delivery so bots learn nothing.
        logger.info(f"send-email: discarded submission from {request.remote_addr}")

    return _cors_response(jsonify(ok=True)), 200
