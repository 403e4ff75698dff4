import logging
from flask import Blueprint
from werkzeug.exceptions import HTTPException
from app.utils.responses import error

errors_bp = Blueprint("errors_bp", __name__)


class AccessError(Exception):
    """Base class for errors surfaced verbatim to the calling layer."""
    status = 400

    def __init__(self, message: str = None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class PermissionDenied(AccessError):
    status = 403


class NotFound(AccessError):
    status = 404


class InvalidArgument(AccessError):
    status = 400


class InvalidState(AccessError):
    status = 409


@errors_bp.app_errorhandler(AccessError)
def handle_access_error(e):
    logging.info("request rejected: %s (%s)", e.message, e.__class__.__name__)
    return error(e.message, status=e.status, code=e.status)


@errors_bp.app_errorhandler(HTTPException)
def handle_http_exception(e):
    msg = e.description or getattr(e, "name", "HTTP Error")
    return error(msg, status=e.code, code=e.code)


@errors_bp.app_errorhandler(Exception)
def handle_unexpected_exception(e):
    logging.exception("Unhandled exception")
    return error(
        "An unexpected error occurred. Please try again later.",
        status=500,
        code=500,
    )
