"""
Domain error base class and the DRF exception handler.

Every failure the core can report to a caller is a `ClubError` subclass
with a stable `code`, a human-readable message and an HTTP status.  The
handler below renders them as ``{"error": ..., "code": ..., **payload}``
so the views never have to translate errors themselves.
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ClubError(Exception):
    """Base class for errors that map onto a user-visible response."""

    code = "error"
    default_message = "Request could not be completed"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message=None, **payload):
        self.message = message or self.default_message
        self.payload = payload
        super().__init__(self.message)

    def as_dict(self) -> dict:
        return {"error": self.message, "code": self.code, **self.payload}


def api_exception_handler(exc, context):
    if isinstance(exc, ClubError):
        return Response(exc.as_dict(), status=exc.status_code)
    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.exception("Unhandled error in %s", type(view).__name__ if view else "unknown view")
    return response
