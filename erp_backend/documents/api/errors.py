# documents/api/errors.py

from rest_framework.response import Response

from documents.services.exceptions import LifecycleError


def error_response(*, code: str, message: str, http_status: int, **details):
    """
    Canonical API error response.
    """
    body = {"code": code, "message": message}
    body.update(details)
    return Response({"error": body}, status=http_status)


def lifecycle_error_response(exc: LifecycleError):
    return error_response(
        code=exc.code,
        message=str(exc),
        http_status=exc.http_status,
        **exc.payload(),
    )
