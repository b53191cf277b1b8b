"""
FastAPI exception handlers that turn escaping exceptions into ErrorDetails responses.

Mapping (most specific first):
    ResourceNotFoundError (UserNotFoundError)  -> 404, message = exception text
    RepositoryError                            -> exc.http_status()
    RequestValidationError (bad id / body)     -> 400, "Validation Error"
    Starlette HTTPException (unknown route...) -> its own status
    any other Exception                        -> 500, message = str(exc) verbatim

`details` is the request description "uri=<path>" except for validation errors,
where it lists the failed checks.

Register them on the app with `register_exception_handlers(app)`.
"""

from datetime import datetime, timezone
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from user_service.core.logging.middleware import REQUEST_ID_HEADER
from user_service.exceptions.base import RepositoryError, ResourceNotFoundError
from user_service.schemas.error import ErrorDetails

logger = logging.getLogger(__name__)


def describe_request(request: Request) -> str:
    return f"uri={request.url.path}"


def _error_response(status_code: int, body: ErrorDetails, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"), headers=headers)


def _validation_messages(exc: RequestValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        # loc looks like ("path", "id") or ("body", "firstName"); keep the field part
        loc = [str(part) for part in error.get("loc", ()) if part not in ("path", "body", "query")]
        field = ".".join(loc)
        msg = error.get("msg", "invalid value")
        messages.append(f"{field}: {msg}" if field else msg)
    return messages


async def not_found_handler(request: Request, exc: ResourceNotFoundError) -> JSONResponse:
    """
    404 Not Found.
    """
    logger.info("NotFound for %s %s: %s", request.method, request.url.path, exc.message)
    return _error_response(exc.http_status(), exc.to_error_details(describe_request(request)))


async def repository_error_handler(request: Request, exc: RepositoryError) -> JSONResponse:
    """
    Remaining repository/service errors, status taken from the exception's error_code.
    """
    logger.warning("RepositoryError for %s %s: %s", request.method, request.url.path, str(exc))
    return _error_response(exc.http_status(), exc.to_error_details(describe_request(request)))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    400 for requests FastAPI could not bind: non-positive or non-numeric ids,
    bodies that are not JSON objects, fields of the wrong JSON type.
    """
    messages = _validation_messages(exc)
    logger.info("RequestValidationError for %s %s: %s", request.method, request.url.path, messages)
    return _error_response(status.HTTP_400_BAD_REQUEST, ErrorDetails.validation(messages))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Framework HTTP errors (404 unknown route, 405 wrong method) in the ErrorDetails shape.
    """
    body = ErrorDetails(message=str(exc.detail), details=describe_request(request))
    return _error_response(exc.status_code, body, headers=getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Last resort: 500 whose message is `str(exc)` verbatim (so a KeyError('x')
    reads "'x'"), or the exception class name when that string is empty.
    Must never raise itself.

    This handler runs in Starlette's outermost middleware, outside
    RequestIDMiddleware, so the request id is read from `request.state` and
    set on the response and the log record explicitly.
    """
    request_id = getattr(request.state, "request_id", None)
    headers = {REQUEST_ID_HEADER: request_id} if request_id else None
    try:
        logger.exception(
            "Unhandled error for %s %s", request.method, request.url.path,
            extra={"request_id": request_id},
        )
        message = str(exc) or exc.__class__.__name__
        body = ErrorDetails(message=message, details=describe_request(request))
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, body, headers=headers)
    except Exception:
        # Building the normal body failed; answer with a hand-built one
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "message": "Internal Server Error",
                "details": "",
            },
            headers=headers,
        )


# Helper to register all handlers on an app (called from the app factory)
def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ResourceNotFoundError, not_found_handler)
    app.add_exception_handler(RepositoryError, repository_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
