"""
Response Envelopes
==================
Uniform success/error JSON envelopes for every auth rejection.

    {"success": false, "message": "...", "data": null, "error": {...}}
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ValidationError
from starlette.responses import JSONResponse

from .exceptions import AuthError

# Friendly messages for pydantic error types
VALIDATION_MESSAGES = {
    "missing": "This field is required",
    "value_error": "Invalid value",
    "string_type": "Must be a string",
    "bool_parsing": "Invalid boolean value",
    "bool_type": "Invalid boolean value",
    "uuid_parsing": "Invalid uuid format",
    "uuid_type": "Invalid uuid format",
    "int_parsing": "Must be an integer",
    "json_invalid": "Malformed JSON",
}


class Response(BaseModel):
    success: bool
    message: str
    data: Any = None
    error: Optional[Dict[str, Any]] = None


def format_validation_message(error_type: str) -> str:
    return VALIDATION_MESSAGES.get(error_type, "")


def success_response(data: Any, message: str) -> Response:
    return Response(success=True, message=message, data=data)


def _validation_error_map(err: ValidationError) -> Dict[str, str]:
    fields = {}
    for item in err.errors():
        loc = item.get("loc") or ()
        name = ".".join(str(part) for part in loc).lower() or "__root__"
        fields[name] = format_validation_message(item.get("type", ""))
    return fields


def error_response(err: BaseException) -> Response:
    """
    Build the error envelope for any exception.

    Pydantic validation errors, directly or as the cause of an AuthError,
    become a field -> message map under ``error``.
    """
    message = getattr(err, "message", None) or str(err)
    response = Response(success=False, message=message)

    validation = err if isinstance(err, ValidationError) else err.__cause__
    if isinstance(validation, ValidationError):
        response.error = _validation_error_map(validation)
    elif isinstance(err, AuthError):
        error: Dict[str, Any] = {"code": err.code}
        if isinstance(err.details, dict):
            error.update(err.details)
        elif err.details is not None:
            error["details"] = err.details
        response.error = error

    return response


def error_json_response(err: BaseException, status_code: Optional[int] = None) -> JSONResponse:
    """Render the error envelope; status defaults to the error's own."""
    if status_code is None:
        status_code = err.status_code if isinstance(err, AuthError) else 500
    return JSONResponse(
        status_code=status_code,
        content=error_response(err).model_dump(),
    )
