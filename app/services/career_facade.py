from __future__ import annotations

from fastapi.responses import JSONResponse

from career.errors import INVALID_INPUT, CareerError, ConflictError, NotFoundError, PreconditionError, ValidationError

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (PreconditionError, 422),
)


def status_for(error: CareerError) -> int:
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(error, cls):
            return status
    return 400


def _career_error_response(error: CareerError) -> JSONResponse:
    payload = {
        "ok": False,
        "error": {
            "code": error.code,
            "message": error.message,
            "details": error.details,
        },
    }
    return JSONResponse(status_code=status_for(error), content=payload)


def _require_profile_id(header_value: str | None) -> str:
    """Profile identity comes from the X-Profile-Id header."""
    profile_id = str(header_value or "").strip()
    if not profile_id:
        raise ValidationError(INVALID_INPUT, "X-Profile-Id header is required", {"field": "X-Profile-Id"})
    return profile_id
