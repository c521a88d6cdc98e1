from __future__ import annotations

from typing import Any, Callable, Optional

from flask import jsonify, request

from ..core.enums import ErrorKind
from ..core.exceptions import ValidationError
from ..core.result import Result

HTTP_STATUS = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.EVENT_NOT_FOUND: 404,
    ErrorKind.MEMBER_NOT_FOUND: 404,
    ErrorKind.ALREADY_MARKED: 409,
    ErrorKind.OUTSIDE_GEOFENCE: 422,
    ErrorKind.CREDENTIAL_REJECTED: 422,
    ErrorKind.LOCATION_UNAVAILABLE: 503,
    ErrorKind.OPERATION_FAILED: 500,
}


def json_body() -> dict:
    """Request JSON as a dict; anything else is a validation error."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def error_response(kind: ErrorKind, message: str):
    return jsonify({"success": False, "error": kind.value, "message": message}), HTTP_STATUS[kind]


def result_response(result: Result, serialize: Callable[[Any], Any], *, status: int = 200):
    if not result.ok:
        return error_response(result.error.kind, result.error.message)
    return jsonify({"success": True, "data": serialize(result.value)}), status


def optional_float(data: dict, key: str) -> Optional[float]:
    value = data.get(key)
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be a number")
