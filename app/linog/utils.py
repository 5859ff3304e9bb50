"""
Request parsing and field validation helpers shared by the content modules.
"""
from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any

from flask import request

from app.linog.errors import INVALID, MISSING, OUT_OF_RANGE, FieldError, ValidationError

LATITUDE_RANGE = (-90.0, 90.0)
LONGITUDE_RANGE = (-180.0, 180.0)
INTEGER_RANGE = (-(2**31), 2**31 - 1)


def json_body() -> dict:
    """Parse the request body as a JSON object. A missing or unparsable body counts as empty."""
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError([FieldError("body", INVALID, "Request body must be a JSON object.")])
    return payload


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _check_length(field: str, label: str, text: str, max_length: int | None, errors: list[FieldError]) -> str | None:
    if max_length is not None and len(text) > max_length:
        errors.append(FieldError(field, OUT_OF_RANGE, f"{label} must be at most {max_length} characters."))
        return None
    return text


def require_text(
    payload: dict, field: str, errors: list[FieldError], label: str | None = None, *, max_length: int | None = None
) -> str | None:
    value = payload.get(field)
    label = label or field.replace("_", " ").capitalize()
    if is_blank(value):
        errors.append(FieldError(field, MISSING, f"{label} is required."))
        return None
    if not isinstance(value, str):
        errors.append(FieldError(field, INVALID, f"{label} must be a string."))
        return None
    return _check_length(field, label, value.strip(), max_length, errors)


def optional_text(payload: dict, field: str, errors: list[FieldError], *, max_length: int | None = None) -> str | None:
    value = payload.get(field)
    if is_blank(value):
        return None
    if not isinstance(value, str):
        errors.append(FieldError(field, INVALID, f"{field} must be a string."))
        return None
    return _check_length(field, field, value.strip(), max_length, errors)


def parse_coordinate(
    payload: dict,
    field: str,
    bounds: tuple[float, float],
    errors: list[FieldError],
    *,
    required: bool,
) -> float | None:
    """
    Parse a latitude/longitude. Zero is a real coordinate, not a missing one.
    Values outside ``bounds`` are rejected, never clamped.
    """
    value = payload.get(field)
    if is_blank(value):
        if required:
            errors.append(FieldError(field, MISSING, f"{field.capitalize()} is required."))
        return None
    if isinstance(value, bool):
        errors.append(FieldError(field, INVALID, f"{field.capitalize()} must be a number."))
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        errors.append(FieldError(field, INVALID, f"{field.capitalize()} must be a number."))
        return None
    if not math.isfinite(number):
        errors.append(FieldError(field, INVALID, f"{field.capitalize()} must be a finite number."))
        return None
    low, high = bounds
    if number < low or number > high:
        errors.append(
            FieldError(field, OUT_OF_RANGE, f"{field.capitalize()} must be between {low:g} and {high:g}.")
        )
        return None
    return number


def fits_integer(value: int) -> bool:
    """Whether ``value`` fits a 32-bit INTEGER column."""
    return INTEGER_RANGE[0] <= value <= INTEGER_RANGE[1]


def parse_int(
    payload: dict,
    field: str,
    errors: list[FieldError],
    *,
    required: bool,
    default: int | None = None,
    bounded: bool = True,
) -> int | None:
    """
    Parse an integer field. With ``bounded`` (the default) values that do not
    fit an INTEGER column are reported as out of range; callers that treat a
    huge id as "no such row" pass ``bounded=False`` and check ``fits_integer``.
    """
    value = payload.get(field)
    if is_blank(value):
        if required:
            errors.append(FieldError(field, MISSING, f"{field} is required."))
        return default
    if isinstance(value, bool):
        errors.append(FieldError(field, INVALID, f"{field} must be an integer."))
        return None
    if isinstance(value, float) and not value.is_integer():
        errors.append(FieldError(field, INVALID, f"{field} must be an integer."))
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        errors.append(FieldError(field, INVALID, f"{field} must be an integer."))
        return None
    if bounded and not fits_integer(number):
        low, high = INTEGER_RANGE
        errors.append(FieldError(field, OUT_OF_RANGE, f"{field} must be between {low} and {high}."))
        return None
    return number


def raise_if_errors(errors: list[FieldError]) -> None:
    if errors:
        raise ValidationError(errors)


def isoformat(value: datetime | None) -> str | None:
    """Render a stored timestamp. Columns hold naive UTC, so the offset is made explicit."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()
