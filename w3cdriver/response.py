"""
Response decoding.

Turns the raw `(status, body)` pair returned by a transport into either the
envelope's `value` or a typed `WireError`, and provides the extraction helpers
commands use to check that `value` has the shape they expect.
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import (
    ERROR_CLASSES,
    LEGACY_STATUS_CODES,
    MalformedResponse,
    UnknownError,
    WireError,
)
from .models import ElementRef

ModelT = TypeVar("ModelT", bound=BaseModel)


def is_success_status(status: int) -> bool:
    # Redirects that reach us are treated like success, matching the remote ends we target.
    return 200 <= status < 400


def _find_error(status: int, envelope: dict[str, Any]) -> dict[str, Any] | None:
    value = envelope.get("value")

    if isinstance(value, dict) and "error" in value:
        return value

    # Some intermediaries put the error object at the top level.
    if "error" in envelope and isinstance(envelope.get("error"), str):
        return {
            "error": envelope["error"],
            "message": envelope.get("message", ""),
            "stacktrace": envelope.get("stacktrace"),
            "data": envelope.get("data"),
        }

    # JSON wire protocol: numeric non-zero status, message inside value.
    legacy_status = envelope.get("status")
    if isinstance(legacy_status, int) and not isinstance(legacy_status, bool) and legacy_status != 0:
        message = value.get("message", "") if isinstance(value, dict) else (value or "")
        return {
            "error": LEGACY_STATUS_CODES.get(legacy_status, UnknownError.code),
            "message": str(message),
            "stacktrace": None,
        }

    # `{"value": "no such element"}`: the value is the error code itself.
    if not is_success_status(status) and isinstance(value, str):
        if value in ERROR_CLASSES:
            return {"error": value, "message": ""}
        return {"error": UnknownError.code, "message": value}

    return None


def decode_envelope(status: int, body: bytes) -> dict[str, Any]:
    """
    Decode a raw response into its JSON envelope, raising on any error shape.

    Raises:
        WireError: (a subclass of) the error the remote end reported
        MalformedResponse: a success status whose body is not a `{"value": ...}` envelope
    """
    success = is_success_status(status)

    try:
        envelope = json.loads(body.decode("utf-8")) if body.strip() else None
    except (UnicodeDecodeError, ValueError) as e:
        if success:
            raise MalformedResponse.invalid_body(status, f"invalid JSON ({e})", body) from e
        raise UnknownError(
            body[:500].decode("utf-8", errors="replace"),
            status_code=status,
        ) from e

    if not isinstance(envelope, dict):
        if success:
            raise MalformedResponse.invalid_body(status, "top level is not an object", body)
        raise UnknownError(f"HTTP {status} with no error envelope", status_code=status)

    error_payload = _find_error(status, envelope)
    if error_payload is not None:
        raise WireError.from_payload(status, error_payload)

    if not success:
        raise UnknownError(f"HTTP {status} with no error field", status_code=status)

    if "value" not in envelope:
        raise MalformedResponse.invalid_body(status, "missing 'value'", body)

    return envelope


def decode_response(status: int, body: bytes) -> Any:
    """Decode a raw response and return the envelope's `value`."""
    return decode_envelope(status, body)["value"]


def encode_envelope(value: Any) -> bytes:
    """Serialize a success envelope the way a remote end would (used by test doubles)."""
    return json.dumps({"value": value}).encode("utf-8")


# ========== Extraction helpers ==========


def expect_str(command: str, value: Any) -> str:
    if not isinstance(value, str):
        raise MalformedResponse.unexpected_value(command, "a string", value)
    return value


def expect_optional_str(command: str, value: Any) -> str | None:
    if value is None:
        return None
    return expect_str(command, value)


def expect_bool(command: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise MalformedResponse.unexpected_value(command, "a boolean", value)
    return value


def expect_dict(command: str, value: Any) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise MalformedResponse.unexpected_value(command, "an object", value)
    return value


def expect_str_list(command: str, value: Any) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise MalformedResponse.unexpected_value(command, "an array of strings", value)
    return list(value)


def expect_element_id(command: str, value: Any) -> str:
    element_id = ElementRef.id_from_wire(value)
    if element_id is None:
        raise MalformedResponse.unexpected_value(command, "a web element reference", value)
    return element_id


def expect_element_ids(command: str, value: Any) -> list[str]:
    if not isinstance(value, list):
        raise MalformedResponse.unexpected_value(command, "an array of web element references", value)
    return [expect_element_id(command, v) for v in value]


def expect_model(command: str, value: Any, model: type[ModelT]) -> ModelT:
    if not isinstance(value, dict):
        raise MalformedResponse.unexpected_value(command, f"a {model.__name__} object", value)
    try:
        return model.model_validate(value)
    except ValidationError as e:
        raise MalformedResponse(
            f"{command}: invalid {model.__name__} payload: {e}",
            command=command,
            value=value,
        ) from e


def expect_model_list(command: str, value: Any, model: type[ModelT]) -> list[ModelT]:
    if not isinstance(value, list):
        raise MalformedResponse.unexpected_value(command, f"an array of {model.__name__}", value)
    return [expect_model(command, v, model) for v in value]


def expect_base64(command: str, value: Any) -> bytes:
    data = expect_str(command, value)
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedResponse(
            f"{command}: value is not valid base64: {e}",
            command=command,
            value=data[:64],
        ) from e
