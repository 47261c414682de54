"""Protocol helpers for Home Assistant WebSocket frames.

Frames are plain JSON objects. The client authenticates once per socket and
then correlates every command with the result frame carrying the same integer
``id``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

MSG_AUTH = "auth"
MSG_AUTH_REQUIRED = "auth_required"
MSG_AUTH_OK = "auth_ok"
MSG_AUTH_INVALID = "auth_invalid"
MSG_RESULT = "result"

UNKNOWN_ERROR = "Unknown error"


def build_auth(access_token: str) -> dict[str, Any]:
    """Construct the auth frame sent right after the socket opens."""
    return {"type": MSG_AUTH, "access_token": access_token}


def build_command(
    *,
    msg_id: int,
    msg_type: str,
    payload: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a command frame.

    Payload keys are merged at the top level of the frame. ``id`` and
    ``type`` always come from the arguments, never from the payload.
    """
    frame: dict[str, Any] = dict(payload or {})
    frame["id"] = msg_id
    frame["type"] = msg_type
    return frame


def parse_result_id(message: Mapping[str, Any]) -> int | None:
    """Return the correlation id of a result frame, or None if it has none."""
    if message.get("type") != MSG_RESULT:
        return None
    msg_id = message.get("id")
    # bool is an int subclass and never a valid id
    if isinstance(msg_id, bool) or not isinstance(msg_id, int):
        return None
    return msg_id


def parse_result_error(message: Mapping[str, Any]) -> tuple[str, str | None]:
    """Extract ``(message, code)`` from a failed result frame."""
    error = message.get("error")
    if not isinstance(error, Mapping):
        return UNKNOWN_ERROR, None
    code = error.get("code")
    return error.get("message") or UNKNOWN_ERROR, code if code is None else str(code)


def parse_auth_invalid(message: Mapping[str, Any]) -> str:
    """Return the human-readable reason from an auth_invalid frame."""
    return str(message.get("message") or "Invalid access token")
