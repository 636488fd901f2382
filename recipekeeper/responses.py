"""Response envelopes in the ``{statusCode, headers, body}`` event format."""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any, Dict, Optional

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
}


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if hasattr(value, "to_dict"):
        return value.to_dict()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def json_response(status_code: int, payload: Any) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": dict(DEFAULT_HEADERS),
        "body": json.dumps(payload, default=_json_default),
    }


def ok(payload: Any) -> Dict[str, Any]:
    return json_response(200, payload)


def bad_request(message: str) -> Dict[str, Any]:
    return json_response(400, {"error": message})


def not_found(message: str) -> Dict[str, Any]:
    return json_response(404, {"error": message})


def server_error(message: str, detail: Optional[str] = None) -> Dict[str, Any]:
    payload = {"error": message}
    if detail is not None:
        payload["message"] = detail
    return json_response(500, payload)


__all__ = ["DEFAULT_HEADERS", "bad_request", "json_response", "not_found", "ok", "server_error"]
