"""API Gateway event helpers: header/method/body extraction and JSON responses."""

import base64
import binascii
import json
from typing import Any, Dict, Optional

from utils.errors import InvalidBody
from utils.logger import get_logger

logger = get_logger("http")


def response(status_code: int, payload: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(payload, ensure_ascii=False),
    }


def get_header(event: dict, name: str) -> Optional[str]:
    """Case-insensitive header lookup (HTTP API lowercases names, REST API does not)."""
    headers = event.get("headers") or {}
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def get_method(event: dict) -> str:
    """
    Resolve the request method for both payload formats:
    HTTP API (v2) puts it in requestContext.http.method,
    REST API (v1) in httpMethod.
    """
    http_ctx = (event.get("requestContext") or {}).get("http") or {}
    method = http_ctx.get("method") or event.get("httpMethod") or ""
    return method.upper()


def parse_json_body(event: dict) -> Dict[str, Any]:
    """
    Decode and parse the JSON body of the event.

    A body that is already a dict (direct or console invoke) is used as is.
    Raises InvalidBody when the body is absent, not text, not UTF-8, not
    JSON, or not a JSON object.
    """
    raw = event.get("body")
    if raw is None:
        raise InvalidBody("Request body is missing")

    if isinstance(raw, dict):
        return raw

    if not isinstance(raw, (str, bytes)):
        logger.warning(
            "http.invalid_body_type",
            extra={"body_type": type(raw).__name__},
        )
        raise InvalidBody("Request body is not text")

    if event.get("isBase64Encoded"):
        try:
            raw = base64.b64decode(raw, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidBody("Request body is not valid base64") from e

    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidBody("Request body is not valid UTF-8") from e

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(
            "http.invalid_json",
            extra={"body_preview": str(raw)[:200]},
        )
        raise InvalidBody("Request body is not valid JSON") from e

    if not isinstance(payload, dict):
        raise InvalidBody("Request body must be a JSON object")

    return payload
