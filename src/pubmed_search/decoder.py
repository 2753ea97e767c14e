"""Decoding of esearch JSON payloads into counts and identifier lists."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Union

from .errors import MalformedResponse

logger = logging.getLogger(__name__)

RESULT_KEY = "esearchresult"

Payload = Union[bytes, str]


def extract_count(payload: Payload) -> int:
    """Return the total number of matching records reported in ``payload``."""

    result = _result_object(payload)
    raw = result.get("count")
    if raw is None:
        raise MalformedResponse("count field is missing")
    if isinstance(raw, bool) or not isinstance(raw, (str, int)):
        raise MalformedResponse(f"count field has unexpected type {type(raw).__name__}")
    text = str(raw).strip()
    if not text.isdecimal():
        raise MalformedResponse(f"count field is not a non-negative integer: {raw!r}")
    return int(text)


def extract_identifiers(payload: Payload) -> List[str]:
    """Return the identifier list from ``payload`` in source order."""

    result = _result_object(payload)
    if "idlist" not in result:
        raise MalformedResponse("idlist field is missing")
    raw = result["idlist"]
    if not isinstance(raw, list):
        raise MalformedResponse(f"idlist field has unexpected type {type(raw).__name__}")

    ids: List[str] = []
    for item in raw:
        if isinstance(item, bool) or not isinstance(item, (str, int)):
            raise MalformedResponse(f"idlist contains a non-identifier value: {item!r}")
        ids.append(str(item))
    logger.debug("Decoded %d identifiers", len(ids))
    return ids


def _result_object(payload: Payload) -> Dict[str, Any]:
    if isinstance(payload, bytes):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedResponse("payload is not valid UTF-8") from exc
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise MalformedResponse(f"payload is not valid JSON: {exc.msg}") from exc

    if not isinstance(data, dict):
        raise MalformedResponse("payload is not a JSON object")
    result = data.get(RESULT_KEY)
    if not isinstance(result, dict):
        raise MalformedResponse(f"{RESULT_KEY} object is missing")
    # esearch reports query failures inside an otherwise well-formed body.
    error = result.get("ERROR")
    if error:
        raise MalformedResponse(f"service reported an error: {error}")
    return result
