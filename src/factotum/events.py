"""Network event filtering for CDP ``Network.*`` events.

Events arrive as the raw protocol params dicts delivered by a Playwright
CDPSession, e.g. for ``Network.responseReceived``:

    {"requestId": "1234.5", "type": "XHR",
     "response": {"url": ..., "status": 200, "headers": {...}}}
"""

from typing import Any, Dict, Optional

XHR = "XHR"
JSON_MIME = "application/json"


def content_type(headers: Optional[Dict[str, Any]]) -> Optional[str]:
    """Return the Content-Type header value, or None if absent.

    Servers send both ``Content-Type`` and ``content-type``; the exact-case
    key wins when both are present. Non-string values count as missing.
    """
    if not headers:
        return None
    value = headers.get("Content-Type")
    if value is None:
        value = headers.get("content-type")
    return value if isinstance(value, str) else None


def is_xhr(event: Dict[str, Any]) -> bool:
    return event.get("type") == XHR


def is_json_xhr_response(event: Dict[str, Any]) -> bool:
    """True for an XHR response whose content type contains application/json."""
    if not is_xhr(event):
        return False
    ctype = content_type((event.get("response") or {}).get("headers"))
    return ctype is not None and JSON_MIME in ctype


def should_capture_request(event: Dict[str, Any], json_only: bool) -> bool:
    """True for an XHR request when request capture is enabled (not JSON-only)."""
    return not json_only and is_xhr(event)
