from __future__ import annotations

import json
from dataclasses import dataclass
from http import HTTPStatus
from http.client import HTTPConnection, HTTPException, HTTPSConnection
from typing import Any
from urllib.parse import urlparse

NON_JSON_SNIPPET_BYTES = 240


@dataclass(frozen=True)
class JsonResponse:
    status: int
    reason: str = ""
    payload: dict[str, Any] | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def describe(self) -> str:
        """``"<status> <reason>"``, using the standard phrase when the server sent none."""
        reason = self.reason.strip()
        if not reason:
            try:
                reason = HTTPStatus(self.status).phrase
            except ValueError:
                reason = ""
        return f"{self.status} {reason}".strip()


def build_base_url(address: str) -> str:
    trimmed = address.strip().rstrip("/")
    if not trimmed:
        return ""
    if urlparse(trimmed).scheme:
        return trimmed
    return f"https://{trimmed}"


def _open(url: str, timeout_s: float) -> tuple[HTTPConnection, str]:
    parsed = urlparse(url)
    if not parsed.hostname:
        raise ValueError("missing hostname")
    if parsed.scheme == "http":
        conn = HTTPConnection(parsed.hostname, parsed.port or 80, timeout=timeout_s)
    else:
        conn = HTTPSConnection(parsed.hostname, parsed.port or 443, timeout=timeout_s)
    target = parsed.path or "/"
    if parsed.query:
        target = f"{target}?{parsed.query}"
    return conn, target


def _decode_payload(raw: bytes) -> dict[str, Any] | None:
    if not raw:
        return None
    try:
        payload = json.loads(raw.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError):
        snippet = raw[:NON_JSON_SNIPPET_BYTES].decode("utf-8", errors="replace").strip()
        return {"error": f"non_json_response: {snippet}" if snippet else "non_json_response"}
    if isinstance(payload, dict):
        return payload
    return {"error": f"unexpected_json_type: {type(payload).__name__}"}


def request_json(
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    body: dict[str, Any] | None = None,
    timeout_s: float = 10.0,
) -> JsonResponse:
    """Send one JSON request and read the whole reply.

    Protocol failures from ``http.client`` (truncated bodies, bad status
    lines) are raised as ``OSError`` so callers handle a single transport
    error type.
    """
    conn, target = _open(url, timeout_s)
    request_headers = {"Accept": "application/json"}
    body_bytes = None
    if body is not None:
        body_bytes = json.dumps(body, ensure_ascii=False).encode("utf-8")
        request_headers["Content-Type"] = "application/json"
        request_headers["Content-Length"] = str(len(body_bytes))
    request_headers.update(headers or {})
    try:
        conn.request(method, target, body=body_bytes, headers=request_headers)
        resp = conn.getresponse()
        status = int(resp.status)
        reason = str(getattr(resp, "reason", "") or "")
        raw = resp.read()
    except HTTPException as exc:
        raise OSError(f"{method} {target} failed: {exc!r}") from exc
    finally:
        conn.close()
    return JsonResponse(status=status, reason=reason, payload=_decode_payload(raw))
