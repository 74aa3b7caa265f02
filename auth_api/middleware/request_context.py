"""Capture a redacted preview of request bodies for error logging."""

import json
from typing import Any

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from auth_api.utils.constants import MAX_LOGGED_BODY_CHARS

REDACTED = "[REDACTED]"
SENSITIVE_MARKERS = ("password", "token", "secret", "code")


def redact(value: Any) -> Any:
    """Mask values whose key names look like credentials."""
    if isinstance(value, dict):
        return {
            key: REDACTED if any(marker in key.lower() for marker in SENSITIVE_MARKERS) else redact(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [redact(item) for item in value]
    return value


def body_preview(body: bytes) -> str:
    if not body:
        return ""
    try:
        text = json.dumps(redact(json.loads(body)))
    except (ValueError, UnicodeDecodeError):
        # Non-JSON bodies (multipart uploads) are not echoed
        text = f"<{len(body)} bytes>"
    return text[:MAX_LOGGED_BODY_CHARS]


class BodyCaptureMiddleware:
    """Pure ASGI middleware recording request.state.body_preview.

    Wraps `receive` so the body is observed as the app reads it; nothing is
    buffered ahead of the app.
    """

    # Bytes kept for the preview; the rest of a large body is ignored
    CAPTURE_LIMIT = MAX_LOGGED_BODY_CHARS * 8

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        state = scope.setdefault("state", {})
        state["body_preview"] = ""
        chunks: list[bytes] = []
        captured = 0

        async def capture_receive() -> Message:
            nonlocal captured
            message = await receive()
            if message["type"] == "http.request":
                chunk = message.get("body", b"")
                if captured < self.CAPTURE_LIMIT and chunk:
                    chunks.append(chunk[: self.CAPTURE_LIMIT - captured])
                    captured += len(chunks[-1])
                if not message.get("more_body", False):
                    state["body_preview"] = body_preview(b"".join(chunks))
            return message

        await self.app(scope, capture_receive, send)
