"""ASGI middleware."""

from fastapi import HTTPException, status
from fastapi.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from hamkar.config import settings
from hamkar.core.handlers import error_body

TOO_LARGE = "Request body too large"

# Leading body bytes kept on request.state for error logs
BODY_PREVIEW_LIMIT = 4096


class BodySizeLimitMiddleware:
    """
    Enforce MAX_BODY_SIZE on every request body.

    A declared ``Content-Length`` over the limit is refused before the app
    runs. Bodies without one (chunked uploads) are counted as they are
    received and fail with 413 once they pass the limit.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        limit = settings.MAX_BODY_SIZE
        headers = dict(scope.get("headers") or [])
        declared = headers.get(b"content-length", b"").decode("latin-1")
        if declared.isdigit() and int(declared) > limit:
            response = JSONResponse(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, content=error_body(TOO_LARGE)
            )
            await response(scope, receive, send)
            return

        preview = bytearray()
        scope.setdefault("state", {})["body_preview"] = preview
        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                chunk = message.get("body", b"")
                received += len(chunk)
                if received > limit:
                    raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=TOO_LARGE)
                room = BODY_PREVIEW_LIMIT - len(preview)
                if room > 0:
                    preview.extend(chunk[:room])
            return message

        await self.app(scope, limited_receive, send)
