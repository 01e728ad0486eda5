"""JSON:API error handling middleware."""

import logging
from typing import Any

from jsonapi_marshal.core.errors import JSONAPIErrorBuilder
from jsonapi_marshal.exceptions import MarshalError
from jsonapi_marshal.responses import JSONAPIResponse

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware:
    """Render marshal errors raised downstream as JSON:API error documents.

    Any other exception propagates unchanged.
    """

    def __init__(self, app: Any) -> None:
        """Store the ASGI app for middleware chaining."""
        self.app = app
        self.errors = JSONAPIErrorBuilder()

    async def __call__(self, scope: dict[str, Any], receive: Any, send: Any) -> None:
        """Pass the request on, converting marshal errors into a 500 response."""
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        try:
            await self.app(scope, receive, send)
        except MarshalError as exc:
            logger.warning("Could not marshal response for %s: %s", scope.get("path"), exc)
            response = JSONAPIResponse(
                self.errors.error_document([self.errors.from_exception(exc)]),
                status_code=500,
            )
            await response(scope, receive, send)
