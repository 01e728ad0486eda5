"""Starlette response carrying a JSON:API document."""

from typing import Any

from starlette.responses import JSONResponse

from jsonapi_marshal import config
from jsonapi_marshal.marshal import dumps


class JSONAPIResponse(JSONResponse):
    """JSON response with the JSON:API media type.

    ``content`` may be a payload model from :mod:`jsonapi_marshal.marshal` or
    an already assembled document mapping.
    """

    media_type = config.JSONAPI_MEDIA_TYPE

    def render(self, content: Any) -> bytes:
        return dumps(content).encode("utf-8")
