"""
Request ID Middleware

Reuses the caller's ``X-Request-ID`` or generates one, binds it to the
logging context for the duration of the request and echoes it back.
"""

import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ticketdesk.core.config.constants import HEADER_REQUEST_ID
from ticketdesk.core.logging.logger import clear_request_id, set_request_id


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(HEADER_REQUEST_ID) or str(uuid.uuid4())
        set_request_id(request_id)

        try:
            response = await call_next(request)
            response.headers[HEADER_REQUEST_ID] = request_id
            return response
        finally:
            clear_request_id()
