import asyncio

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.core.config import settings
from app.core.exceptions import ServiceTimeoutError, error_json_response


class RequestTimeoutMiddleware:
    """
    Applies REQUEST_TIMEOUT_SECONDS to each HTTP request.
    - On expiry the handler is cancelled, along with any repository or cache
      call it is awaiting, and 504 is returned.
    - A response that has already started is never replaced.
    """
    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        timeout = settings.REQUEST_TIMEOUT_SECONDS
        if scope["type"] != "http" or not timeout:
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message):
            nonlocal response_started
            if message.get("type") == "http.response.start":
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(self.app(scope, receive, send_wrapper), timeout=timeout)
        except asyncio.TimeoutError:
            if response_started:
                raise
            response = error_json_response(ServiceTimeoutError(details={"timeout_seconds": timeout}))
            await response(scope, receive, send)
