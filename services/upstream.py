"""HTTP forwarding to the Florist One API with manual redirect handling."""

import httpx
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from core.exceptions import TooManyRedirectsError, UpstreamConnectionError, UpstreamTimeoutError
from core.protocols import RequestLogger
from core.redirects import MAX_REDIRECTS, is_redirect, next_hop
from core.request_types import PreparedRequest, RedirectState


class UpstreamClient:
    """Send prepared requests upstream and relay the final response."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        timeout: float = 30.0,
        max_redirects: int = MAX_REDIRECTS,
    ) -> None:
        self._client = client
        self._timeout = timeout
        self._max_redirects = max_redirects

    async def forward(
        self,
        prepared: PreparedRequest,
        cors_headers: dict[str, str],
        logger: RequestLogger,
    ) -> StreamingResponse:
        """Forward `prepared`, following redirects, and relay the result.

        Transport failures are raised as UpstreamError subclasses so the
        handler can answer with a 502.
        """
        try:
            response, state = await self._send_following_redirects(prepared)
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(_describe(e), api=prepared.api) from e
        except httpx.RequestError as e:
            raise UpstreamConnectionError(_describe(e), api=prepared.api) from e

        if response.status_code >= 400:
            logger.log_error(
                prepared.api,
                response.status_code,
                "upstream error response",
                request_id=prepared.request_id,
            )
        logger.log_response(prepared.request_id, prepared.api, response.status_code, state.hops)
        return self._relay(response, cors_headers)

    async def _send_following_redirects(
        self, prepared: PreparedRequest
    ) -> tuple[httpx.Response, RedirectState]:
        """Issue hops until a non-redirect response (or one without Location)."""
        state = RedirectState.initial(prepared)
        headers = prepared.headers
        while True:
            response = await self._send(state, headers)
            location = response.headers.get("location")
            if not is_redirect(response.status_code) or not location:
                return response, state

            await response.aclose()
            try:
                following = next_hop(
                    state,
                    response.status_code,
                    location,
                    max_redirects=self._max_redirects,
                )
            except TooManyRedirectsError as e:
                e.api = prepared.api
                raise
            if state.body is not None and following.body is None:
                # body dropped by a method downgrade
                headers = {k: v for k, v in headers.items() if k != "Content-Type"}
            state = following

    async def _send(self, state: RedirectState, headers: dict[str, str]) -> httpx.Response:
        request = self._client.build_request(
            state.method,
            state.url,
            headers=headers,
            content=state.body,
            timeout=self._timeout,
        )
        return await self._client.send(request, stream=True, follow_redirects=False)

    def _relay(self, response: httpx.Response, cors_headers: dict[str, str]) -> StreamingResponse:
        """Copy status and content type; CORS and no-store always win."""
        headers = dict(cors_headers)
        content_type = response.headers.get("content-type")
        if content_type:
            headers["Content-Type"] = content_type
        headers["Cache-Control"] = "no-store"
        return StreamingResponse(
            response.aiter_bytes(),
            status_code=response.status_code,
            headers=headers,
            background=BackgroundTask(self._cleanup_streaming, response),
        )

    async def _cleanup_streaming(self, response: httpx.Response) -> None:
        """Clean up streaming resources."""
        await response.aclose()


def _describe(error: Exception) -> str:
    return str(error) or type(error).__name__
