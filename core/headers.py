"""Header construction for CORS responses and upstream requests."""

from collections.abc import Mapping

from auth import basic_auth_value
from core.config import CorsSettings, CredentialSettings

ALLOW_METHODS = "GET,POST,PATCH,PUT,DELETE,OPTIONS"
ALLOW_HEADERS = "Content-Type,Authorization,X-Api,Accept"
DEFAULT_ACCEPT = "application/json"


class HeaderBuilder:
    """Build client-facing CORS headers and upstream request headers."""

    def __init__(self, cors: CorsSettings, credentials: CredentialSettings) -> None:
        self._origins = cors.allowed_origins
        self._credentials = credentials

    def build_cors_headers(self, origin: str | None) -> dict[str, str]:
        """Echo a listed origin, otherwise fall back to the first allowed one."""
        allow_origin = origin if origin and origin in self._origins else self._origins[0]
        return {
            "Access-Control-Allow-Origin": allow_origin,
            "Access-Control-Allow-Credentials": "false",
            "Access-Control-Allow-Methods": ALLOW_METHODS,
            "Access-Control-Allow-Headers": ALLOW_HEADERS,
            "Vary": "Origin",
        }

    def build_upstream_headers(self, headers: Mapping[str, str]) -> dict[str, str]:
        """Build the outbound header set; nothing else from the client is kept."""
        upstream = {
            "Authorization": basic_auth_value(self._credentials),
            "Accept": headers.get("accept") or DEFAULT_ACCEPT,
        }
        content_type = headers.get("content-type")
        if content_type:
            upstream["Content-Type"] = content_type
        return upstream
