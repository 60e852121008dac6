"""Path, query and body remapping onto the selected upstream."""

from collections.abc import Mapping

import httpx

from core.router import SELECTOR_PARAM

BODYLESS_METHODS = frozenset({"GET", "HEAD"})


class RequestTransformer:
    """Rewrite inbound request parts for the upstream."""

    def __init__(self, mount_prefix: str):
        self.mount_prefix = mount_prefix.rstrip("/")

    def strip_mount_prefix(self, path: str) -> str:
        """Return the part of `path` after the mount prefix, without leading slashes.

        `path` is the still percent-encoded request path, so encoded `?`, `#`
        and `/` stay part of their segment.
        """
        if path == self.mount_prefix or path.startswith(self.mount_prefix + "/"):
            path = path[len(self.mount_prefix):]
        return path.lstrip("/")

    def build_target_url(self, base_url: str, path: str, query: Mapping[str, str]) -> str:
        """Append the path suffix to `base_url` and forward every query param but the selector."""
        params = {key: value for key, value in query.items() if key != SELECTOR_PARAM}
        url = httpx.URL(base_url + self.strip_mount_prefix(path), params=params)
        return str(url)

    @staticmethod
    def outbound_body(method: str, body: bytes) -> bytes | None:
        """GET and HEAD never carry a body upstream; other methods keep it verbatim."""
        if method.upper() in BODYLESS_METHODS:
            return None
        return body
