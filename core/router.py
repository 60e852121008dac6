"""Upstream selection - maps the `api` selector to a base URL."""

from dataclasses import dataclass

from core.config import UpstreamSettings
from core.exceptions import InvalidSelectorError

SELECTOR_PARAM = "api"
DEFAULT_SELECTOR = "flowershop"


@dataclass(frozen=True)
class RouteDecision:
    """Routing decision for a request."""

    api: str
    base_url: str


class UpstreamResolver:
    """Resolve a case-insensitive selector to one of the configured upstreams."""

    def __init__(self, upstreams: UpstreamSettings):
        self._bases = upstreams.as_mapping()

    def resolve(self, selector: str | None) -> RouteDecision:
        """Return the upstream for `selector`, or raise InvalidSelectorError."""
        api = (selector or DEFAULT_SELECTOR).lower()
        base_url = self._bases.get(api)
        if base_url is None:
            raise InvalidSelectorError(api)
        return RouteDecision(api=api, base_url=base_url)
