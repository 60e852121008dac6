"""Redirect resolution rules for the upstream forwarder.

Redirects are followed here rather than by the HTTP client so the method and
body rewriting on each hop is explicit:

* 303 always becomes a body-less GET.
* 301 and 302 become a body-less GET unless the method is already GET or
  HEAD. This follows browser behaviour rather than strict RFC 7231.
* 307 and 308 keep the method and body unchanged.
"""

import httpx

from core.exceptions import TooManyRedirectsError
from core.request_types import RedirectState

MAX_REDIRECTS = 5
REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})
SAFE_METHODS = frozenset({"GET", "HEAD"})


def is_redirect(status_code: int) -> bool:
    return status_code in REDIRECT_STATUSES


def next_hop(
    state: RedirectState,
    status_code: int,
    location: str,
    *,
    max_redirects: int = MAX_REDIRECTS,
) -> RedirectState:
    """Return the request state for following a redirect from `state`.

    Raises:
        TooManyRedirectsError: `state` has already followed `max_redirects` hops.
    """
    if state.hops >= max_redirects:
        raise TooManyRedirectsError(max_redirects)

    method, body = state.method, state.body
    if status_code == 303:
        method, body = "GET", None
    elif status_code in (301, 302) and method not in SAFE_METHODS:
        method, body = "GET", None

    url = str(httpx.URL(state.url).join(location))
    return RedirectState(url=url, method=method, body=body, hops=state.hops + 1)
