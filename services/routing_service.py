"""Routing orchestration for proxy requests."""

from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import InboundRequest, PreparedRequest
from core.router import SELECTOR_PARAM, UpstreamResolver
from core.transform import RequestTransformer


class RoutingService:
    """Turn an inbound client request into an upstream request."""

    def __init__(
        self,
        logger: RequestLogger,
        resolver: UpstreamResolver,
        transformer: RequestTransformer,
        header_builder: HeaderBuilder,
    ) -> None:
        self._logger = logger
        self._resolver = resolver
        self._transformer = transformer
        self._headers = header_builder

    def cors_headers(self, origin: str | None) -> dict[str, str]:
        return self._headers.build_cors_headers(origin)

    def prepare(self, request: InboundRequest) -> PreparedRequest:
        """Resolve the upstream, then inject credentials and remap path/query/body.

        The selector is checked before the credentials so an unknown `api`
        is always reported as a client error.
        """
        decision = self._resolver.resolve(request.query.get(SELECTOR_PARAM))
        method = request.method.upper()
        upstream_headers = self._headers.build_upstream_headers(request.headers)
        target_url = self._transformer.build_target_url(
            decision.base_url, request.path, request.query
        )
        prepared = PreparedRequest(
            api=decision.api,
            method=method,
            target_url=target_url,
            headers=upstream_headers,
            body=self._transformer.outbound_body(method, request.body),
        )
        self._logger.log_request(
            prepared.request_id, decision.api, method, request.path, target_url
        )
        return prepared
