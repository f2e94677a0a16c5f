import logging

from mtx_gateway.config import Settings
from mtx_gateway.schemas.connection import ConnectionListResponse
from mtx_gateway.services.mock_data import generate_mock_connections
from mtx_gateway.services.upstream_client import UpstreamClient
from mtx_gateway.utils.pagination import parse_page_request

logger = logging.getLogger(__name__)


class ConnectionService:
    """Routes listing requests to the synthetic dataset or the upstream API."""

    def __init__(self, settings: Settings, upstream: UpstreamClient):
        self.settings = settings
        self.upstream = upstream

    async def list_connections(
        self,
        page: str | int | None = None,
        items_per_page: str | int | None = None,
    ) -> ConnectionListResponse:
        request = parse_page_request(page, items_per_page)

        if self.settings.mock_enabled:
            logger.info(
                "Mock mode: serving synthetic data (page=%d, itemsPerPage=%d)",
                request.page,
                request.items_per_page,
            )
            return generate_mock_connections(request.page, request.items_per_page)

        # Page and item counts are relayed exactly as the upstream computed them.
        return await self.upstream.list_connections(
            request.upstream_index, request.items_per_page
        )
