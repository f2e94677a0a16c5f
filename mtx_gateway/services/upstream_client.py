import asyncio
import logging
from dataclasses import dataclass

import httpx
from pydantic import ValidationError

from mtx_gateway.config import Settings
from mtx_gateway.schemas.connection import ConnectionListResponse
from mtx_gateway.schemas.debug import ProbeResult
from mtx_gateway.services.session_cache import (
    LIST_TIMEOUT_SECONDS,
    SessionCache,
    build_http_client,
)
from mtx_gateway.utils.errors import FailureKind, GatewayError

logger = logging.getLogger(__name__)

CONNECTIONS_PATH = "/api/v3/rtspconns/list"
PROBE_TIMEOUT_SECONDS = 5.0
STATUS_EXCERPT_BYTES = 200
PREVIEW_BYTES = 300
LOG_PREVIEW_BYTES = 500
HTML_MARKERS = (b"<!doctype html", b"<html")


@dataclass(frozen=True)
class ProbeTarget:
    name: str
    path: str
    description: str


DEBUG_PROBES = (
    ProbeTarget(
        name=f"GET {CONNECTIONS_PATH}",
        path=CONNECTIONS_PATH,
        description="RTSP connections list",
    ),
    ProbeTarget(
        name="GET /api/v3/webrtcsessions/list",
        path="/api/v3/webrtcsessions/list",
        description="WebRTC sessions list",
    ),
    ProbeTarget(
        name="GET /api/v3/rtspsessions/list",
        path="/api/v3/rtspsessions/list",
        description="RTSP sessions list",
    ),
)


def truncate_body(body: bytes, limit: int) -> str:
    """Cut on raw bytes; a multi-byte character split at the cut is dropped."""
    return body[:limit].decode("utf-8", errors="ignore")


def looks_like_html(body: bytes) -> bool:
    head = body.lstrip()[:32].lower()
    return head.startswith(HTML_MARKERS)


class UpstreamClient:
    """Authenticated access to the upstream media server's management API."""

    def __init__(
        self,
        settings: Settings,
        sessions: SessionCache,
        transport: httpx.AsyncBaseTransport | None = None,
        list_timeout: float = LIST_TIMEOUT_SECONDS,
        probe_timeout: float = PROBE_TIMEOUT_SECONDS,
    ):
        self.settings = settings
        self.sessions = sessions
        self._transport = transport
        self.list_timeout = list_timeout
        self.probe_timeout = probe_timeout

    @property
    def _auth(self) -> httpx.BasicAuth:
        return httpx.BasicAuth(self.settings.AUTH_USER, self.settings.AUTH_PASS)

    def _url(self, path: str) -> str:
        return f"{self.settings.base_url}{path}"

    async def _get(
        self,
        client: httpx.AsyncClient,
        path: str,
        page_index: int,
        items_per_page: int,
        timeout: float,
    ) -> httpx.Response:
        """GET a listing page; `timeout` bounds the whole call, not each I/O phase."""
        request = client.get(
            self._url(path),
            params={"page": page_index, "itemsPerPage": items_per_page},
            auth=self._auth,
            headers={"Accept": "application/json"},
        )
        try:
            return await asyncio.wait_for(request, timeout)
        except asyncio.TimeoutError as e:
            raise httpx.TimeoutException(
                f"Upstream call exceeded {timeout:g}s"
            ) from e

    async def _session(self) -> httpx.AsyncClient:
        try:
            return await self.sessions.acquire()
        except Exception as e:
            raise GatewayError.session_unavailable(str(e)) from e

    async def list_connections(
        self, page_index: int, items_per_page: int
    ) -> ConnectionListResponse:
        """
        Fetch one zero-based page of connections.
        Raises GatewayError classified as unreachable, auth/protocol fault,
        upstream status or malformed response.
        """
        client = await self._session()
        logger.info(
            "Upstream request %s page=%d itemsPerPage=%d user=%s",
            self._url(CONNECTIONS_PATH),
            page_index,
            items_per_page,
            self.settings.AUTH_USER,
        )

        try:
            response = await self._get(
                client, CONNECTIONS_PATH, page_index, items_per_page, self.list_timeout
            )
        except httpx.HTTPError as e:
            logger.warning("Upstream unreachable: %s", e)
            raise GatewayError.upstream_unreachable(str(e) or type(e).__name__) from e

        body = response.content
        logger.info(
            "Upstream response status=%d content-type=%s size=%d",
            response.status_code,
            response.headers.get("content-type", ""),
            len(body),
        )
        if body:
            logger.debug("Upstream body preview: %s", truncate_body(body, LOG_PREVIEW_BYTES))

        if looks_like_html(body):
            self.sessions.invalidate()
            logger.warning(
                "Upstream returned HTML instead of JSON (status %d)", response.status_code
            )
            raise GatewayError.upstream_auth_failed()

        if response.status_code != 200:
            raise GatewayError.upstream_status(
                response.status_code, truncate_body(body, STATUS_EXCERPT_BYTES)
            )

        try:
            return ConnectionListResponse.model_validate_json(body)
        except ValidationError as e:
            logger.warning(
                "Could not parse upstream listing: %s",
                truncate_body(body, LOG_PREVIEW_BYTES),
            )
            raise GatewayError.malformed_response(
                f"{e.error_count()} validation error(s): {e.errors()[0]['msg']}"
            ) from e

    async def probe(self, target: ProbeTarget) -> ProbeResult:
        """Describe what the upstream returns for one listing endpoint."""
        url = self._url(target.path)
        logger.info("Probing %s", target.name)

        client = await self._session()
        try:
            response = await self._get(client, target.path, 0, 10, self.list_timeout)
        except httpx.HTTPError as e:
            logger.warning("Probe %s failed: %s", target.name, e)
            return ProbeResult(
                name=target.name,
                url=url,
                description=target.description,
                error=str(e) or type(e).__name__,
            )

        body = response.content
        content_type = response.headers.get("content-type", "")
        is_json = "application/json" in content_type or body[:1] == b"{"
        result = ProbeResult(
            name=target.name,
            url=url,
            description=target.description,
            status=response.status_code,
            content_type=content_type,
            is_json=is_json,
            body_length=len(body),
            body_preview=truncate_body(body, PREVIEW_BYTES),
        )

        if is_json and response.status_code == 200:
            logger.info("Probe %s succeeded", target.name)
            return result.model_copy(update={"success": True})
        if response.status_code == 401:
            logger.warning("Probe %s: 401 Unauthorized, check credentials", target.name)
            return result.model_copy(update={"warning": "authentication failed"})
        if not is_json:
            logger.warning("Probe %s: non-JSON response (%s)", target.name, content_type)
            return result.model_copy(update={"warning": "non-JSON response"})
        logger.warning("Probe %s: status %d", target.name, response.status_code)
        return result

    async def probe_all(self) -> list[ProbeResult]:
        return [await self.probe(target) for target in DEBUG_PROBES]

    async def check_connection(self) -> None:
        """Startup connectivity check on a fresh short-timeout client."""
        async with build_http_client(self.probe_timeout, self._transport) as client:
            try:
                response = await self._get(client, CONNECTIONS_PATH, 0, 1, self.probe_timeout)
            except httpx.HTTPError as e:
                raise GatewayError.upstream_unreachable(str(e) or type(e).__name__) from e

        if response.status_code == 401:
            raise GatewayError(
                FailureKind.AUTH_OR_PROTOCOL.value,
                "Authentication failed (401), check AUTH_USER and AUTH_PASS.",
                401,
            )
        if response.status_code != 200:
            raise GatewayError.upstream_status(
                response.status_code,
                f"Unexpected status {response.status_code}: "
                f"{truncate_body(response.content, STATUS_EXCERPT_BYTES)}",
            )
        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            raise GatewayError(
                FailureKind.AUTH_OR_PROTOCOL.value,
                f"Received a non-JSON response (Content-Type: {content_type}).",
                401,
            )
