from mtx_gateway.services.connections import ConnectionService
from mtx_gateway.services.session_cache import SessionCache
from mtx_gateway.services.upstream_client import UpstreamClient

__all__ = ["ConnectionService", "SessionCache", "UpstreamClient"]
