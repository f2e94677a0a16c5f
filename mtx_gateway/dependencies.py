from fastapi import Request

from mtx_gateway.config import Settings
from mtx_gateway.services import ConnectionService, UpstreamClient


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_upstream(request: Request) -> UpstreamClient:
    return request.app.state.upstream


def get_connection_service(request: Request) -> ConnectionService:
    return request.app.state.connections
