from fastapi import APIRouter, Depends

from mtx_gateway.config import Settings
from mtx_gateway.dependencies import get_app_settings, get_upstream
from mtx_gateway.schemas.debug import ConfigEcho, DebugReport
from mtx_gateway.services import UpstreamClient

router = APIRouter(tags=["Debug"])


@router.get("/api/debug", response_model=DebugReport)
async def debug(
    settings: Settings = Depends(get_app_settings),
    upstream: UpstreamClient = Depends(get_upstream),
):
    return DebugReport(
        config=ConfigEcho(
            BASE_URL=settings.BASE_URL,
            AUTH_USER=settings.AUTH_USER,
            MOCK_MODE=settings.MOCK_MODE,
        ),
        probes=await upstream.probe_all(),
    )
