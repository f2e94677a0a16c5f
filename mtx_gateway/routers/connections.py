from fastapi import APIRouter, Depends, Query

from mtx_gateway.dependencies import get_connection_service
from mtx_gateway.schemas.connection import ConnectionListResponse
from mtx_gateway.schemas.errors import ErrorResponse
from mtx_gateway.services import ConnectionService

router = APIRouter(tags=["Connections"])


@router.get(
    "/api/connections",
    response_model=ConnectionListResponse,
    responses={
        401: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def list_connections(
    service: ConnectionService = Depends(get_connection_service),
    page: str | None = Query(None, description="1-based page number"),
    items_per_page: str | None = Query(None, alias="itemsPerPage"),
):
    return await service.list_connections(page, items_per_page)
