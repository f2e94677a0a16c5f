from datetime import datetime, timedelta, timezone

from mtx_gateway.schemas.connection import Connection, ConnectionListResponse

MOCK_TOTAL_ITEMS = 47
TUNNEL_COUNT = 5


def _mock_connection(index: int, now: datetime) -> Connection:
    ordinal = index + 1
    return Connection(
        id=f"conn_{ordinal:03d}",
        created=(now - timedelta(hours=index)).isoformat(timespec="seconds"),
        remote_addr=f"192.168.{(index // 100) % 256}.{index % 256}:{50000 + index}",
        bytes_received=ordinal * 1024 * 1024,
        bytes_sent=ordinal * 2048 * 1024,
        session=f"session_{ordinal:03d}",
        tunnel=f"tunnel_{index % TUNNEL_COUNT + 1}",
    )


def generate_mock_connections(
    page: int,
    items_per_page: int,
    now: datetime | None = None,
) -> ConnectionListResponse:
    """
    Build one page of a fixed synthetic dataset of MOCK_TOTAL_ITEMS connections.
    `page` is 1-based. Only the `created` timestamps depend on `now`; a page past
    the end yields no items but keeps the counts populated.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    start = (page - 1) * items_per_page
    end = min(MOCK_TOTAL_ITEMS, start + items_per_page)

    return ConnectionListResponse(
        page_count=-(-MOCK_TOTAL_ITEMS // items_per_page),
        item_count=MOCK_TOTAL_ITEMS,
        items=[_mock_connection(i, now) for i in range(max(start, 0), end)],
    )
