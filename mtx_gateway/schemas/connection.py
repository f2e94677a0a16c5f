from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Connection(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    created: str
    remote_addr: str
    bytes_received: int
    bytes_sent: int
    # None when no session is bound to the connection
    session: str | None = None
    tunnel: str


class ConnectionListResponse(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "pageCount": 5,
                    "itemCount": 47,
                    "items": [
                        {
                            "id": "conn_011",
                            "created": "2026-10-19T02:00:00+00:00",
                            "remoteAddr": "192.168.0.10:50010",
                            "bytesReceived": 11534336,
                            "bytesSent": 23068672,
                            "session": "session_011",
                            "tunnel": "tunnel_1",
                        }
                    ],
                }
            ]
        },
    )

    page_count: int
    item_count: int
    items: list[Connection]
