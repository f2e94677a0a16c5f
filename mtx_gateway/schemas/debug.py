from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ConfigEcho(BaseModel):
    BASE_URL: str
    AUTH_USER: str
    MOCK_MODE: str


class ProbeResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    url: str
    description: str
    status: int | None = None
    content_type: str | None = None
    is_json: bool = Field(False, alias="isJSON")
    body_length: int | None = None
    body_preview: str | None = None
    success: bool = False
    warning: str | None = None
    error: str | None = None


class DebugReport(BaseModel):
    config: ConfigEcho
    probes: list[ProbeResult]
