from pydantic import BaseModel


class ErrorResponse(BaseModel):
    error: str
    message: str | None = None
    hint: str | None = None
