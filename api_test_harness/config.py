"""Configuration for an API test session."""

from pydantic import BaseModel, Field


class HarnessConfig(BaseModel):
    """Configuration for the ephemeral server and client transport."""

    host: str = "127.0.0.1"
    # None means a request may block indefinitely
    request_timeout: float | None = Field(default=None, gt=0)
    log_requests: bool = True
