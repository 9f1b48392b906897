"""Models describing a single API test request."""

from typing import Any

from pydantic import Field

from api_test_harness.models.base import Model


class TestRequestSpec(Model):
    """Description of one API call and the status code it should produce."""

    __test__ = False

    description: str = Field(..., description="Human-readable test case label")
    path: str = Field(..., description="Endpoint path relative to the server URL")
    # kept as given; aiohttp upper-cases the method on the wire
    method: str = Field(..., description="HTTP method of the call")
    expected_status: int = Field(..., description="Expected response status code")
    path_param: str | None = Field(
        default=None, description="Suffix appended verbatim to the endpoint URL"
    )
    body: Any = Field(default=None, description="Value serialized as the JSON body")
    content_type: str | None = Field(
        default=None, description="Value of the Content-Type header"
    )
    bearer_token: str | None = Field(
        default=None, description="Token sent as 'Authorization: Bearer <token>'"
    )
