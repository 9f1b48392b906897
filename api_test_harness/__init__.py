"""Harness for testing HTTP API endpoints against an in-process server."""

from api_test_harness.config import HarnessConfig
from api_test_harness.content_types import ContentType
from api_test_harness.errors import (
    HarnessError,
    RequestConstructionError,
    SessionClosedError,
)
from api_test_harness.models.request import TestRequestSpec
from api_test_harness.models.result import ApiResponse, TestResult
from api_test_harness.reporter import report
from api_test_harness.runner import ApiTestRunner
from api_test_harness.server import RouteTable
from api_test_harness.session import ApiTestSession

__all__ = [
    "ApiResponse",
    "ApiTestRunner",
    "ApiTestSession",
    "ContentType",
    "HarnessConfig",
    "HarnessError",
    "RequestConstructionError",
    "RouteTable",
    "SessionClosedError",
    "TestRequestSpec",
    "TestResult",
    "report",
]
