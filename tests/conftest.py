"""Shared fixtures for the test suite."""

from collections.abc import AsyncGenerator, Generator

import pytest
from aioresponses import aioresponses as aioresponses_cls

from api_test_harness.runner import ApiTestRunner
from api_test_harness.session import ApiTestSession


@pytest.fixture
def aioresponses() -> Generator[aioresponses_cls, None, None]:
    """Mock every request sent through aiohttp client sessions."""
    with aioresponses_cls() as mocked:
        yield mocked


@pytest.fixture
async def session() -> AsyncGenerator[ApiTestSession, None]:
    """Create a test session on a free local port."""
    test_session = await ApiTestSession.create()
    yield test_session
    await test_session.close()


@pytest.fixture
def runner(session: ApiTestSession) -> ApiTestRunner:
    """Create a runner recording into the session."""
    return ApiTestRunner(session=session)
