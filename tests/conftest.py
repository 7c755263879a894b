"""
Shared pytest fixtures for Bubble Data tests.

Provides an in-process Bubble Data API, a matching configuration and
clients wired to it through httpx.ASGITransport.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio

from bubble_data import BubbleConfig, BubbleDataClient

from tests.infrastructure.fake_bubble_server import FakeBubbleServer, TEST_API_KEY


@pytest.fixture
def fake_server() -> FakeBubbleServer:
    """Fresh in-memory Bubble Data API for each test."""
    return FakeBubbleServer()


@pytest.fixture
def bubble_config() -> BubbleConfig:
    return BubbleConfig(app="testapp", app_version="version-test", api_key=TEST_API_KEY)


@pytest_asyncio.fixture
async def data_client(
    fake_server: FakeBubbleServer, bubble_config: BubbleConfig
) -> AsyncGenerator[BubbleDataClient, None]:
    """BubbleDataClient talking to the fake server."""
    client = BubbleDataClient(bubble_config, transport=fake_server.transport())
    try:
        yield client
    finally:
        await client.close()
