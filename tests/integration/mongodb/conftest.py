"""Pytest fixtures for MongoDB integration tests.

Expects a server at CHRONICLE_MONGO_URI (default mongodb://localhost:27017).
Tests are skipped when none is reachable.
"""

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from pymongo.errors import PyMongoError

from chronicle.integrations.mongodb import MongoConfiguration


@pytest_asyncio.fixture
async def mongo_config(request: pytest.FixtureRequest) -> AsyncIterator[MongoConfiguration]:
    """A MongoConfiguration on a fresh database named after the test."""
    config = MongoConfiguration(
        database=f"test_{request.node.name}"[:63],
        server_selection_timeout_ms=500,
    )
    try:
        await config.client.admin.command("ping")
    except PyMongoError:
        await config.on_shutdown()
        pytest.skip("MongoDB is not reachable")

    await config.client.drop_database(config.database)
    try:
        yield config
    finally:
        await config.client.drop_database(config.database)
        await config.on_shutdown()
