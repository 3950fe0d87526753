import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from spooltag.main import create_app


@pytest_asyncio.fixture
async def async_client():
    async with AsyncClient(transport=ASGITransport(app=create_app()), base_url="http://test") as client:
        yield client
