"""
Simple test cases to verify test configuration.
"""
import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from main import app

@pytest.mark.asyncio
async def test_app_exists(client: AsyncClient):
    """Test that app exists and the shared logger is attached."""
    assert client is not None
    assert app.state.logger is not None

@pytest.mark.asyncio
async def test_database_session(async_session: AsyncSession):
    """Test that database session works."""
    assert async_session is not None
    from sqlalchemy import text
    result = await async_session.execute(text("SELECT 1"))
    assert result.scalar() == 1

@pytest.mark.asyncio
async def test_openapi_lists_catalog_routes(client: AsyncClient):
    response = await client.get("/openapi.json")
    paths = response.json()["paths"]
    assert "/api/v1/categories" in paths
    assert "/api/v1/products/{product_id}" in paths
