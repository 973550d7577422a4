import pytest
from unittest.mock import AsyncMock
from tldr.utils.decorators import async_retry


@pytest.mark.asyncio
async def test_returns_on_first_success():
    mock_func = AsyncMock(return_value="summary")

    @async_retry(retries=2, delay=0.01)
    async def decorated():
        return await mock_func()

    assert await decorated() == "summary"
    assert mock_func.call_count == 1


@pytest.mark.asyncio
async def test_recovers_after_transient_failure():
    mock_func = AsyncMock(side_effect=[TimeoutError("slow"), "summary"])

    @async_retry(retries=2, delay=0.01, exceptions=(TimeoutError,))
    async def decorated():
        return await mock_func()

    assert await decorated() == "summary"
    assert mock_func.call_count == 2


@pytest.mark.asyncio
async def test_reraises_after_last_attempt():
    mock_func = AsyncMock(side_effect=TimeoutError("still slow"))

    @async_retry(retries=2, delay=0.01, exceptions=(TimeoutError,))
    async def decorated():
        return await mock_func()

    with pytest.raises(TimeoutError, match="still slow"):
        await decorated()

    assert mock_func.call_count == 3


@pytest.mark.asyncio
async def test_other_exceptions_are_not_retried():
    mock_func = AsyncMock(side_effect=ValueError("bad payload"))

    @async_retry(retries=2, delay=0.01, exceptions=(TimeoutError,))
    async def decorated():
        return await mock_func()

    with pytest.raises(ValueError):
        await decorated()

    assert mock_func.call_count == 1
