import asyncio
import logging
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from fritzlog.coordinator import PollingCoordinator
from fritzlog.exceptions import ApiError, FritzLogError, InvalidCredentialsError

_SID = "0123456789abcdef"
_TICK = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _create_mock_api(*device_lists):
    api = MagicMock()
    api.authenticate = AsyncMock(return_value=_SID)
    api.async_get_device_list = AsyncMock(side_effect=list(device_lists))
    return api


async def test_async_refresh_should_dispatch_snapshot():
    # Prepare
    snapshot = (MagicMock(),)
    api = _create_mock_api(snapshot)
    dispatcher = MagicMock()
    coordinator = PollingCoordinator(api, dispatcher, timedelta(seconds=60))
    await coordinator.async_setup()

    # Act
    result = await coordinator.async_refresh(_TICK)

    # Assert
    assert result is True
    api.async_get_device_list.assert_awaited_once_with(_SID)
    dispatcher.dispatch.assert_called_once_with(_TICK, snapshot)


async def test_async_refresh_should_log_fetch_failure_and_continue(
    caplog: pytest.LogCaptureFixture,
):
    # Prepare
    snapshot = ()
    api = _create_mock_api(ApiError("HTTP 403"), snapshot)
    dispatcher = MagicMock()
    coordinator = PollingCoordinator(api, dispatcher, timedelta(seconds=60))
    await coordinator.async_setup()

    # Act
    with caplog.at_level(logging.ERROR):
        first = await coordinator.async_refresh(_TICK)
    second = await coordinator.async_refresh(_TICK)

    # Assert
    assert first is False
    assert second is True
    assert "Error: Failed getting device infos\nCaused by: HTTP 403" in caplog.text
    dispatcher.dispatch.assert_called_once_with(_TICK, snapshot)
    api.authenticate.assert_awaited_once()


async def test_async_refresh_before_setup_raises():
    coordinator = PollingCoordinator(_create_mock_api(), MagicMock(), timedelta(seconds=1))

    with pytest.raises(FritzLogError):
        await coordinator.async_refresh(_TICK)


async def test_async_run_should_fail_on_authentication_error():
    # Prepare
    api = _create_mock_api()
    api.authenticate.side_effect = InvalidCredentialsError("wrong")
    coordinator = PollingCoordinator(api, MagicMock(), timedelta(seconds=60))

    # Act & Assert
    with pytest.raises(InvalidCredentialsError):
        await coordinator.async_run()
    api.async_get_device_list.assert_not_awaited()


async def test_async_run_should_poll_immediately_and_keep_ticking():
    # Prepare
    api = _create_mock_api((), ApiError("expired"), ApiError("expired"))
    dispatcher = MagicMock()
    coordinator = PollingCoordinator(api, dispatcher, timedelta(seconds=60))
    sleep = AsyncMock(side_effect=[None, None, asyncio.CancelledError()])

    # Act
    with patch("fritzlog.coordinator.asyncio.sleep", sleep):
        with pytest.raises(asyncio.CancelledError):
            await coordinator.async_run()

    # Assert
    assert api.async_get_device_list.await_count == 3
    api.authenticate.assert_awaited_once()
    assert dispatcher.dispatch.call_count == 1
    first_delay = sleep.await_args_list[0].args[0]
    assert 0 < first_delay <= 60
