"""Client module for interacting with the gateway's HTTP interface."""

from __future__ import annotations

import asyncio
import hashlib
import logging
from typing import Any

import aiohttp
import async_timeout
from aiohttp import ClientResponseError, ClientSession

from .api_model import PermissionKind, SessionInfo
from .const import DEFAULT_TIMEOUT, LOCATION_AHA, LOCATION_LOGIN
from .exceptions import (
    ApiError,
    InsufficientPermissionError,
    InvalidCredentialsError,
)
from .model import DeviceSnapshot, parse_devices

_LOGGER = logging.getLogger(__name__)


def create_response(challenge: str, password: str) -> str:
    """Answer a login challenge.

    The gateway hashes the UTF-16LE encoding of "<challenge>-<password>",
    so the digest differs from one taken over UTF-8 for any non-ASCII input.
    """
    payload = f"{challenge}-{password}".encode("utf-16-le")
    return f"{challenge}-{hashlib.md5(payload).hexdigest()}"


async def fetch_text(
    client_session: ClientSession,
    uri: str,
    params: dict[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Perform a GET request with timeout and return the decoded body."""
    try:
        async with async_timeout.timeout(timeout):
            async with client_session.get(
                uri, params=params, raise_for_status=True
            ) as response:
                return await response.text()
    except asyncio.TimeoutError as error:
        raise ApiError(f"Timeout occurred during GET request to {uri}") from error
    except UnicodeDecodeError as error:
        raise ApiError("Decoding response as UTF-8 failed") from error
    except aiohttp.ClientError as error:
        raise _translate_exception(uri, error) from error


def _translate_exception(uri: str, error: aiohttp.ClientError) -> ApiError:
    if isinstance(error, ClientResponseError):
        return ApiError(
            f"Receiving response failed (HTTP {error.status} - {error.message})"
        )

    return ApiError(f"Receiving response from {uri} failed ({error})")


class AsyncSessionProvider:
    """Challenge-response login against login_sid.lua."""

    def __init__(
        self,
        client_session: ClientSession,
        base_url: str,
        username: str,
        password: str,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._session = client_session
        self._uri = f"{base_url.rstrip('/')}{LOCATION_LOGIN}"
        self._username = username
        self._password = password
        self._timeout = timeout

    async def _request_session_info(
        self, params: dict[str, str] | None = None
    ) -> SessionInfo:
        body = await fetch_text(self._session, self._uri, params, self._timeout)
        return SessionInfo.parse(body)

    async def authenticate(self) -> str:
        """Log in and return a session id usable for home automation."""
        session = await self._request_session_info()
        if session.is_authenticated:
            _LOGGER.debug("Gateway reports an existing session, no login necessary")
            return session.sid

        _LOGGER.debug(
            "Answering login challenge for user '%s' (block time %ss)",
            self._username,
            session.block_time,
        )
        response = create_response(session.challenge, self._password)
        session = await self._request_session_info(
            {"username": self._username, "response": response}
        )

        if not session.is_authenticated:
            raise InvalidCredentialsError(
                "Authentication failed (wrong username/password)"
            )
        if not session.has_permission(PermissionKind.HOME_AUTO):
            raise InsufficientPermissionError(
                "User has no home automation permission"
            )

        _LOGGER.info("Logged in as '%s'", self._username)
        return session.sid


class FritzBoxAPI:
    """Class to interact with the gateway's home automation service."""

    def __init__(
        self,
        client_session: ClientSession,
        base_url: str,
        session_provider: AsyncSessionProvider,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the API client."""
        self._session = client_session
        self._uri = f"{base_url.rstrip('/')}{LOCATION_AHA}"
        self._session_provider = session_provider
        self._timeout = timeout

    async def authenticate(self) -> str:
        return await self._session_provider.authenticate()

    async def async_get_device_list(self, sid: str) -> DeviceSnapshot:
        """Retrieve the device list as an immutable snapshot."""
        params: dict[str, Any] = {"sid": sid, "switchcmd": "getdevicelistinfos"}
        body = await fetch_text(self._session, self._uri, params, self._timeout)
        devices = parse_devices(body)
        _LOGGER.debug("Fetched %s devices", len(devices))
        return devices
