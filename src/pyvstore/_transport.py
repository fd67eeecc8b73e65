"""HTTP transport for the backend JSON API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

import aiohttp

from pyvstore._redact import redact_for_log
from pyvstore.config import VStoreConfig
from pyvstore.exceptions import VStoreTransportError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TransportResponse:
    """Status and decoded body of one HTTP exchange.

    ``body`` is ``None`` when the response was empty or not JSON.
    """

    status: int
    body: Any = None
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Transport(Protocol):
    """What the gateway needs from the wire: one JSON exchange per call.

    Implementations raise :class:`VStoreTransportError` when no response
    arrives and otherwise return every status unchanged.
    """

    async def send(
        self,
        method: str,
        endpoint: str,
        *,
        headers: Mapping[str, str],
        json_body: Any = None,
        params: Mapping[str, str] | None = None,
    ) -> TransportResponse:
        ...


class HttpTransport:
    """aiohttp-backed transport.

    Raises :class:`VStoreTransportError` only when no response was
    obtained.  Any HTTP status, including 401, is returned to the caller.
    """

    def __init__(self, config: VStoreConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def send(
        self,
        method: str,
        endpoint: str,
        *,
        headers: Mapping[str, str],
        json_body: Any = None,
        params: Mapping[str, str] | None = None,
    ) -> TransportResponse:
        url = f"{self._config.base_url}{endpoint}"
        _logger.debug("%s %s", method, url)

        try:
            async with self._http.request(
                method,
                url,
                json=json_body,
                params=params,
                headers=dict(headers),
                timeout=self._timeout,
            ) as resp:
                status = resp.status
                text = await resp.text()
        except aiohttp.ClientError as exc:
            raise VStoreTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc
        except TimeoutError as exc:
            raise VStoreTransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc

        body: Any = None
        if text.strip():
            try:
                body = json.loads(text)
            except json.JSONDecodeError:
                _logger.debug("Non-JSON body from %s (HTTP %s): %s", endpoint, status, text[:200])

        if self._config.api_trace_enabled:
            _logger.debug(
                "API trace %s %s request=%s status=%s response=%s",
                method,
                endpoint,
                redact_for_log({"headers": dict(headers), "json": json_body, "params": params}),
                status,
                redact_for_log(body),
            )

        return TransportResponse(status=status, body=body, text=text)
