"""Lease service; grants and revocations are acknowledged without state."""

from __future__ import annotations

import logging
from typing import Any, AsyncIterable, AsyncIterator, Iterable, Optional, Union

from xline.errors import RpcError
from xline.rpc import (
    LeaseGrantRequest,
    LeaseGrantResponse,
    LeaseKeepAliveRequest,
    LeaseKeepAliveResponse,
    LeaseRevokeRequest,
    LeaseRevokeResponse,
)

logger = logging.getLogger(__name__)

KEEP_ALIVE_TTL = 1
"""Time to live reported for every refreshed lease."""


async def _iterate(
    requests: Union[AsyncIterable[LeaseKeepAliveRequest], Iterable[LeaseKeepAliveRequest]],
) -> AsyncIterator[LeaseKeepAliveRequest]:
    if hasattr(requests, "__aiter__"):
        async for request in requests:  # type: ignore[union-attr]
            yield request
    else:
        for request in requests:  # type: ignore[union-attr]
            yield request


class LeaseServer:
    """Serves the lease operations."""

    def __init__(self, name: str = "", storage: Any = None, client: Any = None) -> None:
        self.name = name
        self.storage = storage
        self.client = client

    async def lease_grant(self, request: LeaseGrantRequest) -> LeaseGrantResponse:
        """Acknowledge a lease grant with an empty response."""
        logger.debug("Receive LeaseGrantRequest %r", request)
        return LeaseGrantResponse()

    async def lease_revoke(self, request: LeaseRevokeRequest) -> LeaseRevokeResponse:
        """Acknowledge a lease revocation with an empty response."""
        logger.debug("Receive LeaseRevokeRequest %r", request)
        return LeaseRevokeResponse()

    async def lease_keep_alive(
        self,
        requests: Union[AsyncIterable[LeaseKeepAliveRequest], Iterable[LeaseKeepAliveRequest]],
    ) -> AsyncIterator[LeaseKeepAliveResponse]:
        """Answer each keep-alive request with the lease id and a ttl of one.

        The stream ends when the requests end or when reading them fails.
        """
        stream = _iterate(requests)
        while True:
            try:
                request = await stream.__anext__()
            except StopAsyncIteration:
                return
            except Exception as exc:  # noqa: BLE001 - a broken stream only ends the replies
                logger.warning("Receive LeaseKeepAliveRequest error %r", exc)
                return
            logger.debug("Receive LeaseKeepAliveRequest %r", request)
            yield LeaseKeepAliveResponse(id=request.id, ttl=KEEP_ALIVE_TTL)

    async def lease_time_to_live(self, request: Optional[Any]) -> None:
        """Raise: lease time-to-live queries are not supported."""
        logger.debug("Receive LeaseTimeToLiveRequest %r", request)
        raise RpcError.unimplemented("Not Implemented")

    async def lease_leases(self, request: Optional[Any]) -> None:
        """Raise: listing leases is not supported."""
        logger.debug("Receive LeaseLeasesRequest %r", request)
        raise RpcError.unimplemented("Not Implemented")