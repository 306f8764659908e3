"""
Feeding user positions from a location provider into the search engine.
"""
import asyncio
import logging
from enum import Enum
from typing import AsyncIterator, Optional, Union

from ..exceptions import FetchFailed, InvalidCoordinate
from ..models.search import Coordinate
from ..utils.geo_helpers import check_coordinate

logger = logging.getLogger(__name__)


class AuthorizationStatus(str, Enum):
    NOT_DETERMINED = "not_determined"
    AUTHORIZED = "authorized"
    DENIED = "denied"
    RESTRICTED = "restricted"
    
    @property
    def allows_updates(self) -> bool:
        return self is AuthorizationStatus.AUTHORIZED


LocationUpdate = Union[Coordinate, AuthorizationStatus]


class LocationProvider:
    """
    Source of position fixes and authorization changes.
    
    `updates()` returns a fresh async iterator each time it is called so
    the stream can be restarted, e.g. after permission is granted again.
    """
    
    def updates(self) -> AsyncIterator[LocationUpdate]:
        raise NotImplementedError


class QueueLocationProvider(LocationProvider):
    """In-process provider fed by push(); close() ends the stream."""
    
    _CLOSED = object()
    
    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
    
    def push(self, update: LocationUpdate) -> None:
        self._queue.put_nowait(update)
    
    def close(self) -> None:
        self._queue.put_nowait(self._CLOSED)
    
    async def updates(self) -> AsyncIterator[LocationUpdate]:
        while True:
            update = await self._queue.get()
            if update is self._CLOSED:
                return
            yield update


class LocationTracker:
    """
    Applies provider updates to an engine with latest-wins coalescing.
    
    While a refresh is in flight, newer updates replace any pending one,
    so intermediate positions are skipped rather than queued.
    
    Args:
        engine: NearbySearchEngine to drive
        provider: LocationProvider to consume
    """
    
    def __init__(self, engine, provider: LocationProvider):
        self.engine = engine
        self.provider = provider
        self.status = AuthorizationStatus.NOT_DETERMINED
        self.applied = 0
        self._pending: Optional[LocationUpdate] = None
        self._wake = asyncio.Event()
    
    async def _consume(self) -> None:
        async for update in self.provider.updates():
            self._pending = update
            self._wake.set()
        self._wake.set()
    
    async def run(self) -> None:
        """Track the provider until its stream ends."""
        consumer = asyncio.create_task(self._consume())
        try:
            while True:
                if self._pending is None and consumer.done():
                    break
                await self._wake.wait()
                self._wake.clear()
                update, self._pending = self._pending, None
                if update is not None:
                    await self._apply(update)
        finally:
            if not consumer.done():
                consumer.cancel()
        
        # Re-raise a provider failure, if any
        consumer.result()
    
    async def _apply(self, update: LocationUpdate) -> None:
        if isinstance(update, AuthorizationStatus):
            self._set_status(update)
            if update.allows_updates:
                return
            logger.warning(f"Location authorization is {update.value}; searching without a position")
            self.engine.set_position(None, publish=False)
        else:
            try:
                check_coordinate(update.latitude, update.longitude)
            except InvalidCoordinate as e:
                logger.warning(f"Dropping invalid position from provider: {e}")
                return
            self.status = AuthorizationStatus.AUTHORIZED
            self.engine.set_position(update, publish=False)
        
        self.applied += 1
        try:
            await self.engine.refresh()
        except FetchFailed as e:
            # Already delivered to the engine's observers as an error event
            logger.warning(f"Refresh after location update failed: {e}")
    
    def _set_status(self, status: AuthorizationStatus) -> None:
        if status != self.status:
            logger.info(f"Location authorization changed: {self.status.value} -> {status.value}")
        self.status = status
