"""
Location ability — single-shot sources for the user's current position.

A provider answers one request_current_position() call with Coordinates
or raises LocationDenied. Where the host has no way to locate the user,
no answer ever arrives.
"""

import asyncio
import concurrent.futures
import logging
import threading
from typing import Optional

from config import LOCATION_TIMEOUT
from models import Coordinates, PositionOptions

log = logging.getLogger(__name__)

DEFAULT_OPTIONS = PositionOptions(high_accuracy=True, timeout=LOCATION_TIMEOUT, maximum_age=0)


class LocationDenied(Exception):
    """Permission refused, no fix within the timeout, or already asked."""


class LocationProvider:
    available = True

    def __init__(self, options: PositionOptions = DEFAULT_OPTIONS):
        self.options = options
        self._requested = False
        self._lock = threading.Lock()

    def _claim(self):
        with self._lock:
            if self._requested:
                raise LocationDenied("position was already requested")
            self._requested = True

    @property
    def requested(self) -> bool:
        return self._requested

    async def request_current_position(self) -> Coordinates:
        self._claim()
        return await self._wait_for_fix()

    async def _wait_for_fix(self) -> Coordinates:
        raise NotImplementedError


class UnavailableLocationProvider(LocationProvider):
    """The host can't locate the user at all."""

    available = False

    async def _wait_for_fix(self) -> Coordinates:
        await asyncio.Event().wait()  # never set


class BrowserLocationProvider(LocationProvider):
    """
    Fed by the widget page: the browser runs geolocation with
    `options` (it enforces the timeout) and posts the outcome back.

    resolve()/deny() may be called from any thread.
    """

    def __init__(self, options: PositionOptions = DEFAULT_OPTIONS):
        super().__init__(options)
        self._fix: concurrent.futures.Future = concurrent.futures.Future()

    @property
    def pending(self) -> bool:
        """True until the browser has reported a fix or a denial."""
        return not self._fix.done()

    def resolve(self, coords: Coordinates) -> bool:
        if self._fix.done():
            return False
        try:
            self._fix.set_result(coords)
        except concurrent.futures.InvalidStateError:
            return False
        return True

    def deny(self, reason: str = "permission denied") -> bool:
        if self._fix.done():
            return False
        try:
            self._fix.set_exception(LocationDenied(reason))
        except concurrent.futures.InvalidStateError:
            return False
        return True

    async def _wait_for_fix(self) -> Coordinates:
        return await asyncio.wrap_future(self._fix)


class ChatLocationProvider(LocationProvider):
    """
    Fed by a shared chat location. Must be resolved on the loop that is
    waiting; gives up as denied once `options.timeout` passes.
    """

    def __init__(self, options: PositionOptions = DEFAULT_OPTIONS):
        super().__init__(options)
        self._fix: Optional[asyncio.Future] = None
        self._early: Optional[Coordinates] = None

    def resolve(self, coords: Coordinates) -> bool:
        if self._fix is None:
            if self._requested or self._early is not None:
                return False
            self._early = coords
            return True
        if self._fix.done():
            return False
        self._fix.set_result(coords)
        return True

    async def _wait_for_fix(self) -> Coordinates:
        if self._early is not None:
            return self._early
        self._fix = asyncio.get_running_loop().create_future()
        try:
            return await asyncio.wait_for(self._fix, timeout=self.options.timeout)
        except asyncio.TimeoutError:
            log.info(f"No location shared within {self.options.timeout:g}s")
            raise LocationDenied("timed out waiting for a location") from None
