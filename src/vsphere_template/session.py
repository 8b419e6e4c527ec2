# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Lifecycle of the single vSphere session held by one run.

:class:`SessionManager` opens the connection, waits for the freshly
built VM to settle, and guarantees the session is closed exactly once
however the run ends.

Settling
--------
Right after the builder finishes, vCenter can still report the VM as
powered on, and converting it to a template at that moment fails.
Rather than sleeping for a fixed time, :meth:`SessionManager.wait_until_settled`
polls the VM's power state with exponential backoff until it reads
``poweredOff`` or the :class:`SettlePolicy` timeout runs out.  The clock
and sleep functions are injectable so tests can drive it without
waiting.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass

from .config import Endpoint
from .constants import POWERED_OFF
from .errors import VSphereConnectionError
from .reporter import Reporter
from .vsphere_client import VSphereClient, VSphereError

logger = logging.getLogger(__name__)

ClientFactory = Callable[[Endpoint], VSphereClient]
SleepFn = Callable[[float], Awaitable[None]]
ClockFn = Callable[[], float]


@dataclass(frozen=True)
class SettlePolicy:
    """Backoff parameters for the settling wait.

    The default timeout matches the fixed delay the wait replaces.
    """

    timeout: float = 10.0
    initial_interval: float = 0.5
    multiplier: float = 2.0
    max_interval: float = 5.0

    def intervals(self):
        """Yield successive poll intervals, capped at ``max_interval``."""
        interval = self.initial_interval
        while True:
            yield min(interval, self.max_interval)
            interval *= self.multiplier


class SessionManager:
    """Owns one vSphere session: connect, settle, close."""

    def __init__(
        self,
        endpoint: Endpoint,
        *,
        client_factory: ClientFactory = VSphereClient,
        settle_policy: SettlePolicy | None = None,
        progress: Reporter | None = None,
        clock: ClockFn = time.monotonic,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._endpoint = endpoint
        self._client_factory = client_factory
        self._policy = settle_policy or SettlePolicy()
        self._progress = progress
        self._clock = clock
        self._sleep = sleep
        self._client: VSphereClient | None = None
        self._closed = False
        self.close_error: BaseException | None = None

    @property
    def client(self) -> VSphereClient:
        if self._client is None:
            raise RuntimeError("Session not connected")
        return self._client

    async def connect(self) -> VSphereClient:
        """Create the client and log in.

        Raises:
            VSphereConnectionError: Connection or authentication failed.
        """
        if self._client is not None:
            raise RuntimeError("Session already connected")
        client = self._client_factory(self._endpoint)
        self._client = client
        try:
            await client.connect()
        except VSphereError as e:
            raise VSphereConnectionError(f"Error connecting to vSphere: {e}") from e
        logger.debug("Connected to %s", self._endpoint.url)
        return client

    async def wait_until_settled(self, vm_name: str) -> bool:
        """Poll until *vm_name* reports ``poweredOff``.

        Returns:
            True if the VM settled, False if the timeout ran out first.
            Running out is not an error; the steps that follow will
            report a VM that still can't be converted.
        """
        client = self.client
        if self._progress:
            self._progress.info(
                f"Waiting up to {self._policy.timeout:g}s for VMware vSphere "
                f"to settle VM '{vm_name}'"
            )
        deadline = self._clock() + self._policy.timeout
        state: str | None = None
        for interval in self._policy.intervals():
            try:
                vm = await client.find_vm_by_name(vm_name)
                state = await client.power_state(vm) if vm is not None else None
            except VSphereError as e:
                logger.debug("Power state poll for %s failed: %s", vm_name, e)
                state = None
            if state == POWERED_OFF:
                logger.debug("VM %s settled", vm_name)
                return True

            remaining = deadline - self._clock()
            if remaining <= 0:
                break
            await self._sleep(min(interval, remaining))

        logger.warning(
            "VM %s did not settle within %gs (last power state: %s)",
            vm_name, self._policy.timeout, state or "not found",
        )
        if self._progress:
            self._progress.warning(
                f"VM '{vm_name}' still reports {state or 'not found'}; continuing"
            )
        return False

    async def close(self) -> None:
        """Close the session; safe to call more than once.

        A failure to log out is logged and kept in ``close_error`` but
        never raised, so it can't replace the outcome of the run.
        """
        if self._closed or self._client is None:
            return
        self._closed = True
        try:
            await self._client.close()
        except Exception as e:
            self.close_error = e
            logger.warning("Error closing vSphere session: %s", e)

    @asynccontextmanager
    async def session(self, settle_vm: str | None = None) -> AsyncIterator[VSphereClient]:
        """Connect, optionally wait for *settle_vm*, and always close.

        Raises:
            VSphereConnectionError: Connection or authentication failed.
        """
        try:
            client = await self.connect()
            if settle_vm is not None:
                await self.wait_until_settled(settle_vm)
            yield client
        finally:
            await self.close()

