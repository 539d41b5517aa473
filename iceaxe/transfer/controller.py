"""Handle to an in-flight transfer"""

import asyncio
import inspect
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, List, Optional, Union
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferStatus:
    """
    Progress snapshot of a transfer
    current_offset counts chunks, not bytes
    """
    current_offset: int
    max_position: int
    bytes_transferred: int = 0
    completed: bool = False
    aborted: bool = False
    failed: bool = False
    error: Optional[str] = None

    @property
    def terminal(self) -> bool:
        return self.completed or self.aborted or self.failed

    def advance(self, offset: int, bytes_transferred: int) -> 'TransferStatus':
        return replace(self, current_offset=offset, bytes_transferred=bytes_transferred)


StatusListener = Callable[[TransferStatus], Union[None, Awaitable[None]]]


class ProcessController:
    """
    Latest status of one transfer plus its subscribers.
    Only the owning engine pushes statuses; callers poll status(),
    subscribe with add_status_listener() or request abort().
    """

    def __init__(self, initial_status: TransferStatus):
        self._status = initial_status
        self._listeners: List[StatusListener] = []
        self._abort_requested = False
        self._task: Optional[asyncio.Task] = None

    def status(self) -> TransferStatus:
        return self._status

    def add_status_listener(self, handler: StatusListener):
        self._listeners.append(handler)

    def abort(self):
        """Request a stop at the next chunk boundary"""
        self._abort_requested = True

    @property
    def abort_requested(self) -> bool:
        return self._abort_requested

    @property
    def done(self) -> bool:
        return self._status.terminal

    def attach(self, task: asyncio.Task):
        """Bind the background task running the transfer"""
        self._task = task
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task):
        if task.cancelled():
            logger.warning("Transfer task cancelled")
            # Cancelled before its first step: the engine never got to push
            if not self._status.terminal:
                self._status = replace(self._status, aborted=True, error="cancelled")
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Transfer task failed: {error}")

    async def push_status(self, status: TransferStatus):
        """Record a new status and notify listeners in registration order"""
        if self._status.terminal:
            logger.warning(f"Ignoring status push after terminal state: {status}")
            return

        self._status = status
        for listener in list(self._listeners):
            try:
                result = listener(status)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Status listener failed: {e}")

    async def wait(self) -> TransferStatus:
        """
        Wait for the background task and return the terminal status
        Re-raises the transfer failure, if any
        """
        if self._task is not None:
            await self._task
        return self._status
