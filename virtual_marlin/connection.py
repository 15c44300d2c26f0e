# virtual_marlin/virtual_marlin/connection.py
"""
Simulated serial connection to a virtual Marlin board.
Accepts command lines from the executor, runs them through the
SimulatedFirmware and emits the reply bytes through a single data callback.
"""
import asyncio
import inspect
import logging
from typing import Any, Callable, Optional

from . import constants as const
from .config import SimulatorConfig
from .exceptions import SimulatorError
from .firmware_model import SimulatedFirmware

logger = logging.getLogger(__name__)

DataCallback = Callable[[bytes], Any]


class SimulatedConnection:
    """
    Fake channel standing in for a serial link to hardware.

    Lifecycle: created, opened once, closed once. A closed connection cannot
    be reopened; create a new one instead.
    """

    def __init__(
        self,
        config: Optional[SimulatorConfig] = None,
        firmware: Optional[SimulatedFirmware] = None,
    ):
        self.config = config if config else SimulatorConfig()
        self.firmware = firmware if firmware else SimulatedFirmware(self.config)
        self.commands_received: int = 0
        self._data_callback: Optional[DataCallback] = None
        self._queue: Optional[asyncio.Queue] = None
        self._worker_task: Optional[asyncio.Task] = None
        self._is_open = False
        self._is_closed = False

    @property
    def is_open(self) -> bool:
        return self._is_open

    async def open(self):
        """Opens the port. Returns once the connection accepts send()."""
        if self._is_closed:
            raise SimulatorError("Simulated connection was closed and cannot be reopened.")
        if self._is_open:
            raise SimulatorError("Simulated connection is already open.")

        logger.info("Opening simulated connection...")
        if self.config.open_delay_ms > 0:
            await asyncio.sleep(self.config.open_delay_ms / 1000.0)

        self._queue = asyncio.Queue()
        self._worker_task = asyncio.get_running_loop().create_task(self._process_commands())
        self._is_open = True
        logger.info("Simulated connection open.")

    async def close(self):
        """Stops the worker and drops the data callback."""
        if self._is_closed:
            raise SimulatorError("Simulated connection is already closed.")
        self._is_open = False
        self._is_closed = True
        self._data_callback = None

        if self._worker_task and not self._worker_task.done():
            self._worker_task.cancel()
            try:
                await self._worker_task
            except asyncio.CancelledError:
                logger.debug("Connection worker cancelled.")
        self._worker_task = None
        self._queue = None
        logger.info("Simulated connection closed.")

    def set_data_callback(self, callback: Optional[DataCallback]):
        """Registers the response-data callback. Last registration wins."""
        self._data_callback = callback

    def send(self, command):
        """Queues a command for the simulated firmware."""
        if not self._is_open or self._queue is None:
            raise SimulatorError("Simulated connection is not open.", command=command)
        self.commands_received += 1
        logger.debug(f"Connection received command: {command!r}")
        self._queue.put_nowait(command)

    async def _process_commands(self):
        """Worker: replies to queued commands in order."""
        while True:
            command = await self._queue.get()
            try:
                dwell = self.firmware.reply_delay(command)
                if dwell > 0:
                    await asyncio.sleep(dwell)
                for line in self.firmware.process_command(command):
                    if self.config.latency_ms > 0:
                        await asyncio.sleep(self.config.latency_ms / 1000.0)
                    self._emit((line + const.LINE_TERMINATOR).encode(const.REPLY_ENCODING))
            except Exception as e:
                logger.error(f"Error processing command {command!r}: {e}", exc_info=True)
            finally:
                self._queue.task_done()

    def _emit(self, data: bytes):
        callback = self._data_callback
        if callback is None:
            logger.debug(f"No data callback registered, dropping reply: {data!r}")
            return
        logger.debug(f"Connection emitting: {data!r}")
        try:
            if inspect.iscoroutinefunction(callback):
                asyncio.get_running_loop().create_task(callback(data))
            else:
                callback(data)
        except Exception as e:
            logger.error(f"Error in data callback: {e}", exc_info=True)

    async def wait_idle(self):
        """Waits until every queued command has been answered."""
        if self._queue is not None:
            await self._queue.join()
