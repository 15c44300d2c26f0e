# virtual_marlin/virtual_marlin/executor.py
"""
Virtual Marlin executor.

Mimics the executor a bot-control server uses to drive a Marlin board, but
talks to a SimulatedConnection instead of a serial port. The host's command
queue opens the executor, pushes commands through ``execute`` (or the
correlated ``send_command`` coroutine) and decides completion with the
stateless ``validator``.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

from .config import SimulatorConfig
from .connection import SimulatedConnection
from .exceptions import CommandError
from .exceptions import CommunicationError
from .exceptions import ExecutorStateError
from .reply import Reply, is_command_complete, reply_to_text

logger = logging.getLogger(__name__)

DoneFunc = Callable[[bool], Any]
DataFunc = Callable[[bytes], Any]
ConnectionFactory = Callable[[SimulatorConfig], SimulatedConnection]


@dataclass(frozen=True)
class Closed:
    """No connection is owned."""


@dataclass(frozen=True)
class Open:
    """A connection is owned; counts the commands executed since open."""
    commands_processed: int = 0


ExecutorState = Union[Closed, Open]


@dataclass
class PendingRequest:
    """The single in-flight request of ``send_command``."""
    command: Any
    future: asyncio.Future
    buffer: bytearray = field(default_factory=bytearray)


class VirtualExecutor:
    """
    Bridge between a host command queue and a simulated Marlin connection.
    """

    def __init__(
        self,
        config: Optional[SimulatorConfig] = None,
        connection_factory: Optional[ConnectionFactory] = None,
    ):
        """
        Args:
            config: Application context handed to every connection created
                    by ``open``. Defaults to ``SimulatorConfig()``.
            connection_factory: Builds the connection from the config.
                    Defaults to ``SimulatedConnection``.
        """
        self.config = config if config else SimulatorConfig()
        self._connection_factory = connection_factory if connection_factory else SimulatedConnection
        self.connection: Optional[SimulatedConnection] = None
        self._state: ExecutorState = Closed()
        self._pending: Optional[PendingRequest] = None

    @property
    def state(self) -> ExecutorState:
        return self._state

    @property
    def is_open(self) -> bool:
        return isinstance(self._state, Open)

    @property
    def is_busy(self) -> bool:
        """True while a ``send_command`` request is waiting for its reply."""
        return self._pending is not None and not self._pending.future.done()

    def get_commands_processed(self) -> Optional[int]:
        """Commands executed since open, or None while closed."""
        if isinstance(self._state, Open):
            return self._state.commands_processed
        return None

    def _require_open(self, operation: str, command=None) -> SimulatedConnection:
        if not isinstance(self._state, Open) or self.connection is None:
            raise ExecutorStateError(
                f"Cannot {operation}: executor is not open.", command=command
            )
        return self.connection

    def _count_command(self):
        self._state = Open(self._state.commands_processed + 1)

    async def open(self, done_func: Optional[DoneFunc] = None):
        """
        Creates a new SimulatedConnection and waits until it is ready.

        ``done_func(True)`` is called only after the connection accepts
        ``send``. Opening an executor that is already open is rejected; close
        it first.

        Args:
            done_func: Optional completion callback.
        """
        if isinstance(self._state, Open):
            raise ExecutorStateError("Cannot open: executor is already open. Close it first.")

        connection = self._connection_factory(self.config)
        await connection.open()
        self.connection = connection
        self._state = Open(0)
        logger.info("Virtual executor open.")
        if done_func:
            done_func(True)

    async def close(self, done_func: Optional[DoneFunc] = None):
        """
        Closes the owned connection.

        ``done_func(True)`` is called before the processed count is reset.
        A pending ``send_command`` request fails with CommunicationError.

        Args:
            done_func: Optional completion callback.
        """
        connection = self._require_open("close")
        if self.is_busy:
            self._pending.future.set_exception(
                CommunicationError("Executor closed while waiting for reply.", command=self._pending.command)
            )
        self._pending = None

        await connection.close()
        if done_func:
            done_func(True)
        self.connection = None
        self._state = Closed()
        logger.info("Virtual executor closed.")

    def execute(self, command, data_func: DataFunc, done_func: Optional[DoneFunc] = None):
        """
        Send the requested command to the device, passing any response data
        back for processing.

        ``data_func`` replaces whatever callback was registered before, so
        late bytes from an earlier command reach the newest callback. Use
        ``send_command`` when replies must be correlated.

        Args:
            command:   command to send
            data_func: function to call with response data
            done_func: accepted for parity with hardware executors; never called
        """
        connection = self._require_open("execute", command=command)
        connection.set_data_callback(data_func)
        connection.send(command)
        self._count_command()
        logger.debug(f"Executed {command!r} (#{self._state.commands_processed})")

    async def send_command(self, command, timeout: Optional[float] = None) -> str:
        """
        Sends a command and waits for its complete reply.

        Only one request may be in flight; a second call while one is pending
        raises CommandError instead of stealing the reply.

        Args:
            command: command to send
            timeout: seconds to wait; defaults to ``config.command_timeout_s``

        Returns:
            The reply text, every line terminated as received.
        """
        connection = self._require_open("send command", command=command)
        if self.is_busy:
            raise CommandError(
                f"Cannot send: still waiting for reply to {self._pending.command!r}.",
                command=command,
            )
        if timeout is None:
            timeout = self.config.command_timeout_s

        pending = PendingRequest(command=command, future=asyncio.get_running_loop().create_future())
        self._pending = pending

        def collect(data: bytes):
            if pending.future.done():
                logger.warning(f"Dropping unexpected data after completion: {data!r}")
                return
            pending.buffer.extend(data if isinstance(data, (bytes, bytearray)) else str(data).encode())
            if self.validator(command, pending.buffer):
                pending.future.set_result(reply_to_text(pending.buffer))

        connection.set_data_callback(collect)
        connection.send(command)
        self._count_command()

        try:
            return await asyncio.wait_for(pending.future, timeout=timeout)
        except asyncio.TimeoutError as exc:
            error_msg = f"Timeout after {timeout}s waiting for 'ok'. Received so far: {bytes(pending.buffer)!r}"
            logger.warning(error_msg)
            raise CommunicationError(error_msg, command=command) from exc
        finally:
            if self._pending is pending:
                self._pending = None

    @staticmethod
    def validator(command, reply: Reply) -> bool:
        """
        Confirms if a reply has 'ok' in its last non-empty line.

        Args:
            command: ignored; kept for parity with other executors
            reply:   the reply from a bot after sending a command

        Returns:
            True if the last line contains 'ok'
        """
        return is_command_complete(reply)
