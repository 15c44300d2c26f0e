# virtual_marlin/examples/host_command_queue.py
"""
Example: a minimal host-side command queue driving VirtualExecutor through
its callback API, the way a bot-control server drives a serial executor.

The queue serializes commands, accumulates reply bytes for the command in
flight and asks the executor's validator when the reply is complete. The
timeout policy lives here, in the host, not in the executor.

Run with:
    python examples/host_command_queue.py
"""
import asyncio
import logging

from virtual_marlin import SimulatorConfig, VirtualExecutor

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("HostCommandQueue")

JOB = [
    "M115",
    "G28",
    "G1 X10 Y10 F3000",
    "M105",
    "G4 P200",
    "M114",
]


class CommandQueue:
    """Sends one command at a time and waits for its 'ok'."""

    def __init__(self, executor: VirtualExecutor, timeout: float = 2.0):
        self.executor = executor
        self.timeout = timeout

    async def run_command(self, command: str) -> bytes:
        loop = asyncio.get_running_loop()
        buffer = bytearray()
        done = loop.create_future()

        def on_data(data: bytes):
            buffer.extend(data)
            if self.executor.validator(command, buffer) and not done.done():
                done.set_result(bytes(buffer))

        self.executor.execute(command, on_data)
        return await asyncio.wait_for(done, timeout=self.timeout)

    async def run(self, commands):
        for command in commands:
            reply = await self.run_command(command)
            logger.info(f"{command!r} -> {reply.decode().strip()!r}")


async def main():
    executor = VirtualExecutor(SimulatorConfig(latency_ms=5))
    opened = asyncio.Event()
    await executor.open(lambda ok: opened.set())
    await opened.wait()

    try:
        await CommandQueue(executor).run(JOB)
        logger.info(f"Commands processed: {executor.get_commands_processed()}")
    finally:
        await executor.close(lambda ok: logger.info("Executor closed."))


if __name__ == "__main__":
    asyncio.run(main())
