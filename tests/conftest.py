"""
Shared test fixtures for the Virtual Marlin simulator.

Provides configurations without artificial delays, a mocked connection for
unit tests of the executor, and executors opened against either the mock or
a real SimulatedConnection.

## Usage Patterns

### Unit tests against a mocked connection:
```python
@pytest.mark.asyncio
async def test_feature(mocked_executor, mock_connection):
    await mocked_executor.open()
    mocked_executor.execute("G28", lambda data: None)
    mock_connection.send.assert_called_once_with("G28")
```

### Integration tests against the simulated board:
```python
@pytest.mark.asyncio
async def test_feature(open_executor):
    reply = await open_executor.send_command("M105")
    assert open_executor.validator("M105", reply)
```
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from virtual_marlin import SimulatedConnection, SimulatorConfig, VirtualExecutor


@pytest.fixture
def fast_config():
    """Config with no open delay and no per-line latency."""
    return SimulatorConfig(latency_ms=0, open_delay_ms=0, command_timeout_s=1.0)


@pytest.fixture
def mock_connection():
    """Fixture to create a mock SimulatedConnection."""
    mock = MagicMock(spec=SimulatedConnection)
    mock.open = AsyncMock()
    mock.close = AsyncMock()
    return mock


@pytest.fixture
def mocked_executor(fast_config, mock_connection):
    """Executor whose connection factory always returns the mock connection."""
    return VirtualExecutor(fast_config, connection_factory=lambda config: mock_connection)


@pytest_asyncio.fixture
async def open_executor(fast_config):
    """
    Executor opened against a real SimulatedConnection.
    Closed again after the test if the test left it open.
    """
    executor = VirtualExecutor(fast_config)
    await executor.open()
    yield executor
    if executor.is_open:
        await executor.close()
