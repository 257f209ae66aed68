"""
Pytest configuration shared by the unit and integration suites.

pytest-asyncio runs in auto mode (see pyproject.toml); tests still mark
coroutines with @pytest.mark.asyncio.
"""

import tempfile
from typing import AsyncGenerator, Generator

import pytest

from syncpoint.coordination import InMemoryCoordinationService
from syncpoint.logging.models import Entry, LogLevel
from syncpoint.scenarios import RunParameters

from tests.unit.scenarios.mocks import EngineScript


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


@pytest.fixture
async def coordination() -> AsyncGenerator[InMemoryCoordinationService, None]:
    service = InMemoryCoordinationService("test-run")
    yield service
    await service.close()


@pytest.fixture
def engine_script() -> EngineScript:
    return EngineScript(address_change_after=0.05)


@pytest.fixture
def run_parameters_factory():
    def create_parameters(
        total_instance_count: int = 3,
        data_network_ip: str | None = None,
        **overrides,
    ) -> RunParameters:
        return RunParameters(
            run_id="test-run",
            total_instance_count=total_instance_count,
            data_network_ip=data_network_ip,
            **overrides,
        )

    return create_parameters


@pytest.fixture
def temp_log_directory() -> Generator[str, None, None]:
    with tempfile.TemporaryDirectory() as temp_directory:
        yield temp_directory


@pytest.fixture
def sample_entry() -> Entry:
    return Entry(
        message="Test log message",
        level=LogLevel.INFO,
    )
