import asyncio
import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Pin the environment and configure logging once, console only.
    """
    os.environ["ENV"] = session.config.option.env

    from shared.logging import configure_logging

    configure_logging()


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        # Get the test file path relative to the tests directory
        test_path = Path(item.fspath)

        # Mark tests based on their directory
        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture()
def loop():
    """A private event loop per test; drives everything that awaits or schedules."""
    loop = asyncio.new_event_loop()
    yield loop

    pending = asyncio.all_tasks(loop)
    for task in pending:
        task.cancel()
    if pending:
        loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
    loop.close()


@pytest.fixture()
def run(loop):
    """Run a coroutine to completion on the test loop."""
    return loop.run_until_complete


@pytest.fixture()
def eventually(run):
    """Let the loop spin until ``predicate()`` holds, failing after ``timeout`` seconds."""

    def _eventually(predicate, timeout=2.0):
        async def _wait():
            loop = asyncio.get_running_loop()
            deadline = loop.time() + timeout
            while not predicate():
                if loop.time() > deadline:
                    raise AssertionError("condition not reached in time")
                await asyncio.sleep(0.001)

        run(_wait())

    return _eventually


@pytest.fixture()
def settle(run):
    """Let queued callbacks (snapshot deliveries, finished writes) run."""

    def _settle(seconds=0.0):
        run(asyncio.sleep(seconds))
        for _ in range(5):
            run(asyncio.sleep(0))

    return _settle
