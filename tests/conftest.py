import pytest

from filterdesk.infrastructure.logging_config import configure_stderr_logging


@pytest.fixture(autouse=True)
def _cli_logging():
    # Mirror cli.main(): keep stdout for command output.
    configure_stderr_logging("WARNING")
