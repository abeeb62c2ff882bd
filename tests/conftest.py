import pytest

from main import setup_logging


@pytest.fixture(autouse=True)
def configure_logging():
    """Route structlog through stdlib logging on the current stderr for every test."""
    setup_logging("WARNING", "console")
