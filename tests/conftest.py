import pytest


@pytest.fixture(autouse=True, scope="session")
def configure_logging() -> None:
    """Send engine logs through the JSON handler instead of structlog's default printer."""
    from src.utils.logging import setup_logging

    setup_logging()
