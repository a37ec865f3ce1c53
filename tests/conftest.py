import pytest
import structlog


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop any structlog configuration a test installed, such as the CLI's
    stderr logger, which would otherwise outlive the captured stream."""
    yield
    structlog.reset_defaults()
