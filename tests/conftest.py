import os
from pathlib import Path

import pytest

# Quiet, instant defaults for the test run; explicit env vars still win
_TEST_SETTINGS = {
    "FURNISHOP_SCHEDULER_ENABLED": "false",
    "FURNISHOP_BOT_DELAY_MIN_SECONDS": "0",
    "FURNISHOP_BOT_DELAY_MAX_SECONDS": "0",
    "FURNISHOP_TRANSLATOR_BACKEND": "fake",
    "FURNISHOP_TRANSLATION_DELAY_SECONDS": "0",
    "FURNISHOP_PAYMENT_GATEWAY": "fake",
    "FURNISHOP_MAIL_BACKEND": "fake",
    "FURNISHOP_JWT_SECRET_KEY": "test-secret",
}


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Select the Protean config overlay and the application settings used by
    every domain. Each context's conftest initializes and activates its own
    domain.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env
    for key, value in _TEST_SETTINGS.items():
        os.environ.setdefault(key, value)

    from shared.settings import get_settings

    get_settings.cache_clear()


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
        elif "/bdd/" in str(test_path):
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached per process; tests that monkeypatch env vars get a clean read."""
    from shared.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
