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

    Select the config overlay and the secrets the HTTP layer expects before
    the storefront domain is imported anywhere.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env
    os.environ["SESSION_SECRET"] = "test-session-secret"
    os.environ["FULFILLMENT_WEBHOOK_TOKEN"] = "test-webhook-token"
    os.environ["STRIPE_PRICE_MONTHLY"] = "price_monthly_test"
    os.environ["STRIPE_PRICE_ANNUAL"] = "price_annual_test"
    os.environ.pop("FULFILLMENT_WEBHOOK_SECRET", None)
    os.environ.pop("APP_ORIGIN", None)
    os.environ.pop("SPREADCONNECT_API_KEY", None)


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
