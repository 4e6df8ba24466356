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
    """Select the config overlay before any domain module is imported."""
    os.environ["PROTEAN_ENV"] = session.config.option.env
    os.environ.setdefault("PAYMENT_GATEWAY", "fake")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def _pricing_env(monkeypatch):
    """Pin pricing to the documented defaults regardless of the host environment."""
    for name in (
        "PRICING_DISCOUNT_THRESHOLD",
        "PRICING_DISCOUNT_RATE",
        "PRICING_TAX_RATE",
        "PRICING_DELIVERY_FEE",
        "PAYMENT_CURRENCY",
        "UNPAID_ORDER_TIMEOUT_MINUTES",
    ):
        monkeypatch.delenv(name, raising=False)
