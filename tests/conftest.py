import os
from pathlib import Path

import pytest

# tests/storefront/<layer>/ -> marker, so `-m domain` and friends select a layer
LAYER_MARKERS = {
    "domain": pytest.mark.domain,
    "application": pytest.mark.application,
    "integration": pytest.mark.integration,
}


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        choices=("test", "production"),
        help="domain.toml overlay to load the storefront with",
    )


def pytest_sessionstart(session):
    """Export PROTEAN_ENV before any test module imports the storefront domain."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Tag each test with the layer its directory belongs to.

    Integration tests also count as slow unless they opt out with ``fast``.
    """
    for item in items:
        layer = next((part for part in Path(item.fspath).parts if part in LAYER_MARKERS), None)
        if layer is None:
            continue

        item.add_marker(LAYER_MARKERS[layer])
        if layer == "integration" and item.get_closest_marker("fast") is None:
            item.add_marker(pytest.mark.slow)
