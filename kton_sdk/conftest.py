import pytest

from kton_sdk.testing.fixtures import (  # noqa: F401
    clock,
    restore_global_config,
    store,
    ttl_cache,
)


def pytest_configure(config):
    config.addinivalue_line("markers", "smoke: mark test as a smoke test")
    config.addinivalue_line("markers", "integration: mark test as integration")


def pytest_collection_modifyitems(config, items):
    for item in items:
        if "smoke" in item.nodeid:
            item.add_marker(pytest.mark.smoke)
