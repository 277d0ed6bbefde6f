import pytest
from dbaccess.connection import dispose_all_engines
from dbaccess.mapper import field_map


@pytest.fixture(autouse=True)
def clear_caches():
    """Clear field maps and engines before and after each test to ensure test isolation."""
    field_map.cache_clear()
    yield
    field_map.cache_clear()
    dispose_all_engines()


pytest_plugins = [
    'tests.fixtures.mocks',
    'tests.fixtures.values',
    'tests.fixtures.sqlite',
    'tests.fixtures.postgres',
]
