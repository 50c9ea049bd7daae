"""Pytest configuration and fixtures for catalog tests."""

import pytest

from cmemsarco.stac_api import StacWalker
from cmemsarco.tests.common import (TEST_ROOT, FakeSession, create_item_document,
                                    create_stac_tree)


@pytest.fixture
def temp_output_dir(tmp_path):
    """Create a temporary output directory for testing."""
    output_dir = tmp_path / "test_output"
    output_dir.mkdir()
    return output_dir


@pytest.fixture
def scenario_products():
    """Product A with one ARCO item, product B whose product document is missing."""
    return {
        'A': {
            'A_ds1_202411': create_item_document(
                'A_ds1_202411', time_url="https://host/bkt/A/ds1_202411/timeChunked.zarr"
            ),
        },
        'B': None,
    }


@pytest.fixture
def scenario_session(scenario_products):
    return FakeSession(create_stac_tree(scenario_products))


@pytest.fixture
def scenario_walker(scenario_session):
    return StacWalker(root=TEST_ROOT, session=scenario_session)
