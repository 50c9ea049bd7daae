"""Tests for catalog assembly."""

import logging
from unittest.mock import Mock

import pytest

from cmemsarco.catalog.build import assemble_catalog, fetch_product_rows, process_single_product
from cmemsarco.models import FetchResult, ItemRef
from cmemsarco.stac_api import FetchError, StacWalker
from cmemsarco.tests.common import (TEST_ROOT, TIME_URL, GEO_URL, FakeSession,
                                    create_item_document, create_stac_tree)


class TestAssembleCatalog:
    """Test the assemble_catalog function."""

    def test_partial_failure_scenario(self, scenario_walker, caplog):
        """One good product and one product whose document cannot be fetched."""
        diagnostics = []

        with caplog.at_level(logging.WARNING):
            rows = assemble_catalog(walker=scenario_walker, diagnostics=diagnostics)

        assert len(rows) == 1
        row = rows[0]
        assert row.product_id == 'A'
        assert row.dataset_id == 'A_ds1'
        assert row.version == '202411'
        assert row.timeChunked_s3 == 's3://bkt/A/ds1_202411/timeChunked.zarr'
        assert row.geoChunked_url is None

        assert "Failed to get STAC for B" in caplog.text
        assert len(diagnostics) == 1
        assert diagnostics[0].product_id == 'B'
        assert diagnostics[0].item_href is None

    def test_root_failure_propagates(self):
        walker = StacWalker(root=TEST_ROOT, session=FakeSession({}))

        with pytest.raises(FetchError):
            assemble_catalog(walker=walker)

    def test_explicit_product_ids_skip_root(self, scenario_walker, scenario_session):
        rows = assemble_catalog(['A'], walker=scenario_walker)

        assert [r.dataset_version_id for r in rows] == ['A_ds1_202411']
        assert f"{TEST_ROOT}/catalog.stac.json" not in scenario_session.calls

    def test_static_datasets_are_kept(self):
        session = FakeSession(create_stac_tree({
            'P': {
                'arco_202401': create_item_document('arco_202401', TIME_URL, GEO_URL),
                'static': create_item_document('static'),
            }
        }))

        rows = assemble_catalog(walker=StacWalker(root=TEST_ROOT, session=session))

        assert [r.dataset_version_id for r in rows] == ['arco_202401', 'static']
        assert rows[1].version is None
        assert rows[1].timeChunked_gdal is None

    def test_failed_item_drops_one_row(self):
        session = FakeSession(create_stac_tree({
            'P': {
                'ok_202401': create_item_document('ok_202401', TIME_URL),
                'gone_202401': None,
            }
        }))
        diagnostics = []

        rows = assemble_catalog(walker=StacWalker(root=TEST_ROOT, session=session),
                                diagnostics=diagnostics)

        assert [r.dataset_version_id for r in rows] == ['ok_202401']
        assert [(d.product_id, d.item_href) for d in diagnostics] == [('P', 'gone_202401.stac.json')]

    def test_malformed_assets_drop_one_row(self):
        session = FakeSession(create_stac_tree({
            'P': {
                'ok_202401': create_item_document('ok_202401', TIME_URL),
                'bad_202401': {'id': 'bad_202401', 'assets': ['x']},
            }
        }))
        diagnostics = []

        rows = assemble_catalog(walker=StacWalker(root=TEST_ROOT, session=session),
                                diagnostics=diagnostics)

        assert [r.dataset_version_id for r in rows] == ['ok_202401']
        assert [(d.product_id, d.item_href) for d in diagnostics] == [('P', 'bad_202401.stac.json')]

    def test_non_string_href_does_not_abort(self):
        session = FakeSession(create_stac_tree({
            'P': {
                'ok_202401': create_item_document('ok_202401', TIME_URL),
                'odd_202401': {'id': 'odd_202401', 'assets': {'timeChunked': {'href': 42}}},
            }
        }))

        rows = assemble_catalog(walker=StacWalker(root=TEST_ROOT, session=session))

        assert [r.dataset_version_id for r in rows] == ['ok_202401', 'odd_202401']
        assert rows[1].timeChunked_url is None
        assert rows[1].timeChunked_gdal is None
        assert not rows[1].is_arco

    def test_progress_callback(self):
        session = FakeSession(create_stac_tree({'P1': {}, 'P2': {}, 'P3': None}))
        on_progress = Mock()

        assemble_catalog(walker=StacWalker(root=TEST_ROOT, session=session), on_progress=on_progress)

        assert [c.args for c in on_progress.call_args_list] == [
            (1, 3, 'P1'), (2, 3, 'P2'), (3, 3, 'P3')
        ]

    def test_progress_callback_does_not_change_result(self, scenario_walker):
        without = assemble_catalog(walker=scenario_walker)
        with_progress = assemble_catalog(walker=scenario_walker, on_progress=Mock())

        assert without == with_progress

    def test_parallel_matches_sequential(self):
        items = {f'ds{i}_2024{i:02d}': create_item_document(f'ds{i}_2024{i:02d}', TIME_URL)
                 for i in range(1, 7)}
        items['missing_202401'] = None
        documents = create_stac_tree({'P': items})

        sequential_diag, parallel_diag = [], []
        sequential = assemble_catalog(
            walker=StacWalker(root=TEST_ROOT, session=FakeSession(documents)),
            diagnostics=sequential_diag
        )
        parallel = assemble_catalog(
            walker=StacWalker(root=TEST_ROOT, session=FakeSession(documents)),
            diagnostics=parallel_diag,
            n_workers=4
        )

        assert sorted(r.dataset_version_id for r in parallel) == sorted(r.dataset_version_id for r in sequential)
        assert len(parallel) == 6
        assert len(parallel_diag) == len(sequential_diag) == 1


class TestProductHelpers:

    def test_process_single_product_failure(self):
        walker = Mock(spec=StacWalker)
        walker.list_items.return_value = FetchResult([], "404 Error")
        diagnostics = []

        assert process_single_product('P', walker, diagnostics) == []
        walker.fetch_item_assets.assert_not_called()
        assert diagnostics[0].reason == "404 Error"

    def test_fetch_product_rows_only_fetches_given_items(self):
        walker = Mock(spec=StacWalker)
        walker.fetch_item_assets.return_value = FetchResult(None, "boom")

        rows = fetch_product_rows('P', [ItemRef('a.stac.json', 'a')], walker)

        assert rows == []
        walker.fetch_item_assets.assert_called_once_with('P', 'a.stac.json')
