"""Common utilities and mock creation functions for tests."""

from unittest.mock import Mock

import requests

from cmemsarco.models import CatalogRow

TEST_ROOT = "https://stac.example.test/metadata"
TEST_HOST = "https://s3.waw3-1.cloudferro.com"

TIME_URL = f"{TEST_HOST}/mdl-arco-time-045/arco/PRODUCT_A/dsA_202411/timeChunked.zarr"
GEO_URL = f"{TEST_HOST}/mdl-arco-geo-045/arco/PRODUCT_A/dsA_202411/geoChunked.zarr"
NATIVE_URL = f"{TEST_HOST}/mdl-native-12/native/PRODUCT_A/dsA_202411"


def create_mock_response(payload=None, status_code=200, json_error=None):
    """Create a mock ``requests.Response``.

    Parameters
    ----------
    payload : Any, optional
        Value returned by ``json()``.
    status_code : int, optional
        HTTP status, by default 200. Non-2xx statuses make
        ``raise_for_status`` raise ``requests.HTTPError``.
    json_error : Exception, optional
        If given, ``json()`` raises it instead of returning ``payload``.
    """
    response = Mock()
    response.status_code = status_code
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Error")
    else:
        response.raise_for_status.return_value = None
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


class FakeSession:
    """Stand-in for ``requests.Session`` serving documents from a dict.

    URLs that are not in ``documents`` answer 404. Every requested URL is
    recorded in ``calls``.
    """

    def __init__(self, documents):
        self.documents = documents
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append(url)
        document = self.documents.get(url)
        if isinstance(document, Exception):
            raise document
        if document is None:
            return create_mock_response(status_code=404)
        return create_mock_response(document)

    def item_calls(self):
        """Requested URLs that are item documents."""
        return [url for url in self.calls
                if not url.endswith(("catalog.stac.json", "product.stac.json"))]


def create_catalog_document(product_ids):
    """Root catalog with one child link per product."""
    links = [{'rel': 'root', 'href': './catalog.stac.json'}]
    links += [{'rel': 'child', 'href': f'./{pid}/product.stac.json', 'title': pid}
              for pid in product_ids]
    return {'type': 'Catalog', 'id': 'cmems', 'links': links}


def create_product_document(product_id, dataset_version_ids):
    """Product collection with one item link per dataset-version."""
    links = [{'rel': 'parent', 'href': '../catalog.stac.json'}]
    links += [{'rel': 'item', 'href': f'{dvid}.stac.json', 'title': dvid}
              for dvid in dataset_version_ids]
    return {'type': 'Collection', 'id': product_id, 'links': links}


def create_item_document(dataset_version_id, time_url=None, geo_url=None, native_url=None):
    """Item document with the given assets; None assets are omitted."""
    assets = {}
    if time_url is not None:
        assets['timeChunked'] = {'href': time_url, 'roles': ['data']}
    if geo_url is not None:
        assets['geoChunked'] = {'href': geo_url, 'roles': ['data']}
    if native_url is not None:
        assets['native'] = {'href': native_url, 'roles': ['data']}
    return {'type': 'Feature', 'id': dataset_version_id, 'assets': assets}


def create_stac_tree(products, root=TEST_ROOT):
    """Build the URL -> document mapping for a small STAC hierarchy.

    Parameters
    ----------
    products : dict
        Maps product id to a dict of ``dataset_version_id -> item document``.
        A product mapped to None gets no product document (fetch fails).

    Returns
    -------
    dict
        Documents keyed by URL.
    """
    documents = {f"{root}/catalog.stac.json": create_catalog_document(list(products))}
    for product_id, items in products.items():
        if items is None:
            continue
        documents[f"{root}/{product_id}/product.stac.json"] = create_product_document(product_id, list(items))
        for dvid, item in items.items():
            if item is not None:
                documents[f"{root}/{product_id}/{dvid}.stac.json"] = item
    return documents


def create_mock_row(product_id='PRODUCT_A', dataset_version_id='dsA_202411',
                    time_url=TIME_URL, geo_url=GEO_URL, native_url=None):
    """Create a CatalogRow with derived columns as the builder would."""
    return CatalogRow.from_assets(
        product_id, dataset_version_id,
        timeChunked_url=time_url, geoChunked_url=geo_url, native_url=native_url
    )
