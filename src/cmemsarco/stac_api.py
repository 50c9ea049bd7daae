"""
This module provides functions to walk the public Copernicus Marine STAC
metadata hierarchy. No authentication is required.

The hierarchy is::

    catalog.stac.json
      └── {PRODUCT_ID}/product.stac.json      (collection)
            └── {dataset_version_id}.stac.json (item)
                  └── assets: timeChunked, geoChunked, native
"""

import logging
from typing import Dict, List, Optional, Tuple

import requests

from .models import AssetSet, Diagnostic, FetchResult, ItemRef

CMEMS_STAC_ROOT = "https://stac.marine.copernicus.eu/metadata"
DEFAULT_TIMEOUT = 30
ASSET_NAMES = ("timeChunked", "geoChunked", "native")


class FetchError(Exception):
    """A single HTTP fetch failed (transport, non-2xx status or invalid JSON)."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


def fetch_json(url: str, timeout: float = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None):
    """
    GET a URL and parse the body as JSON.

    Parameters
    ----------
    url : str
        The URL to fetch.
    timeout : float, optional
        Per-request timeout in seconds. Expiry raises FetchError.
    session : requests.Session, optional
        Session to issue the request with. If None, uses ``requests.get``.

    Returns
    -------
    Any
        The decoded JSON document.

    Raises
    ------
    FetchError
        On network failure, timeout, non-2xx status or JSON decoding failure.
    """
    getter = session.get if session is not None else requests.get

    try:
        response = getter(url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise FetchError(url, str(e)) from e

    try:
        return response.json()
    except ValueError as e:
        raise FetchError(url, f"invalid JSON: {e}") from e


def _links(document, rel: str) -> List[dict]:
    if not isinstance(document, dict):
        raise ValueError("document is not a JSON object")
    return [link for link in document.get('links', []) or []
            if isinstance(link, dict) and link.get('rel') == rel]


class StacWalker:
    def __init__(self,
                 root: str = CMEMS_STAC_ROOT,
                 timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        """
        Initialize a walker over a STAC catalog rooted at ``root``.

        Parameters
        ----------
        root : str
            Base URL of the STAC metadata tree (without trailing slash).
        timeout : float
            Per-request timeout in seconds.
        session : requests.Session, optional
            Session used for every request, e.g. to share connections.
        """
        self.root = root.rstrip('/')
        self.timeout = timeout
        self.session = session

    @classmethod
    def from_config(cls, conf, session: Optional[requests.Session] = None) -> "StacWalker":
        """Create a walker from the ``stac`` section of a configuration."""
        return cls(root=conf.stac.root, timeout=conf.stac.timeout, session=session)

    def _fetch(self, url: str):
        return fetch_json(url, timeout=self.timeout, session=self.session)

    def product_url(self, product_id: str) -> str:
        return f"{self.root}/{product_id}/product.stac.json"

    def item_url(self, product_id: str, item_href: str) -> str:
        if item_href.startswith('./'):
            item_href = item_href[2:]
        return f"{self.root}/{product_id}/{item_href}"

    def list_product_ids(self) -> List[str]:
        """
        List the product identifiers of the root catalog.

        Returns
        -------
        list of str
            The ``title`` of every ``child`` link in ``catalog.stac.json``.

        Raises
        ------
        FetchError
            If the root catalog cannot be fetched. Without the product list
            nothing else is possible, so this is not caught.
        """
        url = f"{self.root}/catalog.stac.json"
        catalog = self._fetch(url)
        try:
            children = _links(catalog, 'child')
        except ValueError as e:
            raise FetchError(url, str(e)) from e

        product_ids = []
        for link in children:
            if not link.get('title'):
                logging.debug(f"Skipping untitled child link {link.get('href')} of {url}")
                continue
            product_ids.append(link['title'])
        return product_ids

    def list_items(self, product_id: str) -> FetchResult:
        """
        List the dataset-version items of one product.

        Failures are logged and returned as a failed FetchResult with an
        empty list so that a multi-product walk can continue.

        Parameters
        ----------
        product_id : str
            Product identifier, e.g. "SEALEVEL_GLO_PHY_L4_NRT_008_046".

        Returns
        -------
        FetchResult
            ``value`` is a list of ItemRef.
        """
        url = self.product_url(product_id)
        try:
            product = self._fetch(url)
            links = _links(product, 'item')
        except (FetchError, ValueError) as e:
            logging.warning(f"Failed to get STAC for {product_id}: {e}")
            return FetchResult([], str(e))

        items = [ItemRef(href=link['href'], title=link.get('title'))
                 for link in links if link.get('href')]
        return FetchResult(items)

    def fetch_item_assets(self, product_id: str, item_href: str) -> FetchResult:
        """
        Fetch one item document and extract its chunked-store asset URLs.

        Parameters
        ----------
        product_id : str
            Product the item belongs to.
        item_href : str
            Item href relative to the product directory.

        Returns
        -------
        FetchResult
            ``value`` is an AssetSet, or None on failure. Asset names that are
            absent from the item map to None rather than failing.
        """
        url = self.item_url(product_id, item_href)
        try:
            item = self._fetch(url)
            if not isinstance(item, dict) or not isinstance(item.get('id'), str) or not item['id']:
                raise ValueError("item document has no string 'id'")

            assets = item.get('assets') or {}
            if not isinstance(assets, dict):
                raise ValueError("item 'assets' is not a mapping")

            hrefs = {}
            for name in ASSET_NAMES:
                asset = assets.get(name)
                href = asset.get('href') if isinstance(asset, dict) else None
                hrefs[name] = href if isinstance(href, str) else None
        except (FetchError, ValueError) as e:
            logging.warning(f"Failed to get STAC item {item_href} for {product_id}: {e}")
            return FetchResult(None, str(e))

        return FetchResult(AssetSet(dataset_version_id=item['id'], **hrefs))

    def list_item_ids(self, product_ids: Optional[List[str]] = None,
                      diagnostics: Optional[List[Diagnostic]] = None) -> Dict[Tuple[str, str], ItemRef]:
        """
        Enumerate every (product_id, dataset_version_id) pair without
        fetching any item documents.

        Parameters
        ----------
        product_ids : list of str, optional
            Products to enumerate. If None, all products of the root catalog.
        diagnostics : list of Diagnostic, optional
            Products whose document could not be fetched are appended here.

        Returns
        -------
        dict
            Maps ``(product_id, dataset_version_id)`` to the ItemRef needed
            to fetch the item later. Products that fail contribute nothing.

        Raises
        ------
        FetchError
            If ``product_ids`` is None and the root catalog cannot be fetched.
        """
        if product_ids is None:
            product_ids = self.list_product_ids()

        current = {}
        for product_id in product_ids:
            result = self.list_items(product_id)
            if not result.ok and diagnostics is not None:
                diagnostics.append(Diagnostic(product_id, None, result.error))
            for item in result.value:
                current[(product_id, item.dataset_version_id)] = item
        return current
