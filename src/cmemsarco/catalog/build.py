"""
Catalog building functions for the CMEMS ARCO STAC hierarchy.

This module walks products and items, flattens them into one CatalogRow per
dataset-version and derives the GDAL/S3 access columns. Failures for a single
product or item are reported as Diagnostic records and never abort a build.
"""

import logging
from typing import Callable, Iterable, List, Optional, Sequence

import dask

from ..models import CatalogRow, Diagnostic, ItemRef
from ..stac_api import StacWalker

ProgressCallback = Callable[[int, int, str], None]


# ============================================================================
# Core Processing Functions
# ============================================================================

def fetch_product_rows(
    product_id: str,
    items: Sequence[ItemRef],
    walker: StacWalker,
    diagnostics: Optional[List[Diagnostic]] = None,
    n_workers: int = 1
) -> List[CatalogRow]:
    """
    Fetch the assets of the given items of one product and build rows.

    Parameters
    ----------
    product_id : str
        Product the items belong to.
    items : sequence of ItemRef
        Items to fetch. Only these are requested.
    walker : StacWalker
        Walker used for the requests.
    diagnostics : list of Diagnostic, optional
        Failed items are appended here.
    n_workers : int
        If greater than 1, items are fetched concurrently with dask's
        threaded scheduler. Row order then follows ``items`` regardless.

    Returns
    -------
    list of CatalogRow
        One row per successfully fetched item, including items without any
        asset URL.
    """
    if n_workers > 1 and len(items) > 1:
        tasks = [dask.delayed(walker.fetch_item_assets)(product_id, item.href) for item in items]
        results = dask.compute(*tasks, scheduler='threads', num_workers=n_workers)
    else:
        results = [walker.fetch_item_assets(product_id, item.href) for item in items]

    rows = []
    for item, result in zip(items, results):
        if not result.ok:
            if diagnostics is not None:
                diagnostics.append(Diagnostic(product_id, item.href, result.error))
            continue
        rows.append(CatalogRow.from_asset_set(product_id, result.value))
    return rows


def process_single_product(
    product_id: str,
    walker: StacWalker,
    diagnostics: Optional[List[Diagnostic]] = None,
    n_workers: int = 1
) -> List[CatalogRow]:
    """
    List the items of one product and fetch all of them.

    Returns an empty list if the product document cannot be fetched.
    """
    listing = walker.list_items(product_id)
    if not listing.ok:
        if diagnostics is not None:
            diagnostics.append(Diagnostic(product_id, None, listing.error))
        return []

    return fetch_product_rows(product_id, listing.value, walker, diagnostics, n_workers)


def assemble_catalog(
    product_ids: Optional[Iterable[str]] = None,
    on_progress: Optional[ProgressCallback] = None,
    walker: Optional[StacWalker] = None,
    diagnostics: Optional[List[Diagnostic]] = None,
    n_workers: int = 1
) -> List[CatalogRow]:
    """
    Build the catalog by walking the STAC hierarchy.

    Parameters
    ----------
    product_ids : iterable of str, optional
        Products to include. If None, every product of the root catalog.
    on_progress : callable, optional
        Called as ``on_progress(index, total, product_id)`` before each
        product, with a 1-based index.
    walker : StacWalker, optional
        Walker to use. Defaults to the public CMEMS STAC root.
    diagnostics : list of Diagnostic, optional
        Products and items that failed are appended here. They are also
        logged as warnings.
    n_workers : int
        Number of concurrent item fetches per product.

    Returns
    -------
    list of CatalogRow
        One row per dataset-version that could be fetched.

    Raises
    ------
    FetchError
        If ``product_ids`` is None and the root catalog cannot be fetched.

    Examples
    --------
    >>> rows = assemble_catalog(["SEALEVEL_GLO_PHY_L4_NRT_008_046"])
    >>> rows[0].timeChunked_gdal
    'ZARR:"/vsicurl/https://s3.waw3-1.cloudferro.com/mdl-arco-time-045/...'
    """
    if walker is None:
        walker = StacWalker()

    if product_ids is None:
        logging.info("Fetching STAC catalog...")
        product_ids = walker.list_product_ids()
    product_ids = list(product_ids)

    total = len(product_ids)
    logging.info(f"Processing {total} products...")

    rows = []
    for index, product_id in enumerate(product_ids, start=1):
        logging.info(f"  [{index}/{total}] {product_id}")
        if on_progress is not None:
            on_progress(index, total, product_id)
        rows.extend(process_single_product(product_id, walker, diagnostics, n_workers))

    return rows
