"""
Incremental refresh of a previously built catalog.

The upstream catalog is large and append-mostly, so a refresh first
enumerates item identifiers only and then fetches assets for the items that
are missing from the cached catalog. Cached rows are never re-fetched.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Set, Tuple

from ..models import CatalogRow, Diagnostic, ItemRef
from ..stac_api import StacWalker
from .build import ProgressCallback, assemble_catalog, fetch_product_rows

ItemKey = Tuple[str, str]


def new_item_keys(cached_rows: Sequence[CatalogRow], current: Dict[ItemKey, ItemRef]) -> List[ItemKey]:
    """
    Return the ``(product_id, dataset_version_id)`` pairs of ``current``
    that are not present in ``cached_rows``, in enumeration order.
    """
    cached: Set[ItemKey] = {row.key for row in cached_rows}
    return [key for key in current if key not in cached]


def refresh_catalog(
    cached_rows: Sequence[CatalogRow],
    force_full: bool = False,
    walker: Optional[StacWalker] = None,
    on_progress: Optional[ProgressCallback] = None,
    diagnostics: Optional[List[Diagnostic]] = None,
    n_workers: int = 1
) -> Sequence[CatalogRow]:
    """
    Bring a cached catalog up to date with the STAC hierarchy.

    Parameters
    ----------
    cached_rows : sequence of CatalogRow
        The previously materialized catalog.
    force_full : bool
        Discard the cache and rebuild everything.
    walker : StacWalker, optional
        Walker to use. Defaults to the public CMEMS STAC root.
    on_progress : callable, optional
        Progress callback, see :func:`assemble_catalog`. Called once per
        product that has new items.
    diagnostics : list of Diagnostic, optional
        Failed products and items are appended here.
    n_workers : int
        Number of concurrent item fetches per product.

    Returns
    -------
    sequence of CatalogRow
        ``cached_rows`` itself when nothing is new, otherwise a new list with
        the cached rows followed by the rows of the new items.

    Raises
    ------
    FetchError
        If the root catalog cannot be fetched.
    """
    if walker is None:
        walker = StacWalker()

    if force_full:
        return assemble_catalog(on_progress=on_progress, walker=walker,
                                diagnostics=diagnostics, n_workers=n_workers)

    current = walker.list_item_ids(diagnostics=diagnostics)

    new_keys = new_item_keys(cached_rows, current)
    if not new_keys:
        logging.info("Catalog up to date")
        return cached_rows

    logging.info(f"Fetching {len(new_keys)} new datasets...")

    by_product: Dict[str, List[ItemRef]] = defaultdict(list)
    for key in new_keys:
        by_product[key[0]].append(current[key])

    new_rows = []
    known = {row.key for row in cached_rows}
    total = len(by_product)
    for index, (product_id, items) in enumerate(by_product.items(), start=1):
        logging.info(f"  [{index}/{total}] {product_id} ({len(items)} new)")
        if on_progress is not None:
            on_progress(index, total, product_id)
        for row in fetch_product_rows(product_id, items, walker, diagnostics, n_workers):
            # Link titles may differ from item ids; rows are keyed by item id
            if row.key in known:
                logging.debug(f"Skipping {row.dataset_version_id} of {product_id}: already in catalog")
                continue
            known.add(row.key)
            new_rows.append(row)

    return list(cached_rows) + new_rows
