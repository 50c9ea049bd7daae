"""
Views over a catalog. Filters return new lists and never modify their input.
"""

from typing import Dict, List, Sequence, Tuple

from ..models import CatalogRow


def latest_per_dataset(rows: Sequence[CatalogRow]) -> List[CatalogRow]:
    """
    Keep only the latest version of each ``(product_id, dataset_id)``.

    Rows without a version token are dropped. Versions are fixed-width six
    digit tokens so string comparison orders them chronologically. Ties keep
    every row with the maximum version.

    Parameters
    ----------
    rows : sequence of CatalogRow
        A catalog from :func:`assemble_catalog`.

    Returns
    -------
    list of CatalogRow
        Filtered rows in their original order.
    """
    versioned = [row for row in rows if row.version is not None]

    latest: Dict[Tuple[str, str], str] = {}
    for row in versioned:
        group = (row.product_id, row.dataset_id)
        if group not in latest or row.version > latest[group]:
            latest[group] = row.version

    return [row for row in versioned if row.version == latest[(row.product_id, row.dataset_id)]]


def arco_only(rows: Sequence[CatalogRow]) -> List[CatalogRow]:
    """
    Remove static/native-only datasets, i.e. rows with neither a
    ``timeChunked`` nor a ``geoChunked`` store.
    """
    return [row for row in rows if row.is_arco]


def select_product(rows: Sequence[CatalogRow], product_id: str) -> List[CatalogRow]:
    """Rows of a single product."""
    return [row for row in rows if row.product_id == product_id]
