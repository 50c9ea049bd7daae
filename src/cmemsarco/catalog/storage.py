"""
Persistence of a built catalog as a Parquet table.
"""

import logging
from pathlib import Path
from typing import Dict, List, Sequence, Union

import pandas as pd

from ..models import CATALOG_COLUMNS, SOURCE_COLUMNS, CatalogRow


def default_cache_path() -> Path:
    """Location of the user-level catalog cache."""
    return Path.home() / ".cache" / "cmemsarco" / "catalog.parquet"


def catalog_to_dataframe(rows: Sequence[CatalogRow]) -> pd.DataFrame:
    """
    Convert catalog rows to a DataFrame with one column per CatalogRow field.

    Parameters
    ----------
    rows : sequence of CatalogRow
        Catalog rows.

    Returns
    -------
    pd.DataFrame
        Frame with string (object) columns; missing values are None.
    """
    records = [{column: getattr(row, column) for column in CATALOG_COLUMNS} for row in rows]
    return pd.DataFrame(records, columns=CATALOG_COLUMNS, dtype=object)


def _value(value):
    if value is None or pd.isnull(value):
        return None
    return str(value)


def catalog_from_dataframe(df: pd.DataFrame) -> List[CatalogRow]:
    """
    Convert a DataFrame back into catalog rows.

    Only the source columns are read; identifier split and derived access
    columns are recomputed so that they always match the URLs.

    Raises
    ------
    ValueError
        If a source column is missing from ``df``.
    """
    missing = [column for column in SOURCE_COLUMNS if column not in df.columns]
    if missing:
        raise ValueError(f"Catalog table is missing columns: {missing}")

    rows = []
    for record in df[SOURCE_COLUMNS].to_dict('records'):
        values = {key: _value(value) for key, value in record.items()}
        rows.append(CatalogRow.from_assets(**values))
    return rows


def save_catalog(rows: Sequence[CatalogRow], path: Union[str, Path]) -> Path:
    """
    Write a catalog to a Parquet file, creating parent directories.

    Returns
    -------
    Path
        The written file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    catalog_to_dataframe(rows).to_parquet(path, engine='pyarrow', index=False)
    logging.info(f"Catalog saved to: {path}")
    return path


def load_catalog(path: Union[str, Path]) -> List[CatalogRow]:
    """
    Read a catalog written by :func:`save_catalog`.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")
    return catalog_from_dataframe(pd.read_parquet(path, engine='pyarrow'))


def summarize_catalog(rows: Sequence[CatalogRow]) -> Dict[str, int]:
    """Number of datasets (rows) and distinct products of a catalog."""
    return {
        'datasets': len(rows),
        'products': len({row.product_id for row in rows}),
    }
