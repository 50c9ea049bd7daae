"""
Catalog building utilities for CMEMS ARCO data.

This module provides tools to flatten the Copernicus Marine STAC hierarchy
into a table of dataset-versions with ready-to-use GDAL and S3 access
strings, to refresh a cached table incrementally, and to filter it.
"""

from .build import assemble_catalog, process_single_product, fetch_product_rows
from .refresh import refresh_catalog, new_item_keys
from .filters import latest_per_dataset, arco_only, select_product
from .storage import (
    catalog_to_dataframe, catalog_from_dataframe,
    save_catalog, load_catalog,
    default_cache_path, summarize_catalog
)
from .config import load_config, default_config, save_config, validate_config

__all__ = [
    # Configuration
    "load_config",
    "default_config",
    "save_config",
    "validate_config",
    # Building
    "assemble_catalog",
    "process_single_product",
    "fetch_product_rows",
    "refresh_catalog",
    "new_item_keys",
    # Filters
    "latest_per_dataset",
    "arco_only",
    "select_product",
    # Storage
    "catalog_to_dataframe",
    "catalog_from_dataframe",
    "save_catalog",
    "load_catalog",
    "default_cache_path",
    "summarize_catalog"
]
