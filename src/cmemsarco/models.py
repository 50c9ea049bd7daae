"""
Record types shared by the STAC walker and the catalog builder.
"""

import logging
import re
from dataclasses import dataclass, fields
from typing import Any, Optional, Tuple

from .dsn import FormatError, to_access_string, to_object_uri

VERSION_SUFFIX_RE = re.compile(r"^(.*)_(\d{6})$")


def split_dataset_version(dataset_version_id: str) -> Tuple[str, Optional[str]]:
    """
    Split a dataset-version identifier into dataset id and version token.

    A trailing underscore followed by exactly six digits is the version.

    Examples
    --------
    >>> split_dataset_version("cmems_obs-sl_glo_phy-ssh_nrt_allsat-l4-duacs-0.25deg_P1D_202311")
    ('cmems_obs-sl_glo_phy-ssh_nrt_allsat-l4-duacs-0.25deg_P1D', '202311')
    >>> split_dataset_version("static_dataset")
    ('static_dataset', None)
    """
    match = VERSION_SUFFIX_RE.match(dataset_version_id)
    if match is None:
        return dataset_version_id, None
    return match.group(1), match.group(2)


@dataclass(frozen=True)
class ItemRef:
    """An ``item`` link of a product document."""
    href: str
    title: Optional[str] = None

    @property
    def dataset_version_id(self) -> str:
        if self.title:
            return self.title
        name = self.href.rstrip('/').rsplit('/', 1)[-1]
        for suffix in ('.stac.json', '.json'):
            if name.endswith(suffix):
                return name[:-len(suffix)]
        return name


@dataclass(frozen=True)
class AssetSet:
    """Asset URLs of one item. Missing assets are None."""
    dataset_version_id: str
    timeChunked: Optional[str] = None
    geoChunked: Optional[str] = None
    native: Optional[str] = None


@dataclass(frozen=True)
class FetchResult:
    """
    Outcome of a walker call that is allowed to fail without aborting a walk.

    ``value`` is the (possibly empty) payload, ``error`` the failure reason or
    None on success.
    """
    value: Any
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class Diagnostic:
    """A product or item that could not be fetched during a walk."""
    product_id: str
    item_href: Optional[str]
    reason: str


def _derive(func, url, column, dataset_version_id, **kwargs):
    try:
        return func(url, **kwargs)
    except FormatError as e:
        logging.warning(f"Cannot derive {column} for {dataset_version_id}: {e}")
        return None


@dataclass(frozen=True)
class CatalogRow:
    """
    One dataset-version of the catalog.

    The ``*_gdal``, ``*_gdals3`` and ``*_s3`` columns are derived from the URL
    columns by :meth:`from_assets` and must not be set independently.
    """
    product_id: str
    dataset_version_id: str
    dataset_id: str
    version: Optional[str] = None
    timeChunked_url: Optional[str] = None
    geoChunked_url: Optional[str] = None
    native_url: Optional[str] = None
    timeChunked_gdal: Optional[str] = None
    geoChunked_gdal: Optional[str] = None
    timeChunked_gdals3: Optional[str] = None
    geoChunked_gdals3: Optional[str] = None
    timeChunked_s3: Optional[str] = None
    geoChunked_s3: Optional[str] = None
    native_s3: Optional[str] = None

    @classmethod
    def from_assets(cls, product_id: str, dataset_version_id: str,
                    timeChunked_url: Optional[str] = None,
                    geoChunked_url: Optional[str] = None,
                    native_url: Optional[str] = None) -> "CatalogRow":
        """
        Build a row from fetched values, computing the identifier split and
        all derived columns.

        A malformed URL leaves only the affected derived column empty.
        """
        dataset_id, version = split_dataset_version(dataset_version_id)
        derived = {}
        for name, url in (('timeChunked', timeChunked_url), ('geoChunked', geoChunked_url)):
            derived[f'{name}_gdal'] = _derive(to_access_string, url, f'{name}_gdal',
                                              dataset_version_id, mode='vsicurl')
            derived[f'{name}_gdals3'] = _derive(to_access_string, url, f'{name}_gdals3',
                                                dataset_version_id, mode='vsis3')
            derived[f'{name}_s3'] = _derive(to_object_uri, url, f'{name}_s3', dataset_version_id)
        derived['native_s3'] = _derive(to_object_uri, native_url, 'native_s3', dataset_version_id)

        return cls(
            product_id=product_id,
            dataset_version_id=dataset_version_id,
            dataset_id=dataset_id,
            version=version,
            timeChunked_url=timeChunked_url,
            geoChunked_url=geoChunked_url,
            native_url=native_url,
            **derived
        )

    @classmethod
    def from_asset_set(cls, product_id: str, assets: AssetSet) -> "CatalogRow":
        return cls.from_assets(
            product_id,
            assets.dataset_version_id,
            timeChunked_url=assets.timeChunked,
            geoChunked_url=assets.geoChunked,
            native_url=assets.native,
        )

    @property
    def key(self) -> Tuple[str, str]:
        return (self.product_id, self.dataset_version_id)

    @property
    def is_arco(self) -> bool:
        return self.timeChunked_url is not None or self.geoChunked_url is not None


CATALOG_COLUMNS = [f.name for f in fields(CatalogRow)]
SOURCE_COLUMNS = ['product_id', 'dataset_version_id', 'timeChunked_url', 'geoChunked_url', 'native_url']
