"""
Conversion of CMEMS ARCO store URLs into GDAL data source names, ``s3://``
URIs and shell commands.

Asset URLs have the shape::

    https://s3.waw3-1.cloudferro.com/mdl-arco-{time|geo}-{NNN}/arco/
        {PRODUCT_ID}/{dataset_id}_{version}/{time|geo}Chunked.zarr

The bucket number NNN is not the dataset version and varies per product family.
"""

import os
import re
import shlex
from typing import Dict, Optional

S3_ENDPOINT = "s3.waw3-1.cloudferro.com"
GDAL_DRIVER = "ZARR"

# Access modes for GDAL: direct HTTP range reads need no setup, native S3
# reads need the anonymous environment from setup_env()
ACCESS_MODES = ("vsicurl", "vsis3")
CHUNK_TYPES = ("time", "geo")

_URL_PATH_RE = re.compile(r"https://[^/]+/(.+)")
_URL_BUCKET_KEY_RE = re.compile(r"https://[^/]+/([^/]+)/(.+)")


class FormatError(ValueError):
    """A URL does not have the expected ``https://host/bucket/key`` shape."""

    def __init__(self, url: str, expected: str = "https://host/bucket/key"):
        super().__init__(f"URL {url!r} does not match expected shape {expected}")
        self.url = url


def to_access_string(url: Optional[str], array: Optional[str] = None, mode: str = "vsicurl") -> Optional[str]:
    """
    Convert an HTTPS store URL to a GDAL Zarr DSN.

    Parameters
    ----------
    url : str or None
        The HTTPS URL of a Zarr store.
    array : str, optional
        A specific array/variable inside the store.
    mode : {"vsicurl", "vsis3"}
        ``vsicurl`` reads over plain HTTP ranges and needs no setup.
        ``vsis3`` reads through GDAL's S3 driver and requires the environment
        from :func:`setup_env`.

    Returns
    -------
    str or None
        The DSN, or None if ``url`` is None.

    Raises
    ------
    FormatError
        If ``url`` is not of the form ``https://host/path``.

    Examples
    --------
    >>> url = "https://s3.waw3-1.cloudferro.com/mdl-arco-time-045/arco/P/d_202311/timeChunked.zarr"
    >>> to_access_string(url, mode="vsis3")
    'ZARR:"/vsis3/mdl-arco-time-045/arco/P/d_202311/timeChunked.zarr"'
    >>> to_access_string(url, array="sla", mode="vsis3")
    'ZARR:"/vsis3/mdl-arco-time-045/arco/P/d_202311/timeChunked.zarr":/sla'
    """
    if mode not in ACCESS_MODES:
        raise ValueError(f"Unknown access mode {mode!r}, expected one of {ACCESS_MODES}")
    if url is None:
        return None
    if not isinstance(url, str):
        raise FormatError(url, "https://host/path")

    match = _URL_PATH_RE.fullmatch(url)
    if match is None:
        raise FormatError(url, "https://host/path")

    if mode == "vsicurl":
        dsn = f'{GDAL_DRIVER}:"/vsicurl/{url}"'
    else:
        dsn = f'{GDAL_DRIVER}:"/vsis3/{match.group(1)}"'

    if array:
        dsn = f"{dsn}:/{array}"
    return dsn


def to_object_uri(url: Optional[str]) -> Optional[str]:
    """
    Convert an HTTPS store URL to an ``s3://bucket/key`` URI.

    The bucket is the first path segment after the host.
    """
    if url is None:
        return None
    if not isinstance(url, str):
        raise FormatError(url)

    match = _URL_BUCKET_KEY_RE.fullmatch(url)
    if match is None:
        raise FormatError(url)
    return f"s3://{match.group(1)}/{match.group(2)}"


def to_cli_url(url: Optional[str]) -> Optional[str]:
    """URL for command line object-storage tools such as s5cmd."""
    return to_object_uri(url)


def anonymous_env(endpoint: str = S3_ENDPOINT) -> Dict[str, str]:
    """Environment variables GDAL needs for anonymous access to the CMEMS bucket."""
    return {
        'AWS_NO_SIGN_REQUEST': 'YES',
        'AWS_S3_ENDPOINT': endpoint,
    }


def setup_env(endpoint: str = S3_ENDPOINT) -> Dict[str, str]:
    """
    Set the AWS environment variables required for ``vsis3`` access.

    Only the process environment is modified; whether GDAL honours the values
    is up to the caller's GDAL build.

    Returns
    -------
    dict
        The variables that were set.
    """
    env = anonymous_env(endpoint)
    os.environ.update(env)
    return env


def to_shell_command(dsn: Optional[str], program: str = "gdalinfo", endpoint: str = S3_ENDPOINT) -> Optional[str]:
    """
    Build a shell command line running ``program`` on ``dsn``.

    The command is only formatted, never executed.

    Examples
    --------
    >>> to_shell_command('ZARR:"/vsis3/bucket/store.zarr"')
    'AWS_NO_SIGN_REQUEST=YES AWS_S3_ENDPOINT=s3.waw3-1.cloudferro.com gdalinfo \\'ZARR:"/vsis3/bucket/store.zarr"\\''
    """
    if dsn is None:
        return None
    env = " ".join(f"{key}={value}" for key, value in anonymous_env(endpoint).items())
    return f"{env} {program} {shlex.quote(dsn)}"


def make_arco_url(product_id: str, dataset_id: str, version: str,
                  chunk_type: str = "time", bucket_version: str = "045",
                  endpoint: str = S3_ENDPOINT) -> str:
    """
    Construct an ARCO Zarr URL from known identifiers without querying STAC.

    Parameters
    ----------
    product_id : str
        Product identifier, e.g. "SEALEVEL_GLO_PHY_L4_NRT_008_046".
    dataset_id : str
        Dataset identifier without the version suffix.
    version : str
        Six digit version token (usually YYYYMM).
    chunk_type : {"time", "geo"}
        ``time`` for spatial slices at one time, ``geo`` for time series at
        a point.
    bucket_version : str
        Bucket number suffix, e.g. "045" or "042". It differs between product
        families and is not the dataset version.
    endpoint : str
        S3 endpoint host.

    Returns
    -------
    str
        HTTPS URL of the Zarr store.
    """
    if chunk_type not in CHUNK_TYPES:
        raise ValueError(f"chunk_type must be one of {CHUNK_TYPES}, got {chunk_type!r}")

    dataset_version_id = f"{dataset_id}_{version}"
    bucket = f"mdl-arco-{chunk_type}-{bucket_version}"
    return f"https://{endpoint}/{bucket}/arco/{product_id}/{dataset_version_id}/{chunk_type}Chunked.zarr"


def make_arco_dsn(product_id: str, dataset_id: str, version: str,
                  chunk_type: str = "time", bucket_version: str = "045",
                  array: Optional[str] = None, mode: str = "vsis3",
                  endpoint: str = S3_ENDPOINT) -> str:
    """Shortcut for ``to_access_string(make_arco_url(...))``."""
    url = make_arco_url(product_id, dataset_id, version, chunk_type, bucket_version, endpoint)
    return to_access_string(url, array=array, mode=mode)
