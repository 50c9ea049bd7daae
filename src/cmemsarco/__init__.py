# MIT License
#
# Copyright (c) 2025 cmemsarco contributors
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice (including the next
# paragraph) shall be included in all copies or substantial portions of the
# Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""
cmemsarco is a Python library for cloud-native access to Copernicus Marine
(CMEMS) ARCO Zarr stores. It catalogs the public STAC metadata and turns
each dataset-version into GDAL data source names and S3 URIs.
"""

try:
    from ._version import __version__
except ImportError:
    __version__ = "unknown"

from .stac_api import StacWalker, FetchError, fetch_json, CMEMS_STAC_ROOT
from .dsn import (
    FormatError, S3_ENDPOINT,
    to_access_string, to_object_uri, to_cli_url, to_shell_command,
    anonymous_env, setup_env, make_arco_url, make_arco_dsn
)
from .models import CatalogRow, Diagnostic, split_dataset_version
from .catalog import (
    assemble_catalog, refresh_catalog,
    latest_per_dataset, arco_only,
    load_catalog, save_catalog
)
