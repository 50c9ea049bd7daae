#!/usr/bin/env python3
"""
Build or refresh the cached CMEMS ARCO catalog.

Run this periodically to keep the Parquet catalog up to date. A full build
walks every product of the STAC catalog and takes a few minutes.
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from omegaconf import OmegaConf

from cmemsarco.catalog import (
    arco_only, assemble_catalog, load_catalog, load_config,
    refresh_catalog, save_catalog, save_config, summarize_catalog,
    validate_config
)
from cmemsarco.stac_api import StacWalker


def update_catalog(conf, product_ids=None, refresh=True, force_full=False):
    """
    Build or refresh the catalog described by ``conf`` and save it.

    Parameters
    ----------
    conf : DictConfig
        Validated configuration.
    product_ids : list of str, optional
        Restrict a fresh build to these products. Ignored when refreshing.
    refresh : bool
        Start from the existing catalog at ``output.path`` if there is one.
    force_full : bool
        Rebuild even if a cached catalog exists.

    Returns
    -------
    Path
        The written catalog file.
    """
    output_path = Path(conf.output.path)
    walker = StacWalker.from_config(conf)
    diagnostics = []

    if refresh and not product_ids and output_path.exists():
        cached = load_catalog(output_path)
        print(f"Loaded {len(cached)} cached datasets from {output_path}")
        rows = refresh_catalog(
            cached,
            force_full=force_full,
            walker=walker,
            diagnostics=diagnostics,
            n_workers=conf.processing.n_workers
        )
    else:
        rows = assemble_catalog(
            product_ids,
            walker=walker,
            diagnostics=diagnostics,
            n_workers=conf.processing.n_workers
        )

    if diagnostics:
        print(f"⚠️ {len(diagnostics)} products/items could not be fetched")
        for diagnostic in diagnostics:
            target = diagnostic.item_href or "product document"
            logging.debug(f"  {diagnostic.product_id} {target}: {diagnostic.reason}")

    if conf.processing.arco_only:
        rows = arco_only(rows)

    save_catalog(rows, output_path)
    save_config(conf, output_path.parent / "config_used.yaml")

    summary = summarize_catalog(rows)
    print(f"Catalog updated: {summary['datasets']} datasets from {summary['products']} products")
    return output_path


def main():
    parser = argparse.ArgumentParser(
        description="Build or refresh the CMEMS ARCO Zarr catalog"
    )

    parser.add_argument("--config", "-c", help="YAML configuration file")
    parser.add_argument("--env", "-e", help="Environment (test/production)")
    parser.add_argument("--products", "-p", nargs="+", help="Only build these product ids")
    parser.add_argument("--full", action="store_true", help="Ignore the cached catalog and rebuild everything")
    parser.add_argument("--no-refresh", action="store_true", help="Build from scratch without reading the cache")
    parser.add_argument("--arco-only", action="store_true", help="Drop datasets without Zarr stores")
    parser.add_argument("--output", "-o", help="Output Parquet file (overrides output.path)")
    parser.add_argument("overrides", nargs="*", help="Config overrides (e.g., processing.n_workers=8)")

    args = parser.parse_args()

    overrides = list(args.overrides)
    if args.output:
        overrides.append(f"output.path={args.output}")
    if args.arco_only:
        overrides.append("processing.arco_only=true")

    try:
        conf = load_config(args.config, overrides, args.env)
        validate_config(conf)

        logging.basicConfig(
            level=conf.logging.level,
            format="%(asctime)s %(levelname)s %(message)s"
        )

        if conf.logging.verbose:
            print(OmegaConf.to_yaml(conf))

        start = time.time()
        update_catalog(
            conf,
            product_ids=args.products,
            refresh=not args.no_refresh,
            force_full=args.full
        )
        print(f"Completed in {time.time() - start:.1f}s")

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
