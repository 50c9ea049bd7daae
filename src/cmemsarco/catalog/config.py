"""
Simple configuration management for catalog building using OmegaConf.

This module provides minimal configuration loading with OmegaConf,
letting the library handle all the complexity.
"""

import os
from pathlib import Path
from typing import Optional, List, Union
import logging

from omegaconf import OmegaConf, DictConfig

from ..dsn import S3_ENDPOINT
from ..stac_api import CMEMS_STAC_ROOT, DEFAULT_TIMEOUT


# Register resolvers for common path expansions
OmegaConf.register_new_resolver("pwd", lambda: os.getcwd(), replace=True)
OmegaConf.register_new_resolver("home", lambda: str(Path.home()), replace=True)
OmegaConf.register_new_resolver("env", lambda x, default="": os.environ.get(x, default), replace=True)

DEFAULTS = {
    "stac": {
        "root": CMEMS_STAC_ROOT,
        "timeout": DEFAULT_TIMEOUT,
    },
    "s3": {
        "endpoint": S3_ENDPOINT,
    },
    "processing": {
        "n_workers": 1,
        "arco_only": False,
    },
    "output": {
        "path": "${home:}/.cache/cmemsarco/catalog.parquet",
    },
    "logging": {
        "level": "INFO",
        "verbose": True,
    },
}


def default_config() -> DictConfig:
    """
    Built-in configuration, used when no YAML file is given.

    Returns
    -------
    DictConfig
        Resolved configuration with the public CMEMS endpoints.
    """
    conf = OmegaConf.create(DEFAULTS)
    OmegaConf.resolve(conf)
    return conf


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    overrides: Optional[List[str]] = None,
    environment: Optional[str] = None
) -> DictConfig:
    """
    Load configuration from YAML file with optional overrides.

    Values missing from the file fall back to the built-in defaults.

    Parameters
    ----------
    config_path : Union[str, Path], optional
        Path to YAML configuration file. If None, only defaults and
        overrides are used.
    overrides : List[str], optional
        Command-line overrides in dot notation
        Example: ["stac.timeout=60", "processing.n_workers=8"]
    environment : str, optional
        Environment name to apply (e.g., "production", "test")

    Returns
    -------
    DictConfig
        Configuration object with dot-notation access

    Examples
    --------
    >>> conf = load_config("config/catalog.yaml")
    >>> print(conf.stac.root)
    'https://stac.marine.copernicus.eu/metadata'

    >>> conf = load_config(
    ...     "config/catalog.yaml",
    ...     overrides=["processing.n_workers=16"],
    ...     environment="test"
    ... )
    """
    conf = OmegaConf.create(DEFAULTS)

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        conf = OmegaConf.merge(conf, OmegaConf.load(config_path))

    # Apply environment-specific overrides if specified
    if environment:
        if "environments" in conf and environment in conf.environments:
            logging.info(f"Applying environment: {environment}")
            env_conf = conf.environments[environment]
            conf = OmegaConf.merge(conf, env_conf)
        else:
            logging.warning(f"Environment '{environment}' not found in config")

    # Apply command-line overrides
    if overrides:
        logging.debug(f"Applying overrides: {overrides}")
        override_conf = OmegaConf.from_dotlist(overrides)
        conf = OmegaConf.merge(conf, override_conf)

    # Resolve all interpolations (${...} references)
    OmegaConf.resolve(conf)

    # Remove environments section from runtime config (no longer needed)
    if "environments" in conf:
        del conf["environments"]

    return conf


def save_config(conf: DictConfig, output_path: Union[str, Path], add_metadata: bool = True):
    """
    Save configuration next to a built catalog for reproducibility.

    Parameters
    ----------
    conf : DictConfig
        Configuration to save
    output_path : Union[str, Path]
        Where to save the configuration
    add_metadata : bool
        Whether to add generation metadata
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if add_metadata:
        from datetime import datetime
        save_conf = OmegaConf.create({
            "_metadata": {
                "generated_at": datetime.now().isoformat(),
                "working_directory": os.getcwd(),
            },
            **OmegaConf.to_container(conf)
        })
    else:
        save_conf = conf

    OmegaConf.save(save_conf, output_path)
    logging.info(f"Configuration saved to: {output_path}")


def validate_config(conf: DictConfig) -> bool:
    """
    Basic validation of required configuration fields.

    Parameters
    ----------
    conf : DictConfig
        Configuration to validate

    Returns
    -------
    bool
        True if valid, raises ValueError if not
    """
    required_fields = [
        "stac.root",
        "stac.timeout",
        "s3.endpoint",
        "output.path",
    ]

    for field in required_fields:
        if OmegaConf.select(conf, field) is None:
            raise ValueError(f"Required configuration field missing: {field}")

    if not str(conf.stac.root).startswith(("http://", "https://")):
        raise ValueError(f"Invalid stac.root: {conf.stac.root}. Must be an http(s) URL")

    if conf.stac.timeout <= 0:
        raise ValueError(f"Invalid stac.timeout: {conf.stac.timeout}. Must be positive")

    if conf.processing.n_workers <= 0:
        raise ValueError(f"Invalid n_workers: {conf.processing.n_workers}. Must be positive")

    return True
