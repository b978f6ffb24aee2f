"""Locate and merge the TOML layers behind Settings.

Layers, lowest priority first:

    config/default.toml          required; shared by every deployment
    config/{LESSOR_ENV}.toml     optional overlay (development, test, production)

LESSOR_* environment variables sit above both and are applied by
pydantic-settings, not here.
"""

import os
import tomllib
from functools import reduce
from pathlib import Path
from typing import Any

from lessor.config.settings import Settings

CONFIG_DIR_VAR = "LESSOR_CONFIG_DIR"
ENVIRONMENT_VAR = "LESSOR_ENV"
DEFAULT_ENVIRONMENT = "development"
BASE_FILE = "default.toml"

# <checkout>/lessor/config/loader.py -> <checkout>/config
CHECKOUT_CONFIG_DIR = Path(__file__).resolve().parents[2] / "config"


def get_environment() -> str:
    """Deployment environment named by LESSOR_ENV, lower-cased."""
    return os.environ.get(ENVIRONMENT_VAR, "").strip().lower() or DEFAULT_ENVIRONMENT


def get_config_dir() -> Path:
    """Directory holding default.toml.

    LESSOR_CONFIG_DIR wins and must exist. Otherwise the nearest config/
    directory with a default.toml, from the working directory upwards, so
    the API and the lessor-worker script find the same files from any
    subdirectory of a checkout. Falls back to the checkout's own config/.
    """
    override = os.environ.get(CONFIG_DIR_VAR)
    if override:
        path = Path(override)
        if not path.is_dir():
            raise FileNotFoundError(f"{CONFIG_DIR_VAR} is not a directory: {override}")
        return path

    cwd = Path.cwd()
    for directory in (cwd, *cwd.parents):
        candidate = directory / "config"
        if (candidate / BASE_FILE).is_file():
            return candidate
    return CHECKOUT_CONFIG_DIR


def config_layers(config_dir: Path, environment: str) -> list[Path]:
    """The files to merge for an environment, lowest priority first."""
    base = config_dir / BASE_FILE
    if not base.is_file():
        raise FileNotFoundError(
            f"Default configuration file not found: {base}. "
            f"Create it or point {CONFIG_DIR_VAR} at a directory that has one."
        )
    overlay = config_dir / f"{environment}.toml"
    return [base, overlay] if overlay.is_file() else [base]


def load_toml(path: Path) -> dict[str, Any]:
    """Parse one layer, rejecting sections Settings does not define.

    Settings ignores unknown keys, so a misspelt table such as
    [dispacher] would otherwise be dropped without a trace.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
        ValueError: If a top-level key is not a Settings field
    """
    with path.open("rb") as f:
        data = tomllib.load(f)

    unknown = sorted(set(data) - set(Settings.model_fields))
    if unknown:
        raise ValueError(f"{path}: unknown configuration keys {unknown}")
    return data


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into a copy of base.

    Tables merge key by key; any other value, lists included, is replaced.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_config() -> dict[str, Any]:
    """Merged TOML configuration for the current environment."""
    layers = config_layers(get_config_dir(), get_environment())
    return reduce(deep_merge, (load_toml(path) for path in layers), {})
