"""
Hierarchical YAML configuration loader for request_reconciler.

Discovers config files by convention, merges them with "project wins"
semantics and interpolates ``${VAR}`` references from the environment.
The same loader reads resource definition files for the CLI.

Usage:
    from request_reconciler.config_loader import load_hierarchical_config

    raw = load_hierarchical_config()
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# Matches ${VAR} and ${VAR:-default}
_ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+?)(?::-(.*?))?\}")


def interpolate_env_vars(value: str) -> str:
    """Replace ``${VAR}`` and ``${VAR:-default}`` patterns with env values.

    An unset or empty VAR yields *default* when given, else ``""``.
    """

    def _replace(match: re.Match) -> str:
        env_val = os.environ.get(match.group(1))
        if env_val:
            return env_val
        return match.group(2) or ""

    return _ENV_VAR_PATTERN.sub(_replace, value)


def interpolate_recursive(obj: Any) -> Any:
    """Walk a nested dict/list and interpolate env vars in all strings."""
    if isinstance(obj, str):
        return interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: interpolate_recursive(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [interpolate_recursive(item) for item in obj]
    return obj


def load_yaml_file(path: Path) -> Any:
    """Load a single YAML document with ``yaml.safe_load``."""
    with open(path, "r", encoding="utf-8") as fh:
        return yaml.safe_load(fh)


def discover_config_files() -> list[Path]:
    """Return existing config file paths in precedence order (highest first).

    Search order:
        1. ``RECONCILER_CONFIG`` env var (explicit single path).
        2. ``.request_reconciler/config.yml`` in CWD (project-level)
        3. ``~/.config/request_reconciler/config.yml`` (XDG global)

    Only paths that exist on disk are returned.
    """
    candidates: list[Path] = []

    env_path = os.environ.get("RECONCILER_CONFIG")
    if env_path:
        candidates.append(Path(env_path).expanduser().resolve())

    candidates.append(Path.cwd() / ".request_reconciler" / "config.yml")
    candidates.append(
        Path.home() / ".config" / "request_reconciler" / "config.yml"
    )

    return [p for p in candidates if p.exists()]


def load_hierarchical_config() -> dict[str, Any]:
    """Load and merge all discovered config files.

    Files are applied from lowest precedence to highest; each file's
    top-level keys replace (not deep-merge) those from earlier files.
    Env var interpolation runs after the merge.

    Returns an empty dict when no config files exist (zero-config).
    """
    paths = discover_config_files()

    if not paths:
        logger.debug("No config files found, using defaults")
        return {}

    merged: dict[str, Any] = {}
    for path in reversed(paths):
        logger.debug("Loading config: %s", path)
        data = load_yaml_file(path)

        if isinstance(data, dict):
            merged.update(data)
        elif data is not None:
            logger.warning(
                "Config file %s has non-dict root (%s), skipping",
                path,
                type(data).__name__,
            )

    return interpolate_recursive(merged)
