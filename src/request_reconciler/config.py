"""Runtime configuration for the reconciler.

Reads HTTP and comparison settings from CLI args, environment variables,
.env files, and YAML config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    RECONCILER_TIMEOUT: Read timeout in seconds (optional, default: 30)
    RECONCILER_CONNECT_TIMEOUT: Connect timeout in seconds (optional, default: 10)
    RECONCILER_INSECURE: Skip TLS verification for all requests (optional, default: false)
    RECONCILER_DEBUG: Enable debug logging (optional, default: false)
    RECONCILER_ARRAY_MODE: "ordered" or "unordered" array comparison (optional, default: ordered)
    RECONCILER_STATE_DIR: Directory holding persisted resource status (optional)
"""

import logging
import os
from dataclasses import dataclass

from .compare.json_value import ArrayMode

logger = logging.getLogger(__name__)

DEFAULT_STATE_DIR = ".request_reconciler/state"


@dataclass
class Config:
    timeout: float = 30.0
    connect_timeout: float = 10.0
    insecure: bool = False
    debug: bool = False
    array_mode: str = ArrayMode.ORDERED.value
    state_dir: str = DEFAULT_STATE_DIR


def validate_config(config: Config) -> None:
    """Validate configuration values and raise ValueError if invalid.

    Args:
        config: Config instance to validate.

    Raises:
        ValueError: If a timeout is not positive, the array mode is
            unknown, or the state directory is empty.
    """
    if config.timeout <= 0:
        raise ValueError(
            f"Invalid timeout '{config.timeout}': must be greater than 0"
        )
    if config.connect_timeout <= 0:
        raise ValueError(
            f"Invalid connect timeout '{config.connect_timeout}': must be greater than 0"
        )

    config.array_mode = config.array_mode.strip().lower()
    valid_modes = [m.value for m in ArrayMode]
    if config.array_mode not in valid_modes:
        raise ValueError(
            f"Invalid array mode '{config.array_mode}': must be one of {', '.join(valid_modes)}"
        )

    if not config.state_dir.strip():
        raise ValueError(
            "State directory cannot be empty. Set RECONCILER_STATE_DIR environment variable."
        )

    if config.insecure:
        logger.warning(
            "WARNING: TLS verification disabled (insecure=True). Use only for development."
        )


def _get_float(key: str, fallback: object, default: float) -> float:
    raw = os.getenv(key)
    if raw is None:
        raw = fallback
    if raw is None:
        return default
    try:
        return float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ValueError(
            f"Invalid {key} '{raw}': must be a number of seconds"
        ) from None


def load_config(
    timeout: float | None = None,
    insecure: bool = False,
    debug: bool = False,
    array_mode: str | None = None,
    state_dir: str | None = None,
    yaml_fallbacks: dict | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        timeout: Override read timeout in seconds.
        insecure: Skip TLS verification (CLI flag).
        debug: Enable debug logging (CLI flag).
        array_mode: Override array comparison mode.
        state_dir: Override status directory.
        yaml_fallbacks: Flat dict of values from the YAML config file.
            Used as fallback when CLI arg and env var are both unset.

    Returns:
        Validated Config instance.

    Raises:
        ValueError: If any value is malformed.
    """
    fb = yaml_fallbacks or {}

    # --- Numeric fields: CLI > env > YAML > default ---

    if timeout is not None:
        final_timeout = float(timeout)
    else:
        final_timeout = _get_float(
            "RECONCILER_TIMEOUT", fb.get("timeout"), 30.0
        )
    final_connect_timeout = _get_float(
        "RECONCILER_CONNECT_TIMEOUT", fb.get("connect_timeout"), 10.0
    )

    # --- Boolean fields: CLI > env > YAML > default ---

    def get_bool_env(key: str) -> bool | None:
        """Return True/False from env var, or None if unset."""
        val = os.getenv(key)
        if val is None:
            return None
        return val.lower() in ("true", "1", "yes", "on")

    if insecure:
        final_insecure = True
    else:
        env_insecure = get_bool_env("RECONCILER_INSECURE")
        if env_insecure is not None:
            final_insecure = env_insecure
        else:
            final_insecure = bool(fb.get("insecure", False))

    if debug:
        final_debug = True
    else:
        env_debug = get_bool_env("RECONCILER_DEBUG")
        if env_debug is not None:
            final_debug = env_debug
        else:
            final_debug = bool(fb.get("debug", False))

    # --- String fields: CLI > env > YAML > default ---

    final_array_mode = (
        array_mode
        or os.getenv("RECONCILER_ARRAY_MODE")
        or fb.get("array_mode")
        or ArrayMode.ORDERED.value
    )
    final_state_dir = (
        state_dir
        or os.getenv("RECONCILER_STATE_DIR")
        or fb.get("state_dir")
        or DEFAULT_STATE_DIR
    )

    config = Config(
        timeout=final_timeout,
        connect_timeout=final_connect_timeout,
        insecure=final_insecure,
        debug=final_debug,
        array_mode=str(final_array_mode),
        state_dir=str(final_state_dir),
    )

    validate_config(config)

    return config
