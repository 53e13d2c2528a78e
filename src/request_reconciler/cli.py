"""Command-line entry point: observe or reconcile one resource file."""

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from . import __version__
from .compare.json_value import ArrayMode
from .config import Config, load_config
from .config_loader import (
    interpolate_recursive,
    load_hierarchical_config,
    load_yaml_file,
)
from .config_schema import build_config, to_fallbacks
from .core.client import HttpClient
from .errors import ReconcilerError
from .logger import setup_logging
from .models import Resource
from .reconciler.external import RequestExternal
from .reconciler.store import JsonFileResourceStore

logger = logging.getLogger(__name__)


def load_resource(path: Path) -> Resource:
    """Load a resource definition from a YAML (or JSON) file."""
    data = interpolate_recursive(load_yaml_file(path))
    if not isinstance(data, dict):
        raise ValueError(f"Resource file {path} must contain a mapping")
    return Resource.model_validate(data)


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "resource_file", type=Path, help="Path to the resource YAML file"
    )
    common.add_argument(
        "--state-dir",
        help="Directory for persisted resource status "
        "(overrides RECONCILER_STATE_DIR and config files)",
    )
    common.add_argument(
        "--timeout",
        type=float,
        help="Read timeout in seconds (overrides RECONCILER_TIMEOUT)",
    )
    common.add_argument(
        "--insecure",
        action="store_true",
        help="Skip TLS certificate verification (use only for development)",
    )
    common.add_argument(
        "--array-mode",
        choices=[m.value for m in ArrayMode],
        help="How JSON arrays are compared (default: ordered)",
    )
    common.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )
    common.add_argument("--log-file", help="Also write logs to this file")
    common.add_argument(
        "--log-format",
        choices=["text", "json"],
        help="Log line format (default: text)",
    )

    parser = argparse.ArgumentParser(
        prog="request-reconciler",
        description="Reconcile HTTP-managed resources against their declared state",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Check whether the remote object matches its declaration
  request-reconciler observe user.yml

  # Create or update the remote object as needed
  request-reconciler reconcile user.yml --state-dir /var/lib/reconciler

  # Remove the remote object
  request-reconciler delete user.yml
        """,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"request-reconciler version {__version__}",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser(
        "observe", parents=[common], help="Observe without changing anything"
    )
    sub.add_parser(
        "reconcile", parents=[common], help="Observe, then create or update"
    )
    sub.add_parser(
        "delete", parents=[common], help="Delete the remote object if present"
    )
    return parser


def _summary(command: str, resource: Resource, **extra) -> dict:
    summary = {
        "command": command,
        "resource": resource.name,
        "status_code": resource.status.response.status_code,
        "failed": resource.status.failed,
        "error": resource.status.error,
    }
    summary.update(extra)
    return summary


def execute(args: argparse.Namespace, config: Config) -> dict:
    store = JsonFileResourceStore(Path(config.state_dir))
    declared = load_resource(args.resource_file)
    stored = store.load(declared.name)
    resource = (
        declared.with_status(stored.status) if stored else declared
    )

    external = RequestExternal(
        client=HttpClient(config),
        store=store,
        array_mode=ArrayMode(config.array_mode),
    )

    if args.command == "observe":
        observation = external.observe(resource)
        return _summary(
            args.command,
            observation.resource,
            exists=observation.resource_exists,
            up_to_date=observation.resource_up_to_date,
        )

    result = external.reconcile(
        resource, deleting=args.command == "delete"
    )
    return _summary(
        args.command, result.resource, outcome=result.outcome.value
    )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    load_dotenv()

    try:
        unified = build_config(load_hierarchical_config())
        config = load_config(
            timeout=args.timeout,
            insecure=args.insecure,
            debug=args.debug,
            array_mode=args.array_mode,
            state_dir=args.state_dir,
            yaml_fallbacks=to_fallbacks(unified),
        )
    except (ValueError, ValidationError, OSError, yaml.YAMLError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(
        debug=config.debug,
        log_file=args.log_file or unified.logging.file,
        log_format=args.log_format or unified.logging.format,
        level=unified.logging.level,
    )

    try:
        summary = execute(args, config)
    except (ReconcilerError, ValueError, OSError, yaml.YAMLError) as e:
        logger.error("%s failed: %s", args.command, e)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(summary, indent=2))
    return 0


def run() -> None:
    """Console script entry point."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    run()
