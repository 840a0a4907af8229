"""Configuration introspection for ``python -m stepflow.config``."""

import argparse
import json
import sys
from typing import Any

from stepflow.core.exceptions import ConfigurationError

from .api import list_available_profiles, resolve_config
from .audit import summarize_origins
from .types import ResolvedConfig

# ruff: noqa: T201

HIGH_TEMPERATURE = 0.8


def get_config_warnings(resolved: ResolvedConfig) -> list[str]:
    """Settings that are valid but probably not what the user wants."""
    checks = [
        (
            resolved.mode == "remote" and not resolved.has_api_key,
            "No API key configured - AI steps will fail in remote mode "
            "(set STEPFLOW_API_KEY or use mode 'local-demo')",
        ),
        (
            resolved.mode == "local-demo" and resolved.has_api_key,
            "API key is set but ignored in local-demo mode",
        ),
        (
            resolved.temperature > HIGH_TEMPERATURE,
            "High temperature - AI step output will vary between runs",
        ),
    ]
    return [message for failed, message in checks if failed]


def get_config_info(*, profile: str | None = None) -> dict[str, Any]:
    """Machine-readable view of the effective configuration (key excluded)."""
    try:
        resolved = resolve_config(profile=profile)
    except ConfigurationError as e:
        return {
            "status": "invalid",
            "error": str(e),
            "config": None,
            "sources": {},
            "validation": {"errors": [str(e)], "warnings": []},
        }
    config = resolved._asdict()
    del config["api_key"], config["origin"]
    config["has_api_key"] = resolved.has_api_key
    return {
        "status": "valid",
        "config": config,
        "sources": dict(resolved.origin),
        "origin_counts": summarize_origins(resolved.origin),
        "validation": {"errors": [], "warnings": get_config_warnings(resolved)},
    }


def print_config_debug(*, profile: str | None = None, show_sources: bool = True) -> int:
    """Print the effective configuration and return a process exit code."""
    try:
        resolved = resolve_config(profile=profile)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    print("=== Effective Configuration ===")
    for name in ("model", "temperature", "mode", "provider", "request_timeout"):
        print(f"  {name}: {getattr(resolved, name)}")
    print(f"  api_key: {'[SET]' if resolved.has_api_key else '[NOT SET]'}")

    if show_sources:
        print("\n=== Configuration Sources ===")
        print(resolved.audit())

    profiles = list_available_profiles()
    if any(profiles.values()):
        print("\n=== Profiles ===")
        for location, names in profiles.items():
            print(f"  {location}: {', '.join(names) or '-'}")

    warnings = get_config_warnings(resolved)
    if warnings:
        print("\n=== Warnings ===")
        print("\n".join(f"  - {w}" for w in warnings))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for ``python -m stepflow.config``."""
    parser = argparse.ArgumentParser(
        prog="python -m stepflow.config",
        description="Show where each stepflow setting comes from",
    )
    parser.add_argument("--profile", help="Profile to resolve")
    output = parser.add_mutually_exclusive_group()
    output.add_argument("--json", action="store_true", help="Print JSON")
    output.add_argument(
        "--check", action="store_true", help="Exit 0 if the configuration is valid, else 1"
    )
    parser.add_argument(
        "--no-sources", action="store_true", help="Omit the per-field origin listing"
    )
    args = parser.parse_args(argv)

    if args.check:
        return 0 if get_config_info(profile=args.profile)["status"] == "valid" else 1
    if args.json:
        print(json.dumps(get_config_info(profile=args.profile), indent=2))
        return 0
    return print_config_debug(profile=args.profile, show_sources=not args.no_sources)
