"""Command-line entry point.

Usage:
    python -m stepflow run workflow.json
    python -m stepflow run workflow.json --input "hey i wanted to check in" --trace
    python -m stepflow run workflow.json --input-file notes.txt --demo --json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
import sys

from stepflow.config import resolve_config
from stepflow.core.exceptions import (
    ConfigurationError,
    MissingAPIKeyError,
    PipelineError,
    ValidationError,
)
from stepflow.core.workflow import ensure_runnable, load_workflow
from stepflow.runner import create_runner

# ruff: noqa: T201

EXIT_OK = 0
EXIT_RUN_FAILED = 1
EXIT_INVALID = 2
EXIT_MISSING_KEY = 3

log = logging.getLogger("stepflow.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m stepflow",
        description="Run step workflows of AI instructions and formatters",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run a workflow JSON file")
    run.add_argument("workflow", type=Path, help="Path to the workflow document")
    source = run.add_mutually_exclusive_group()
    source.add_argument("--input", dest="input_text", help="Input text (overrides inputText)")
    source.add_argument("--input-file", type=Path, help="Read the input text from a file")
    run.add_argument("--trace", action="store_true", help="Print every step's output")
    run.add_argument("--json", action="store_true", help="Print the result as JSON")
    run.add_argument("--demo", action="store_true", help="Use the offline demo substitute")
    run.add_argument("--model", help="Model override")
    run.add_argument("--temperature", type=float, help="Temperature override (0-1)")
    run.add_argument("--profile", help="Configuration profile")
    run.add_argument("-v", "--verbose", action="store_true", help="Log step progress")
    return parser


def _read_input(args: argparse.Namespace, fallback: str) -> str:
    if args.input_file is not None:
        try:
            return args.input_file.read_text(encoding="utf-8")
        except OSError as e:
            raise ValidationError(f"Cannot read input file {args.input_file}: {e}") from e
    if args.input_text is not None:
        return args.input_text
    return fallback


def _run(args: argparse.Namespace) -> int:
    overrides: dict[str, object] = {}
    if args.demo:
        overrides["mode"] = "local-demo"
    if args.model:
        overrides["model"] = args.model
    if args.temperature is not None:
        overrides["temperature"] = args.temperature

    try:
        resolved = resolve_config(overrides, profile=args.profile)
        workflow = load_workflow(args.workflow)
        text = _read_input(args, workflow.input_text)
        ensure_runnable(workflow.steps, text)
    except (ConfigurationError, ValidationError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID

    def on_progress(current: int, total: int) -> None:
        log.info("Running step %d of %d", current, total)

    runner = create_runner(resolved)
    try:
        result = asyncio.run(
            runner.run_with_trace(
                workflow.steps, text, resolved.to_run_configuration(), on_progress
            )
        )
    except MissingAPIKeyError as e:
        print(f"error: {e} (set STEPFLOW_API_KEY or pass --demo)", file=sys.stderr)
        return EXIT_MISSING_KEY
    except PipelineError as e:
        where = f" (step {e.step_index})" if e.step_index else ""
        print(f"error{where}: {e}", file=sys.stderr)
        return EXIT_RUN_FAILED

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    elif args.trace:
        for step in result.steps:
            print(f"--- {step.index}. {step.title} ---")
            print(step.output)
        print("=== Output ===")
        print(result.final_output)
    else:
        print(result.final_output)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if getattr(args, "verbose", False) else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if args.command == "run":
        return _run(args)
    return EXIT_INVALID  # pragma: no cover - argparse enforces the subcommand


if __name__ == "__main__":
    raise SystemExit(main())
