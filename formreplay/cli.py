"""Command-line interface for discovering and replaying web forms."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from playwright.sync_api import Error as PlaywrightError

from .browser import BrowserConfig
from .errors import FormReplayError
from .filler import FillOptions
from .io_utils import (
    generate_run_id,
    prepare_run_directories,
    read_json,
    read_text,
    resolve_data_dir,
    write_json,
)
from .logging_utils import build_logger, close_logger
from .service import analyze_and_store, analyze_html_and_store, submit_stored_form
from .store import FormStore
from .value_generation import ValueGenerator

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Discover web forms and replay them with supplied values"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--data-dir", dest="data_dir", help="Storage directory")
    common.add_argument("--run-id", dest="run_id", help="Optional run identifier")
    common.add_argument("--verbose", action="store_true", help="Enable verbose logging")

    discover_parser = subparsers.add_parser(
        "discover", help="Analyze a page and store its form", parents=[common]
    )
    discover_parser.add_argument("--url", required=True, help="Page hosting the form")
    discover_parser.add_argument(
        "--html", help="Analyze a saved HTML file instead of loading the URL"
    )
    discover_parser.add_argument(
        "--headed", action="store_true", help="Show the browser while analyzing"
    )

    fill_parser = subparsers.add_parser(
        "fill", help="Replay a stored form", parents=[common]
    )
    _add_form_id(fill_parser)
    source = fill_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--values", help="JSON object mapping field names to values")
    source.add_argument("--values-file", help="Path to a JSON file of field values")
    source.add_argument(
        "--generate", action="store_true", help="Generate values for every field"
    )
    fill_parser.add_argument(
        "--speed", type=float, default=500, help="Delay basis in ms (larger is slower)"
    )
    fill_parser.add_argument(
        "--headless", action="store_true", help="Run without a visible browser"
    )
    fill_parser.add_argument("--seed", type=int, help="Seed for generated values")

    generate_parser = subparsers.add_parser(
        "generate", help="Print generated values for a stored form", parents=[common]
    )
    _add_form_id(generate_parser)
    generate_parser.add_argument("--seed", type=int, help="Seed for generated values")

    list_parser = subparsers.add_parser(
        "list", help="List stored forms, most recently updated first", parents=[common]
    )
    list_parser.add_argument("--domain", help="Only forms on this registrable domain")

    for name, help_text in (
        ("show", "Print a stored form"),
        ("delete", "Delete a stored form"),
        ("submissions", "List submissions of a stored form"),
    ):
        _add_form_id(subparsers.add_parser(name, help=help_text, parents=[common]))

    subparsers.add_parser("clear", help="Delete every stored form", parents=[common])

    return parser


def _add_form_id(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument("--form-id", required=True, help="Stored form identifier")


def _load_values(args: argparse.Namespace, store: FormStore) -> Dict[str, Any]:
    if args.generate:
        form = store.get_form(args.form_id)
        return ValueGenerator(args.seed).generate_values(form.fields)
    if args.values_file:
        payload = read_json(Path(args.values_file))
    else:
        payload = json.loads(args.values)
    if not isinstance(payload, dict):
        raise ValueError("Field values must be a JSON object")
    return payload


def _run_command(
    args: argparse.Namespace, store: FormStore, logger: logging.Logger
) -> Dict[str, Any]:
    if args.command == "discover":
        if args.html:
            form = analyze_html_and_store(
                read_text(Path(args.html)), args.url, store, logger=logger
            )
        else:
            config = BrowserConfig(headless=not args.headed)
            form = analyze_and_store(args.url, store, config=config, logger=logger)
        return form.to_dict()
    if args.command == "fill":
        values = _load_values(args, store)
        options = FillOptions(speed=args.speed, visible=not args.headless)
        outcome = submit_stored_form(
            args.form_id, values, store, options=options, logger=logger
        )
        return outcome.to_dict()
    if args.command == "generate":
        form = store.get_form(args.form_id)
        return ValueGenerator(args.seed).generate_values(form.fields)
    if args.command == "list":
        return {"forms": [form.to_dict() for form in store.list_forms(args.domain)]}
    if args.command == "show":
        return store.get_form(args.form_id).to_dict()
    if args.command == "delete":
        store.delete_form(args.form_id)
        return {"message": "Form deleted successfully", "_id": args.form_id}
    if args.command == "clear":
        removed = store.clear_forms()
        return {"message": "All forms cleared successfully", "removed": removed}
    if args.command == "submissions":
        records = store.list_submissions(args.form_id)
        return {"submissions": [record.to_dict() for record in records]}
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    data_dir = resolve_data_dir(args.data_dir)
    run_id = args.run_id or generate_run_id()
    run_paths = prepare_run_directories(data_dir, run_id, args.command)
    logger = build_logger(run_paths, verbose=args.verbose)
    store = FormStore(data_dir, logger=logger)

    exit_code = EXIT_OK
    try:
        result = _run_command(args, store, logger)
    except (FormReplayError, PlaywrightError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        result = {"error": str(exc), "type": type(exc).__name__}
        exit_code = EXIT_FAILURE
    except (ValueError, OSError) as exc:
        logger.error("Invalid input for %s: %s", args.command, exc)
        result = {"error": str(exc), "type": type(exc).__name__}
        exit_code = EXIT_USAGE
    finally:
        close_logger(logger)

    write_json(run_paths.summary_path, result)
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
