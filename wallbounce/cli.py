"""
Main CLI entry point for Wall-Bounce.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from .config import Config, create_sample_config, get_config_path, load_config
from .errors import AllModelsFailedError, ConfigError, WallBounceError
from .log import setup_logging
from .orchestration import CollaborationService, TaskType, get_strategy
from .ui import console, ui


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Wall-Bounce - sequential multi-model collaboration")
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Path to the configuration file",
    )
    parser.add_argument(
        "--init",
        action="store_true",
        help="Create a sample configuration file",
    )
    parser.add_argument(
        "--models",
        action="store_true",
        help="List the model catalog",
    )
    parser.add_argument(
        "--model",
        "-m",
        action="append",
        dest="selected_models",
        help="Model to bounce through, in order (repeatable)",
    )
    parser.add_argument(
        "--task",
        "-t",
        choices=[t.value for t in TaskType],
        help="Task type",
    )
    parser.add_argument(
        "--session",
        "-s",
        type=str,
        help="Session id",
    )
    parser.add_argument(
        "--digest",
        action="store_true",
        help="Synthesize a digest of every step instead of the last answer",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument(
        "query",
        nargs="?",
        help="Query to run through the models",
    )
    return parser


async def run_query(config: Config, args: argparse.Namespace) -> int:
    service = CollaborationService.from_config(config)
    if args.digest:
        service.strategy = get_strategy("digest")

    raw_request: dict = {
        "query": args.query,
        "taskType": args.task or config.default_task_type,
    }
    if args.selected_models:
        raw_request["models"] = args.selected_models
    if args.session:
        raw_request["sessionId"] = args.session

    if not args.json:
        ui.print_banner(args.selected_models or config.default_models)

    try:
        result = await service.process_collaborative_query(raw_request)
    except AllModelsFailedError as e:
        if args.json:
            print(json.dumps(e.result.to_dict(), ensure_ascii=False, indent=2))
        else:
            ui.print_result(e.result)
            ui.print_error(str(e))
        return 1
    except WallBounceError as e:
        ui.print_error(str(e))
        return 1
    finally:
        await service.aclose()

    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    else:
        ui.print_result(result)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config_path = Path(args.config).expanduser() if args.config else None

    if args.init:
        path = create_sample_config(config_path)
        console.print(f"[green]Created sample configuration at {path}[/green]")
        console.print("[dim]Edit it and add your API keys.[/dim]")
        return 0

    try:
        config = load_config(config_path)
    except ConfigError as e:
        ui.print_error(str(e))
        return 1

    setup_logging(args.log_level or config.log_level)

    if args.models:
        ui.print_catalog(config)
        return 0

    if not args.query:
        console.print("[red]No query given.[/red] [dim]Run with --help for usage.[/dim]")
        return 2

    if not config.get_bound_models():
        console.print(f"[red]No model has credentials configured in {config_path or get_config_path()}.[/red]")
        console.print("[dim]Run with --init to create a sample configuration.[/dim]")
        return 1

    return asyncio.run(run_query(config, args))


if __name__ == "__main__":
    sys.exit(main())
