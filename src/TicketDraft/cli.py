from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Dict

from rich.console import Console
from rich.prompt import Confirm
from rich.text import Text

from .config import load_settings
from .errors import TicketDraftError
from .jira_client import JiraClient
from .prompts import SOURCE_TYPES
from .renderer_adf import text_to_adf
from .renderer_terminal import print_markdown
from .utils import configure_logging, read_source, truncate
from .workflow import TicketRequest, create_ticket

console = Console()


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--verbose", action="store_true", help="Enable debug logging")

    parser = argparse.ArgumentParser(
        prog="ticketdraft",
        description="Draft Jira work items from Figma designs, error logs or free text.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    create = commands.add_parser("create", parents=[common], help="Draft and create a Jira issue")
    create.add_argument("source", help="Figma URL, error log or request text ('-' reads stdin)")
    create.add_argument("--source-type", choices=SOURCE_TYPES, default="figma", help="Kind of input given")
    create.add_argument("-e", "--epic", help="Epic key to link the issue to (e.g. PROJ-100)")
    create.add_argument("-c", "--custom", help="Additional instructions for the agent")
    create.add_argument("-s", "--style", choices=("technical", "pm"), default="technical", help="Prompt style")
    create.add_argument("-t", "--issue-type", default="Story", help="Jira issue type of the created issue")
    create.add_argument("--skip-decomposition", action="store_true", help="Only create the issue, no subtasks")
    create.add_argument("--confirm", action="store_true", help="Confirm each subtask before creating it")

    preview = commands.add_parser("preview", parents=[common], help="Render markdown text in the terminal")
    preview.add_argument("input", nargs="?", help="Path to a text file (default: stdin)")

    convert = commands.add_parser("convert", parents=[common], help="Print the ADF document for markdown text")
    convert.add_argument("input", nargs="?", help="Path to a text file (default: stdin)")
    convert.add_argument("--indent", type=int, default=2, help="JSON indentation")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose)
    try:
        if args.command == "create":
            _run_create(args)
        elif args.command == "preview":
            print_markdown(read_source(args.input), console=console)
        elif args.command == "convert":
            document = text_to_adf(read_source(args.input))
            sys.stdout.write(json.dumps(document, indent=args.indent, ensure_ascii=False) + "\n")
    except (TicketDraftError, FileNotFoundError) as exc:
        logging.error("%s", exc)
        raise SystemExit(1) from exc


def _run_create(args: argparse.Namespace) -> None:
    logging.info("Loading configuration...")
    settings = load_settings()
    client = JiraClient.from_settings(settings)
    source = read_source(args.source) if args.source == "-" else args.source
    request = TicketRequest(
        source=source,
        source_type=args.source_type,
        style=args.style,
        issue_type=args.issue_type,
        epic_key=args.epic,
        extra_instructions=args.custom,
        skip_decomposition=args.skip_decomposition,
    )
    result = create_ticket(
        request,
        settings,
        client,
        confirm=_confirm_subtask if args.confirm else None,
    )

    logging.info("Summary:")
    logging.info("  Issue: %s", result.story.url)
    if args.epic:
        logging.info("  Epic: %s%s", args.epic, "" if result.epic_linked else " (not linked)")
    if not args.skip_decomposition:
        logging.info("  Created: %d subtasks", len(result.subtasks))
        if result.skipped:
            logging.info("  Skipped: %d subtasks", len(result.skipped))
        if result.failed:
            logging.warning("  Failed: %d subtasks", len(result.failed))
    logging.info("Done.")


def _confirm_subtask(index: int, total: int, subtask: Dict[str, Any]) -> bool:
    console.print(Text(f"\n[{index}/{total}] {subtask.get('summary', '')}", style="bold"))
    description = str(subtask.get("description") or "")
    if description:
        print_markdown(truncate(description), console=console)
    return Confirm.ask("Create this subtask?", default=True, console=console)


if __name__ == "__main__":
    main()
