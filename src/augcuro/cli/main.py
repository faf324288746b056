#!/usr/bin/env python3
"""
AUGCURO CLI
-----------
Command line surface for the Augeas set action:

    augcuro set PATH VALUE [--lens L --file F]   converge one node
    augcuro apply BATCH.yaml                     converge a list of nodes
    augcuro classify OUTPUT_FILE                 classify recorded augtool output

Author: AugCuro Team
Date: 2026-10-17
"""

import sys
import logging
import argparse
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    BarColumn,
    TaskProgressColumn
)

from augcuro.core.config import AugcuroConfig, load_config, load_requests
from augcuro.core.engine import ConvergenceEngine
from augcuro.core.models import ActionRequest, Outcome, OutcomeKind
from augcuro.cli.formatter import AugFormatter
from augcuro.rules.classifier import OutcomeClassifier

console = Console()
logger = logging.getLogger("augcuro.cli")

VERSION = "augcuro v1.0.0"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


class AugCuroCLI:
    """
    CLI wrapper that translates user commands into Engine actions.
    """

    def __init__(self):
        self.parser = argparse.ArgumentParser(
            prog="augcuro",
            description="AugCuro - idempotent Augeas set actions with a safety-net backup",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self.formatter = AugFormatter()
        self._setup_args()

    def _setup_args(self):
        """Configures the command-line flags and subcommands."""
        self.parser.add_argument("-v", "--version", action="version", version=VERSION)
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        set_parser = subparsers.add_parser("set", help="Converge one tree path to a value")
        set_parser.add_argument("path", help="Augeas tree path, e.g. /files/etc/hosts/1/ipaddr")
        set_parser.add_argument("value", help="Value to set")
        set_parser.add_argument("--lens", default="", help="Lens to load (use together with --file)")
        set_parser.add_argument("--file", default="", help="Only load this file (use together with --lens)")
        set_parser.add_argument("--config", help="YAML config file")
        set_parser.add_argument("--quote", action="store_true", help="Quote path/value inside the augtool script")
        set_parser.add_argument("--show-command", action="store_true", help="Print the generated augtool command")
        set_parser.add_argument("--json", action="store_true", help="Emit the outcome as JSON")

        apply_parser = subparsers.add_parser("apply", help="Converge every action in a YAML batch file")
        apply_parser.add_argument("batch", help="YAML file with an 'actions' list")
        apply_parser.add_argument("--config", help="YAML config file")
        apply_parser.add_argument("--json", action="store_true", help="Emit outcomes as JSON")

        classify_parser = subparsers.add_parser("classify", help="Classify recorded augtool output")
        classify_parser.add_argument("output", help="File holding captured augtool output")
        classify_parser.add_argument("--file-scoped", action="store_true",
                                     help="Output came from a --lens/--file run")

    def print_header(self, subtitle: str):
        console.print(Panel.fit(
            "[bold cyan]AugCuro v1.0.0[/bold cyan]",
            title=f"[bold white]{subtitle}[/bold white]",
            border_style="cyan"
        ))

    def _load_config(self, args: argparse.Namespace) -> AugcuroConfig:
        config = load_config(getattr(args, "config", None))
        if getattr(args, "quote", False):
            config.quote_arguments = True
        logging.basicConfig(level=getattr(logging, config.log_level.upper(), logging.INFO))
        return config

    def _exit_code(self, outcomes: List[Outcome]) -> int:
        return EXIT_FAILURE if any(o.kind is OutcomeKind.FAILURE for o in outcomes) else EXIT_OK

    def _run_set(self, args: argparse.Namespace) -> int:
        config = self._load_config(args)
        if bool(args.lens) != bool(args.file):
            logger.warning("--lens and --file are meant to be given together")

        request = ActionRequest(path=args.path, value=args.value, lens=args.lens, file=args.file)
        engine = ConvergenceEngine(config)

        if args.show_command:
            self.formatter.show_command(
                engine.pipeline.builder.build(request, config.resolve_path("augtool"))
            )

        outcome = engine.converge(request)

        if args.json:
            self.formatter.print_json(outcome.to_dict())
        else:
            if outcome.context and outcome.context.tool_available:
                self.formatter.show_diagnostic(outcome.context.raw_output)
            self.formatter.show_outcome(outcome)
        return self._exit_code([outcome])

    def _run_apply(self, args: argparse.Namespace) -> int:
        config = self._load_config(args)
        requests = load_requests(args.batch)
        if not requests:
            console.print("[bold yellow]⚠️  No actions found.[/bold yellow]")
            return EXIT_OK

        engine = ConvergenceEngine(config)

        if args.json:
            outcomes = engine.converge_all(requests)
            self.formatter.print_json({
                "outcomes": [o.to_dict() for o in outcomes],
                "summary": engine.generate_summary(outcomes),
            })
            return self._exit_code(outcomes)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(bar_width=40),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=console
        ) as progress:
            task_id = progress.add_task("Converging actions...", total=len(requests))
            outcomes = engine.converge_all(
                requests,
                progress_callback=lambda done, total: progress.update(task_id, completed=done)
            )

        self.formatter.print_final_table(outcomes)
        self.formatter.print_summary(engine.generate_summary(outcomes))
        return self._exit_code(outcomes)

    def _run_classify(self, args: argparse.Namespace) -> int:
        output_path = Path(args.output)
        if not output_path.is_file():
            console.print(f"[bold red]Error:[/bold red] Output file '{escape(args.output)}' not found.")
            return EXIT_USAGE

        raw = output_path.read_bytes()
        classifier = OutcomeClassifier()
        facts = classifier.classify(raw, args.file_scoped)
        self.formatter.show_classification(facts, classifier.matched_rules(raw, args.file_scoped))
        return EXIT_FAILURE if facts.error else EXIT_OK

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Primary routing entry point."""
        args = self.parser.parse_args(argv)
        try:
            if args.command == "set":
                if not args.json:
                    self.print_header("Augeas Set")
                return self._run_set(args)
            if args.command == "apply":
                if not args.json:
                    self.print_header("Batch Convergence")
                return self._run_apply(args)
            if args.command == "classify":
                return self._run_classify(args)
        except (RuntimeError, ValueError) as e:
            console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
            return EXIT_USAGE

        self.print_header("Augeas Convergence")
        self.parser.print_help()
        return EXIT_OK


def main():
    """Application entry point with interrupt handling."""
    try:
        sys.exit(AugCuroCLI().run())
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
