"""Entry point for the EryAI monitor."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from eryai_monitor.catalog import ServiceCatalog
from eryai_monitor.checks.models import HealthReport, OverallStatus
from eryai_monitor.checks.orchestrator import Orchestrator
from eryai_monitor.config import settings
from eryai_monitor.notifications import AlertNotifier
from eryai_monitor.suites import Suite, build_checks, build_services

console = Console()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)

EXIT_CODES = {
    OverallStatus.OK: 0,
    OverallStatus.DEGRADED: 1,
    OverallStatus.CRITICAL: 2,
}

_STYLE = {"passed": "green", "failed": "red", "skipped": "yellow"}


def run_server() -> None:
    """Start the FastAPI server."""
    console.print(Panel("Starting EryAI Monitor", style="bold green"))
    uvicorn.run(
        "eryai_monitor.api.server:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
    )


async def run_suite(suite: Suite, notify: bool) -> HealthReport:
    catalog = ServiceCatalog()
    services = build_services()
    orchestrator = Orchestrator(
        critical_services=catalog.critical_services,
        notifier=AlertNotifier(sender=services.email),
        store=services.store if services.store.is_configured else None,
    )
    checks = build_checks(suite, services, catalog)
    return await orchestrator.run_all(suite.mode, checks, notify=notify and suite.notifies)


def print_report(report: HealthReport, title: str) -> None:
    table = Table(title=title)
    table.add_column("Category")
    table.add_column("Check")
    table.add_column("Status")
    table.add_column("Time", justify="right")
    table.add_column("Error", overflow="fold")
    for o in report.outcomes:
        style = _STYLE[o.status.value]
        table.add_row(
            o.category, o.name, f"[{style}]{o.status.value}[/{style}]",
            f"{o.duration_ms}ms", o.error or "",
        )
    console.print(table)
    console.print(
        f"\n[bold]{report.overall_status.value.upper()}[/bold] — "
        f"{report.passed} passed, {report.failed} failed, {report.skipped} skipped "
        f"[dim]({report.duration_ms}ms)[/dim]"
    )
    if report.cleanup is not None and report.cleanup.error:
        console.print(f"[yellow]Cleanup skipped:[/yellow] {report.cleanup.error}")


def main() -> None:
    parser = argparse.ArgumentParser(description="EryAI Monitor")
    sub = parser.add_subparsers(dest="command")

    # Server mode
    sub.add_parser("serve", help="Start the API server")

    # One-shot run
    run_parser = sub.add_parser("run", help="Run a check suite once")
    run_parser.add_argument("suite", choices=[s.value for s in Suite], help="Suite to run")
    run_parser.add_argument("--json", action="store_true", help="Print the JSON report")
    run_parser.add_argument("--no-notify", action="store_true", help="Never send alert email")

    args = parser.parse_args()

    if args.command == "serve":
        run_server()
    elif args.command == "run":
        suite = Suite(args.suite)
        report = asyncio.run(run_suite(suite, notify=not args.no_notify))
        if args.json:
            print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
        else:
            print_report(report, f"EryAI {suite.value} suite")
        sys.exit(EXIT_CODES[report.overall_status])
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
