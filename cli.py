"""
Command-line interface for the SQL Server exporter: serve, one-shot collect,
collector listing and config validation.
"""
from __future__ import annotations

import argparse
import json
import sys


def _load_config(args: argparse.Namespace) -> None:
    import config
    from utils import setup_logging

    config.load_config_file(getattr(args, "config", None))
    log = config.logging_settings()
    level = "DEBUG" if getattr(args, "debug", False) else log["level"]
    setup_logging(level, log["log_file"])


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    import config
    from api import create_app

    _load_config(args)
    settings = config.exporter_settings()
    host = args.host or settings["host"]
    port = args.port or settings["port"]
    uvicorn.run(create_app(), host=host, port=port, log_config=None)
    return 0


def cmd_collect(args: argparse.Namespace) -> int:
    from api import build_orchestrator

    _load_config(args)
    orchestrator = build_orchestrator()
    try:
        report = orchestrator.collect()
    finally:
        orchestrator.executor.close()
    if args.json:
        print(json.dumps(report.to_dict(), indent=2 if args.pretty else None))
    else:
        sys.stdout.write(orchestrator.registry.exposition().decode("utf-8"))
    return 1 if report.results and not report.succeeded else 0


def cmd_list_collectors(args: argparse.Namespace) -> int:
    from rich.console import Console
    from rich.table import Table

    from collectors import COLLECTORS

    table = Table(title="Collectors")
    table.add_column("Collector", style="cyan")
    table.add_column("Metric", style="green")
    table.add_column("Labels", style="yellow")
    for spec in COLLECTORS:
        for i, descriptor in enumerate(spec.metrics.values()):
            table.add_row(spec.id if i == 0 else "", descriptor.name, ", ".join(descriptor.label_names))
    Console().print(table)
    return 0


def cmd_validate_config(args: argparse.Namespace) -> int:
    import config
    from orchestrator import BUSY_REJECT, BUSY_WAIT

    loaded = config.load_config_file(args.config)
    print("Config file loaded:", loaded)
    for key in ["mssql.server", "mssql.port", "mssql.user", "mssql.database", "exporter.port", "exporter.busy_policy"]:
        print(f"  {key}: {config.get(key)}")
    print("  mssql.password:", "***" if config.get("mssql.password") else "(empty)")
    if config.get("exporter.busy_policy") not in (BUSY_WAIT, BUSY_REJECT):
        print("exporter.busy_policy must be 'wait' or 'reject'", file=sys.stderr)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="mssql_exporter", description="SQL Server Prometheus exporter")
    parser.add_argument("--config", default=None, help="Path to YAML config file")
    parser.add_argument("--debug", action="store_true", help="Log fetched values")
    sub = parser.add_subparsers(dest="command", required=True)

    p_serve = sub.add_parser("serve", help="Run the HTTP exporter")
    p_serve.add_argument("--host", default=None, help="Bind address")
    p_serve.add_argument("--port", type=int, default=None, help="Port")
    p_serve.set_defaults(run=cmd_serve)

    p_collect = sub.add_parser("collect", help="Scrape once and print the exposition text or --json report")
    p_collect.add_argument("--json", action="store_true", help="Print the scrape report as JSON")
    p_collect.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    p_collect.set_defaults(run=cmd_collect)

    p_list = sub.add_parser("list-collectors", help="Show collectors and the metrics they publish")
    p_list.set_defaults(run=cmd_list_collectors)

    p_validate = sub.add_parser("validate-config", help="Validate and show config")
    p_validate.set_defaults(run=cmd_validate_config)

    args = parser.parse_args(argv)
    return args.run(args)


if __name__ == "__main__":
    sys.exit(main())
