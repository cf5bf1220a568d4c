"""CLI entry point: python main.py serve | import trades.csv | init-db"""

import argparse
import logging
import sys

import uvicorn

from src.api_errors import TradeflowError
from src.consolidation import GroupingCriteria
from src.db.engine import init_db
from src.imports.manager import ImportLifecycleManager
from src.logging_config import LogFormat, LoggingConfig, LogLevel, configure_logging

logger = logging.getLogger(__name__)


def cmd_serve(args: argparse.Namespace) -> int:
    logger.info("Starting Tradeflow API on %s:%d", args.host, args.port)
    uvicorn.run(
        "src.api.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
    )
    return 0


def cmd_init_db(args: argparse.Namespace) -> int:
    init_db()
    print("Database schema created")
    return 0


def cmd_import(args: argparse.Namespace) -> int:
    init_db()
    manager = ImportLifecycleManager()

    with open(args.csv_file, "rb") as f:
        view = manager.import_csv(f, import_name=args.name)
    print(f"Imported {view.original_trade_count} trades as '{view.import_name}' (id={view.id})")

    if args.consolidate:
        view = manager.consolidate(view.id, args.consolidate)
        print(
            f"Consolidated by {view.consolidation_criteria}: "
            f"{view.original_trade_count} -> {view.current_trade_count} trades"
        )
        if args.generate:
            view = manager.generate_documents(view.id)
            print(f"Generated {len(view.documents)} documents")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Tradeflow - FX trade consolidation and confirmation service"
    )
    parser.add_argument(
        "--verbose", action="store_true",
        help="Log at DEBUG level"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    serve.set_defaults(func=cmd_serve)

    init = sub.add_parser("init-db", help="Create database tables")
    init.set_defaults(func=cmd_init_db)

    imp = sub.add_parser("import", help="Import a trades CSV file")
    imp.add_argument("csv_file", help="Path to the CSV file (header row first)")
    imp.add_argument("--name", default=None, help="Import name (default: UTC minute)")
    imp.add_argument(
        "--consolidate", default=None,
        choices=[c.value for c in GroupingCriteria],
        help="Consolidate right after importing"
    )
    imp.add_argument(
        "--generate", action="store_true",
        help="Generate documents after consolidating"
    )
    imp.set_defaults(func=cmd_import)

    args = parser.parse_args(argv)

    configure_logging(LoggingConfig(
        level=LogLevel.DEBUG if args.verbose else LogLevel.INFO,
        format=LogFormat.CONSOLE,
    ))

    try:
        return args.func(args)
    except TradeflowError as e:
        print(f"Error [{e.error_code.value}]: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
