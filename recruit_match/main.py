"""Command-line entry point for Recruit Match."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import functools
import signal
import sys
import threading
import time
from pathlib import Path
from typing import List, Optional, Tuple

from recruit_match.config.environment import EnvironmentConfig
from recruit_match.config.exceptions import ConfigurationError
from recruit_match.config.loader import load_config
from recruit_match.config.models import AppConfig
from recruit_match.domain.models import MatchFilter
from recruit_match.logging import get_logger
from recruit_match.logging.config import configure_logging
from recruit_match.matching.exceptions import InvalidStatusError
from recruit_match.matching.models import Direction
from recruit_match.persistence.database import Database
from recruit_match.persistence.exceptions import (
    PersistenceError,
    RecordImportError,
    RecordNotFoundError,
)
from recruit_match.persistence.seed import import_records
from recruit_match.reporting import ReportRenderer
from recruit_match.scheduler import ReconcileScheduler
from recruit_match.services.matching import MatchingService, parse_status

logger = get_logger(__name__, component="cli")

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and settle the effective log level.

    Log level priority: CLI > LOG_LEVEL environment variable > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override.upper()
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level or "INFO"

    return app_config, env_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="recruit-match",
        description="Recruit Match - score teaching candidates against jobs and schools",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml, then config/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=LOG_LEVELS,
        help="Log level (overrides config and environment)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    reconcile = commands.add_parser("reconcile", help="Recompute matches for everyone")
    reconcile.add_argument(
        "--direction",
        choices=[d.value for d in Direction],
        default=None,
        help="Population that drives the run (default: from config)",
    )
    reconcile.add_argument(
        "--threshold",
        type=int,
        default=None,
        help="Persistence threshold override (0-101)",
    )
    reconcile.add_argument(
        "--daemon",
        action="store_true",
        help="Keep running and reconcile every reconcile_interval",
    )

    find = commands.add_parser("find", help="Rank matches on demand without storing them")
    target = find.add_mutually_exclusive_group(required=True)
    target.add_argument("--candidate", type=int, help="Candidate id")
    target.add_argument("--opportunity", type=int, help="Opportunity id")
    find.add_argument(
        "--include-inactive",
        action="store_true",
        help="Also score inactive opportunities (candidate search only)",
    )

    matches = commands.add_parser("matches", help="List stored matches")
    matches.add_argument("--candidate", type=int, default=None, help="Filter by candidate id")
    matches.add_argument("--opportunity", type=int, default=None, help="Filter by opportunity id")
    matches.add_argument("--status", default=None, help="Filter by status")

    set_status = commands.add_parser("set-status", help="Update a match's review status")
    set_status.add_argument("match_id", type=int)
    set_status.add_argument("status", help="pending, contacted, interviewed, placed or rejected")
    set_status.add_argument("--notes", default=None, help="Reviewer notes")

    import_cmd = commands.add_parser("import", help="Load candidates and opportunities from YAML")
    import_cmd.add_argument("file", type=Path)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, 1 for errors or a reconciliation with failures)
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)
    database: Optional[Database] = None

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)
        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )

        logger.info(
            "Recruit Match starting",
            extra={
                "event": "service.starting",
                "command": args.command,
                "log_level": env_config.log_level,
            },
        )

        database = Database(env_config.database_url).init()
        service = MatchingService.from_config(app_config, database)
        renderer = ReportRenderer()

        if args.command == "reconcile":
            if args.daemon:
                return _run_daemon(service, app_config, args, start_time)
            return _run_reconcile(service, renderer, args)
        if args.command == "find":
            return _run_find(service, renderer, args)
        if args.command == "matches":
            return _run_matches(service, renderer, args)
        if args.command == "set-status":
            return _run_set_status(service, args)
        if args.command == "import":
            return _run_import(database, args)

        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e}",
            extra={"event": "config.error", "error_type": "ConfigurationError"},
        )
        return 1
    except InvalidStatusError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except RecordImportError as e:
        print(f"Import Error: {e}", file=sys.stderr)
        for error in e.errors:
            print(f"  - {error}", file=sys.stderr)
        return 1
    except RecordNotFoundError as e:
        print(f"Not found: {e}", file=sys.stderr)
        return 1
    except PersistenceError as e:
        print(f"Database Error: {e}", file=sys.stderr)
        logger.error(
            f"Database error: {e}",
            extra={"event": "database.error", "error_type": type(e).__name__},
            exc_info=True,
        )
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0
    finally:
        if database is not None:
            database.close()


def _run_reconcile(service: MatchingService, renderer: ReportRenderer, args) -> int:
    summary = service.run_batch_reconciliation(
        direction=Direction(args.direction) if args.direction else None,
        persistence_threshold=args.threshold,
    )
    print(renderer.render_summary(summary), end="")
    return 1 if summary.had_errors else 0


def _run_daemon(service: MatchingService, app_config: AppConfig, args, start_time: float) -> int:
    shutdown_event = threading.Event()
    reconcile = functools.partial(
        service.run_batch_reconciliation,
        direction=Direction(args.direction) if args.direction else None,
        persistence_threshold=args.threshold,
    )

    def reconcile_and_log_next_run():
        summary = reconcile()
        next_run = scheduler.get_next_run_time()
        logger.info(
            "Next reconciliation scheduled",
            extra={
                "event": "service.next_run_scheduled",
                "next_run_time": next_run.isoformat() if next_run else None,
                "had_errors": summary.had_errors,
            },
        )
        return summary

    scheduler = ReconcileScheduler(
        reconcile_callable=reconcile_and_log_next_run,
        interval_seconds=app_config.reconcile_interval_seconds,
        shutdown_event=shutdown_event,
    )

    def signal_handler(signum, frame):
        logger.info(
            f"Received signal {signum}, shutting down",
            extra={"event": "service.signal_received", "signal": signum},
        )
        service.reconciler.cancel()
        scheduler.shutdown(wait=False)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    scheduler.start()
    logger.info(
        "Scheduler started. Press Ctrl+C to stop",
        extra={"event": "service.daemon_mode.started"},
    )

    try:
        shutdown_event.wait()
    except KeyboardInterrupt:
        scheduler.shutdown(wait=False)

    logger.info(
        "Recruit Match stopped",
        extra={
            "event": "service.stopping",
            "uptime_seconds": round(time.time() - start_time, 2),
        },
    )
    return 0


def _run_find(service: MatchingService, renderer: ReportRenderer, args) -> int:
    if args.candidate is not None:
        candidate = service.candidate_reader.get_candidate(args.candidate)
        if candidate is None:
            raise RecordNotFoundError(f"Candidate {args.candidate} not found")
        results = service.find_matches_for_candidate(
            args.candidate, include_inactive=args.include_inactive
        )
        print(renderer.render_candidate_results(candidate, results), end="")
    else:
        opportunity = service.opportunity_reader.get_opportunity(args.opportunity)
        if opportunity is None:
            raise RecordNotFoundError(f"Opportunity {args.opportunity} not found")
        results = service.find_matches_for_opportunity(args.opportunity)
        print(renderer.render_opportunity_results(opportunity, results), end="")
    return 0


def _run_matches(service: MatchingService, renderer: ReportRenderer, args) -> int:
    match_filter = MatchFilter(
        candidate_id=args.candidate,
        opportunity_id=args.opportunity,
        status=parse_status(args.status) if args.status else None,
    )
    matches = service.list_persisted_matches(match_filter)
    print(renderer.render_matches(matches, match_filter), end="")
    return 0


def _run_set_status(service: MatchingService, args) -> int:
    if not service.set_match_status(args.match_id, args.status, args.notes):
        print(f"Match {args.match_id} not found", file=sys.stderr)
        return 1
    print(f"Match {args.match_id} set to {parse_status(args.status).value}")
    return 0


def _run_import(database: Database, args) -> int:
    result = import_records(args.file, database)
    print(
        f"Imported {result.candidates_saved} candidates and "
        f"{result.opportunities_saved} opportunities"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
