#!/usr/bin/env python3
"""Sample reconciliation harness for end-to-end validation.

Loads the sample records into a scratch SQLite database, runs one batch
reconciliation and prints the summary and the stored matches. Useful for
checking a weight table or threshold change by eye without running pytest.

Usage:
    # Default fixture, throwaway database
    python scripts/run_sample_reconcile.py

    # Your own records, the legacy school weights and a higher threshold
    python scripts/run_sample_reconcile.py --records my_records.yaml \
        --weights school_legacy --threshold 50

    # Drive the run from the opportunity side
    python scripts/run_sample_reconcile.py --direction opportunities
"""

import argparse
import sys
import tempfile
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from recruit_match.config.models import AppConfig
from recruit_match.logging.config import configure_logging
from recruit_match.matching.models import WEIGHT_PRESETS
from recruit_match.persistence.database import Database
from recruit_match.persistence.seed import import_records
from recruit_match.reporting import ReportRenderer
from recruit_match.services.matching import MatchingService

DEFAULT_RECORDS = Path(__file__).parent.parent / "tests" / "fixtures" / "sample_records.yaml"


def print_header(title: str):
    """Print a formatted section header."""
    width = 80
    print("\n" + "=" * width)
    print(f" {title}")
    print("=" * width + "\n")


def main() -> int:
    parser = argparse.ArgumentParser(description="Run a sample batch reconciliation")
    parser.add_argument("--records", type=Path, default=DEFAULT_RECORDS)
    parser.add_argument("--database", type=str, default=None, help="SQLAlchemy URL")
    parser.add_argument("--weights", choices=sorted(WEIGHT_PRESETS), default="canonical")
    parser.add_argument("--threshold", type=int, default=40)
    parser.add_argument("--direction", choices=["candidates", "opportunities"], default="candidates")
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()

    configure_logging(level=args.log_level, format_type="key-value", environment="sample")

    with tempfile.TemporaryDirectory() as scratch:
        database_url = args.database or f"sqlite:///{Path(scratch) / 'sample.db'}"
        database = Database(database_url).init()
        try:
            imported = import_records(args.records, database)
            print_header("Records")
            print(f"Candidates:    {imported.candidates_saved}")
            print(f"Opportunities: {imported.opportunities_saved}")

            app_config = AppConfig.model_validate(
                {
                    "matching": {
                        "weights": args.weights,
                        "persistence_threshold": args.threshold,
                        "default_direction": args.direction,
                    }
                }
            )
            service = MatchingService.from_config(app_config, database)
            renderer = ReportRenderer()

            summary = service.run_batch_reconciliation()
            print_header("Reconciliation Summary")
            print(renderer.render_summary(summary), end="")

            print_header("Stored Matches")
            print(renderer.render_matches(service.list_persisted_matches()), end="")

            return 1 if summary.had_errors else 0
        finally:
            database.close()


if __name__ == "__main__":
    sys.exit(main())
