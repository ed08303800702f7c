"""
Order Batch Runner
Creates orders for every due occasion. Run from cron or by hand:

    python run_order_batch.py
    python run_order_batch.py --date 2025-05-01
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from app import models  # noqa: E402,F401
from app.database import Base, SessionLocal, engine  # noqa: E402
from app.services.order_automation import create_due_orders  # noqa: E402

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)


def parse_date(value: str):
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Expected YYYY-MM-DD, got {value!r}") from e


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create orders for due occasions")
    parser.add_argument("--date", type=parse_date, help="Batch date (YYYY-MM-DD), defaults to today UTC")
    args = parser.parse_args(argv)

    Base.metadata.create_all(bind=engine, checkfirst=True)

    db = SessionLocal()
    try:
        summary = create_due_orders(db, args.date)
    finally:
        db.close()

    print(json.dumps(summary, indent=2))
    # Non-zero exit lets the scheduler flag partial failures
    return 1 if summary["failed"] else 0


if __name__ == "__main__":
    logger.info("🚀 Starting order batch...")
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("👋 Order batch stopped by user")
    except Exception as e:
        logger.error(f"❌ Order batch crashed: {e}")
        sys.exit(1)
