"""
Ledger status command

Restores the local profile and reports who is logged in and how much of
today's quota is left.

Usage:
    cnc-ledger
    cnc-ledger --backend memory --quiet
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from config.config import STORE_BACKEND
from config.logging import setup_logging
from src.ledger.context import LedgerContext
from src.storage.factory import create_store
from src.storage.redis_store import RedisStore


def build_status(ledger: LedgerContext) -> dict:
    """Snapshot of session, quota and history for the restored profile"""
    user = ledger.current_user
    return {
        "identity": None if user is None else {
            "id": user.id,
            "email": user.email,
            "is_vip": user.is_vip,
            "is_verified": user.is_verified,
        },
        "usage": ledger.usage.usage_stats(),
        "history_entries": len(ledger.history_list()),
        "stats": None if user is None or user.stats is None else user.stats.model_dump(),
    }


def main(argv: Optional[List[str]] = None, logs_dir: Optional[Path] = None) -> int:
    """Entry point of the cnc-ledger command"""
    parser = argparse.ArgumentParser(description="Show the ledger status of the local profile")
    parser.add_argument("--backend", default=STORE_BACKEND, choices=["file", "redis", "memory"])
    parser.add_argument("--path", type=Path, default=None, help="Profile file for the file backend")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors to the console")
    args = parser.parse_args(argv)

    setup_logging(logs_dir, console_level="WARNING" if args.quiet else None)

    store = create_store(args.backend, path=args.path)
    try:
        ledger = LedgerContext(store)
        ledger.restore()
        status = build_status(ledger)
    finally:
        if isinstance(store, RedisStore):
            store.close()

    logger.info(f"Ledger status: {status['usage']['count']}/{status['usage']['limit']} analyses used today")
    print(json.dumps(status, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
