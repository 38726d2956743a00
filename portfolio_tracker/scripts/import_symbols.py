#!/usr/bin/env python3
"""Load an exchange master spreadsheet into the symbols table.

Usage:
    python -m portfolio_tracker.scripts.import_symbols
    python -m portfolio_tracker.scripts.import_symbols data/nse_master.xlsx --snapshot public/symbols.json
    python -m portfolio_tracker.scripts.import_symbols data/bse.csv --dry-run --verbose
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from portfolio_tracker.core.config import settings
from portfolio_tracker.core.db import SessionLocal, init_db
from portfolio_tracker.core.logger import logger
from portfolio_tracker.repositories.factory import RepositoryFactory
from portfolio_tracker.services.symbol_importer import SymbolImportError, run_import
from portfolio_tracker.services.symbol_service import clear_symbol_cache


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Import exchange-listed symbols from a spreadsheet into the symbols table"
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=settings.SYMBOLS_IMPORT_PATH,
        help="Spreadsheet to import (.xlsx/.xls/.csv), first sheet is used",
    )
    parser.add_argument(
        "--snapshot",
        default=settings.SYMBOLS_SNAPSHOT_PATH or None,
        help="Also write a {symbol, name, exchange} JSON snapshot to this path",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=settings.IMPORT_BATCH_SIZE,
        help="Rows per upsert statement (default: %(default)s)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse and report without writing to the database",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    if args.verbose:
        logger.setLevel(logging.DEBUG)

    if args.batch_size <= 0:
        logger.error("--batch-size must be positive")
        return 2

    if args.dry_run:
        try:
            report = run_import(Path(args.path), None, snapshot_path=args.snapshot, dry_run=True)
        except SymbolImportError as e:
            logger.error(str(e))
            return 1
        logger.info(f"Import report: {report.as_dict()}")
        return 0

    if settings.DB_AUTO_CREATE:
        init_db()

    db = SessionLocal()
    try:
        repo = RepositoryFactory(db).get_symbol_repository()
        report = run_import(
            Path(args.path),
            repo,
            batch_size=args.batch_size,
            snapshot_path=args.snapshot,
        )
    except SymbolImportError as e:
        logger.error(f"Symbol import aborted: {e}")
        return 1
    finally:
        db.close()

    clear_symbol_cache()
    logger.info(f"Import report: {report.as_dict()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
