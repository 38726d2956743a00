from pathlib import Path
from typing import Optional

from portfolio_tracker.core.celery_app import celery
from portfolio_tracker.core.config import settings
from portfolio_tracker.core.db import SessionLocal
from portfolio_tracker.core.logger import logger
from portfolio_tracker.repositories.factory import RepositoryFactory
from portfolio_tracker.services.symbol_importer import SymbolImportError, run_import
from portfolio_tracker.services.symbol_service import clear_symbol_cache


@celery.task(name="portfolio_tracker.tasks.import_symbols.import_symbols_task")
def import_symbols_task(path: Optional[str] = None):
    path = path or settings.SYMBOLS_IMPORT_PATH
    if not path:
        logger.info("SYMBOLS_IMPORT_PATH is not set, skipping symbols import.")
        return None

    logger.info(f"Starting scheduled symbols import from {path}.")

    db = SessionLocal()
    try:
        report = run_import(
            Path(path),
            RepositoryFactory(db).get_symbol_repository(),
            batch_size=settings.IMPORT_BATCH_SIZE,
            snapshot_path=settings.SYMBOLS_SNAPSHOT_PATH or None,
        )
    except SymbolImportError as e:
        logger.error(f"Symbols import failed: {e}", exc_info=True)
        raise
    finally:
        db.close()

    clear_symbol_cache()

    logger.info("Symbols import complete.")
    return report.as_dict()
