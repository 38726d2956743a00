from pathlib import Path

from celery.signals import worker_ready
from portfolio_tracker.core.config import settings
from portfolio_tracker.core.logger import logger
from portfolio_tracker.tasks.import_symbols import import_symbols_task


@worker_ready.connect
def at_worker_start(sender, **kwargs):
    """
    Automatically trigger when the Celery worker starts.
    """
    logger.info("Celery Worker is ready")

    if settings.SYMBOLS_IMPORT_PATH and Path(settings.SYMBOLS_IMPORT_PATH).exists():
        logger.info("Celery - triggering symbols import.")
        import_symbols_task.delay()
