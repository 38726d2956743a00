from celery import Celery
from celery.schedules import crontab
from portfolio_tracker.core.config import settings


def make_celery() -> Celery:
    celery = Celery(
        "portfolio_tracker",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
        include=[
            "portfolio_tracker.tasks.import_symbols",
            "portfolio_tracker.tasks.start",
        ],
    )

    celery.conf.update(
        timezone=settings.CELERY_TIMEZONE,
        enable_utc=settings.CELERY_ENABLE_UTC,
        broker_connection_retry_on_startup=True,
        worker_concurrency=settings.CELERY_WORKER_CONCURRENCY,
    )

    if settings.CELERY_BEAT_ENABLED and settings.SYMBOLS_IMPORT_PATH:
        celery.conf.beat_schedule = {
            'import-symbols-daily': {
                'task': 'portfolio_tracker.tasks.import_symbols.import_symbols_task',
                'schedule': crontab(minute='30', hour='1'),
            },
        }
        celery.conf.beat_max_loop_interval = 10

    return celery


celery = make_celery()
