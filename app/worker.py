"""
ARQ worker: background task definitions.
Run with: python -m app.worker
"""
import logging

from arq import cron
from arq.connections import RedisSettings

from app.core.config import settings
from app.tasks.maintenance_alerts import refresh_maintenance_alerts

logger = logging.getLogger(__name__)


# ── Worker settings ───────────────────────────────────────────────────────────


class WorkerSettings:
    redis_settings = RedisSettings.from_dsn(settings.REDIS_URL)
    functions = [refresh_maintenance_alerts]
    cron_jobs = [
        cron(refresh_maintenance_alerts, minute=settings.ALERT_REFRESH_MINUTE),  # Hourly
    ]
    on_startup = None
    on_shutdown = None


if __name__ == "__main__":
    from arq import run_worker

    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    run_worker(WorkerSettings)
