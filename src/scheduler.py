"""Background maintenance jobs.

APScheduler ``AsyncIOScheduler`` running inside the web process:

- reservation sweep on ``reservation_sweep_cron`` (every 15 minutes by default)
- chat room cleanup every night at 03:00

Each job pushes the owning domain's context before processing its commands.
"""

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from protean.utils.globals import current_domain

from shared.settings import get_settings
from storefront.domain import storefront
from storefront.order.expiry import ExpireReservedOrders
from support.domain import support
from support.room.cleanup import CloseInactiveRooms, MergeDuplicateRooms

logger = structlog.get_logger(__name__)


def sweep_reservations(as_of=None) -> int:
    with storefront.domain_context():
        expired = current_domain.process(ExpireReservedOrders(as_of=as_of), asynchronous=False)
    logger.info("Reservation sweep job finished", expired=expired)
    return expired


def clean_chat_rooms() -> dict:
    settings = get_settings()
    with support.domain_context():
        merged = current_domain.process(MergeDuplicateRooms(), asynchronous=False)
        closed = current_domain.process(
            CloseInactiveRooms(older_than_days=settings.chat_room_retention_days),
            asynchronous=False,
        )
    logger.info("Chat room cleanup job finished", merged=merged, closed=closed)
    return {"merged": merged, "closed": closed}


class MaintenanceScheduler:
    def __init__(self, enabled: bool | None = None):
        settings = get_settings()
        self.enabled = settings.scheduler_enabled if enabled is None else enabled
        self.sweep_cron = settings.reservation_sweep_cron
        self._scheduler: AsyncIOScheduler | None = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self):
        if not self.enabled:
            logger.info("Scheduler disabled, skipping start")
            return
        if self.running:
            logger.warning("Scheduler already running")
            return

        scheduler = AsyncIOScheduler()
        scheduler.add_job(
            _guarded(sweep_reservations),
            CronTrigger.from_crontab(self.sweep_cron),
            id="sweep_reservations",
            name="Cancel expired order reservations",
            replace_existing=True,
            max_instances=1,
        )
        scheduler.add_job(
            _guarded(clean_chat_rooms),
            CronTrigger(hour=3, minute=0),
            id="clean_chat_rooms",
            name="Merge duplicate and close inactive chat rooms",
            replace_existing=True,
            max_instances=1,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info("Scheduler started", reservation_sweep=self.sweep_cron, chat_cleanup="0 3 * * *")

    def jobs(self) -> list:
        return self._scheduler.get_jobs() if self._scheduler else []

    def stop(self):
        if self.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")
        self._scheduler = None


def _guarded(job):
    def run():
        try:
            return job()
        except Exception:
            logger.exception("Scheduled job failed", job=job.__name__)
            return None

    run.__name__ = job.__name__
    return run
