# app/notifications/scheduler.py
# Background jobs: queue consumer every QUEUE_POLL_SECONDS, reminder once a day.
import logging

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import Settings
from app.notifications.dispatcher import NotificationDispatcher, consume_ticket_events
from app.notifications.queue import TicketEventQueue

logger = logging.getLogger(__name__)

CONSUMER_JOB_ID = "ticket_event_consumer"
REMINDER_JOB_ID = "daily_ticket_reminder"


def _job_listener(event):
    if event.exception:
        logger.error("Job %s failed: %s", event.job_id, event.exception)
    else:
        logger.debug("Job %s finished", event.job_id)


def build_scheduler(
    settings: Settings,
    queue: TicketEventQueue,
    dispatcher: NotificationDispatcher,
) -> BackgroundScheduler:
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        consume_ticket_events,
        trigger=IntervalTrigger(seconds=settings.QUEUE_POLL_SECONDS),
        kwargs={"queue": queue, "dispatcher": dispatcher, "batch_size": settings.QUEUE_BATCH_SIZE},
        id=CONSUMER_JOB_ID,
        name="Deliver ticket creation events",
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    scheduler.add_job(
        dispatcher.daily_ticket_reminder,
        trigger=CronTrigger(hour=settings.REMINDER_HOUR, minute=settings.REMINDER_MINUTE),
        id=REMINDER_JOB_ID,
        name="Daily unopened ticket reminder",
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    scheduler.add_listener(_job_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)
    return scheduler


def start_scheduler(scheduler: BackgroundScheduler) -> None:
    scheduler.start()
    for job in scheduler.get_jobs():
        logger.info("Scheduled %s, next run at %s", job.id, job.next_run_time)


def shutdown_scheduler(scheduler: BackgroundScheduler) -> None:
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
