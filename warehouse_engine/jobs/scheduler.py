"""
APScheduler configuration.

Optional in-process jobs, started by the application lifespan when
SCHEDULER_ENABLED is set:
- Daily cycle count generation
- Hourly stuck-order report
"""

import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.executors.asyncio import AsyncIOExecutor

from warehouse_engine.config import settings

logger = logging.getLogger(__name__)

# Job stores
jobstores = {
    'default': MemoryJobStore()
}

# Executors
executors = {
    'default': AsyncIOExecutor(),
}

# Job defaults
job_defaults = {
    'coalesce': True,  # Combine multiple pending executions into one
    'max_instances': 1,  # Only one instance of each job at a time
    'misfire_grace_time': 60,
}

scheduler = AsyncIOScheduler(
    jobstores=jobstores,
    executors=executors,
    job_defaults=job_defaults,
    timezone=settings.SCHEDULER_TIMEZONE
)


def start_scheduler():
    """Register the warehouse jobs and start the scheduler."""
    if not scheduler.running:
        from warehouse_engine.jobs.inventory_jobs import (
            generate_daily_cycle_counts, report_stuck_orders,
        )

        scheduler.add_job(
            generate_daily_cycle_counts,
            'cron',
            hour=settings.CYCLE_COUNT_JOB_HOUR,
            minute=0,
            id='generate_daily_cycle_counts',
            name='Generate Daily Cycle Counts',
            replace_existing=True,
        )

        scheduler.add_job(
            report_stuck_orders,
            'interval',
            hours=1,
            id='report_stuck_orders',
            name='Report Stuck Orders',
            replace_existing=True,
        )

        scheduler.start()
        logger.info("Background job scheduler started")

        for job in scheduler.get_jobs():
            logger.info(f"Scheduled job: {job.name} - Next run: {job.next_run_time}")


def shutdown_scheduler():
    """Shutdown the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=True)
        logger.info("Background job scheduler stopped")


def get_job_status():
    """Get status of all scheduled jobs."""
    jobs = scheduler.get_jobs()
    return [
        {
            'id': job.id,
            'name': job.name,
            'next_run_time': str(job.next_run_time) if job.next_run_time else None,
            'trigger': str(job.trigger),
        }
        for job in jobs
    ]
