"""
Background task scheduler for monthly record generation and late penalties.
Uses APScheduler to run tasks in the background without requiring external services.
"""
import logging
import atexit
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from django.core.management import call_command
from django.utils import timezone

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = None


def generate_monthly_records_job():
    """
    Open this month's billing record for every active tenant.
    Runs on the 1st of each month at 00:00.
    """
    from common.models import SiteSettings
    try:
        if not SiteSettings.load().auto_generate_records:
            logger.info("Automatic record generation is disabled in site settings")
            return
        logger.info("Starting scheduled monthly record generation...")
        call_command('generate_monthly_records')
        logger.info("Scheduled monthly record generation completed successfully")
    except Exception as e:
        logger.error(f"Error in scheduled monthly record generation: {str(e)}", exc_info=True)


def calculate_penalties_job():
    """
    Apply late-payment penalties. Runs daily at 01:00; the command itself
    does nothing before the rent due day.
    """
    try:
        logger.info("Starting scheduled penalty calculation...")
        call_command('calculate_penalties')
        logger.info("Scheduled penalty calculation completed successfully")
    except Exception as e:
        logger.error(f"Error in scheduled penalty calculation: {str(e)}", exc_info=True)


def is_running():
    return scheduler is not None and scheduler.running


def start_scheduler():
    """
    Initialize and start the background scheduler.
    This should be called once when Django starts.
    """
    global scheduler

    if is_running():
        logger.warning("Scheduler is already running")
        return

    tz = timezone.get_current_timezone()
    scheduler = BackgroundScheduler(timezone=tz)

    scheduler.add_job(
        generate_monthly_records_job,
        trigger=CronTrigger(day=1, hour=0, minute=0, timezone=tz),
        id='generate_monthly_records',
        name='Generate Monthly Records',
        replace_existing=True,
        max_instances=1,
        coalesce=True
    )
    scheduler.add_job(
        calculate_penalties_job,
        trigger=CronTrigger(hour=1, minute=0, timezone=tz),
        id='calculate_penalties',
        name='Calculate Late Penalties',
        replace_existing=True,
        max_instances=1,
        coalesce=True
    )

    scheduler.start()
    logger.info(f"Background scheduler started ({tz})")

    atexit.register(stop_scheduler)


def stop_scheduler():
    """
    Stop the background scheduler.
    """
    global scheduler

    if is_running():
        try:
            scheduler.shutdown(wait=True)
            logger.info("Background scheduler stopped")
        finally:
            scheduler = None
