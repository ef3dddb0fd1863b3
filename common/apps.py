from django.apps import AppConfig
import logging
import os
import sys

logger = logging.getLogger(__name__)


class CommonConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'common'

    def ready(self):
        """
        Initialize background scheduler when Django app is ready.
        Only start scheduler in the main process (not in migrations, tests, or worker processes).
        """
        from django.conf import settings

        if not getattr(settings, 'ENABLE_BACKGROUND_SCHEDULER', True):
            return

        # runserver's autoreloader imports the project twice
        if 'runserver' in sys.argv and os.environ.get('RUN_MAIN') != 'true':
            return

        # Skip management commands other than servers
        if len(sys.argv) > 1 and sys.argv[1] in [
            'migrate', 'makemigrations', 'test', 'collectstatic', 'shell',
            'generate_monthly_records', 'calculate_penalties',
        ]:
            return

        from .scheduler import start_scheduler
        start_scheduler()
        logger.info("Background task scheduler initialized")
