"""
Probes for the load balancer and uptime monitoring.

    health/        process is up
    health/ready/  database and cache answer
    health/deep/   latencies, row counts and scheduler state
"""
import time
import logging
from django.http import JsonResponse
from django.db import connection, DatabaseError
from django.core.cache import cache
from django.views.decorators.http import require_GET
from django.views.decorators.csrf import csrf_exempt

logger = logging.getLogger(__name__)

VERSION = '1.0.0'


def _check_database():
    start = time.time()
    with connection.cursor() as cursor:
        cursor.execute('SELECT 1')
        cursor.fetchone()
    return round((time.time() - start) * 1000, 2)


def _check_cache(key):
    start = time.time()
    cache.set(key, 'ok', 10)
    ok = cache.get(key) == 'ok'
    cache.delete(key)
    return ok, round((time.time() - start) * 1000, 2)


@csrf_exempt
@require_GET
def health_check(request):
    """Liveness: no dependencies are touched"""
    return JsonResponse({
        'status': 'healthy',
        'timestamp': time.time(),
    })


@csrf_exempt
@require_GET
def readiness_check(request):
    """503 until both the database and the cache respond"""
    checks = {'database': False, 'cache': False}
    errors = []

    try:
        _check_database()
        checks['database'] = True
    except DatabaseError as e:
        errors.append(f'Database: {e}')
        logger.error(f'Health check - Database error: {e}')

    ok, _ = _check_cache('health_check_test')
    checks['cache'] = ok
    if not ok:
        errors.append('Cache: Failed to read/write')

    all_healthy = all(checks.values())
    return JsonResponse({
        'status': 'ready' if all_healthy else 'not_ready',
        'timestamp': time.time(),
        'checks': checks,
        'errors': errors or None,
    }, status=200 if all_healthy else 503)


@csrf_exempt
@require_GET
def deep_health_check(request):
    """Counts rows in the main tables, so keep it off frequent probes"""
    from buildings.models import Building
    from tenants.models import Tenant
    from billing.models import MonthlyRecord
    from common import scheduler

    checks = {
        'database': {'status': False, 'latency_ms': None},
        'cache': {'status': False, 'latency_ms': None},
        'models': {'status': False, 'details': {}},
        'scheduler': {'running': scheduler.is_running()},
    }
    errors = []

    try:
        checks['database'] = {'status': True, 'latency_ms': _check_database()}
        checks['models'] = {'status': True, 'details': {
            'buildings': Building.objects.count(),
            'tenants': Tenant.objects.count(),
            'monthly_records': MonthlyRecord.objects.count(),
        }}
    except DatabaseError as e:
        errors.append(f'Database: {e}')
        logger.error(f'Deep health check - Database error: {e}')

    ok, latency = _check_cache('deep_health_check_test')
    checks['cache'] = {'status': ok, 'latency_ms': latency}
    if not ok:
        errors.append('Cache: Read/write failed')

    all_healthy = checks['database']['status'] and checks['cache']['status']
    return JsonResponse({
        'status': 'healthy' if all_healthy else 'unhealthy',
        'timestamp': time.time(),
        'checks': checks,
        'errors': errors or None,
        'version': VERSION,
    }, status=200 if all_healthy else 503)


def get_health_urls():
    from django.urls import path

    return [
        path('health/', health_check, name='health_check'),
        path('health/ready/', readiness_check, name='readiness_check'),
        path('health/deep/', deep_health_check, name='deep_health_check'),
    ]
