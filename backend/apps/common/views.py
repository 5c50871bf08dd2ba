import time
from datetime import timedelta

from django.conf import settings
from django.db import DatabaseError, connections
from django.http import JsonResponse
from django.utils import timezone
from django_redis import get_redis_connection
from redis.exceptions import RedisError

from .logger import get_logger

logger = get_logger(__name__).bind(component='common', layer='health')


def _db_check(alias='default'):
    started = time.monotonic()
    try:
        with connections[alias].cursor() as cursor:
            cursor.execute('SELECT 1')
    except DatabaseError as e:
        logger.warning('Row store health check failed', alias=alias, error=str(e))
        return {'status': 'fail', 'error': str(e), 'exception': e.__class__.__name__}
    latency = round((time.monotonic() - started) * 1000, 2)
    logger.debug('Row store health check succeeded', alias=alias, latency_ms=latency)
    return {'status': 'ok', 'latency_ms': latency}


def _cache_check(alias='default'):
    backend = settings.CACHES.get(alias, {}).get('BACKEND', '')
    if not backend.startswith('django_redis'):
        return {'status': 'skipped', 'detail': f'{backend.rsplit(".", 1)[-1] or "no"} cache backend'}
    try:
        pong = get_redis_connection(alias).ping()
    except (RedisError, OSError) as e:
        logger.warning('Redis health check failed', error=str(e))
        return {'status': 'fail', 'error': str(e)}
    if not pong:
        logger.warning('Redis health check returned unexpected response')
        return {'status': 'fail', 'error': 'no PONG'}
    return {'status': 'ok'}


def _checkout_backlog():
    """Orders the reconciliation command should already have finished.

    Reported for visibility only; a backlog does not make the instance unready.
    """
    from apps.orders.models import INCOMPLETE_ORDER_STATUSES, Order

    cutoff = timezone.now() - timedelta(seconds=settings.CHECKOUT_RESUME_AFTER_SECONDS)
    try:
        stuck = Order.objects.filter(
            status__in=list(INCOMPLETE_ORDER_STATUSES), updated_at__lt=cutoff
        ).count()
    except DatabaseError as e:
        return {'status': 'unknown', 'error': str(e)}
    if stuck:
        logger.warning('Incomplete checkouts waiting for reconciliation', stuck_orders=stuck)
    return {'status': 'lagging' if stuck else 'ok', 'stuck_orders': stuck}


def live_health(request):
    """Liveness probe: process is up and can service requests."""
    return JsonResponse({'status': 'alive'})


def ready_health(request):
    """Readiness probe: row store and cache must answer; checkout backlog is informational."""
    checks = {
        'database': _db_check(),
        'cache': _cache_check(),
    }
    failing = [name for name, r in checks.items() if r.get('status') == 'fail']
    if 'database' not in failing:
        checks['checkouts'] = _checkout_backlog()

    overall_status = 'ok' if not failing else 'degraded'
    logger.info('Readiness probe evaluated', status=overall_status, failing_components=failing)
    return JsonResponse(
        {'status': overall_status, 'checks': checks},
        status=200 if not failing else 503,
    )
