"""
Writing audit entries.

Every admin mutation calls log_action with the acting user; the client IP
and the request ID are taken from the request when one is given.
"""
import logging

from django.db import DatabaseError, transaction

from audit.models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """First address in X-Forwarded-For, else REMOTE_ADDR"""
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def log_action(user, action, resource_type, resource_id, description, request=None, metadata=None):
    """
    Record one audit entry and return it.

        log_action(request.user, AuditLog.ACTION_PAYMENT, AuditLog.RESOURCE_RECORD, record.id,
                   f"Payment of {total} for {tenant.name}", request=request, metadata={'reference': ref})

    Returns None when the entry could not be written; the audited change
    still goes through.
    """
    if user is not None and not user.is_authenticated:
        user = None

    metadata = dict(metadata or {})
    ip_address = None
    if request is not None:
        ip_address = get_client_ip(request)
        if getattr(request, 'request_id', None):
            metadata.setdefault('request_id', request.request_id)

    try:
        # Savepoint so a failed insert leaves the caller's transaction usable
        with transaction.atomic():
            entry = AuditLog.objects.create(
                user=user,
                action=action,
                resource_type=resource_type,
                resource_id=resource_id,
                description=description,
                ip_address=ip_address,
                metadata=metadata,
            )
    except DatabaseError as e:
        logger.error(f"Audit entry not saved ({action} {resource_type} #{resource_id}): {e}", exc_info=True)
        return None

    logger.info(f"Audit: {user.username if user else 'system'} {action} {resource_type} #{resource_id}")
    return entry
