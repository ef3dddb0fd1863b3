"""
Logging configuration with request ID support
"""
import logging
import threading
import uuid

_thread_local = threading.local()


def get_request_id():
    return getattr(_thread_local, 'request_id', None)


class RequestIDFilter(logging.Filter):
    """
    Logging filter to add request ID to log records
    """
    def filter(self, record):
        request_id = getattr(record, 'request_id', None) or get_request_id()
        record.request_id = request_id or 'N/A'
        return True


class RequestIDMiddleware:
    """
    Middleware to generate and attach unique request ID to each request.
    Request ID is available in request.request_id and in all log messages.
    An incoming X-Request-ID header is reused so calls can be traced across services.
    """

    header = 'X-Request-ID'

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request_id = request.headers.get(self.header) or str(uuid.uuid4())[:8]
        request.request_id = request_id[:64]
        _thread_local.request_id = request.request_id

        try:
            response = self.get_response(request)
            response[self.header] = request.request_id
            return response
        finally:
            try:
                del _thread_local.request_id
            except AttributeError:
                pass

    def process_exception(self, request, exception):
        """Log exceptions with request ID"""
        request_id = getattr(request, 'request_id', 'N/A')
        logger = logging.getLogger('django.request')
        logger.error(
            f"[{request_id}] Exception: {type(exception).__name__}: {str(exception)}",
            exc_info=True,
            extra={'request_id': request_id}
        )
