"""
Base service classes.
Services contain business logic; views only parse input and shape output.
"""
import logging

logger = logging.getLogger(__name__)


class BaseService:
    """
    Base service class providing common functionality.
    """

    def __init__(self, user=None, request=None):
        self.user = user
        self.request = request
        self.logger = logging.getLogger(self.__class__.__name__)

    def audit(self, action, resource_type, resource_id, description, **metadata):
        """Record the action in the audit log under the acting user (or System)"""
        from audit.helpers import log_action
        return log_action(self.user, action, resource_type, resource_id, description,
                          request=self.request, metadata=metadata)

    def log_info(self, message: str, **context):
        """Log info message with context"""
        self.logger.info(f"{message} | Context: {context}")

    def log_error(self, message: str, error: Exception = None, **context):
        """Log error message with context"""
        if error:
            self.logger.error(f"{message} | Context: {context}", exc_info=error)
        else:
            self.logger.error(f"{message} | Context: {context}")
