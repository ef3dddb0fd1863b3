"""
Audit Log URLs
"""

from rest_framework.routers import SimpleRouter
from audit import views

router = SimpleRouter(trailing_slash=False)
router.register(r'admin/audit/logs', views.AuditLogViewSet, basename='auditlog')

urlpatterns = router.urls
