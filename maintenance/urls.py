from rest_framework.routers import SimpleRouter
from . import views

router = SimpleRouter(trailing_slash=False)
router.register(r'admin/maintenance', views.MaintenanceAdminViewSet, basename='admin-maintenance')
router.register(r'maintenance', views.MaintenanceViewSet, basename='maintenance')

urlpatterns = router.urls
