from django.urls import path
from rest_framework.routers import SimpleRouter
from . import views

router = SimpleRouter(trailing_slash=False)
# units/staff before the building routes so "units" is never read as a building id
router.register(r'admin/buildings/units', views.UnitAdminViewSet, basename='admin-unit')
router.register(r'admin/buildings/staff', views.StaffAdminViewSet, basename='admin-staff')
router.register(r'admin/buildings', views.BuildingAdminViewSet, basename='admin-building')
router.register(r'admin/settings/building-unit-types', views.BuildingUnitTypeAdminViewSet,
                basename='admin-building-unit-type')
router.register(r'buildings', views.BuildingViewSet, basename='building')

urlpatterns = [
    path('buildings/full', views.BuildingViewSet.as_view({'get': 'list'}), name='building_full'),
    path('settings/buildings-with-unit-types',
         views.BuildingViewSet.as_view({'get': 'with_unit_types'}), name='buildings_with_unit_types'),
] + router.urls
