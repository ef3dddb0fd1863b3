from django.urls import path
from . import views

tenant_list = views.TenantViewSet.as_view({'get': 'list'})
tenant_detail = views.TenantViewSet.as_view({'get': 'retrieve'})
tenant_history = views.TenantViewSet.as_view({'get': 'monthly_records'})
all_monthly_records = views.TenantViewSet.as_view({'get': 'all_monthly_records'})
tenant_create = views.TenantViewSet.as_view({'post': 'create'})
tenant_update = views.TenantViewSet.as_view({'put': 'update', 'patch': 'update'})
tenant_delete = views.TenantViewSet.as_view({'delete': 'destroy'})

urlpatterns = [
    path('tenants/getTenants', tenant_list, name='tenant_list'),
    path('tenants/getAllMonthlyRecords', all_monthly_records, name='tenant_all_monthly_records'),
    path('tenants/<int:pk>', tenant_detail, name='tenant_detail'),
    path('tenants/<int:pk>/monthly-records', tenant_history, name='tenant_monthly_records'),
    path('admin/tenants/addNewTenant', tenant_create, name='tenant_create'),
    path('admin/tenants/updateTenant/<int:pk>', tenant_update, name='tenant_update'),
    path('admin/tenants/deleteTenant/<int:pk>', tenant_delete, name='tenant_delete'),
]
