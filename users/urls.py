from django.urls import path
from . import views

user_list = views.UserAdminViewSet.as_view({'get': 'list'})
user_create = views.UserAdminViewSet.as_view({'post': 'create'})
user_update = views.UserAdminViewSet.as_view({'put': 'update', 'patch': 'update'})
user_delete = views.UserAdminViewSet.as_view({'delete': 'destroy'})
user_suspend = views.UserAdminViewSet.as_view({'put': 'suspend'})
user_unsuspend = views.UserAdminViewSet.as_view({'put': 'unsuspend'})

urlpatterns = [
    path('auth/login', views.login_view, name='auth_login'),
    path('auth/refresh', views.refresh_view, name='auth_refresh'),
    path('auth/logout', views.logout_view, name='auth_logout'),
    path('auth/me', views.me_view, name='auth_me'),

    path('admin/users/fetchAll', user_list, name='user_list'),
    path('admin/users/create', user_create, name='user_create'),
    path('admin/users/update/<int:pk>', user_update, name='user_update'),
    path('admin/users/delete/<int:pk>', user_delete, name='user_delete'),
    path('admin/users/<int:pk>/suspend', user_suspend, name='user_suspend'),
    path('admin/users/<int:pk>/unsuspend', user_unsuspend, name='user_unsuspend'),
]
