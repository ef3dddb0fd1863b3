from django.urls import path
from . import views

urlpatterns = [
    path('settings/general', views.general_settings, name='general_settings'),
    path('admin/settings/general', views.update_general_settings, name='update_general_settings'),
]
