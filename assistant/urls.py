from django.urls import path
from . import views

urlpatterns = [
    path('ai/query', views.query_view, name='ai_query'),
    path('ai/clear', views.clear_view, name='ai_clear'),
]
