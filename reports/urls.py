from django.urls import path
from . import views

urlpatterns = [
    path('reports/<slug:name>', views.report_view, name='report'),
    path('reports/<slug:name>/pdf', views.report_pdf, name='report_pdf'),
    path('reports/<slug:name>/csv', views.report_csv, name='report_csv'),
]
