from django.urls import path
from . import views

transactions_monthly = views.TransactionViewSet.as_view({'get': 'monthly'})
transactions_for_tenant = views.TransactionViewSet.as_view({'get': 'tenant'})
penalty_list = views.PenaltyViewSet.as_view({'get': 'list'})
penalty_create = views.PenaltyViewSet.as_view({'post': 'create'})
penalty_update = views.PenaltyViewSet.as_view({'put': 'update', 'patch': 'update'})
penalty_delete = views.PenaltyViewSet.as_view({'delete': 'destroy'})

urlpatterns = [
    path('transactions/getTransactions/monthly', transactions_monthly, name='transactions_monthly'),
    path('transactions/tenant/<int:tenant_id>', transactions_for_tenant, name='transactions_tenant'),
    path('admin/transactions/upsert', views.upsert_transaction, name='transaction_upsert'),
    path('admin/transactions/settle', views.settle_advance, name='transaction_settle'),

    path('penalties/get', penalty_list, name='penalty_list'),
    path('admin/penalties/create', penalty_create, name='penalty_create'),
    path('admin/penalties/update/<int:pk>', penalty_update, name='penalty_update'),
    path('admin/penalties/delete/<int:pk>', penalty_delete, name='penalty_delete'),
    path('admin/penalties/calculate', views.calculate_penalties, name='penalty_calculate'),

    path('receipts/<int:tenant_id>', views.receipt_detail, name='receipt_detail'),
    path('receipts/<int:tenant_id>/pdf', views.receipt_pdf, name='receipt_pdf'),
    path('admin/receipts/send-email', views.send_receipt_email, name='receipt_send_email'),
    path('admin/receipts/send-sms', views.send_receipt_sms, name='receipt_send_sms'),
]
