from django.urls import path
from . import views

app_name = 'dashboard'

urlpatterns = [
    path('', views.dashboard, name='dashboard'),

    # History and reports
    path('history/', views.OrderHistoryView.as_view(), name='order-history'),
    path('reports/transactions/', views.TransactionReportView.as_view(), name='transaction-report'),
    path('reports/transactions/export/', views.export_transactions, name='transaction-export'),
    path('reports/menu-analysis/', views.menu_analysis_report, name='menu-analysis'),
]
