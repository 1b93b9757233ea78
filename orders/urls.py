from django.urls import path
from . import views

app_name = 'orders'


urlpatterns = [
    path('pos/', views.pos_data, name='pos-data'),
    path('checkout/', views.CheckoutView.as_view(), name='order-checkout'),

    path('<int:pk>/', views.OrderDetailView.as_view(), name='order-detail'),
    path('<int:pk>/items/', views.edit_order, name='order-edit'),
    path('<int:pk>/void/', views.void_order, name='order-void'),
    path('<int:pk>/purge/', views.purge_order, name='order-purge'),

    path('<int:pk>/receipt/', views.get_receipt, name='order-receipt'),
    path('<int:pk>/receipt/pdf/', views.get_receipt_pdf, name='order-receipt-pdf'),
]
