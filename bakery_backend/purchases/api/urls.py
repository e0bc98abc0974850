# purchases/api/urls.py

from django.urls import path

from purchases.api.views import InvoiceDetailView, InvoiceListCreateView

urlpatterns = [
    path("invoices/", InvoiceListCreateView.as_view(), name="purchase-invoices"),
    path("invoices/<int:pk>/", InvoiceDetailView.as_view(), name="purchase-invoice-detail"),
]
