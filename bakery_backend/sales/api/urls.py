# sales/api/urls.py

"""
SALES API URLS (CANONICAL)

Provides:
- POST /api/sales/          record a sale
- GET  /api/sales/          sales history (?sale_date=&payment_type=)
- GET  /api/sales/<id>/     one sale with its allocation rows
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from sales.api.viewsets.sale import SaleViewSet

router = DefaultRouter()
router.register(r"", SaleViewSet, basename="sales")

urlpatterns = [
    path("", include(router.urls)),
]
