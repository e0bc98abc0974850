# products/urls.py

"""
PRODUCTS URLS

Purpose:
- Register catalog + stock ledger routes under /api/products/
    /api/products/catalog/                     product list / detail
    /api/products/catalog/{id}/shelf-life/     policy change
    /api/products/decorations/                 decoration counters (create / update)
    /api/products/decorations/{id}/restock/    add counter stock
    /api/products/stock/available/             FEFO lots
    /api/products/stock/aggregated/            per-product totals
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from products.views import (
    AggregatedStockView,
    AvailableStockView,
    DecorationViewSet,
    ProductViewSet,
)

router = DefaultRouter()

router.register(r"catalog", ProductViewSet, basename="products")
router.register(r"decorations", DecorationViewSet, basename="decorations")

urlpatterns = [
    path("stock/available/", AvailableStockView.as_view(), name="stock-available"),
    path("stock/aggregated/", AggregatedStockView.as_view(), name="stock-aggregated"),
    path("", include(router.urls)),
]
