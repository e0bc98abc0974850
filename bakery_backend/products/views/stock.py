# products/views/stock.py

"""
======================================================
PATH: products/views/stock.py
======================================================
STOCK LEDGER ENDPOINTS (READ-ONLY)

- GET /api/products/stock/available/   lots with stock in FEFO order
      ?date=YYYY-MM-DD&product_id=&expired=true
- GET /api/products/stock/aggregated/  per-product totals (unexpired)
      ?date=YYYY-MM-DD

Both read the same derived-sum query the writers use.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from products.serializers import (
    AggregatedStockSerializer,
    BatchAvailabilitySerializer,
    StockQuerySerializer,
)
from products.services.catalog import get_product
from products.services.exceptions import InventoryError
from products.services.ledger import aggregated_stock, available_batches, expired_batches
from products.views.errors import domain_error_response


class AvailableStockView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        parameters=[
            OpenApiParameter("date", str, description="Reference date (YYYY-MM-DD)"),
            OpenApiParameter("product_id", int),
            OpenApiParameter("expired", bool, description="Only expired lots still holding stock"),
        ],
        responses={200: BatchAvailabilitySerializer(many=True)},
        description="Lots with available stock, ordered FEFO",
    )
    def get(self, request):
        query = StockQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data

        try:
            product = get_product(params["product_id"]) if params.get("product_id") else None
        except InventoryError as exc:
            return domain_error_response(exc)

        if params.get("expired"):
            entries = expired_batches(reference_date=params.get("date"), product=product)
        else:
            entries = available_batches(product=product, reference_date=params.get("date"))

        return Response(BatchAvailabilitySerializer(entries, many=True).data)


class AggregatedStockView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        parameters=[OpenApiParameter("date", str, description="Reference date (YYYY-MM-DD)")],
        responses={200: AggregatedStockSerializer(many=True)},
        description="Unexpired available stock summed per product",
    )
    def get(self, request):
        query = StockQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        rows = aggregated_stock(reference_date=query.validated_data.get("date"))
        return Response(AggregatedStockSerializer(rows, many=True).data)
