# sales/api/viewsets/sale.py

"""
======================================================
PATH: sales/api/viewsets/sale.py
======================================================
SALE VIEWSET (STAFF)

Purpose:
- Record a sale (FEFO / pinned lot allocation + decoration counters).
- Sales history: list + retrieve, filterable by sale_date / payment_type.

Rules:
- Backend authoritative for totals & stock.
- Sales are immutable: no update / delete routes.
======================================================
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from products.services.exceptions import InventoryError
from products.views.errors import domain_error_response, validation_error_response
from sales.models import Sale
from sales.serializers import RecordSaleInputSerializer, SaleSerializer
from sales.services.sale_service import record_sale


class SaleViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = SaleSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["sale_date", "payment_type"]

    def get_queryset(self):
        return (
            Sale.objects.all()
            .select_related("staff")
            .prefetch_related("items")
            .order_by("-sale_date", "-id")
        )

    @extend_schema(
        request=RecordSaleInputSerializer,
        responses={201: SaleSerializer},
        description="Record a sale atomically (FEFO allocation unless a lot is pinned)",
    )
    def create(self, request):
        serializer = RecordSaleInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            sale = record_sale(
                sale_date=data["sale_date"],
                payment_type=data["payment_type"],
                items=[dict(item) for item in data["items"]],
                user=request.user,
            )
        except ValidationError as exc:
            return validation_error_response(exc)
        except InventoryError as exc:
            return domain_error_response(exc)

        return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)
