# products/views/product.py

"""
PRODUCT CATALOG VIEWSET

Purpose:
- Read-only catalog browsing (products are created by invoice intake)
- Shelf-life policy change (reclassifies every existing lot)
- Soft deactivation (products are never deleted)
- Decoration counters: master data + restock
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from products.models import Decoration, Product
from products.serializers import (
    DecorationSerializer,
    ProductSerializer,
    RestockInputSerializer,
    ShelfLifeInputSerializer,
)
from products.services.catalog import restock_decoration, update_shelf_life
from products.views.errors import validation_error_response


class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["category", "is_active"]

    def get_queryset(self):
        return Product.objects.all().order_by("name")

    @extend_schema(request=ShelfLifeInputSerializer, responses={200: ProductSerializer})
    @action(detail=True, methods=["post"], url_path="shelf-life")
    def shelf_life(self, request, pk=None):
        product = self.get_object()

        serializer = ShelfLifeInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            product = update_shelf_life(product, serializer.validated_data["shelf_life_days"])
        except ValidationError as exc:
            return validation_error_response(exc)

        return Response(ProductSerializer(product).data)

    @extend_schema(request=None, responses={200: ProductSerializer})
    @action(detail=True, methods=["post"])
    def deactivate(self, request, pk=None):
        product = self.get_object()
        product.deactivate()
        return Response(ProductSerializer(product).data)


class DecorationViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """
    Decoration counters: list / retrieve / create / update + restock.
    No delete; deactivate with is_active=false.
    """

    serializer_class = DecorationSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["category", "is_active"]

    def get_queryset(self):
        return Decoration.objects.all().order_by("name")

    @extend_schema(request=RestockInputSerializer, responses={200: DecorationSerializer})
    @action(detail=True, methods=["post"])
    def restock(self, request, pk=None):
        decoration = self.get_object()

        serializer = RestockInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            decoration = restock_decoration(decoration, serializer.validated_data["quantity"])
        except ValidationError as exc:
            return validation_error_response(exc)

        return Response(DecorationSerializer(decoration).data)
