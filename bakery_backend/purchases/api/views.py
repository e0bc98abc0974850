# purchases/api/views.py

from django.core.exceptions import ValidationError
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView, RetrieveAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from products.services.exceptions import InventoryError
from products.views.errors import domain_error_response, validation_error_response
from purchases.api.serializers import (
    InvoiceMonthQuerySerializer,
    InvoiceSerializer,
    ParsedInvoiceSerializer,
)
from purchases.models import Invoice
from purchases.services.receiving_service import invoices_for_month, receive_invoice


class InvoiceListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["purchases"],
        parameters=[OpenApiParameter("month", str, description="YYYY-MM")],
        responses=InvoiceSerializer(many=True),
    )
    def get(self, request):
        query = InvoiceMonthQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        month = query.validated_data.get("month")
        if month:
            year, mon = (int(p) for p in month.split("-"))
            qs = invoices_for_month(year, mon)
        else:
            qs = Invoice.objects.prefetch_related("items").order_by("-invoice_date", "-id")

        return Response(InvoiceSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["purchases"],
        request=ParsedInvoiceSerializer,
        responses={201: InvoiceSerializer},
        description="Receive a parsed supplier invoice: creates lots + refreshes catalog prices",
    )
    def post(self, request):
        s = ParsedInvoiceSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            invoice = receive_invoice(
                s.to_document(),
                source_file=s.validated_data["source_file"],
                user=request.user,
            )
        except ValidationError as exc:
            return validation_error_response(exc)
        except InventoryError as exc:
            return domain_error_response(exc)

        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)


class InvoiceDetailView(RetrieveAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = InvoiceSerializer
    queryset = Invoice.objects.prefetch_related("items")

    @extend_schema(tags=["purchases"])
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)
