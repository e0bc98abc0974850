# reconciliation/views/ros_receipts.py

"""
ROS RECEIPT ENDPOINTS

- GET  /api/reconciliation/ros-receipts/?month=          receipts + cleared items
- POST /api/reconciliation/ros-receipts/                 record + clear (idempotent)
- GET  /api/reconciliation/ros-receipts/missing/?month=  SR / CN bills unknown to the system
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from products.services.exceptions import InventoryError
from products.views.errors import domain_error_response, validation_error_response
from reconciliation.serializers import (
    MissingDocumentSerializer,
    MonthQuerySerializer,
    RosReceiptInputSerializer,
    RosReceiptSerializer,
)
from reconciliation.services import (
    credit_notes_missing_from_system,
    invoices_missing_from_system,
    list_ros_receipts,
    record_ros_receipt,
)


class RosReceiptListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["reconciliation"],
        parameters=[OpenApiParameter("month", str, required=True, description="YYYY-MM")],
        responses=RosReceiptSerializer(many=True),
    )
    def get(self, request):
        query = MonthQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        receipts = list_ros_receipts(query.validated_data["month"])
        return Response(RosReceiptSerializer(receipts, many=True).data)

    @extend_schema(
        tags=["reconciliation"],
        request=RosReceiptInputSerializer,
        responses={201: RosReceiptSerializer, 200: RosReceiptSerializer},
        description="Record a ROS receipt and clear the invoices / credit notes it settles",
    )
    def post(self, request):
        s = RosReceiptInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            outcome = record_ros_receipt(s.to_document(), source_file=s.validated_data["source_file"])
        except ValidationError as exc:
            return validation_error_response(exc)
        except InventoryError as exc:
            return domain_error_response(exc)

        outcome.receipt.refresh_from_db()
        payload = RosReceiptSerializer(outcome.receipt).data
        payload["skipped_bills"] = [bill.as_json() for bill in outcome.clearing.skipped]

        code = status.HTTP_201_CREATED if outcome.created else status.HTTP_200_OK
        return Response(payload, status=code)


class MissingDocumentsView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["reconciliation"],
        parameters=[OpenApiParameter("month", str, required=True, description="YYYY-MM")],
        description="Receipt bills whose invoice / credit note was never uploaded",
    )
    def get(self, request):
        query = MonthQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        month = query.validated_data["month"]

        return Response(
            {
                "invoices": MissingDocumentSerializer(invoices_missing_from_system(month), many=True).data,
                "credit_notes": MissingDocumentSerializer(credit_notes_missing_from_system(month), many=True).data,
            }
        )
