# returns/views/returns.py

"""
======================================================
PATH: returns/views/returns.py
======================================================
RETURN / DAMAGE ENDPOINTS

- GET  /api/returns/grm/?date=      expiring lots + GRM rows already processed
- POST /api/returns/grm/            process GRM returns (atomic)
- GET  /api/returns/gvn/?date=      lots received that day + GVN rows processed
- POST /api/returns/gvn/            process GVN damages (atomic)
- GET  /api/returns/pending/?month= pending rows grouped by product + date
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import serializers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from products.services.exceptions import InventoryError
from products.views.errors import domain_error_response, validation_error_response
from returns.models import Return
from returns.serializers import (
    PendingReturnGroupSerializer,
    ProcessReturnsInputSerializer,
    ReturnCandidateSerializer,
    ReturnSerializer,
    ReturnSummarySerializer,
)
from returns.services.return_service import (
    list_grm_candidates,
    list_gvn_candidates,
    pending_returns,
    process_grm_return,
    process_gvn_damage,
    processed_returns,
)


class _DateQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)


class _ReturnDayView(APIView):
    """
    Shared GET/POST for one return type.

    Subclasses set return_type, list_candidates and process.
    """

    permission_classes = [IsAuthenticated]
    return_type = None

    def list_candidates(self, on_date):
        raise NotImplementedError

    def process(self, on_date, items, user):
        raise NotImplementedError

    def get(self, request):
        query = _DateQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        on_date = query.validated_data.get("date") or timezone.localdate()

        return Response(
            {
                "date": on_date,
                "candidates": ReturnCandidateSerializer(self.list_candidates(on_date), many=True).data,
                "processed": ReturnSerializer(processed_returns(self.return_type, on_date), many=True).data,
            }
        )

    def post(self, request):
        serializer = ProcessReturnsInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            summary = self.process(
                data["date"],
                [dict(item) for item in data["items"]],
                request.user,
            )
        except ValidationError as exc:
            return validation_error_response(exc)
        except InventoryError as exc:
            return domain_error_response(exc)

        return Response(ReturnSummarySerializer(summary).data, status=status.HTTP_201_CREATED)


class GrmReturnView(_ReturnDayView):
    return_type = Return.TYPE_GRM

    def list_candidates(self, on_date):
        return list_grm_candidates(on_date)

    def process(self, on_date, items, user):
        return process_grm_return(return_date=on_date, items=items, user=user)

    @extend_schema(parameters=[OpenApiParameter("date", str)], description="GRM candidates for a date")
    def get(self, request):
        return super().get(request)

    @extend_schema(
        request=ProcessReturnsInputSerializer,
        responses={201: ReturnSummarySerializer},
        description="Process GRM (expiry) returns atomically",
    )
    def post(self, request):
        return super().post(request)


class GvnDamageView(_ReturnDayView):
    return_type = Return.TYPE_GVN

    def list_candidates(self, on_date):
        return list_gvn_candidates(on_date)

    def process(self, on_date, items, user):
        return process_gvn_damage(damage_date=on_date, items=items, user=user)

    @extend_schema(parameters=[OpenApiParameter("date", str)], description="GVN candidates for a date")
    def get(self, request):
        return super().get(request)

    @extend_schema(
        request=ProcessReturnsInputSerializer,
        responses={201: ReturnSummarySerializer},
        description="Process GVN (damage) write-offs atomically",
    )
    def post(self, request):
        return super().post(request)


class PendingReturnsView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        parameters=[OpenApiParameter("month", str, required=True, description="YYYY-MM")],
        description="Returns still awaiting credit, grouped by product + date",
    )
    def get(self, request):
        try:
            groups = pending_returns(request.query_params.get("month", ""))
        except ValidationError as exc:
            return validation_error_response(exc)

        return Response(
            {
                "grm": PendingReturnGroupSerializer(groups[Return.TYPE_GRM], many=True).data,
                "gvn": PendingReturnGroupSerializer(groups[Return.TYPE_GVN], many=True).data,
            }
        )
