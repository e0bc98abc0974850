# reconciliation/views/credit_notes.py

"""
======================================================
PATH: reconciliation/views/credit_notes.py
======================================================
CREDIT NOTE ENDPOINTS

- GET  /api/reconciliation/credit-notes/?month=           notes dated in month
- POST /api/reconciliation/credit-notes/                  store parsed notes + reconcile
- POST /api/reconciliation/credit-notes/reconcile/        re-run reconciliation
- GET  /api/reconciliation/credit-notes/missing/?month=   CN bills with no credit note
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from products.services.exceptions import InventoryError, NotFoundError
from products.views.errors import domain_error_response, validation_error_response
from reconciliation.documents import ParsedCreditNoteItem
from reconciliation.models import CreditNote
from reconciliation.serializers import (
    CreditNoteSerializer,
    CreditNoteUploadSerializer,
    IntakeResultSerializer,
    MissingDocumentSerializer,
    MonthQuerySerializer,
    ReconcileInputSerializer,
    ReconciliationResultSerializer,
)
from reconciliation.services import (
    credit_notes_missing_from_system,
    list_credit_notes,
    reconcile_credit_note,
    store_credit_notes,
)


class CreditNoteListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["reconciliation"],
        parameters=[OpenApiParameter("month", str, required=True, description="YYYY-MM")],
        responses=CreditNoteSerializer(many=True),
    )
    def get(self, request):
        query = MonthQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        notes = list_credit_notes(query.validated_data["month"])
        return Response(CreditNoteSerializer(notes, many=True).data)

    @extend_schema(
        tags=["reconciliation"],
        request=CreditNoteUploadSerializer,
        responses={201: IntakeResultSerializer},
        description="Store parsed credit notes, clear them against receipts and reconcile returns",
    )
    def post(self, request):
        s = CreditNoteUploadSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            result = store_credit_notes(s.to_documents(), source_file=s.validated_data["source_file"])
        except ValidationError as exc:
            return validation_error_response(exc)
        except InventoryError as exc:
            return domain_error_response(exc)

        # Nothing stored and only conflicts: the whole upload was a duplicate.
        code = status.HTTP_201_CREATED if result.stored else status.HTTP_200_OK
        return Response(IntakeResultSerializer(result).data, status=code)


class CreditNoteReconcileView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["reconciliation"],
        request=ReconcileInputSerializer,
        responses=ReconciliationResultSerializer,
        description="Reconcile a stored credit note (or explicit lines) against pending returns",
    )
    def post(self, request):
        s = ReconcileInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            if data.get("credit_note_id") is not None:
                note = CreditNote.objects.filter(pk=data["credit_note_id"]).first()
                if note is None:
                    raise NotFoundError(f"Credit note {data['credit_note_id']} not found")
                lines = note.parsed_items()
                number = note.credit_note_number
            else:
                lines = [ParsedCreditNoteItem(**item) for item in data["items"]]
                number = ""

            result = reconcile_credit_note(
                lines,
                date_from=data.get("date_from"),
                date_to=data.get("date_to"),
                credit_note_number=number,
            )
        except ValidationError as exc:
            return validation_error_response(exc)
        except InventoryError as exc:
            return domain_error_response(exc)

        return Response(ReconciliationResultSerializer(result).data)


class MissingCreditNotesView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["reconciliation"],
        parameters=[OpenApiParameter("month", str, required=True, description="YYYY-MM")],
        responses=MissingDocumentSerializer(many=True),
    )
    def get(self, request):
        query = MonthQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        missing = credit_notes_missing_from_system(query.validated_data["month"])
        return Response(MissingDocumentSerializer(missing, many=True).data)
