# products/views/errors.py

"""
DOMAIN ERROR -> HTTP RESPONSE

Shared by every engine view so status codes stay consistent:
- django ValidationError          -> 400
- NotFoundError                   -> 404
- InsufficientStockError (+ FEFO) -> 409 (with lot context)
- ConflictError                   -> 409
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from rest_framework import status
from rest_framework.response import Response

from products.services.exceptions import (
    ConflictError,
    InsufficientStockError,
    InventoryError,
    NotFoundError,
)


def validation_error_response(exc: ValidationError) -> Response:
    if hasattr(exc, "message_dict"):
        detail = exc.message_dict
    else:
        detail = exc.messages[0] if len(exc.messages) == 1 else exc.messages
    return Response({"detail": detail}, status=status.HTTP_400_BAD_REQUEST)


def domain_error_response(exc: InventoryError) -> Response:
    if isinstance(exc, NotFoundError):
        return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)

    if isinstance(exc, InsufficientStockError):
        return Response(
            {
                "detail": str(exc),
                "product_id": exc.product_id,
                "batch_id": exc.batch_id,
                "requested": exc.requested,
                "available": exc.available,
            },
            status=status.HTTP_409_CONFLICT,
        )

    if isinstance(exc, ConflictError):
        return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)

    return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
