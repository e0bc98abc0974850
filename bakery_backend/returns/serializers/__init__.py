# returns/serializers/__init__.py

from .returns import (
    PendingReturnGroupSerializer,
    ProcessReturnsInputSerializer,
    ReturnCandidateSerializer,
    ReturnLineInputSerializer,
    ReturnSerializer,
    ReturnSummarySerializer,
)

__all__ = [
    "PendingReturnGroupSerializer",
    "ProcessReturnsInputSerializer",
    "ReturnCandidateSerializer",
    "ReturnLineInputSerializer",
    "ReturnSerializer",
    "ReturnSummarySerializer",
]
