# returns/views/__init__.py

from .returns import GrmReturnView, GvnDamageView, PendingReturnsView

__all__ = [
    "GrmReturnView",
    "GvnDamageView",
    "PendingReturnsView",
]
