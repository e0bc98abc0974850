# returns/urls.py

"""
RETURNS URLS

Register GRM / GVN routes under /api/returns/
"""

from django.urls import path

from returns.views import GrmReturnView, GvnDamageView, PendingReturnsView

urlpatterns = [
    path("grm/", GrmReturnView.as_view(), name="returns-grm"),
    path("gvn/", GvnDamageView.as_view(), name="returns-gvn"),
    path("pending/", PendingReturnsView.as_view(), name="returns-pending"),
]
