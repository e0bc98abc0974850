# backend/urls.py
"""
PROJECT URLS

All API routes live under /api/.

Modules (ENGINE_MODULES):
- /api/products/        catalog + derived stock ledger reads
- /api/purchases/       supplier invoice receipt (creates stock lots)
- /api/sales/           sale allocator (FEFO)
- /api/returns/         GRM (expiry) / GVN (damage) processing
- /api/reconciliation/  credit notes + ROS settlement receipts

Also:
- /api/health/          AllowAny, checks DB connectivity
- /api/auth/jwt/...     SimpleJWT token pair
- ADMIN_PATH            Django admin (env configurable)
"""

from __future__ import annotations

from django.conf import settings
from django.contrib import admin
from django.db import connections
from django.db.utils import OperationalError
from django.urls import include, path
from django.views.generic import RedirectView
from drf_spectacular.utils import extend_schema
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

# (prefix, urlconf)
ENGINE_MODULES = (
    ("products", "products.urls"),
    ("purchases", "purchases.api.urls"),
    ("sales", "sales.api.urls"),
    ("returns", "returns.urls"),
    ("reconciliation", "reconciliation.urls"),
)


@extend_schema(responses={200: {"type": "object"}})
@api_view(["GET"])
@permission_classes([AllowAny])
def api_root(request):
    return Response(
        {
            "message": "Bakery Backend API is running",
            "auth": {
                "jwt_create": "/api/auth/jwt/create/",
                "jwt_refresh": "/api/auth/jwt/refresh/",
            },
            "docs": {"swagger": "/api/docs/", "schema": "/api/schema/"},
            "modules": {name: f"/api/{name}/" for name, _ in ENGINE_MODULES},
        }
    )


@extend_schema(responses={200: {"type": "object"}, 503: {"type": "object"}})
@api_view(["GET"])
@permission_classes([AllowAny])
def health_check(request):
    """Liveness plus a `SELECT 1` against the default database."""
    try:
        with connections["default"].cursor() as cursor:
            cursor.execute("SELECT 1;")
            cursor.fetchone()
    except OperationalError as e:
        return Response({"status": "degraded", "db": "down", "error": str(e)}, status=503)
    return Response({"status": "ok", "db": "ok"})


ADMIN_PATH = settings.ADMIN_PATH if settings.ADMIN_PATH.endswith("/") else f"{settings.ADMIN_PATH}/"

api_urlpatterns = [
    path("", api_root, name="api-root"),
    path("health/", health_check, name="health-check"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("auth/jwt/create/", TokenObtainPairView.as_view(), name="jwt-create"),
    path("auth/jwt/refresh/", TokenRefreshView.as_view(), name="jwt-refresh"),
] + [path(f"{name}/", include(urlconf)) for name, urlconf in ENGINE_MODULES]

urlpatterns = [
    path(ADMIN_PATH, admin.site.urls),
    path("", RedirectView.as_view(url="/api/docs/", permanent=False), name="root"),
    path("api/", include(api_urlpatterns)),
]
