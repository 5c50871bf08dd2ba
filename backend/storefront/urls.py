from django.contrib import admin
from django.urls import include, path, re_path
from apps.common.views import live_health, ready_health
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularSwaggerView,
    SpectacularRedocView,
)

urlpatterns = [
    path("admin/", admin.site.urls),
    re_path(r"^health/live/?$", live_health, name="health-live"),
    re_path(r"^health/ready/?$", ready_health, name="health-ready"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path(
        "docs/swagger/",
        SpectacularSwaggerView.as_view(url_name="schema"),
        name="swagger-ui",
    ),
    path(
        "docs/redoc/",
        SpectacularRedocView.as_view(url_name="schema"),
        name="redoc",
    ),
    # Public API paths (/auth/login, /products, /carts/<id>, /orders/<cartId>) live at the root.
    path("", include("apps.api.urls")),
]
