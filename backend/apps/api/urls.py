from django.urls import include, path

# Each app owns its route table; patterns accept an optional trailing slash.
urlpatterns = [
    path("auth/", include("apps.auth.urls")),
    path("", include("apps.catalog.urls")),
    path("", include("apps.carts.urls")),
    path("", include("apps.orders.urls")),
]
