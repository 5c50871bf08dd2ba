from django.urls import re_path
from .views import OrderListView, OrderResourceView

urlpatterns = [
    re_path(r"^orders/?$", OrderListView.as_view(), name="api-orders-list"),
    re_path(
        r"^orders/(?P<resource_id>\d+)/?$",
        OrderResourceView.as_view(),
        name="api-orders-resource",
    ),
]
