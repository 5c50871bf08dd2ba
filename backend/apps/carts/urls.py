from django.urls import re_path
from .views import CartListView, CartDetailView, CartItemListView, CartItemDetailView

urlpatterns = [
    re_path(r"^carts/?$", CartListView.as_view(), name="api-carts-list"),
    re_path(r"^carts/(?P<cart_id>\d+)/?$", CartDetailView.as_view(), name="api-carts-detail"),
    re_path(
        r"^carts/(?P<cart_id>\d+)/products/?$",
        CartItemListView.as_view(),
        name="api-cart-items",
    ),
    re_path(
        r"^carts/(?P<cart_id>\d+)/products/(?P<product_id>\d+)/?$",
        CartItemDetailView.as_view(),
        name="api-cart-items-detail",
    ),
]
