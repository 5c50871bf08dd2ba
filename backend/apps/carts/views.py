from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.api.permissions import is_privileged
from apps.api.schemas import MessageResponseSerializer, error_responses
from apps.api.utils import message_response, path_id
from apps.common import get_logger
from .container import build_cart_service
from .serializers import (
    CartItemReadSerializer,
    CartItemWriteSerializer,
    CartReadSerializer,
)

logger = get_logger(__name__).bind(component="carts", layer="view")

CART_ID_PARAM = OpenApiParameter("cart_id", int, OpenApiParameter.PATH)


@extend_schema(tags=["Carts"])
class CartListView(APIView):
    permission_classes = [IsAuthenticated]
    service = build_cart_service()
    log = logger.bind(view="CartListView")

    @extend_schema(
        summary="Create cart",
        description="Creates an empty open cart owned by the authenticated user.",
        request=None,
        responses={
            201: CartReadSerializer,
            **error_responses(401),
        },
    )
    def post(self, request):
        dto, _ = self.service.create_cart(request.user.id)
        self.log.info("Cart created via API", cart_id=dto.id, user_id=request.user.id)
        return Response(CartReadSerializer(dto).data, status=status.HTTP_201_CREATED)


@extend_schema(tags=["Carts"])
class CartDetailView(APIView):
    permission_classes = [IsAuthenticated]
    service = build_cart_service()
    log = logger.bind(view="CartDetailView")

    @extend_schema(
        summary="Get cart",
        parameters=[CART_ID_PARAM],
        responses={
            200: CartReadSerializer,
            **error_responses(403, 404),
        },
    )
    def get(self, request, cart_id):
        dto, error = self.service.get_cart(
            path_id(cart_id), request.user.id, is_privileged(request.user)
        )
        if error:
            return error.to_response()
        return Response(CartReadSerializer(dto).data)

    @extend_schema(
        summary="Delete cart",
        description="Deletes the cart and its lines. Orders already placed from it are kept.",
        parameters=[CART_ID_PARAM],
        responses={
            200: MessageResponseSerializer,
            **error_responses(403, 404, 409),
        },
    )
    def delete(self, request, cart_id):
        self.log.info("Deleting cart via API", cart_id=cart_id, actor_id=request.user.id)
        _deleted, error = self.service.delete_cart(
            path_id(cart_id), request.user.id, is_privileged(request.user)
        )
        if error:
            return error.to_response()
        return message_response("Cart deleted successfully")


@extend_schema(tags=["Carts"])
class CartItemListView(APIView):
    permission_classes = [IsAuthenticated]
    service = build_cart_service()
    log = logger.bind(view="CartItemListView")

    @extend_schema(
        summary="Add product to cart",
        description=(
            "Adds the quantity to the cart line for the product, creating the line when "
            "missing. The product must exist and the cart must be open."
        ),
        parameters=[CART_ID_PARAM],
        request=CartItemWriteSerializer,
        responses={
            201: CartItemReadSerializer,
            **error_responses(400, 403, 404, 409),
        },
    )
    def post(self, request, cart_id):
        serializer = CartItemWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto, error = self.service.add_item(
            path_id(cart_id),
            request.user.id,
            serializer.validated_data["product_id"],
            serializer.validated_data["quantity"],
            is_privileged=is_privileged(request.user),
        )
        if error:
            return error.to_response()
        return Response(CartItemReadSerializer(dto).data, status=status.HTTP_201_CREATED)


@extend_schema(tags=["Carts"])
class CartItemDetailView(APIView):
    permission_classes = [IsAuthenticated]
    service = build_cart_service()
    log = logger.bind(view="CartItemDetailView")

    @extend_schema(
        summary="Remove product from cart",
        parameters=[CART_ID_PARAM, OpenApiParameter("product_id", int, OpenApiParameter.PATH)],
        responses={
            200: MessageResponseSerializer,
            **error_responses(403, 404, 409),
        },
    )
    def delete(self, request, cart_id, product_id):
        _removed, error = self.service.remove_item(
            path_id(cart_id),
            request.user.id,
            path_id(product_id),
            is_privileged=is_privileged(request.user),
        )
        if error:
            return error.to_response()
        return message_response("Product removed from cart")
